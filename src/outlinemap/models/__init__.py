"""Pydantic data models for Outlinemap."""
