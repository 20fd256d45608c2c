"""Interaction controller for the graph view."""

from outlinemap.interaction.controller import InteractionController

__all__ = ["InteractionController"]
