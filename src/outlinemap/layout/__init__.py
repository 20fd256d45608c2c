"""Graph layout engine: flatten a heading tree and lay it out with forces."""

from outlinemap.layout.graph import GraphLink, GraphNode, flatten
from outlinemap.layout.simulation import ForceSimulation
from outlinemap.layout.viewport import Viewport

__all__ = [
    "GraphLink",
    "GraphNode",
    "flatten",
    "ForceSimulation",
    "Viewport",
]
