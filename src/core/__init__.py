"""API pública del núcleo de molsketch.

Reexpone las clases base del modelo químico para facilitar importaciones.
"""

from core.errors import (
    ActionError,
    ConversionError,
    DuplicateEdge,
    GraphError,
    InvalidReference,
    MalformedMolfile,
    MalformedSmiles,
    MolsketchError,
    UnknownFormat,
)
from core.model import BondType, Edge, Graph, Rect, StereoType, Vertex

__all__ = [
    "ActionError",
    "BondType",
    "ConversionError",
    "DuplicateEdge",
    "Edge",
    "Graph",
    "GraphError",
    "InvalidReference",
    "MalformedMolfile",
    "MalformedSmiles",
    "MolsketchError",
    "Rect",
    "StereoType",
    "UnknownFormat",
    "Vertex",
]
