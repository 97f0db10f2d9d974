"""Cálculo de hidrógenos implícitos según valencias comunes."""

from __future__ import annotations

from core.model import BondType, Graph
from .elements import get_element

# Elementos del grupo 13 que forman aniones tetraédricos (BH4-, AlH4-).
_TETRAHEDRAL_ANIONS = {"B", "Al", "Ga", "In"}
# Elementos del grupo 15 que forman cationes tetraédricos (NH4+, PH4+).
_TETRAHEDRAL_CATIONS = {"N", "P", "As"}


def valent_bond_count(graph: Graph, vertex_id: int) -> int:
    """Suma de órdenes de enlace (los aromáticos cuentan 1)."""
    return sum(edge.bond_type.order for edge in graph.incident_edges(vertex_id))


def is_aromatic(graph: Graph, vertex_id: int) -> bool:
    return any(edge.bond_type == BondType.AROMATIC for edge in graph.incident_edges(vertex_id))


def suggest_h_count(symbol: str, n_valent_bonds: int, charge: int) -> int:
    """Hidrógenos sugeridos para un elemento con enlaces y carga dados.

    Returns:
        Número de H (>= 0); 0 para símbolos desconocidos.
    """
    element = get_element(symbol)
    if element is None:
        return 0
    if symbol in _TETRAHEDRAL_ANIONS and charge == -1:
        return 4 - n_valent_bonds if n_valent_bonds <= 4 else 0
    if symbol in _TETRAHEDRAL_CATIONS and charge == 1:
        return 4 - n_valent_bonds if n_valent_bonds <= 4 else 0
    for valence in element.valences:
        if valence >= n_valent_bonds + abs(charge):
            return valence - n_valent_bonds - abs(charge)
    return 0


def implicit_h_count(graph: Graph, vertex_id: int) -> int:
    """Calcula los hidrógenos de un vértice.

    Args:
        graph: Grafo molecular.
        vertex_id: Identificador del vértice a evaluar.

    Returns:
        El valor explícito (`h_count`) si existe; si no, el inferido por
        valencia (>= 0).

    Side Effects:
        No tiene efectos laterales.
    """
    vertex = graph.vertex(vertex_id)
    if vertex.h_count is not None:
        return vertex.h_count
    hydrogens = suggest_h_count(vertex.symbol, valent_bond_count(graph, vertex_id), vertex.charge)
    if hydrogens and is_aromatic(graph, vertex_id):
        # Un electrón del átomo aromático participa en el sistema pi.
        hydrogens -= 1
    return hydrogens
