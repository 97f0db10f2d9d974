"""Cálculo y formateo de fórmulas moleculares.

Este módulo agrega utilidades para contar elementos a partir de un grafo
molecular y formatear la fórmula siguiendo el orden de Hill.
"""

from __future__ import annotations

from typing import Dict

from core.model import Graph
from .elements import get_element
from .valence import implicit_h_count


def molecular_formula(graph: Graph) -> Dict[str, int]:
    """Calcula la fórmula molecular como diccionario de elemento -> conteo.

    Si alguna etiqueta no es un elemento (abreviatura sin desarrollar,
    grupo R), la composición no está definida y se devuelve `{}`.

    Args:
        graph: Grafo molecular.

    Returns:
        Diccionario con símbolos atómicos y sus cantidades totales.

    Side Effects:
        No tiene efectos laterales; solo calcula y devuelve datos.
    """
    counts: Dict[str, int] = {}
    if any(get_element(vertex.symbol) is None for vertex in graph.vertices()):
        return counts

    for vertex in graph.vertices():
        element = vertex.symbol
        counts[element] = counts.get(element, 0) + 1
        hydrogens = implicit_h_count(graph, vertex.id)
        if hydrogens:
            counts["H"] = counts.get("H", 0) + int(hydrogens)

    return {element: count for element, count in counts.items() if count > 0}


def format_formula(formula_dict: Dict[str, int]) -> str:
    """Formatea una fórmula usando el orden de Hill (C, H, luego alfabético).

    Args:
        formula_dict: Diccionario con símbolos de elementos y cantidades.

    Returns:
        Cadena con la fórmula formateada (p. ej., "C6H6O").

    Side Effects:
        No tiene efectos laterales.
    """
    if not formula_dict:
        return ""
    order = []
    if "C" in formula_dict:
        order.append("C")
    if "H" in formula_dict:
        order.append("H")
    for element in sorted(e for e in formula_dict.keys() if e not in {"C", "H"}):
        order.append(element)

    parts = []
    for element in order:
        count = formula_dict.get(element, 0)
        if count <= 0:
            continue
        parts.append(element if count == 1 else f"{element}{count}")
    return "".join(parts)
