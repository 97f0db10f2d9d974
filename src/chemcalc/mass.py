"""Cálculo de masas moleculares.

Un grafo con etiquetas que no son elementos (abreviaturas sin desarrollar,
fórmulas lineales, grupos R) no tiene masa definida: las funciones sobre
grafos devuelven NaN en ese caso.
"""

from __future__ import annotations

import math
from typing import Dict, Tuple

from core.model import Graph
from .elements import ELEMENTS, get_element
from .valence import implicit_h_count

ELECTRON_MASS = 0.000548579909

# Masa del isótopo más abundante de cada elemento (u).
MONOISOTOPIC_MASSES: Dict[str, float] = {
    "H": 1.00782503223,
    "He": 4.00260325413,
    "Li": 7.0160034366,
    "Be": 9.012183065,
    "B": 11.00930536,
    "C": 12.0,
    "N": 14.00307400443,
    "O": 15.99491461957,
    "F": 18.99840316273,
    "Ne": 19.9924401762,
    "Na": 22.9897692820,
    "Mg": 23.985041697,
    "Al": 26.98153853,
    "Si": 27.97692653465,
    "P": 30.97376199842,
    "S": 31.9720711744,
    "Cl": 34.968852682,
    "Ar": 39.9623831237,
    "K": 38.9637064864,
    "Ca": 39.962590863,
    "Sc": 44.95590828,
    "Ti": 47.94794198,
    "V": 50.9439595,
    "Cr": 51.94050623,
    "Mn": 54.93804391,
    "Fe": 55.93493633,
    "Co": 58.93319429,
    "Ni": 57.93534241,
    "Cu": 62.92959772,
    "Zn": 63.92914201,
    "Ga": 68.9255735,
    "Ge": 73.921177761,
    "As": 74.92159457,
    "Se": 79.9165218,
    "Br": 78.9183376,
    "Kr": 83.9114977282,
    "Rb": 84.9117897379,
    "Sr": 87.9056125,
    "Y": 88.9058403,
    "Zr": 89.9046977,
    "Mo": 97.90540482,
    "Ru": 101.9043441,
    "Rh": 102.905498,
    "Pd": 105.9034804,
    "Ag": 106.9050916,
    "Cd": 113.90336509,
    "In": 114.903878776,
    "Sn": 119.90220163,
    "Sb": 120.9038120,
    "Te": 129.906222748,
    "I": 126.9044719,
    "Xe": 131.9041550856,
    "Cs": 132.905451961,
    "Ba": 137.90524700,
    "Gd": 157.9241123,
    "W": 183.95093092,
    "Os": 191.9614770,
    "Ir": 192.9629216,
    "Pt": 194.9647917,
    "Au": 196.96656879,
    "Hg": 201.97064340,
    "Tl": 204.9744278,
    "Pb": 207.9766525,
    "Bi": 208.9803991,
}

# Isótopos habituales en marcaje que no son los más abundantes.
NUCLIDE_MASSES: Dict[Tuple[str, int], float] = {
    ("H", 2): 2.01410177812,
    ("H", 3): 3.0160492779,
    ("C", 11): 11.0114336,
    ("C", 13): 13.00335483507,
    ("C", 14): 14.0032419884,
    ("N", 15): 15.00010889888,
    ("O", 17): 16.99913175650,
    ("O", 18): 17.99915961286,
    ("F", 18): 18.0009380,
    ("P", 32): 31.97390764,
    ("S", 33): 32.9714589098,
    ("S", 34): 33.967867004,
    ("S", 35): 34.96903231,
    ("Cl", 37): 36.965902602,
    ("Br", 81): 80.9162897,
    ("I", 123): 122.905589,
    ("I", 125): 124.9046294,
    ("I", 131): 130.9061263,
}


def has_only_elements(graph: Graph) -> bool:
    """Indica si todas las etiquetas del grafo son elementos."""
    return all(get_element(vertex.symbol) is not None for vertex in graph.vertices())


def formula_weight(formula_dict: Dict[str, int]) -> float:
    """Calcula el peso molecular a partir de una fórmula.

    Args:
        formula_dict: Diccionario de elemento -> conteo.

    Returns:
        Masa molecular aproximada en unidades atómicas (u).

    Raises:
        ValueError: Si el peso atómico de un elemento no está disponible.

    Side Effects:
        No tiene efectos laterales.
    """
    total = 0.0
    for element, count in formula_dict.items():
        info = ELEMENTS.get(element)
        if info is None:
            raise ValueError(f"Atomic weight not available for {element}")
        total += info.mass * count
    return total


def molecular_weight(graph: Graph) -> float:
    """Peso molecular promedio de todo el grafo.

    Si un vértice tiene isótopo, se usa su número másico en lugar de la
    masa promedio del elemento. Devuelve NaN si alguna etiqueta no es un
    elemento.
    """
    if not has_only_elements(graph):
        return math.nan
    h_mass = ELEMENTS["H"].mass
    total = 0.0
    for vertex in graph.vertices():
        element = get_element(vertex.symbol)
        mass = float(vertex.isotope) if vertex.isotope else element.mass
        total += mass + implicit_h_count(graph, vertex.id) * h_mass
    return total


def nuclide_mass(symbol: str, isotope: int = 0) -> float:
    """Masa de un nucleido; sin isótopo, la del más abundante.

    Los isótopos fuera de la tabla usan su número másico como masa.

    Raises:
        ValueError: Si el elemento no tiene masa monoisotópica tabulada.
    """
    mass = MONOISOTOPIC_MASSES.get(symbol)
    if isotope:
        if mass is not None and round(mass) == isotope:
            return mass
        return NUCLIDE_MASSES.get((symbol, isotope), float(isotope))
    if mass is None:
        raise ValueError(f"Monoisotopic mass not available for {symbol}")
    return mass


def exact_mass(graph: Graph) -> float:
    """Masa monoisotópica del grafo, descontando los electrones de la carga.

    Returns:
        Masa en u, o NaN si alguna etiqueta no es un elemento.

    Raises:
        ValueError: Si un elemento no tiene masa monoisotópica tabulada.
    """
    if not has_only_elements(graph):
        return math.nan
    h_mass = MONOISOTOPIC_MASSES["H"]
    total = 0.0
    for vertex in graph.vertices():
        total += nuclide_mass(vertex.symbol, vertex.isotope or 0)
        total += implicit_h_count(graph, vertex.id) * h_mass
        total -= vertex.charge * ELECTRON_MASS
    return total
