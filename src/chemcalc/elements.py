"""Tabla periódica usada por los cálculos químicos.

Para cada elemento se guarda el número atómico, la masa atómica promedio y
las valencias comunes, ordenadas de menor a mayor. Las valencias se usan
para inferir hidrógenos implícitos durante el dibujo.
"""

from __future__ import annotations

from typing import Dict, NamedTuple, Optional, Tuple


class Element(NamedTuple):
    symbol: str
    name: str
    number: int
    mass: float
    valences: Tuple[int, ...]


ELEMENTS: Dict[str, Element] = {
    "H": Element("H", "Hydrogen", 1, 1.00794, (1,)),
    "He": Element("He", "Helium", 2, 4.002602, ()),
    "Li": Element("Li", "Lithium", 3, 6.941, (1,)),
    "Be": Element("Be", "Beryllium", 4, 9.012182, (2,)),
    "B": Element("B", "Boron", 5, 10.811, (3,)),
    "C": Element("C", "Carbon", 6, 12.011, (4,)),
    "N": Element("N", "Nitrogen", 7, 14.00674, (3,)),
    "O": Element("O", "Oxygen", 8, 15.9994, (2,)),
    "F": Element("F", "Fluorine", 9, 18.9984032, (1,)),
    "Ne": Element("Ne", "Neon", 10, 20.1797, ()),
    "Na": Element("Na", "Sodium", 11, 22.989768, (1,)),
    "Mg": Element("Mg", "Magnesium", 12, 24.305, (2,)),
    "Al": Element("Al", "Aluminum", 13, 26.981539, (3,)),
    "Si": Element("Si", "Silicon", 14, 28.0855, (4,)),
    "P": Element("P", "Phosphorus", 15, 30.973762, (3, 5)),
    "S": Element("S", "Sulfur", 16, 32.066, (2, 4, 6)),
    "Cl": Element("Cl", "Chlorine", 17, 35.4527, (1, 3, 4, 5, 7)),
    "Ar": Element("Ar", "Argon", 18, 39.948, (2,)),
    "K": Element("K", "Potassium", 19, 39.0983, (1,)),
    "Ca": Element("Ca", "Calcium", 20, 40.078, (2,)),
    "Sc": Element("Sc", "Scandium", 21, 44.95591, (3,)),
    "Ti": Element("Ti", "Titanium", 22, 47.88, (2, 3, 4)),
    "V": Element("V", "Vanadium", 23, 50.9415, (2, 3, 4, 5)),
    "Cr": Element("Cr", "Chromium", 24, 51.9961, (2, 3, 6)),
    "Mn": Element("Mn", "Manganese", 25, 54.93805, (1, 2, 3, 4, 6, 7)),
    "Fe": Element("Fe", "Iron", 26, 55.847, (2, 3, 4, 6)),
    "Co": Element("Co", "Cobalt", 27, 58.9332, (2, 3)),
    "Ni": Element("Ni", "Nickel", 28, 58.6934, (2, 3)),
    "Cu": Element("Cu", "Copper", 29, 63.546, (1, 2)),
    "Zn": Element("Zn", "Zinc", 30, 65.39, (2,)),
    "Ga": Element("Ga", "Gallium", 31, 69.723, (3,)),
    "Ge": Element("Ge", "Germanium", 32, 72.61, (2, 4)),
    "As": Element("As", "Arsenic", 33, 74.92159, (3, 5)),
    "Se": Element("Se", "Selenium", 34, 78.96, (2, 4, 6)),
    "Br": Element("Br", "Bromine", 35, 79.904, (1, 3, 5, 7)),
    "Kr": Element("Kr", "Krypton", 36, 83.8, (2,)),
    "Rb": Element("Rb", "Rubidium", 37, 85.4678, (1,)),
    "Sr": Element("Sr", "Strontium", 38, 87.62, (2,)),
    "Y": Element("Y", "Yttrium", 39, 88.90585, (3,)),
    "Zr": Element("Zr", "Zirconium", 40, 91.224, (2, 3, 4)),
    "Nb": Element("Nb", "Niobium", 41, 92.90638, (2, 3, 5)),
    "Mo": Element("Mo", "Molybdenum", 42, 95.94, (2, 3, 4, 5, 6)),
    "Tc": Element("Tc", "Technetium", 43, 97.9072, (2, 4, 5, 6, 7)),
    "Ru": Element("Ru", "Ruthenium", 44, 101.07, (1, 2, 3, 4, 5, 6, 7, 8)),
    "Rh": Element("Rh", "Rhodium", 45, 102.9055, (2, 3, 4, 5)),
    "Pd": Element("Pd", "Palladium", 46, 106.42, (2, 4)),
    "Ag": Element("Ag", "Silver", 47, 107.8682, (1, 2)),
    "Cd": Element("Cd", "Cadmium", 48, 112.411, (2,)),
    "In": Element("In", "Indium", 49, 114.818, (1, 3)),
    "Sn": Element("Sn", "Tin", 50, 118.71, (2, 3)),
    "Sb": Element("Sb", "Antimony", 51, 121.757, (3, 5)),
    "Te": Element("Te", "Tellurium", 52, 127.6, (2, 4, 6)),
    "I": Element("I", "Iodine", 53, 126.90447, (1, 3, 5, 7)),
    "Xe": Element("Xe", "Xenon", 54, 131.29, (2, 4, 6)),
    "Cs": Element("Cs", "Cesium", 55, 132.90543, (1,)),
    "Ba": Element("Ba", "Barium", 56, 137.327, (2,)),
    "La": Element("La", "Lanthanum", 57, 138.9055, (3,)),
    "Ce": Element("Ce", "Cerium", 58, 140.115, (3, 4)),
    "Pr": Element("Pr", "Praseodymium", 59, 140.90765, (3, 4)),
    "Nd": Element("Nd", "Neodymium", 60, 144.24, (3,)),
    "Pm": Element("Pm", "Promethium", 61, 144.9127, (3,)),
    "Sm": Element("Sm", "Samarium", 62, 150.36, (2, 3)),
    "Eu": Element("Eu", "Europium", 63, 151.965, (2, 3)),
    "Gd": Element("Gd", "Gadolinium", 64, 157.25, (3,)),
    "Tb": Element("Tb", "Terbium", 65, 158.92534, (3, 4)),
    "Dy": Element("Dy", "Dysprosium", 66, 162.5, (3,)),
    "Ho": Element("Ho", "Holmium", 67, 164.93032, (3,)),
    "Er": Element("Er", "Erbium", 68, 167.26, (3,)),
    "Tm": Element("Tm", "Thulium", 69, 168.93421, (3,)),
    "Yb": Element("Yb", "Ytterbium", 70, 173.04, (2, 3)),
    "Lu": Element("Lu", "Lutetium", 71, 174.967, (3,)),
    "Hf": Element("Hf", "Hafnium", 72, 178.49, (4,)),
    "Ta": Element("Ta", "Tantalum", 73, 180.9479, (3, 5)),
    "W": Element("W", "Tungsten", 74, 183.84, (2, 3, 4, 5, 6)),
    "Re": Element("Re", "Rhenium", 75, 186.207, (1, 2, 3, 4, 5, 6, 7)),
    "Os": Element("Os", "Osmium", 76, 190.23, (3, 4, 6, 8)),
    "Ir": Element("Ir", "Iridium", 77, 192.22, (2, 3, 4, 5, 6, 7, 8)),
    "Pt": Element("Pt", "Platinum", 78, 195.08, (2, 4)),
    "Au": Element("Au", "Gold", 79, 196.96654, (1, 3)),
    "Hg": Element("Hg", "Mercury", 80, 200.59, (2,)),
    "Tl": Element("Tl", "Thallium", 81, 204.3833, (1, 3)),
    "Pb": Element("Pb", "Lead", 82, 207.2, (2, 4)),
    "Bi": Element("Bi", "Bismuth", 83, 208.98037, (3, 5)),
    "Po": Element("Po", "Polonium", 84, 208.9824, (2, 4, 6)),
    "At": Element("At", "Astatine", 85, 209.9871, (1, 3, 5, 7)),
    "Rn": Element("Rn", "Radon", 86, 222.0176, (2, 4, 6)),
    "Fr": Element("Fr", "Francium", 87, 223.0197, (1,)),
    "Ra": Element("Ra", "Radium", 88, 226.0254, (2,)),
    "Ac": Element("Ac", "Actinium", 89, 227.0278, (3,)),
    "Th": Element("Th", "Thorium", 90, 232.0381, (4,)),
    "Pa": Element("Pa", "Protactinium", 91, 231.03588, (4, 5)),
    "U": Element("U", "Uranium", 92, 238.0289, (2, 3, 4, 5, 6)),
    "Np": Element("Np", "Neptunium", 93, 237.0482, (3, 4, 5, 6)),
    "Pu": Element("Pu", "Plutonium", 94, 244.0642, (3, 4, 5, 6)),
    "Am": Element("Am", "Americium", 95, 243.0614, (2, 3, 4, 5, 6)),
    "Cm": Element("Cm", "Curium", 96, 247.0703, (3, 4)),
    "Bk": Element("Bk", "Berkelium", 97, 247.0703, (3, 4)),
    "Cf": Element("Cf", "Californium", 98, 251.0796, (3,)),
    "Es": Element("Es", "Einsteinium", 99, 252.083, (3,)),
    "Fm": Element("Fm", "Fermium", 100, 257.0951, (3,)),
    "Md": Element("Md", "Mendelevium", 101, 258.0984, (3,)),
    "No": Element("No", "Nobelium", 102, 259.101, (3,)),
    "Lr": Element("Lr", "Lawrencium", 103, 262.1098, (3,)),
}


def get_element(symbol: Optional[str]) -> Optional[Element]:
    """Busca un elemento por símbolo (`None` se interpreta como carbono)."""
    return ELEMENTS.get(symbol or "C")


def is_element(symbol: str) -> bool:
    return symbol in ELEMENTS
