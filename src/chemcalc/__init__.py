"""API pública de cálculos químicos auxiliares."""

from .abbreviations import ABBREVIATIONS, Abbreviation, get_abbreviation
from .elements import ELEMENTS, Element, get_element
from .formula import molecular_formula, format_formula
from .mass import exact_mass, formula_weight, molecular_weight
from .valence import implicit_h_count, suggest_h_count

__all__ = [
    "ABBREVIATIONS",
    "Abbreviation",
    "ELEMENTS",
    "Element",
    "get_abbreviation",
    "get_element",
    "molecular_formula",
    "format_formula",
    "exact_mass",
    "formula_weight",
    "molecular_weight",
    "implicit_h_count",
    "suggest_h_count",
]
