"""Conversores entre el grafo molecular y formatos de texto."""

from .formats import converter_for_extension, converter_for_path
from .linear import LinearFormulaConverter, label_expansion
from .molfile import MolfileConverter, MolfileOptions, read_sdf, write_sdf
from .native import NativeConverter
from .smiles import SmilesConverter

__all__ = [
    "LinearFormulaConverter",
    "MolfileConverter",
    "MolfileOptions",
    "NativeConverter",
    "SmilesConverter",
    "converter_for_extension",
    "converter_for_path",
    "label_expansion",
    "read_sdf",
    "write_sdf",
]
