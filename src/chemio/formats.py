"""Selección del conversor según la extensión del archivo."""

from __future__ import annotations

import os
from typing import Optional, Protocol

from core.errors import UnknownFormat
from core.model import Graph
from .molfile import MolfileConverter, MolfileOptions
from .native import NativeConverter
from .smiles import SmilesConverter


class Converter(Protocol):
    extensions: tuple

    def from_string(self, text: str) -> Graph: ...

    def to_string(self, graph: Graph) -> str: ...


def converter_for_extension(
    extension: str,
    bond_length: Optional[float] = None,
    molfile_options: Optional[MolfileOptions] = None,
) -> Converter:
    """Devuelve el conversor para una extensión (`.mol`, `.sdf`, `.smi`, `.msk`).

    Raises:
        UnknownFormat: Si la extensión no está registrada.
    """
    ext = extension.lower()
    if ext in MolfileConverter.extensions:
        return MolfileConverter(molfile_options)
    if ext in SmilesConverter.extensions:
        return SmilesConverter(bond_length) if bond_length else SmilesConverter()
    if ext in NativeConverter.extensions:
        return NativeConverter()
    raise UnknownFormat(extension)


def converter_for_path(path: str, **kwargs) -> Converter:
    """Conversor adecuado para la ruta indicada, según su extensión."""
    _, ext = os.path.splitext(path)
    return converter_for_extension(ext, **kwargs)
