"""Excepciones del núcleo de molsketch.

Agrupa las violaciones estructurales del grafo, los errores de conversión
de formatos de texto y los fallos de precondición de las acciones.
"""

from __future__ import annotations

from typing import Optional


class MolsketchError(Exception):
    """Base común para todos los errores del núcleo."""


class GraphError(MolsketchError):
    """Violación estructural del grafo (siempre un error del llamador)."""


class InvalidReference(GraphError, KeyError):
    """Se referencia un vértice o enlace inexistente, o un enlace a sí mismo."""

    def __str__(self) -> str:
        # KeyError añade comillas al mensaje; se conserva el texto plano.
        return str(self.args[0]) if self.args else ""


class DuplicateEdge(GraphError):
    """Ya existe un enlace entre el mismo par de vértices."""

    def __init__(self, v1: int, v2: int, edge_id: int) -> None:
        super().__init__(f"Edge {edge_id} already connects vertices {v1} and {v2}")
        self.v1 = v1
        self.v2 = v2
        self.edge_id = edge_id


class ActionError(MolsketchError):
    """La precondición de una acción no se cumple; el grafo no se modifica."""


class ConversionError(MolsketchError):
    """Error al traducir entre un grafo y una notación de texto."""


class MalformedMolfile(ConversionError):
    """Bloque de conexión MDL inválido.

    Attributes:
        line: Número de línea (base 1) donde se detectó el problema.
    """

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class MalformedSmiles(ConversionError):
    """Cadena SMILES inválida.

    Attributes:
        offset: Posición del carácter (base 0) que provocó el error.
    """

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} at position {offset}")
        self.reason = message
        self.offset = offset


class MalformedLinearFormula(ConversionError):
    """Fórmula lineal (p. ej. `CH2CH2OH`) que no se puede interpretar.

    Attributes:
        offset: Posición del carácter (base 0) donde falló la lectura.
    """

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} at position {offset}")
        self.reason = message
        self.offset = offset


class UnknownFormat(ConversionError):
    """No hay conversor registrado para la extensión indicada."""

    def __init__(self, extension: str) -> None:
        super().__init__(f"Unknown chemical file format: {extension or '<none>'}")
        self.extension = extension
