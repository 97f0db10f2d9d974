"""Sesión de edición: un documento, su grafo y su historial.

`EditorSession` es el contrato mínimo que necesita una interfaz gráfica:
confirmar acciones, deshacer/rehacer, cargar y guardar texto y consultar
valores derivados. El acceso a archivos se delega en un colaborador de
almacenamiento.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol

from chemcalc import exact_mass, format_formula, molecular_formula, molecular_weight
from chemio.formats import converter_for_extension, converter_for_path
from core.model import Graph
from editor.actions import Action, AddVertex, AttachRing, FuseRing
from editor.fragments import DEFAULT_BOND_LENGTH
from editor.history import History, HistoryEntry, Listener

logger = logging.getLogger(__name__)


@dataclass
class EditorSettings:
    """Preferencias de dibujo de una sesión."""

    bond_length: float = DEFAULT_BOND_LENGTH
    history_limit: Optional[int] = None
    default_element: Optional[str] = None
    ring_desaturate_phenyl: bool = True


class Storage(Protocol):
    def read_text(self, path: str) -> str: ...

    def write_text(self, path: str, text: str) -> None: ...


class FileStorage:
    """Almacenamiento en archivos de texto UTF-8."""

    def read_text(self, path: str) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write_text(self, path: str, text: str) -> None:
        Path(path).write_text(text, encoding="utf-8")


class EditorSession:
    """Documento abierto en el editor.

    Args:
        settings: Preferencias de dibujo; por defecto `EditorSettings()`.
        storage: Colaborador de lectura/escritura; por defecto `FileStorage`.
    """

    def __init__(
        self,
        settings: Optional[EditorSettings] = None,
        storage: Optional[Storage] = None,
    ) -> None:
        self.settings = settings or EditorSettings()
        self.storage = storage or FileStorage()
        self.graph = Graph()
        self.history = History(self.graph, self.settings.history_limit)

    # ------------------------------------------------------------------
    # Edición
    # ------------------------------------------------------------------
    def commit(self, action: Action) -> HistoryEntry:
        return self.history.commit(action)

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    def seal(self) -> None:
        """Marca el final de un gesto continuo (p. ej. soltar un arrastre)."""
        self.history.seal()

    def on_change(self, callback: Listener) -> None:
        self.history.add_listener(callback)

    def add_atom(self, x: float, y: float) -> HistoryEntry:
        """Clic en vacío: átomo aislado con el elemento por defecto."""
        return self.commit(AddVertex(x, y, self.settings.default_element))

    def add_ring(
        self,
        size: int = 6,
        vertex_id: Optional[int] = None,
        edge_id: Optional[int] = None,
    ) -> HistoryEntry:
        """Dibuja un anillo sobre un enlace (fusión) o un vértice.

        Los anillos de seis miembros se dibujan como fenilo si así lo
        indican las preferencias.
        """
        desaturate = self.settings.ring_desaturate_phenyl and size == 6
        if edge_id is not None:
            return self.commit(FuseRing(edge_id, size, desaturate))
        if vertex_id is not None:
            return self.commit(
                AttachRing(vertex_id, size, desaturate, self.settings.bond_length)
            )
        raise ValueError("add_ring requires a vertex_id or an edge_id")

    # ------------------------------------------------------------------
    # Carga y guardado
    # ------------------------------------------------------------------
    def load_text(self, text: str, fmt: str) -> None:
        """Sustituye el documento por el contenido de `text`.

        Args:
            text: Contenido en el formato indicado.
            fmt: Extensión del formato (`.mol`, `.sdf`, `.smi`, `.msk`).

        Raises:
            ConversionError: Si el texto no es válido; el documento actual no
                se modifica.

        Side Effects:
            El grafo se rellena en el mismo objeto y el historial se vacía;
            la carga no se puede deshacer.
        """
        converter = converter_for_extension(fmt, bond_length=self.settings.bond_length)
        self._replace(converter.from_string(text))

    def save_text(self, fmt: str) -> str:
        converter = converter_for_extension(fmt, bond_length=self.settings.bond_length)
        return converter.to_string(self.graph)

    def load(self, path: str) -> None:
        """Carga un archivo mediante el colaborador de almacenamiento."""
        converter = converter_for_path(path, bond_length=self.settings.bond_length)
        self._replace(converter.from_string(self.storage.read_text(path)))
        logger.info("Loaded %s", path)

    def save(self, path: str) -> None:
        converter = converter_for_path(path, bond_length=self.settings.bond_length)
        self.storage.write_text(path, converter.to_string(self.graph))

    def new_document(self) -> None:
        self._replace(Graph())

    def _replace(self, graph: Graph) -> None:
        self.graph.replace_with(graph)
        self.history.clear()
        logger.info(
            "Document replaced: %d atoms, %d bonds", graph.vertex_count, graph.edge_count
        )

    # ------------------------------------------------------------------
    # Valores derivados
    # ------------------------------------------------------------------
    def formula(self) -> Dict[str, int]:
        return molecular_formula(self.graph)

    def formula_string(self) -> str:
        return format_formula(self.formula())

    def molecular_weight(self) -> float:
        return molecular_weight(self.graph)

    def exact_mass(self) -> float:
        return exact_mass(self.graph)
