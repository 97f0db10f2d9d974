"""Historial de deshacer/rehacer del editor.

`History` confirma acciones sobre un grafo, mantiene las pilas de deshacer y
rehacer y funde acciones actualizables consecutivas (arrastres, cambios
repetidos de carga) en un único paso de deshacer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from core.model import Graph
from editor.actions import Action, apply_action, is_updatable, merge_action, rollback_action

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    """Operación del motor que produjo una aplicación de la acción."""
    DO = "do"
    UPDATE = "update"
    UNDO = "undo"
    REDO = "redo"


@dataclass(frozen=True)
class HistoryEntry:
    action: Action
    direction: Direction


Listener = Callable[[HistoryEntry], None]


class History:
    """Pilas de deshacer/rehacer ligadas a un único grafo.

    Args:
        graph: Grafo que mutan las acciones.
        limit: Número máximo de pasos de deshacer (`None` = sin límite).
    """

    def __init__(self, graph: Graph, limit: Optional[int] = None) -> None:
        if limit is not None and limit < 1:
            raise ValueError("History limit must be positive")
        self.graph = graph
        self.limit = limit
        self._undo: List[Action] = []
        self._redo: List[Action] = []
        self._listeners: List[Listener] = []
        self._sealed = False

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_count(self) -> int:
        return len(self._undo)

    @property
    def redo_count(self) -> int:
        return len(self._redo)

    def peek(self) -> Optional[Action]:
        """Acción en la cima de la pila de deshacer."""
        return self._undo[-1] if self._undo else None

    def add_listener(self, callback: Listener) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: Listener) -> None:
        self._listeners.remove(callback)

    def seal(self) -> None:
        """Impide que la próxima acción se funda con la cima actual."""
        self._sealed = True

    def clear(self) -> None:
        """Vacía ambas pilas (p. ej. tras cargar un documento)."""
        self._undo.clear()
        self._redo.clear()
        self._sealed = False

    def commit(self, action: Action) -> HistoryEntry:
        """Aplica una acción y la registra en el historial.

        Si la acción es actualizable y la cima es del mismo tipo y
        compatible, se funde con ella (dirección UPDATE); si no, se aplica y
        se apila (dirección DO). La pila de rehacer se vacía.

        Raises:
            MolsketchError: Si la acción no puede aplicarse. El grafo queda
                exactamente como antes de la llamada y el historial no cambia.

        Side Effects:
            Muta el grafo y notifica a los oyentes.
        """
        if action.journal is not None:
            raise ValueError(f"{action.kind} was already committed")
        backup = self.graph.copy()
        top = self.peek()
        try:
            merged = (
                top is not None
                and not self._sealed
                and is_updatable(action)
                and merge_action(self.graph, top, action)
            )
            if not merged:
                apply_action(self.graph, action)
        except Exception:
            logger.warning("Rejected %s; graph restored", action.kind, exc_info=True)
            self.graph.replace_with(backup)
            raise

        self._redo.clear()
        self._sealed = False
        if merged:
            entry = HistoryEntry(top, Direction.UPDATE)
        else:
            self._undo.append(action)
            if self.limit is not None and len(self._undo) > self.limit:
                del self._undo[0]
            entry = HistoryEntry(action, Direction.DO)
        logger.debug("%s %s", entry.direction.value, entry.action.kind)
        self._notify(entry)
        return entry

    def undo(self) -> bool:
        """Revierte la última acción.

        Returns:
            False (y un aviso en el log) si no hay nada que deshacer.
        """
        if not self._undo:
            logger.info("Nothing to undo")
            return False
        action = self._undo.pop()
        rollback_action(self.graph, action)
        self._redo.append(action)
        self._sealed = True
        entry = HistoryEntry(action, Direction.UNDO)
        logger.debug("%s %s", entry.direction.value, action.kind)
        self._notify(entry)
        return True

    def redo(self) -> bool:
        """Reaplica la última acción deshecha sin vaciar la pila de rehacer.

        Returns:
            False (y un aviso en el log) si no hay nada que rehacer.
        """
        if not self._redo:
            logger.info("Nothing to redo")
            return False
        action = self._redo.pop()
        apply_action(self.graph, action)
        self._undo.append(action)
        self._sealed = True
        entry = HistoryEntry(action, Direction.REDO)
        logger.debug("%s %s", entry.direction.value, action.kind)
        self._notify(entry)
        return True

    def _notify(self, entry: HistoryEntry) -> None:
        for callback in list(self._listeners):
            callback(entry)
