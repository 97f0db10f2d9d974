"""Edición del grafo: acciones reversibles, historial y sesión.

`editor.session` no se reexporta aquí porque depende de `chemio`, que a su
vez usa los constructores de fragmentos de este paquete.
"""

from editor.actions import Action, apply_action, merge_action, rollback_action
from editor.history import Direction, History, HistoryEntry

__all__ = [
    "Action",
    "Direction",
    "History",
    "HistoryEntry",
    "apply_action",
    "merge_action",
    "rollback_action",
]
