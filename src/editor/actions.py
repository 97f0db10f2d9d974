"""Acciones de edición del grafo molecular.

Cada acción es una variante de datos (dataclass) con los parámetros de la
edición. El comportamiento vive en tablas de despacho por tipo:

- `_APPLY`: construye la edición la primera vez, grabando un `Journal`.
- `_MERGE`: decide si una acción nueva se funde con la anterior del mismo
  tipo (gestos continuos como arrastrar) y combina sus parámetros.

Deshacer recorre el journal en sentido inverso y rehacer lo reproduce, por
lo que los IDs, coordenadas y orden de inserción son idénticos en cada paso.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple, Type

from chemcalc.elements import is_element
from core.errors import ActionError, ConversionError
from core.geometry import Point
from core.model import BondType, Graph, StereoType, Vertex
from editor import fragments
from editor.journal import Journal

logger = logging.getLogger(__name__)


@dataclass
class Action:
    """Base común: solo aporta el journal grabado en la primera aplicación."""

    journal: Optional[Journal] = field(default=None, init=False, repr=False, compare=False)

    @property
    def kind(self) -> str:
        return type(self).__name__


# ----------------------------------------------------------------------
# Variantes estructurales
# ----------------------------------------------------------------------
@dataclass
class AddVertex(Action):
    x: float = 0.0
    y: float = 0.0
    element: Optional[str] = None


@dataclass
class AddDefaultFragment(Action):
    x: float = 0.0
    y: float = 0.0
    bond_length: Optional[float] = None


@dataclass
class AddBoundVertex(Action):
    vertex_id: int = 0
    element: Optional[str] = None
    bond_type: BondType = BondType.SINGLE
    bond_length: Optional[float] = None


@dataclass
class AddChain(Action):
    vertex_id: int = 0
    length: int = 1
    bond_length: Optional[float] = None


@dataclass
class AttachRing(Action):
    vertex_id: int = 0
    size: int = 6
    desaturate: bool = False
    bond_length: Optional[float] = None


@dataclass
class FuseRing(Action):
    edge_id: int = 0
    size: int = 6
    desaturate: bool = False


@dataclass
class AddEdge(Action):
    v1: int = 0
    v2: int = 0
    bond_type: BondType = BondType.SINGLE
    stereo: StereoType = StereoType.DEFAULT


@dataclass
class ChangeBond(Action):
    edge_id: int = 0
    bond_type: Optional[BondType] = None
    stereo: Optional[StereoType] = None


@dataclass
class DeleteVertex(Action):
    vertex_id: int = 0


@dataclass
class DeleteEdge(Action):
    edge_id: int = 0


@dataclass
class DeleteSubgraph(Action):
    vertex_ids: Tuple[int, ...] = ()
    edge_ids: Tuple[int, ...] = ()


@dataclass
class ClearGraph(Action):
    pass


@dataclass
class StripHydrogens(Action):
    pass


@dataclass
class SymmetrizeAtVertex(Action):
    vertex_id: int = 0
    order: int = 2


@dataclass
class SymmetrizeAlongEdge(Action):
    edge_id: int = 0


@dataclass
class ExpandLabel(Action):
    """Desarrolla una etiqueta (abreviatura o fórmula lineal) en átomos."""

    vertex_id: int = 0


# ----------------------------------------------------------------------
# Variantes actualizables (se funden con la anterior del mismo tipo)
# ----------------------------------------------------------------------
@dataclass
class MoveVertices(Action):
    positions: Dict[int, Point] = field(default_factory=dict)


@dataclass
class RotateVertices(Action):
    pivot: Point = (0.0, 0.0)
    angle: float = 0.0
    vertex_ids: Tuple[int, ...] = ()


@dataclass
class SetElement(Action):
    vertex_id: int = 0
    element: Optional[str] = None


@dataclass
class SetCharge(Action):
    vertex_id: int = 0
    charge: int = 0


@dataclass
class IncrementCharge(Action):
    vertex_id: int = 0
    delta: int = 1


@dataclass
class SetIsotope(Action):
    vertex_id: int = 0
    isotope: Optional[int] = None


@dataclass
class SetHydrogenCount(Action):
    vertex_id: int = 0
    h_count: Optional[int] = None


# ----------------------------------------------------------------------
# Aplicación
# ----------------------------------------------------------------------
def _apply_add_vertex(journal: Journal, action: AddVertex) -> None:
    fragments.add_vertex(journal, action.x, action.y, action.element)


def _apply_default_fragment(journal: Journal, action: AddDefaultFragment) -> None:
    fragments.add_default_fragment(journal, action.x, action.y, action.bond_length)


def _apply_bound_vertex(journal: Journal, action: AddBoundVertex) -> None:
    fragments.add_bound_vertex(
        journal,
        action.vertex_id,
        Vertex(0.0, 0.0, action.element),
        action.bond_type,
        action.bond_length,
    )


def _apply_chain(journal: Journal, action: AddChain) -> None:
    fragments.add_chain(journal, action.vertex_id, action.length, action.bond_length)


def _apply_attach_ring(journal: Journal, action: AttachRing) -> None:
    fragments.attach_ring(
        journal, action.vertex_id, action.size, action.desaturate, action.bond_length
    )


def _apply_fuse_ring(journal: Journal, action: FuseRing) -> None:
    fragments.fuse_ring(journal, action.edge_id, action.size, action.desaturate)


def _apply_add_edge(journal: Journal, action: AddEdge) -> None:
    journal.add_edge(action.v1, action.v2, action.bond_type, action.stereo)


def _apply_change_bond(journal: Journal, action: ChangeBond) -> None:
    journal.update_edge(action.edge_id, action.bond_type, action.stereo)


def _drop_isolated(journal: Journal, vertex_ids) -> None:
    for vertex_id in vertex_ids:
        graph = journal.graph
        if graph.has_vertex(vertex_id) and graph.degree(vertex_id) == 0:
            journal.remove_vertex(vertex_id)


def _apply_delete_vertex(journal: Journal, action: DeleteVertex) -> None:
    neighbors = journal.graph.neighbors(action.vertex_id)
    journal.remove_vertex(action.vertex_id)
    _drop_isolated(journal, neighbors)


def _apply_delete_edge(journal: Journal, action: DeleteEdge) -> None:
    edge = journal.remove_edge(action.edge_id)
    _drop_isolated(journal, (edge.v1, edge.v2))


def _apply_delete_subgraph(journal: Journal, action: DeleteSubgraph) -> None:
    graph = journal.graph
    # Se valida todo antes de mutar.
    for edge_id in action.edge_ids:
        graph.edge(edge_id)
    for vertex_id in action.vertex_ids:
        graph.vertex(vertex_id)
    for edge_id in sorted(set(action.edge_ids)):
        if graph.has_edge(edge_id):
            journal.remove_edge(edge_id)
    for vertex_id in sorted(set(action.vertex_ids)):
        journal.remove_vertex(vertex_id)


def _apply_clear(journal: Journal, action: ClearGraph) -> None:
    graph = journal.graph
    for edge in list(graph.edges()):
        journal.remove_edge(edge.id)
    for vertex in list(graph.vertices()):
        journal.remove_vertex(vertex.id)


def _apply_strip_hydrogens(journal: Journal, action: StripHydrogens) -> None:
    for vertex in list(journal.graph.vertices()):
        if vertex.element == "H":
            journal.remove_vertex(vertex.id)


def _apply_symmetrize_vertex(journal: Journal, action: SymmetrizeAtVertex) -> None:
    fragments.symmetrize_at_vertex(journal, action.vertex_id, action.order)


def _apply_symmetrize_edge(journal: Journal, action: SymmetrizeAlongEdge) -> None:
    fragments.symmetrize_along_edge(journal, action.edge_id)


def _apply_expand_label(journal: Journal, action: ExpandLabel) -> None:
    # chemio usa los constructores de editor.fragments; se importa aquí.
    from chemio.linear import label_expansion

    graph = journal.graph
    label = graph.vertex(action.vertex_id).symbol
    if is_element(label):
        raise ActionError(f"Vertex {action.vertex_id} is already an atom ({label})")
    try:
        expansion = label_expansion(
            label, fragments.bond_length_for(graph), graph.degree(action.vertex_id) > 0
        )
    except ConversionError as exc:
        raise ActionError(f"Cannot expand label {label!r}: {exc}") from exc
    fragments.expand_vertex(journal, action.vertex_id, expansion)


def _apply_move(journal: Journal, action: MoveVertices) -> None:
    for vertex_id in action.positions:
        journal.graph.vertex(vertex_id)
    for vertex_id, (x, y) in action.positions.items():
        journal.set_position(vertex_id, x, y)


def _apply_rotate(journal: Journal, action: RotateVertices) -> None:
    vertex_ids = action.vertex_ids or tuple(journal.graph.vertex_ids())
    for vertex_id in vertex_ids:
        journal.graph.vertex(vertex_id)
    journal.rotate(action.pivot, action.angle, vertex_ids)


def _apply_set_element(journal: Journal, action: SetElement) -> None:
    journal.update_vertex(action.vertex_id, element=action.element)


def _apply_set_charge(journal: Journal, action: SetCharge) -> None:
    journal.update_vertex(action.vertex_id, charge=action.charge)


def _apply_increment_charge(journal: Journal, action: IncrementCharge) -> None:
    vertex = journal.graph.vertex(action.vertex_id)
    journal.update_vertex(action.vertex_id, charge=vertex.charge + action.delta)


def _apply_set_isotope(journal: Journal, action: SetIsotope) -> None:
    journal.update_vertex(action.vertex_id, isotope=action.isotope)


def _apply_set_h_count(journal: Journal, action: SetHydrogenCount) -> None:
    if action.h_count is not None and action.h_count < 0:
        raise ActionError("Hydrogen count cannot be negative")
    journal.update_vertex(action.vertex_id, h_count=action.h_count)


_APPLY: Dict[Type[Action], Callable[[Journal, Action], None]] = {
    AddVertex: _apply_add_vertex,
    AddDefaultFragment: _apply_default_fragment,
    AddBoundVertex: _apply_bound_vertex,
    AddChain: _apply_chain,
    AttachRing: _apply_attach_ring,
    FuseRing: _apply_fuse_ring,
    AddEdge: _apply_add_edge,
    ChangeBond: _apply_change_bond,
    DeleteVertex: _apply_delete_vertex,
    DeleteEdge: _apply_delete_edge,
    DeleteSubgraph: _apply_delete_subgraph,
    ClearGraph: _apply_clear,
    StripHydrogens: _apply_strip_hydrogens,
    SymmetrizeAtVertex: _apply_symmetrize_vertex,
    SymmetrizeAlongEdge: _apply_symmetrize_edge,
    ExpandLabel: _apply_expand_label,
    MoveVertices: _apply_move,
    RotateVertices: _apply_rotate,
    SetElement: _apply_set_element,
    SetCharge: _apply_set_charge,
    IncrementCharge: _apply_increment_charge,
    SetIsotope: _apply_set_isotope,
    SetHydrogenCount: _apply_set_h_count,
}


# ----------------------------------------------------------------------
# Fusión
# ----------------------------------------------------------------------
def _merge_move(top: MoveVertices, new: MoveVertices) -> bool:
    if set(top.positions) != set(new.positions):
        return False
    top.positions = dict(new.positions)
    return True


def _merge_rotate(top: RotateVertices, new: RotateVertices) -> bool:
    if top.pivot != new.pivot or set(top.vertex_ids) != set(new.vertex_ids):
        return False
    top.angle += new.angle
    return True


def _same_vertex(attr: str) -> Callable[[Action, Action], bool]:
    def merge(top, new) -> bool:
        if top.vertex_id != new.vertex_id:
            return False
        setattr(top, attr, getattr(new, attr))
        return True

    return merge


def _merge_increment(top: IncrementCharge, new: IncrementCharge) -> bool:
    if top.vertex_id != new.vertex_id:
        return False
    top.delta += new.delta
    return True


# Cada función comprueba la compatibilidad y, si procede, combina los
# parámetros en `top`. Solo se invoca con `new` ya aplicada al grafo.
_MERGE: Dict[Type[Action], Callable[[Action, Action], bool]] = {
    MoveVertices: _merge_move,
    RotateVertices: _merge_rotate,
    SetElement: _same_vertex("element"),
    SetCharge: _same_vertex("charge"),
    IncrementCharge: _merge_increment,
    SetIsotope: _same_vertex("isotope"),
    SetHydrogenCount: _same_vertex("h_count"),
}

_MERGE_KEYS: Dict[Type[Action], Callable[[Action], object]] = {
    MoveVertices: lambda action: frozenset(action.positions),
    RotateVertices: lambda action: (action.pivot, frozenset(action.vertex_ids)),
}


def is_updatable(action: Action) -> bool:
    """Indica si la acción puede fundirse con la anterior del mismo tipo."""
    return type(action) in _MERGE


def can_merge(top: Action, new: Action) -> bool:
    """Comprobación sin efectos de que `new` se fundiría con `top`."""
    if type(top) is not type(new) or not is_updatable(new):
        return False
    key = _MERGE_KEYS.get(type(new))
    if key is not None:
        return key(top) == key(new)
    return top.vertex_id == new.vertex_id


def apply_action(graph: Graph, action: Action) -> None:
    """Aplica una acción (primera vez o rehacer).

    La primera aplicación graba el journal; las siguientes lo reproducen.

    Raises:
        ActionError: Si la precondición de la acción no se cumple.
        GraphError: Si la acción viola una invariante del grafo.
    """
    if action.journal is not None:
        action.journal.replay(graph)
        return
    builder = _APPLY.get(type(action))
    if builder is None:
        raise ActionError(f"Unsupported action: {action.kind}")
    journal = Journal(graph)
    builder(journal, action)
    action.journal = journal
    logger.debug("Applied %s (%d graph operations)", action.kind, len(journal))


def rollback_action(graph: Graph, action: Action) -> None:
    """Revierte exactamente una acción aplicada previamente."""
    if action.journal is None:
        raise ActionError(f"{action.kind} has not been applied")
    action.journal.revert(graph)


def merge_action(graph: Graph, top: Action, new: Action) -> bool:
    """Intenta fundir `new` en `top`, aplicándola al grafo.

    Returns:
        True si se fundió (el efecto de `top` pasa a incluir el de `new`),
        False si las acciones no son compatibles; en ese caso el grafo no
        se modifica.
    """
    if top.journal is None or not can_merge(top, new):
        return False
    apply_action(graph, new)
    _MERGE[type(new)](top, new)
    top.journal.absorb(new.journal)
    new.journal = None
    return True
