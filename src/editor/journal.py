"""Registro de mutaciones primitivas del grafo.

Cada acción de edición se ejecuta a través de un `Journal` la primera vez que
se aplica. El registro guarda copias de lo que se añadió, eliminó o modificó,
de modo que deshacer recorre las operaciones en sentido inverso y rehacer
las reproduce con los mismos IDs, coordenadas y orden.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from core.geometry import Point, rotate_point
from core.model import BondType, Edge, Graph, GraphMark, StereoType, Vertex

_VERTEX_FIELDS = ("x", "y", "element", "charge", "h_count", "isotope")
_EDGE_FIELDS = ("bond_type", "stereo")

# Tipos de operación registrados.
ADD_VERTEX = "add_vertex"
ADD_EDGE = "add_edge"
REMOVE_VERTEX = "remove_vertex"
REMOVE_EDGE = "remove_edge"
VERTEX_ATTRS = "vertex_attrs"
EDGE_ATTRS = "edge_attrs"


def _assign(target, source, fields: Tuple[str, ...]) -> None:
    for name in fields:
        setattr(target, name, getattr(source, name))


class Journal:
    """Graba operaciones sobre un grafo y sabe revertirlas o repetirlas.

    Durante la grabación expone la misma API de mutación que `Graph`
    (`add_vertex`, `add_edge`, `remove_vertex`, ...), por lo que los
    constructores de fragmentos trabajan contra el journal sin conocer el
    historial.
    """

    def __init__(self, graph: Graph) -> None:
        self.graph = graph
        self.mark: GraphMark = graph.mark()
        self.ops: List[tuple] = []

    def __len__(self) -> int:
        return len(self.ops)

    # ------------------------------------------------------------------
    # Grabación
    # ------------------------------------------------------------------
    def add_vertex(self, vertex: Vertex) -> int:
        vertex_id = self.graph.add_vertex(vertex)
        self.ops.append((ADD_VERTEX, replace(vertex)))
        return vertex_id

    def add_edge(
        self,
        v1: int,
        v2: int,
        bond_type: BondType = BondType.SINGLE,
        stereo: StereoType = StereoType.DEFAULT,
    ) -> int:
        edge_id = self.graph.add_edge(v1, v2, bond_type, stereo)
        self.ops.append((ADD_EDGE, replace(self.graph.edge(edge_id))))
        return edge_id

    def remove_edge(self, edge_id: int) -> Edge:
        edge = self.graph.remove_edge(edge_id)
        self.ops.append((REMOVE_EDGE, replace(edge)))
        return edge

    def remove_vertex(self, vertex_id: int) -> Tuple[Vertex, List[Edge]]:
        """Elimina un vértice registrando antes cada enlace incidente."""
        removed_edges = [
            self.remove_edge(edge.id) for edge in self.graph.incident_edges(vertex_id)
        ]
        vertex, _ = self.graph.remove_vertex(vertex_id)
        self.ops.append((REMOVE_VERTEX, replace(vertex)))
        return vertex, removed_edges

    def set_position(self, vertex_id: int, x: float, y: float) -> None:
        before = replace(self.graph.vertex(vertex_id))
        self.graph.set_position(vertex_id, x, y)
        self._record_vertex(vertex_id, before)

    def update_vertex(self, vertex_id: int, **fields) -> Vertex:
        before = replace(self.graph.vertex(vertex_id))
        vertex = self.graph.update_vertex(vertex_id, **fields)
        self._record_vertex(vertex_id, before)
        return vertex

    def update_edge(
        self,
        edge_id: int,
        bond_type: Optional[BondType] = None,
        stereo: Optional[StereoType] = None,
    ) -> Edge:
        before = replace(self.graph.edge(edge_id))
        edge = self.graph.update_edge(edge_id, bond_type, stereo)
        after = replace(edge)
        if before != after:
            self.ops.append((EDGE_ATTRS, edge_id, before, after))
        return edge

    def rotate(self, pivot: Point, angle: float, vertex_ids: Iterable[int]) -> None:
        """Rota un subconjunto de vértices registrando cada posición."""
        for vertex_id in list(vertex_ids):
            vertex = self.graph.vertex(vertex_id)
            x, y = rotate_point(vertex.coords, pivot, angle)
            self.set_position(vertex_id, x, y)

    def _record_vertex(self, vertex_id: int, before: Vertex) -> None:
        after = replace(self.graph.vertex(vertex_id))
        if before != after:
            self.ops.append((VERTEX_ATTRS, vertex_id, before, after))

    # ------------------------------------------------------------------
    # Combinación
    # ------------------------------------------------------------------
    def absorb(self, other: "Journal") -> None:
        """Incorpora las operaciones de un journal posterior.

        Dentro del tramo final de cambios de atributos, los cambios sobre el
        mismo vértice o enlace se funden: se conserva el estado "antes" del
        primero y el "después" del último. Un arrastre de varios vértices
        ocupa así una operación por vértice, sin importar cuántas veces se
        haya fundido.
        """
        tail = {}
        for position in range(len(self.ops) - 1, -1, -1):
            op = self.ops[position]
            if op[0] not in (VERTEX_ATTRS, EDGE_ATTRS):
                break
            tail.setdefault((op[0], op[1]), position)

        for op in other.ops:
            if op[0] not in (VERTEX_ATTRS, EDGE_ATTRS):
                self.ops.append(op)
                tail.clear()
                continue
            key = (op[0], op[1])
            position = tail.get(key)
            if position is None:
                tail[key] = len(self.ops)
                self.ops.append(op)
            else:
                first = self.ops[position]
                self.ops[position] = (op[0], op[1], first[2], op[3])

    # ------------------------------------------------------------------
    # Reproducción
    # ------------------------------------------------------------------
    def revert(self, graph: Graph) -> None:
        """Deshace todas las operaciones, dejando el grafo como antes."""
        for op in reversed(self.ops):
            kind = op[0]
            if kind == ADD_VERTEX:
                graph.remove_vertex(op[1].id)
            elif kind == ADD_EDGE:
                graph.remove_edge(op[1].id)
            elif kind == REMOVE_VERTEX:
                graph.restore_vertex(replace(op[1]))
            elif kind == REMOVE_EDGE:
                graph.restore_edge(replace(op[1]))
            elif kind == VERTEX_ATTRS:
                _assign(graph.vertex(op[1]), op[2], _VERTEX_FIELDS)
            elif kind == EDGE_ATTRS:
                _assign(graph.edge(op[1]), op[2], _EDGE_FIELDS)
        graph.truncate(self.mark)

    def replay(self, graph: Graph) -> None:
        """Repite las operaciones grabadas con los mismos IDs."""
        for op in self.ops:
            kind = op[0]
            if kind == ADD_VERTEX:
                graph.restore_vertex(replace(op[1]))
            elif kind == ADD_EDGE:
                graph.restore_edge(replace(op[1]))
            elif kind == REMOVE_VERTEX:
                graph.remove_vertex(op[1].id)
            elif kind == REMOVE_EDGE:
                graph.remove_edge(op[1].id)
            elif kind == VERTEX_ATTRS:
                _assign(graph.vertex(op[1]), op[3], _VERTEX_FIELDS)
            elif kind == EDGE_ATTRS:
                _assign(graph.edge(op[1]), op[3], _EDGE_FIELDS)
