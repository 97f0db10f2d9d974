"""Modelo de datos base del editor molecular molsketch.

Este módulo concentra las estructuras que representan el grafo molecular
(vértices/átomos y aristas/enlaces). El resto del núcleo (acciones,
conversores y cálculos químicos) interactúa con estas clases para añadir,
modificar y consultar la química dibujada.

El grafo se guarda como una "arena": listas densas de ranuras indexadas por
ID (ID = índice de ranura + 1). Eliminar deja la ranura vacía, de modo que
los IDs nunca se reutilizan para átomos no relacionados y el orden de
inserción coincide con el orden de las ranuras.
"""

from __future__ import annotations

import math
from bisect import insort
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

from core.errors import DuplicateEdge, GraphError, InvalidReference

# Marcador interno para distinguir "no se especificó" de "se desea borrar".
_UNSET = object()

Point = Tuple[float, float]


class BondType(IntEnum):
    """Tipos de enlace; los valores son los códigos del formato MDL Molfile."""
    SINGLE = 1
    DOUBLE = 2
    TRIPLE = 3
    AROMATIC = 4
    SINGLE_OR_DOUBLE = 5
    SINGLE_OR_AROMATIC = 6
    DOUBLE_OR_AROMATIC = 7
    ANY = 8

    @property
    def order(self) -> int:
        """Orden de enlace usado en el cálculo de valencias."""
        if self is BondType.DOUBLE:
            return 2
        if self is BondType.TRIPLE:
            return 3
        return 1

    @property
    def is_query(self) -> bool:
        return self >= BondType.SINGLE_OR_DOUBLE


class StereoType(IntEnum):
    """Estereoquímica de enlaces simples según el formato MDL.

    Los códigos 2, 3 y 5 no se usan en el estándar.
    """
    DEFAULT = 0
    UP = 1
    EITHER = 4
    DOWN = 6


# Valencias máximas (suma de órdenes de enlace) antes de marcar error.
# Se usa un umbral permisivo para patrones comunes hipervalentes:
# - P(V/VI): fosfatos, fosforanos, PF6-
# - S(IV/VI): sulfóxidos/sulfonas/sulfatos, SF6
# - Halógenos(III/V/VII): interhalógenos, oxoácidos (p. ej., IF7, ClO4-)
# - Xe(II/IV/VI/VIII): fluoruro de xenón y XeO4 en dibujos
MAX_VALENCE_MAP = {
    "H": 1,
    "C": 4,
    "N": 4,
    "O": 3,
    "F": 1,
    "Cl": 7,
    "Br": 7,
    "I": 7,
    "P": 6,
    "S": 6,
    "Xe": 8,
    "Se": 6,
    "Te": 6,
    "As": 6,
    "Sb": 6,
    "Bi": 6,
    "Si": 6,
    "Ge": 6,
    "Sn": 6,
    "Pb": 6,
    "B": 4,
}


@dataclass
class Vertex:
    """Representa un átomo en el grafo molecular.

    Un vértice sin elemento (`element=None`) es un carbono implícito.
    `h_count=None` significa que los hidrógenos se infieren por valencia.
    """
    x: float
    y: float
    element: Optional[str] = None
    charge: int = 0
    h_count: Optional[int] = None
    isotope: Optional[int] = None
    id: int = 0

    @property
    def symbol(self) -> str:
        return self.element or "C"

    @property
    def coords(self) -> Point:
        return (self.x, self.y)


@dataclass
class Edge:
    """Representa un enlace químico entre dos vértices distintos."""
    v1: int
    v2: int
    bond_type: BondType = BondType.SINGLE
    stereo: StereoType = StereoType.DEFAULT
    id: int = 0

    def other(self, vertex_id: int) -> int:
        """Devuelve el extremo opuesto a `vertex_id`."""
        if vertex_id == self.v1:
            return self.v2
        if vertex_id == self.v2:
            return self.v1
        raise InvalidReference(f"Vertex {vertex_id} is not an endpoint of edge {self.id}")

    @property
    def pair(self) -> FrozenSet[int]:
        return frozenset((self.v1, self.v2))


@dataclass(frozen=True)
class Rect:
    """Rectángulo alineado con los ejes."""
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def center(self) -> Point:
        return ((self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2)


GraphMark = Tuple[int, int]


class Graph:
    """Grafo molecular mutable con operaciones de edición básicas."""

    def __init__(self) -> None:
        """Inicializa el grafo vacío y los índices secundarios."""
        self._vertices: List[Optional[Vertex]] = []
        self._edges: List[Optional[Edge]] = []
        self._incident: Dict[int, List[int]] = {}
        self._pairs: Dict[FrozenSet[int], int] = {}
        self._vertex_count = 0
        self._edge_count = 0

    # ------------------------------------------------------------------
    # Consultas
    # ------------------------------------------------------------------
    @property
    def vertex_count(self) -> int:
        return self._vertex_count

    @property
    def edge_count(self) -> int:
        return self._edge_count

    @property
    def is_empty(self) -> bool:
        return self._vertex_count == 0

    def vertices(self) -> Iterator[Vertex]:
        """Itera los vértices vivos en orden de inserción."""
        return (vertex for vertex in self._vertices if vertex is not None)

    def edges(self) -> Iterator[Edge]:
        """Itera los enlaces vivos en orden de inserción."""
        return (edge for edge in self._edges if edge is not None)

    def vertex_ids(self) -> List[int]:
        return [vertex.id for vertex in self.vertices()]

    def has_vertex(self, vertex_id: int) -> bool:
        slot = vertex_id - 1
        return 0 <= slot < len(self._vertices) and self._vertices[slot] is not None

    def has_edge(self, edge_id: int) -> bool:
        slot = edge_id - 1
        return 0 <= slot < len(self._edges) and self._edges[slot] is not None

    def vertex(self, vertex_id: int) -> Vertex:
        """Obtiene un vértice por ID.

        Raises:
            InvalidReference: Si el vértice no existe.
        """
        if not self.has_vertex(vertex_id):
            raise InvalidReference(f"Vertex {vertex_id} does not exist")
        return self._vertices[vertex_id - 1]

    def edge(self, edge_id: int) -> Edge:
        """Obtiene un enlace por ID.

        Raises:
            InvalidReference: Si el enlace no existe.
        """
        if not self.has_edge(edge_id):
            raise InvalidReference(f"Edge {edge_id} does not exist")
        return self._edges[edge_id - 1]

    def vertex_indices(self) -> Dict[int, int]:
        """Mapa ID -> índice posicional (base 0) de los vértices vivos."""
        return {vertex.id: idx for idx, vertex in enumerate(self.vertices())}

    def index_of(self, vertex_id: int) -> int:
        """Índice posicional (base 0) del vértice en el orden de inserción."""
        self.vertex(vertex_id)
        return sum(1 for vertex in self._vertices[: vertex_id - 1] if vertex is not None)

    def incident_edges(self, vertex_id: int) -> List[Edge]:
        """Enlaces que tocan al vértice, en orden de inserción.

        Raises:
            InvalidReference: Si el vértice no existe.
        """
        self.vertex(vertex_id)
        return [self._edges[edge_id - 1] for edge_id in self._incident[vertex_id]]

    def neighbors(self, vertex_id: int) -> List[int]:
        """IDs de los vecinos, en el orden de sus enlaces."""
        return [edge.other(vertex_id) for edge in self.incident_edges(vertex_id)]

    def degree(self, vertex_id: int) -> int:
        self.vertex(vertex_id)
        return len(self._incident[vertex_id])

    def find_edge(self, v1: int, v2: int) -> Optional[Edge]:
        """Busca un enlace existente entre dos vértices.

        Returns:
            El enlace si existe, o `None` en caso contrario.
        """
        edge_id = self._pairs.get(frozenset((v1, v2)))
        if edge_id is None:
            return None
        return self._edges[edge_id - 1]

    # ------------------------------------------------------------------
    # Mutaciones estructurales
    # ------------------------------------------------------------------
    def add_vertex(self, vertex: Vertex) -> int:
        """Registra un vértice y le asigna un ID nuevo.

        Args:
            vertex: Vértice a insertar; su campo `id` se sobrescribe.

        Returns:
            El ID asignado.

        Side Effects:
            Añade una ranura al final de la arena de vértices.
        """
        vertex.id = len(self._vertices) + 1
        self._vertices.append(vertex)
        self._incident[vertex.id] = []
        self._vertex_count += 1
        return vertex.id

    def add_edge(
        self,
        v1: int,
        v2: int,
        bond_type: BondType = BondType.SINGLE,
        stereo: StereoType = StereoType.DEFAULT,
    ) -> int:
        """Crea y registra un enlace entre dos vértices.

        Args:
            v1: ID del primer vértice.
            v2: ID del segundo vértice.
            bond_type: Tipo de enlace (códigos MDL).
            stereo: Estereoquímica dibujada.

        Returns:
            El ID del enlace creado.

        Raises:
            InvalidReference: Si falta algún extremo o ambos coinciden.
            DuplicateEdge: Si el par ya está enlazado.
        """
        edge = Edge(v1, v2, BondType(bond_type), StereoType(stereo))
        self._check_edge(edge)
        edge.id = len(self._edges) + 1
        self._edges.append(edge)
        self._index_edge(edge)
        return edge.id

    def remove_vertex(self, vertex_id: int) -> Tuple[Vertex, List[Edge]]:
        """Elimina un vértice y todos los enlaces conectados.

        Args:
            vertex_id: Identificador del vértice a eliminar.

        Returns:
            Una tupla con el vértice eliminado y la lista de enlaces removidos
            (en orden de inserción), para que el llamador pueda deshacer.

        Raises:
            InvalidReference: Si el vértice no existe.
        """
        vertex = self.vertex(vertex_id)
        removed_edges = [self.remove_edge(edge_id) for edge_id in list(self._incident[vertex_id])]
        self._vertices[vertex_id - 1] = None
        del self._incident[vertex_id]
        self._vertex_count -= 1
        return vertex, removed_edges

    def remove_edge(self, edge_id: int) -> Edge:
        """Elimina un enlace del grafo.

        Raises:
            InvalidReference: Si el enlace no existe.
        """
        edge = self.edge(edge_id)
        self._edges[edge_id - 1] = None
        self._incident[edge.v1].remove(edge_id)
        self._incident[edge.v2].remove(edge_id)
        del self._pairs[edge.pair]
        self._edge_count -= 1
        return edge

    def restore_vertex(self, vertex: Vertex) -> None:
        """Devuelve un vértice eliminado a su ranura original.

        Raises:
            GraphError: Si la ranura está ocupada o el ID no es válido.
        """
        slot = vertex.id - 1
        if slot < 0:
            raise GraphError(f"Vertex id {vertex.id} is not restorable")
        if slot < len(self._vertices) and self._vertices[slot] is not None:
            raise GraphError(f"Vertex slot {vertex.id} is occupied")
        while len(self._vertices) <= slot:
            self._vertices.append(None)
        self._vertices[slot] = vertex
        self._incident[vertex.id] = []
        self._vertex_count += 1

    def restore_edge(self, edge: Edge) -> None:
        """Devuelve un enlace eliminado a su ranura original."""
        slot = edge.id - 1
        if slot < 0:
            raise GraphError(f"Edge id {edge.id} is not restorable")
        if slot < len(self._edges) and self._edges[slot] is not None:
            raise GraphError(f"Edge slot {edge.id} is occupied")
        self._check_edge(edge)
        while len(self._edges) <= slot:
            self._edges.append(None)
        self._edges[slot] = edge
        self._index_edge(edge)

    def mark(self) -> GraphMark:
        """Marca de nivel de las arenas, para revertir inserciones."""
        return len(self._vertices), len(self._edges)

    def truncate(self, mark: GraphMark) -> None:
        """Descarta las ranuras vacías creadas después de `mark`.

        Raises:
            GraphError: Si alguna de esas ranuras sigue ocupada.
        """
        vertex_mark, edge_mark = mark
        if any(v is not None for v in self._vertices[vertex_mark:]):
            raise GraphError("Cannot truncate live vertices")
        if any(e is not None for e in self._edges[edge_mark:]):
            raise GraphError("Cannot truncate live edges")
        del self._vertices[vertex_mark:]
        del self._edges[edge_mark:]

    def reserve(self, mark: GraphMark) -> None:
        """Extiende las arenas con ranuras vacías hasta `mark`.

        Se usa al cargar documentos para conservar los contadores de IDs.
        """
        vertex_mark, edge_mark = mark
        while len(self._vertices) < vertex_mark:
            self._vertices.append(None)
        while len(self._edges) < edge_mark:
            self._edges.append(None)

    def clear(self) -> None:
        """Elimina todos los vértices y enlaces y reinicia los IDs."""
        self._vertices.clear()
        self._edges.clear()
        self._incident.clear()
        self._pairs.clear()
        self._vertex_count = 0
        self._edge_count = 0

    # ------------------------------------------------------------------
    # Mutaciones de atributos
    # ------------------------------------------------------------------
    def set_position(self, vertex_id: int, x: float, y: float) -> None:
        vertex = self.vertex(vertex_id)
        vertex.x = x
        vertex.y = y

    def update_vertex(
        self,
        vertex_id: int,
        element: Optional[str] | object = _UNSET,
        charge: int | object = _UNSET,
        h_count: Optional[int] | object = _UNSET,
        isotope: Optional[int] | object = _UNSET,
    ) -> Vertex:
        """Actualiza propiedades químicas de un vértice.

        Los argumentos omitidos no se modifican; `None` borra el valor
        opcional correspondiente.

        Returns:
            El vértice actualizado.
        """
        vertex = self.vertex(vertex_id)
        if element is not _UNSET:
            vertex.element = element
        if charge is not _UNSET:
            vertex.charge = int(charge)
        if h_count is not _UNSET:
            vertex.h_count = h_count
        if isotope is not _UNSET:
            vertex.isotope = isotope
        return vertex

    def update_edge(
        self,
        edge_id: int,
        bond_type: Optional[BondType] = None,
        stereo: Optional[StereoType] = None,
    ) -> Edge:
        """Actualiza tipo y estereoquímica de un enlace existente."""
        edge = self.edge(edge_id)
        if bond_type is not None:
            edge.bond_type = BondType(bond_type)
        if stereo is not None:
            edge.stereo = StereoType(stereo)
        return edge

    # ------------------------------------------------------------------
    # Geometría
    # ------------------------------------------------------------------
    def bounding_rect(self) -> Optional[Rect]:
        """Rectángulo mínimo que contiene todas las coordenadas.

        Returns:
            `Rect` o `None` si el grafo está vacío.
        """
        if self.is_empty:
            return None
        xs = [vertex.x for vertex in self.vertices()]
        ys = [vertex.y for vertex in self.vertices()]
        return Rect(min(xs), min(ys), max(xs), max(ys))

    def apply_rotation(
        self,
        pivot: Point,
        angle: float,
        vertex_ids: Optional[Iterable[int]] = None,
    ) -> None:
        """Rota coordenadas alrededor de `pivot` (ángulo en radianes).

        Args:
            pivot: Centro de rotación.
            angle: Ángulo en radianes (sentido matemático estándar).
            vertex_ids: Subconjunto a rotar; por defecto, todos.

        Side Effects:
            Modifica `x`/`y` de los vértices; la topología no cambia.
        """
        px, py = pivot
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        for vertex in self._select(vertex_ids):
            dx = vertex.x - px
            dy = vertex.y - py
            vertex.x = px + dx * cos_a - dy * sin_a
            vertex.y = py + dx * sin_a + dy * cos_a

    def apply_translation(
        self, dx: float, dy: float, vertex_ids: Optional[Iterable[int]] = None
    ) -> None:
        for vertex in self._select(vertex_ids):
            vertex.x += dx
            vertex.y += dy

    def apply_scaling(self, factor: float, origin: Point = (0.0, 0.0)) -> None:
        ox, oy = origin
        for vertex in self.vertices():
            vertex.x = ox + (vertex.x - ox) * factor
            vertex.y = oy + (vertex.y - oy) * factor

    def average_bond_length(self) -> float:
        """Longitud media de enlace; 1.54 (C-C en Å) si no hay enlaces."""
        if not self._edge_count:
            return 1.54
        total = 0.0
        for edge in self.edges():
            a = self._vertices[edge.v1 - 1]
            b = self._vertices[edge.v2 - 1]
            total += math.hypot(a.x - b.x, a.y - b.y)
        return total / self._edge_count

    # ------------------------------------------------------------------
    # Topología
    # ------------------------------------------------------------------
    def connected_component(self, vertex_id: int) -> List[int]:
        """IDs de la componente conexa que contiene al vértice, ordenados."""
        self.vertex(vertex_id)
        seen = {vertex_id}
        stack = [vertex_id]
        while stack:
            current = stack.pop()
            for neighbor in self.neighbors(current):
                if neighbor not in seen:
                    seen.add(neighbor)
                    stack.append(neighbor)
        return sorted(seen)

    def components(self) -> List[List[int]]:
        """Componentes conexas, ordenadas por su vértice más antiguo."""
        result: List[List[int]] = []
        assigned: set[int] = set()
        for vertex in self.vertices():
            if vertex.id in assigned:
                continue
            component = self.connected_component(vertex.id)
            assigned.update(component)
            result.append(component)
        return result

    def validate(self) -> List[int]:
        """Valida valencias máximas según `MAX_VALENCE_MAP`.

        Returns:
            Lista de IDs de vértices que exceden la valencia permitida.
        """
        errors: List[int] = []
        for vertex in self.vertices():
            expected = MAX_VALENCE_MAP.get(vertex.symbol)
            if expected is None:
                continue
            total = sum(edge.bond_type.order for edge in self.incident_edges(vertex.id))
            total += vertex.h_count or 0
            if total > expected:
                errors.append(vertex.id)
        return errors

    # ------------------------------------------------------------------
    # Copias
    # ------------------------------------------------------------------
    def copy(self) -> "Graph":
        """Copia profunda que conserva IDs y ranuras vacías."""
        other = Graph()
        other._load_slots(self._vertices, self._edges)
        return other

    def replace_with(self, other: "Graph") -> None:
        """Sustituye todo el contenido por una copia de `other`.

        Side Effects:
            Conserva la identidad de este objeto (los observadores siguen
            apuntando al mismo grafo).
        """
        self._load_slots(other._vertices, other._edges)

    def snapshot(self) -> Tuple[Tuple[Vertex, ...], Tuple[Edge, ...]]:
        """Copia inmutable de vértices y enlaces para comparaciones exactas."""
        return (
            tuple(replace(vertex) for vertex in self.vertices()),
            tuple(replace(edge) for edge in self.edges()),
        )

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------
    def _select(self, vertex_ids: Optional[Iterable[int]]) -> List[Vertex]:
        if vertex_ids is None:
            return list(self.vertices())
        return [self.vertex(vertex_id) for vertex_id in vertex_ids]

    def _check_edge(self, edge: Edge) -> None:
        for vertex_id in (edge.v1, edge.v2):
            if not self.has_vertex(vertex_id):
                raise InvalidReference(f"Vertex {vertex_id} does not exist")
        if edge.v1 == edge.v2:
            raise InvalidReference(f"Edge endpoints must differ (vertex {edge.v1})")
        existing = self._pairs.get(edge.pair)
        if existing is not None:
            raise DuplicateEdge(edge.v1, edge.v2, existing)

    def _index_edge(self, edge: Edge) -> None:
        insort(self._incident[edge.v1], edge.id)
        insort(self._incident[edge.v2], edge.id)
        self._pairs[edge.pair] = edge.id
        self._edge_count += 1

    def _load_slots(
        self,
        vertices: List[Optional[Vertex]],
        edges: List[Optional[Edge]],
    ) -> None:
        vertex_slots = [replace(v) if v is not None else None for v in vertices]
        edge_slots = [replace(e) if e is not None else None for e in edges]
        self.clear()
        self._vertices = vertex_slots
        for vertex in self.vertices():
            self._incident[vertex.id] = []
            self._vertex_count += 1
        self._edges = edge_slots
        for edge in self.edges():
            self._index_edge(edge)
