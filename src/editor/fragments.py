"""Constructores de fragmentos para la edición del grafo.

Las funciones de este módulo reciben un `Journal` y colocan átomos, cadenas
y anillos con geometría de dibujo estándar (ángulos de 120°, polígonos
regulares). Devuelven los IDs creados para que el llamador pueda encadenar
operaciones.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Dict, List, Optional

from core.errors import ActionError
from core.geometry import (
    Point,
    angle_deg,
    angle_distance_deg,
    distance,
    endpoint_from_angle_len,
    largest_gap_bisector_deg,
    midpoint,
    polygon_apothem,
    polygon_radius,
    rotate_point,
    snap_angle_deg,
)
from core.model import BondType, Graph, Vertex
from editor.journal import Journal

DEFAULT_BOND_LENGTH = 40.0
# Dirección del primer enlace de un átomo aislado: 30° hacia arriba a la
# derecha en un lienzo cuyo eje y crece hacia abajo.
FIRST_BOND_ANGLE_DEG = -30.0
GAP_SNAP_DEG = 15.0
_TIE_TOLERANCE = 1e-6


def bond_length_for(graph: Graph, override: Optional[float] = None) -> float:
    """Longitud de enlace a usar para dibujar nuevos átomos."""
    if override:
        return override
    if graph.edge_count:
        return graph.average_bond_length()
    return DEFAULT_BOND_LENGTH


def _neighbor_angles_deg(graph: Graph, vertex_id: int) -> List[float]:
    origin = graph.vertex(vertex_id).coords
    return [angle_deg(origin, graph.vertex(nbr).coords) for nbr in graph.neighbors(vertex_id)]


def _crowding(graph: Graph, point: Point, exclude: int) -> float:
    """Distancia mínima de `point` al resto de vértices (mayor = más libre)."""
    distances = [
        distance(point, vertex.coords) for vertex in graph.vertices() if vertex.id != exclude
    ]
    return min(distances) if distances else math.inf


def _is_linear_center(graph: Graph, vertex_id: int, bond_type: BondType) -> bool:
    if bond_type == BondType.TRIPLE:
        return True
    orders = [edge.bond_type for edge in graph.incident_edges(vertex_id)]
    if BondType.TRIPLE in orders:
        return True
    return bond_type == BondType.DOUBLE and BondType.DOUBLE in orders


def placement_angle_deg(graph: Graph, vertex_id: int, bond_type: BondType = BondType.SINGLE) -> float:
    """Elige la dirección de un nuevo enlace desde `vertex_id`.

    - Sin vecinos: 30° hacia arriba a la derecha.
    - Un vecino: ±120° respecto al enlace existente, en el lado menos
      poblado (lineal si el centro es sp).
    - Más vecinos: bisectriz del mayor hueco angular, ajustada a 15°.
    """
    angles = _neighbor_angles_deg(graph, vertex_id)
    if not angles:
        return FIRST_BOND_ANGLE_DEG % 360.0
    if len(angles) == 1:
        base = angles[0]
        if _is_linear_center(graph, vertex_id, bond_type):
            return (base + 180.0) % 360.0
        origin = graph.vertex(vertex_id).coords
        length = bond_length_for(graph)
        best_angle = None
        best_score = -math.inf
        for candidate in ((base + 120.0) % 360.0, (base - 120.0) % 360.0):
            point = endpoint_from_angle_len(origin, candidate, length)
            score = _crowding(graph, point, vertex_id)
            if best_angle is None or score > best_score + _TIE_TOLERANCE:
                best_angle, best_score = candidate, score
            elif abs(score - best_score) <= _TIE_TOLERANCE:
                # Empate: se prefiere la dirección más cercana a la horizontal
                # derecha, lo que produce cadenas en zigzag.
                if angle_distance_deg(candidate, 0.0) < angle_distance_deg(best_angle, 0.0):
                    best_angle = candidate
        return best_angle
    return snap_angle_deg(largest_gap_bisector_deg(angles), GAP_SNAP_DEG)


def add_vertex(journal: Journal, x: float, y: float, element: Optional[str] = None) -> int:
    return journal.add_vertex(Vertex(x, y, element))


def add_default_fragment(
    journal: Journal, x: float, y: float, bond_length: Optional[float] = None
) -> List[int]:
    """Crea dos carbonos enlazados partiendo de (x, y)."""
    first = journal.add_vertex(Vertex(x, y))
    second = add_bound_vertex(journal, first, bond_length=bond_length)
    return [first, second]


def add_bound_vertex(
    journal: Journal,
    anchor_id: int,
    template: Optional[Vertex] = None,
    bond_type: BondType = BondType.SINGLE,
    bond_length: Optional[float] = None,
) -> int:
    """Añade un vértice enlazado a `anchor_id` en la posición más libre.

    Args:
        journal: Registro de la acción en curso.
        anchor_id: Vértice existente al que se une el nuevo.
        template: Propiedades químicas del vértice nuevo (sus coordenadas
            se ignoran).
        bond_type: Tipo del enlace creado.
        bond_length: Longitud deseada; por defecto la media del grafo.

    Returns:
        ID del vértice creado.
    """
    graph = journal.graph
    anchor = graph.vertex(anchor_id)
    length = bond_length_for(graph, bond_length)
    theta = placement_angle_deg(graph, anchor_id, bond_type)
    x, y = endpoint_from_angle_len(anchor.coords, theta, length)
    vertex = replace(template) if template is not None else Vertex(0.0, 0.0)
    vertex.x = x
    vertex.y = y
    new_id = journal.add_vertex(vertex)
    journal.add_edge(anchor_id, new_id, bond_type)
    return new_id


def add_chain(
    journal: Journal, anchor_id: int, length: int, bond_length: Optional[float] = None
) -> List[int]:
    """Añade una cadena lineal de `length` carbonos en zigzag."""
    if length < 1:
        raise ActionError("Chain length must be at least 1")
    created: List[int] = []
    current = anchor_id
    for _ in range(length):
        current = add_bound_vertex(journal, current, bond_length=bond_length)
        created.append(current)
    return created


def _desaturate_ring(journal: Journal, ring_edges: List[int], offset: int) -> None:
    for idx in range(offset, len(ring_edges), 2):
        journal.update_edge(ring_edges[idx], bond_type=BondType.DOUBLE)


def _is_unsaturated(graph: Graph, vertex_id: int, ignore_edge: Optional[int] = None) -> bool:
    return any(
        edge.bond_type != BondType.SINGLE
        for edge in graph.incident_edges(vertex_id)
        if edge.id != ignore_edge
    )


def attach_ring(
    journal: Journal,
    anchor_id: int,
    size: int,
    desaturate: bool = False,
    bond_length: Optional[float] = None,
) -> List[int]:
    """Dibuja un anillo regular que comparte un único vértice con el grafo.

    Returns:
        IDs de los vértices nuevos del anillo, en orden de recorrido.
    """
    if size < 3:
        raise ActionError("Ring size must be at least 3")
    graph = journal.graph
    anchor = graph.vertex(anchor_id)
    length = bond_length_for(graph, bond_length)
    angles = _neighbor_angles_deg(graph, anchor_id)
    outward = largest_gap_bisector_deg(angles) if angles else FIRST_BOND_ANGLE_DEG
    radius = polygon_radius(length, size)
    center = endpoint_from_angle_len(anchor.coords, outward, radius)
    step = 2 * math.pi / size

    created: List[int] = []
    ring_edges: List[int] = []
    previous = anchor_id
    for idx in range(1, size):
        x, y = rotate_point(anchor.coords, center, step * idx)
        current = journal.add_vertex(Vertex(x, y))
        ring_edges.append(journal.add_edge(previous, current))
        created.append(current)
        previous = current
    ring_edges.append(journal.add_edge(previous, anchor_id))

    if desaturate and size % 2 == 0 and not _is_unsaturated(graph, anchor_id, ring_edges[0]):
        _desaturate_ring(journal, ring_edges, 0)
    return created


def fuse_ring(
    journal: Journal,
    edge_id: int,
    size: int,
    desaturate: bool = False,
) -> List[int]:
    """Dibuja un anillo regular que comparte el enlace `edge_id`.

    El anillo se coloca en el lado del enlace con menos átomos cercanos.

    Returns:
        IDs de los vértices nuevos del anillo.
    """
    if size < 3:
        raise ActionError("Ring size must be at least 3")
    graph = journal.graph
    shared = graph.edge(edge_id)
    p1 = graph.vertex(shared.v1).coords
    p2 = graph.vertex(shared.v2).coords
    side = distance(p1, p2)
    if side == 0:
        raise ActionError(f"Edge {edge_id} has zero length")
    mid = midpoint(p1, p2)
    nx = -(p2[1] - p1[1]) / side
    ny = (p2[0] - p1[0]) / side
    apothem = polygon_apothem(side, size)
    centers = [
        (mid[0] + nx * apothem, mid[1] + ny * apothem),
        (mid[0] - nx * apothem, mid[1] - ny * apothem),
    ]
    scores = [
        _crowding_excluding(graph, center, (shared.v1, shared.v2)) for center in centers
    ]
    center = centers[0] if scores[0] >= scores[1] - _TIE_TOLERANCE else centers[1]

    # Sentido de giro para que el primer paso desde v1 caiga sobre v2.
    step = 2 * math.pi / size
    forward = rotate_point(p1, center, step)
    if distance(forward, p2) > distance(rotate_point(p1, center, -step), p2):
        step = -step

    created: List[int] = []
    ring_edges: List[int] = []
    previous = shared.v2
    for idx in range(2, size):
        x, y = rotate_point(p1, center, step * idx)
        current = journal.add_vertex(Vertex(x, y))
        ring_edges.append(journal.add_edge(previous, current))
        created.append(current)
        previous = current
    ring_edges.append(journal.add_edge(previous, shared.v1))

    if desaturate and size % 2 == 0:
        if shared.bond_type != BondType.SINGLE:
            _desaturate_ring(journal, ring_edges, 1)
        elif not (
            _is_unsaturated(graph, shared.v1, ring_edges[-1])
            or _is_unsaturated(graph, shared.v2, ring_edges[0])
        ):
            _desaturate_ring(journal, ring_edges, 0)
    return created


def _crowding_excluding(graph: Graph, point: Point, exclude) -> float:
    distances = [
        distance(point, vertex.coords) for vertex in graph.vertices() if vertex.id not in exclude
    ]
    return min(distances) if distances else math.inf


def _copy_subgraph(
    journal: Journal,
    vertex_ids: List[int],
    skip_edges: frozenset = frozenset(),
) -> Dict[int, int]:
    """Duplica los vértices indicados y los enlaces entre ellos.

    Returns:
        Mapa ID original -> ID de la copia.
    """
    graph = journal.graph
    members = set(vertex_ids)
    mapping: Dict[int, int] = {}
    for vertex_id in vertex_ids:
        clone = replace(graph.vertex(vertex_id))
        mapping[vertex_id] = journal.add_vertex(clone)
    edges = {
        edge.id: edge
        for vertex_id in vertex_ids
        for edge in graph.incident_edges(vertex_id)
        if edge.v1 in members and edge.v2 in members and edge.id not in skip_edges
    }
    for edge_id in sorted(edges):
        edge = edges[edge_id]
        journal.add_edge(mapping[edge.v1], mapping[edge.v2], edge.bond_type, edge.stereo)
    return mapping


def symmetrize_at_vertex(journal: Journal, vertex_id: int, order: int) -> List[int]:
    """Replica N veces el sustituyente de un vértice terminal a su alrededor.

    El vértice debe tener exactamente un vecino. Se copia su componente
    (sin el propio vértice), cada copia se rota `i * 2π/N` alrededor del
    vértice (2π/3 para N = 2) y el ancla de la copia se enlaza al vértice.

    Raises:
        ActionError: Si el vértice no es terminal o `order < 2`.

    Returns:
        IDs de todos los vértices creados.
    """
    graph = journal.graph
    if order < 2:
        raise ActionError("Symmetry order must be at least 2")
    neighbors = graph.neighbors(vertex_id)
    if len(neighbors) != 1:
        raise ActionError(
            f"Vertex {vertex_id} must have exactly one neighbour to symmetrize "
            f"(has {len(neighbors)})"
        )
    anchor = neighbors[0]
    bond = graph.find_edge(vertex_id, anchor)
    pivot = graph.vertex(vertex_id).coords
    members = [vid for vid in graph.connected_component(vertex_id) if vid != vertex_id]
    angle = 2 * math.pi / 3 if order == 2 else 2 * math.pi / order

    created: List[int] = []
    for idx in range(1, order):
        mapping = _copy_subgraph(journal, members)
        copies = list(mapping.values())
        journal.rotate(pivot, angle * idx, copies)
        journal.add_edge(vertex_id, mapping[anchor], bond.bond_type, bond.stereo)
        created.extend(copies)
    return created


def symmetrize_along_edge(journal: Journal, edge_id: int) -> List[int]:
    """Refleja el resto de la molécula a través del punto medio de un enlace.

    Exactamente un extremo debe ser terminal (el extremo libre). La copia
    de la componente, sin el enlace ni sus extremos, se rota π alrededor del
    punto medio y los enlaces que tocaban al extremo ligado pasan a tocar al
    extremo libre.

    Raises:
        ActionError: Si no hay exactamente un extremo terminal o no hay
            nada que copiar.
    """
    graph = journal.graph
    edge = graph.edge(edge_id)
    terminal = [vid for vid in (edge.v1, edge.v2) if graph.degree(vid) == 1]
    if len(terminal) != 1:
        raise ActionError(f"Edge {edge_id} must have exactly one terminal endpoint")
    free = terminal[0]
    bound = edge.other(free)
    members = [
        vid for vid in graph.connected_component(bound) if vid not in (free, bound)
    ]
    if not members:
        raise ActionError(f"Nothing to symmetrize along edge {edge_id}")
    pivot = midpoint(graph.vertex(edge.v1).coords, graph.vertex(edge.v2).coords)

    rebinds = [
        (other_edge.other(bound), other_edge.bond_type, other_edge.stereo)
        for other_edge in graph.incident_edges(bound)
        if other_edge.id != edge_id
    ]
    mapping = _copy_subgraph(journal, members)
    copies = list(mapping.values())
    journal.rotate(pivot, math.pi, copies)
    for neighbor, bond_type, stereo in rebinds:
        journal.add_edge(free, mapping[neighbor], bond_type, stereo)
    return copies


def _heading_deg(fragment: Graph, first_id: int) -> Optional[float]:
    """Dirección desde el primer átomo hacia el centroide del resto."""
    others = [vertex.coords for vertex in fragment.vertices() if vertex.id != first_id]
    if not others:
        return None
    cx = sum(x for x, _ in others) / len(others)
    cy = sum(y for _, y in others) / len(others)
    return angle_deg(fragment.vertex(first_id).coords, (cx, cy))


def place_fragment(
    journal: Journal,
    fragment: Graph,
    origin: Point,
    theta_deg: float,
    first_target: Optional[int] = None,
) -> Dict[int, int]:
    """Copia `fragment` como cuerpo rígido con su primer átomo en `origin`.

    El fragmento se rota para que su cuerpo apunte en `theta_deg`. Si se
    indica `first_target`, el primer átomo no se crea: sus propiedades
    químicas pasan a ese vértice existente, que conserva sus enlaces.

    Returns:
        Mapa ID del fragmento -> ID en el grafo del journal.
    """
    vertex_ids = fragment.vertex_ids()
    if not vertex_ids:
        raise ActionError("Cannot place an empty fragment")
    first_id = vertex_ids[0]
    first = fragment.vertex(first_id)
    heading = _heading_deg(fragment, first_id)
    turn = math.radians(theta_deg - heading) if heading is not None else 0.0

    mapping: Dict[int, int] = {}
    for vertex in fragment.vertices():
        if vertex.id == first_id and first_target is not None:
            journal.update_vertex(
                first_target,
                element=vertex.element,
                charge=vertex.charge,
                h_count=vertex.h_count,
                isotope=vertex.isotope,
            )
            mapping[first_id] = first_target
            continue
        shifted = (origin[0] + vertex.x - first.x, origin[1] + vertex.y - first.y)
        x, y = rotate_point(shifted, origin, turn)
        clone = replace(vertex, x=x, y=y)
        mapping[vertex.id] = journal.add_vertex(clone)
    for edge in fragment.edges():
        journal.add_edge(mapping[edge.v1], mapping[edge.v2], edge.bond_type, edge.stereo)
    return mapping


def graft_fragment(
    journal: Journal,
    anchor_id: int,
    fragment: Graph,
    bond_type: BondType = BondType.SINGLE,
    bond_length: Optional[float] = None,
) -> Dict[int, int]:
    """Une una copia de `fragment` a `anchor_id` por su primer átomo.

    El primer átomo ocupa la posición que tendría un vértice nuevo de
    `add_bound_vertex` y el resto del fragmento se orienta hacia fuera.

    Returns:
        Mapa ID del fragmento -> ID en el grafo.
    """
    graph = journal.graph
    anchor = graph.vertex(anchor_id)
    length = bond_length_for(graph, bond_length)
    theta = placement_angle_deg(graph, anchor_id, bond_type)
    origin = endpoint_from_angle_len(anchor.coords, theta, length)
    mapping = place_fragment(journal, fragment, origin, theta)
    journal.add_edge(anchor_id, mapping[fragment.vertex_ids()[0]], bond_type)
    return mapping


def expand_vertex(journal: Journal, vertex_id: int, fragment: Graph) -> List[int]:
    """Sustituye un vértice por un fragmento cuyo primer átomo lo reemplaza.

    El vértice conserva su ID, su posición y sus enlaces; el resto del
    fragmento se dibuja en el hueco angular más amplio.

    Returns:
        IDs de los vértices creados.
    """
    graph = journal.graph
    origin = graph.vertex(vertex_id).coords
    neighbors = graph.neighbors(vertex_id)
    if not neighbors:
        theta = 0.0
    elif len(neighbors) == 1:
        theta = angle_deg(graph.vertex(neighbors[0]).coords, origin)
    else:
        theta = largest_gap_bisector_deg(_neighbor_angles_deg(graph, vertex_id))
    mapping = place_fragment(journal, fragment, origin, theta, first_target=vertex_id)
    return [new_id for new_id in mapping.values() if new_id != vertex_id]
