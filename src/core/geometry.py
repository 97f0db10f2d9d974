"""
Utilidades geométricas puras para el grafo molecular.

Trabajan sobre tuplas `(x, y)` en el mismo espacio de coordenadas que los
vértices. Los ángulos se expresan en grados salvo que se indique lo contrario.
"""
from __future__ import annotations

import math
from typing import Iterable, List, Tuple

Point = Tuple[float, float]


def angle_deg(p0: Point, p1: Point) -> float:
    """Calcula el ángulo en grados (0-360) del vector p0 -> p1."""
    dx = p1[0] - p0[0]
    dy = p1[1] - p0[1]
    if dx == 0 and dy == 0:
        return 0.0
    return (math.degrees(math.atan2(dy, dx)) + 360.0) % 360.0


def snap_angle_deg(theta_deg: float, step_deg: float) -> float:
    """Ajusta un ángulo a un múltiplo del paso dado."""
    if step_deg <= 0:
        return theta_deg
    return (round(theta_deg / step_deg) * step_deg) % 360.0


def normalize_angle_deg(theta_deg: float) -> float:
    """Normaliza un ángulo al rango [0, 360)."""
    return theta_deg % 360.0


def angle_distance_deg(a_deg: float, b_deg: float) -> float:
    """Distancia angular mínima entre dos ángulos."""
    diff = (a_deg - b_deg + 180.0) % 360.0 - 180.0
    return abs(diff)


def endpoint_from_angle_len(p0: Point, theta_deg: float, length: float) -> Point:
    """Calcula el punto final desde un origen, ángulo y longitud."""
    rad = math.radians(theta_deg)
    return (p0[0] + math.cos(rad) * length, p0[1] + math.sin(rad) * length)


def rotate_point(point: Point, pivot: Point, angle_rad: float) -> Point:
    """Rota `point` alrededor de `pivot` (ángulo en radianes)."""
    cos_a = math.cos(angle_rad)
    sin_a = math.sin(angle_rad)
    dx = point[0] - pivot[0]
    dy = point[1] - pivot[1]
    return (pivot[0] + dx * cos_a - dy * sin_a, pivot[1] + dx * sin_a + dy * cos_a)


def midpoint(a: Point, b: Point) -> Point:
    return ((a[0] + b[0]) / 2, (a[1] + b[1]) / 2)


def distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def largest_gap_bisector_deg(angles_deg: Iterable[float]) -> float:
    """Devuelve la bisectriz del mayor hueco angular entre direcciones.

    Args:
        angles_deg: Direcciones ocupadas (al menos una).

    Returns:
        Ángulo (grados) en el centro del hueco más amplio.
    """
    ordered = sorted(normalize_angle_deg(a) for a in angles_deg)
    if not ordered:
        return 0.0
    best_gap = -1.0
    best_angle = 0.0
    for idx, current in enumerate(ordered):
        following = ordered[(idx + 1) % len(ordered)]
        gap = (following - current) % 360.0
        if gap == 0.0:
            gap = 360.0
        if gap > best_gap:
            best_gap = gap
            best_angle = current + gap / 2
    return normalize_angle_deg(best_angle)


def regular_polygon(center: Point, radius: float, sides: int, start_deg: float) -> List[Point]:
    """Vértices de un polígono regular recorrido en sentido antihorario."""
    step = 360.0 / sides
    return [
        endpoint_from_angle_len(center, start_deg + step * idx, radius)
        for idx in range(sides)
    ]


def polygon_radius(side: float, sides: int) -> float:
    """Radio circunscrito de un polígono regular con lado `side`."""
    return side / (2 * math.sin(math.pi / sides))


def polygon_apothem(side: float, sides: int) -> float:
    """Apotema de un polígono regular con lado `side`."""
    return side / (2 * math.tan(math.pi / sides))
