"""Persistencia del grafo en archivos `.msk` (JSON).

Este formato propio es sin pérdidas: conserva IDs, ranuras eliminadas y
todos los campos opcionales, de modo que un documento recargado continúa
asignando los mismos IDs que antes de guardarse.
"""

from __future__ import annotations

import json
from typing import Any, Dict

from core.errors import ConversionError, GraphError
from core.model import BondType, Edge, Graph, StereoType, Vertex

APPLICATION = "molsketch"


class NativeConverter:
    """Gestiona el guardado y carga de documentos `.msk`."""

    VERSION = "0.1.0"
    extensions = (".msk",)

    @staticmethod
    def to_dict(graph: Graph) -> Dict[str, Any]:
        """Serializa el grafo en un diccionario.

        Args:
            graph: Grafo a serializar.

        Returns:
            Diccionario serializable con vértices, enlaces y contadores.

        Side Effects:
            No tiene efectos laterales; solo lee el grafo.
        """
        vertices_data = [
            {
                "id": vertex.id,
                "x": vertex.x,
                "y": vertex.y,
                "element": vertex.element,
                "charge": vertex.charge,
                "h_count": vertex.h_count,
                "isotope": vertex.isotope,
            }
            for vertex in graph.vertices()
        ]
        edges_data = [
            {
                "id": edge.id,
                "v1": edge.v1,
                "v2": edge.v2,
                "bond_type": int(edge.bond_type),
                "stereo": int(edge.stereo),
            }
            for edge in graph.edges()
        ]
        next_vertex_slot, next_edge_slot = graph.mark()
        return {
            "application": APPLICATION,
            "version": NativeConverter.VERSION,
            "graph": {
                "vertices": vertices_data,
                "edges": edges_data,
                "_vertex_slots": next_vertex_slot,
                "_edge_slots": next_edge_slot,
            },
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Graph:
        """Reconstruye un grafo desde un diccionario.

        Args:
            data: Diccionario de estado (resultado de `to_dict`).

        Raises:
            ConversionError: Si el documento no es de molsketch o está dañado.
        """
        if not isinstance(data, dict) or data.get("application") != APPLICATION:
            raise ConversionError("Not a valid molsketch document")

        graph = Graph()
        graph_data = data.get("graph", {})
        try:
            for vertex_d in sorted(graph_data.get("vertices", []), key=lambda d: d["id"]):
                graph.restore_vertex(
                    Vertex(
                        x=float(vertex_d["x"]),
                        y=float(vertex_d["y"]),
                        element=vertex_d.get("element"),
                        charge=int(vertex_d.get("charge", 0)),
                        h_count=vertex_d.get("h_count"),
                        isotope=vertex_d.get("isotope"),
                        id=int(vertex_d["id"]),
                    )
                )
            for edge_d in sorted(graph_data.get("edges", []), key=lambda d: d["id"]):
                graph.restore_edge(
                    Edge(
                        v1=int(edge_d["v1"]),
                        v2=int(edge_d["v2"]),
                        bond_type=BondType(edge_d.get("bond_type", 1)),
                        stereo=StereoType(edge_d.get("stereo", 0)),
                        id=int(edge_d["id"]),
                    )
                )
        except (KeyError, TypeError, ValueError, GraphError) as exc:
            raise ConversionError(f"Corrupted molsketch document: {exc}") from exc

        graph.reserve(
            (
                int(graph_data.get("_vertex_slots", 0)),
                int(graph_data.get("_edge_slots", 0)),
            )
        )
        return graph

    def to_string(self, graph: Graph) -> str:
        return json.dumps(self.to_dict(graph), indent=2)

    def from_string(self, text: str) -> Graph:
        """Lee un documento `.msk`.

        Raises:
            ConversionError: Si el texto no es JSON válido o no es un
                documento de molsketch.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConversionError(f"Invalid JSON at line {exc.lineno}: {exc.msg}") from exc
        return self.from_dict(data)
