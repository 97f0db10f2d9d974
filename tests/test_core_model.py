"""Pruebas unitarias para el grafo molecular."""

import math
import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from core.errors import DuplicateEdge, GraphError, InvalidReference
from core.model import BondType, Graph, Rect, StereoType, Vertex


def _ethanol() -> Graph:
    graph = Graph()
    c1 = graph.add_vertex(Vertex(0.0, 0.0))
    c2 = graph.add_vertex(Vertex(40.0, 0.0))
    o = graph.add_vertex(Vertex(60.0, 35.0, "O"))
    graph.add_edge(c1, c2)
    graph.add_edge(c2, o)
    return graph


class GraphTest(unittest.TestCase):
    """Casos de prueba para Graph."""

    def test_add_vertex_and_edge(self):
        """Verifica que los IDs se asignan en orden de inserción."""
        graph = Graph()
        a1 = graph.add_vertex(Vertex(0.0, 0.0))
        a2 = graph.add_vertex(Vertex(1.0, 0.0, "O"))
        bond = graph.add_edge(a1, a2, BondType.DOUBLE)

        self.assertEqual((a1, a2, bond), (1, 2, 1))
        self.assertEqual(graph.vertex_count, 2)
        self.assertEqual(graph.edge_count, 1)
        self.assertEqual(graph.edge(bond).bond_type.order, 2)
        self.assertEqual(graph.vertex(a1).symbol, "C")
        self.assertEqual(graph.neighbors(a1), [a2])

    def test_add_edge_rejects_self_loop_and_missing_vertex(self):
        graph = Graph()
        a1 = graph.add_vertex(Vertex(0.0, 0.0))
        with self.assertRaises(InvalidReference):
            graph.add_edge(a1, a1)
        with self.assertRaises(InvalidReference):
            graph.add_edge(a1, 99)
        self.assertEqual(graph.edge_count, 0)

    def test_add_edge_rejects_duplicate_pair(self):
        graph = Graph()
        a1 = graph.add_vertex(Vertex(0.0, 0.0))
        a2 = graph.add_vertex(Vertex(1.0, 0.0))
        first = graph.add_edge(a1, a2)
        with self.assertRaises(DuplicateEdge) as ctx:
            graph.add_edge(a2, a1, BondType.TRIPLE)
        self.assertEqual(ctx.exception.edge_id, first)
        self.assertEqual(graph.edge(first).bond_type, BondType.SINGLE)

    def test_invalid_reference_is_key_error(self):
        graph = Graph()
        with self.assertRaises(KeyError):
            graph.vertex(1)
        with self.assertRaises(InvalidReference):
            graph.edge(0)

    def test_remove_vertex_removes_incident_edges(self):
        graph = _ethanol()
        vertex, edges = graph.remove_vertex(2)

        self.assertEqual(vertex.id, 2)
        self.assertEqual([edge.id for edge in edges], [1, 2])
        self.assertEqual(graph.vertex_count, 2)
        self.assertEqual(graph.edge_count, 0)
        self.assertFalse(graph.has_vertex(2))
        self.assertEqual(graph.degree(1), 0)

    def test_ids_are_not_reused_after_removal(self):
        graph = _ethanol()
        graph.remove_vertex(3)
        new_id = graph.add_vertex(Vertex(5.0, 5.0))
        self.assertEqual(new_id, 4)
        self.assertEqual(graph.vertex_ids(), [1, 2, 4])
        self.assertEqual(graph.index_of(4), 2)

    def test_restore_puts_objects_back_in_their_slots(self):
        graph = _ethanol()
        before = graph.snapshot()
        vertex, edges = graph.remove_vertex(2)
        graph.restore_vertex(vertex)
        for edge in edges:
            graph.restore_edge(edge)
        self.assertEqual(graph.snapshot(), before)
        self.assertEqual(graph.incident_edges(2)[0].id, 1)

    def test_restore_into_occupied_slot_fails(self):
        graph = _ethanol()
        with self.assertRaises(GraphError):
            graph.restore_vertex(Vertex(0.0, 0.0, id=1))

    def test_mark_and_truncate_undo_additions(self):
        graph = _ethanol()
        mark = graph.mark()
        new_id = graph.add_vertex(Vertex(80.0, 0.0))
        graph.add_edge(3, new_id)
        with self.assertRaises(GraphError):
            graph.truncate(mark)

        graph.remove_vertex(new_id)
        graph.truncate(mark)
        self.assertEqual(graph.add_vertex(Vertex(0.0, 0.0)), new_id)

    def test_update_vertex_only_touches_given_fields(self):
        graph = _ethanol()
        graph.update_vertex(3, charge=-1)
        vertex = graph.vertex(3)
        self.assertEqual((vertex.element, vertex.charge), ("O", -1))

        graph.update_vertex(3, element=None, isotope=18)
        self.assertIsNone(vertex.element)
        self.assertEqual(vertex.isotope, 18)

    def test_update_edge(self):
        graph = _ethanol()
        graph.update_edge(1, bond_type=BondType.TRIPLE, stereo=StereoType.UP)
        edge = graph.edge(1)
        self.assertEqual(edge.bond_type, BondType.TRIPLE)
        self.assertEqual(edge.stereo, StereoType.UP)

    def test_bounding_rect(self):
        self.assertIsNone(Graph().bounding_rect())
        rect = _ethanol().bounding_rect()
        self.assertEqual(rect, Rect(0.0, 0.0, 60.0, 35.0))
        self.assertEqual(rect.center, (30.0, 17.5))

    def test_rotation_about_midpoint(self):
        graph = Graph()
        a = graph.add_vertex(Vertex(0.0, 0.0))
        b = graph.add_vertex(Vertex(50.0, 0.0))
        graph.apply_rotation((25.0, 0.0), math.pi)

        self.assertAlmostEqual(graph.vertex(a).x, 50.0)
        self.assertAlmostEqual(graph.vertex(a).y, 0.0)
        self.assertAlmostEqual(graph.vertex(b).x, 0.0)
        self.assertAlmostEqual(graph.vertex(b).y, 0.0)

    def test_rotation_of_subset(self):
        graph = _ethanol()
        graph.apply_rotation((0.0, 0.0), math.pi / 2, [2])
        self.assertAlmostEqual(graph.vertex(2).x, 0.0)
        self.assertAlmostEqual(graph.vertex(2).y, 40.0)
        self.assertEqual(graph.vertex(3).coords, (60.0, 35.0))

    def test_average_bond_length(self):
        self.assertEqual(Graph().average_bond_length(), 1.54)
        graph = Graph()
        a = graph.add_vertex(Vertex(0.0, 0.0))
        b = graph.add_vertex(Vertex(3.0, 4.0))
        graph.add_edge(a, b)
        self.assertAlmostEqual(graph.average_bond_length(), 5.0)

    def test_components(self):
        graph = _ethanol()
        lone = graph.add_vertex(Vertex(100.0, 100.0, "Na"))
        self.assertEqual(graph.components(), [[1, 2, 3], [lone]])
        self.assertEqual(graph.connected_component(3), [1, 2, 3])

    def test_copy_is_independent_and_keeps_ids(self):
        graph = _ethanol()
        graph.remove_vertex(1)
        clone = graph.copy()
        clone.vertex(2).x = 999.0

        self.assertEqual(graph.vertex(2).x, 40.0)
        self.assertEqual(clone.vertex_ids(), [2, 3])
        self.assertEqual(clone.add_vertex(Vertex(0.0, 0.0)), 4)

    def test_replace_with_keeps_identity(self):
        graph = _ethanol()
        other = Graph()
        other.add_vertex(Vertex(1.0, 1.0, "N"))
        target = graph
        graph.replace_with(other)
        self.assertIs(graph, target)
        self.assertEqual(graph.vertex_count, 1)
        self.assertEqual(graph.vertex(1).element, "N")

    def test_validate_allows_hypervalent_phosphorus(self):
        graph = Graph()
        p = graph.add_vertex(Vertex(0.0, 0.0, "P"))
        o_dbl = graph.add_vertex(Vertex(0.0, 1.0, "O"))
        o1 = graph.add_vertex(Vertex(-1.0, 0.0, "O"))
        o2 = graph.add_vertex(Vertex(-1.0, -1.0, "O"))
        c = graph.add_vertex(Vertex(1.0, 0.0))
        graph.add_edge(p, o_dbl, BondType.DOUBLE)
        graph.add_edge(p, o1)
        graph.add_edge(p, o2)
        graph.add_edge(p, c)
        self.assertNotIn(p, graph.validate())

    def test_validate_still_flags_overvalent_carbon(self):
        graph = Graph()
        c = graph.add_vertex(Vertex(0.0, 0.0))
        for k in range(5):
            graph.add_edge(c, graph.add_vertex(Vertex(float(k), 1.0, "H")))
        self.assertIn(c, graph.validate())


if __name__ == "__main__":
    unittest.main()
