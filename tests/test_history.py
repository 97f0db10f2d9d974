"""Pruebas del historial de deshacer/rehacer."""

import math
import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from core.errors import ActionError, DuplicateEdge, InvalidReference
from core.model import BondType, Graph, StereoType, Vertex
from editor.actions import (
    AddBoundVertex,
    AddChain,
    AddDefaultFragment,
    AddEdge,
    AddVertex,
    AttachRing,
    ChangeBond,
    ClearGraph,
    DeleteEdge,
    DeleteSubgraph,
    DeleteVertex,
    FuseRing,
    IncrementCharge,
    MoveVertices,
    RotateVertices,
    SetCharge,
    SetElement,
    SetHydrogenCount,
    StripHydrogens,
    SymmetrizeAtVertex,
)
from editor.history import Direction, History


def _propane(history: History) -> None:
    history.commit(AddDefaultFragment(0.0, 0.0))
    history.commit(AddBoundVertex(2))
    history.seal()


class HistoryTest(unittest.TestCase):
    """Casos de prueba para History."""

    def setUp(self):
        self.graph = Graph()
        self.history = History(self.graph)

    def assertUndoRedoExact(self, action):
        before = self.graph.snapshot()
        self.history.commit(action)
        after = self.graph.snapshot()

        self.assertTrue(self.history.undo())
        self.assertEqual(self.graph.snapshot(), before)
        self.assertTrue(self.history.redo())
        self.assertEqual(self.graph.snapshot(), after)
        self.assertTrue(self.history.undo())
        self.assertEqual(self.graph.snapshot(), before)

    def test_add_vertex_undo_redo(self):
        self.history.commit(AddVertex(10.0, 20.0, "N"))
        self.assertEqual(self.graph.vertex(1).element, "N")
        self.history.undo()
        self.assertTrue(self.graph.is_empty)
        self.history.redo()
        self.assertEqual(self.graph.vertex(1).coords, (10.0, 20.0))

    def test_default_fragment_creates_two_bonded_carbons(self):
        self.history.commit(AddDefaultFragment(0.0, 0.0, 40.0))
        self.assertEqual(self.graph.vertex_count, 2)
        self.assertEqual(self.graph.edge_count, 1)
        self.assertAlmostEqual(self.graph.average_bond_length(), 40.0)

    def test_structural_actions_are_exactly_reversible(self):
        _propane(self.history)
        for action in (
            AddChain(3, 4),
            AttachRing(1, 6, True),
            FuseRing(1, 5),
            AddEdge(1, 3, BondType.SINGLE),
            ChangeBond(1, BondType.DOUBLE, StereoType.DEFAULT),
            DeleteVertex(2),
            DeleteEdge(2),
            DeleteSubgraph((1,), (2,)),
            ClearGraph(),
        ):
            with self.subTest(action=action.kind):
                self.assertUndoRedoExact(action)

    def test_attribute_actions_are_exactly_reversible(self):
        _propane(self.history)
        for action in (
            SetElement(1, "O"),
            SetCharge(2, -1),
            IncrementCharge(2, 2),
            SetHydrogenCount(3, 0),
            MoveVertices({1: (5.0, 5.0), 3: (7.0, -3.0)}),
            RotateVertices((0.0, 0.0), math.pi / 3, (1, 2, 3)),
        ):
            with self.subTest(action=action.kind):
                self.assertUndoRedoExact(action)
                self.history.seal()

    def test_redo_after_delete_keeps_ids(self):
        _propane(self.history)
        self.history.commit(DeleteVertex(3))
        self.history.undo()
        self.assertEqual(self.graph.vertex_ids(), [1, 2, 3])
        self.history.commit(AddBoundVertex(3))
        self.assertEqual(self.graph.vertex_ids(), [1, 2, 3, 4])

    def test_undo_of_additions_releases_ids(self):
        _propane(self.history)
        self.history.commit(AddChain(3, 2))
        self.history.undo()
        self.history.commit(AddVertex(0.0, 100.0))
        self.assertEqual(self.graph.vertex_ids(), [1, 2, 3, 4])

    def test_delete_vertex_drops_neighbours_left_alone(self):
        _propane(self.history)
        self.history.commit(DeleteVertex(3))
        self.assertEqual(self.graph.vertex_ids(), [1, 2])
        self.history.commit(DeleteVertex(1))
        self.assertTrue(self.graph.is_empty)

    def test_strip_hydrogens(self):
        _propane(self.history)
        self.history.commit(AddBoundVertex(3, "H"))
        self.history.commit(StripHydrogens())
        self.assertEqual(self.graph.vertex_ids(), [1, 2, 3])

    def test_moves_coalesce_into_one_step(self):
        _propane(self.history)
        start = self.graph.snapshot()
        first = self.history.commit(MoveVertices({1: (1.0, 1.0)}))
        second = self.history.commit(MoveVertices({1: (2.0, 2.0)}))
        third = self.history.commit(MoveVertices({1: (3.0, 3.0)}))

        self.assertEqual(first.direction, Direction.DO)
        self.assertEqual(second.direction, Direction.UPDATE)
        self.assertIs(third.action, first.action)
        self.assertEqual(self.graph.vertex(1).coords, (3.0, 3.0))

        self.history.undo()
        self.assertEqual(self.graph.snapshot(), start)
        self.history.redo()
        self.assertEqual(self.graph.vertex(1).coords, (3.0, 3.0))

    def test_multi_vertex_drag_stays_compact(self):
        _propane(self.history)
        start = self.graph.snapshot()
        for step in range(1, 201):
            self.history.commit(
                MoveVertices({1: (float(step), 0.0), 2: (0.0, float(step))})
            )

        self.assertEqual(self.history.undo_count, 3)
        self.assertEqual(len(self.history.peek().journal), 2)
        self.history.undo()
        self.assertEqual(self.graph.snapshot(), start)
        self.history.redo()
        self.assertEqual(self.graph.vertex(1).coords, (200.0, 0.0))
        self.assertEqual(self.graph.vertex(2).coords, (0.0, 200.0))

    def test_multi_vertex_rotation_stays_compact(self):
        _propane(self.history)
        start = self.graph.snapshot()
        for _ in range(10):
            self.history.commit(RotateVertices((5.0, 5.0), 0.1, (1, 2, 3)))

        self.assertEqual(len(self.history.peek().journal), 3)
        self.assertAlmostEqual(self.history.peek().angle, 1.0)
        self.history.undo()
        self.assertEqual(self.graph.snapshot(), start)

    def test_undo_all_then_redo_all(self):
        actions = [
            AddDefaultFragment(0.0, 0.0),
            AddBoundVertex(2),
            AttachRing(3, 6, True),
            MoveVertices({1: (-10.0, 5.0)}),
            SetElement(1, "O"),
            IncrementCharge(2, 1),
            ChangeBond(1, BondType.DOUBLE),
            DeleteVertex(4),
            RotateVertices((0.0, 0.0), math.pi / 6, (1, 2, 3)),
            AddChain(1, 2),
        ]
        snapshots = [self.graph.snapshot()]
        for action in actions:
            self.history.commit(action)
            snapshots.append(self.graph.snapshot())
        self.assertEqual(self.history.undo_count, len(actions))

        undone = 0
        while self.history.undo():
            undone += 1
            self.assertEqual(self.graph.snapshot(), snapshots[-1 - undone])
        self.assertEqual(undone, len(actions))
        self.assertTrue(self.graph.is_empty)

        for step in range(1, len(actions) + 1):
            self.assertTrue(self.history.redo())
            self.assertEqual(self.graph.snapshot(), snapshots[step])
        self.assertFalse(self.history.can_redo)

    def test_moves_of_other_vertices_do_not_coalesce(self):
        _propane(self.history)
        self.history.commit(MoveVertices({1: (1.0, 1.0)}))
        entry = self.history.commit(MoveVertices({2: (2.0, 2.0)}))
        self.assertEqual(entry.direction, Direction.DO)
        self.assertEqual(self.history.undo_count, 4)

    def test_increment_charge_accumulates(self):
        _propane(self.history)
        for _ in range(3):
            self.history.commit(IncrementCharge(2, 1))
        self.assertEqual(self.graph.vertex(2).charge, 3)
        self.assertEqual(self.history.peek().delta, 3)
        self.history.undo()
        self.assertEqual(self.graph.vertex(2).charge, 0)

    def test_seal_prevents_coalescing(self):
        _propane(self.history)
        self.history.commit(MoveVertices({1: (1.0, 1.0)}))
        self.history.seal()
        entry = self.history.commit(MoveVertices({1: (2.0, 2.0)}))
        self.assertEqual(entry.direction, Direction.DO)
        self.history.undo()
        self.assertEqual(self.graph.vertex(1).coords, (1.0, 1.0))

    def test_commit_clears_redo(self):
        self.history.commit(AddVertex(0.0, 0.0))
        self.history.undo()
        self.assertTrue(self.history.can_redo)
        self.history.commit(AddVertex(5.0, 5.0))
        self.assertFalse(self.history.can_redo)

    def test_failed_commit_leaves_graph_untouched(self):
        _propane(self.history)
        before = self.graph.snapshot()
        undo_count = self.history.undo_count

        with self.assertRaises(DuplicateEdge):
            self.history.commit(AddEdge(2, 1))
        with self.assertRaises(ActionError):
            self.history.commit(SymmetrizeAtVertex(2, 3))
        with self.assertRaises(InvalidReference):
            self.history.commit(DeleteSubgraph((1, 42), ()))
        with self.assertRaises(ActionError):
            self.history.commit(AddChain(3, 0))

        self.assertEqual(self.graph.snapshot(), before)
        self.assertEqual(self.history.undo_count, undo_count)
        self.history.commit(AddVertex(0.0, 0.0))
        self.assertEqual(self.graph.vertex_ids(), [1, 2, 3, 4])

    def test_failed_merge_keeps_previous_step(self):
        _propane(self.history)
        self.history.commit(MoveVertices({1: (1.0, 1.0)}))
        with self.assertRaises(ActionError):
            self.history.commit(SetHydrogenCount(1, -2))
        self.assertEqual(self.graph.vertex(1).coords, (1.0, 1.0))
        self.history.undo()
        self.assertEqual(self.graph.vertex(1).coords, (0.0, 0.0))

    def test_commit_twice_is_rejected(self):
        action = AddVertex(0.0, 0.0)
        self.history.commit(action)
        with self.assertRaises(ValueError):
            self.history.commit(action)

    def test_empty_undo_and_redo_return_false(self):
        with self.assertLogs("editor.history", level="INFO"):
            self.assertFalse(self.history.undo())
        self.assertFalse(self.history.redo())

    def test_limit_drops_oldest_steps(self):
        history = History(self.graph, limit=2)
        for idx in range(3):
            history.commit(AddVertex(float(idx), 0.0))
        self.assertEqual(history.undo_count, 2)
        history.undo()
        history.undo()
        self.assertFalse(history.undo())
        self.assertEqual(self.graph.vertex_ids(), [1])

    def test_invalid_limit(self):
        with self.assertRaises(ValueError):
            History(self.graph, limit=0)

    def test_listeners_receive_directions(self):
        seen = []
        self.history.add_listener(lambda entry: seen.append(entry.direction))
        self.history.commit(SetCharge(self.graph.add_vertex(Vertex(0.0, 0.0)), 1))
        self.history.commit(SetCharge(1, 2))
        self.history.undo()
        self.history.redo()
        self.assertEqual(
            seen, [Direction.DO, Direction.UPDATE, Direction.UNDO, Direction.REDO]
        )


if __name__ == "__main__":
    unittest.main()
