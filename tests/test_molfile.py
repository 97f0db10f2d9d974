"""Pruebas del conversor Molfile V2000 / SDF."""

import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from core.errors import ConversionError, MalformedMolfile
from core.model import BondType, Graph, StereoType, Vertex
from chemio.molfile import MolfileConverter, MolfileOptions, read_sdf, write_sdf

ATOM_TAIL = "  0" * 10

ACETALDEHYDE_ANION = "\n".join(
    [
        "Molecule",
        "  RDKit          2D",
        "",
        "  3  2  0  0  0  0  0  0  0  0999 V2000",
        "    0.0000    0.0000    0.0000 C   0  0" + ATOM_TAIL,
        "    1.2990    0.7500    0.0000 C   0  0" + ATOM_TAIL,
        "    2.5981   -0.0000    0.0000 O   0  5" + ATOM_TAIL,
        "  1  2  6  4",
        "  2  3  1  0",
        "M  END",
    ]
)


def _with_properties(*lines: str) -> str:
    return ACETALDEHYDE_ANION.replace("M  END", "\n".join(lines + ("M  END",)))


class MolfileReadTest(unittest.TestCase):
    def setUp(self):
        self.converter = MolfileConverter()

    def test_reads_atoms_in_file_order(self):
        graph = self.converter.from_string(ACETALDEHYDE_ANION)
        self.assertEqual([v.symbol for v in graph.vertices()], ["C", "C", "O"])
        self.assertEqual(graph.vertex_count, 3)
        self.assertEqual(graph.edge_count, 2)

    def test_y_axis_is_flipped(self):
        graph = self.converter.from_string(ACETALDEHYDE_ANION)
        self.assertAlmostEqual(graph.vertex(2).x, 1.299)
        self.assertAlmostEqual(graph.vertex(2).y, -0.75)
        raw = MolfileConverter(MolfileOptions(flip_y=False)).from_string(ACETALDEHYDE_ANION)
        self.assertAlmostEqual(raw.vertex(2).y, 0.75)

    def test_bond_codes_are_kept_verbatim(self):
        graph = self.converter.from_string(ACETALDEHYDE_ANION)
        edge = graph.edge(1)
        self.assertEqual(edge.bond_type, BondType.SINGLE_OR_AROMATIC)
        self.assertEqual(edge.stereo, StereoType.EITHER)
        self.assertEqual((edge.v1, edge.v2), (1, 2))

    def test_charge_from_atom_block(self):
        graph = self.converter.from_string(ACETALDEHYDE_ANION)
        self.assertEqual(graph.vertex(3).charge, -1)

    def test_charge_property_replaces_atom_block(self):
        graph = self.converter.from_string(_with_properties("M  CHG  1   1   1"))
        self.assertEqual(graph.vertex(1).charge, 1)
        self.assertEqual(graph.vertex(3).charge, 0)

    def test_isotope_property(self):
        graph = self.converter.from_string(_with_properties("M  ISO  1   3  18"))
        self.assertEqual(graph.vertex(3).isotope, 18)

    def test_isotope_property_keeps_atom_block_charges(self):
        graph = self.converter.from_string(_with_properties("M  ISO  1   2  13"))
        self.assertEqual(graph.vertex(2).isotope, 13)
        self.assertEqual(graph.vertex(3).charge, -1)

    def test_unknown_property_lines_are_ignored(self):
        with self.assertLogs("chemio.molfile", level="WARNING"):
            graph = self.converter.from_string(_with_properties("M  RAD  1   1   2"))
        self.assertEqual(graph.vertex_count, 3)

    def test_loose_atom_records(self):
        text = "\n".join(
            [
                "",
                "",
                "",
                "  2  1  0  0  0  0  0  0  0  0999 V2000",
                "0.0 0.0 0.0 N",
                "1.5 0.0 0.0 Cl",
                "  1  2  1  0",
                "M  END",
            ]
        )
        graph = self.converter.from_string(text)
        self.assertEqual([v.symbol for v in graph.vertices()], ["N", "Cl"])

    def test_truncated_file_reports_line(self):
        text = "\n".join(ACETALDEHYDE_ANION.splitlines()[:6])
        with self.assertRaises(MalformedMolfile) as ctx:
            self.converter.from_string(text)
        self.assertEqual(ctx.exception.line, 7)
        self.assertIn("line 7", str(ctx.exception))

    def test_bond_index_out_of_range(self):
        text = ACETALDEHYDE_ANION.replace("  2  3  1  0", "  2  4  1  0")
        with self.assertRaises(MalformedMolfile) as ctx:
            self.converter.from_string(text)
        self.assertEqual(ctx.exception.line, 9)

    def test_unknown_bond_type(self):
        text = ACETALDEHYDE_ANION.replace("  2  3  1  0", "  2  3  9  0")
        with self.assertRaises(MalformedMolfile):
            self.converter.from_string(text)

    def test_duplicate_bond_is_malformed(self):
        text = ACETALDEHYDE_ANION.replace("  2  3  1  0", "  2  1  1  0")
        with self.assertRaises(MalformedMolfile) as ctx:
            self.converter.from_string(text)
        self.assertEqual(ctx.exception.line, 9)

    def test_v3000_is_rejected(self):
        text = ACETALDEHYDE_ANION.replace(" V2000", " V3000")
        with self.assertRaises(MalformedMolfile) as ctx:
            self.converter.from_string(text)
        self.assertEqual(ctx.exception.line, 4)

    def test_malformed_is_conversion_error(self):
        with self.assertRaises(ConversionError):
            self.converter.from_string("")


class MolfileWriteTest(unittest.TestCase):
    def setUp(self):
        self.converter = MolfileConverter()

    def _graph(self) -> Graph:
        graph = Graph()
        c = graph.add_vertex(Vertex(0.0, 0.0))
        n = graph.add_vertex(Vertex(1.5, -0.5, "N", charge=1))
        o = graph.add_vertex(Vertex(3.0, 0.0, "O", isotope=18))
        graph.add_edge(c, n, BondType.DOUBLE_OR_AROMATIC, StereoType.DEFAULT)
        graph.add_edge(n, o, BondType.SINGLE, StereoType.DOWN)
        return graph

    def test_fixed_width_layout(self):
        lines = self.converter.to_string(self._graph()).splitlines()
        self.assertEqual(lines[0], "Molecule name")
        self.assertEqual(lines[3], "  3  2  0  0  0  0  0  0  0  0  1 V2000")
        self.assertEqual(lines[4], "    0.0000    0.0000    0.0000 C   0  0" + ATOM_TAIL)
        self.assertEqual(lines[5], "    1.5000    0.5000    0.0000 N   0  3" + ATOM_TAIL)
        self.assertEqual(lines[7], "  1  2  7  0  0  0  0")
        self.assertEqual(lines[8], "  2  3  1  6  0  0  0")
        self.assertEqual(lines[9], "M  CHG  1   2   1")
        self.assertEqual(lines[10], "M  ISO  1   3  18")
        self.assertEqual(lines[-1], "M  END")

    def test_round_trip(self):
        graph = self._graph()
        again = self.converter.from_string(self.converter.to_string(graph))
        for original, loaded in zip(graph.vertices(), again.vertices()):
            self.assertEqual(original.symbol, loaded.symbol)
            self.assertEqual(original.charge, loaded.charge)
            self.assertEqual(original.isotope, loaded.isotope)
            self.assertAlmostEqual(original.x, loaded.x)
            self.assertAlmostEqual(original.y, loaded.y)
        for original, loaded in zip(graph.edges(), again.edges()):
            self.assertEqual(original.bond_type, loaded.bond_type)
            self.assertEqual(original.stereo, loaded.stereo)

    def test_positions_ignore_deleted_slots(self):
        graph = self._graph()
        graph.remove_vertex(1)
        lines = self.converter.to_string(graph).splitlines()
        self.assertEqual(lines[3][:6], "  2  1")
        self.assertEqual(lines[6], "  1  2  1  6  0  0  0")

    def test_property_lines_hold_eight_entries(self):
        graph = Graph()
        for idx in range(10):
            graph.add_vertex(Vertex(float(idx), 0.0, "O", charge=-1))
        lines = self.converter.to_string(graph).splitlines()
        chg = [line for line in lines if line.startswith("M  CHG")]
        self.assertEqual(len(chg), 2)
        self.assertTrue(chg[0].startswith("M  CHG  8   1  -1"))
        self.assertEqual(chg[1], "M  CHG  2   9  -1  10  -1")

    def test_query_bond_codes_are_written_verbatim(self):
        graph = self.converter.from_string(ACETALDEHYDE_ANION)
        lines = self.converter.to_string(graph).splitlines()
        self.assertIn("  1  2  6  4  0  0  0", lines)
        self.assertIn("    2.5981    0.0000    0.0000 O   0  5" + ATOM_TAIL, lines)

    def test_coordinates_must_fit_their_columns(self):
        graph = Graph()
        graph.add_vertex(Vertex(99999.0, 0.0))
        self.assertIn("99999.0000", self.converter.to_string(graph))
        for x, y in ((100000.0, 0.0), (0.0, 10000.0)):
            with self.subTest(x=x, y=y):
                graph = Graph()
                graph.add_vertex(Vertex(x, y))
                with self.assertRaises(ConversionError):
                    self.converter.to_string(graph)

    def test_too_many_atoms(self):
        graph = Graph()
        for idx in range(1000):
            graph.add_vertex(Vertex(float(idx), 0.0))
        with self.assertRaises(ConversionError):
            self.converter.to_string(graph)


class SdfTest(unittest.TestCase):
    def _pair(self):
        first = Graph()
        a = first.add_vertex(Vertex(0.0, 0.0))
        b = first.add_vertex(Vertex(1.5, 0.0, "O"))
        first.add_edge(a, b)
        second = Graph()
        second.add_vertex(Vertex(0.0, 0.0, "Na", charge=1))
        return first, second

    def test_write_and_read_records(self):
        text = write_sdf(self._pair())
        self.assertEqual(text.count("$$$$"), 2)
        graphs = read_sdf(text)
        self.assertEqual([g.vertex_count for g in graphs], [2, 1])
        self.assertEqual(graphs[1].vertex(1).charge, 1)

    def test_data_fields_are_ignored(self):
        first, _ = self._pair()
        text = MolfileConverter().to_string(first) + ">  <NAME>\nethanol\n\n$$$$\n"
        graphs = read_sdf(text)
        self.assertEqual(len(graphs), 1)
        self.assertEqual(graphs[0].edge_count, 1)

    def test_error_lines_are_relative_to_file(self):
        first, _ = self._pair()
        good = write_sdf([first])
        bad = MolfileConverter().to_string(first).replace("  1  2  1  0", "  1  5  1  0")
        with self.assertRaises(MalformedMolfile) as ctx:
            read_sdf(good + bad)
        self.assertEqual(ctx.exception.line, 16)


if __name__ == "__main__":
    unittest.main()
