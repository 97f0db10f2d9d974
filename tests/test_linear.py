"""Pruebas de fórmulas lineales y abreviaturas."""

import os
import sys
import unittest
from collections import Counter

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from chemcalc import ABBREVIATIONS, format_formula, molecular_formula
from chemio.linear import LinearFormulaConverter, label_expansion
from chemio.smiles import SmilesConverter
from core.errors import MalformedLinearFormula
from core.model import BondType


class TokenizeTest(unittest.TestCase):
    def setUp(self):
        self.converter = LinearFormulaConverter()

    def test_fragments(self):
        cases = {
            "Na": ["Na"],
            "Na+": ["Na+"],
            "Ca2+": ["Ca2+"],
            "Boc": ["Boc"],
            "NHBoc": ["NH", "Boc"],
            "NHNH3+": ["NH", "NH3+"],
            "NH2+NH2": ["NH2+", "NH2"],
            "SO3": ["SO3"],
            "PhSO2O": ["Ph", "SO2", "O"],
            "NHAc": ["NH", "Ac"],
            "CH2CH2COOH": ["CH2", "CH2", "CO", "OH"],
            "SiF5-": ["SiF5-"],
            "CCl2CCl3": ["CCl2", "CCl3"],
            "COCH2CF2CH2NH3+": ["CO", "CH2", "CF2", "CH2", "NH3+"],
            "CH3CH2OH": ["CH3", "CH2", "OH"],
            "PPh3": ["P", "Ph3"],
        }
        for text, expected in cases.items():
            with self.subTest(text=text):
                fragments = self.converter.tokenize(text)
                self.assertEqual([fragment.text for fragment in fragments], expected)

    def test_fragment_fields(self):
        ammonium = self.converter.tokenize("NH3+")[0]
        self.assertEqual((ammonium.hydrogens, ammonium.charge), (3, 1))
        calcium = self.converter.tokenize("Ca2+")[0]
        self.assertEqual((calcium.charge, calcium.count), (2, 1))
        phenyls = self.converter.tokenize("PPh3")[1]
        self.assertEqual((phenyls.abbreviation.symbol, phenyls.count), ("Ph", 3))

    def test_attached_head_has_one_valence_less(self):
        texts = [fragment.text for fragment in self.converter.tokenize("COOH")]
        self.assertEqual(texts, ["COO", "H"])
        texts = [fragment.text for fragment in self.converter.tokenize("COOH", attached=True)]
        self.assertEqual(texts, ["CO", "OH"])

    def test_oxygens_beyond_valence_continue_the_chain(self):
        ester = self.converter.tokenize("CO2Et", attached=True)
        self.assertEqual([fragment.text for fragment in ester], ["CO2", "Et"])
        self.assertEqual(ester[0].tail, 1)

    def test_unknown_symbol_offset(self):
        with self.assertRaises(MalformedLinearFormula) as ctx:
            self.converter.tokenize("CH2Qx")
        self.assertEqual(ctx.exception.offset, 3)
        with self.assertRaises(MalformedLinearFormula):
            self.converter.from_string("   ")


class LinearGraphTest(unittest.TestCase):
    def setUp(self):
        self.converter = LinearFormulaConverter()

    def test_butanol(self):
        graph = self.converter.from_string("CH3CH2CH2CH2OH")
        self.assertEqual(graph.vertex_count, 5)
        self.assertEqual(graph.edge_count, 4)
        self.assertEqual(
            Counter(edge.bond_type for edge in graph.edges()), Counter({BondType.SINGLE: 4})
        )
        self.assertEqual(format_formula(molecular_formula(graph)), "C4H10O")

    def test_repeated_fragments_share_the_previous_atom(self):
        graph = self.converter.from_string("PPh3")
        self.assertEqual(graph.degree(1), 3)
        self.assertEqual(format_formula(molecular_formula(graph)), "C18H15P")
        graph = self.converter.from_string("NMe2")
        self.assertEqual(format_formula(molecular_formula(graph)), "C2H7N")

    def test_carbonyl_oxygens_are_double_bonded(self):
        graph = self.converter.from_string("CH3COCH3")
        self.assertEqual(
            Counter(edge.bond_type for edge in graph.edges())[BondType.DOUBLE], 1
        )
        self.assertEqual(format_formula(molecular_formula(graph)), "C3H6O")

    def test_ester_tail_carries_the_charge(self):
        graph = self.converter.from_string("CO2-", attached=True)
        charges = {vertex.symbol: vertex.charge for vertex in graph.vertices() if vertex.charge}
        self.assertEqual(charges, {"O": -1})
        self.assertEqual(graph.vertex(1).charge, 0)

    def test_bond_length(self):
        graph = LinearFormulaConverter(bond_length=25.0).from_string("CH3CH2OH")
        self.assertAlmostEqual(graph.average_bond_length(), 25.0)


class AbbreviationTest(unittest.TestCase):
    def test_every_abbreviation_parses(self):
        smiles = SmilesConverter()
        for symbol, abbreviation in ABBREVIATIONS.items():
            with self.subTest(symbol=symbol):
                self.assertEqual(abbreviation.symbol, symbol)
                graph = smiles.from_string(abbreviation.smiles)
                self.assertGreater(graph.vertex_count, 0)

    def test_label_expansion_prefers_abbreviations(self):
        acetyl = label_expansion("Ac")
        self.assertEqual(acetyl.vertex(1).element, "C")
        self.assertEqual(format_formula(molecular_formula(acetyl)), "C2H4O")

        ethanol = label_expansion("CH2OH", attached=True)
        self.assertEqual(ethanol.vertex(1).h_count, 2)
        self.assertEqual(ethanol.vertex_count, 2)


if __name__ == "__main__":
    unittest.main()
