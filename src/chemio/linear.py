"""Lectura de fórmulas lineales como `CH2CH2OH`, `NHBoc` o `PPh3`.

Una fórmula lineal es una cadena acíclica de fragmentos. Cada fragmento es
una abreviatura o un átomo seguido de sus hidrógenos, de los halógenos y
oxígenos carbonílicos que cuelgan de él, de una carga y de un multiplicador.
Los fragmentos sin multiplicador continúan la cadena; los repetidos se unen
todos al átomo anterior (`PPh3`, `N(Me)2` se escribe `NMe2`).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from chemcalc.abbreviations import ABBREVIATIONS, Abbreviation, get_abbreviation
from chemcalc.elements import ELEMENTS
from core.errors import MalformedLinearFormula
from core.model import BondType, Graph, Vertex
from editor.fragments import (
    DEFAULT_BOND_LENGTH,
    add_bound_vertex,
    graft_fragment,
    place_fragment,
)
from editor.journal import Journal
from .smiles import SmilesConverter

logger = logging.getLogger(__name__)

_HYDROGENS_RE = re.compile(r"H(\d*)")
_HALOGEN_RE = re.compile(r"(F|Cl|Br|I)(\d*)")
_OXO_RE = re.compile(r"O(\d*)")
_CHARGE_RE = re.compile(r"(\d*)([+-])")
_COUNT_RE = re.compile(r"\d+")
_MAX_TOKEN = max(len(token) for token in list(ELEMENTS) + list(ABBREVIATIONS))


@dataclass
class LinearFragment:
    """Fragmento de una fórmula lineal.

    Attributes:
        text: Texto original del fragmento (p. ej. `"NH3+"`).
        symbol: Elemento o abreviatura de la cabeza.
        abbreviation: Abreviatura, si la cabeza no es un elemento.
        hydrogens: Hidrógenos escritos; `None` si no se escribieron.
        substituents: Átomos terminales unidos a la cabeza como
            `(símbolo, cantidad, tipo de enlace)`.
        charge: Carga formal de la cabeza.
        tail: Oxígenos simples que continúan la cadena tras la cabeza.
        count: Multiplicador del fragmento.
    """

    text: str
    symbol: str
    abbreviation: Optional[Abbreviation] = None
    hydrogens: Optional[int] = None
    substituents: List[Tuple[str, int, BondType]] = field(default_factory=list)
    charge: int = 0
    count: int = 1
    tail: int = 0


def _number(text: str, default: int = 1) -> int:
    return int(text) if text else default


class LinearFormulaConverter:
    """Convierte fórmulas lineales en grafos dibujables."""

    def __init__(self, bond_length: float = DEFAULT_BOND_LENGTH) -> None:
        self.bond_length = bond_length

    def tokenize(self, text: str, attached: bool = False) -> List[LinearFragment]:
        """Divide una fórmula lineal en fragmentos.

        Args:
            text: Fórmula sin espacios.
            attached: El primer fragmento ya está unido a otro átomo, lo que
                consume una valencia de su cabeza.

        Raises:
            MalformedLinearFormula: Si un carácter no inicia ningún elemento
                ni abreviatura conocidos.
        """
        fragments: List[LinearFragment] = []
        pos = 0
        while pos < len(text):
            start = pos
            token = self._token_at(text, pos)
            if token is None:
                raise MalformedLinearFormula(f"unrecognised symbol {text[pos]!r}", pos)
            pos += len(token)
            abbreviation = get_abbreviation(token)
            fragment = LinearFragment(token, token, abbreviation)
            if abbreviation is None:
                pos = self._atom_suffix(text, pos, fragment, attached or bool(fragments))
            match = _COUNT_RE.match(text, pos)
            if match:
                fragment.count = int(match.group())
                if fragment.count < 1:
                    raise MalformedLinearFormula("multiplier must be positive", pos)
                pos = match.end()
            fragment.text = text[start:pos]
            fragments.append(fragment)
        return fragments

    @staticmethod
    def _token_at(text: str, pos: int) -> Optional[str]:
        for size in range(min(_MAX_TOKEN, len(text) - pos), 0, -1):
            chunk = text[pos : pos + size]
            # Ac, Pr, Am: la abreviatura tiene prioridad sobre el elemento.
            if chunk in ABBREVIATIONS or chunk in ELEMENTS:
                return chunk
        return None

    @staticmethod
    def _atom_suffix(text: str, pos: int, fragment: LinearFragment, bonded: bool) -> int:
        match = _HYDROGENS_RE.match(text, pos)
        if match and fragment.symbol != "H":
            fragment.hydrogens = _number(match.group(1))
            pos = match.end()
        residual = max(ELEMENTS[fragment.symbol].valences, default=0)
        residual -= (fragment.hydrogens or 0) + (1 if bonded else 0)
        while True:
            match = _HALOGEN_RE.match(text, pos)
            if match:
                count = _number(match.group(2))
                fragment.substituents.append((match.group(1), count, BondType.SINGLE))
                residual -= count
                pos = match.end()
                continue
            match = _OXO_RE.match(text, pos)
            if match and residual >= 2:
                count = _number(match.group(1))
                doubles = min(count, residual // 2)
                fragment.substituents.append(("O", doubles, BondType.DOUBLE))
                # CO2Et, SO3H: los oxígenos que no caben como C=O siguen la cadena.
                fragment.tail = count - doubles
                residual -= 2 * doubles
                pos = match.end()
                if fragment.tail:
                    break
                continue
            break
        match = _CHARGE_RE.match(text, pos)
        if match:
            sign = 1 if match.group(2) == "+" else -1
            fragment.charge = sign * _number(match.group(1))
            pos = match.end()
        return pos

    def from_string(self, text: str, attached: bool = False) -> Graph:
        """Construye el grafo de una fórmula lineal.

        El primer átomo del grafo es la cabeza del primer fragmento, que es
        el punto de unión cuando la fórmula es la etiqueta de un vértice.

        Raises:
            MalformedLinearFormula: Si la fórmula está vacía o no se
                reconoce.
        """
        body = text.strip()
        if not body:
            raise MalformedLinearFormula("empty formula", 0)
        fragments = self.tokenize(body, attached)
        graph = Graph()
        journal = Journal(graph)
        last: Optional[int] = None
        for fragment in fragments:
            if last is None:
                last = self._add_fragment(journal, fragment, None)
                repeats = fragment.count - 1
            elif fragment.count == 1:
                last = self._add_fragment(journal, fragment, last)
                continue
            else:
                repeats = fragment.count
            for _ in range(repeats):
                self._add_fragment(journal, fragment, last)
        logger.debug(
            "Parsed linear formula %r: %d fragments, %d atoms",
            body,
            len(fragments),
            graph.vertex_count,
        )
        return graph

    def _add_fragment(
        self, journal: Journal, fragment: LinearFragment, anchor: Optional[int]
    ) -> int:
        if fragment.abbreviation is not None:
            body = SmilesConverter(self.bond_length).from_string(fragment.abbreviation.smiles)
            if anchor is None:
                mapping = place_fragment(journal, body, (0.0, 0.0), 0.0)
            else:
                mapping = graft_fragment(journal, anchor, body, bond_length=self.bond_length)
            return mapping[body.vertex_ids()[0]]

        # Con oxígenos de cola (SO3-), la carga es del último oxígeno.
        head_charge = 0 if fragment.tail else fragment.charge
        vertex = Vertex(0.0, 0.0, fragment.symbol, head_charge, fragment.hydrogens)
        if anchor is None:
            head = journal.add_vertex(vertex)
        else:
            head = add_bound_vertex(journal, anchor, vertex, bond_length=self.bond_length)
        for symbol, count, bond_type in fragment.substituents:
            for _ in range(count):
                add_bound_vertex(
                    journal, head, Vertex(0.0, 0.0, symbol), bond_type, self.bond_length
                )
        for index in range(fragment.tail):
            charge = fragment.charge if index == fragment.tail - 1 else 0
            head = add_bound_vertex(
                journal, head, Vertex(0.0, 0.0, "O", charge), bond_length=self.bond_length
            )
        return head


def label_expansion(
    label: str, bond_length: float = DEFAULT_BOND_LENGTH, attached: bool = False
) -> Graph:
    """Grafo que desarrolla la etiqueta de un vértice.

    Las abreviaturas se leen desde su SMILES; cualquier otra etiqueta se
    interpreta como fórmula lineal. El primer átomo del grafo es el punto
    de unión.

    Raises:
        ConversionError: Si la etiqueta no se puede interpretar.
    """
    abbreviation = get_abbreviation(label)
    if abbreviation is not None:
        return SmilesConverter(bond_length).from_string(abbreviation.smiles)
    return LinearFormulaConverter(bond_length).from_string(label, attached)
