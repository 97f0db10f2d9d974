"""Conversión entre `Graph` y cadenas SMILES.

La lectura recorre la cadena una sola vez con un cursor de átomo actual, una
pila de ramas y una tabla de cierres de anillo pendientes. Cada átomo nuevo
se coloca con los constructores de fragmentos para que el resultado se
pueda dibujar directamente.

La escritura hace un recorrido en profundidad por componente y produce un
SMILES válido, no canónico (para la forma canónica ver
`chemio.rdkit_io.canonical_smiles`).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from chemcalc.elements import ELEMENTS
from chemcalc.valence import implicit_h_count
from core.errors import ConversionError, MalformedSmiles
from core.model import BondType, Graph, Vertex
from editor.fragments import DEFAULT_BOND_LENGTH, add_bound_vertex
from editor.journal import Journal

logger = logging.getLogger(__name__)

ORGANIC_SUBSET = ("B", "C", "N", "O", "P", "S", "F", "Cl", "Br", "I")
AROMATIC_SUBSET = ("B", "C", "N", "O", "P", "S", "Se", "As")

_ORGANIC_RE = re.compile(r"Cl|Br|[BCNOPSFI]")
_AROMATIC_RE = re.compile(r"[bcnops]")
_BRACKET_RE = re.compile(
    r"\[(?P<isotope>\d+)?"
    r"(?P<symbol>se|as|[bcnops]|[A-Z][a-z]?)"
    r"(?P<chirality>@@?(?:TH[12]|AL[12]|SP[123])?)?"
    r"(?P<hydrogens>H\d*)?"
    r"(?P<charge>\+\d+|-\d+|\++|-+)?"
    r"(?::(?P<atom_class>\d+))?\]"
)
_RING_LABEL_RE = re.compile(r"%(\d\d)|(\d)")

_BOND_SYMBOLS = {
    "-": BondType.SINGLE,
    "=": BondType.DOUBLE,
    "#": BondType.TRIPLE,
    ":": BondType.AROMATIC,
    # Los enlaces direccionales (cis/trans) se tratan como simples.
    "/": BondType.SINGLE,
    "\\": BondType.SINGLE,
}


@dataclass
class _PendingBond:
    bond_type: BondType
    offset: int


@dataclass
class _RingOpening:
    vertex_id: int
    bond: Optional[_PendingBond]
    offset: int


class _SmilesReader:
    """Estado de una lectura; se crea uno por cadena."""

    def __init__(self, text: str, bond_length: float) -> None:
        self.text = text
        self.bond_length = bond_length
        self.graph = Graph()
        self.journal = Journal(self.graph)
        self.current: Optional[int] = None
        self.branches: List[Tuple[Optional[int], int]] = []
        self.rings: Dict[int, _RingOpening] = {}
        self.bond: Optional[_PendingBond] = None
        self.aromatic: Set[int] = set()

    def read(self) -> Graph:
        text = self.text
        pos = 0
        while pos < len(text):
            char = text[pos]
            if char == "(":
                if self.current is None:
                    raise MalformedSmiles("branch without preceding atom", pos)
                self._forbid_pending_bond()
                self.branches.append((self.current, pos))
                pos += 1
            elif char == ")":
                if not self.branches:
                    raise MalformedSmiles("unmatched ')'", pos)
                self._forbid_pending_bond()
                self.current, _ = self.branches.pop()
                pos += 1
            elif char == ".":
                self._forbid_pending_bond()
                if self.branches:
                    raise MalformedSmiles("component separator inside branch", pos)
                self.current = None
                pos += 1
            elif char in _BOND_SYMBOLS:
                if self.bond is not None:
                    raise MalformedSmiles("consecutive bond symbols", pos)
                if self.current is None:
                    raise MalformedSmiles(f"bond '{char}' without preceding atom", pos)
                self.bond = _PendingBond(_BOND_SYMBOLS[char], pos)
                pos += 1
            elif char == "$":
                raise MalformedSmiles("quadruple bonds are not supported", pos)
            elif char == "%" or char.isdigit():
                pos = self._ring_label(pos)
            elif char == "[":
                pos = self._bracket_atom(pos)
            else:
                match = _ORGANIC_RE.match(text, pos)
                if match:
                    self._attach(Vertex(0.0, 0.0, match.group()), False, pos)
                    pos = match.end()
                    continue
                match = _AROMATIC_RE.match(text, pos)
                if match:
                    self._attach(Vertex(0.0, 0.0, match.group().upper()), True, pos)
                    pos = match.end()
                    continue
                raise MalformedSmiles(f"unrecognised symbol {char!r}", pos)

        if self.bond is not None:
            raise MalformedSmiles("bond symbol at end of input", self.bond.offset)
        if self.branches:
            raise MalformedSmiles("unclosed '('", self.branches[-1][1])
        if self.rings:
            first = min(self.rings.values(), key=lambda opening: opening.offset)
            raise MalformedSmiles("unmatched ring closure", first.offset)
        return self.graph

    def _forbid_pending_bond(self) -> None:
        if self.bond is not None:
            raise MalformedSmiles("bond symbol without following atom", self.bond.offset)

    def _implied_bond(self, a: int, b: int) -> BondType:
        if a in self.aromatic and b in self.aromatic:
            return BondType.AROMATIC
        return BondType.SINGLE

    def _attach(self, vertex: Vertex, aromatic: bool, pos: int) -> None:
        if self.current is None:
            rect = self.graph.bounding_rect()
            if rect is not None:
                vertex.x = rect.x2 + 2 * self.bond_length
                vertex.y = rect.center[1]
            new_id = self.journal.add_vertex(vertex)
        else:
            if aromatic and self.current in self.aromatic and self.bond is None:
                bond_type = BondType.AROMATIC
            else:
                bond_type = self.bond.bond_type if self.bond else BondType.SINGLE
            new_id = add_bound_vertex(
                self.journal, self.current, vertex, bond_type, self.bond_length
            )
        if aromatic:
            self.aromatic.add(new_id)
        self.bond = None
        self.current = new_id

    def _bracket_atom(self, pos: int) -> int:
        match = _BRACKET_RE.match(self.text, pos)
        if not match:
            raise MalformedSmiles("malformed bracket atom", pos)
        symbol = match.group("symbol")
        aromatic = symbol[0].islower()
        if aromatic:
            symbol = symbol.capitalize()
        if symbol not in ELEMENTS:
            raise MalformedSmiles(f"unknown element {symbol!r}", pos + 1)
        vertex = Vertex(0.0, 0.0, symbol)
        if match.group("isotope"):
            vertex.isotope = int(match.group("isotope"))
        hydrogens = match.group("hydrogens")
        vertex.h_count = (int(hydrogens[1:]) if len(hydrogens) > 1 else 1) if hydrogens else 0
        vertex.charge = _parse_charge(match.group("charge"))
        self._attach(vertex, aromatic, pos)
        return match.end()

    def _ring_label(self, pos: int) -> int:
        match = _RING_LABEL_RE.match(self.text, pos)
        if not match:
            raise MalformedSmiles("malformed ring label", pos)
        if self.current is None:
            raise MalformedSmiles("ring label without preceding atom", pos)
        label = int(match.group(1) or match.group(2))
        opening = self.rings.pop(label, None)
        if opening is None:
            self.rings[label] = _RingOpening(self.current, self.bond, pos)
            self.bond = None
            return match.end()

        if opening.vertex_id == self.current:
            raise MalformedSmiles("ring closure to the same atom", pos)
        if self.graph.find_edge(opening.vertex_id, self.current) is not None:
            raise MalformedSmiles("ring closure duplicates an existing bond", pos)
        bond_type = self._implied_bond(opening.vertex_id, self.current)
        explicit = [bond for bond in (opening.bond, self.bond) if bond is not None]
        if explicit:
            if len(explicit) == 2 and explicit[0].bond_type != explicit[1].bond_type:
                raise MalformedSmiles("conflicting ring closure bonds", pos)
            bond_type = explicit[0].bond_type
        self.journal.add_edge(opening.vertex_id, self.current, bond_type)
        self.bond = None
        return match.end()


def _parse_charge(text: Optional[str]) -> int:
    if not text:
        return 0
    sign = 1 if text[0] == "+" else -1
    if len(text) > 1 and text[1].isdigit():
        return sign * int(text[1:])
    return sign * len(text)


class SmilesConverter:
    """Conversor entre `Graph` y SMILES."""

    extensions = (".smi",)

    def __init__(self, bond_length: float = DEFAULT_BOND_LENGTH) -> None:
        self.bond_length = bond_length

    def from_string(self, text: str) -> Graph:
        """Lee una cadena SMILES.

        Args:
            text: SMILES. Se ignoran los espacios iniciales y todo lo que
                sigue al primer espacio (el nombre en archivos `.smi`).

        Returns:
            Grafo nuevo con coordenadas de dibujo.

        Raises:
            MalformedSmiles: Con la posición (base 0) del carácter culpable.
        """
        body = text.lstrip()
        leading = len(text) - len(body)
        body = body.split(None, 1)[0] if body else ""
        try:
            graph = _SmilesReader(body, self.bond_length).read()
        except MalformedSmiles as exc:
            if leading:
                raise MalformedSmiles(exc.reason, exc.offset + leading) from None
            raise
        logger.debug(
            "Parsed SMILES: %d atoms, %d bonds", graph.vertex_count, graph.edge_count
        )
        return graph

    def to_string(self, graph: Graph) -> str:
        """Escribe el grafo como SMILES (válido, no canónico).

        Raises:
            ConversionError: Si hay enlaces de consulta o etiquetas que no
                son elementos.
        """
        for edge in graph.edges():
            if edge.bond_type.is_query:
                raise ConversionError(
                    f"Bond {edge.id} of type {edge.bond_type.name} has no SMILES symbol"
                )
        writer = _SmilesWriter(graph)
        return ".".join(writer.component(ids[0]) for ids in graph.components())


class _SmilesWriter:
    def __init__(self, graph: Graph) -> None:
        self.graph = graph
        self.aromatic = {
            vertex.id
            for vertex in graph.vertices()
            if vertex.symbol in AROMATIC_SUBSET
            and any(e.bond_type == BondType.AROMATIC for e in graph.incident_edges(vertex.id))
        }
        self.labels: Dict[int, int] = {}

    def component(self, root: int) -> str:
        graph = self.graph
        # Primera pasada: árbol de recorrido y enlaces de cierre de anillo.
        children: Dict[int, List[Tuple[int, int]]] = {root: []}
        parent_edge: Dict[int, Optional[int]] = {root: None}
        openings: Dict[int, List[int]] = {}
        closings: Dict[int, List[int]] = {}
        handled: Set[int] = set()
        stack = [(root, iter(graph.incident_edges(root)))]
        while stack:
            vertex_id, edges = stack[-1]
            for edge in edges:
                if edge.id in handled:
                    continue
                handled.add(edge.id)
                other = edge.other(vertex_id)
                if other in parent_edge:
                    openings.setdefault(other, []).append(edge.id)
                    closings.setdefault(vertex_id, []).append(edge.id)
                    continue
                parent_edge[other] = edge.id
                children[vertex_id].append((other, edge.id))
                children[other] = []
                stack.append((other, iter(graph.incident_edges(other))))
                break
            else:
                stack.pop()

        # Segunda pasada: emisión en preorden.
        out: List[str] = []
        pending: List[object] = [(root, None)]
        while pending:
            item = pending.pop()
            if isinstance(item, str):
                out.append(item)
                continue
            vertex_id, edge_id = item
            if edge_id is not None:
                out.append(self._bond_symbol(edge_id))
            out.append(self._atom_token(vertex_id))
            out.append(self._ring_digits(vertex_id, openings, closings))
            kids = children[vertex_id]
            if not kids:
                continue
            pending.append(kids[-1])
            for kid in reversed(kids[:-1]):
                pending.append(")")
                pending.append(kid)
                pending.append("(")
        return "".join(out)

    def _ring_digits(self, vertex_id: int, openings, closings) -> str:
        parts: List[str] = []
        for edge_id in closings.get(vertex_id, []):
            label = self.labels.pop(edge_id)
            parts.append(_format_label(label))
        for edge_id in openings.get(vertex_id, []):
            used = set(self.labels.values())
            label = 1
            while label in used:
                label += 1
            self.labels[edge_id] = label
            parts.append(self._bond_symbol(edge_id) + _format_label(label))
        return "".join(parts)

    def _bond_symbol(self, edge_id: int) -> str:
        edge = self.graph.edge(edge_id)
        both_aromatic = edge.v1 in self.aromatic and edge.v2 in self.aromatic
        if edge.bond_type == BondType.DOUBLE:
            return "="
        if edge.bond_type == BondType.TRIPLE:
            return "#"
        if edge.bond_type == BondType.AROMATIC:
            return "" if both_aromatic else ":"
        return "-" if both_aromatic else ""

    def _atom_token(self, vertex_id: int) -> str:
        vertex = self.graph.vertex(vertex_id)
        symbol = vertex.symbol
        if symbol not in ELEMENTS:
            raise ConversionError(f"Label {symbol!r} of vertex {vertex_id} is not an element")
        aromatic = vertex_id in self.aromatic
        written = symbol.lower() if aromatic else symbol
        if (
            symbol in ORGANIC_SUBSET
            and not vertex.charge
            and not vertex.isotope
            and vertex.h_count is None
        ):
            return written
        parts = ["[", str(vertex.isotope) if vertex.isotope else "", written]
        hydrogens = implicit_h_count(self.graph, vertex_id)
        if hydrogens:
            parts.append("H" if hydrogens == 1 else f"H{hydrogens}")
        if vertex.charge:
            sign = "+" if vertex.charge > 0 else "-"
            magnitude = abs(vertex.charge)
            parts.append(sign if magnitude == 1 else f"{sign}{magnitude}")
        parts.append("]")
        return "".join(parts)


def _format_label(label: int) -> str:
    return str(label) if label < 10 else f"%{label:02d}"
