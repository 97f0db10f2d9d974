"""Lectura y escritura de tablas de conexión MDL (Molfile V2000 y SDF).

El formato es de ancho fijo: tres líneas de cabecera, una línea de conteos,
el bloque de átomos, el bloque de enlaces y un bloque de propiedades que
termina en `M  END`. Los códigos de tipo de enlace y estereoquímica se copian
sin traducción a `BondType`/`StereoType`, cuyos valores son los del formato.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from chemcalc.elements import get_element
from core.errors import ConversionError, GraphError, MalformedMolfile
from core.model import BondType, Graph, StereoType, Vertex

logger = logging.getLogger(__name__)

MAX_ENTRIES = 999
# Código de carga del bloque de átomos -> carga formal. El código 4
# (radical doblete) no representa una carga y se ignora.
CHARGE_FROM_CODE = {0: 0, 1: 3, 2: 2, 3: 1, 4: 0, 5: -1, 6: -2, 7: -3}
CODE_FROM_CHARGE = {3: 1, 2: 2, 1: 3, 0: 0, -1: 5, -2: 6, -3: 7}
_PROPERTY_GROUP = 8

_LOOSE_ATOM_RE = re.compile(
    r"^\s*(-?\d+(?:\.\d+)?)\s+(-?\d+(?:\.\d+)?)\s+(-?\d+(?:\.\d+)?)\s+(\S{1,3})"
)
_SDF_DELIMITER = "$$$$"


@dataclass
class MolfileOptions:
    """Opciones de escritura/lectura del Molfile.

    Attributes:
        title: Línea 1 de la cabecera (nombre de la molécula).
        program: Línea 2 de la cabecera.
        comment: Línea 3 de la cabecera.
        flip_y: Invierte el eje y (en el lienzo crece hacia abajo, en el
            Molfile hacia arriba).
        precision: Decimales de las coordenadas.
    """

    title: str = "Molecule name"
    program: str = "Generated by molsketch"
    comment: str = "[no comment provided]"
    flip_y: bool = True
    precision: int = 4


def _int_field(line: str, start: int, end: int, line_no: int, what: str, default=None) -> int:
    raw = line[start:end].strip()
    if not raw:
        if default is not None:
            return default
        raise MalformedMolfile(f"missing {what}", line_no)
    try:
        return int(raw)
    except ValueError:
        raise MalformedMolfile(f"non-numeric {what} {raw!r}", line_no) from None


class MolfileConverter:
    """Conversor entre `Graph` y texto Molfile V2000."""

    extensions = (".mol", ".sdf")

    def __init__(self, options: Optional[MolfileOptions] = None) -> None:
        self.options = options or MolfileOptions()

    # ------------------------------------------------------------------
    # Lectura
    # ------------------------------------------------------------------
    def from_string(self, text: str) -> Graph:
        """Construye un grafo a partir de un Molfile.

        Args:
            text: Contenido completo del archivo.

        Returns:
            Grafo nuevo con los átomos en el orden del archivo.

        Raises:
            MalformedMolfile: Con el número de línea (base 1) del problema.
        """
        graph = self._parse(text.splitlines(), 0)
        logger.debug(
            "Parsed molfile: %d atoms, %d bonds", graph.vertex_count, graph.edge_count
        )
        return graph

    def _parse(self, lines: List[str], first_line: int) -> Graph:
        def line_at(idx: int) -> str:
            if idx >= len(lines):
                raise MalformedMolfile("unexpected end of data", first_line + idx + 1)
            return lines[idx]

        counts = line_at(3)
        counts_no = first_line + 4
        if "V3000" in counts:
            raise MalformedMolfile("V3000 connection tables are not supported", counts_no)
        atom_count = _int_field(counts, 0, 3, counts_no, "atom count")
        bond_count = _int_field(counts, 3, 6, counts_no, "bond count")

        graph = Graph()
        ids: List[int] = []
        for idx in range(4, 4 + atom_count):
            vertex = self._parse_atom(line_at(idx), first_line + idx + 1)
            ids.append(graph.add_vertex(vertex))

        bond_start = 4 + atom_count
        for idx in range(bond_start, bond_start + bond_count):
            self._parse_bond(graph, ids, line_at(idx), first_line + idx + 1)

        self._parse_properties(graph, ids, lines, bond_start + bond_count, first_line)
        return graph

    def _parse_atom(self, line: str, line_no: int) -> Vertex:
        try:
            x = float(line[0:10])
            y = float(line[10:20])
            float(line[20:30])
            symbol = line[31:34].strip()
        except ValueError:
            symbol = ""
        if not symbol:
            # Registro sin alinear: se acepta la forma separada por espacios.
            match = _LOOSE_ATOM_RE.match(line)
            if not match:
                raise MalformedMolfile("unable to parse atom record", line_no)
            x = float(match.group(1))
            y = float(match.group(2))
            symbol = match.group(4)
            return Vertex(x, -y if self.options.flip_y else y, symbol)

        mass_diff = _int_field(line, 34, 36, line_no, "mass difference", default=0)
        code = _int_field(line, 36, 39, line_no, "charge code", default=0)
        if code not in CHARGE_FROM_CODE:
            raise MalformedMolfile(f"unknown charge code {code}", line_no)
        vertex = Vertex(x, -y if self.options.flip_y else y, symbol, CHARGE_FROM_CODE[code])
        if mass_diff:
            element = get_element(symbol)
            if element is not None:
                vertex.isotope = round(element.mass) + mass_diff
        return vertex

    def _parse_bond(self, graph: Graph, ids: List[int], line: str, line_no: int) -> None:
        first = _int_field(line, 0, 3, line_no, "first atom index")
        second = _int_field(line, 3, 6, line_no, "second atom index")
        type_code = _int_field(line, 6, 9, line_no, "bond type")
        stereo_code = _int_field(line, 9, 12, line_no, "bond stereo", default=0)
        for index in (first, second):
            if not 1 <= index <= len(ids):
                raise MalformedMolfile(
                    f"atom index {index} outside [1, {len(ids)}]", line_no
                )
        try:
            bond_type = BondType(type_code)
        except ValueError:
            raise MalformedMolfile(f"unknown bond type {type_code}", line_no) from None
        try:
            stereo = StereoType(stereo_code)
        except ValueError:
            raise MalformedMolfile(f"unknown bond stereo {stereo_code}", line_no) from None
        try:
            graph.add_edge(ids[first - 1], ids[second - 1], bond_type, stereo)
        except GraphError as exc:
            raise MalformedMolfile(str(exc), line_no) from exc

    def _parse_properties(
        self,
        graph: Graph,
        ids: List[int],
        lines: List[str],
        start: int,
        first_line: int,
    ) -> None:
        atom_charges_reset = False
        idx = start
        while idx < len(lines):
            line = lines[idx]
            line_no = first_line + idx + 1
            idx += 1
            if line.startswith("M  END"):
                return
            if line.startswith(("A  ", "V  ", "G  ")):
                # Alias y grupos ocupan una línea adicional.
                if not line.startswith("V  "):
                    idx += 1
                continue
            tag = line[:6]
            if tag in ("M  CHG", "M  ISO"):
                entries = self._property_entries(line, len(ids), line_no)
                if tag == "M  CHG" and not atom_charges_reset:
                    # M  CHG sustituye a las cargas del bloque de átomos.
                    for vertex_id in ids:
                        graph.vertex(vertex_id).charge = 0
                    atom_charges_reset = True
                for index, value in entries:
                    vertex = graph.vertex(ids[index - 1])
                    if tag == "M  CHG":
                        vertex.charge = value
                    else:
                        vertex.isotope = value
            elif line.startswith("M  "):
                logger.warning("Ignoring molfile property line %d: %s", line_no, line.strip())
            elif line.strip():
                logger.warning("Ignoring unexpected molfile line %d", line_no)

    @staticmethod
    def _property_entries(line: str, atom_count: int, line_no: int) -> List[Tuple[int, int]]:
        fields = line[6:].split()
        if not fields:
            raise MalformedMolfile("property line without entry count", line_no)
        try:
            numbers = [int(field) for field in fields]
        except ValueError:
            raise MalformedMolfile("non-numeric property entry", line_no) from None
        count, data = numbers[0], numbers[1:]
        if count * 2 != len(data):
            raise MalformedMolfile("property entry count does not match data", line_no)
        entries = list(zip(data[0::2], data[1::2]))
        for index, _value in entries:
            if not 1 <= index <= atom_count:
                raise MalformedMolfile(
                    f"atom index {index} outside [1, {atom_count}]", line_no
                )
        return entries

    # ------------------------------------------------------------------
    # Escritura
    # ------------------------------------------------------------------
    def to_string(self, graph: Graph) -> str:
        """Serializa el grafo como Molfile V2000.

        Raises:
            ConversionError: Si hay más de 999 átomos o enlaces, o si una
                coordenada no cabe en su columna de 10 caracteres.
        """
        if graph.vertex_count > MAX_ENTRIES or graph.edge_count > MAX_ENTRIES:
            raise ConversionError("V2000 molfiles hold at most 999 atoms and bonds")
        options = self.options
        width = 10
        precision = options.precision
        lines = [
            options.title,
            options.program,
            options.comment,
            f"{graph.vertex_count:3d}{graph.edge_count:3d}  0  0  0  0  0  0  0  0  1 V2000",
        ]

        charges: List[Tuple[int, int]] = []
        isotopes: List[Tuple[int, int]] = []
        positions: Dict[int, int] = {}
        for idx, vertex in enumerate(graph.vertices(), start=1):
            positions[vertex.id] = idx
            y = (-vertex.y if options.flip_y else vertex.y) + 0.0
            code = CODE_FROM_CHARGE.get(vertex.charge, 0)
            coords = f"{vertex.x:{width}.{precision}f}{y:{width}.{precision}f}"
            if len(coords) != 2 * width:
                raise ConversionError(
                    f"coordinates of atom {idx} do not fit the V2000 atom block"
                )
            lines.append(
                coords
                + f"{0.0:{width}.{precision}f} {vertex.symbol:<3} 0{code:3d}"
                + "  0" * 10
            )
            if vertex.charge:
                charges.append((idx, vertex.charge))
            if vertex.isotope:
                isotopes.append((idx, vertex.isotope))

        for edge in graph.edges():
            lines.append(
                f"{positions[edge.v1]:3d}{positions[edge.v2]:3d}"
                f"{int(edge.bond_type):3d}{int(edge.stereo):3d}  0  0  0"
            )

        lines.extend(_property_lines("M  CHG", charges))
        lines.extend(_property_lines("M  ISO", isotopes))
        lines.append("M  END")
        logger.debug(
            "Serialized molfile: %d atoms, %d bonds", graph.vertex_count, graph.edge_count
        )
        return "\n".join(lines) + "\n"


def _property_lines(tag: str, entries: List[Tuple[int, int]]) -> Iterable[str]:
    for start in range(0, len(entries), _PROPERTY_GROUP):
        chunk = entries[start : start + _PROPERTY_GROUP]
        body = "".join(f"{index:4d}{value:4d}" for index, value in chunk)
        yield f"{tag}{len(chunk):3d}{body}"


def read_sdf(text: str, options: Optional[MolfileOptions] = None) -> List[Graph]:
    """Lee todas las moléculas de un archivo SDF.

    Los campos de datos tras `M  END` se ignoran. Los números de línea de
    los errores son relativos al archivo completo.
    """
    converter = MolfileConverter(options)
    lines = text.splitlines()
    graphs: List[Graph] = []
    start = 0
    for idx, line in enumerate(lines + [_SDF_DELIMITER]):
        if line.strip() != _SDF_DELIMITER:
            continue
        record = lines[start:idx]
        if any(entry.strip() for entry in record):
            graphs.append(converter._parse(record, start))
        start = idx + 1
    logger.debug("Parsed SDF with %d records", len(graphs))
    return graphs


def write_sdf(graphs: Iterable[Graph], options: Optional[MolfileOptions] = None) -> str:
    """Escribe varias moléculas en formato SDF."""
    converter = MolfileConverter(options)
    return "".join(converter.to_string(graph) + _SDF_DELIMITER + "\n" for graph in graphs)
