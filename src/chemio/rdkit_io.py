from __future__ import annotations

import logging
import math
from typing import Dict

from core.model import BondType, Graph, StereoType, Vertex

logger = logging.getLogger(__name__)

try:
    from rdkit import Chem
    from rdkit.Chem import AllChem
except Exception:  # pragma: no cover - optional dependency at runtime
    Chem = None
    AllChem = None

RDKIT_AVAILABLE = Chem is not None


def _require_rdkit():
    if Chem is None or AllChem is None:
        raise RuntimeError("RDKit no disponible")


def _rdkit_bond_type(bond_type: BondType):
    if bond_type == BondType.DOUBLE:
        return Chem.BondType.DOUBLE
    if bond_type == BondType.TRIPLE:
        return Chem.BondType.TRIPLE
    if bond_type == BondType.AROMATIC:
        return Chem.BondType.AROMATIC
    if bond_type == BondType.SINGLE:
        return Chem.BondType.SINGLE
    return Chem.BondType.UNSPECIFIED


def _rdkit_bond_dir(stereo: StereoType):
    if stereo == StereoType.UP:
        return Chem.BondDir.BEGINWEDGE
    if stereo == StereoType.DOWN:
        return Chem.BondDir.BEGINDASH
    if stereo == StereoType.EITHER:
        return Chem.BondDir.UNKNOWN
    return Chem.BondDir.NONE


def graph_to_rdkit_with_map(graph: Graph, sanitize: bool = True):
    _require_rdkit()
    rw = Chem.RWMol()
    id_map: Dict[int, int] = {}

    for vertex in graph.vertices():
        rd_atom = Chem.Atom(vertex.symbol)
        rd_atom.SetFormalCharge(vertex.charge)
        if vertex.isotope is not None:
            rd_atom.SetIsotope(vertex.isotope)
        if vertex.h_count is not None:
            rd_atom.SetNumExplicitHs(vertex.h_count)
            rd_atom.SetNoImplicit(True)
        id_map[vertex.id] = rw.AddAtom(rd_atom)

    for edge in graph.edges():
        begin = id_map[edge.v1]
        end = id_map[edge.v2]
        if edge.bond_type == BondType.AROMATIC:
            rw.GetAtomWithIdx(begin).SetIsAromatic(True)
            rw.GetAtomWithIdx(end).SetIsAromatic(True)
        rw.AddBond(begin, end, _rdkit_bond_type(edge.bond_type))
        bond = rw.GetBondBetweenAtoms(begin, end)
        if edge.bond_type == BondType.AROMATIC:
            bond.SetIsAromatic(True)
        bond.SetBondDir(_rdkit_bond_dir(edge.stereo))

    mol = rw.GetMol()
    conf = Chem.Conformer(mol.GetNumAtoms())
    for vertex_id, idx in id_map.items():
        vertex = graph.vertex(vertex_id)
        # El eje y del lienzo crece hacia abajo.
        conf.SetAtomPosition(idx, (vertex.x, -vertex.y, 0.0))
    mol.AddConformer(conf, assignId=True)
    if sanitize:
        try:
            Chem.SanitizeMol(mol)
        except Exception as exc:
            logger.warning("RDKit sanitization failed: %s", exc)
            mol.UpdatePropertyCache(strict=False)
    return mol, id_map


def graph_to_rdkit(graph: Graph, sanitize: bool = True):
    mol, _ = graph_to_rdkit_with_map(graph, sanitize)
    return mol


def canonical_smiles(graph: Graph) -> str:
    """SMILES canónico calculado por RDKit."""
    for edge in graph.edges():
        if edge.bond_type.is_query:
            raise ValueError(f"Query bond {edge.id} cannot be written as SMILES")
    mol = graph_to_rdkit(graph)
    return Chem.MolToSmiles(mol, canonical=True)


def graph_to_molblock(graph: Graph) -> str:
    mol = graph_to_rdkit(graph)
    return Chem.MolToMolBlock(mol)


def smiles_to_graph(smiles: str) -> Graph:
    _require_rdkit()
    mol = Chem.MolFromSmiles(smiles)
    return rdkit_to_graph(mol)


def molblock_to_graph(molblock: str) -> Graph:
    _require_rdkit()
    mol = Chem.MolFromMolBlock(molblock, sanitize=True)
    return rdkit_to_graph(mol)


def rdkit_to_graph(mol) -> Graph:
    _require_rdkit()
    if mol is None:
        raise ValueError("Mol inválido")
    if mol.GetNumConformers() == 0:
        AllChem.Compute2DCoords(mol)
    conf = mol.GetConformer()

    graph = Graph()
    idx_map: Dict[int, int] = {}

    for atom in mol.GetAtoms():
        idx = atom.GetIdx()
        pos = conf.GetAtomPosition(idx)
        vertex = Vertex(pos.x, -pos.y, atom.GetSymbol(), atom.GetFormalCharge())
        if atom.GetIsotope():
            vertex.isotope = atom.GetIsotope()
        if atom.GetNoImplicit() or atom.GetNumRadicalElectrons():
            vertex.h_count = atom.GetTotalNumHs()
        idx_map[idx] = graph.add_vertex(vertex)

    for bond in mol.GetBonds():
        bond_type = BondType.SINGLE
        if bond.GetIsAromatic():
            bond_type = BondType.AROMATIC
        elif bond.GetBondType() == Chem.BondType.DOUBLE:
            bond_type = BondType.DOUBLE
        elif bond.GetBondType() == Chem.BondType.TRIPLE:
            bond_type = BondType.TRIPLE
        stereo = StereoType.DEFAULT
        if bond.GetBondDir() == Chem.BondDir.BEGINWEDGE:
            stereo = StereoType.UP
        elif bond.GetBondDir() == Chem.BondDir.BEGINDASH:
            stereo = StereoType.DOWN
        graph.add_edge(
            idx_map[bond.GetBeginAtomIdx()],
            idx_map[bond.GetEndAtomIdx()],
            bond_type,
            stereo,
        )

    _scale_to_default(graph)
    return graph


def _scale_to_default(graph: Graph, target: float = 40.0) -> None:
    if not graph.edge_count:
        return
    avg = graph.average_bond_length()
    if avg <= 0 or math.isclose(avg, target):
        return
    graph.apply_scaling(target / avg)
