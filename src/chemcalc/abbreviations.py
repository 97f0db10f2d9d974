"""Abreviaturas de grupos usadas como etiquetas de vértice.

Cada abreviatura se describe con un SMILES cuyo primer átomo es el punto de
unión con el resto de la molécula (p. ej. `Ac` -> `C(=O)C`).
"""

from __future__ import annotations

from typing import Dict, NamedTuple, Optional


class Abbreviation(NamedTuple):
    symbol: str
    name: str
    smiles: str


_PHENYL = "c1ccccc1"
_ANISYL = "c1ccc(OC)cc1"

ABBREVIATIONS: Dict[str, Abbreviation] = {
    abbreviation.symbol: abbreviation
    for abbreviation in (
        # Alquilos
        Abbreviation("Me", "methyl", "C"),
        Abbreviation("Et", "ethyl", "CC"),
        Abbreviation("Pr", "propyl", "CCC"),
        Abbreviation("i-Pr", "isopropyl", "C(C)C"),
        Abbreviation("Bu", "butyl", "CCCC"),
        Abbreviation("i-Bu", "isobutyl", "CC(C)C"),
        Abbreviation("s-Bu", "sec-butyl", "C(C)CC"),
        Abbreviation("t-Bu", "tert-butyl", "C(C)(C)C"),
        Abbreviation("Am", "amyl", "CCCCC"),
        Abbreviation("i-Am", "isoamyl", "CCC(C)C"),
        Abbreviation("Hex", "hexyl", "CCCCCC"),
        Abbreviation("All", "allyl", "CC=C"),
        # Arilos y bencilo
        Abbreviation("Ph", "phenyl", _PHENYL),
        Abbreviation("Tol", "p-tolyl", "c1ccc(C)cc1"),
        Abbreviation("Bn", "benzyl", "C" + _PHENYL),
        # Acilos
        Abbreviation("Ac", "acetyl", "C(=O)C"),
        Abbreviation("Bz", "benzoyl", "C(=O)" + _PHENYL),
        # Grupos protectores
        Abbreviation("CEP", "cyanoethyl phosphoramidite", "P(OCCC#N)N(C(C)C)C(C)C"),
        Abbreviation("TBDMS", "tert-butyldimethylsilyl", "[Si](C)(C)C(C)(C)C"),
        Abbreviation("TMS", "trimethylsilyl", "[Si](C)(C)C"),
        Abbreviation("Boc", "tert-butoxycarbonyl", "C(=O)OC(C)(C)C"),
        Abbreviation("THP", "tetrahydropyranyl", "C1OCCCC1"),
        Abbreviation("Tr", "trityl", f"C({_PHENYL})({_PHENYL}){_PHENYL}"),
        Abbreviation("MMT", "monomethoxytrityl", f"C({_PHENYL})({_PHENYL}){_ANISYL}"),
        Abbreviation("DMT", "dimethoxytrityl", f"C({_PHENYL})({_ANISYL}){_ANISYL}"),
        # Sulfonilos
        Abbreviation("Ms", "mesyl", "S(=O)(=O)C"),
        Abbreviation("Ns", "nosyl", "S(=O)(=O)c1ccc([N+](=O)[O-])cc1"),
        Abbreviation("Tf", "triflyl", "S(=O)(=O)C(F)(F)F"),
        Abbreviation("Ts", "tosyl", "S(=O)(=O)c1ccc(C)cc1"),
    )
}


def get_abbreviation(symbol: Optional[str]) -> Optional[Abbreviation]:
    return ABBREVIATIONS.get(symbol or "")


def is_abbreviation(symbol: str) -> bool:
    return symbol in ABBREVIATIONS
