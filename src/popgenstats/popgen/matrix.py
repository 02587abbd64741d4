"""
Pairwise distance matrices between groups.

Each cell is computed independently for one pair of groups with the
selected method:

  Nei72    Nei (1972) standard distance
  Nei78    Nei (1978) unbiased distance
  WC       Weir & Cockerham theta
  RH       Robertson & Hill theta
  Nm       (1 - Fst) / (4 Fst), number of migrants
  D        -ln(1 - Fst), Reynolds et al. (1983)
  Rousset  Fst / (1 - Fst), Rousset (1997)

Fst-derived methods fail fast when Fst is 0 (Nm), 1 (Rousset) or >= 1
(Reynolds) rather than returning infinities.
"""

from __future__ import annotations
import itertools
import logging
import math
from enum import Enum
from typing import Callable, Dict, Iterable, Sequence

import numpy as np
import pandas as pd
from scipy.spatial.distance import squareform

from popgenstats.core.models import GenotypeSource
from popgenstats.core.result import Err, Ok, Result, StatError, fail, returns_result
from popgenstats.popgen.alleles import normalize_groups
from popgenstats.popgen.distance import nei1972_distance, nei1978_distance
from popgenstats.popgen.fstats import multilocus_fst, rh_multilocus_fst

logger = logging.getLogger(__name__)


class DistanceMethod(Enum):
    """Distance methods understood by ``distance_matrix``."""
    NEI72 = "Nei72"
    NEI78 = "Nei78"
    WC = "WC"
    RH = "RH"
    NM = "Nm"
    REYNOLDS = "D"
    ROUSSET = "Rousset"

    @classmethod
    def from_name(cls, name) -> Result[DistanceMethod, StatError]:
        """Resolve a method name or one of its aliases."""
        if isinstance(name, cls):
            return Ok(name)
        valid = ", ".join(m.value for m in cls)
        if not isinstance(name, str):
            return Err(StatError.invalid_argument(
                f"Distance method must be a name, got {name!r} (expected one of {valid})"
            ))
        method = METHOD_ALIASES.get(name)
        if method is None:
            try:
                method = cls(name)
            except ValueError:
                return Err(StatError.invalid_argument(
                    f"Unknown distance method: {name!r} (expected one of {valid})"
                ))
        return Ok(method)


METHOD_ALIASES = {
    "Fst-WC": DistanceMethod.WC,
    "Fst-RH": DistanceMethod.RH,
    "D-Reynolds": DistanceMethod.REYNOLDS,
    "Reynolds": DistanceMethod.REYNOLDS,
    "Fst/(1-Fst)": DistanceMethod.ROUSSET,
    "Fst/(1−Fst)": DistanceMethod.ROUSSET,
}


def _pair_fst(container: GenotypeSource, loci: Sequence[int], grp1: int, grp2: int) -> float:
    return multilocus_fst(container, loci, [grp1, grp2]).unwrap()


def _nm(container: GenotypeSource, loci: Sequence[int], grp1: int, grp2: int) -> float:
    fst = _pair_fst(container, loci, grp1, grp2)
    if fst == 0:
        fail(StatError.zero_division(f"Fst is 0 between groups {grp1} and {grp2}; Nm is undefined"))
    return (1.0 - fst) / (4.0 * fst)


def _reynolds(container: GenotypeSource, loci: Sequence[int], grp1: int, grp2: int) -> float:
    fst = _pair_fst(container, loci, grp1, grp2)
    if 1.0 - fst <= 0:
        fail(StatError.domain(f"Fst is {fst} between groups {grp1} and {grp2}; -ln(1 - Fst) is undefined"))
    return -math.log(1.0 - fst)


def _rousset(container: GenotypeSource, loci: Sequence[int], grp1: int, grp2: int) -> float:
    fst = _pair_fst(container, loci, grp1, grp2)
    if fst == 1:
        fail(StatError.zero_division(f"Fst is 1 between groups {grp1} and {grp2}; Fst/(1-Fst) is undefined"))
    return fst / (1.0 - fst)


PAIR_DISTANCES: Dict[DistanceMethod, Callable[[GenotypeSource, Sequence[int], int, int], float]] = {
    DistanceMethod.NEI72: lambda c, loci, g1, g2: nei1972_distance(c, loci, g1, g2).unwrap(),
    DistanceMethod.NEI78: lambda c, loci, g1, g2: nei1978_distance(c, loci, g1, g2).unwrap(),
    DistanceMethod.WC: _pair_fst,
    DistanceMethod.RH: lambda c, loci, g1, g2: rh_multilocus_fst(c, loci, [g1, g2]).unwrap(),
    DistanceMethod.NM: _nm,
    DistanceMethod.REYNOLDS: _reynolds,
    DistanceMethod.ROUSSET: _rousset,
}


@returns_result
def pairwise_distance(
    container: GenotypeSource,
    loci: Sequence[int],
    grp1: int,
    grp2: int,
    method,
) -> float:
    """Distance between two groups with the named method."""
    resolved = DistanceMethod.from_name(method).unwrap()
    return PAIR_DISTANCES[resolved](container, list(loci), grp1, grp2)


@returns_result
def distance_matrix(
    container: GenotypeSource,
    loci: Sequence[int],
    groups: Iterable[int],
    method,
) -> pd.DataFrame:
    """
    Symmetric group x group distance matrix with a zero diagonal.

    Args:
        container: Genotype source
        loci: Locus indices used for every cell
        groups: Group ids (at least two)
        method: DistanceMethod or its name ("Nei72", "Nei78", "WC", "RH",
            "Nm", "D", "Rousset", or an alias such as "Fst-WC")

    Returns:
        Ok(DataFrame indexed by group id on both axes)
        Err(INVALID_ARGUMENT) for an unknown method; otherwise the error of
        the first cell that fails
    """
    resolved = DistanceMethod.from_name(method).unwrap()
    groups = normalize_groups(container, groups)
    if len(groups) < 2:
        fail(StatError.invalid_argument(f"A distance matrix needs at least two groups, got {groups}"))
    loci = list(loci)

    pair_distance = PAIR_DISTANCES[resolved]
    condensed = np.empty(len(groups) * (len(groups) - 1) // 2, dtype=float)
    for k, (grp1, grp2) in enumerate(itertools.combinations(groups, 2)):
        condensed[k] = pair_distance(container, loci, grp1, grp2)
        logger.debug(f"{resolved.value} distance {grp1}-{grp2}: {condensed[k]:.6f}")

    logger.info(f"Assembled {len(groups)}x{len(groups)} {resolved.value} distance matrix")
    index = pd.Index(groups, name="group")
    return pd.DataFrame(squareform(condensed, checks=False), index=index, columns=index.copy())
