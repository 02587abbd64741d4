"""
Nei genetic distances between two groups.

Both estimators accumulate allele-frequency products over every allele of
every requested locus before taking the logarithm, so loci are combined
rather than averaged.
"""

from __future__ import annotations
import logging
import math
from typing import Dict, Sequence, Tuple

from popgenstats.core.models import GenotypeSource
from popgenstats.core.result import StatError, fail, returns_result
from popgenstats.popgen.alleles import allele_frequencies, count_non_missing

logger = logging.getLogger(__name__)


def _paired_frequencies(
    container: GenotypeSource,
    locus: int,
    grp1: int,
    grp2: int,
) -> Tuple[Dict[int, float], Dict[int, float]]:
    """Frequencies of both groups over the union of their alleles (0 when absent)."""
    x = allele_frequencies(container, locus, [grp1]).unwrap()
    y = allele_frequencies(container, locus, [grp2]).unwrap()
    for allele in set(x) | set(y):
        x.setdefault(allele, 0.0)
        y.setdefault(allele, 0.0)
    return x, y


def _neg_log_identity(jxy: float, denominator: float, label: str) -> float:
    """-ln(Jxy / sqrt(denominator)) with explicit domain checks."""
    if denominator == 0:
        fail(StatError.zero_division(f"{label}: sum of squared frequencies is 0"))
    if denominator < 0:
        fail(StatError.domain(f"{label}: negative value under square root ({denominator})"))
    identity = jxy / math.sqrt(denominator)
    if identity <= 0:
        fail(StatError.domain(f"{label}: genetic identity {identity} has no logarithm"))
    return -math.log(identity)


@returns_result
def nei1972_distance(
    container: GenotypeSource,
    loci: Sequence[int],
    grp1: int,
    grp2: int,
) -> float:
    """
    Nei (1972) standard genetic distance.

        D = -ln( sum(x_i y_i) / sqrt(sum(x_i^2) sum(y_i^2)) )

    where x_i and y_i are the frequencies of allele i in the first and
    second group, summed over all alleles of all loci.

    Returns:
        Ok(distance)
        Err(ZERO_DIVISION) if a group has no data or ``loci`` is empty
        Err(DOMAIN) if the groups share no allele
    """
    jxy = jx = jy = 0.0
    for locus in loci:
        x, y = _paired_frequencies(container, locus, grp1, grp2)
        for allele in x:
            jxy += x[allele] * y[allele]
            jx += x[allele] ** 2
            jy += y[allele] ** 2

    logger.debug(f"Nei72 groups {grp1}/{grp2}: Jxy={jxy:.6f} Jx={jx:.6f} Jy={jy:.6f}")
    return _neg_log_identity(jxy, jx * jy, "Nei72 distance")


@returns_result
def nei1978_distance(
    container: GenotypeSource,
    loci: Sequence[int],
    grp1: int,
    grp2: int,
) -> float:
    """
    Nei (1978) unbiased genetic distance.

        D = -ln( Jxy / sqrt( (2n_X J_X - 1)/(2n_X - 1) * (2n_Y J_Y - 1)/(2n_Y - 1) ) )

    J_X = sum(x_i^2) and J_Y = sum(y_i^2) are corrected per locus with n_X
    and n_Y the genotyped individuals of each group (2n gametes), then
    summed over loci together with Jxy = sum(x_i y_i).
    """
    jxy = jx = jy = 0.0
    for locus in loci:
        x, y = _paired_frequencies(container, locus, grp1, grp2)
        nx = count_non_missing(container, locus, [grp1]).unwrap()
        ny = count_non_missing(container, locus, [grp2]).unwrap()
        jxy += sum(x[allele] * y[allele] for allele in x)
        jx += (2.0 * nx * sum(v * v for v in x.values()) - 1.0) / (2.0 * nx - 1.0)
        jy += (2.0 * ny * sum(v * v for v in y.values()) - 1.0) / (2.0 * ny - 1.0)

    logger.debug(f"Nei78 groups {grp1}/{grp2}: Jxy={jxy:.6f} Jx={jx:.6f} Jy={jy:.6f}")
    return _neg_log_identity(jxy, jx * jy, "Nei78 distance")
