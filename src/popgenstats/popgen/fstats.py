"""
Weir & Cockerham F-statistics.

Implements the per-allele analysis of variance of Weir & Cockerham (1984)
and the derived Fit, Fst (theta) and Fis, for single alleles and combined
over loci.

Per allele, with r groups of n_i genotyped individuals:

    n_bar = sum(n_i) / r
    n_c   = (sum(n_i) - sum(n_i^2) / sum(n_i)) / (r - 1)
    p_bar = sum(n_i p_i) / (r n_bar)
    s2    = sum(n_i (p_i - p_bar)^2) / ((r - 1) n_bar)
    h_bar = sum(n_i h_i) / (r n_bar)

    a = n_bar / n_c * (s2 - (p_bar (1 - p_bar) - (r - 1) / r * s2 - h_bar / 4) / (n_bar - 1))
    b = n_bar / (n_bar - 1) * (p_bar (1 - p_bar) - (r - 1) / r * s2 - (2 n_bar - 1) / (4 n_bar) * h_bar)
    c = h_bar / 2

Multilocus estimates sum the components over all alleles of all loci
before taking the ratio.
"""

from __future__ import annotations
import logging
from typing import Dict, Iterable, Sequence

from popgenstats.core.models import Fstats, GenotypeSource, VarComp
from popgenstats.core.result import StatError, fail, returns_result
from popgenstats.popgen.alleles import (
    allele_frequencies,
    alleles_for_groups,
    count_non_missing,
    heterozygote_frequencies,
    normalize_groups,
)

logger = logging.getLogger(__name__)


@returns_result
def variance_components(
    container: GenotypeSource,
    locus: int,
    groups: Iterable[int],
) -> Dict[int, VarComp]:
    """
    Variance components a, b and c for every allele present at ``locus``.

    Returns:
        Ok(allele id -> VarComp)
        Err(ZERO_DIVISION) with fewer than two groups, a group without
        genotyped individuals, or a mean sample size of 1
    """
    groups = normalize_groups(container, groups)
    r = len(groups)
    if r < 2:
        fail(StatError.zero_division(f"At least two groups are needed, got {r}"))

    ids = alleles_for_groups(container, locus, groups).unwrap()
    sizes = {}
    frequencies = {}
    het_frequencies = {}
    for gid in groups:
        n = count_non_missing(container, locus, [gid]).unwrap()
        if n < 1:
            fail(StatError.zero_division(f"Group {gid} has no genotyped individual at locus {locus}"))
        sizes[gid] = float(n)
        frequencies[gid] = allele_frequencies(container, locus, [gid]).unwrap()
        het_frequencies[gid] = heterozygote_frequencies(container, locus, [gid]).unwrap()

    n_total = sum(sizes.values())
    n_bar = n_total / r
    n_c = (n_total - sum(n * n for n in sizes.values()) / n_total) / (r - 1)
    if n_bar == 1:
        fail(StatError.zero_division(f"Mean sample size is 1 at locus {locus}"))
    if n_c == 0:
        fail(StatError.zero_division(f"Corrected mean sample size is 0 at locus {locus}"))

    values = {}
    for allele in ids:
        p_bar = sum(sizes[g] * frequencies[g].get(allele, 0.0) for g in groups) / n_total
        h_bar = sum(sizes[g] * het_frequencies[g].get(allele, 0.0) for g in groups) / n_total
        s2 = sum(
            sizes[g] * (frequencies[g].get(allele, 0.0) - p_bar) ** 2 for g in groups
        ) / ((r - 1) * n_bar)

        between = p_bar * (1.0 - p_bar) - (r - 1) / r * s2
        a = n_bar / n_c * (s2 - (between - h_bar / 4.0) / (n_bar - 1.0))
        b = n_bar / (n_bar - 1.0) * (between - (2.0 * n_bar - 1.0) / (4.0 * n_bar) * h_bar)
        c = h_bar / 2.0
        values[allele] = VarComp(a=a, b=b, c=c)

    return values


@returns_result
def fstats_from_components(components: VarComp) -> Fstats:
    """
    F-statistics of one allele.

        Fit = 1 - c / (a + b + c)
        Fst = a / (a + b + c)
        Fis = 1 - c / (b + c)
    """
    total = components.a + components.b + components.c
    within = components.b + components.c
    if total == 0:
        fail(StatError.zero_division("a + b + c is 0"))
    if within == 0:
        fail(StatError.zero_division("b + c is 0"))
    return Fstats(
        fit=1.0 - components.c / total,
        fst=components.a / total,
        fis=1.0 - components.c / within,
    )


@returns_result
def alleles_fstats(container: GenotypeSource, locus: int, groups: Iterable[int]) -> Dict[int, Fstats]:
    """Fit, Fst and Fis for each allele of ``locus``."""
    components = variance_components(container, locus, groups).unwrap()
    return {allele: fstats_from_components(vc).unwrap() for allele, vc in components.items()}


@returns_result
def alleles_fit(container: GenotypeSource, locus: int, groups: Iterable[int]) -> Dict[int, float]:
    return {k: v.fit for k, v in alleles_fstats(container, locus, groups).unwrap().items()}


@returns_result
def alleles_fst(container: GenotypeSource, locus: int, groups: Iterable[int]) -> Dict[int, float]:
    return {k: v.fst for k, v in alleles_fstats(container, locus, groups).unwrap().items()}


@returns_result
def alleles_fis(container: GenotypeSource, locus: int, groups: Iterable[int]) -> Dict[int, float]:
    return {k: v.fis for k, v in alleles_fstats(container, locus, groups).unwrap().items()}


def _summed_components(container: GenotypeSource, loci: Sequence[int], groups: Iterable[int]) -> VarComp:
    groups = list(groups)
    a = b = c = 0.0
    for locus in loci:
        for vc in variance_components(container, locus, groups).unwrap().values():
            a += vc.a
            b += vc.b
            c += vc.c
    return VarComp(a=a, b=b, c=c)


@returns_result
def multilocus_fst(container: GenotypeSource, loci: Sequence[int], groups: Iterable[int]) -> float:
    """
    Weir & Cockerham theta over several loci.

    The components of every allele of every locus are summed before the
    ratio sum(a) / sum(a + b + c) is formed.
    """
    total = _summed_components(container, loci, groups)
    denominator = total.a + total.b + total.c
    if denominator == 0:
        fail(StatError.zero_division("Summed a + b + c is 0 over the requested loci"))
    return total.a / denominator


@returns_result
def multilocus_fis(container: GenotypeSource, loci: Sequence[int], groups: Iterable[int]) -> float:
    """Weir & Cockerham Fis over several loci: 1 - sum(c) / sum(b + c)."""
    total = _summed_components(container, loci, groups)
    denominator = total.b + total.c
    if denominator == 0:
        fail(StatError.zero_division("Summed b + c is 0 over the requested loci"))
    return 1.0 - total.c / denominator


@returns_result
def multilocus_fit(container: GenotypeSource, loci: Sequence[int], groups: Iterable[int]) -> float:
    """Weir & Cockerham Fit over several loci: 1 - sum(c) / sum(a + b + c)."""
    total = _summed_components(container, loci, groups)
    denominator = total.a + total.b + total.c
    if denominator == 0:
        fail(StatError.zero_division("Summed a + b + c is 0 over the requested loci"))
    return 1.0 - total.c / denominator


@returns_result
def rh_multilocus_fst(container: GenotypeSource, loci: Sequence[int], groups: Iterable[int]) -> float:
    """
    Robertson & Hill (1984) weighted theta over several loci.

    Each allele's theta a / (a + b + c) is weighted by (1 - p_bar), p_bar
    being its frequency in the pooled groups; the weights of a locus with
    k alleles sum to k - 1:

        theta_RH = sum_l sum_u (1 - p_u) theta_u / sum_l (k_l - 1)
    """
    groups = list(groups)
    weighted = 0.0
    total_weight = 0
    for locus in loci:
        components = variance_components(container, locus, groups).unwrap()
        if len(components) < 2:
            # Monomorphic: zero weight
            continue
        pooled = allele_frequencies(container, locus, groups).unwrap()
        for allele, vc in components.items():
            denominator = vc.a + vc.b + vc.c
            if denominator == 0:
                fail(StatError.zero_division(f"a + b + c is 0 for allele {allele} at locus {locus}"))
            weighted += (1.0 - pooled[allele]) * vc.a / denominator
        total_weight += len(components) - 1

    if total_weight == 0:
        fail(StatError.zero_division("No polymorphic locus among the requested loci"))
    return weighted / total_weight
