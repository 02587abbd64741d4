"""
Allele accounting.

Raw allele observations at one locus for a set of groups: allele ids,
gamete counts, non-missing and heterozygous individual counts, and the
frequency maps every other estimator is built from.

All functions return Result[T, StatError]. A locus index outside the locus
range of any genotype in scope fails with ErrorKind.BOUNDS; frequencies
over zero gametes (or zero individuals) fail with ErrorKind.ZERO_DIVISION.
"""

from __future__ import annotations
import logging
from collections import Counter
from typing import Dict, Iterable, List

from popgenstats.core.models import GenotypeSource, MonolocusGenotype
from popgenstats.core.result import StatError, fail, returns_result

logger = logging.getLogger(__name__)


def normalize_groups(container: GenotypeSource, groups: Iterable[int]) -> List[int]:
    """Sorted unique group ids, failing on ids the container does not know."""
    known = set(container.group_ids())
    selected = sorted(set(groups))
    unknown = [gid for gid in selected if gid not in known]
    if unknown:
        fail(StatError.invalid_argument(f"Unknown group id(s): {unknown}"))
    return selected


def locus_records(
    container: GenotypeSource,
    locus: int,
    groups: Iterable[int],
) -> List[MonolocusGenotype]:
    """
    Records at ``locus`` for every individual of ``groups``.

    Validates the locus against each genotype's locus count, or against the
    widest genotype of the container when ``groups`` hold no individual.
    """
    records = []
    for gid in normalize_groups(container, groups):
        for genotype in container.individuals_in(gid):
            n_loci = container.locus_count(genotype)
            if locus < 0 or locus >= n_loci:
                fail(StatError.bounds(locus, n_loci - 1))
            records.append(container.record_at(genotype, locus))
    if not records:
        n_loci = max(
            (container.locus_count(g) for gid in container.group_ids() for g in container.individuals_in(gid)),
            default=0,
        )
        if locus < 0 or locus >= n_loci:
            fail(StatError.bounds(locus, n_loci - 1))
    return records


@returns_result
def alleles_for_groups(container: GenotypeSource, locus: int, groups: Iterable[int]) -> List[int]:
    """Allele ids observed at ``locus`` in the union of ``groups``, sorted."""
    ids = set()
    for record in locus_records(container, locus, groups):
        ids.update(record.alleles)
    return sorted(ids)


@returns_result
def count_gametes(container: GenotypeSource, locus: int, groups: Iterable[int]) -> int:
    """Allele copies observed: 2 per non-missing individual."""
    return 2 * sum(1 for r in locus_records(container, locus, groups) if not r.is_missing)


@returns_result
def allele_counts(container: GenotypeSource, locus: int, groups: Iterable[int]) -> Dict[int, int]:
    """
    Copies of each allele.

    A homozygote adds 2 to its allele, a heterozygote adds 1 to each of its
    two alleles.
    """
    counts: Counter = Counter()
    for record in locus_records(container, locus, groups):
        counts.update(record.copies)
    return dict(sorted(counts.items()))


@returns_result
def count_non_missing(container: GenotypeSource, locus: int, groups: Iterable[int]) -> int:
    """Individuals whose record at ``locus`` is not missing."""
    return sum(1 for r in locus_records(container, locus, groups) if not r.is_missing)


@returns_result
def count_bi_allelic(container: GenotypeSource, locus: int, groups: Iterable[int]) -> int:
    """Heterozygous individuals at ``locus``."""
    return sum(1 for r in locus_records(container, locus, groups) if r.is_heterozygous)


@returns_result
def heterozygote_allele_counts(
    container: GenotypeSource,
    locus: int,
    groups: Iterable[int],
) -> Dict[int, int]:
    """
    Number of heterozygous records carrying each allele.

    Every observed allele is a key; alleles seen only in homozygotes map
    to 0.
    """
    counts = {}
    for record in locus_records(container, locus, groups):
        for allele in record.alleles:
            counts.setdefault(allele, 0)
            if record.is_heterozygous:
                counts[allele] += 1
    return dict(sorted(counts.items()))


@returns_result
def allele_frequencies(
    container: GenotypeSource,
    locus: int,
    groups: Iterable[int],
) -> Dict[int, float]:
    """
    Allele frequencies (fraction of gametes).

    Returns:
        Ok(allele id -> frequency), summing to 1
        Err(ZERO_DIVISION) when no gamete is observed
    """
    groups = list(groups)
    n_gametes = count_gametes(container, locus, groups).unwrap()
    if n_gametes == 0:
        fail(StatError.zero_division(f"No gamete observed at locus {locus} for groups {sorted(set(groups))}"))
    counts = allele_counts(container, locus, groups).unwrap()
    return {allele: count / n_gametes for allele, count in counts.items()}


@returns_result
def heterozygote_frequencies(
    container: GenotypeSource,
    locus: int,
    groups: Iterable[int],
) -> Dict[int, float]:
    """
    Per-allele heterozygote frequencies.

    Heterozygote counts of each allele divided by the number of non-missing
    individuals.
    """
    groups = list(groups)
    n_individuals = count_non_missing(container, locus, groups).unwrap()
    if n_individuals == 0:
        fail(StatError.zero_division(f"No genotyped individual at locus {locus} for groups {sorted(set(groups))}"))
    counts = heterozygote_allele_counts(container, locus, groups).unwrap()
    return {allele: count / n_individuals for allele, count in counts.items()}
