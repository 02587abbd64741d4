"""
Permutation tests for multilocus Fst and Fis.

The observed statistic is compared with its distribution over replicates
in which the unit of interest is shuffled:
  - Fst: individuals are reassigned between groups, group sizes preserved
  - Fis: inside each group, alleles are reshuffled between individuals at
    every locus, the group's allele pool preserved

Randomness comes from a SeedSequence built per call and spawned into one
independent stream per replicate, so a given seed reproduces the same
result whatever the number of worker processes.
"""

from __future__ import annotations
import logging
import math
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

import numpy as np

from popgenstats.core.models import (
    GenotypeContainer,
    GenotypeSource,
    MonolocusGenotype,
    MultilocusGenotype,
    PermResults,
)
from popgenstats.core.result import Result, StatError, fail, returns_result
from popgenstats.popgen.alleles import normalize_groups
from popgenstats.popgen.fstats import multilocus_fis, multilocus_fst

logger = logging.getLogger(__name__)


class CancelToken(Protocol):
    """Anything with ``is_set()``, e.g. ``threading.Event``."""

    def is_set(self) -> bool: ...


def as_genotype_container(container: GenotypeSource) -> GenotypeContainer:
    """
    Snapshot any GenotypeSource into a GenotypeContainer.

    A GenotypeContainer is returned as is (it is immutable).
    """
    if isinstance(container, GenotypeContainer):
        return container
    groups = {}
    for gid in container.group_ids():
        groups[gid] = [
            MultilocusGenotype(
                loci=tuple(container.record_at(g, i) for i in range(container.locus_count(g)))
            )
            for g in container.individuals_in(gid)
        ]
    return GenotypeContainer.from_groups(groups)


def _deal_alleles(records: List[List[MonolocusGenotype]], rng: np.random.Generator) -> None:
    """
    Shuffle allele copies between individuals, locus by locus, in place.

    ``records`` holds one list of per-locus records per individual. Missing
    records stay missing; the pool of copies at each locus is preserved.
    """
    n_loci = max((len(r) for r in records), default=0)
    for locus in range(n_loci):
        carriers = [i for i, r in enumerate(records) if locus < len(r) and not r[locus].is_missing]
        pool = np.array([a for i in carriers for a in records[i][locus].copies], dtype=np.int64)
        rng.shuffle(pool)
        for k, i in enumerate(carriers):
            records[i][locus] = MonolocusGenotype.from_alleles(int(pool[2 * k]), int(pool[2 * k + 1]))


def permute_individuals(
    container: GenotypeSource,
    groups: Iterable[int],
    rng: np.random.Generator,
) -> GenotypeContainer:
    """Randomly reassign the individuals of ``groups`` between them, keeping group sizes."""
    source = as_genotype_container(container)
    groups = sorted(set(groups))
    pool = [g for gid in groups for g in source.individuals_in(gid)]
    order = rng.permutation(len(pool))

    permuted: Dict[int, List[MultilocusGenotype]] = {}
    start = 0
    for gid in groups:
        size = len(source.individuals_in(gid))
        permuted[gid] = [pool[i] for i in order[start:start + size]]
        start += size
    return source.with_groups(permuted)


def permute_intra_group_alleles(
    container: GenotypeSource,
    groups: Iterable[int],
    rng: np.random.Generator,
) -> GenotypeContainer:
    """Shuffle alleles between individuals inside each group, group by group."""
    source = as_genotype_container(container)
    permuted = {}
    for gid in sorted(set(groups)):
        members = source.individuals_in(gid)
        records = [list(g.loci) for g in members]
        _deal_alleles(records, rng)
        permuted[gid] = [
            MultilocusGenotype(loci=tuple(r), name=g.name) for r, g in zip(records, members)
        ]
    return source.with_groups(permuted)


def permute_alleles(
    container: GenotypeSource,
    groups: Iterable[int],
    rng: np.random.Generator,
) -> GenotypeContainer:
    """Shuffle alleles between all individuals of ``groups``, across group boundaries."""
    source = as_genotype_container(container)
    groups = sorted(set(groups))
    members = [(gid, g) for gid in groups for g in source.individuals_in(gid)]
    records = [list(g.loci) for _, g in members]
    _deal_alleles(records, rng)

    permuted: Dict[int, List[MultilocusGenotype]] = {gid: [] for gid in groups}
    for (gid, g), r in zip(members, records):
        permuted[gid].append(MultilocusGenotype(loci=tuple(r), name=g.name))
    return source.with_groups(permuted)


# Statistic name -> (estimator, permutation applied to each replicate)
PERMUTATION_SCHEMES = {
    "fst": (multilocus_fst, permute_individuals),
    "fis": (multilocus_fis, permute_intra_group_alleles),
}


@returns_result
def _run_replicates(
    scheme: str,
    container: GenotypeContainer,
    loci: Sequence[int],
    groups: Sequence[int],
    seeds: Sequence[np.random.SeedSequence],
) -> List[float]:
    """Compute one replicate statistic per seed (also the worker entry point)."""
    estimator, permute = PERMUTATION_SCHEMES[scheme]
    values = []
    for seed in seeds:
        permuted = permute(container, groups, np.random.default_rng(seed))
        values.append(estimator(permuted, loci, groups).unwrap())
    return values


@returns_result
def _permutation_test(
    scheme: str,
    container: GenotypeSource,
    loci: Sequence[int],
    groups: Iterable[int],
    nb_perm: int,
    seed: Optional[int],
    workers: int,
    cancel: Optional[CancelToken],
) -> PermResults:
    if nb_perm < 0:
        fail(StatError.invalid_argument(f"nb_perm must be >= 0, got {nb_perm}"))
    if workers < 1:
        fail(StatError.invalid_argument(f"workers must be >= 1, got {workers}"))

    estimator, _ = PERMUTATION_SCHEMES[scheme]
    container = as_genotype_container(container)
    groups = normalize_groups(container, groups)
    loci = list(loci)

    statistic = estimator(container, loci, groups).unwrap()
    logger.info(f"Observed multilocus {scheme}: {statistic:.6f}; running {nb_perm} permutations")

    seeds = np.random.SeedSequence(seed).spawn(nb_perm)
    above = below = done = 0

    def tally(values: List[float]) -> None:
        nonlocal above, below, done
        above += sum(1 for v in values if v > statistic)
        below += sum(1 for v in values if v < statistic)
        done += len(values)

    def cancelled() -> StatError:
        return StatError.cancelled(
            f"Permutation test cancelled after {done} of {nb_perm} replicates"
        )

    if workers == 1 or nb_perm <= 1:
        for child in seeds:
            if cancel is not None and cancel.is_set():
                fail(cancelled())
            tally(_run_replicates(scheme, container, loci, groups, [child]).unwrap())
    else:
        chunk_size = max(1, math.ceil(nb_perm / (workers * 4)))
        chunks = [seeds[i:i + chunk_size] for i in range(0, nb_perm, chunk_size)]
        logger.debug(f"Dispatching {len(chunks)} chunks of <= {chunk_size} replicates to {workers} workers")
        with ProcessPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(_run_replicates, scheme, container, loci, groups, chunk)
                for chunk in chunks
            ]
            for future in as_completed(futures):
                if cancel is not None and cancel.is_set():
                    executor.shutdown(wait=False, cancel_futures=True)
                    fail(cancelled())
                tally(future.result().unwrap())

    logger.info(f"Permutations done: {above} above, {below} below observed {scheme}")
    if nb_perm == 0:
        return PermResults(statistic=statistic, percent_above=0.0, percent_below=0.0)
    return PermResults(
        statistic=statistic,
        percent_above=above / nb_perm,
        percent_below=below / nb_perm,
    )


def multilocus_fst_permutation_test(
    container: GenotypeSource,
    loci: Sequence[int],
    groups: Iterable[int],
    nb_perm: int,
    seed: Optional[int] = None,
    workers: int = 1,
    cancel: Optional[CancelToken] = None,
) -> Result[PermResults, StatError]:
    """
    Weir & Cockerham multilocus Fst with a permutation test.

    Fst is computed on the data, then on ``nb_perm`` data sets where
    individuals are permuted between groups.

    Args:
        container: Genotype source
        loci: Locus indices combined in the multilocus estimate
        groups: Group ids compared
        nb_perm: Number of permuted replicates (0 skips the test)
        seed: Seed of this call's random streams; None draws fresh entropy
        workers: Processes running replicates
        cancel: Optional token; when set the call fails with ErrorKind.CANCELLED

    Returns:
        Ok(PermResults) with the observed Fst and the fractions of
        replicates strictly above and below it
    """
    return _permutation_test("fst", container, loci, groups, nb_perm, seed, workers, cancel)


def multilocus_fis_permutation_test(
    container: GenotypeSource,
    loci: Sequence[int],
    groups: Iterable[int],
    nb_perm: int,
    seed: Optional[int] = None,
    workers: int = 1,
    cancel: Optional[CancelToken] = None,
) -> Result[PermResults, StatError]:
    """
    Weir & Cockerham multilocus Fis with a permutation test.

    Replicates permute alleles between the individuals of each group.
    Arguments and return value are those of
    ``multilocus_fst_permutation_test``.
    """
    return _permutation_test("fis", container, loci, groups, nb_perm, seed, workers, cancel)
