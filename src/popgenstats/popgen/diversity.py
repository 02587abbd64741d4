"""
Heterozygosity estimators for one locus.

  - observed heterozygosity: mean per-allele heterozygote frequency
  - expected heterozygosity: gene diversity of Nei (1977)
  - unbiased expected heterozygosity: Nei (1978) sample-size correction
"""

from __future__ import annotations
from typing import Iterable

import numpy as np

from popgenstats.core.models import GenotypeSource
from popgenstats.core.result import StatError, fail, returns_result
from popgenstats.popgen.alleles import (
    allele_frequencies,
    count_non_missing,
    heterozygote_frequencies,
)


@returns_result
def observed_heterozygosity(container: GenotypeSource, locus: int, groups: Iterable[int]) -> float:
    """
    Mean of the heterozygote frequency map.

    The map has one entry per observed allele, and alleles seen only in
    homozygotes contribute 0 to the mean: for 1/1, 1/2, 3/3 the entries are
    1/3, 1/3 and 0, giving 2/9 rather than the 1/3 of a mean over
    heterozygous alleles only.
    """
    frequencies = heterozygote_frequencies(container, locus, list(groups)).unwrap()
    return float(np.mean(list(frequencies.values())))


@returns_result
def expected_heterozygosity(container: GenotypeSource, locus: int, groups: Iterable[int]) -> float:
    """
    Expected heterozygosity (Nei 1977).

        Hexp = 1 - sum(x_i^2)

    where x_i is the frequency of the i-th allele.
    """
    frequencies = allele_frequencies(container, locus, list(groups)).unwrap()
    x = np.fromiter(frequencies.values(), dtype=float)
    return float(1.0 - np.sum(x * x))


@returns_result
def unbiased_expected_heterozygosity(
    container: GenotypeSource,
    locus: int,
    groups: Iterable[int],
) -> float:
    """
    Unbiased expected heterozygosity (Nei 1978).

        Hnb = 2n / (2n - 1) * Hexp

    where n is the number of genotyped individuals.
    """
    groups = list(groups)
    h_exp = expected_heterozygosity(container, locus, groups).unwrap()
    n = count_non_missing(container, locus, groups).unwrap()
    if n <= 0:
        fail(StatError.zero_division(f"No genotyped individual at locus {locus}"))
    return 2.0 * n / (2.0 * n - 1.0) * h_exp
