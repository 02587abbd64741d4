"""
Population genetics statistics.

  alleles      - allele ids, counts and frequencies per locus
  diversity    - observed / expected heterozygosity
  distance     - Nei 1972 / 1978 distances between two groups
  fstats       - Weir & Cockerham variance components and F-statistics
  permutation  - permutation tests for multilocus Fst / Fis
  matrix       - pairwise group distance matrices
  summary      - batch summaries over loci and groups
"""

from popgenstats.popgen.alleles import (
    alleles_for_groups,
    count_gametes,
    allele_counts,
    count_non_missing,
    count_bi_allelic,
    heterozygote_allele_counts,
    allele_frequencies,
    heterozygote_frequencies,
)
from popgenstats.popgen.diversity import (
    observed_heterozygosity,
    expected_heterozygosity,
    unbiased_expected_heterozygosity,
)
from popgenstats.popgen.distance import nei1972_distance, nei1978_distance
from popgenstats.popgen.fstats import (
    variance_components,
    fstats_from_components,
    alleles_fstats,
    alleles_fit,
    alleles_fst,
    alleles_fis,
    multilocus_fst,
    multilocus_fis,
    multilocus_fit,
    rh_multilocus_fst,
)
from popgenstats.popgen.permutation import (
    multilocus_fst_permutation_test,
    multilocus_fis_permutation_test,
    permute_individuals,
    permute_intra_group_alleles,
    permute_alleles,
)
from popgenstats.popgen.matrix import DistanceMethod, distance_matrix, pairwise_distance
from popgenstats.popgen.summary import locus_summary, run_summary

__all__ = [
    "alleles_for_groups",
    "count_gametes",
    "allele_counts",
    "count_non_missing",
    "count_bi_allelic",
    "heterozygote_allele_counts",
    "allele_frequencies",
    "heterozygote_frequencies",
    "observed_heterozygosity",
    "expected_heterozygosity",
    "unbiased_expected_heterozygosity",
    "nei1972_distance",
    "nei1978_distance",
    "variance_components",
    "fstats_from_components",
    "alleles_fstats",
    "alleles_fit",
    "alleles_fst",
    "alleles_fis",
    "multilocus_fst",
    "multilocus_fis",
    "multilocus_fit",
    "rh_multilocus_fst",
    "multilocus_fst_permutation_test",
    "multilocus_fis_permutation_test",
    "permute_individuals",
    "permute_intra_group_alleles",
    "permute_alleles",
    "DistanceMethod",
    "distance_matrix",
    "pairwise_distance",
    "locus_summary",
    "run_summary",
]
