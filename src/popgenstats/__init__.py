"""
popgenstats: population genetics summary statistics for grouped
multilocus diploid genotypes.

This package provides:
- Allele frequencies and heterozygosity per locus
- Weir & Cockerham (1984) variance components and F-statistics
- Nei (1972, 1978) genetic distances and pairwise distance matrices
- Permutation tests for multilocus Fst and Fis
"""

__version__ = "1.0.0"

from popgenstats.core.result import Result, Ok, Err, ErrorKind, StatError
from popgenstats.core.models import GenotypeContainer, MonolocusGenotype, MultilocusGenotype

__all__ = [
    "__version__",
    "Result",
    "Ok",
    "Err",
    "ErrorKind",
    "StatError",
    "GenotypeContainer",
    "MonolocusGenotype",
    "MultilocusGenotype",
]
