"""
Core module for popgenstats.

Contains the genotype data structures, result types, and configuration.
"""

from popgenstats.core.result import (
    Result,
    Ok,
    Err,
    ErrorKind,
    StatError,
    StatisticError,
)
from popgenstats.core.models import (
    MonolocusGenotype,
    MultilocusGenotype,
    GenotypeContainer,
    GenotypeSource,
    VarComp,
    Fstats,
    PermResults,
)
from popgenstats.core.config import AnalysisConfig, PermutationConfig, load_config

__all__ = [
    "Result",
    "Ok",
    "Err",
    "ErrorKind",
    "StatError",
    "StatisticError",
    "MonolocusGenotype",
    "MultilocusGenotype",
    "GenotypeContainer",
    "GenotypeSource",
    "VarComp",
    "Fstats",
    "PermResults",
    "AnalysisConfig",
    "PermutationConfig",
    "load_config",
]
