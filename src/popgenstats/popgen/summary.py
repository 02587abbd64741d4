"""
Batch summaries over many loci and groups.

Statistics that fail for one locus are recorded and skipped; the rest of
the batch is unaffected.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from popgenstats.core.config import AnalysisConfig
from popgenstats.core.models import GenotypeContainer
from popgenstats.core.result import Result, Ok, Err
from popgenstats.popgen.alleles import alleles_for_groups, count_non_missing
from popgenstats.popgen.diversity import (
    expected_heterozygosity,
    observed_heterozygosity,
    unbiased_expected_heterozygosity,
)
from popgenstats.popgen.fstats import multilocus_fis, multilocus_fit, multilocus_fst
from popgenstats.popgen.matrix import distance_matrix
from popgenstats.popgen.permutation import (
    multilocus_fis_permutation_test,
    multilocus_fst_permutation_test,
)

logger = logging.getLogger(__name__)


# Column name -> statistic taking (container, locus, groups)
LOCUS_STATISTICS = {
    "n_alleles": lambda c, locus, groups: alleles_for_groups(c, locus, groups).map(len),
    "n_genotyped": count_non_missing,
    "h_obs": observed_heterozygosity,
    "h_exp": expected_heterozygosity,
    "h_nb": unbiased_expected_heterozygosity,
    "fst": lambda c, locus, groups: multilocus_fst(c, [locus], groups),
    "fis": lambda c, locus, groups: multilocus_fis(c, [locus], groups),
    "fit": lambda c, locus, groups: multilocus_fit(c, [locus], groups),
}


def locus_summary(
    container: GenotypeContainer,
    loci: Sequence[int],
    groups: Sequence[int],
) -> pd.DataFrame:
    """
    One row of diversity and F-statistics per locus.

    Failed cells are NaN; the failures are listed in ``df.attrs["errors"]``
    as (locus, column, message) tuples.

    Args:
        container: Genotype container
        loci: Locus indices (rows)
        groups: Group ids pooled for every statistic

    Returns:
        DataFrame indexed by locus with columns n_alleles, n_genotyped,
        h_obs, h_exp, h_nb, fst, fis, fit
    """
    groups = list(groups)
    rows = []
    errors = []

    for locus in loci:
        row: Dict[str, Any] = {"locus": locus}
        for column, statistic in LOCUS_STATISTICS.items():
            result = statistic(container, locus, groups)
            if result.is_ok():
                row[column] = result.unwrap()
            else:
                error = result.unwrap_err()
                row[column] = np.nan
                errors.append((locus, column, str(error)))
                logger.warning(f"Locus {locus}: {column} skipped ({error})")
        rows.append(row)

    df = pd.DataFrame(rows, columns=["locus", *LOCUS_STATISTICS]).set_index("locus")
    df.attrs["errors"] = errors
    return df


def run_summary(
    container: GenotypeContainer,
    config: Optional[AnalysisConfig] = None,
) -> Result[Dict[str, Any], str]:
    """
    Run a full summary analysis.

    Main entry point for batch use: per-locus table, multilocus Fst and
    Fis (with permutation tests when ``config.permutation.nb_perm > 0``)
    and one distance matrix per configured method.

    Args:
        container: Genotype container
        config: Analysis configuration; defaults to AnalysisConfig()

    Returns:
        Result containing a dictionary with keys "loci", "groups",
        "locus_table", "fst", "fis", "distances" and "errors"
    """
    config = config or AnalysisConfig()

    groups = config.groups if config.groups is not None else container.group_ids()
    loci = config.loci if config.loci is not None else list(range(container.max_locus_count()))
    if not groups:
        return Err("No group to analyse")
    if not loci:
        return Err("No locus to analyse")

    logger.info(f"Summarising {len(loci)} loci over {len(groups)} groups ({len(container)} individuals)")

    table = locus_summary(container, loci, groups)
    errors: List[str] = [f"locus {locus} {col}: {msg}" for locus, col, msg in table.attrs["errors"]]
    summary: Dict[str, Any] = {
        "loci": list(loci),
        "groups": list(groups),
        "locus_table": table,
        "fst": None,
        "fis": None,
        "distances": {},
    }

    perm = config.permutation
    tests = [
        ("fst", config.fst, multilocus_fst, multilocus_fst_permutation_test),
        ("fis", config.fis, multilocus_fis, multilocus_fis_permutation_test),
    ]
    for key, enabled, estimator, permutation_test in tests:
        if not enabled:
            continue
        if perm.nb_perm > 0:
            result = permutation_test(container, loci, groups, perm.nb_perm, perm.seed, perm.workers)
        else:
            result = estimator(container, loci, groups)
        if result.is_ok():
            summary[key] = result.unwrap()
        else:
            errors.append(f"multilocus {key}: {result.unwrap_err()}")
            logger.warning(f"Multilocus {key} skipped ({result.unwrap_err()})")

    if len(groups) >= 2:
        for method in config.distance_methods:
            result = distance_matrix(container, loci, groups, method)
            if result.is_ok():
                summary["distances"][method] = result.unwrap()
            else:
                errors.append(f"{method} matrix: {result.unwrap_err()}")
                logger.warning(f"{method} distance matrix skipped ({result.unwrap_err()})")

    summary["errors"] = errors
    logger.info(f"Summary complete with {len(errors)} skipped statistic(s)")
    return Ok(summary)
