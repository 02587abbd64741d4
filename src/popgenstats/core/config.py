"""
Analysis configuration.

Batch analyses are described by dataclass configs, optionally loaded from a
YAML file such as:

    loci: [0, 1, 2]
    groups: [1, 2, 3]
    distance_methods: [Nei72, WC]
    permutation:
      nb_perm: 999
      seed: 42
      workers: 4
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from popgenstats.core.result import Result, Ok, Err

logger = logging.getLogger(__name__)


@dataclass
class PermutationConfig:
    """Configuration for permutation tests."""
    nb_perm: int = 1000
    seed: Optional[int] = None
    workers: int = 1  # Processes running replicates

    def __post_init__(self) -> None:
        if self.nb_perm < 0:
            raise ValueError(f"nb_perm must be >= 0, got {self.nb_perm}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")


@dataclass
class AnalysisConfig:
    """
    Configuration for a batch summary run.

    Attributes:
        loci: Locus indices to analyse; None means every locus
        groups: Group ids to analyse; None means every group
        distance_methods: Distance matrices to assemble
        fst: Compute multilocus Fst
        fis: Compute multilocus Fis
        permutation: Permutation settings (nb_perm=0 disables the tests)
    """
    loci: Optional[List[int]] = None
    groups: Optional[List[int]] = None
    distance_methods: List[str] = field(default_factory=lambda: ["Nei72"])
    fst: bool = True
    fis: bool = True
    permutation: PermutationConfig = field(default_factory=lambda: PermutationConfig(nb_perm=0))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Result[AnalysisConfig, str]:
        """
        Build and validate a config from a plain dictionary.

        Returns:
            Ok(AnalysisConfig) on success, Err(message) on invalid content
        """
        # Deferred: matrix imports the statistics modules, which import core
        from popgenstats.popgen.matrix import DistanceMethod

        if data is None:
            data = {}
        if not isinstance(data, dict):
            return Err(f"Config must be a mapping, got {type(data).__name__}")
        unknown = set(data) - {"loci", "groups", "distance_methods", "fst", "fis", "permutation"}
        if unknown:
            return Err(f"Unknown config keys: {sorted(unknown)}")

        methods = data.get("distance_methods", ["Nei72"])
        if isinstance(methods, str):
            methods = [methods]
        if not isinstance(methods, list):
            return Err(f"distance_methods must be a list of names, got {methods!r}")
        for method in methods:
            parsed = DistanceMethod.from_name(method)
            if parsed.is_err():
                return Err(parsed.unwrap_err().message)

        flags = {}
        for key in ("fst", "fis"):
            value = data.get(key, True)
            if not isinstance(value, bool):
                return Err(f"{key} must be true or false, got {value!r}")
            flags[key] = value

        try:
            permutation = PermutationConfig(**(data.get("permutation") or {"nb_perm": 0}))
        except (TypeError, ValueError) as e:
            return Err(f"Invalid permutation settings: {e}")

        try:
            loci = _int_list(data.get("loci"))
            groups = _int_list(data.get("groups"))
        except (TypeError, ValueError) as e:
            return Err(f"Invalid loci or groups: {e}")

        return Ok(cls(
            loci=loci,
            groups=groups,
            distance_methods=list(methods),
            permutation=permutation,
            **flags,
        ))


def _int_list(values: Any) -> Optional[List[int]]:
    """Integer list from a YAML sequence; None passes through."""
    if values is None:
        return None
    if not isinstance(values, list):
        raise TypeError(f"expected a list of integers, got {values!r}")
    for x in values:
        if isinstance(x, bool) or not isinstance(x, int):
            raise ValueError(f"not an integer: {x!r}")
    return list(values)


def load_config(config_path: Path) -> Result[AnalysisConfig, str]:
    """
    Load analysis configuration from YAML file.

    Args:
        config_path: Path to YAML config

    Returns:
        Result containing the parsed AnalysisConfig
    """
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        return Err(f"Failed to load config: {e}")

    logger.debug(f"Loaded config from {config_path}")
    return AnalysisConfig.from_dict(data or {})
