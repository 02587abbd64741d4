"""
Core data models for popgenstats.

Defines immutable data classes for diploid genotypes, the grouped genotype
container the statistics read from, and the records the statistics return.
All models use dataclasses with slots for memory efficiency.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Protocol, Sequence, Tuple

import pandas as pd


# Genotype strings treated as missing when parsing tables
MISSING_TOKENS = {"", ".", "./.", ".|.", "-", "NA", "nan"}


@dataclass(frozen=True, slots=True)
class MonolocusGenotype:
    """
    Diploid genotype at one locus.

    Attributes:
        alleles: Normalized allele ids. ``()`` is missing data, ``(a,)`` a
            homozygote and ``(a, b)`` with ``a < b`` a heterozygote.
    """
    alleles: Tuple[int, ...] = ()

    def __post_init__(self) -> None:
        """Validate genotype data on creation."""
        if len(self.alleles) > 2:
            raise ValueError(f"Diploid genotype has at most 2 allele ids, got {self.alleles}")
        for allele in self.alleles:
            if not isinstance(allele, int) or isinstance(allele, bool) or allele < 0:
                raise ValueError(f"Allele id must be a non-negative integer, got {allele!r}")
        if len(self.alleles) == 2 and not self.alleles[0] < self.alleles[1]:
            raise ValueError(f"Heterozygote allele ids must be distinct and sorted, got {self.alleles}")

    @classmethod
    def missing(cls) -> MonolocusGenotype:
        return cls(())

    @classmethod
    def homozygous(cls, allele: int) -> MonolocusGenotype:
        return cls((allele,))

    @classmethod
    def heterozygous(cls, first: int, second: int) -> MonolocusGenotype:
        if first == second:
            raise ValueError(f"Heterozygote needs two distinct alleles, got {first} twice")
        return cls(tuple(sorted((first, second))))

    @classmethod
    def from_alleles(cls, first: Optional[int], second: Optional[int]) -> MonolocusGenotype:
        """Build from two allele copies; None in either copy means missing."""
        if first is None or second is None:
            return cls.missing()
        first, second = int(first), int(second)
        if first == second:
            return cls.homozygous(first)
        return cls.heterozygous(first, second)

    @classmethod
    def parse(cls, value) -> MonolocusGenotype:
        """
        Parse a genotype cell such as ``"1/2"``, ``"3|3"`` or ``"./."``.

        NaN and the tokens in MISSING_TOKENS are read as missing data.
        """
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return cls.missing()
        text = str(value).strip()
        if text in MISSING_TOKENS:
            return cls.missing()
        parts = text.replace("|", "/").split("/")
        if len(parts) != 2:
            raise ValueError(f"Cannot parse diploid genotype: {value!r}")
        if "." in parts:
            return cls.missing()
        return cls.from_alleles(int(parts[0]), int(parts[1]))

    @property
    def is_missing(self) -> bool:
        return not self.alleles

    @property
    def is_homozygous(self) -> bool:
        return len(self.alleles) == 1

    @property
    def is_heterozygous(self) -> bool:
        return len(self.alleles) == 2

    @property
    def copies(self) -> Tuple[int, ...]:
        """The two allele copies (empty when missing)."""
        if self.is_homozygous:
            return (self.alleles[0], self.alleles[0])
        return self.alleles

    def __str__(self) -> str:
        if self.is_missing:
            return "./."
        first, second = self.copies
        return f"{first}/{second}"


@dataclass(frozen=True, slots=True)
class MultilocusGenotype:
    """
    Genotype of one individual over an ordered set of loci.

    Attributes:
        loci: One MonolocusGenotype per locus
        name: Optional individual identifier
    """
    loci: Tuple[MonolocusGenotype, ...]
    name: Optional[str] = None

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[Optional[Tuple[Optional[int], Optional[int]]]],
        name: Optional[str] = None,
    ) -> MultilocusGenotype:
        """Create from ``(a, b)`` allele pairs, None meaning missing."""
        loci = tuple(
            MonolocusGenotype.missing() if pair is None else MonolocusGenotype.from_alleles(*pair)
            for pair in pairs
        )
        return cls(loci=loci, name=name)

    def __len__(self) -> int:
        return len(self.loci)

    def replace_locus(self, locus: int, genotype: MonolocusGenotype) -> MultilocusGenotype:
        """Return a copy with the record at ``locus`` replaced."""
        loci = list(self.loci)
        loci[locus] = genotype
        return MultilocusGenotype(loci=tuple(loci), name=self.name)


class GenotypeSource(Protocol):
    """Read-only accessors the statistics need from a genotype container."""

    def group_ids(self) -> List[int]: ...

    def individuals_in(self, group_id: int) -> Sequence[MultilocusGenotype]: ...

    def locus_count(self, genotype: MultilocusGenotype) -> int: ...

    def record_at(self, genotype: MultilocusGenotype, locus: int) -> MonolocusGenotype: ...


@dataclass(frozen=True)
class GenotypeContainer:
    """
    Multilocus genotypes partitioned into integer-identified groups.

    Groups are mutually exclusive; an individual belongs to exactly one.
    The container is immutable: permutations build new containers via
    ``with_groups``.
    """

    groups: Mapping[int, Tuple[MultilocusGenotype, ...]]
    names: Mapping[int, str] = field(default_factory=dict)

    @classmethod
    def from_groups(
        cls,
        groups: Mapping[int, Iterable[MultilocusGenotype]],
        names: Optional[Mapping[int, str]] = None,
    ) -> GenotypeContainer:
        """Create from a mapping of group id -> genotypes."""
        frozen = {int(gid): tuple(members) for gid, members in sorted(groups.items())}
        return cls(groups=frozen, names=dict(names or {}))

    @classmethod
    def from_dataframe(
        cls,
        df: pd.DataFrame,
        group_column: str = "group",
        locus_columns: Optional[Sequence[str]] = None,
        name_column: Optional[str] = None,
    ) -> GenotypeContainer:
        """
        Create from a table with one row per individual.

        Args:
            df: Input table
            group_column: Column holding the integer group id
            locus_columns: Genotype columns in locus order. Defaults to every
                column except the group and name columns.
            name_column: Optional column of individual names

        Genotype cells are parsed with ``MonolocusGenotype.parse``.
        """
        if group_column not in df.columns:
            raise ValueError(f"Missing group column: {group_column}")
        if locus_columns is None:
            skip = {group_column, name_column}
            locus_columns = [c for c in df.columns if c not in skip]

        groups: Dict[int, List[MultilocusGenotype]] = {}
        for _, row in df.iterrows():
            genotype = MultilocusGenotype(
                loci=tuple(MonolocusGenotype.parse(row[c]) for c in locus_columns),
                name=str(row[name_column]) if name_column else None,
            )
            groups.setdefault(int(row[group_column]), []).append(genotype)
        return cls.from_groups(groups)

    def to_dataframe(self, group_column: str = "group") -> pd.DataFrame:
        """Flatten to one row per individual with ``"a/b"`` genotype strings."""
        rows = []
        for gid, members in self.groups.items():
            for genotype in members:
                row = {group_column: gid, "name": genotype.name}
                row.update({f"locus_{i}": str(g) for i, g in enumerate(genotype.loci)})
                rows.append(row)
        return pd.DataFrame(rows)

    def with_groups(self, groups: Mapping[int, Iterable[MultilocusGenotype]]) -> GenotypeContainer:
        """
        Return a new container where the given groups are replaced.

        Groups not named in ``groups`` are carried over unchanged.
        """
        merged = dict(self.groups)
        merged.update({gid: tuple(members) for gid, members in groups.items()})
        return GenotypeContainer.from_groups(merged, self.names)

    def group_ids(self) -> List[int]:
        return list(self.groups.keys())

    def individuals_in(self, group_id: int) -> Tuple[MultilocusGenotype, ...]:
        return self.groups[group_id]

    def locus_count(self, genotype: MultilocusGenotype) -> int:
        return len(genotype.loci)

    def record_at(self, genotype: MultilocusGenotype, locus: int) -> MonolocusGenotype:
        return genotype.loci[locus]

    def group_name(self, group_id: int) -> str:
        return self.names.get(group_id, str(group_id))

    def max_locus_count(self) -> int:
        """Largest locus count over all individuals (0 when empty)."""
        return max((len(g.loci) for members in self.groups.values() for g in members), default=0)

    def __len__(self) -> int:
        return sum(len(members) for members in self.groups.values())

    def __iter__(self) -> Iterator[MultilocusGenotype]:
        for members in self.groups.values():
            yield from members


@dataclass(frozen=True, slots=True)
class VarComp:
    """
    Weir & Cockerham (1984) variance components for one allele.

    Attributes:
        a: Among groups
        b: Among individuals within groups
        c: Within individuals
    """
    a: float
    b: float
    c: float


@dataclass(frozen=True, slots=True)
class Fstats:
    """F-statistics of one allele derived from its VarComp."""
    fit: float
    fst: float
    fis: float


@dataclass(frozen=True, slots=True)
class PermResults:
    """
    Outcome of a permutation test.

    Attributes:
        statistic: Observed multilocus statistic
        percent_above: Fraction of replicates strictly greater than it
        percent_below: Fraction of replicates strictly smaller than it
    """
    statistic: float
    percent_above: float
    percent_below: float
