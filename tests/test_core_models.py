"""
Tests for popgenstats.core.models module.
"""

import numpy as np
import pandas as pd
import pytest
from popgenstats.core.models import (
    Fstats,
    GenotypeContainer,
    MonolocusGenotype,
    MultilocusGenotype,
    VarComp,
)


class TestMonolocusGenotype:
    """Tests for MonolocusGenotype dataclass."""

    def test_homozygous(self):
        """Test homozygote stores one id and two copies."""
        genotype = MonolocusGenotype.homozygous(3)
        assert genotype.is_homozygous
        assert genotype.alleles == (3,)
        assert genotype.copies == (3, 3)

    def test_heterozygous_sorted(self):
        """Test heterozygote ids are normalized to sorted order."""
        genotype = MonolocusGenotype.heterozygous(5, 2)
        assert genotype.is_heterozygous
        assert genotype.alleles == (2, 5)

    def test_missing(self):
        """Test missing genotype has no copies."""
        genotype = MonolocusGenotype.missing()
        assert genotype.is_missing
        assert genotype.copies == ()
        assert str(genotype) == "./."

    def test_from_alleles(self):
        """Test building from two copies."""
        assert MonolocusGenotype.from_alleles(1, 1) == MonolocusGenotype.homozygous(1)
        assert MonolocusGenotype.from_alleles(2, 1) == MonolocusGenotype.heterozygous(1, 2)
        assert MonolocusGenotype.from_alleles(None, 1).is_missing

    def test_accepts_numpy_integers(self):
        """Test numpy integer ids are converted."""
        genotype = MonolocusGenotype.from_alleles(np.int64(1), np.int64(4))
        assert genotype.alleles == (1, 4)

    def test_heterozygote_needs_distinct_alleles(self):
        """Test heterozygote rejects identical ids."""
        with pytest.raises(ValueError):
            MonolocusGenotype.heterozygous(2, 2)

    def test_negative_allele_rejected(self):
        """Test negative ids are rejected."""
        with pytest.raises(ValueError):
            MonolocusGenotype.homozygous(-1)

    def test_immutable(self):
        """Test that genotypes are frozen."""
        genotype = MonolocusGenotype.homozygous(1)
        with pytest.raises(AttributeError):
            genotype.alleles = (2,)

    @pytest.mark.parametrize("text, expected", [
        ("1/2", (1, 2)),
        ("2|1", (1, 2)),
        ("3/3", (3,)),
        ("./.", ()),
        ("", ()),
        ("-", ()),
        (float("nan"), ()),
        (None, ()),
    ])
    def test_parse(self, text, expected):
        """Test parsing genotype strings."""
        assert MonolocusGenotype.parse(text).alleles == expected

    def test_parse_invalid(self):
        """Test parsing a non-diploid string fails."""
        with pytest.raises(ValueError):
            MonolocusGenotype.parse("1/2/3")


class TestMultilocusGenotype:
    """Tests for MultilocusGenotype dataclass."""

    def test_from_pairs(self):
        """Test creation from allele pairs."""
        genotype = MultilocusGenotype.from_pairs([(1, 1), None, (2, 1)], name="ind1")
        assert len(genotype) == 3
        assert genotype.loci[1].is_missing
        assert genotype.loci[2].alleles == (1, 2)
        assert genotype.name == "ind1"

    def test_replace_locus(self):
        """Test replacing one record returns a new genotype."""
        genotype = MultilocusGenotype.from_pairs([(1, 1), (2, 2)])
        replaced = genotype.replace_locus(1, MonolocusGenotype.missing())
        assert replaced.loci[1].is_missing
        assert genotype.loci[1].alleles == (2,)


class TestGenotypeContainer:
    """Tests for GenotypeContainer."""

    def test_accessors(self, three_group_container):
        """Test the read-only accessors."""
        container = three_group_container
        assert container.group_ids() == [1, 2, 3]
        members = container.individuals_in(2)
        assert len(members) == 4
        assert container.locus_count(members[0]) == 2
        assert container.record_at(members[0], 1).alleles == (2,)
        assert container.group_name(1) == "north"
        assert container.max_locus_count() == 2
        assert len(container) == 11

    def test_from_dataframe(self):
        """Test building from a table with string genotypes."""
        df = pd.DataFrame({
            "sample": ["s1", "s2", "s3"],
            "pop": [1, 1, 2],
            "locA": ["1/1", "1/2", np.nan],
            "locB": ["2/2", "./.", "1/3"],
        })

        container = GenotypeContainer.from_dataframe(df, group_column="pop", name_column="sample")

        assert container.group_ids() == [1, 2]
        first = container.individuals_in(1)[0]
        assert first.name == "s1"
        assert [str(g) for g in first.loci] == ["1/1", "2/2"]
        assert container.individuals_in(2)[0].loci[0].is_missing

    def test_from_dataframe_missing_group_column(self):
        """Test a missing group column is reported."""
        with pytest.raises(ValueError, match="group column"):
            GenotypeContainer.from_dataframe(pd.DataFrame({"locA": ["1/1"]}))

    def test_to_dataframe(self, two_group_container):
        """Test flattening back to a table."""
        df = two_group_container.to_dataframe()
        assert len(df) == 4
        assert list(df["locus_0"]) == ["1/1", "1/2", "2/2", "1/2"]

    def test_with_groups_returns_new_container(self, two_group_container):
        """Test with_groups leaves the original untouched."""
        swapped = two_group_container.with_groups({
            1: two_group_container.individuals_in(2),
            2: two_group_container.individuals_in(1),
        })
        assert swapped.individuals_in(1) == two_group_container.individuals_in(2)
        assert two_group_container.individuals_in(1)[0].loci[0].alleles == (1,)


class TestValueRecords:
    """Tests for VarComp / Fstats records."""

    def test_records_are_frozen(self):
        """Test value records cannot be modified."""
        vc = VarComp(a=0.1, b=0.2, c=0.3)
        with pytest.raises(AttributeError):
            vc.a = 1.0
        fs = Fstats(fit=0.1, fst=0.2, fis=0.3)
        with pytest.raises(AttributeError):
            fs.fst = 0.0
