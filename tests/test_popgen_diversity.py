"""
Tests for popgenstats.popgen.diversity module.
"""

import pytest
from popgenstats.core.models import GenotypeContainer, MultilocusGenotype
from popgenstats.core.result import ErrorKind
from popgenstats.popgen.diversity import (
    expected_heterozygosity,
    observed_heterozygosity,
    unbiased_expected_heterozygosity,
)


class TestHeterozygosity:
    """Tests for heterozygosity estimators."""

    def test_example_values(self, two_group_container):
        """Test Hobs and Hexp of the pooled two-group example."""
        assert observed_heterozygosity(two_group_container, 0, [1, 2]).unwrap() == pytest.approx(0.5)
        assert expected_heterozygosity(two_group_container, 0, [1, 2]).unwrap() == pytest.approx(0.5)

    def test_unbiased_correction(self, two_group_container):
        """Test Hnb = Hexp * 2n / (2n - 1) with n = 4."""
        h_nb = unbiased_expected_heterozygosity(two_group_container, 0, [1, 2]).unwrap()
        assert h_nb == pytest.approx(0.5 * 8 / 7)

    def test_homozygote_only_allele_counts_in_mean(self):
        """Test an allele seen only in homozygotes adds a 0 to the mean."""
        container = GenotypeContainer.from_groups({
            1: [MultilocusGenotype.from_pairs([pair]) for pair in [(1, 1), (1, 2), (3, 3)]],
        })
        assert observed_heterozygosity(container, 0, [1]).unwrap() == pytest.approx(2 / 9)

    def test_monomorphic_locus(self):
        """Test a fixed allele gives zero heterozygosity."""
        container = GenotypeContainer.from_groups({
            1: [MultilocusGenotype.from_pairs([(3, 3)]) for _ in range(4)],
        })
        assert expected_heterozygosity(container, 0, [1]).unwrap() == 0.0
        assert observed_heterozygosity(container, 0, [1]).unwrap() == 0.0

    def test_expected_in_unit_interval(self, three_group_container):
        """Test 0 <= Hexp < 1 for polymorphic loci."""
        for locus in range(2):
            for groups in ([1], [2], [3], [1, 2, 3]):
                h_exp = expected_heterozygosity(three_group_container, locus, groups).unwrap()
                assert 0.0 <= h_exp < 1.0

    def test_unbiased_not_smaller(self, three_group_container):
        """Test Hnb >= Hexp since the correction factor is >= 1."""
        for locus in range(2):
            for groups in ([1], [2], [3], [1, 2, 3]):
                h_exp = expected_heterozygosity(three_group_container, locus, groups).unwrap()
                h_nb = unbiased_expected_heterozygosity(three_group_container, locus, groups).unwrap()
                assert h_nb >= h_exp

    def test_no_data_fails(self):
        """Test estimators fail on a locus with only missing data."""
        container = GenotypeContainer.from_groups({
            1: [MultilocusGenotype.from_pairs([None]) for _ in range(3)],
        })
        for estimator in (observed_heterozygosity, expected_heterozygosity, unbiased_expected_heterozygosity):
            result = estimator(container, 0, [1])
            assert result.unwrap_err().kind is ErrorKind.ZERO_DIVISION

    def test_bounds(self, two_group_container):
        """Test estimators validate the locus."""
        result = expected_heterozygosity(two_group_container, 1, [1, 2])
        assert result.unwrap_err().kind is ErrorKind.BOUNDS
