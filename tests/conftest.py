"""
Test configuration and fixtures.
"""

import pytest
from pathlib import Path
import tempfile
import shutil

from popgenstats.core.models import GenotypeContainer, MultilocusGenotype


def make_genotype(*pairs, name=None) -> MultilocusGenotype:
    """Create a genotype from (a, b) pairs, None meaning missing."""
    return MultilocusGenotype.from_pairs(pairs, name=name)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir)


@pytest.fixture
def two_group_container():
    """
    Four individuals, one locus, alleles {1, 2}.

    Group 1: 1/1, 1/2
    Group 2: 2/2, 1/2
    """
    return GenotypeContainer.from_groups({
        1: [make_genotype((1, 1)), make_genotype((1, 2))],
        2: [make_genotype((2, 2)), make_genotype((1, 2))],
    })


@pytest.fixture
def three_group_container():
    """Three groups, two loci (bi- and tri-allelic), one missing record."""
    return GenotypeContainer.from_groups(
        {
            1: [
                make_genotype((1, 1), (1, 2), name="a1"),
                make_genotype((1, 2), (1, 1), name="a2"),
                make_genotype((1, 1), (2, 3), name="a3"),
                make_genotype((1, 2), None, name="a4"),
            ],
            2: [
                make_genotype((2, 2), (2, 2), name="b1"),
                make_genotype((1, 2), (2, 3), name="b2"),
                make_genotype((2, 2), (3, 3), name="b3"),
                make_genotype((1, 1), (1, 3), name="b4"),
            ],
            3: [
                make_genotype((1, 2), (1, 1), name="c1"),
                make_genotype((2, 2), (1, 3), name="c2"),
                make_genotype((1, 2), (2, 2), name="c3"),
            ],
        },
        names={1: "north", 2: "south", 3: "east"},
    )


@pytest.fixture
def identical_groups_container():
    """Two groups of 30 individuals with identical genotypes at two loci."""
    pattern = [
        make_genotype((1, 1), (1, 2)),
        make_genotype((1, 2), (2, 2)),
        make_genotype((2, 2), (1, 1)),
        make_genotype((1, 2), (1, 2)),
        make_genotype((1, 1), (2, 2)),
        make_genotype((2, 2), (1, 2)),
    ]
    members = pattern * 5
    return GenotypeContainer.from_groups({1: members, 2: list(members)})


@pytest.fixture
def fixed_difference_container():
    """Two groups of 10 individuals fixed for different alleles."""
    return GenotypeContainer.from_groups({
        1: [make_genotype((1, 1)) for _ in range(10)],
        2: [make_genotype((2, 2)) for _ in range(10)],
    })
