
from setuptools import setup, find_packages

setup(
    name="popgenstats",
    version="1.0.0",
    description="Population genetics summary statistics for grouped multilocus genotypes",
    long_description="Allele frequencies, heterozygosity, Weir & Cockerham F-statistics, Nei distances and permutation tests over diploid genotypes partitioned into groups",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
    'numpy>=1.24.4',
    'pandas>=2.0.3',
    'scipy>=1.10.1',
    'PyYAML>=6.0',
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: CC BY-NC 4.0",
        "Operating System :: OS Independent",
    ],
    license="Creative Commons Attribution-NonCommercial 4.0",
    )
