from setuptools import setup, find_packages

setup(
    name="atomgraph",
    version="0.1.0",
    description="atomgraph: weighted neighbor graphs of crystals and molecules",
    author="atomgraph Team",
    license="MIT",
    packages=find_packages(include=["atomgraph", "atomgraph.*"]),
    package_data={"atomgraph.featurize": ["data/*.csv"]},
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.24",
        "scipy>=1.11",
        "pandas>=2.0",
        "pymatgen>=2024.1.1",
        "ase>=3.22",
        "torch>=2.1",
        "tqdm>=4.65",
    ],
    extras_require={
        "ml": [
            "torch-geometric>=2.4",
        ],
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "atomgraph=atomgraph.cli:main",
        ],
    },
)
