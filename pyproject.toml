[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "brpcluster"
version = "0.1.0"
description = "Station clustering and transfer-tuple evaluation for bike-sharing rebalancing problems"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "bike-sharing",
    "rebalancing",
    "k-medoids",
    "clustering",
    "operations-research",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
brpcluster = "brpcluster.problem:main"

[tool.hatch.build.targets.wheel]
packages = ["brpcluster"]

[tool.pytest.ini_options]
addopts = "-ra"
