[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "primordial"
version = "2.0.0"
description = "Ecosystem simulation building blocks: evolvable neural networks, genetics, phylogeny and spatial grids"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "artificial-life",
    "neuroevolution",
    "neat",
    "phylogeny",
    "hebbian-learning",
    "simulation",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Artificial Life",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["primordial"]

[tool.pytest.ini_options]
addopts = "-ra"
