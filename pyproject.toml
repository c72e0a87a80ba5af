[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bingobj"
version = "0.1.0"
description = "Binarized normed gradient (BING) objectness proposals: prediction, training-data generation and recall evaluation on VOC-style datasets"
requires-python = ">=3.10"
keywords = ["objectness", "object proposals", "bing", "computer vision", "pascal voc"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Recognition",
]
dependencies = [
    "numpy",
    "pillow",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
bingobj = "bingobj.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["bingobj"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
