[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "platerec"
version = "0.1.0"
description = "Locate, segment and read blue licence plates in images by colour analysis and template matching"
requires-python = ">=3.10"
keywords = [
    "licence plate",
    "license plate",
    "template matching",
    "image recognition",
    "segmentation",
    "otsu",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Recognition",
    "Topic :: Multimedia :: Graphics",
]
dependencies = [
    "numpy",
    "scipy",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
platerec = "platerec.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["platerec"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
