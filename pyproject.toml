[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "imgload"
version = "0.1.0"
description = "Pure-Python readers for XPM and XV thumbnail images and an anti-aliased vector shape rasterizer"
requires-python = ">=3.10"
keywords = ["image", "xpm", "xv", "thumbnail", "svg", "rasterizer", "pixmap"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Graphics",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["imgload"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
