[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tinitetris"
version = "0.1.0"
description = "A four-player falling-block battle game with garbage attacks, T-spins and computer opponents"
requires-python = ">=3.10"
dependencies = []
keywords = ["tetris", "puzzle", "game", "multiplayer", "falling blocks"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment :: Puzzle Games",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tinitetris = "tinitetris.app:main"

[tool.hatch.build.targets.wheel]
packages = ["tinitetris"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
