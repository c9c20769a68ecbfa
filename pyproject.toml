[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tyr"
version = "0.1.0"
description = "BitTorrent client building blocks: bencode, torrent metainfo, BEP 40 peer priority, piece layout and tracker reply parsing"
requires-python = ">=3.11"
dependencies = []
keywords = ["bittorrent", "torrent", "bencode", "tracker", "p2p", "bep40"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: File Sharing",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tyr"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
strict = true
