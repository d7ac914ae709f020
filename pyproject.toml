[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bitrade"
version = "0.1.0"
description = "An in-process spot-market order matching engine with limit, market and fill-or-kill matching, market depth and wallets"
requires-python = ">=3.10"
dependencies = []
keywords = ["trading", "matching-engine", "order-book", "exchange", "spot-market"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["bitrade"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
