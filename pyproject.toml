[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "twoparty_ecdsa"
version = "0.1.0"
description = "Two-party ECDSA over secp256k1 with Paillier encryption and zero-knowledge proofs"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "ecdsa",
    "secp256k1",
    "threshold-signatures",
    "two-party-computation",
    "paillier",
    "zero-knowledge",
    "mta",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["twoparty_ecdsa"]

[tool.hatch.build.targets.sdist]
include = ["twoparty_ecdsa", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
