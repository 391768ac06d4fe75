[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "progpowhash"
version = "0.4.3"
description = "Pure Python Ethash and ProgPoW proof-of-work hashing, with Keccak and epoch context support"
requires-python = ">=3.10"
dependencies = []
keywords = ["ethash", "progpow", "keccak", "proof-of-work", "hashing", "kiss99"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["progpowhash"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
