[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "plrustkit"
version = "1.2.8"
description = "Bookkeeping for a Rust procedural language: dependency allow-lists, version requirements, compilation targets, settings and stored function entries"
requires-python = ">=3.11"
dependencies = []
keywords = ["postgresql", "procedural-language", "allow-list", "semver", "compilation-targets"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["plrustkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
