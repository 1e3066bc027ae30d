[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "helmkit"
version = "0.1.0"
description = "Helpers for testing Helm charts: a sandboxed helm CLI client, Kubernetes manifest serde, golden files and schema-driven value fuzzing"
requires-python = ">=3.10"
keywords = ["helm", "kubernetes", "testing", "jsonschema", "fuzzing", "golden"]
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
    "Topic :: Software Development :: Testing",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "pyyaml>=6.0",
    "jsonschema>=4.18",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "hypothesis>=6.80",
]

[tool.hatch.build.targets.wheel]
packages = ["helmkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
