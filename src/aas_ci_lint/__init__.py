"""aas-ci-lint: Asset Administration Shell validation for CI pipelines."""

__version__ = "0.1.0"
