"""pr-checker: list fresh open and draft pull requests across a GitHub org."""

__version__ = "0.2.0"
