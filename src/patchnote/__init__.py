"""Rule-driven pull request review comments."""

__version__ = "0.1.0"
