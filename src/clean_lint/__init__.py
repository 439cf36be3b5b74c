"""Rule-based linter for the clean-code JavaScript style guide."""

__version__ = "0.1.0"
