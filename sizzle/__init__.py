"""Analysis of build and test tool output into compact reports, and background command running."""

__version__ = "0.1.0"