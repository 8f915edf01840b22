"""teamtrack: task lifecycle, authorization and performance accounting for small teams."""

__version__ = "0.1.0"
