"""draftreel — segment-based recording drafts, edit decision lists and transcript retiming."""

__version__ = "0.1.0"
