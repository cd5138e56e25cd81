"""Convert application modernization assessment reports to CSV."""

__version__ = "0.1.0"
