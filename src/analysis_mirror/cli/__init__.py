"""Command-line interface for analysis-mirror."""
