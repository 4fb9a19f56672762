"""Command-line interface for ProjectPulse."""
