"""Command-line interface for coach-progression."""
