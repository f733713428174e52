"""FinTrack console application."""
