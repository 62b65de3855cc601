"""Logging and metrics for kapply."""
