"""Core configuration, errors and utilities."""
