"""xPoints exchange API service."""
