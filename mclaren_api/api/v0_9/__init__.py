"""API version 0.9."""
