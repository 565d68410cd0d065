"""Core infrastructure shared by every layer of the API."""
