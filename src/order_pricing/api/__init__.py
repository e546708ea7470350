"""HTTP API for the order pricing service."""
