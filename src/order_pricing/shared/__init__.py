"""Shared models, validators, and utilities for the order pricing service."""
