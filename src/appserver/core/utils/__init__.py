"""Shared utilities for the appserver core."""
