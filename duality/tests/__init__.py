"""Duality engine tests."""
