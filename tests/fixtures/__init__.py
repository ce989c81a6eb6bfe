"""Shared fixtures for b2client tests."""
