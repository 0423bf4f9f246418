"""Fixture-backed providers used when MOCK_AWS is enabled."""
