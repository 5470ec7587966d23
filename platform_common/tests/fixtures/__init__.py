"""Test doubles and fixtures for platform_common tests."""
