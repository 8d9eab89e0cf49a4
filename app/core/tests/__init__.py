"""
Tests for core app.

Usage:
    pytest core/tests/
"""
