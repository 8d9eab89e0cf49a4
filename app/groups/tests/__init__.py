"""
Tests for groups app.

Usage:
    pytest groups/tests/
"""
