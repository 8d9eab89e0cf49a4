"""
Tests for authentication app.

This package contains test modules for:
- test_managers.py: UserManager creation rules
- test_models.py: User model fields and validation
- test_identity.py: Caller resolution
- test_services.py: ProfileService public profile lookup

Usage:
    pytest authentication/tests/
    pytest authentication/tests/test_identity.py
"""
