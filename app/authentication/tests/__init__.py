"""
Tests for authentication app.

This package contains test modules for:
- test_models.py: User model and UserManager tests
- test_views.py: JWT login, refresh, logout and current-user endpoints

Usage:
    pytest authentication/tests/
    pytest authentication/tests/test_models.py
"""
