"""
Tests for authentication app.

This package contains test modules for:
- test_services.py: AuthService, FollowService, PresenceService tests
- test_views.py: API endpoint tests

Usage:
    pytest authentication/tests/
"""
