"""
Tests for chat app.

This package contains test modules for:
- test_models.py: Conversation, Message model tests
- test_services.py: Conversation/Message/Interest/Sync service tests
- test_registry.py, test_broadcast.py: Live connection bookkeeping and fan-out
- test_consumers.py: WebSocket consumer tests
- test_views.py: REST API endpoint tests
- test_sync.py: Client-side inbox reconciliation

Usage:
    pytest chat/tests/
    pytest chat/tests/test_consumers.py
"""
