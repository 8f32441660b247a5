"""
Authentication application.

This app provides marketplace accounts, JWT login, follows and the
last-seen timestamp behind presence.

Key components:
    - User model: Email-based user with username, admin flag and last_seen
    - AuthService: Registration
    - FollowService: Follow/unfollow other members
    - PresenceService: Persist and read last_seen

Usage:
    from authentication.models import User
    from authentication.services import AuthService, PresenceService
"""
