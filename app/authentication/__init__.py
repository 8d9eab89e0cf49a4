"""
Authentication application.

This app owns the user model and the two collaborators the chat core
consumes from it: caller identity resolution and public profile lookup.

Key components:
    - User model: Email-based login with a public forum profile
    - resolve_caller: Turns request context into an authenticated User
    - ProfileService: Resolves user ids to username/nickname/avatar

Usage:
    from authentication.identity import resolve_caller
    from authentication.services import ProfileService
"""
