"""
Authentication application.

This app is the session gate of the chat backend: a user is identified by
a unique name and a secret, and the first login with an unused name
registers it.

Key components:
    - User model: Name-keyed user with a hashed secret
    - AuthService: Login-or-register and user lookup

Usage:
    from authentication.models import User
    from authentication.services import AuthService
"""
