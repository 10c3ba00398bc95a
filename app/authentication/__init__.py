"""
Authentication app.

Owns the User model (email login, platform role, avatar) and JWT issuance.
The chat app consumes the authenticated identity it produces.
"""
