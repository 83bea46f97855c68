"""Users app package.

Accounts for guests and hosts. ``apps.users.models.CustomUser`` is the
``AUTH_USER_MODEL``; people log in with their email or username and
receive JWT access/refresh tokens.
"""
