# accounts/__init__.py
"""
Accounts app - users and business units.

This app provides:
- User: Custom email-based user model with an active business unit
- BusinessUnit: The restaurant keeping a set of books
- BusinessUnitMembership: User-BusinessUnit relationship with a role
- ActorContext: Authorization context utilities
"""
