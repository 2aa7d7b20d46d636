"""
User feature module.

User profiles, caller resolution, and the permission wrappers and server
actions for user management.
"""
