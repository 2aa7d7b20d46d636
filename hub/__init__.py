"""
Hub access backend.

Multi-tenant group/user management gated by group-scoped capabilities and an
organizational field edit policy.
"""
