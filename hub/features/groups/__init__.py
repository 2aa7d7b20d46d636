"""
Group feature module.

Groups, their memberships, and the permission wrappers and server actions
that manage them.
"""
