"""
API routes, one module per resource.

Every router declares its own resource prefix and is mounted under
``/api`` in ``esports_arena.main``. Admin routes are guarded by
``require_admin``.
"""
