# backend/corsprobe/__init__.py
from __future__ import annotations

"""
Marks `corsprobe` as a Python package.

Routers live in corsprobe/api, the diagnostic engine and request
execution in corsprobe/services, etc.
"""
