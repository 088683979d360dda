"""
Endpoint modules.

Each module defines an ``APIRouter`` for one area (health, accounts,
products).  They are aggregated in ``api/router.py``.
"""
