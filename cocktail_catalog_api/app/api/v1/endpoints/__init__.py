"""
Endpoint subpackage for API v1.

Each module in this package defines an APIRouter for one part of the
catalog (items, ratings, favorites, comments, the merged catalog
view).  The routers are aggregated in ``router.py``.
"""
