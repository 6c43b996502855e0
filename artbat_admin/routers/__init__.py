"""
HTTP routers.

Each module exposes an APIRouter; the app factory includes them.
"""
