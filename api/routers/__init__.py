"""
FastAPI routers grouped by domain (users, water, activities, social).

Each module exposes an APIRouter included by create_app. Handlers reach the
Storage contract through the dependencies in deps.py, never through a
concrete backend.
"""
