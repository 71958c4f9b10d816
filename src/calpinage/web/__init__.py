"""FastAPI REST API for cutting plan optimization.

Usage:
    uvicorn calpinage.web:app --reload
"""

from calpinage.web.app import app, create_app

__all__ = ["app", "create_app"]
