"""
API module for docdb.

This module provides the HTTP interface:
- create_app: FastAPI application factory
- router: routes mirroring the DocumentService operations

How to change safely:
    - Keep route paths stable; front ends and scripts depend on them
    - Map every new ErrorKind in routes.STATUS_BY_ERROR
"""

from .app import create_app
from .routes import router

__all__ = [
    "create_app",
    "router",
]
