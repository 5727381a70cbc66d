"""
Oracle Package
==============

Question answering through the Venice AI chat-completion API.

Main Components:
----------------
- routes.py: FastAPI router with the /ask endpoint
- validation.py: Prompt and mode checks (400 before any upstream call)
- service.py: Persona selection, upstream call and answer extraction

Usage:
------
    from gateway.app.oracle import oracle_router
    app.include_router(oracle_router, prefix="/api")
"""

from .routes import oracle_router

__all__ = ["oracle_router"]
