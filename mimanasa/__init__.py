"""Mimanasa - terminal client for the Mimanasa digital library

This package contains:
- Session persistence (storage.py, session.py)
- Navigation history and screen routing (navigation.py, router.py)
- Authentication gate and password recovery (controller.py, recovery.py)
- Backend client (services/)
- Terminal views and CLI (screens/, shell.py, cli.py)
"""

__version__ = "1.0.0"
