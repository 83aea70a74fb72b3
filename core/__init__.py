"""
Core package wiring the FastAPI application of the Inline Writing Assistant.
Importing this package ensures all route modules are loaded so route
definitions attach to the shared FastAPI application.
"""

# Import order matters: ensure app state is initialized before routes.
from . import app_state  # noqa: F401

# Route modules register themselves upon import.
from . import service_routes  # noqa: F401

from .app_state import app  # noqa: F401
