"""
Application package.

``main.create_app`` builds the HTTP application; ``core`` holds the
config, storage, security and envelope plumbing, ``services`` the
queries per record type, ``schemas`` the pydantic models and ``api``
the routers.
"""

from .main import create_app  # noqa: F401
