"""
Top‑level package for the Perilla registry API.

The HTTP application lives under ``app`` (``perilla_api.app.main``)
and the operator command line tool in ``perilla_api.cli``.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
