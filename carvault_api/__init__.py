"""
Top‑level package for the CarVault API.

This file makes ``carvault_api`` a regular Python package so that
modules within ``app`` can be imported using fully qualified names
like ``carvault_api.app.main``.  The HTTP client used by front ends
and scripts lives in ``carvault_api.client``.

The package provides no public exports; all functionality lives in
submodules.
"""

__all__ = []
