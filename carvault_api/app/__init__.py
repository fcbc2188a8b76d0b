"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules.  Each domain (auth, cars, maintenance, expenses,
statistics) exposes a router defined in ``api/v1/endpoints``, a set of
Pydantic schemas in ``schemas`` and a service class in ``services``.
Versioning is handled by grouping routers under the ``api/<version>/``
hierarchy.
"""

from .main import app  # noqa: F401
