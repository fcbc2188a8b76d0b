"""
Service layer abstraction.

Each service encapsulates business logic for a domain and talks to
SQLite through ``core.db``.  Services raise the exceptions defined in
``core.exceptions``; API handlers never build SQL themselves.
"""
