"""Infrastructure layer package.

Implements TaskStorePort with concrete adapters (in-memory, PostgreSQL).
The interpreter MUST NOT import from this package directly.
"""
