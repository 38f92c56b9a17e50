"""
Key-value storage backends for the client-side progress store (infra adapters).

Import them from their module, e.g. `from infra.storage.sql_storage import SqlKeyValueStorage`.
"""

__all__ = []
