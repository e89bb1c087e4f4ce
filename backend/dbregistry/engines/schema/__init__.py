"""
Schema introspection: per-dialect catalog queries and the SchemaInspector.
"""

from dbregistry.engines.schema.inspector import SchemaInspector
from dbregistry.engines.schema.queries import CatalogQueries, catalog_queries

__all__ = [
    "SchemaInspector",
    "CatalogQueries",
    "catalog_queries",
]
