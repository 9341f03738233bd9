"""Schema introspection and DDL for SQLGateway."""

from sqlgateway.schema.introspector import SchemaIntrospector
from sqlgateway.schema.mutator import SchemaMutator, build_create_table, plan_update

__all__ = [
    "SchemaIntrospector",
    "SchemaMutator",
    "build_create_table",
    "plan_update",
]
