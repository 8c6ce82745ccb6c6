"""
Single-row lookup query construction.

Identifiers reach the query text only through `psycopg.sql.Identifier` (quoted by
the driver) and filter values only as bound parameters. Nothing supplied by the
caller is ever formatted into the SQL string directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from psycopg import sql

from shopwatch.security.identifiers import validate_identifier


@dataclass(frozen=True)
class LookupQuery:
    """
    `SELECT <field> FROM <table> [WHERE <col> = %s AND ...] LIMIT 1`.
    """

    table: str
    field: str
    filter_columns: Tuple[str, ...] = ()
    params: Tuple[Any, ...] = ()

    def compose(self) -> sql.Composed:
        query = sql.SQL("SELECT {field} FROM {table}").format(
            field=sql.Identifier(self.field),
            table=sql.Identifier(self.table),
        )
        if self.filter_columns:
            predicates = sql.SQL(" AND ").join(
                sql.SQL("{column} = {value}").format(
                    column=sql.Identifier(column), value=sql.Placeholder()
                )
                for column in self.filter_columns
            )
            query = query + sql.SQL(" WHERE ") + predicates
        return query + sql.SQL(" LIMIT 1")


def build_lookup_query(table: str, field: str, filter: Mapping[str, Any]) -> LookupQuery:
    """
    Build the lookup for `field` of the first `table` row matching `filter`.

    Identifiers are re-validated here so the builder is safe on its own, not
    only behind the parser.
    """
    validate_identifier(table, "table name")
    validate_identifier(field, "field name")
    columns = tuple(validate_identifier(column, "WHERE clause field") for column in filter)
    return LookupQuery(
        table=table,
        field=field,
        filter_columns=columns,
        params=tuple(filter[column] for column in columns),
    )


__all__ = ["LookupQuery", "build_lookup_query"]
