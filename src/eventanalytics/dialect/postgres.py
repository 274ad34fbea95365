"""PostgreSQL dialect implementation."""

from __future__ import annotations

from eventanalytics.ast.nodes import Expr
from eventanalytics.dialect.base import Dialect, DialectCapabilities
from eventanalytics.dialect.registry import DialectRegistry


@DialectRegistry.register
class PostgresDialect(Dialect):
    """PostgreSQL dialect: jsonb path operators, POSIX regex, table inheritance, PostGIS."""

    @property
    def name(self) -> str:
        return "postgres"

    @property
    def capabilities(self) -> DialectCapabilities:
        return DialectCapabilities(
            supports_regex_match=True,
            supports_json_path=True,
            supports_table_inheritance=True,
            supports_spatial=True,
        )

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace('"', '""')
        return f'"{escaped}"'

    def compile_json_path_text(self, expr: Expr, path: list[str]) -> str:
        elements = ",".join(path).replace("'", "''")
        return f"{self.compile_expr(expr)} #>> '{{{elements}}}'"
