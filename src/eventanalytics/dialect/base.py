"""Abstract base dialect with capability flags and default SQL compilation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from eventanalytics.ast.nodes import (
    AliasedExpr,
    Analyze,
    BinaryOp,
    CaseExpr,
    Cast,
    ColumnRef,
    CreateIndex,
    CreateTable,
    DropTable,
    Expr,
    Extract,
    From,
    FunctionCall,
    Insert,
    InList,
    IsNull,
    Join,
    JsonPathText,
    Literal,
    RenameTable,
    Select,
    SetInherit,
    Star,
    Statement,
    SubqueryExpr,
)


@dataclass
class DialectCapabilities:
    """Flags indicating what SQL features a dialect supports."""

    supports_regex_match: bool = False
    supports_json_path: bool = False
    supports_table_inheritance: bool = False
    supports_spatial: bool = False


class Dialect(ABC):
    """Abstract base for all SQL dialects.

    Provides default SQL compilation; dialects override specific methods.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def capabilities(self) -> DialectCapabilities: ...

    @abstractmethod
    def quote_identifier(self, name: str) -> str:
        """Quote an identifier per dialect rules."""

    @abstractmethod
    def compile_json_path_text(self, expr: Expr, path: list[str]) -> str:
        """Return SQL extracting the text at ``path`` from a JSON column."""

    def compile(self, ast: Statement) -> str:
        """Render a complete statement to a dialect-specific string."""
        match ast:
            case Select():
                return self.compile_select(ast)
            case Insert():
                return self.compile_insert(ast)
            case CreateTable():
                return self.compile_create_table(ast)
            case DropTable(name=name, if_exists=if_exists, cascade=cascade):
                exists = "IF EXISTS " if if_exists else ""
                suffix = " CASCADE" if cascade else ""
                return f"DROP TABLE {exists}{self.quote_identifier(name)}{suffix}"
            case RenameTable(name=name, new_name=new_name):
                return (
                    f"ALTER TABLE {self.quote_identifier(name)} "
                    f"RENAME TO {self.quote_identifier(new_name)}"
                )
            case SetInherit(name=name, parent=parent, inherit=inherit):
                keyword = "INHERIT" if inherit else "NO INHERIT"
                return (
                    f"ALTER TABLE {self.quote_identifier(name)} "
                    f"{keyword} {self.quote_identifier(parent)}"
                )
            case CreateIndex(name=name, table=table, column=column, method=method):
                return (
                    f"CREATE INDEX {self.quote_identifier(name)} ON {self.quote_identifier(table)} "
                    f"USING {method} ({self.quote_identifier(column)})"
                )
            case Analyze(table=table):
                return f"ANALYZE {self.quote_identifier(table)}"
            case _:
                raise ValueError(f"Unknown statement type: {type(ast).__name__}")

    def compile_select(self, node: Select) -> str:
        """Compile a SELECT statement."""
        parts: list[str] = []

        # SELECT
        keyword = "SELECT DISTINCT" if node.distinct else "SELECT"
        if node.columns:
            cols = ", ".join(self.compile_expr(c) for c in node.columns)
            parts.append(f"{keyword} {cols}")
        else:
            parts.append(f"{keyword} *")

        # FROM
        if node.from_:
            parts.append(f"FROM {self.compile_from(node.from_)}")

        # JOINs
        for join in node.joins:
            parts.append(self.compile_join(join))

        # WHERE
        if node.where:
            parts.append(f"WHERE {self.compile_expr(node.where)}")

        # GROUP BY
        if node.group_by:
            groups = ", ".join(self.compile_expr(g) for g in node.group_by)
            parts.append(f"GROUP BY {groups}")

        return "\n".join(parts)

    def compile_insert(self, node: Insert) -> str:
        """Compile INSERT INTO ... SELECT with an explicit, aligned column list."""
        cols = ", ".join(self.quote_identifier(c) for c in node.columns)
        return (
            f"INSERT INTO {self.quote_identifier(node.table)} ({cols})\n"
            f"{self.compile_select(node.query)}"
        )

    def compile_create_table(self, node: CreateTable) -> str:
        defs: list[str] = []
        for column in node.columns:
            nullability = " NOT NULL" if column.not_null else ""
            defs.append(f"{self.quote_identifier(column.name)} {column.type_name}{nullability}")
        for check in node.checks:
            defs.append(f"CHECK {self.compile_expr(check)}")
        body = ",\n  ".join(defs)
        sql = f"CREATE TABLE {self.quote_identifier(node.name)} (\n  {body}\n)"
        if node.inherits:
            sql += f" INHERITS ({self.quote_identifier(node.inherits)})"
        return sql

    def compile_from(self, node: From) -> str:
        if isinstance(node.source, Select):
            sub = self.compile_select(node.source)
            result = f"(\n{sub}\n)"
        else:
            result = str(node.source)
        if node.alias:
            result += f" AS {self.quote_identifier(node.alias)}"
        return result

    def compile_join(self, node: Join) -> str:
        if isinstance(node.source, Select):
            source = f"(\n{self.compile_select(node.source)}\n)"
        else:
            source = str(node.source)
        if node.alias:
            source += f" AS {self.quote_identifier(node.alias)}"

        parts = [f"{node.join_type.value} JOIN {source}"]
        if node.on:
            parts.append(f"ON {self.compile_expr(node.on)}")
        return " ".join(parts)

    def compile_expr(self, expr: Expr) -> str:
        """Compile an expression node to SQL string."""
        match expr:
            case Literal(value=None):
                return "NULL"
            case Literal(value=True):
                return "TRUE"
            case Literal(value=False):
                return "FALSE"
            case Literal(value=v) if isinstance(v, str):
                escaped = v.replace("'", "''")
                return f"'{escaped}'"
            case Literal(value=v):
                return str(v)
            case Star(table=None):
                return "*"
            case Star(table=t) if t is not None:
                return f"{self.quote_identifier(t)}.*"
            case ColumnRef(name=name, table=None):
                return self.quote_identifier(name)
            case ColumnRef(name=name, table=table) if table is not None:
                return f"{self.quote_identifier(table)}.{self.quote_identifier(name)}"
            case AliasedExpr(expr=inner, alias=alias):
                return f"{self.compile_expr(inner)} AS {self.quote_identifier(alias)}"
            case FunctionCall(name=fname, args=args, distinct=distinct):
                args_sql = ", ".join(self.compile_expr(a) for a in args)
                if distinct:
                    return f"{fname}(DISTINCT {args_sql})"
                return f"{fname}({args_sql})"
            case BinaryOp(left=left, op=op, right=right):
                return f"({self.compile_expr(left)} {op} {self.compile_expr(right)})"
            case IsNull(expr=inner, negated=False):
                return f"({self.compile_expr(inner)} IS NULL)"
            case IsNull(expr=inner, negated=True):
                return f"({self.compile_expr(inner)} IS NOT NULL)"
            case InList(expr=inner, values=values, negated=negated):
                vals = ", ".join(self.compile_expr(v) for v in values)
                op = "NOT IN" if negated else "IN"
                return f"({self.compile_expr(inner)} {op} ({vals}))"
            case CaseExpr(when_clauses=whens, else_clause=else_):
                parts = ["CASE"]
                for when_cond, then_val in whens:
                    parts.append(
                        f"WHEN {self.compile_expr(when_cond)} THEN {self.compile_expr(then_val)}"
                    )
                if else_ is not None:
                    parts.append(f"ELSE {self.compile_expr(else_)}")
                parts.append("END")
                return " ".join(parts)
            case Cast(expr=inner, type_name=type_name):
                return f"CAST({self.compile_expr(inner)} AS {type_name})"
            case Extract(field=field_name, expr=inner):
                return f"EXTRACT({field_name} FROM {self.compile_expr(inner)})"
            case JsonPathText(expr=inner, path=path):
                return self.compile_json_path_text(inner, path)
            case SubqueryExpr(query=query):
                return f"(\n{self.compile_select(query)}\n)"
            case _:
                raise ValueError(f"Unknown AST node type: {type(expr).__name__}")
