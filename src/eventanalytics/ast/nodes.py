"""Immutable SQL AST nodes. All analytics SQL is generated from these, never by concatenation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class JoinType(StrEnum):
    LEFT = "LEFT"
    INNER = "INNER"


@dataclass(frozen=True)
class Literal:
    """A literal value: number, string, boolean, or NULL."""

    value: str | int | float | bool | None

    @classmethod
    def string(cls, v: str) -> Literal:
        return cls(value=v)

    @classmethod
    def number(cls, v: int | float) -> Literal:
        return cls(value=v)

    @classmethod
    def null(cls) -> Literal:
        return cls(value=None)

    @classmethod
    def boolean(cls, v: bool) -> Literal:
        return cls(value=v)


@dataclass(frozen=True)
class Star:
    """SELECT * or table.*"""

    table: str | None = None


@dataclass(frozen=True)
class ColumnRef:
    """Reference to a column, optionally qualified by table/alias."""

    name: str
    table: str | None = None


@dataclass(frozen=True)
class AliasedExpr:
    """An expression with an alias: expr AS alias."""

    expr: Expr
    alias: str


@dataclass(frozen=True)
class FunctionCall:
    """SQL function call, e.g. count(col), ST_X(geometry)."""

    name: str
    args: list[Expr] = field(default_factory=list)
    distinct: bool = False


@dataclass(frozen=True)
class BinaryOp:
    """Binary operation: left op right."""

    left: Expr
    op: str  # =, <, >=, AND, OR, ~*, ||, etc.
    right: Expr


@dataclass(frozen=True)
class IsNull:
    """IS NULL / IS NOT NULL check."""

    expr: Expr
    negated: bool = False  # True = IS NOT NULL


@dataclass(frozen=True)
class InList:
    """expr IN (v1, v2, ...) or NOT IN."""

    expr: Expr
    values: list[Expr] = field(default_factory=list)
    negated: bool = False


@dataclass(frozen=True)
class CaseExpr:
    """CASE WHEN ... THEN ... ELSE ... END."""

    when_clauses: list[tuple[Expr, Expr]] = field(default_factory=list)
    else_clause: Expr | None = None


@dataclass(frozen=True)
class Cast:
    """CAST(expr AS type)."""

    expr: Expr
    type_name: str


@dataclass(frozen=True)
class Extract:
    """EXTRACT(field FROM expr)."""

    field: str  # year, month, ...
    expr: Expr


@dataclass(frozen=True)
class JsonPathText:
    """Text value at a path inside a JSON document column (``col #>> '{a,b}'``)."""

    expr: Expr
    path: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SubqueryExpr:
    """A subquery used as an expression."""

    query: Select


# The union of all expression types.
Expr = (
    Literal
    | Star
    | ColumnRef
    | AliasedExpr
    | FunctionCall
    | BinaryOp
    | IsNull
    | InList
    | CaseExpr
    | Cast
    | Extract
    | JsonPathText
    | SubqueryExpr
)


@dataclass(frozen=True)
class From:
    """FROM clause: a table name or subquery with optional alias."""

    source: str | Select
    alias: str | None = None


@dataclass(frozen=True)
class Join:
    """JOIN clause."""

    join_type: JoinType
    source: str | Select
    alias: str | None = None
    on: Expr | None = None


@dataclass(frozen=True)
class Select:
    """A complete SELECT statement."""

    columns: list[Expr] = field(default_factory=list)
    from_: From | None = None
    joins: list[Join] = field(default_factory=list)
    where: Expr | None = None
    group_by: list[Expr] = field(default_factory=list)
    distinct: bool = False


# -- statements --------------------------------------------------------------


@dataclass(frozen=True)
class Insert:
    """INSERT INTO table (columns) SELECT ...

    ``columns`` and ``query.columns`` are positionally aligned.
    """

    table: str
    columns: list[str]
    query: Select


@dataclass(frozen=True)
class ColumnDef:
    """Column definition inside CREATE TABLE."""

    name: str
    type_name: str
    not_null: bool = False


@dataclass(frozen=True)
class CreateTable:
    """CREATE TABLE with optional CHECK constraints and parent table."""

    name: str
    columns: list[ColumnDef] = field(default_factory=list)
    checks: list[Expr] = field(default_factory=list)
    inherits: str | None = None


@dataclass(frozen=True)
class DropTable:
    """DROP TABLE [IF EXISTS] name [CASCADE]."""

    name: str
    if_exists: bool = True
    cascade: bool = True


@dataclass(frozen=True)
class RenameTable:
    """ALTER TABLE name RENAME TO new_name."""

    name: str
    new_name: str


@dataclass(frozen=True)
class SetInherit:
    """ALTER TABLE name [NO] INHERIT parent."""

    name: str
    parent: str
    inherit: bool = True


@dataclass(frozen=True)
class CreateIndex:
    """CREATE INDEX name ON table USING method (column)."""

    name: str
    table: str
    column: str
    method: str = "btree"


@dataclass(frozen=True)
class Analyze:
    """ANALYZE table."""

    table: str


Statement = (
    Select | Insert | CreateTable | DropTable | RenameTable | SetInherit | CreateIndex | Analyze
)
