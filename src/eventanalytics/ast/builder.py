"""Fluent builder API for constructing SQL AST nodes."""

from __future__ import annotations

from typing import Self

from eventanalytics.ast.nodes import (
    AliasedExpr,
    BinaryOp,
    ColumnRef,
    Expr,
    From,
    FunctionCall,
    Insert,
    Join,
    JoinType,
    Literal,
    Select,
)


class QueryBuilder:
    """Fluent builder for ergonomic AST construction."""

    def __init__(self) -> None:
        self._columns: list[Expr] = []
        self._from: From | None = None
        self._joins: list[Join] = []
        self._where: Expr | None = None
        self._group_by: list[Expr] = []
        self._distinct = False

    def select(self, *columns: Expr) -> Self:
        self._columns.extend(columns)
        return self

    def select_aliased(self, expr: Expr, alias: str) -> Self:
        self._columns.append(AliasedExpr(expr=expr, alias=alias))
        return self

    def distinct(self) -> Self:
        self._distinct = True
        return self

    def from_(self, table: str, alias: str | None = None) -> Self:
        self._from = From(source=table, alias=alias)
        return self

    def join(
        self,
        table: str,
        on: Expr,
        join_type: JoinType = JoinType.LEFT,
        alias: str | None = None,
    ) -> Self:
        self._joins.append(Join(join_type=join_type, source=table, alias=alias, on=on))
        return self

    def inner_join(self, table: str, on: Expr, alias: str | None = None) -> Self:
        return self.join(table, on, join_type=JoinType.INNER, alias=alias)

    def where(self, condition: Expr) -> Self:
        if self._where is None:
            self._where = condition
        else:
            self._where = BinaryOp(left=self._where, op="AND", right=condition)
        return self

    def group_by(self, *exprs: Expr) -> Self:
        self._group_by.extend(exprs)
        return self

    def build(self) -> Select:
        return Select(
            columns=self._columns,
            from_=self._from,
            joins=self._joins,
            where=self._where,
            group_by=self._group_by,
            distinct=self._distinct,
        )

    def build_insert(self, table: str, columns: list[str]) -> Insert:
        """Wrap the built SELECT in an INSERT whose column list must align with it."""
        query = self.build()
        if len(columns) != len(query.columns):
            raise ValueError(
                f"Insert column count ({len(columns)}) does not match "
                f"select list ({len(query.columns)})"
            )
        return Insert(table=table, columns=columns, query=query)


# Convenience constructors for common expressions.


def col(name: str, table: str | None = None) -> ColumnRef:
    """Create a column reference."""
    return ColumnRef(name=name, table=table)


def func(name: str, *args: Expr, distinct: bool = False) -> FunctionCall:
    """Create a function call."""
    return FunctionCall(name=name, args=list(args), distinct=distinct)


def lit(value: str | int | float | bool | None) -> Literal:
    """Create a literal value."""
    return Literal(value=value)


def alias(expr: Expr, name: str) -> AliasedExpr:
    """Create an aliased expression."""
    return AliasedExpr(expr=expr, alias=name)


def eq(left: Expr, right: Expr) -> BinaryOp:
    """Create an equality comparison."""
    return BinaryOp(left=left, op="=", right=right)


def lt(left: Expr, right: Expr) -> BinaryOp:
    return BinaryOp(left=left, op="<", right=right)


def lte(left: Expr, right: Expr) -> BinaryOp:
    return BinaryOp(left=left, op="<=", right=right)


def gt(left: Expr, right: Expr) -> BinaryOp:
    return BinaryOp(left=left, op=">", right=right)


def gte(left: Expr, right: Expr) -> BinaryOp:
    return BinaryOp(left=left, op=">=", right=right)


def regex_match(expr: Expr, pattern: str) -> BinaryOp:
    """Case-insensitive POSIX regular expression match."""
    return BinaryOp(left=expr, op="~*", right=Literal.string(pattern))


def is_false(expr: Expr) -> BinaryOp:
    return BinaryOp(left=expr, op="IS", right=Literal.boolean(False))


def and_(*conditions: Expr) -> Expr:
    """Chain conditions with AND."""
    result: Expr | None = None
    for cond in conditions:
        result = cond if result is None else BinaryOp(left=result, op="AND", right=cond)
    if result is None:
        return Literal(value=True)
    return result


def or_(*conditions: Expr) -> Expr:
    """Chain conditions with OR."""
    result: Expr | None = None
    for cond in conditions:
        result = cond if result is None else BinaryOp(left=result, op="OR", right=cond)
    if result is None:
        return Literal(value=False)
    return result
