"""Visitor pattern for AST traversal and transformation."""

from __future__ import annotations

from typing import Any

from eventanalytics.ast.nodes import (
    AliasedExpr,
    BinaryOp,
    CaseExpr,
    Cast,
    ColumnRef,
    CreateTable,
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
    Select,
    Star,
    SubqueryExpr,
)


class ASTVisitor:
    """Base visitor for SQL AST traversal.

    Override specific visit_* methods to customize behavior.
    The default implementations recursively visit child nodes.
    """

    def visit(self, node: Any) -> Any:
        """Dispatch to the appropriate visit_* method."""
        method_name = f"visit_{type(node).__name__.lower()}"
        method = getattr(self, method_name, self.generic_visit)
        return method(node)

    def generic_visit(self, node: Any) -> Any:
        return node

    def visit_select(self, node: Select) -> Any:
        columns = [self.visit(c) for c in node.columns]
        from_ = self.visit(node.from_) if node.from_ else None
        joins = [self.visit(j) for j in node.joins]
        where = self.visit(node.where) if node.where else None
        group_by = [self.visit(g) for g in node.group_by]
        return Select(
            columns=columns,
            from_=from_,
            joins=joins,
            where=where,
            group_by=group_by,
            distinct=node.distinct,
        )

    def visit_insert(self, node: Insert) -> Any:
        return Insert(table=node.table, columns=list(node.columns), query=self.visit(node.query))

    def visit_createtable(self, node: CreateTable) -> Any:
        return CreateTable(
            name=node.name,
            columns=list(node.columns),
            checks=[self.visit(c) for c in node.checks],
            inherits=node.inherits,
        )

    def visit_from(self, node: From) -> Any:
        if isinstance(node.source, Select):
            return From(source=self.visit(node.source), alias=node.alias)
        return node

    def visit_join(self, node: Join) -> Any:
        source = self.visit(node.source) if isinstance(node.source, Select) else node.source
        on = self.visit(node.on) if node.on else None
        return Join(join_type=node.join_type, source=source, alias=node.alias, on=on)

    def visit_literal(self, node: Literal) -> Any:
        return node

    def visit_star(self, node: Star) -> Any:
        return node

    def visit_columnref(self, node: ColumnRef) -> Any:
        return node

    def visit_aliasedexpr(self, node: AliasedExpr) -> Any:
        return AliasedExpr(expr=self.visit(node.expr), alias=node.alias)

    def visit_functioncall(self, node: FunctionCall) -> Any:
        args = [self.visit(a) for a in node.args]
        return FunctionCall(name=node.name, args=args, distinct=node.distinct)

    def visit_binaryop(self, node: BinaryOp) -> Any:
        return BinaryOp(left=self.visit(node.left), op=node.op, right=self.visit(node.right))

    def visit_isnull(self, node: IsNull) -> Any:
        return IsNull(expr=self.visit(node.expr), negated=node.negated)

    def visit_inlist(self, node: InList) -> Any:
        return InList(
            expr=self.visit(node.expr),
            values=[self.visit(v) for v in node.values],
            negated=node.negated,
        )

    def visit_caseexpr(self, node: CaseExpr) -> Any:
        whens = [(self.visit(w), self.visit(t)) for w, t in node.when_clauses]
        else_ = self.visit(node.else_clause) if node.else_clause else None
        return CaseExpr(when_clauses=whens, else_clause=else_)

    def visit_cast(self, node: Cast) -> Any:
        return Cast(expr=self.visit(node.expr), type_name=node.type_name)

    def visit_extract(self, node: Extract) -> Any:
        return Extract(field=node.field, expr=self.visit(node.expr))

    def visit_jsonpathtext(self, node: JsonPathText) -> Any:
        return JsonPathText(expr=self.visit(node.expr), path=list(node.path))

    def visit_subqueryexpr(self, node: SubqueryExpr) -> Any:
        return SubqueryExpr(query=self.visit(node.query))

    def visit_expr(self, node: Expr) -> Any:
        """Visit any expression node by dispatching to the correct method."""
        return self.visit(node)


class IdentifierCollector(ASTVisitor):
    """Collects every identifier a statement would interpolate into SQL.

    Covers column names, table qualifiers, aliases, source/target table
    names and JSON path elements.
    """

    def __init__(self) -> None:
        self.identifiers: list[str] = []

    def collect(self, node: Any) -> list[str]:
        self.visit(node)
        return self.identifiers

    def visit_insert(self, node: Insert) -> Any:
        self.identifiers.append(node.table)
        self.identifiers.extend(node.columns)
        return super().visit_insert(node)

    def visit_createtable(self, node: CreateTable) -> Any:
        self.identifiers.append(node.name)
        self.identifiers.extend(c.name for c in node.columns)
        if node.inherits:
            self.identifiers.append(node.inherits)
        return super().visit_createtable(node)

    def visit_from(self, node: From) -> Any:
        if isinstance(node.source, str):
            self.identifiers.append(node.source)
        if node.alias:
            self.identifiers.append(node.alias)
        return super().visit_from(node)

    def visit_join(self, node: Join) -> Any:
        if isinstance(node.source, str):
            self.identifiers.append(node.source)
        if node.alias:
            self.identifiers.append(node.alias)
        return super().visit_join(node)

    def visit_columnref(self, node: ColumnRef) -> Any:
        self.identifiers.append(node.name)
        if node.table:
            self.identifiers.append(node.table)
        return node

    def visit_aliasedexpr(self, node: AliasedExpr) -> Any:
        self.identifiers.append(node.alias)
        return super().visit_aliasedexpr(node)

    def visit_jsonpathtext(self, node: JsonPathText) -> Any:
        self.identifiers.extend(node.path)
        return super().visit_jsonpathtext(node)
