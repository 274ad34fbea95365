"""Shared SQL fragments for analytics queries: join aliases, soft-delete and identifier checks."""

from __future__ import annotations

import re
from datetime import date, datetime

from eventanalytics.ast.builder import col, is_false
from eventanalytics.ast.nodes import Expr, Statement
from eventanalytics.ast.visitor import IdentifierCollector
from eventanalytics.models.errors import InvalidIdentifierError

# Join aliases of the population query.
EVENT = "psi"
ENROLLMENT = "pi"
PROGRAM_STAGE = "ps"
PROGRAM = "pr"
ATTRIBUTE_OPTION_COMBO = "ao"
TRACKED_ENTITY_INSTANCE = "tei"
ORG_UNIT = "ou"
ORG_UNIT_STRUCTURE = "ous"
ORG_UNIT_GROUP_SET_STRUCTURE = "ougs"
CATEGORY_STRUCTURE = "acs"
DATE_PERIOD_STRUCTURE = "dps"

ORG_UNIT_LEVEL_PREFIX = "uidlevel"

# Separator between a data element or attribute uid and a legend set uid.
LEGEND_SEP = "__"

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def not_deleted(alias: str) -> Expr:
    """``<alias>.deleted IS FALSE`` for any soft-deletable entity."""
    return is_false(col("deleted", alias))


def org_unit_level_column(level: int) -> str:
    return f"{ORG_UNIT_LEVEL_PREFIX}{level}"


def legend_column(uid: str, legend_set_uid: str) -> str:
    return f"{uid}{LEGEND_SEP}{legend_set_uid}"


def validate_identifier(name: str) -> str:
    if not _IDENTIFIER_RE.match(name):
        raise InvalidIdentifierError(name)
    return name


def validate_identifiers(statement: Statement) -> None:
    """Reject a statement if any identifier it interpolates is outside the allowed set."""
    for identifier in IdentifierCollector().collect(statement):
        validate_identifier(identifier)


def medium_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def long_date(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S")
