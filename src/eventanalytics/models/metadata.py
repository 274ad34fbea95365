"""Metadata types a table build reads: programs, data elements, attributes, org units, categories."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class ValueType(StrEnum):
    TEXT = "TEXT"
    LONG_TEXT = "LONG_TEXT"
    LETTER = "LETTER"
    PHONE_NUMBER = "PHONE_NUMBER"
    EMAIL = "EMAIL"
    BOOLEAN = "BOOLEAN"
    TRUE_ONLY = "TRUE_ONLY"
    DATE = "DATE"
    DATETIME = "DATETIME"
    TIME = "TIME"
    NUMBER = "NUMBER"
    UNIT_INTERVAL = "UNIT_INTERVAL"
    PERCENTAGE = "PERCENTAGE"
    INTEGER = "INTEGER"
    INTEGER_POSITIVE = "INTEGER_POSITIVE"
    INTEGER_NEGATIVE = "INTEGER_NEGATIVE"
    INTEGER_ZERO_OR_POSITIVE = "INTEGER_ZERO_OR_POSITIVE"
    TRACKER_ASSOCIATE = "TRACKER_ASSOCIATE"
    USERNAME = "USERNAME"
    COORDINATE = "COORDINATE"
    ORGANISATION_UNIT = "ORGANISATION_UNIT"
    AGE = "AGE"
    URL = "URL"
    FILE_RESOURCE = "FILE_RESOURCE"
    IMAGE = "IMAGE"

    @property
    def is_integer(self) -> bool:
        return self in _INTEGER_TYPES

    @property
    def is_decimal(self) -> bool:
        return self in _DECIMAL_TYPES

    @property
    def is_numeric(self) -> bool:
        return self.is_integer or self.is_decimal

    @property
    def is_boolean(self) -> bool:
        return self in (ValueType.BOOLEAN, ValueType.TRUE_ONLY)

    @property
    def is_date(self) -> bool:
        return self in (ValueType.DATE, ValueType.DATETIME, ValueType.AGE)

    @property
    def is_text(self) -> bool:
        return self in _TEXT_TYPES

    @property
    def is_geo(self) -> bool:
        return self == ValueType.COORDINATE


_INTEGER_TYPES = frozenset(
    {
        ValueType.INTEGER,
        ValueType.INTEGER_POSITIVE,
        ValueType.INTEGER_NEGATIVE,
        ValueType.INTEGER_ZERO_OR_POSITIVE,
    }
)
_DECIMAL_TYPES = frozenset({ValueType.NUMBER, ValueType.UNIT_INTERVAL, ValueType.PERCENTAGE})
_TEXT_TYPES = frozenset(
    {
        ValueType.TEXT,
        ValueType.LONG_TEXT,
        ValueType.LETTER,
        ValueType.PHONE_NUMBER,
        ValueType.EMAIL,
        ValueType.TIME,
        ValueType.USERNAME,
        ValueType.URL,
    }
)


class IdentifiableObject(BaseModel):
    """Common identity of every metadata object.

    ``id`` is the internal numeric key used in join predicates, ``uid`` the
    stable public identifier used to name columns.
    """

    id: int = 0
    uid: str
    name: str = ""
    code: str | None = None
    created: datetime | None = None
    display_name_override: str | None = Field(None, alias="displayName")

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def display_name(self) -> str:
        return self.display_name_override or self.name


class OptionSet(IdentifiableObject):
    """A closed list of allowed values for a data element or attribute."""

    value_type: ValueType = Field(ValueType.TEXT, alias="valueType")


class Legend(IdentifiableObject):
    """One half-open interval ``[start_value, end_value)`` of a legend set."""

    start_value: float = Field(alias="startValue")
    end_value: float = Field(alias="endValue")


class LegendSet(IdentifiableObject):
    legends: list[Legend] = []


class Category(IdentifiableObject):
    data_dimension: bool = Field(True, alias="dataDimension")


class CategoryCombo(IdentifiableObject):
    categories: list[Category] = []

    @property
    def is_default(self) -> bool:
        return not self.categories


class CategoryOptionGroupSet(IdentifiableObject):
    data_dimension: bool = Field(True, alias="dataDimension")


class OrganisationUnitLevel(IdentifiableObject):
    level: int


class OrganisationUnit(IdentifiableObject):
    level: int = 1
    path: str = ""


class OrganisationUnitGroup(IdentifiableObject):
    pass


class OrganisationUnitGroupSet(IdentifiableObject):
    data_dimension: bool = Field(True, alias="dataDimension")
    organisation_unit_groups: list[OrganisationUnitGroup] = Field(
        default=[], alias="organisationUnitGroups"
    )


class PeriodType(BaseModel):
    """A period type such as ``Monthly``; its lower-cased name names a column."""

    name: str

    model_config = {"frozen": True}

    @property
    def column_name(self) -> str:
        return self.name.lower()


DEFAULT_PERIOD_TYPES: list[str] = [
    "Daily",
    "Weekly",
    "WeeklyWednesday",
    "WeeklyThursday",
    "WeeklySaturday",
    "WeeklySunday",
    "BiWeekly",
    "Monthly",
    "BiMonthly",
    "Quarterly",
    "SixMonthly",
    "SixMonthlyApril",
    "SixMonthlyNov",
    "Yearly",
    "FinancialApril",
    "FinancialJuly",
    "FinancialOct",
    "FinancialNov",
]


class DataElement(IdentifiableObject):
    value_type: ValueType = Field(alias="valueType")
    legend_sets: list[LegendSet] = Field(default=[], alias="legendSets")
    option_set: OptionSet | None = Field(None, alias="optionSet")

    @property
    def has_option_set(self) -> bool:
        return self.option_set is not None

    @property
    def has_legend_set(self) -> bool:
        return bool(self.legend_sets)


class TrackedEntityAttribute(IdentifiableObject):
    value_type: ValueType = Field(alias="valueType")
    confidential: bool = False
    legend_sets: list[LegendSet] = Field(default=[], alias="legendSets")
    option_set: OptionSet | None = Field(None, alias="optionSet")

    @property
    def has_option_set(self) -> bool:
        return self.option_set is not None

    @property
    def has_legend_set(self) -> bool:
        return bool(self.legend_sets)


class Program(IdentifiableObject):
    """A reporting program; one analytics table is built per program."""

    registration: bool = True
    category_combo: CategoryCombo | None = Field(None, alias="categoryCombo")
    data_elements: list[DataElement] = Field(default=[], alias="dataElements")
    tracked_entity_attributes: list[TrackedEntityAttribute] = Field(
        default=[], alias="trackedEntityAttributes"
    )

    @property
    def has_category_combo(self) -> bool:
        return self.category_combo is not None and not self.category_combo.is_default

    @property
    def data_elements_with_legend_set(self) -> list[DataElement]:
        return [de for de in self.data_elements if de.has_legend_set]

    @property
    def non_confidential_attributes(self) -> list[TrackedEntityAttribute]:
        return [a for a in self.tracked_entity_attributes if not a.confidential]

    @property
    def non_confidential_attributes_with_legend_set(self) -> list[TrackedEntityAttribute]:
        return [a for a in self.non_confidential_attributes if a.has_legend_set]


class MetadataSnapshot(BaseModel):
    """The complete, read-only metadata consumed by one build run."""

    programs: list[Program] = []
    organisation_unit_levels: list[OrganisationUnitLevel] = Field(
        default=[], alias="organisationUnitLevels"
    )
    organisation_units: list[OrganisationUnit] = Field(default=[], alias="organisationUnits")
    organisation_unit_group_sets: list[OrganisationUnitGroupSet] = Field(
        default=[], alias="organisationUnitGroupSets"
    )
    category_option_group_sets: list[CategoryOptionGroupSet] = Field(
        default=[], alias="categoryOptionGroupSets"
    )
    period_types: list[PeriodType] = Field(
        default_factory=lambda: [PeriodType(name=n) for n in DEFAULT_PERIOD_TYPES],
        alias="periodTypes",
    )

    model_config = {"populate_by_name": True}
