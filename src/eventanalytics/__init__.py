"""Event analytics tables: metadata-driven, year-partitioned analytics table builds."""

__version__ = "0.1.0"
