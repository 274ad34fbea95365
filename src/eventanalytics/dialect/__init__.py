"""SQL dialect plugin system for event analytics tables."""

# Import dialects to trigger registration
import eventanalytics.dialect.postgres as _postgres  # noqa: F401
from eventanalytics.dialect.base import Dialect, DialectCapabilities
from eventanalytics.dialect.registry import DialectRegistry, UnsupportedDialectError

__all__ = [
    "Dialect",
    "DialectCapabilities",
    "DialectRegistry",
    "UnsupportedDialectError",
]
