"""YAML metadata snapshot loader with input safety limits."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from eventanalytics.models.metadata import MetadataSnapshot
from eventanalytics.storage.memory import InMemoryMetadataStore

logger = logging.getLogger("eventanalytics.storage")

# ---------------------------------------------------------------------------
# Safety limits
# ---------------------------------------------------------------------------

_MAX_DOCUMENT_SIZE = 20_000_000  # 20M characters
_MAX_NODE_COUNT = 500_000
_MAX_DEPTH = 20

# Anchor definitions (&name) at line start or after whitespace/sequence indicators.
_ANCHOR_RE = re.compile(r"(?:^|[\s\-:])&(\w+)", re.MULTILINE)


class SnapshotLoadError(Exception):
    """Raised when a metadata snapshot cannot be parsed or validated."""


class SnapshotLoader:
    """Loads a ``MetadataSnapshot`` from YAML text or a file."""

    def __init__(self) -> None:
        self._yaml = YAML(typ="safe")
        self._yaml.max_depth = _MAX_DEPTH

    @staticmethod
    def _check_yaml_safety(content: str) -> None:
        if len(content) > _MAX_DOCUMENT_SIZE:
            raise SnapshotLoadError(
                f"Snapshot exceeds maximum size "
                f"({len(content):,} chars > {_MAX_DOCUMENT_SIZE:,} limit)"
            )
        if _ANCHOR_RE.search(content):
            raise SnapshotLoadError("YAML anchors/aliases are not supported in snapshots")

    @staticmethod
    def _check_node_count(data: Any, limit: int = _MAX_NODE_COUNT) -> None:
        count = 0
        stack: list[Any] = [data]
        while stack:
            node = stack.pop()
            count += 1
            if count > limit:
                raise SnapshotLoadError(f"Snapshot exceeds maximum node count ({limit:,})")
            if isinstance(node, dict):
                stack.extend(node.values())
            elif isinstance(node, list):
                stack.extend(node)

    def loads(self, content: str) -> MetadataSnapshot:
        """Parse and validate snapshot YAML text."""
        self._check_yaml_safety(content)
        try:
            data = self._yaml.load(content)
        except YAMLError as exc:
            raise SnapshotLoadError(f"Invalid snapshot YAML: {exc}") from exc
        if data is None:
            return MetadataSnapshot()
        self._check_node_count(data)
        try:
            snapshot = MetadataSnapshot.model_validate(data)
        except ValidationError as exc:
            raise SnapshotLoadError(f"Snapshot validation failed: {exc}") from exc
        logger.info(
            "Loaded metadata snapshot: %d programs, %d org units, %d org unit group sets",
            len(snapshot.programs),
            len(snapshot.organisation_units),
            len(snapshot.organisation_unit_group_sets),
        )
        return snapshot

    def load(self, path: str | Path) -> MetadataSnapshot:
        try:
            content = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise SnapshotLoadError(f"Cannot read snapshot '{path}': {exc}") from exc
        return self.loads(content)


def load_metadata_store(path: str | Path) -> InMemoryMetadataStore:
    """Convenience: load a snapshot file into an in-memory metadata store."""
    return InMemoryMetadataStore(SnapshotLoader().load(path))
