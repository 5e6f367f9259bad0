"""Ordered, last-writer-wins merging of property-list overlays into a base document."""

from __future__ import annotations

import logging
import plistlib
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Union
from xml.parsers.expat import ExpatError

from iosctl.core.errors import DocumentLoadError
from iosctl.core.model import MergeResult

PlistSource = Union[Path, str, Mapping[str, Any]]
LOGGER = logging.getLogger(__name__)

# plistlib surfaces broken XML as ExpatError and bad <date> text as AttributeError.
_PLIST_READ_ERRORS = (OSError, plistlib.InvalidFileException, ValueError, ExpatError, AttributeError)


def _load_source(source: PlistSource) -> dict[str, Any] | None:
    """Load an optional overlay; anything unreadable yields `None`."""
    if isinstance(source, Mapping):
        return dict(source)
    try:
        with open(source, "rb") as f:
            doc = plistlib.load(f)
    except _PLIST_READ_ERRORS as exc:
        LOGGER.debug("Skipping plist source %s: %s", source, exc)
        return None
    if not isinstance(doc, dict):
        LOGGER.debug("Skipping plist source %s: root is not a dictionary", source)
        return None
    return doc


def _load_destination(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            doc = plistlib.load(f)
    except _PLIST_READ_ERRORS as exc:
        raise DocumentLoadError(f"Could not load plist {path}: {exc}") from exc
    if not isinstance(doc, dict):
        raise DocumentLoadError(f"Plist {path} must contain a dictionary at root")
    return doc


def _describe(source: PlistSource) -> str:
    if isinstance(source, Mapping):
        return "<in-memory plist>"
    return str(source)


def merge_plist(sources: Sequence[PlistSource], destination: Path | str) -> MergeResult:
    """Fold each readable source's top-level keys into `destination`.

    Sources apply in order, so later ones override earlier ones key by key;
    nested values are replaced whole. The destination is loaded only once a
    source has loaded and written back only if something was merged.
    """
    dest_path = Path(destination)
    accumulator: dict[str, Any] | None = None
    merged = 0
    skipped: list[str] = []

    for source in sources:
        doc = _load_source(source)
        if doc is None:
            skipped.append(_describe(source))
            continue
        if accumulator is None:
            accumulator = _load_destination(dest_path)
        accumulator.update(doc)
        merged += 1

    if accumulator is not None:
        try:
            data = plistlib.dumps(accumulator, fmt=plistlib.FMT_XML, sort_keys=False)
            dest_path.write_bytes(data)
        except (OSError, TypeError) as exc:
            raise DocumentLoadError(f"Could not write plist {dest_path}: {exc}") from exc

    return MergeResult(destination=dest_path, merged=merged, skipped=tuple(skipped))
