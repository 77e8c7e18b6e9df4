"""
translation_sync/xliff.py

Reader for XLIFF 1.2 translation files as exported by the remote service.

Each ``<trans-unit>`` becomes one TranslationEntry keyed by its ``resname``
attribute (falling back to ``id``) and valued by the flattened text of its
``<target>``. Units without a key or without a target are not imported.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from app.domain.translation_sync import TranslationEntry
from translation_sync.errors import InterchangeFormatError

logger = logging.getLogger(__name__)


def parse_xliff_file(path: str | Path) -> list[TranslationEntry]:
    """
    Parse an XLIFF file from disk.

    Raises InterchangeFormatError for malformed XML or a non-XLIFF document,
    OSError when the file cannot be read.
    """

    raw = Path(path).read_bytes()
    return parse_xliff(raw, source=str(path))


def parse_xliff(document: bytes | str, *, source: str = "<memory>") -> list[TranslationEntry]:
    try:
        root = ET.fromstring(document)
    except ET.ParseError as exc:
        raise InterchangeFormatError(f"{source}: not well-formed XML: {exc}") from exc

    if _local_name(root.tag) != "xliff":
        raise InterchangeFormatError(
            f"{source}: expected an <xliff> document, found <{_local_name(root.tag)}>."
        )

    entries: dict[str, TranslationEntry] = {}
    ignored = 0
    for unit in root.iter():
        if _local_name(unit.tag) != "trans-unit":
            continue

        key = (unit.get("resname") or unit.get("id") or "").strip()
        target = _child(unit, "target")
        if not key or target is None:
            ignored += 1
            continue

        note_element = _child(unit, "note")
        note = "".join(note_element.itertext()).strip() if note_element is not None else ""
        # Later units with the same key replace earlier ones.
        entries[key] = TranslationEntry(
            key=key,
            value="".join(target.itertext()),
            note=note or None,
        )

    if ignored:
        logger.debug("Ignored XLIFF units without key or target source=%s count=%s", source, ignored)
    return list(entries.values())


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if "}" in tag else tag


def _child(element: ET.Element, name: str) -> ET.Element | None:
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None
