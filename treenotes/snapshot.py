"""
Serialized document format for TreeNotes.

A document is the Cornell note texts plus the box graph:

{
  "heading": "Photosynthesis",
  "cueText": "Light reactions ...",
  "summary": "Plants turn light into sugar.",
  "boxes": [
    {
      "id": "1",
      "content": "Chloroplast",
      "style": {"left": "0px", "top": "0px", "backgroundColor": "#F1F1F1"},
      "lines": ["2"]
    }
  ]
}

This module exposes:
- GraphSnapshot / BoxRecord dataclasses
- snapshot_from_dict(data) -> GraphSnapshot   (validates, raises SnapshotError)
- snapshot_to_dict(snapshot) -> dict
- loads_snapshot(text) / dumps_snapshot(snapshot)
- read_snapshot(path) / write_snapshot(path, snapshot)

Validation happens entirely before anything is returned, so callers can parse
first and only then touch live state.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from treenotes.colors import color_to_hex
from treenotes.constants import DEFAULT_BOX_COLOR
from treenotes.ids import NodeId, normalize_node_id

logger = logging.getLogger(__name__)

_LENGTH_RE = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


class SnapshotError(ValueError):
    """Raised when a document does not have the expected shape."""


@dataclass
class BoxRecord:
    """One box as it appears in an exported document."""
    id: NodeId
    content: str = ""
    left: float = 0.0
    top: float = 0.0
    color: str = DEFAULT_BOX_COLOR
    lines: List[NodeId] = field(default_factory=list)


@dataclass
class GraphSnapshot:
    heading: str = ""
    cue_text: str = ""
    summary: str = ""
    boxes: List[BoxRecord] = field(default_factory=list)


def parse_css_length(value: Any) -> float:
    """
    Read a CSS length such as ``"120px"`` as a number of px.

    Only the leading number counts. Missing or unparseable values read as 0.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        match = _LENGTH_RE.match(value)
        if match:
            return float(match.group(1))
    return 0.0


def format_number(value: float) -> str:
    """Shortest text that reads back as the same float; whole values drop ``.0``."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_css_length(value: float) -> str:
    return f"{format_number(value)}px"


def _require_text(data: Dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise SnapshotError(f"{where}: '{key}' must be a string")
    return value


def _box_from_dict(raw: Any, index: int) -> BoxRecord:
    where = f"boxes[{index}]"
    if not isinstance(raw, dict):
        raise SnapshotError(f"{where}: expected an object")

    if "id" not in raw:
        raise SnapshotError(f"{where}: missing 'id'")
    try:
        node_id = normalize_node_id(raw["id"])
    except ValueError as e:
        raise SnapshotError(f"{where}: {e}") from e

    style = raw.get("style")
    if style is None:
        style = {}
    if not isinstance(style, dict):
        raise SnapshotError(f"{where}: 'style' must be an object")

    lines_raw = raw.get("lines")
    if lines_raw is None:
        lines_raw = []
    if not isinstance(lines_raw, list):
        raise SnapshotError(f"{where}: 'lines' must be a list")
    lines: List[NodeId] = []
    for entry in lines_raw:
        try:
            lines.append(normalize_node_id(entry))
        except ValueError as e:
            raise SnapshotError(f"{where}.lines: {e}") from e

    color_raw = style.get("backgroundColor")
    return BoxRecord(
        id=node_id,
        content=_require_text(raw, "content", where),
        left=parse_css_length(style.get("left")),
        top=parse_css_length(style.get("top")),
        color=color_to_hex(color_raw) if color_raw else DEFAULT_BOX_COLOR,
        lines=lines,
    )


def snapshot_from_dict(data: Any) -> GraphSnapshot:
    """Validate a decoded document and build a GraphSnapshot."""
    if not isinstance(data, dict):
        raise SnapshotError("Document root must be an object")

    boxes_raw = data.get("boxes")
    if boxes_raw is None:
        boxes_raw = []
    if not isinstance(boxes_raw, list):
        raise SnapshotError("'boxes' must be a list")

    boxes = [_box_from_dict(raw, i) for i, raw in enumerate(boxes_raw)]

    seen = set()
    for box in boxes:
        if box.id in seen:
            raise SnapshotError(f"Duplicate box id {box.id}")
        seen.add(box.id)

    return GraphSnapshot(
        heading=_require_text(data, "heading", "document"),
        cue_text=_require_text(data, "cueText", "document"),
        summary=_require_text(data, "summary", "document"),
        boxes=boxes,
    )


def snapshot_to_dict(snapshot: GraphSnapshot) -> Dict[str, Any]:
    return {
        "heading": snapshot.heading,
        "cueText": snapshot.cue_text,
        "summary": snapshot.summary,
        "boxes": [
            {
                "id": box.id,
                "content": box.content,
                "style": {
                    "left": format_css_length(box.left),
                    "top": format_css_length(box.top),
                    "backgroundColor": color_to_hex(box.color),
                },
                "lines": [str(line) for line in box.lines],
            }
            for box in snapshot.boxes
        ],
    }


def loads_snapshot(text: Union[str, bytes]) -> GraphSnapshot:
    """Parse a JSON document. Raises SnapshotError for bad JSON or bad shape."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SnapshotError(f"Not a JSON document: {e}") from e
    return snapshot_from_dict(data)


def dumps_snapshot(snapshot: GraphSnapshot, indent: int = 2) -> str:
    return json.dumps(snapshot_to_dict(snapshot), indent=indent, ensure_ascii=False)


def read_snapshot(path: Path) -> GraphSnapshot:
    path = Path(path)
    with path.open("r", encoding="utf-8") as fh:
        text = fh.read()
    snapshot = loads_snapshot(text)
    logger.info(f"Read {len(snapshot.boxes)} boxes from {path}")
    return snapshot


def write_snapshot(path: Path, snapshot: GraphSnapshot) -> Path:
    path = Path(path)
    with path.open("w", encoding="utf-8") as fh:
        fh.write(dumps_snapshot(snapshot))
    logger.info(f"Wrote {len(snapshot.boxes)} boxes to {path}")
    return path
