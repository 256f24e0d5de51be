"""
NoteDocument: one Cornell note (heading, cue text, summary) plus its tree.

Import is all-or-nothing: the incoming document is parsed and validated in
full before the texts or the graph are touched.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from treenotes.graph_store import GraphStore
from treenotes.snapshot import (
    GraphSnapshot,
    dumps_snapshot,
    loads_snapshot,
    read_snapshot,
    write_snapshot,
)

logger = logging.getLogger(__name__)


class NoteDocument:
    """Texts of a Cornell note and the GraphStore holding its boxes."""

    def __init__(self, store: Optional[GraphStore] = None,
                 heading: str = "", cue_text: str = "", summary: str = ""):
        self.store = store if store is not None else GraphStore()
        self.heading = heading
        self.cue_text = cue_text
        self.summary = summary

    def to_snapshot(self) -> GraphSnapshot:
        return GraphSnapshot(
            heading=self.heading.strip(),
            cue_text=self.cue_text.strip(),
            summary=self.summary.strip(),
            boxes=self.store.export_graph(),
        )

    def export_json(self, indent: int = 2) -> str:
        return dumps_snapshot(self.to_snapshot(), indent=indent)

    def load_snapshot(self, snapshot: GraphSnapshot) -> None:
        """Install an already validated snapshot."""
        self.store.import_graph(snapshot.boxes)
        self.heading = snapshot.heading
        self.cue_text = snapshot.cue_text
        self.summary = snapshot.summary

    def import_json(self, text: Union[str, bytes]) -> None:
        """Replace everything with the document in ``text``. Raises SnapshotError."""
        self.load_snapshot(loads_snapshot(text))

    def save(self, path: Union[str, Path]) -> Path:
        return write_snapshot(Path(path), self.to_snapshot())

    def load(self, path: Union[str, Path]) -> None:
        snapshot = read_snapshot(Path(path))
        self.load_snapshot(snapshot)
        logger.info(f"Loaded note '{self.heading}' from {path}")

    def clear(self) -> None:
        """Blank texts and a tree holding only the seed box."""
        self.heading = ""
        self.cue_text = ""
        self.summary = ""
        self.store.reset()
