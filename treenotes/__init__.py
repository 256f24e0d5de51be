"""
TreeNotes: a Cornell note with a small tree of connected boxes.

This package provides:
- GraphStore: boxes, lines and the ID allocator
- InteractionController: drag, add/delete, connect toggle, line projection
- NoteDocument: note texts plus the tree, JSON export/import

Usage:
    from treenotes import GraphStore, InteractionController, NoteDocument
"""

from treenotes.graph_store import GraphStore, Node
from treenotes.controller import (
    InteractionController,
    DragState,
    Canvas,
    LineSegment,
    MenuEntry,
)
from treenotes.document import NoteDocument
from treenotes.snapshot import BoxRecord, GraphSnapshot, SnapshotError
from treenotes.ids import canonical_pair, edge_key

__all__ = [
    'GraphStore',
    'Node',
    'InteractionController',
    'DragState',
    'Canvas',
    'LineSegment',
    'MenuEntry',
    'NoteDocument',
    'BoxRecord',
    'GraphSnapshot',
    'SnapshotError',
    'canonical_pair',
    'edge_key',
]
