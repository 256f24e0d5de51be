"""
Interaction Controller - turns pointer gestures into GraphStore calls.

This controller owns:
- The drag state machine (idle -> dragging -> idle), one active drag at a time
- The box handles drawn for each node
- The line projection: one LineSegment per edge, endpoints at box centers

Every mutation or move recomputes the affected lines before returning and
then fires the change callback, so a caller never observes a stale line.
Lines are derived from the store and are never read back to rebuild
adjacency.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Tuple

from treenotes.boxes import BoxHandle, memory_box_factory
from treenotes.graph_store import GraphStore, Node
from treenotes.ids import NodeId, canonical_pair, edge_key

logger = logging.getLogger(__name__)

IDLE = 'idle'
DRAGGING = 'dragging'


@dataclass
class DragState:
    """Snapshot of the current drag."""
    phase: str = IDLE
    node_id: Optional[NodeId] = None
    offset_x: float = 0
    offset_y: float = 0

    @property
    def is_dragging(self) -> bool:
        return self.phase == DRAGGING


@dataclass
class Canvas:
    """
    Area the pointer must stay in for a drag step to apply.

    Width/height of None leave that side unbounded.
    """
    left: float = 0
    top: float = 0
    width: Optional[float] = None
    height: Optional[float] = None

    def contains(self, x: float, y: float) -> bool:
        if x < self.left or y < self.top:
            return False
        if self.width is not None and x > self.left + self.width:
            return False
        if self.height is not None and y > self.top + self.height:
            return False
        return True


@dataclass(frozen=True)
class LineSegment:
    """A drawn line. (x1, y1) is always the center of the lesser-ID box."""
    x1: float
    y1: float
    x2: float
    y2: float


@dataclass(frozen=True)
class MenuEntry:
    """One row of the connect menu shown for the selected box."""
    node_id: NodeId
    lo: NodeId
    hi: NodeId
    connected: bool

    @property
    def key(self) -> str:
        return f"{self.lo}_{self.hi}"

    @property
    def label(self) -> str:
        return f"Box# {self.node_id}" + (" ✅" if self.connected else "")


class InteractionController:
    """Binds gestures to a GraphStore and keeps box handles and lines in step."""

    def __init__(self, store: GraphStore,
                 box_factory: Callable[[Node], BoxHandle] = memory_box_factory,
                 canvas: Optional[Canvas] = None):
        self.store = store
        self.canvas = canvas or Canvas()
        self._box_factory = box_factory
        self._handles: Dict[NodeId, BoxHandle] = {}
        self._lines: Dict[str, LineSegment] = {}
        self._drag = DragState()
        self._on_change: Optional[Callable[['InteractionController'], None]] = None
        self.sync()

    # --- Wiring ---

    @property
    def drag_state(self) -> DragState:
        return self._drag

    def set_on_change(self, callback: Callable[['InteractionController'], None]):
        self._on_change = callback

    def set_box_factory(self, factory: Callable[[Node], BoxHandle]) -> None:
        self._box_factory = factory

    def _notify_change(self):
        if self._on_change:
            self._on_change(self)

    def handle(self, node_id: NodeId) -> Optional[BoxHandle]:
        return self._handles.get(node_id)

    def lines(self) -> Dict[str, LineSegment]:
        return dict(self._lines)

    def line(self, a: NodeId, b: NodeId) -> Optional[LineSegment]:
        return self._lines.get(edge_key(a, b))

    def sync(self) -> None:
        """Rebuild every handle and line from the store (after import/reset)."""
        for handle in self._handles.values():
            handle.remove()
        self._handles = {}
        self._lines = {}
        self._drag = DragState()
        for node in self.store.nodes():
            self._handles[node.id] = self._box_factory(node)
        for key in self.store.edges():
            lo, hi = key.split('_')
            self._lines[key] = self._segment(lo, hi)
        self._notify_change()

    # --- Geometry ---

    def center(self, node_id: NodeId) -> Optional[Tuple[float, float]]:
        """Center of a box: left + width/2, top + height/2."""
        node = self.store.get_node(node_id)
        if node is None:
            return None
        handle = self._handles.get(node.id)
        width, height = handle.get_size() if handle else (0.0, 0.0)
        return (node.left + width / 2, node.top + height / 2)

    def _segment(self, a: NodeId, b: NodeId) -> LineSegment:
        lo, hi = canonical_pair(a, b)
        x1, y1 = self.center(lo)
        x2, y2 = self.center(hi)
        return LineSegment(x1, y1, x2, y2)

    def _refresh_lines_for(self, node_id: NodeId) -> None:
        """Move the endpoint belonging to node_id on every incident line."""
        cx, cy = self.center(node_id)
        for other in self.store.neighbors(node_id):
            lo, hi = canonical_pair(node_id, other)
            key = f"{lo}_{hi}"
            current = self._lines.get(key)
            if current is None:
                self._lines[key] = self._segment(lo, hi)
            elif lo == node_id:
                self._lines[key] = replace(current, x1=cx, y1=cy)
            else:
                self._lines[key] = replace(current, x2=cx, y2=cy)

    def _apply_position(self, node_id: NodeId, left: float, top: float) -> None:
        self.store.set_position(node_id, left, top)
        handle = self._handles.get(node_id)
        if handle is not None:
            handle.set_position(left, top)
        self._refresh_lines_for(node_id)

    # --- Drag protocol ---

    def press(self, node_id: NodeId, pointer_x: float, pointer_y: float) -> DragState:
        """Start dragging node_id. Ignored while another drag is active."""
        if self._drag.is_dragging:
            logger.debug(f"Ignoring press on {node_id}: {self._drag.node_id} is being dragged")
            return self._drag
        node = self.store.get_node(node_id)
        if node is None:
            logger.debug(f"Ignoring press on unknown box {node_id}")
            return self._drag
        self._drag = DragState(
            phase=DRAGGING, node_id=node.id,
            offset_x=pointer_x - node.left, offset_y=pointer_y - node.top,
        )
        return self._drag

    def move(self, pointer_x: float, pointer_y: float) -> DragState:
        """Drag step: place the box at pointer - offset while inside the canvas."""
        if not self._drag.is_dragging:
            return self._drag
        if not self.canvas.contains(pointer_x, pointer_y):
            return self._drag
        node_id = self._drag.node_id
        if not self.store.has_node(node_id):
            self._drag = DragState()
            return self._drag
        self._apply_position(
            node_id,
            pointer_x - self._drag.offset_x,
            pointer_y - self._drag.offset_y,
        )
        self._notify_change()
        return self._drag

    def release(self) -> DragState:
        was_dragging = self._drag.is_dragging
        self._drag = DragState()
        if was_dragging:
            self._notify_change()
        return self._drag

    # --- Box actions ---

    def move_box(self, node_id: NodeId, left: float, top: float) -> bool:
        """Programmatic move; lines follow exactly as during a drag."""
        if not self.store.has_node(node_id):
            return False
        self._apply_position(self.store.get_node(node_id).id, left, top)
        self._notify_change()
        return True

    def add_box(self, position: Tuple[float, float], content: Optional[str] = None) -> NodeId:
        """Create an unconnected box."""
        node_id = self.store.create_node(position, content=content)
        self._handles[node_id] = self._box_factory(self.store.get_node(node_id))
        self._notify_change()
        return node_id

    def add_adjacent(self, ref_id: NodeId,
                     offset: Tuple[float, float] = (0, 0)) -> Optional[NodeId]:
        """Create a box at ref_id's center (plus offset) and connect the two."""
        center = self.center(ref_id)
        if center is None:
            logger.debug(f"Cannot add next to unknown box {ref_id}")
            return None
        ref = self.store.get_node(ref_id)
        position = (center[0] + offset[0], center[1] + offset[1])
        node_id = self.store.create_node(position)
        self._handles[node_id] = self._box_factory(self.store.get_node(node_id))
        self._connect(ref.id, node_id)
        self._notify_change()
        return node_id

    def delete_box(self, node_id: NodeId) -> bool:
        """
        Delete a box: lines first, then the drawn box, then the store node.

        Incident lines come from the neighbor set, never from the drawing.
        """
        node = self.store.get_node(node_id)
        if node is None:
            return False
        for other in sorted(self.store.neighbors(node.id), key=int):
            self._disconnect(node.id, other)
        handle = self._handles.pop(node.id, None)
        if handle is not None:
            handle.remove()
        self.store.delete_node(node.id)
        if self._drag.node_id == node.id:
            self._drag = DragState()
        self._notify_change()
        return True

    def recolor(self, node_id: NodeId, color: str) -> Optional[str]:
        applied = self.store.set_color(node_id, color)
        if applied is None:
            return None
        handle = self._handles.get(self.store.get_node(node_id).id)
        if handle is not None:
            handle.set_color(applied)
        self._notify_change()
        return applied

    def edit_content(self, node_id: NodeId, content: str) -> bool:
        if not self.store.set_content(node_id, content):
            return False
        self._notify_change()
        return True

    # --- Lines ---

    def _connect(self, a: NodeId, b: NodeId) -> bool:
        if not self.store.connect(a, b):
            return False
        lo, hi = canonical_pair(a, b)
        self._lines[f"{lo}_{hi}"] = self._segment(lo, hi)
        return True

    def _disconnect(self, a: NodeId, b: NodeId) -> bool:
        if not self.store.disconnect(a, b):
            return False
        self._lines.pop(edge_key(a, b), None)
        return True

    def connect(self, a: NodeId, b: NodeId) -> bool:
        created = self._connect(a, b)
        if created:
            self._notify_change()
        return created

    def disconnect(self, a: NodeId, b: NodeId) -> bool:
        removed = self._disconnect(a, b)
        if removed:
            self._notify_change()
        return removed

    def connect_menu(self, selected_id: NodeId) -> List[MenuEntry]:
        """Every other box in ID order, flagged when already connected."""
        selected = self.store.get_node(selected_id)
        if selected is None:
            return []
        entries = []
        for node_id in sorted(self.store.list_node_ids(), key=int):
            if node_id == selected.id:
                continue
            lo, hi = canonical_pair(selected.id, node_id)
            entries.append(MenuEntry(
                node_id=node_id, lo=lo, hi=hi,
                connected=self.store.is_connected(lo, hi),
            ))
        return entries

    def toggle_connection(self, selected_id: NodeId, target_id: NodeId) -> bool:
        """Disconnect when connected, connect otherwise. Returns the new state."""
        if self.store.is_connected(selected_id, target_id):
            self.disconnect(selected_id, target_id)
        else:
            self.connect(selected_id, target_id)
        return self.store.is_connected(selected_id, target_id)
