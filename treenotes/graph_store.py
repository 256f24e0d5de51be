"""
GraphStore: the authoritative box/line collection for a TreeNotes tree.

Nodes (boxes) and edges (lines) live in a single undirected networkx Graph.
Each node carries a ``Node`` record as its ``node`` attribute; each edge
carries its canonical key (``"lo_hi"``) as its ``key`` attribute. Because the
edge set and every node's neighbor set are the same adjacency structure, a
line exists exactly when both endpoints list each other.

Unknown IDs are never an error: mutations on them are no-ops and queries
return empty results.
"""

import logging
from dataclasses import dataclass
from typing import AbstractSet, Dict, Iterable, List, Optional, Tuple

import networkx as nx

from treenotes.colors import color_to_hex
from treenotes.constants import (
    DEFAULT_BOX_COLOR,
    DEFAULT_BOX_CONTENT,
    SEED_NODE_ID,
    SEED_POSITION,
)
from treenotes.ids import NodeId, canonical_pair, edge_key, normalize_node_id
from treenotes.snapshot import BoxRecord, SnapshotError

logger = logging.getLogger(__name__)


@dataclass
class Node:
    """A box: text content, top-left position in px and a fill color."""
    id: NodeId
    content: str = DEFAULT_BOX_CONTENT
    left: float = 0.0
    top: float = 0.0
    color: str = DEFAULT_BOX_COLOR

    @property
    def position(self) -> Tuple[float, float]:
        return (self.left, self.top)


def _coerce_id(value) -> Optional[NodeId]:
    try:
        return normalize_node_id(value)
    except ValueError:
        return None


class GraphStore:
    """
    Owns the node table, the adjacency relation and the ID allocator.

    A new store holds the seed box ``"1"``; pass ``seed=False`` for an empty one.
    """

    def __init__(self, seed: bool = True):
        self._graph = nx.Graph()
        self._next_id = 0
        if seed:
            self._create_seed()

    def _create_seed(self) -> None:
        self.create_node(SEED_POSITION, requested_id=SEED_NODE_ID)

    # --- Queries ---

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __contains__(self, node_id) -> bool:
        return self.has_node(node_id)

    @property
    def last_id(self) -> int:
        """Highest ID handed out so far; the next new node gets last_id + 1."""
        return self._next_id

    def has_node(self, node_id) -> bool:
        nid = _coerce_id(node_id)
        return nid is not None and nid in self._graph

    def list_node_ids(self) -> List[NodeId]:
        """Node IDs in insertion order."""
        return list(self._graph.nodes)

    def nodes(self) -> List[Node]:
        return [attrs["node"] for _, attrs in self._graph.nodes(data=True)]

    def get_node(self, node_id) -> Optional[Node]:
        nid = _coerce_id(node_id)
        if nid is None or nid not in self._graph:
            return None
        return self._graph.nodes[nid]["node"]

    def neighbors(self, node_id) -> AbstractSet[NodeId]:
        """
        Read-only live view of the IDs adjacent to ``node_id``.

        Later connects and disconnects show through a view already held,
        for as long as the node stays in the store.
        Unknown IDs get an empty frozenset.
        """
        nid = _coerce_id(node_id)
        if nid is None or nid not in self._graph:
            return frozenset()
        return self._graph.adj[nid].keys()

    def is_connected(self, a, b) -> bool:
        a, b = _coerce_id(a), _coerce_id(b)
        if a is None or b is None or a == b:
            return False
        lo, hi = canonical_pair(a, b)
        return self._graph.has_edge(lo, hi)

    def edges(self) -> List[str]:
        """All edge keys, ordered by their canonical pair."""
        pairs = sorted(
            (canonical_pair(u, v) for u, v in self._graph.edges()),
            key=lambda pair: (int(pair[0]), int(pair[1])),
        )
        return [f"{lo}_{hi}" for lo, hi in pairs]

    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    # --- Node mutations ---

    def create_node(
        self,
        position: Tuple[float, float],
        content: Optional[str] = None,
        color: Optional[str] = None,
        requested_id=None,
    ) -> NodeId:
        """
        Insert a node and return its ID.

        Without ``requested_id`` the next allocator value is used. With one
        (import), that ID is honored and the allocator moves to at least it.
        The caller guarantees ``requested_id`` is not already present.
        """
        if requested_id is not None:
            node_id = normalize_node_id(requested_id)
            self._next_id = max(self._next_id, int(node_id))
        else:
            self._next_id += 1
            node_id = str(self._next_id)

        left, top = position
        node = Node(
            id=node_id,
            content=DEFAULT_BOX_CONTENT if content is None else content,
            left=float(left),
            top=float(top),
            color=color_to_hex(color) if color else DEFAULT_BOX_COLOR,
        )
        self._graph.add_node(node_id, node=node)
        logger.debug(f"Created node {node_id} at ({node.left}, {node.top})")
        return node_id

    def delete_node(self, node_id) -> bool:
        """Remove a node and every edge incident to it."""
        nid = _coerce_id(node_id)
        if nid is None or nid not in self._graph:
            return False
        for other in list(self._graph.adj[nid]):
            self.disconnect(nid, other)
        self._graph.remove_node(nid)
        logger.debug(f"Deleted node {nid}")
        return True

    def set_position(self, node_id, left: float, top: float) -> bool:
        node = self.get_node(node_id)
        if node is None:
            return False
        node.left = float(left)
        node.top = float(top)
        return True

    def set_color(self, node_id, color: str) -> Optional[str]:
        """Store the normalised color and return it (None for unknown IDs)."""
        node = self.get_node(node_id)
        if node is None:
            return None
        node.color = color_to_hex(color)
        return node.color

    def set_content(self, node_id, content: str) -> bool:
        node = self.get_node(node_id)
        if node is None:
            return False
        node.content = content
        return True

    # --- Edge mutations ---

    def connect(self, a, b) -> bool:
        """Add the line a-b. Returns True only when a new edge was created."""
        a, b = _coerce_id(a), _coerce_id(b)
        if a is None or b is None or a == b:
            return False
        if a not in self._graph or b not in self._graph:
            return False
        lo, hi = canonical_pair(a, b)
        if self._graph.has_edge(lo, hi):
            return False
        self._graph.add_edge(lo, hi, key=edge_key(lo, hi))
        logger.debug(f"Connected {lo}_{hi}")
        return True

    def disconnect(self, a, b) -> bool:
        """Remove the line a-b. Returns True only when an edge was removed."""
        a, b = _coerce_id(a), _coerce_id(b)
        if a is None or b is None or a == b:
            return False
        lo, hi = canonical_pair(a, b)
        if not self._graph.has_edge(lo, hi):
            return False
        self._graph.remove_edge(lo, hi)
        logger.debug(f"Disconnected {lo}_{hi}")
        return True

    # --- Whole-graph operations ---

    def clear(self) -> None:
        """Drop every node and edge and rewind the allocator."""
        self._graph = nx.Graph()
        self._next_id = 0

    def reset(self) -> None:
        """Return to a fresh tree holding only the seed box."""
        self.clear()
        self._create_seed()

    def export_graph(self) -> List[BoxRecord]:
        """One BoxRecord per node in insertion order, lines sorted numerically."""
        records = []
        for node in self.nodes():
            lines = sorted(self._graph.adj[node.id], key=int)
            records.append(BoxRecord(
                id=node.id,
                content=node.content,
                left=node.left,
                top=node.top,
                color=node.color,
                lines=[str(line) for line in lines],
            ))
        return records

    def import_graph(self, boxes: Iterable[BoxRecord]) -> None:
        """
        Replace the whole graph with ``boxes``.

        First pass creates every node under its original ID; second pass
        connects every recorded neighbor pair. connect() is idempotent and
        skips unknown IDs, so a pair listed from both ends yields one edge and
        a dangling reference yields none.
        """
        boxes = list(boxes)
        pending: Dict[NodeId, List[NodeId]] = {}
        try:
            for box in boxes:
                node_id = normalize_node_id(box.id)
                if node_id in pending:
                    raise SnapshotError(f"Duplicate box id {node_id}")
                pending[node_id] = list(dict.fromkeys(normalize_node_id(line) for line in box.lines))
        except SnapshotError:
            raise
        except ValueError as e:
            raise SnapshotError(str(e)) from e

        self.clear()

        for node_id, box in zip(pending, boxes):
            self.create_node(
                (box.left, box.top),
                content=box.content,
                color=box.color,
                requested_id=node_id,
            )

        for node_id, lines in pending.items():
            for other in lines:
                if not self.connect(node_id, other) and other not in self._graph:
                    logger.warning(f"Box {node_id} references missing box {other}; line skipped")

        logger.info(f"Imported {len(self)} boxes and {self.edge_count()} lines")
