"""
Node and edge identity.

Node IDs are decimal integer strings. Edges are unordered pairs, stored under
the key ``"<lesser>_<greater>"`` with endpoints ordered by numeric value, so
``"9_10"`` and never ``"10_9"``.
"""

from typing import Tuple, Union

NodeId = str


def normalize_node_id(value: Union[str, int]) -> NodeId:
    """
    Return the canonical string form of a node ID.

    Accepts non-negative ints and decimal strings (surrounding whitespace and
    leading zeros are dropped). Raises ValueError for anything else.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid node id: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"Invalid node id: {value!r}")
        return str(value)
    if isinstance(value, str):
        text = value.strip()
        if text.isdecimal() and text.isascii():
            return str(int(text))
    raise ValueError(f"Invalid node id: {value!r}")


def canonical_pair(a: NodeId, b: NodeId) -> Tuple[NodeId, NodeId]:
    """Order two node IDs by numeric value."""
    a, b = normalize_node_id(a), normalize_node_id(b)
    if int(a) <= int(b):
        return a, b
    return b, a


def edge_key(a: NodeId, b: NodeId) -> str:
    lo, hi = canonical_pair(a, b)
    return f"{lo}_{hi}"


def split_edge_key(key: str) -> Tuple[NodeId, NodeId]:
    """Inverse of edge_key. Raises ValueError on a malformed key."""
    parts = key.split("_")
    if len(parts) != 2:
        raise ValueError(f"Invalid edge key: {key!r}")
    return canonical_pair(parts[0], parts[1])
