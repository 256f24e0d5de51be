"""
Inline links from the cue text to boxes.

A highlighted phrase in the cue text can point at a box. The reference is the
fragment ``#<id>``; a highlight carries it either as an href or as
``window.location.href='#<id>'`` in its onclick. The overlay reads the ID back
without going through the graph; the graph only answers whether it exists.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from treenotes.colors import color_to_hex
from treenotes.constants import DEFAULT_HIGHLIGHT_COLOR
from treenotes.graph_store import GraphStore
from treenotes.ids import NodeId, normalize_node_id

logger = logging.getLogger(__name__)

NO_LINK = "none"

_ONCLICK_RE = re.compile(r"window\.location\.href\s*=\s*['\"]#(.*?)['\"]")
_HREF_RE = re.compile(r"^\s*#(\S+)\s*$")


def link_href(node_id: NodeId) -> str:
    return f"#{normalize_node_id(node_id)}"


def link_onclick(node_id: NodeId) -> str:
    return f"window.location.href='{link_href(node_id)}'"


def parse_link(text: Optional[str]) -> Optional[NodeId]:
    """Extract the box ID from an onclick snippet or a ``#id`` fragment."""
    if not text:
        return None
    match = _ONCLICK_RE.search(text) or _HREF_RE.match(text)
    if not match:
        return None
    try:
        return normalize_node_id(match.group(1))
    except ValueError:
        return None


def resolve_link(store: GraphStore, text: Optional[str]) -> Optional[NodeId]:
    """Return the linked ID only while that box still exists."""
    node_id = parse_link(text)
    if node_id is None or not store.has_node(node_id):
        return None
    return node_id


def link_options(store: GraphStore,
                 selected: Optional[NodeId] = None) -> List[Tuple[str, str, bool]]:
    """
    Entries for the link-target picker: (value, label, is_selected).

    The first entry is "--None--", selected when nothing is linked.
    """
    chosen = None
    if selected is not None and selected != NO_LINK:
        try:
            chosen = normalize_node_id(selected)
        except ValueError:
            chosen = None
    options = [(NO_LINK, "--None--", chosen is None)]
    for node_id in store.list_node_ids():
        options.append((node_id, f"Box# {node_id}", node_id == chosen))
    return options


@dataclass
class CueHighlight:
    """A highlighted phrase of the cue text, optionally linked to a box."""
    text: str
    color: str = DEFAULT_HIGHLIGHT_COLOR
    onclick: Optional[str] = None

    @property
    def target(self) -> Optional[NodeId]:
        return parse_link(self.onclick)


class CueHighlights:
    """
    The highlights laid over the cue text, keyed by phrase.

    Highlighting a phrase twice recolors it. Linking a phrase that is not
    highlighted yet highlights it in DEFAULT_HIGHLIGHT_COLOR first; linking
    it to NO_LINK removes the highlight. A link to a deleted box stays on
    the phrase but no longer resolves.
    """

    def __init__(self):
        self._items: Dict[str, CueHighlight] = {}

    def __iter__(self) -> Iterator[CueHighlight]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def get(self, text: Optional[str]) -> Optional[CueHighlight]:
        return self._items.get((text or "").strip())

    def highlight(self, text: Optional[str], color: Optional[str] = None) -> Optional[CueHighlight]:
        phrase = (text or "").strip()
        if not phrase:
            return None
        color = color_to_hex(color, default=DEFAULT_HIGHLIGHT_COLOR) if color else DEFAULT_HIGHLIGHT_COLOR
        item = self._items.get(phrase)
        if item is None:
            item = self._items[phrase] = CueHighlight(phrase, color)
        else:
            item.color = color
        return item

    def link(self, text: Optional[str], node_id) -> Optional[CueHighlight]:
        """Point a phrase at a box. Raises ValueError for a malformed ID."""
        if node_id is None or node_id == NO_LINK:
            self.remove(text)
            return None
        onclick = link_onclick(node_id)
        item = self.get(text) or self.highlight(text)
        if item is not None:
            item.onclick = onclick
            logger.debug(f"Linked {item.text!r} to box {item.target}")
        return item

    def remove(self, text: Optional[str]) -> bool:
        return self._items.pop((text or "").strip(), None) is not None

    def resolve(self, store: GraphStore, text: Optional[str]) -> Optional[NodeId]:
        item = self.get(text)
        return resolve_link(store, item.onclick) if item else None

    def prune(self, cue_text: Optional[str]) -> List[str]:
        """Drop highlights whose phrase is gone from the cue text; return them."""
        cue_text = cue_text or ""
        gone = [phrase for phrase in self._items if phrase not in cue_text]
        for phrase in gone:
            del self._items[phrase]
        return gone

    def clear(self) -> None:
        self._items.clear()
