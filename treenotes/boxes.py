"""
Box handles: the capability set the editor needs from whatever draws a box.

The controller never touches a rendering technology directly. The NiceGUI
shell (treenotes/ui.py) supplies CanvasBox; tests and headless use get
MemoryBox.
"""

from typing import Protocol, Tuple, runtime_checkable

from treenotes.constants import BOX_HEIGHT, BOX_WIDTH, DEFAULT_BOX_COLOR


@runtime_checkable
class BoxHandle(Protocol):
    """Drawable box bound to one node."""

    def get_position(self) -> Tuple[float, float]:
        """Return (left, top) in px."""
        ...

    def set_position(self, x: float, y: float) -> None:
        ...

    def get_size(self) -> Tuple[float, float]:
        """Return (width, height) in px."""
        ...

    def get_color(self) -> str:
        ...

    def set_color(self, color: str) -> None:
        ...

    def remove(self) -> None:
        """Take the box off the canvas. The handle is not used afterwards."""
        ...


class MemoryBox:
    """BoxHandle that only keeps numbers. Used headless and in tests."""

    def __init__(self, x: float = 0.0, y: float = 0.0,
                 width: float = BOX_WIDTH, height: float = BOX_HEIGHT,
                 color: str = DEFAULT_BOX_COLOR):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.color = color
        self.removed = False

    def get_position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def set_position(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def get_size(self) -> Tuple[float, float]:
        return (self.width, self.height)

    def get_color(self) -> str:
        return self.color

    def set_color(self, color: str) -> None:
        self.color = color

    def remove(self) -> None:
        self.removed = True


def memory_box_factory(node) -> MemoryBox:
    """Build a MemoryBox mirroring a Node record."""
    return MemoryBox(node.left, node.top, color=node.color)
