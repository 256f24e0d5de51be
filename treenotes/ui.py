"""
NiceGUI shell for TreeNotes.

Draws the Cornell note (heading, cue text, summary) beside the tree canvas.
Boxes are absolutely positioned divs (CanvasBox); lines live in an SVG layer
(LineLayer) that is redrawn from InteractionController.lines() after every
change. Pointer events are forwarded to the controller; nothing here decides
adjacency.
"""

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from nicegui import ui

from treenotes.config import get_dark_mode, get_export_filename, set_dark_mode
from treenotes.constants import BOX_HEIGHT, BOX_WIDTH, DEFAULT_HIGHLIGHT_COLOR
from treenotes.controller import Canvas, InteractionController, LineSegment
from treenotes.document import NoteDocument
from treenotes.graph_store import Node
from treenotes.ids import NodeId
from treenotes.links import NO_LINK, CueHighlight, CueHighlights, link_href, link_options
from treenotes.snapshot import SnapshotError, format_number

logger = logging.getLogger(__name__)

# New boxes from the toolbar land this far right of / below the parent's center
ADJACENT_OFFSET = (0.0, 60.0)

CANVAS_CSS = f'''
    <style>
        .tn-canvas {{ position: relative; width: 100%; height: 70vh; overflow: auto;
                      border: 1px solid #cbd5e1; border-radius: 8px; user-select: none; }}
        .tn-lines {{ position: absolute; top: 0; left: 0; width: 4000px; height: 4000px;
                     pointer-events: none; }}
        .tn-box {{ position: absolute; width: {BOX_WIDTH:g}px; height: {BOX_HEIGHT:g}px;
                   cursor: grab; border-radius: 6px; padding: 2px 6px; overflow: hidden;
                   color: #111827; box-shadow: 0 1px 3px rgba(0,0,0,0.3); }}
        .tn-box.tn-selected {{ outline: 2px solid #6366f1; }}
        .tn-box-text {{ font-size: 13px; white-space: nowrap; text-overflow: ellipsis; overflow: hidden; }}
        .tn-box-footer {{ font-size: 9px; opacity: 0.6; }}
        .tn-highlight {{ cursor: pointer; border-radius: 4px; padding: 0 4px; color: #111827; }}
    </style>
'''


def pointer_from_args(args: Any) -> Optional[Tuple[float, float]]:
    """Read (clientX, clientY) from a NiceGUI mouse event payload."""
    if isinstance(args, dict):
        x, y = args.get('clientX'), args.get('clientY')
    elif isinstance(args, (list, tuple)) and len(args) >= 2:
        x, y = args[0], args[1]
    else:
        return None
    if x is None or y is None:
        return None
    try:
        return float(x), float(y)
    except (TypeError, ValueError):
        return None


def highlight_caption(item: CueHighlight) -> str:
    target = item.target
    return f'Go to {link_href(target)}' if target else 'Not linked'


def line_props(segment: LineSegment) -> str:
    x1, y1, x2, y2 = (format_number(v) for v in (segment.x1, segment.y1, segment.x2, segment.y2))
    return f'x1={x1} y1={y1} x2={x2} y2={y2}'


class CanvasBox:
    """BoxHandle backed by a NiceGUI div on the canvas."""

    def __init__(self, node: Node, parent: ui.element,
                 on_press: Callable[[NodeId, Any], None],
                 on_select: Callable[[NodeId], None]):
        self.node_id = node.id
        self._x, self._y = node.left, node.top
        self._color = node.color
        with parent:
            self.element = ui.element('div').classes('tn-box')
            with self.element:
                self.text = ui.label(node.content).classes('tn-box-text')
                ui.label(f'#{node.id}').classes('tn-box-footer')
        self.element.props(f'id=box-{node.id}')
        self.element.on('mousedown', lambda e: on_press(self.node_id, e.args), ['clientX', 'clientY'])
        self.element.on('click', lambda e: on_select(self.node_id))
        self._apply_style()

    def _apply_style(self) -> None:
        self.element.style(f'left: {self._x:g}px; top: {self._y:g}px; background-color: {self._color}')

    def get_position(self) -> Tuple[float, float]:
        return (self._x, self._y)

    def set_position(self, x: float, y: float) -> None:
        self._x, self._y = x, y
        self._apply_style()

    def get_size(self) -> Tuple[float, float]:
        return (BOX_WIDTH, BOX_HEIGHT)

    def get_color(self) -> str:
        return self._color

    def set_color(self, color: str) -> None:
        self._color = color
        self._apply_style()

    def set_text(self, content: str) -> None:
        self.text.set_text(content)

    def set_selected(self, selected: bool) -> None:
        if selected:
            self.element.classes(add='tn-selected')
        else:
            self.element.classes(remove='tn-selected')

    def remove(self) -> None:
        self.element.delete()


class LineLayer:
    """SVG layer mirroring the controller's line projection."""

    def __init__(self, parent: ui.element):
        with parent:
            self.svg = ui.element('svg').classes('tn-lines')
        self._lines: Dict[str, ui.element] = {}

    def render(self, segments: Dict[str, LineSegment]) -> None:
        for key in list(self._lines):
            if key not in segments:
                self._lines.pop(key).delete()
        for key, segment in segments.items():
            element = self._lines.get(key)
            if element is None:
                with self.svg:
                    element = ui.element('line').props(f'id=line-{key} stroke=#64748b stroke-width=2')
                self._lines[key] = element
            element.props(line_props(segment))


class TreeNotesPage:
    """One browser tab: a NoteDocument, its controller and the widgets."""

    def __init__(self):
        self.document = NoteDocument()
        self.highlights = CueHighlights()
        self.selected: Optional[NodeId] = None
        self._syncing_links = False
        self._build()

    # --- Layout ---

    def _build(self) -> None:
        ui.add_head_html(CANVAS_CSS)
        dark = ui.dark_mode(value=get_dark_mode())

        def toggle_dark(e):
            dark.set_value(e.value)
            set_dark_mode(e.value)

        with ui.header().classes('items-center justify-between'):
            ui.label('TreeNotes').classes('text-lg font-bold')
            with ui.row().classes('items-center gap-2'):
                ui.button('New box', icon='add_box', on_click=self.add_standalone).props('flat color=white')
                ui.button('Download', icon='download', on_click=self.download).props('flat color=white')
                ui.upload(label='Upload', auto_upload=True, on_upload=self.upload) \
                    .props('accept=application/json flat dense color=white').classes('w-48')
                ui.switch('Dark', value=dark.value, on_change=toggle_dark).props('dense color=white')

        with ui.row().classes('w-full no-wrap gap-4 p-4'):
            with ui.column().classes('w-1/3 gap-2'):
                self.heading_input = ui.input('Heading', on_change=self._on_heading).classes('w-full')
                self.cue_input = ui.textarea('Cue text', on_change=self._on_cue) \
                    .props('outlined autogrow').classes('w-full')
                with ui.row().classes('w-full items-center no-wrap gap-2'):
                    self.phrase_input = ui.input('Phrase', on_change=lambda e: self._refresh_links()) \
                        .classes('flex-grow')
                    self.highlight_color = ui.color_input('Highlight', value=DEFAULT_HIGHLIGHT_COLOR) \
                        .classes('w-32')
                    ui.button(icon='format_color_fill', on_click=self.highlight_phrase).props('flat') \
                        .tooltip('Highlight phrase')
                self.link_select = ui.select({NO_LINK: '--None--'}, value=NO_LINK, label='Link phrase to box',
                                             on_change=self._on_link_pick).classes('w-full')
                self.highlight_row = ui.row().classes('w-full gap-1')
                self.summary_input = ui.textarea('Summary', on_change=self._on_summary) \
                    .props('outlined autogrow').classes('w-full')

            with ui.column().classes('w-2/3 gap-2'):
                self.canvas = ui.element('div').classes('tn-canvas')
                self.canvas.on('mousemove', self._on_pointer_move, ['clientX', 'clientY'], throttle=0.02)
                self.canvas.on('mouseup', lambda e: self.controller.release())
                self.canvas.on('mouseleave', lambda e: self.controller.release())
                self.line_layer = LineLayer(self.canvas)
                self._build_toolbar()

        self.controller = InteractionController(self.document.store, self._make_box, Canvas())
        self.controller.set_on_change(self._on_controller_change)
        self._refresh_links()

    def _build_toolbar(self) -> None:
        with ui.card().classes('w-full') as self.toolbar:
            with ui.row().classes('items-center gap-2'):
                self.toolbar_title = ui.label('').classes('font-bold')
                self.content_input = ui.input('Text', on_change=self._on_content).classes('w-64')
                self.color_input = ui.color_input('Color', on_change=self._on_color).classes('w-40')
                ui.button(icon='add', on_click=self.add_adjacent).props('flat').tooltip('Add connected box')
                ui.button(icon='delete', on_click=self.delete_selected).props('flat color=negative') \
                    .tooltip('Delete box')
                with ui.button('Connect', icon='link').props('flat'):
                    self.connect_menu = ui.menu()
        self.toolbar.set_visibility(False)

    # --- Box handles ---

    def _make_box(self, node: Node) -> CanvasBox:
        return CanvasBox(node, self.canvas, self._on_box_press, self.select)

    def _on_controller_change(self, controller: InteractionController) -> None:
        self.line_layer.render(controller.lines())

    # --- Selection / toolbar ---

    def select(self, node_id: Optional[NodeId]) -> None:
        previous = self.controller.handle(self.selected) if self.selected else None
        if previous is not None:
            previous.set_selected(False)
        node = self.document.store.get_node(node_id) if node_id else None
        self.selected = node.id if node else None
        if node is None:
            self.toolbar.set_visibility(False)
            return
        self.controller.handle(node.id).set_selected(True)
        self.toolbar_title.set_text(f'Box #{node.id}')
        self.content_input.set_value(node.content)
        self.color_input.set_value(node.color)
        self._refresh_connect_menu()
        self.toolbar.set_visibility(True)

    def _refresh_connect_menu(self) -> None:
        self.connect_menu.clear()
        if not self.selected:
            return
        with self.connect_menu:
            for entry in self.controller.connect_menu(self.selected):
                ui.menu_item(entry.label, on_click=lambda _, target=entry.node_id: self.toggle(target),
                             auto_close=False)

    def _refresh_links(self) -> None:
        current = self.highlights.get(self.phrase_input.value)
        entries = link_options(self.document.store, current.target if current else None)
        options = {value: label for value, label, _ in entries}
        chosen = next((value for value, _, selected in entries if selected), NO_LINK)
        self._syncing_links = True
        try:
            self.link_select.set_options(options, value=chosen)
        finally:
            self._syncing_links = False

    def _render_highlights(self) -> None:
        self.highlight_row.clear()
        with self.highlight_row:
            for item in self.highlights:
                with ui.row().classes('items-center no-wrap gap-0'):
                    ui.label(item.text).classes('tn-highlight') \
                        .style(f'background-color: {item.color}') \
                        .on('click', lambda _, text=item.text: self.follow_highlight(text)) \
                        .tooltip(highlight_caption(item))
                    ui.button(icon='close', on_click=lambda _, text=item.text: self.remove_highlight(text)) \
                        .props('flat dense size=xs')

    # --- Event handlers ---

    def _on_box_press(self, node_id: NodeId, args: Any) -> None:
        pointer = pointer_from_args(args)
        if pointer is not None:
            self.controller.press(node_id, *pointer)

    def _on_pointer_move(self, e) -> None:
        pointer = pointer_from_args(e.args)
        if pointer is not None:
            self.controller.move(*pointer)

    def _on_heading(self, e) -> None:
        self.document.heading = e.value or ''

    def _on_cue(self, e) -> None:
        self.document.cue_text = e.value or ''
        if self.highlights.prune(self.document.cue_text):
            self._render_highlights()
            self._refresh_links()

    def _on_summary(self, e) -> None:
        self.document.summary = e.value or ''

    def _on_content(self, e) -> None:
        if self.selected and self.controller.edit_content(self.selected, e.value or ''):
            self.controller.handle(self.selected).set_text(e.value or '')

    def _on_color(self, e) -> None:
        if self.selected and e.value:
            self.controller.recolor(self.selected, e.value)

    def _on_link_pick(self, e) -> None:
        if self._syncing_links or not self.phrase_input.value:
            return
        if e.value != NO_LINK and self.phrase_input.value.strip() not in self.document.cue_text:
            ui.notify('Phrase is not in the cue text', type='warning')
            self._refresh_links()
            return
        self.highlights.link(self.phrase_input.value, e.value or NO_LINK)
        self._render_highlights()

    # --- Cue highlights ---

    def highlight_phrase(self) -> None:
        phrase = (self.phrase_input.value or '').strip()
        if not phrase or phrase not in self.document.cue_text:
            ui.notify('Type a phrase from the cue text first', type='warning')
            return
        self.highlights.highlight(phrase, self.highlight_color.value)
        self._render_highlights()
        self._refresh_links()

    def remove_highlight(self, text: str) -> None:
        if self.highlights.remove(text):
            self._render_highlights()
            self._refresh_links()

    def follow_highlight(self, text: str) -> None:
        node_id = self.highlights.resolve(self.document.store, text)
        if node_id is None:
            ui.notify(f'"{text}" does not link to an existing box', type='warning')
            return
        self.select(node_id)

    # --- Actions ---

    def add_standalone(self) -> None:
        node_id = self.controller.add_box((0, 20))
        self._refresh_links()
        self.select(node_id)

    def add_adjacent(self) -> None:
        if not self.selected:
            return
        node_id = self.controller.add_adjacent(self.selected, ADJACENT_OFFSET)
        self._refresh_links()
        self.select(node_id)

    def delete_selected(self) -> None:
        if not self.selected:
            return
        node_id = self.selected
        self.selected = None
        self.controller.delete_box(node_id)
        self.toolbar.set_visibility(False)
        self._refresh_links()

    def toggle(self, target_id: NodeId) -> None:
        if not self.selected:
            return
        self.controller.toggle_connection(self.selected, target_id)
        self._refresh_connect_menu()

    def download(self) -> None:
        payload = self.document.export_json().encode('utf-8')
        ui.download(payload, get_export_filename())

    def upload(self, e) -> None:
        try:
            self.document.import_json(e.content.read())
        except SnapshotError as err:
            logger.warning(f"Rejected upload {getattr(e, 'name', '')}: {err}")
            ui.notify(f'Could not import: {err}', type='negative')
            return
        self.selected = None
        self.toolbar.set_visibility(False)
        self.heading_input.set_value(self.document.heading)
        self.cue_input.set_value(self.document.cue_text)
        self.highlights.prune(self.document.cue_text)
        self._render_highlights()
        self.summary_input.set_value(self.document.summary)
        self.controller.sync()
        self._refresh_links()
        ui.notify(f'Imported {len(self.document.store)} boxes', type='positive')
