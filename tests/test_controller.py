"""
Tests for InteractionController

Covers the drag state machine, line endpoint tracking, add-adjacent,
delete ordering and the connect menu. Uses MemoryBox handles (120x40).
"""

import pytest

from treenotes.boxes import BoxHandle, MemoryBox
from treenotes.controller import (
    Canvas,
    DRAGGING,
    IDLE,
    InteractionController,
    LineSegment,
)
from treenotes.document import NoteDocument
from treenotes.graph_store import GraphStore


@pytest.fixture
def store():
    return GraphStore()


@pytest.fixture
def controller(store):
    return InteractionController(store)


class TestGeometry:

    def test_center_uses_box_size(self, controller):
        assert controller.center("1") == (60.0, 20.0)

    def test_center_unknown(self, controller):
        assert controller.center("9") is None

    def test_memory_box_satisfies_protocol(self, controller):
        assert isinstance(controller.handle("1"), BoxHandle)

    def test_canvas_bounds(self):
        canvas = Canvas(left=10, top=10, width=100, height=50)
        assert canvas.contains(10, 10)
        assert canvas.contains(110, 60)
        assert not canvas.contains(5, 20)
        assert not canvas.contains(20, 61)
        assert Canvas().contains(10_000, 10_000)


class TestDrag:

    def test_press_move_release(self, controller, store):
        state = controller.press("1", 30, 10)
        assert state.phase == DRAGGING
        assert (state.offset_x, state.offset_y) == (30, 10)

        controller.move(130, 110)
        assert store.get_node("1").position == (100.0, 100.0)
        assert controller.handle("1").get_position() == (100.0, 100.0)

        assert controller.release().phase == IDLE

    def test_move_while_idle_ignored(self, controller, store):
        controller.move(500, 500)
        assert store.get_node("1").position == (0.0, 0.0)

    def test_move_outside_canvas_is_dropped(self, store):
        controller = InteractionController(store, canvas=Canvas(left=50, top=50))
        controller.press("1", 60, 60)
        controller.move(40, 200)
        assert store.get_node("1").position == (0.0, 0.0)
        assert controller.drag_state.is_dragging
        controller.move(70, 80)
        assert store.get_node("1").position == (10.0, 20.0)

    def test_second_press_rejected(self, controller):
        second = controller.add_box((200, 0))
        controller.press("1", 0, 0)
        state = controller.press(second, 200, 0)
        assert state.node_id == "1"

    def test_press_unknown_ignored(self, controller):
        assert controller.press("42", 0, 0).phase == IDLE

    def test_overlap_allowed(self, controller, store):
        other = controller.add_box((100, 100))
        controller.press("1", 0, 0)
        controller.move(100, 100)
        assert store.get_node("1").position == store.get_node(other).position

    def test_drag_updates_only_own_endpoint(self, controller):
        child = controller.add_adjacent("1")
        before = controller.line("1", child)
        controller.press("1", 0, 0)
        controller.move(100, 100)
        after = controller.line("1", child)
        assert (after.x1, after.y1) == (160.0, 120.0)
        assert (after.x2, after.y2) == (before.x2, before.y2)

    def test_drag_higher_id_moves_second_endpoint(self, controller):
        child = controller.add_adjacent("1")
        controller.press(child, 60, 20)
        controller.move(260, 20)
        line = controller.line("1", child)
        assert (line.x1, line.y1) == (60.0, 20.0)
        assert (line.x2, line.y2) == (320.0, 40.0)

    def test_change_callback_sees_fresh_lines(self, controller):
        child = controller.add_adjacent("1")
        seen = []
        controller.set_on_change(lambda c: seen.append(c.line("1", child)))
        controller.press("1", 0, 0)
        controller.move(10, 0)
        assert seen[-1].x1 == 70.0

    def test_delete_during_drag_resets(self, controller):
        controller.press("1", 0, 0)
        controller.delete_box("1")
        assert controller.drag_state.phase == IDLE


class TestBoxActions:

    def test_add_adjacent_scenario(self, controller, store):
        child = controller.add_adjacent("1")
        assert child == "2"
        assert store.list_node_ids() == ["1", "2"]
        assert store.edges() == ["1_2"]
        assert store.get_node("2").position == (60.0, 20.0)
        assert controller.line("1", "2") == LineSegment(60.0, 20.0, 120.0, 40.0)

    def test_add_adjacent_with_offset(self, controller, store):
        child = controller.add_adjacent("1", offset=(0, 60))
        assert store.get_node(child).position == (60.0, 80.0)

    def test_add_adjacent_unknown(self, controller, store):
        assert controller.add_adjacent("7") is None
        assert len(store) == 1

    def test_add_box_is_standalone(self, controller, store):
        node_id = controller.add_box((5, 5), content="Loose")
        assert store.neighbors(node_id) == frozenset()
        assert store.get_node(node_id).content == "Loose"

    def test_delete_removes_lines_then_box(self, controller, store):
        a = controller.add_adjacent("1")
        b = controller.add_adjacent(a)
        handle = controller.handle(a)
        controller.delete_box(a)
        assert handle.removed
        assert controller.handle(a) is None
        assert controller.lines() == {}
        assert store.list_node_ids() == ["1", b]
        assert store.edges() == []

    def test_delete_never_exposes_dangling_line(self, controller, store):
        a = controller.add_adjacent("1")
        observed = []

        class Watching(MemoryBox):
            def remove(self):
                observed.append(dict(controller.lines()))
                super().remove()

        controller._handles[a] = Watching()
        controller.delete_box(a)
        assert observed == [{}]

    def test_delete_unknown(self, controller):
        assert controller.delete_box("8") is False

    def test_move_box_propagates(self, controller):
        child = controller.add_adjacent("1")
        assert controller.move_box(child, 300, 0)
        assert controller.line("1", child).x2 == 360.0

    def test_recolor(self, controller, store):
        assert controller.recolor("1", "hsl(0, 100%, 50%)") == "#FF0000"
        assert controller.handle("1").get_color() == "#FF0000"
        assert store.get_node("1").color == "#FF0000"

    def test_recolor_bad_value_falls_back(self, controller):
        assert controller.recolor("1", "chartreuse-ish") == "#F1F1F1"

    def test_edit_content(self, controller, store):
        assert controller.edit_content("1", "Root idea")
        assert store.get_node("1").content == "Root idea"
        assert not controller.edit_content("5", "x")


class TestConnectMenu:

    def test_menu_excludes_self_and_marks_connected(self, controller):
        for _ in range(3):
            controller.add_box((0, 0))
        controller.connect("3", "1")
        entries = controller.connect_menu("3")
        assert [e.node_id for e in entries] == ["1", "2", "4"]
        assert [e.connected for e in entries] == [True, False, False]
        assert entries[0].key == "1_3"
        assert entries[2].key == "3_4"
        assert entries[0].label.startswith("Box# 1")

    def test_menu_unknown_selection(self, controller):
        assert controller.connect_menu("9") == []

    def test_toggle(self, controller, store):
        other = controller.add_box((200, 200))
        assert controller.toggle_connection("1", other) is True
        assert controller.line("1", other) is not None
        assert controller.toggle_connection(other, "1") is False
        assert controller.line("1", other) is None
        assert store.edges() == []


class TestScenario:

    def test_full_round_trip(self):
        document = NoteDocument(heading="Cells")
        controller = InteractionController(document.store)

        child = controller.add_adjacent("1")
        controller.press("1", 0, 0)
        controller.move(100, 100)
        controller.release()

        text = document.export_json()
        before = {n.id: n for n in document.store.nodes()}

        document.clear()
        assert document.store.list_node_ids() == ["1"]

        document.import_json(text)
        controller.sync()

        records = {r.id: r for r in document.store.export_graph()}
        assert records["1"].lines == [child]
        assert records[child].lines == ["1"]
        assert {n.id: n for n in document.store.nodes()} == before
        assert controller.line("1", child) == LineSegment(160.0, 120.0, 120.0, 40.0)

    def test_sync_replaces_handles(self, store):
        controller = InteractionController(store)
        old = controller.handle("1")
        store.import_graph([])
        controller.sync()
        assert old.removed
        assert controller.lines() == {}
