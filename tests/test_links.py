import pytest

from treenotes.graph_store import GraphStore
from treenotes.links import (
    NO_LINK,
    CueHighlights,
    link_href,
    link_onclick,
    link_options,
    parse_link,
    resolve_link,
)


def make_store():
    store = GraphStore()
    store.create_node((0, 0))
    store.create_node((0, 0))
    return store


def test_encode_link():
    assert link_href(3) == '#3'
    assert link_onclick('3') == "window.location.href='#3'"


def test_parse_link_forms():
    assert parse_link("window.location.href='#12'") == '12'
    assert parse_link('window.location.href = "#4"') == '4'
    assert parse_link('#7') == '7'
    assert parse_link('no link here') is None
    assert parse_link("window.location.href='#abc'") is None
    assert parse_link(None) is None


def test_resolve_link_requires_live_box():
    store = make_store()
    assert resolve_link(store, '#2') == '2'
    store.delete_node('2')
    assert resolve_link(store, '#2') is None


def test_link_options():
    store = make_store()
    options = link_options(store, selected='2')
    assert options[0] == (NO_LINK, '--None--', False)
    assert options[1:] == [
        ('1', 'Box# 1', False),
        ('2', 'Box# 2', True),
        ('3', 'Box# 3', False),
    ]


def test_link_options_nothing_selected():
    options = link_options(make_store())
    assert options[0][2] is True
    assert not any(selected for _, _, selected in options[1:])


class TestCueHighlights:

    def test_highlight_defaults_to_yellow(self):
        highlights = CueHighlights()
        item = highlights.highlight('  mitochondria ')
        assert item.text == 'mitochondria'
        assert item.color == '#FFFF00'
        assert item.target is None

    def test_highlight_again_recolors(self):
        highlights = CueHighlights()
        highlights.highlight('cell', 'rgb(0, 255, 0)')
        highlights.highlight('cell', 'hsl(0, 100%, 50%)')
        assert len(highlights) == 1
        assert highlights.get('cell').color == '#FF0000'

    def test_unreadable_color_falls_back_to_highlight_yellow(self):
        assert CueHighlights().highlight('cell', 'not-a-color').color == '#FFFF00'

    def test_blank_phrase_is_ignored(self):
        highlights = CueHighlights()
        assert highlights.highlight('   ') is None
        assert highlights.link('', '2') is None
        assert len(highlights) == 0

    def test_link_creates_highlight_and_resolves(self):
        store = make_store()
        highlights = CueHighlights()
        item = highlights.link('nucleus', '3')
        assert item.color == '#FFFF00'
        assert item.onclick == "window.location.href='#3'"
        assert highlights.resolve(store, 'nucleus') == '3'

    def test_link_keeps_existing_color(self):
        highlights = CueHighlights()
        highlights.highlight('cell', '#00f')
        assert highlights.link('cell', 2).color == '#0000FF'

    def test_link_to_deleted_box_stops_resolving(self):
        store = make_store()
        highlights = CueHighlights()
        highlights.link('nucleus', '2')
        store.delete_node('2')
        assert highlights.get('nucleus').target == '2'
        assert highlights.resolve(store, 'nucleus') is None

    def test_link_to_none_removes_highlight(self):
        highlights = CueHighlights()
        highlights.link('cell', '1')
        assert highlights.link('cell', NO_LINK) is None
        assert highlights.get('cell') is None

    def test_bad_link_target_changes_nothing(self):
        highlights = CueHighlights()
        with pytest.raises(ValueError):
            highlights.link('cell', 'abc')
        assert len(highlights) == 0

    def test_remove(self):
        highlights = CueHighlights()
        highlights.highlight('cell')
        assert highlights.remove('cell') is True
        assert highlights.remove('cell') is False

    def test_prune_drops_phrases_gone_from_text(self):
        highlights = CueHighlights()
        highlights.highlight('cell')
        highlights.link('nucleus', '1')
        assert highlights.prune('The cell wall') == ['nucleus']
        assert [item.text for item in highlights] == ['cell']
