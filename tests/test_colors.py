import pytest

from treenotes.colors import color_to_hex, hsl_to_hex, rgb_to_hex


def test_color_conversions():
    cases = [
        ('#f1f1f1', '#F1F1F1'),
        ('#abc', '#AABBCC'),
        ('  #00FF00 ', '#00FF00'),
        ('rgb(255, 0, 0)', '#FF0000'),
        ('rgb(0,128,255)', '#0080FF'),
        ('rgba(1, 2, 3, 0.5)', '#010203'),
        ('hsl(120, 100%, 50%)', '#00FF00'),
        ('hsl(240, 100%, 50%)', '#0000FF'),
        ('hsl(0, 0%, 100%)', '#FFFFFF'),
    ]
    for raw, expected in cases:
        got = color_to_hex(raw)
        assert got == expected, f'For {raw!r} expected {expected} got {got}'


@pytest.mark.parametrize('raw', ['', 'blue', '#12', '#ggg', 'rgb(1, 2)', None, 42])
def test_unparseable_falls_back(raw):
    assert color_to_hex(raw) == '#F1F1F1'


def test_custom_default():
    assert color_to_hex('nope', default='#000000') == '#000000'


def test_rgb_to_hex_clamps():
    assert rgb_to_hex(300, -5, 16) == '#FF0010'


def test_hsl_to_hex_grey():
    assert hsl_to_hex(0, 0, 50) == '#808080'
