import pytest

from autozoner.keycodes import combo_matches, normalize_key_name, parse_hotkey


def test_parse_basic_combo():
    hotkey = parse_hotkey('ctrl+alt+]')
    assert hotkey.groups == {'ctrl', 'alt'}
    assert hotkey.sided == frozenset()
    assert hotkey.keys == {']'}


def test_parse_plus_as_key():
    assert parse_hotkey('ctrl++').keys == {'+'}


@pytest.mark.parametrize('text', ['', '   ', 'ctrl+alt', None])
def test_unusable_accelerators(text):
    assert parse_hotkey(text) is None


def test_aliases_normalize():
    assert normalize_key_name(' Control ') == 'ctrl'
    assert parse_hotkey('super+Return').groups == {'win'}
    assert parse_hotkey('super+Return').keys == {'enter'}


def test_side_agnostic_modifiers_match_either_side():
    hotkey = parse_hotkey('ctrl+alt+z')
    assert combo_matches({'ctrl_l', 'alt_r', 'z'}, hotkey)
    assert combo_matches({'ctrl', 'alt', 'z'}, hotkey)


def test_extra_modifier_or_key_does_not_match():
    hotkey = parse_hotkey('ctrl+alt+z')
    assert not combo_matches({'ctrl', 'alt', 'shift', 'z'}, hotkey)
    assert not combo_matches({'ctrl', 'alt', 'z', 'x'}, hotkey)
    assert not combo_matches({'ctrl', 'z'}, hotkey)


def test_sided_modifier_is_required():
    hotkey = parse_hotkey('ctrl_r+k')
    assert combo_matches({'ctrl_r', 'k'}, hotkey)
    assert not combo_matches({'ctrl_l', 'k'}, hotkey)
