# autozoner/keycodes.py
"""Hotkey strings ('ctrl+alt+]') and matching them against pressed keys.

Kept free of any input library so it can be used (and tested) anywhere.
"""

from typing import FrozenSet, Iterable, NamedTuple, Optional

MODIFIER_GROUPS = {
    'ctrl': ('ctrl', 'ctrl_l', 'ctrl_r'),
    'alt': ('alt', 'alt_l', 'alt_r', 'alt_gr'),
    'shift': ('shift', 'shift_l', 'shift_r'),
    'win': ('win', 'win_l', 'win_r'),
}

ALIASES = {
    'control': 'ctrl',
    'super': 'win',
    'cmd': 'win',
    'meta': 'win',
    'return': 'enter',
    'escape': 'esc',
    'pgup': 'page_up',
    'pgdn': 'page_down',
    'del': 'delete',
    'backtick': '`',
}

# Windows virtual-key codes for keys pynput reports without a char
VK_NAMES = {
    **{vk: chr(vk).lower() for vk in range(65, 91)},
    **{vk: chr(vk) for vk in range(48, 58)},
    **{96 + i: f'kp_{i}' for i in range(10)},
    **{111 + i: f'f{i}' for i in range(1, 25)},
    186: ';', 187: '=', 188: ',', 189: '-', 190: '.', 191: '/',
    192: '`', 219: '[', 220: '\\', 221: ']', 222: "'",
    33: 'page_up', 34: 'page_down', 35: 'end', 36: 'home',
    37: 'left', 38: 'up', 39: 'right', 40: 'down',
    45: 'insert', 46: 'delete', 32: 'space', 8: 'backspace',
    9: 'tab', 13: 'enter', 27: 'esc',
}


class Hotkey(NamedTuple):
    text: str
    groups: FrozenSet[str]   # modifier groups required, side-agnostic
    sided: FrozenSet[str]    # side-specific modifiers required (e.g. ctrl_l)
    keys: FrozenSet[str]     # non-modifier keys


def modifier_group(name: str) -> Optional[str]:
    for group, members in MODIFIER_GROUPS.items():
        if name in members:
            return group
    return None


def normalize_key_name(name: str) -> str:
    name = name.strip().lower()
    return ALIASES.get(name, name)


def parse_hotkey(text: str) -> Optional[Hotkey]:
    """Parse 'ctrl+alt+]' style strings; None for empty or modifier-only input"""
    if not text or not text.strip():
        return None

    # '+' itself may be the key: 'ctrl++'
    parts = text.strip().split('+')
    names = [normalize_key_name(p) if p else '+' for p in parts]
    if text.strip().endswith('++'):
        names = names[:-2] + ['+']

    groups, sided, keys = set(), set(), set()
    for name in names:
        group = modifier_group(name)
        if group is None:
            keys.add(name)
            continue
        groups.add(group)
        if name != group:
            sided.add(name)

    if not keys:
        return None
    return Hotkey(text, frozenset(groups), frozenset(sided), frozenset(keys))


def combo_matches(pressed: Iterable[str], hotkey: Hotkey) -> bool:
    """True when exactly the hotkey's modifiers and keys are held"""
    pressed = set(pressed)

    pressed_groups = set()
    pressed_keys = set()
    for name in pressed:
        group = modifier_group(name)
        if group is None:
            pressed_keys.add(name)
        else:
            pressed_groups.add(group)

    if pressed_groups != hotkey.groups:
        return False
    if not hotkey.sided <= pressed:
        return False
    return pressed_keys == hotkey.keys
