# autozoner/hotkey_listener.py
"""Global hotkeys that invoke app actions"""

import logging
from typing import Callable, Dict, Optional

from pynput import keyboard
from pynput.keyboard import Key

from .keycodes import VK_NAMES, Hotkey, combo_matches, parse_hotkey

log = logging.getLogger(__name__)

MODIFIER_KEYS = {
    Key.ctrl: 'ctrl', Key.ctrl_l: 'ctrl_l', Key.ctrl_r: 'ctrl_r',
    Key.alt: 'alt', Key.alt_l: 'alt_l', Key.alt_r: 'alt_r', Key.alt_gr: 'alt_gr',
    Key.shift: 'shift', Key.shift_l: 'shift_l', Key.shift_r: 'shift_r',
    Key.cmd: 'win', Key.cmd_l: 'win_l', Key.cmd_r: 'win_r',
}


class HotkeyListener:
    """
    Listens on a pynput thread and hands matched actions to the engine
    loop through ``dispatch`` (usually scheduler.call_soon_threadsafe).
    """

    def __init__(self, settings_provider: Callable[[], Optional[Dict[str, str]]],
                 actions: Dict[str, Callable[[], None]],
                 dispatch: Callable[..., None]):
        self.settings_provider = settings_provider
        self.actions = actions
        self.dispatch = dispatch
        self.listener = None
        self.running = False
        self.current_keys = set()
        self.fired = set()
        self.bindings: Dict[Hotkey, str] = {}

    def start(self):
        if self.running:
            return

        self.bindings = self._build_bindings()
        self.listener = keyboard.Listener(on_press=self._on_press, on_release=self._on_release)
        self.listener.start()
        self.running = True
        log.info("[HOTKEY] Listener started with %d binding(s)", len(self.bindings))

    def stop(self):
        if self.listener and self.running:
            self.listener.stop()
            self.running = False
            self.current_keys.clear()
            self.fired.clear()
            log.info("[HOTKEY] Listener stopped")

    def restart(self):
        self.stop()
        self.start()

    def _build_bindings(self) -> Dict[Hotkey, str]:
        bindings = {}
        for action_name, accelerator in (self.settings_provider() or {}).items():
            if action_name not in self.actions:
                log.warning("[HOTKEY] Unknown action '%s' in config", action_name)
                continue
            hotkey = parse_hotkey(accelerator)
            if hotkey is None:
                log.info("[HOTKEY] '%s' has no usable accelerator ('%s')", action_name, accelerator)
                continue
            bindings[hotkey] = action_name
            log.info("[HOTKEY] Binding %s -> %s", accelerator, action_name)
        return bindings

    def _key_name(self, key) -> Optional[str]:
        if key in MODIFIER_KEYS:
            return MODIFIER_KEYS[key]
        vk = getattr(key, 'vk', None)
        if vk in VK_NAMES:
            return VK_NAMES[vk]
        char = getattr(key, 'char', None)
        if char:
            return char.lower()
        name = getattr(key, 'name', None)
        return name.lower() if name else None

    def _pressed_names(self):
        names = (self._key_name(k) for k in self.current_keys)
        return {n for n in names if n}

    def _on_press(self, key):
        if key in self.current_keys:
            return
        self.current_keys.add(key)

        pressed = self._pressed_names()
        for hotkey, action_name in self.bindings.items():
            if combo_matches(pressed, hotkey) and hotkey not in self.fired:
                self.fired.add(hotkey)
                log.info("[HOTKEY] [%s] triggered: %s", hotkey.text, action_name)
                self.dispatch(self.actions[action_name])
                break

    def _on_release(self, key):
        self.current_keys.discard(key)
        if key in MODIFIER_KEYS:
            self.fired.clear()
