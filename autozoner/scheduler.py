# autozoner/scheduler.py
"""Cancellable timers on a single event loop.

Everything the engine does runs on one loop thread. Listener threads
(hooks, hotkeys, tray) hand work over with call_soon_threadsafe.
"""

import asyncio
import logging
import threading
from typing import Callable, Optional

log = logging.getLogger(__name__)

# Return values for call_repeating ticks
CONTINUE = True
STOP = False


class TimerHandle:
    """Returned by every schedule call. Cancelling after it fired is a no-op."""

    def __init__(self):
        self._cancelled = False
        self._done = False
        self._inner = None

    def cancel(self) -> None:
        if self._cancelled or self._done:
            return
        self._cancelled = True
        if self._inner is not None:
            self._inner.cancel()
            self._inner = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._done)


class Scheduler:
    """Base class; subclasses provide _schedule and call_soon_threadsafe"""

    def _schedule(self, delay: float, fn: Callable[[], None]):
        raise NotImplementedError

    def call_soon_threadsafe(self, callback: Callable, *args) -> None:
        raise NotImplementedError

    def call_later(self, delay: float, callback: Callable, *args) -> TimerHandle:
        """Run ``callback(*args)`` once after ``delay`` seconds"""
        handle = TimerHandle()

        def fire():
            if not handle.active:
                return
            handle._done = True
            handle._inner = None
            try:
                callback(*args)
            except Exception:
                log.exception("[TIMER] Deferred callback failed")

        handle._inner = self._schedule(delay, fire)
        return handle

    def call_repeating(self, interval: float, tick: Callable[[], bool]) -> TimerHandle:
        """
        Run ``tick`` every ``interval`` seconds until it returns STOP or the
        handle is cancelled. The first tick runs one interval from now.
        """
        handle = TimerHandle()

        def fire():
            if not handle.active:
                return
            handle._inner = None
            try:
                keep_going = tick()
            except Exception:
                log.exception("[TIMER] Repeating tick failed; stopping")
                keep_going = STOP

            # the tick may have cancelled its own handle
            if not handle.active:
                return
            if not keep_going:
                handle._done = True
                return
            handle._inner = self._schedule(interval, fire)

        handle._inner = self._schedule(interval, fire)
        return handle


class AsyncioScheduler(Scheduler):
    """Production scheduler: an asyncio loop, optionally driven from a daemon thread"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop or asyncio.new_event_loop()
        self._thread: Optional[threading.Thread] = None

    def _schedule(self, delay, fn):
        return self.loop.call_later(delay, fn)

    def call_soon_threadsafe(self, callback, *args):
        self.loop.call_soon_threadsafe(callback, *args)

    def start(self) -> None:
        """Run the loop on its own thread"""
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._run, name='autozoner-loop', daemon=True)
        self._thread.start()

    def _run(self):
        asyncio.set_event_loop(self.loop)
        log.info("[LOOP] Event loop started")
        self.loop.run_forever()
        log.info("[LOOP] Event loop stopped")

    def run_sync(self, callback: Callable, *args, timeout: float = 5.0):
        """Run ``callback`` on the loop thread and wait for its result"""
        if self._thread is None or not self._thread.is_alive():
            return callback(*args)

        done = threading.Event()
        result = {}

        def invoke():
            try:
                result['value'] = callback(*args)
            except Exception as e:
                result['error'] = e
            finally:
                done.set()

        self.loop.call_soon_threadsafe(invoke)
        if not done.wait(timeout):
            raise TimeoutError("event loop did not answer in time")
        if 'error' in result:
            raise result['error']
        return result.get('value')

    def stop(self) -> None:
        if self.loop.is_running():
            self.loop.call_soon_threadsafe(self.loop.stop)
        if self._thread:
            self._thread.join(timeout=2.0)
            self._thread = None
