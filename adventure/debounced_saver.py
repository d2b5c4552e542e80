"""debounced_saver.py: best-effort debounced persistence of adventure state.

Coalesces bursts of store writes (a player clearing several nodes in a row)
into a single JSON dump once the burst settles.

Design:
- debounce(): schedules a save after the interval; repeated calls within the
  window push the deadline back.
- flush(): performs the save right away (shutdown, tests, critical writes).
"""

from __future__ import annotations

import atexit
import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class DebouncedSaver:
    def __init__(self, save_fn: Callable[[], None], *, interval_ms: int = 300) -> None:
        self._save_fn = save_fn
        self._interval_s = max(0.0, float(interval_ms) / 1000.0)
        self._next_deadline: Optional[float] = None
        self._armed = False
        self._guard = threading.Lock()
        atexit.register(self.flush)

    def debounce(self) -> None:
        with self._guard:
            self._next_deadline = time.time() + self._interval_s
            if self._armed:
                return
            self._armed = True
        t = threading.Thread(target=self._wait_and_flush, name='debounced-saver', daemon=True)
        t.start()

    def _wait_and_flush(self) -> None:
        # Poll in small chunks so deadline resets are picked up
        while True:
            nd = self._next_deadline
            if nd is None:
                break
            dt = nd - time.time()
            if dt <= 0:
                break
            time.sleep(min(0.05, dt))
        self.flush()

    def close(self) -> None:
        """Stop tracking this saver at interpreter exit; pending work is dropped."""
        with self._guard:
            self._next_deadline = None
            self._armed = False
        atexit.unregister(self.flush)

    def flush(self) -> None:
        with self._guard:
            self._next_deadline = None
            self._armed = False
        try:
            self._save_fn()
        except Exception as e:
            # Best-effort persistence; a failed write must not take gameplay down
            logger.error(f"Debounced save failed: {e}")
