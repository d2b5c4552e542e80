import time

from debounced_saver import DebouncedSaver


def test_debounced_saver_coalesces_and_flushes():
    calls = []

    def _save():
        calls.append(time.time())

    s = DebouncedSaver(_save, interval_ms=50)

    # Burst of debounces collapses into one save after the interval
    s.debounce()
    time.sleep(0.01)
    s.debounce()
    time.sleep(0.01)
    s.debounce()
    time.sleep(0.15)
    assert len(calls) == 1

    s.debounce()
    time.sleep(0.15)
    assert len(calls) == 2

    # Explicit flush saves right away even with nothing armed
    s.flush()
    assert len(calls) == 3


def test_failed_save_does_not_raise():
    def _boom():
        raise OSError("disk full")

    s = DebouncedSaver(_boom, interval_ms=10)
    s.flush()
    s.debounce()
    time.sleep(0.1)


def test_close_drops_exit_hook(monkeypatch):
    import debounced_saver

    hooks = []
    monkeypatch.setattr(debounced_saver.atexit, 'register', hooks.append)
    monkeypatch.setattr(debounced_saver.atexit, 'unregister', hooks.remove)

    s = DebouncedSaver(lambda: None, interval_ms=10)
    assert hooks == [s.flush]
    s.close()
    assert hooks == []
