"""Tests for the fail-soft call helpers."""

import logging

import pytest

from safe_utils import reset_seen_exceptions, safe_call, safe_call_with_default


def _fails(exc=ValueError):
    raise exc("boom")


def test_safe_call_returns_result():
    assert safe_call(lambda a, b, c=10: a + b + c, 1, 2, c=5) == 8


def test_safe_call_swallows_failure():
    assert safe_call(_fails) is None


def test_safe_call_with_default():
    assert safe_call_with_default(_fails, 'fallback') == 'fallback'
    assert safe_call_with_default(lambda: 'ok', 'fallback') == 'ok'


def test_failures_logged_once_per_type(caplog):
    with caplog.at_level(logging.WARNING, logger='safe_utils'):
        safe_call(_fails)
        safe_call(_fails)
        safe_call(_fails, KeyError)
    messages = [r.getMessage() for r in caplog.records]
    assert len(messages) == 2
    assert 'ValueError' in messages[0]
    assert 'KeyError' in messages[1]

    reset_seen_exceptions()
    caplog.clear()
    with caplog.at_level(logging.WARNING, logger='safe_utils'):
        safe_call(_fails)
    assert len(caplog.records) == 1


@pytest.mark.parametrize("value", ['1', 'true', 'YES', 'on'])
def test_debug_flag_reraises(monkeypatch, value):
    monkeypatch.setenv('DEBUG_RAISE_EXCEPTIONS', value)
    with pytest.raises(ValueError):
        safe_call(_fails)
    with pytest.raises(ValueError):
        safe_call_with_default(_fails, 0)


def test_debug_flag_off_values(monkeypatch):
    monkeypatch.setenv('DEBUG_RAISE_EXCEPTIONS', 'no')
    assert safe_call_with_default(_fails, 0) == 0
