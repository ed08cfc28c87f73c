# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test configuration and fixtures."""

try:
    import ctxdetect  # noqa: F401
except ImportError:
    raise ImportError("ctxdetect is not installed. Run: pip install -e '.[test]'") from None

import logging

import pytest


class FakeCall:
    """A scheduled eviction that only runs when the test fires it."""

    def __init__(self, interval, function, args=()):
        self.interval = interval
        self.function = function
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        """Run the callback the way the scheduler thread would."""
        if not self.cancelled:
            self.function(*self.args)


class FakeScheduler:
    """Stand-in for EvictionScheduler that records calls instead of running them."""

    def __init__(self):
        self.calls: list[FakeCall] = []
        self.closed = False

    def call_later(self, delay, callback, *args):
        call = FakeCall(delay, callback, args)
        self.calls.append(call)
        return call

    def close(self):
        self.closed = True

    @property
    def pending(self) -> list[FakeCall]:
        return [c for c in self.calls if not c.cancelled]


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def detector(scheduler):
    """ContextDetector with built-in rules and manually fired evictions."""
    from ctxdetect import ContextDetector

    d = ContextDetector(scheduler=scheduler)
    yield d
    d.close()


@pytest.fixture(autouse=True)
def _reset_shared_detector(monkeypatch):
    """Keep the process-wide detector and CTXDETECT_* env from leaking across tests."""
    from ctxdetect.detector import reset_detector

    for name in (
        "CTXDETECT_CACHE_TTL",
        "CTXDETECT_CONTENT_KEY_CHARS",
        "CTXDETECT_RULES_FILE",
        "CTXDETECT_LOG_LEVEL",
        "CTXDETECT_LOG_JSON",
        "CTXDETECT_CONFIGURE_LOGGING",
    ):
        monkeypatch.delenv(name, raising=False)
    engine_logger = logging.getLogger("ctxdetect")
    engine_level = engine_logger.level
    reset_detector()
    yield
    reset_detector()
    engine_logger.setLevel(engine_level)
