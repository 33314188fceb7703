"""
Elementary kernel test configuration.

Shared helpers: a recording update sink and an App wired to it.
Deferred-widget tests use pytest-asyncio with function-scoped loops.
"""

import pytest

from elementary.kernel.app import App


class Recorder:
    """Update sink that remembers every message it was sent."""

    def __init__(self):
        self.messages = []

    def __call__(self, message):
        self.messages.append(message)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def app(recorder):
    return App(update=recorder)
