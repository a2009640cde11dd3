"""Pytest fixtures for core tests."""

import pytest


@pytest.fixture
def timers():
    """Manually driven timer factory for playback tests."""
    from tests.core.graph_test_helpers import ManualTimerFactory

    return ManualTimerFactory()


@pytest.fixture
def session(timers):
    """Empty Session whose playback is driven by ``timers``."""
    from mstep.session import Session

    return Session(timer_factory=timers)


@pytest.fixture
def triangle_session(session):
    """Session holding the A-B:3, B-C:4, A-C:5 triangle."""
    from tests.core.graph_test_helpers import triangle

    session.replace_graph(triangle())
    return session


@pytest.fixture
def traced_session(triangle_session):
    """Triangle session with an active trace."""
    triangle_session.run()
    return triangle_session
