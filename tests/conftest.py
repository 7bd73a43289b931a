"""Shared pytest fixtures for usekit tests."""

import textwrap

import pytest

from usekit.services.startup_context import StartupContext


@pytest.fixture
def ctx():
    """A fresh startup context, closed after the test."""
    context = StartupContext()
    yield context
    context.close()


@pytest.fixture
def fake_which():
    """Build a ``which`` lookup that only knows the given executables."""

    def make(*present):
        def which(name):
            return f"/usr/bin/{name}" if name in present else None

        return which

    return make


@pytest.fixture
def calls():
    """List recorder; ``calls.record(tag)`` returns an action appending tag."""

    class Recorder(list):
        def record(self, tag):
            def action(*args, **kwargs):
                self.append(tag)

            return action

    return Recorder()


@pytest.fixture
def write_init(tmp_path):
    """Write YAML text to an init file and return its path."""

    def write(text, name="init.yaml"):
        path = tmp_path / name
        path.write_text(textwrap.dedent(text))
        return path

    return write
