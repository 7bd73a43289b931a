"""Tests for shell actions and the hook bus."""

import sys

import pytest

from usekit.exceptions import ShellActionError
from usekit.models.declarations import ComponentDeclaration
from usekit.services.activator import OutcomeStatus
from usekit.services.hooks import HookBus
from usekit.services.shell import ShellAction


class TestShellAction:
    """Bounded synchronous subprocess calls."""

    def test_success_returns_stdout(self):
        action = ShellAction([sys.executable, "-c", "print('ready')"])
        assert action().strip() == "ready"

    def test_string_command_is_split(self):
        assert ShellAction("git --version").command == ("git", "--version")

    def test_non_zero_exit(self):
        action = ShellAction([sys.executable, "-c", "import sys; sys.exit(3)"])
        with pytest.raises(ShellActionError) as excinfo:
            action()
        assert excinfo.value.context["exit_code"] == 3

    def test_timeout(self):
        action = ShellAction([sys.executable, "-c", "import time; time.sleep(5)"], timeout=0.2)
        with pytest.raises(ShellActionError, match="timed out"):
            action()

    def test_missing_executable(self):
        with pytest.raises(ShellActionError, match="could not start"):
            ShellAction(["usekit-no-such-binary-xyz"])()

    def test_empty_command_rejected(self):
        with pytest.raises(ValueError):
            ShellAction([])

    def test_failing_shell_init_is_isolated(self, ctx):
        failing = ShellAction([sys.executable, "-c", "import sys; sys.exit(1)"])
        ctx.register(ComponentDeclaration("pdf-tools", init_actions=[failing]))
        ctx.register(ComponentDeclaration("theme"))

        outcomes = ctx.activate()

        assert outcomes[0].status is OutcomeStatus.FAILED
        assert outcomes[0].step == "init"
        assert outcomes[1].status is OutcomeStatus.ACTIVATED


class TestHookBus:
    """In-process event subscription."""

    def test_fire_in_subscription_order(self, calls):
        bus = HookBus()
        bus.subscribe("save", calls.record("a"))
        bus.subscribe("save", calls.record("b"))
        assert bus.fire("save") == 2
        assert calls == ["a", "b"]

    def test_duplicate_subscription_ignored(self, calls):
        bus = HookBus()
        handler = calls.record("a")
        assert bus.subscribe("save", handler)
        assert not bus.subscribe("save", handler)
        bus.fire("save")
        assert calls == ["a"]

    def test_failing_handler_does_not_stop_others(self, calls):
        bus = HookBus()

        def broken():
            raise RuntimeError("boom")

        bus.subscribe("save", broken)
        bus.subscribe("save", calls.record("after"))
        assert bus.fire("save") == 1
        assert calls == ["after"]

    def test_handlers_receive_arguments(self):
        bus = HookBus()
        seen = []
        bus.subscribe("open", lambda path, mode="r": seen.append((path, mode)))
        bus.fire("open", "notes.org", mode="w")
        assert seen == [("notes.org", "w")]

    def test_unsubscribe(self, calls):
        bus = HookBus()
        handler = calls.record("a")
        bus.subscribe("save", handler)
        assert bus.unsubscribe("save", handler)
        assert not bus.unsubscribe("save", handler)
        assert bus.events() == []

    def test_fire_unknown_event(self):
        assert HookBus().fire("nothing") == 0
