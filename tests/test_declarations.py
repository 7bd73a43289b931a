"""Tests for component declaration records."""

import pytest

from usekit.exceptions import DeclarationError
from usekit.keybindings.context import normalize_chord
from usekit.models.declarations import ComponentDeclaration, HookSpec, KeyBinding, LoadTiming


def noop(*args, **kwargs):
    pass


class TestValidation:
    """Declarations are validated when built."""

    def test_minimal_declaration(self):
        decl = ComponentDeclaration("editor")
        assert decl.name == "editor"
        assert decl.load_timing is LoadTiming.IMMEDIATE
        assert dict(decl.config_settings) == {}
        assert decl.guard_allows() is True

    def test_empty_name_rejected(self):
        with pytest.raises(DeclarationError):
            ComponentDeclaration("  ")

    def test_timing_parsed_from_string(self):
        decl = ComponentDeclaration("spell", load_timing="Deferred", triggers=["text-mode"])
        assert decl.is_deferred

    def test_unknown_timing_rejected(self):
        with pytest.raises(DeclarationError, match="Unknown load timing"):
            ComponentDeclaration("spell", load_timing="lazy")

    def test_triggers_on_immediate_rejected(self):
        with pytest.raises(DeclarationError, match="Only deferred"):
            ComponentDeclaration("spell", triggers=["text-mode"])

    def test_non_callable_hook_rejected(self):
        with pytest.raises(DeclarationError):
            ComponentDeclaration("spell", hooks=[("text-mode", "not-callable")])

    def test_non_callable_action_rejected(self):
        with pytest.raises(DeclarationError, match="init action"):
            ComponentDeclaration("spell", init_actions=["echo"])

    def test_invalid_guard_rejected(self):
        with pytest.raises(DeclarationError, match="Guard"):
            ComponentDeclaration("spell", guard="yes")

    def test_tuples_coerced(self):
        decl = ComponentDeclaration(
            "org",
            hooks=[("org-mode", noop)],
            key_bindings=[("org-mode", "C+c  C+c", "org-ctrl-c-ctrl-c")],
        )
        assert decl.hooks == (HookSpec("org-mode", noop),)
        assert decl.key_bindings[0].chord == "ctrl+c ctrl+c"

    def test_settings_are_read_only(self):
        settings = {"indent": 2}
        decl = ComponentDeclaration("editor", config_settings=settings)
        settings["indent"] = 8
        assert decl.config_settings["indent"] == 2
        with pytest.raises(TypeError):
            decl.config_settings["indent"] = 4


class TestTriggers:
    """Deferred declarations derive trigger events from hooks."""

    def test_trigger_events_ordered_and_unique(self):
        decl = ComponentDeclaration(
            "spell",
            load_timing=LoadTiming.DEFERRED,
            triggers=["text-mode"],
            hooks=[("prog-mode", noop), ("text-mode", noop)],
        )
        assert decl.trigger_events() == ("text-mode", "prog-mode")


class TestMerge:
    """Re-declaration merges by key."""

    def test_settings_merge_later_wins(self):
        first = ComponentDeclaration("editor", config_settings={"indent": 2, "tabs": False})
        second = ComponentDeclaration("editor", config_settings={"indent": 4, "wrap": True})
        merged = first.merged_with(second)
        assert dict(merged.config_settings) == {"indent": 4, "tabs": False, "wrap": True}
        assert list(merged.config_settings) == ["indent", "tabs", "wrap"]

    def test_bindings_merge_by_scope_and_chord(self):
        first = ComponentDeclaration(
            "org",
            key_bindings=[("global", "ctrl+c a", "agenda"), ("global", "ctrl+c c", "capture")],
        )
        second = ComponentDeclaration(
            "org",
            key_bindings=[("global", "ctrl+c a", "agenda-v2"), ("org-mode", "ctrl+c a", "x")],
        )
        merged = first.merged_with(second)
        assert [(b.scope, b.chord, b.handler) for b in merged.key_bindings] == [
            ("global", "ctrl+c a", "agenda-v2"),
            ("global", "ctrl+c c", "capture"),
            ("org-mode", "ctrl+c a", "x"),
        ]

    def test_actions_and_timing_come_from_newer(self):
        first = ComponentDeclaration("spell", init_actions=[noop])
        second = ComponentDeclaration("spell", load_timing="deferred", triggers=["text-mode"])
        merged = first.merged_with(second)
        assert merged.is_deferred
        assert merged.init_actions == ()

    def test_merge_different_names_rejected(self):
        with pytest.raises(DeclarationError):
            ComponentDeclaration("a").merged_with(ComponentDeclaration("b"))


class TestChords:
    """Key chord normalisation."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("ctrl+s", "ctrl+s"),
            ("Shift+Ctrl+s", "ctrl+shift+s"),
            ("C+x   C+s", "ctrl+x ctrl+s"),
            ("meta+x", "alt+x"),
            ("ctrl++", "ctrl++"),
            ("F5", "F5"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_chord(raw) == expected

    def test_unknown_modifier(self):
        with pytest.raises(ValueError, match="Unknown modifier"):
            normalize_chord("hyper+x")

    def test_empty_chord(self):
        with pytest.raises(ValueError):
            normalize_chord("   ")

    def test_binding_with_bad_chord_is_declaration_error(self):
        with pytest.raises(DeclarationError):
            KeyBinding("global", "", "save-buffer")

    def test_binding_defaults_to_global_scope(self):
        assert KeyBinding(None, "ctrl+s", "save-buffer").scope == "global"
