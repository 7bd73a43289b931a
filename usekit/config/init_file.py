"""
Init file loader.

Reads component declarations, the capability manifest and user key
bindings from ``~/.config/usekit/init.yaml`` (or USEKIT_INIT).

A malformed component entry is logged and skipped; the remaining entries
still load, so one typo never takes the whole configuration down.
"""

import importlib
import logging
import os
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import yaml

from usekit.config.constants import GLOBAL_SCOPE
from usekit.config.settings import get_init_path
from usekit.exceptions import ConfigurationError, DeclarationError, UsekitError
from usekit.models.capabilities import CapabilityRequirement
from usekit.models.declarations import ComponentDeclaration, HookSpec, KeyBinding, LoadTiming
from usekit.services.shell import ShellAction

logger = logging.getLogger(__name__)

# Example config content for new users
EXAMPLE_CONFIG = """# usekit init file
#
# capabilities: executables optional components rely on. A list entry is a
# fallback group; it is satisfied when any of its names is on PATH.
#
# components: activated in order. A name declared twice keeps its first
# position; later settings and key bindings win.
#
#   name:      unique component name
#   defer:     true to activate on first trigger instead of at startup
#   triggers:  extra events that activate a deferred component
#   when:      guard, e.g. {executable: aspell} or {env: DISPLAY} or {platform: linux}
#   settings:  name -> value, applied in order
#   hooks:     [{event: text-mode, handler: "package.module:function"}]
#   bind:      [{key: "ctrl+c a", handler: org-agenda, scope: global}]
#   init:      actions run before settings ("package.module:function" or {run: [argv], timeout: 5})
#   config:    actions run after settings, hooks and bindings
#
# bindings: user key bindings applied after every component.

capabilities:
  - git
  - [aspell, hunspell]

components:
  - name: editor
    settings:
      indent: 4
      wrap: true
    bind:
      - {key: "ctrl+x ctrl+s", handler: save-buffer}

  - name: spelling
    defer: true
    triggers: [text-mode]
    when: {executable: [aspell, hunspell]}
    settings:
      dictionary: en_US

bindings: []
"""


@dataclass
class InitFile:
    """Everything read from one init file."""

    path: Optional[Path] = None
    capabilities: List[CapabilityRequirement] = field(default_factory=list)
    declarations: List[ComponentDeclaration] = field(default_factory=list)
    bindings: List[KeyBinding] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def get_config_path() -> Path:
    """Get the path to the init file."""
    return get_init_path()


def read_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load the init file as a dictionary.

    Returns:
        The parsed mapping, or an empty dict if the file doesn't exist

    Raises:
        ConfigurationError: If the file can't be read or isn't a YAML mapping
    """
    config_path = Path(path) if path is not None else get_config_path()

    if not config_path.exists():
        logger.debug(f"No init file at {config_path}")
        return {}

    try:
        with open(config_path) as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to read init file: {e}", path=str(config_path)) from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigurationError("Init file must contain a mapping", path=str(config_path))
    return config


def save_example_config(path: Optional[Path] = None) -> bool:
    """
    Save example config file if it doesn't exist.

    Returns:
        True if file was created, False if it already exists
    """
    config_path = Path(path) if path is not None else get_config_path()

    if config_path.exists():
        return False

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(EXAMPLE_CONFIG)
    logger.info(f"Created example init file at {config_path}")
    return True


def resolve_callable(ref: str) -> Callable[..., Any]:
    """Import ``package.module:attr`` and return the attribute."""
    module_name, _, attr_path = ref.partition(":")
    if not module_name or not attr_path:
        raise DeclarationError(f"Expected 'module:attribute', got {ref!r}")

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise DeclarationError(f"Cannot import {module_name!r}: {e}") from e

    for part in attr_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError:
            raise DeclarationError(f"{ref!r} does not exist") from None

    if not callable(target):
        raise DeclarationError(f"{ref!r} is not callable")
    return target


def _is_import_path(value: Any) -> bool:
    return isinstance(value, str) and ":" in value and not any(c.isspace() for c in value)


def parse_action(value: Any) -> Callable[[], Any]:
    """Turn an init/config entry into a zero-argument callable."""
    if isinstance(value, dict):
        if "run" not in value:
            raise DeclarationError(f"Action mapping needs 'run', got keys {sorted(value)}")
        kwargs = {"command": value["run"]}
        if "timeout" in value:
            kwargs["timeout"] = float(value["timeout"])
        if "cwd" in value:
            kwargs["cwd"] = str(value["cwd"])
        try:
            return ShellAction(**kwargs)
        except ValueError as e:
            raise DeclarationError(str(e)) from e
    if _is_import_path(value):
        return resolve_callable(value)
    if callable(value):
        return value
    raise DeclarationError(f"Unsupported action {value!r}")


def parse_guard(spec: Any, which: Callable[[str], Optional[str]] = shutil.which):
    """
    Build a guard from a ``when`` entry.

    Conditions (all must hold):
        enabled: bool
        executable: name, or list of names where any one suffices
        env: variable name (or list) that must be set and non-empty
        platform: prefix of sys.platform, e.g. "linux" or "darwin"

    Conditions are checked when the component activates, not at load time.
    """
    if spec is None or isinstance(spec, bool):
        return spec
    if not isinstance(spec, dict):
        raise DeclarationError(f"'when' must be a bool or mapping, got {spec!r}")

    unknown = set(spec) - {"enabled", "executable", "env", "platform"}
    if unknown:
        raise DeclarationError(f"Unknown guard condition(s): {', '.join(sorted(unknown))}")

    enabled = bool(spec.get("enabled", True))
    executables = spec.get("executable")
    if isinstance(executables, str):
        executables = [executables]
    env_vars = spec.get("env")
    if isinstance(env_vars, str):
        env_vars = [env_vars]
    platform = spec.get("platform")

    def guard() -> bool:
        if not enabled:
            return False
        if executables and not any(which(name) for name in executables):
            return False
        if env_vars and not all(os.environ.get(var) for var in env_vars):
            return False
        if platform and not sys.platform.startswith(str(platform)):
            return False
        return True

    return guard


def _parse_hooks(value: Any) -> List[HookSpec]:
    if value is None:
        return []
    if isinstance(value, dict):
        # event -> handler or [handlers]
        items = []
        for event, handlers in value.items():
            if not isinstance(handlers, list):
                handlers = [handlers]
            items.extend({"event": event, "handler": h} for h in handlers)
        value = items
    if not isinstance(value, list):
        raise DeclarationError("'hooks' must be a list or mapping")

    hooks = []
    for item in value:
        if not isinstance(item, dict) or "event" not in item or "handler" not in item:
            raise DeclarationError(f"Hook entries need 'event' and 'handler', got {item!r}")
        handler = item["handler"]
        if not callable(handler):
            handler = resolve_callable(str(handler))
        hooks.append(HookSpec(str(item["event"]), handler))
    return hooks


def _binding_handler(value: Any) -> Any:
    # Import paths become callables; anything else is a host command name
    return resolve_callable(value) if _is_import_path(value) else value


def parse_bindings(value: Any, default_scope: str = GLOBAL_SCOPE) -> List[KeyBinding]:
    """Parse ``bind`` entries: a list of {key, handler, scope} or a chord -> handler mapping."""
    if value is None:
        return []
    if isinstance(value, dict):
        value = [{"key": chord, "handler": handler} for chord, handler in value.items()]
    if not isinstance(value, list):
        raise DeclarationError("Key bindings must be a list or mapping")

    bindings = []
    for item in value:
        if not isinstance(item, dict):
            raise DeclarationError(f"Key binding entries must be mappings, got {item!r}")
        try:
            chord = item["key"]
            handler = item.get("handler", item.get("command"))
        except KeyError as e:
            raise DeclarationError(f"Missing required field {e} in key binding") from None
        scope = item.get("scope", default_scope)
        bindings.append(KeyBinding(scope, str(chord), _binding_handler(handler)))
    return bindings


def parse_component(
    entry: Any, which: Callable[[str], Optional[str]] = shutil.which
) -> ComponentDeclaration:
    """Parse one ``components`` entry into a declaration."""
    if not isinstance(entry, dict):
        raise DeclarationError(f"Component entries must be mappings, got {entry!r}")
    if "name" not in entry:
        raise DeclarationError("Missing required field 'name' in component")

    name = str(entry["name"])
    try:
        if "load" in entry:
            timing = LoadTiming.parse(entry["load"])
        else:
            timing = LoadTiming.DEFERRED if entry.get("defer") else LoadTiming.IMMEDIATE

        settings = entry.get("settings") or {}
        if not isinstance(settings, dict):
            raise DeclarationError("'settings' must be a mapping")

        triggers = entry.get("triggers") or ()
        if isinstance(triggers, str):
            triggers = [triggers]

        bindings = parse_bindings(entry.get("bind"), entry.get("scope", GLOBAL_SCOPE))

        return ComponentDeclaration(
            name=name,
            guard=parse_guard(entry.get("when"), which=which),
            load_timing=timing,
            config_settings=settings,
            hooks=tuple(_parse_hooks(entry.get("hooks"))),
            key_bindings=tuple(bindings),
            init_actions=tuple(parse_action(a) for a in entry.get("init") or ()),
            post_config_actions=tuple(parse_action(a) for a in entry.get("config") or ()),
            triggers=tuple(str(t) for t in triggers),
        )
    except DeclarationError as e:
        if e.name is None:
            raise DeclarationError(e.message, name=name, **e.context) from e
        raise


def parse_components(
    entries: Any, which: Callable[[str], Optional[str]] = shutil.which
) -> Tuple[List[ComponentDeclaration], List[str]]:
    """
    Parse component entries, skipping the malformed ones.

    Returns:
        Tuple of (declarations, error messages)
    """
    declarations: List[ComponentDeclaration] = []
    errors: List[str] = []

    if entries is None:
        return declarations, errors
    if not isinstance(entries, list):
        raise ConfigurationError("'components' must be a list", setting="components")

    for index, entry in enumerate(entries):
        try:
            declarations.append(parse_component(entry, which=which))
        except (UsekitError, ValueError, TypeError) as e:
            message = f"Component #{index + 1}: {e}"
            logger.warning(f"{message}, skipping")
            errors.append(message)

    return declarations, errors


def load_init_file(
    path: Optional[Path] = None, which: Callable[[str], Optional[str]] = shutil.which
) -> InitFile:
    """
    Load and parse an init file.

    Raises:
        ConfigurationError: If the file as a whole is unusable
    """
    config_path = Path(path) if path is not None else get_config_path()
    config = read_config(config_path)

    unknown = set(config) - {"capabilities", "components", "bindings"}
    for key in sorted(unknown):
        logger.warning(f"Unknown top-level key '{key}' in {config_path}, ignoring")

    capabilities = config.get("capabilities") or []
    if not isinstance(capabilities, list):
        raise ConfigurationError("'capabilities' must be a list", setting="capabilities")
    requirements = CapabilityRequirement.from_manifest(capabilities)

    declarations, errors = parse_components(config.get("components"), which=which)

    bindings: List[KeyBinding] = []
    try:
        bindings = parse_bindings(config.get("bindings"))
    except (UsekitError, ValueError, TypeError) as e:
        logger.warning(f"User key bindings: {e}, skipping")
        errors.append(f"bindings: {e}")

    return InitFile(
        path=config_path,
        capabilities=requirements,
        declarations=declarations,
        bindings=bindings,
        errors=errors,
    )
