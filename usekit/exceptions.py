"""Custom exception hierarchy for usekit.

Exception Hierarchy:
    UsekitError (base)
    ├── DeclarationError - malformed component declaration
    ├── ActivationFailure - one declaration failed during activation
    ├── ShellActionError - an external command run as an action failed
    └── ConfigurationError - settings/configuration file issues

Only ``DeclarationError`` and ``ConfigurationError`` ever reach callers.
``ActivationFailure`` is caught at the per-declaration boundary of the
activator and turned into an ``ActivationOutcome``.

Usage:
    from usekit.exceptions import ActivationFailure

    try:
        action()
    except Exception as e:
        raise ActivationFailure(decl.name, "init") from e
"""

from typing import Any, Optional


class UsekitError(Exception):
    """Base exception for all usekit errors.

    Attributes:
        message: Human-readable error description
        context: Additional context about the error (e.g., names, steps)
    """

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class DeclarationError(UsekitError):
    """A component declaration failed validation."""

    def __init__(
        self,
        message: str = "Invalid component declaration",
        *,
        name: Optional[str] = None,
        **context: Any,
    ) -> None:
        if name is not None:
            context["name"] = name
        self.name = name
        super().__init__(message, **context)


class ActivationFailure(UsekitError):
    """Raised while activating one declaration.

    ``step`` is the part of the activation sequence that failed: ``guard``,
    ``init``, ``settings``, ``hooks``, ``bindings`` or ``config``.
    """

    def __init__(self, name: str, step: str, message: str = "Activation failed") -> None:
        self.name = name
        self.step = step
        super().__init__(message, name=name, step=step)


class ShellActionError(UsekitError):
    """An external command run as an activation action failed."""

    def __init__(
        self,
        message: str = "Shell action failed",
        *,
        command: Optional[str] = None,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
        **context: Any,
    ) -> None:
        if command:
            context["command"] = command[:100] + "..." if len(command) > 100 else command
        if exit_code is not None:
            context["exit_code"] = exit_code
        if stderr:
            context["stderr"] = stderr[:200] + "..." if len(stderr) > 200 else stderr
        super().__init__(message, **context)


class ConfigurationError(UsekitError):
    """Configuration or settings error."""

    def __init__(
        self,
        message: str = "Configuration error",
        *,
        setting: Optional[str] = None,
        **context: Any,
    ) -> None:
        if setting:
            context["setting"] = setting
        super().__init__(message, **context)
