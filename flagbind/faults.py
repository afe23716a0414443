"""
Binder faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing
  issue. Codes are grouped by domain to keep copy consistent and make
  logs/searches predictable.
- CommandException / CommandWarning: base types that carry a message plus
  options and know how to render themselves (rich) in a friendly, lowercased,
  actionable way.
- HelpRequested: the distinguished "error" produced by -h/-help. It is not a
  ParseError so callers can exit with status zero.
- ConfigurationError: programmer mistakes in record declarations. Raised
  immediately at setup time, never rendered as a user fault.
- trigger(): central entry point to surface a fault (raise in library mode,
  print and exit in shell mode).

Integration
- the parser raises faults directly; parse() never terminates the process.
- must_parse()/must_run() re-trigger caught faults with shell=True, which
  prints them on stderr and exits (0 for help, 1 otherwise).
"""
import inspect
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the binder (stable identifiers).

    grouping (by high-level domain)
    - help (100xx)
      • HELP_REQUESTED
    - routing (111 0x)
      • UNKNOWN_COMMAND, MISSING_COMMAND
    - flags (111 1x)
      • MALFORMED_TOKEN, UNKNOWN_FLAG, MISSING_VALUE
    - positionals (111 2x)
      • UNEXPECTED_POSITIONAL, TOO_MANY_POSITIONALS
    - values (111 3x)
      • INVALID_VALUE
    - warnings (12xxx)
      • INVALID_ENVIRONMENT
    """
    # --- help (10xxx) ---
    HELP_REQUESTED        = 10001

    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND       = 11101
    MISSING_COMMAND       = 11103

    # --- flag errors (11xxx) ---
    MALFORMED_TOKEN       = 11111
    UNKNOWN_FLAG          = 11112
    MISSING_VALUE         = 11117

    # --- positional errors (11xxx) ---
    UNEXPECTED_POSITIONAL = 11121
    TOO_MANY_POSITIONALS  = 11126

    # --- value errors (11xxx) ---
    INVALID_VALUE         = 11131

    # --- warnings (12xxx) ---
    INVALID_ENVIRONMENT   = 12113

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _palette(defaults):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _render(fault, styles, title_style, message_style):
    prog = getattr(__import__("__main__"), "__prog__", fault.options.get("prog") or "")
    code = fault.options.get("code")

    header = Text.assemble(
        "[ ",
        Text(str(prog), styles["prog-name"]),
        " — ",
        Text(code.normalize() if code is not None else "", styles["code"]),
        " | ",
        Text(str(fault.options.get("title", type(fault).__name__)).title(), styles[title_style]),
        " ]",
    )
    renders = [header, Text(str(fault.message), styles[message_style])]
    if hint := fault.options.get("hint"):
        renders.append(Text.assemble(Text(" → ", styles["hint-arrow"]), Text(str(hint), styles["hint"])))
    return Group(*renders)


class CommandException(Exception):
    """
    base class of every fault surfaced while consuming a token sequence.

    fields
    - message: one lowercased sentence, position-first when a position is known.
    - options: read-only mapping with rendering/context data such as
      title, code, hint, prog, index, input and usage.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        styles = _palette({
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })
        return _render(self, styles, "error-title", "error-message")

    def __trigger__(self):
        if not self.options.get("shell"):
            raise self
        if (usage := self.options.get("usage")) is not None:
            _show_usage(usage, self.options.get("hook"))
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fault = type(self)(self.message, **{**self.options, **overrides})
        fault.__traceback__ = self.__traceback__
        return fault


class HelpRequested(CommandException):
    """
    raised when -h/-help (or the double-dash forms) is present in the tokens.

    the record is left untouched. in shell mode the usage is printed and the
    process exits with status zero.
    """

    def __rich__(self):
        if (usage := self.options.get("usage")) is not None:
            return usage
        return Text(str(self.message))

    def __trigger__(self):
        if not self.options.get("shell"):
            raise self
        if (usage := self.options.get("usage")) is not None:
            _show_usage(usage, self.options.get("hook"))
        else:
            console.print(Text(str(self.message)))
        sys.exit(0)


class ParseError(CommandException): ...
class MalformedTokenError(ParseError): ...
class UnknownFlagError(ParseError): ...
class MissingValueError(ParseError): ...
class InvalidValueError(ParseError): ...
class UnexpectedPositionalError(ParseError): ...
class TooManyPositionalsError(ParseError): ...
class UnknownCommandError(ParseError): ...
class MissingCommandError(ParseError): ...


class ConfigurationError(TypeError):
    """
    a record or command table is declared in a way the binder cannot honor.

    raised at setup time, before any token is consumed.
    """


class CommandWarning(ABC, Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        styles = _palette({
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        })
        return _render(self, styles, "warning-title", "warning-message")

    def __trigger__(self):
        if not self.options.get("shell"):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class InvalidEnvironmentWarning(CommandWarning): ...


def _show_usage(usage, hook):
    if hook:
        hook(usage.print)
    else:
        console.print(usage)


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise
      exceptions are raised and warnings are emitted through warnings.warn.

    typical options
    - shell, prog, title, code, hint, usage, hook, and any other context the
      reporter may want to show (input/index).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "CommandException",
    "HelpRequested",
    "ParseError",
    "MalformedTokenError",
    "UnknownFlagError",
    "MissingValueError",
    "InvalidValueError",
    "UnexpectedPositionalError",
    "TooManyPositionalsError",
    "UnknownCommandError",
    "MissingCommandError",
    "ConfigurationError",
    "CommandWarning",
    "InvalidEnvironmentWarning",
    "trigger",
)
