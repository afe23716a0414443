"""
Primitive flag scanner.

FlagSet is the low-level collaborator under the binder: it maps flag names to
cells and consumes a token sequence with the classic single-dash grammar.

Grammar
- "-name value", "-name=value", "--name value" and "--name=value" are equivalent.
- bool cells are set to true by bare presence ("-v"); "-v=false" is explicit.
- scanning stops at the first non-flag token ("", "-" or anything not
  starting with a dash); "--" is consumed and also stops scanning.
- a value-taking flag always consumes the next token, even when it starts
  with a dash.
- -h, -help, --h and --help request help unless a flag of that name exists.

Two passes
- scan(tokens) walks the tokens without writing anything and raises
  HelpRequested when a help flag is reachable; every other problem is left
  to parse(). This keeps the record untouched on help requests.
- parse(tokens) writes through the cells, raising the first fault it meets,
  and returns the leftover (non-flag) tokens.
"""
import difflib
import logging
from collections import namedtuple

from .faults import *
from .utils import ordinal

logger = logging.getLogger(__name__)

HELP = ("h", "help")

Flag = namedtuple("Flag", ("name", "cell", "usage"))


class FlagSet:
    """
    named flags bound to cells, plus the token walker.

    attributes
    - name: program name used in faults and hints.
    - usage: optional renderable attached to every raised fault (help output).
    """

    def __init__(self, name, /):
        self.name = name
        self.usage = None
        self._flags = {}

    def var(self, cell, name, usage=""):
        """
        register `cell` under `name` (without dashes).
        """
        if not isinstance(name, str) or not name or name.startswith("-") or "=" in name:
            raise ConfigurationError(f"flag name {name!r} is not a valid flag name")
        if name in self._flags:
            raise ConfigurationError(f"{self.name} flag redefined: -{name}")
        self._flags[name] = Flag(name, cell, usage)

    def lookup(self, name, /):
        return self._flags.get(name)

    def scan(self, tokens, /):
        """
        raise HelpRequested if a help flag would be reached; never writes.
        """
        self._walk(tokens, assign=False)

    def parse(self, tokens, /):
        """
        consume flags from `tokens`, writing into cells; return the leftovers.
        """
        return self._walk(tokens, assign=True)

    def _fault(self, exception, message, **options):
        return exception(message, prog=self.name, usage=self.usage, **options)

    def _walk(self, tokens, *, assign):
        tokens = list(tokens)
        index = 0

        while index < len(tokens):
            token = tokens[index]
            if len(token) < 2 or token[0] != "-":
                break
            if token == "--":
                index += 1
                break

            start = index
            index += 1
            name = token[2:] if token[1] == "-" else token[1:]

            if not name or name[0] in "-=":
                if assign:
                    raise self._fault(
                        MalformedTokenError,
                        "bad flag syntax %r at %s position" % (token, ordinal(start + 1)),
                        title="malformed token",
                        code=FaultCode.MALFORMED_TOKEN,
                        input=token,
                        index=start + 1,
                        hint="flags look like -name, -name=value or -name value",
                    )
                continue

            name, assigned, value = name.partition("=")

            if (flag := self.lookup(name)) is None:
                if name in HELP:
                    raise self._fault(
                        HelpRequested,
                        "help requested",
                        title="help",
                        code=FaultCode.HELP_REQUESTED,
                        input=token,
                        index=start + 1,
                    )
                if assign:
                    suggestions = difflib.get_close_matches(name, self._flags.keys(), 3)
                    if suggestions:
                        hint = "did you mean '-%s'? run '%s -h' to see the available flags" % (suggestions[0], self.name)
                    else:
                        hint = "run '%s -h' to see the available flags" % self.name
                    raise self._fault(
                        UnknownFlagError,
                        "unknown flag '-%s' at %s position" % (name, ordinal(start + 1)),
                        title="unknown flag",
                        code=FaultCode.UNKNOWN_FLAG,
                        input=token,
                        index=start + 1,
                        suggestions=suggestions,
                        hint=hint,
                    )
                continue

            if flag.cell.boolean:
                if not assigned:
                    value = "true"
            elif not assigned:
                if index < len(tokens):
                    value = tokens[index]
                    index += 1
                elif assign:
                    raise self._fault(
                        MissingValueError,
                        "flag '-%s' at %s position needs a value" % (name, ordinal(start + 1)),
                        title="missing value",
                        code=FaultCode.MISSING_VALUE,
                        input=token,
                        index=start + 1,
                        hint="add a value after the name (for example: -%s <%s>)" % (name, flag.cell.kind),
                    )
                else:
                    continue

            if not assign:
                continue

            try:
                flag.cell.__assign__(value)
            except ValueError as exception:
                raise self._fault(
                    InvalidValueError,
                    "invalid value %r for flag '-%s' at %s position" % (value, name, ordinal(start + 1)),
                    title="invalid value",
                    code=FaultCode.INVALID_VALUE,
                    input=token,
                    index=start + 1,
                    value=value,
                    hint="use a valid %s for '-%s' (%s)" % (flag.cell.kind, name, exception),
                ) from exception
            logger.debug("%s: flag -%s set from %r", self.name, name, value)

        return tokens[index:]


__all__ = (
    "FlagSet",
)
