"""
Command layer: parse a token sequence into a record and resolve subcommands.

What this module provides
- Command: a named subcommand with a plain handler run(args) or a
  with-global-flags handler run_global(record, args).
- parse(): one parse pass (flags, positionals, subcommand resolution).
- Parsed: the outcome of parse(): the populated record plus the resolved
  command and its remaining tokens.
- dispatch() / run(): invoke the resolved command's handler.
- must_parse() / must_run(): the process-level convenience wrappers. Help
  goes to stderr with exit status 0; any other fault is printed with exit
  status 1.
- unique_prefix(): a resolution strategy accepting unambiguous prefixes.

Quick start
    import sys
    from dataclasses import dataclass
    from flagbind import Command, flag, must_run

    @dataclass
    class Globals:
        verbose: bool = flag(short=True, usage="print more")

    def create(args):
        ...

    if __name__ == "__main__":
        must_run(sys.argv, Globals(), [Command("create", "create a thing", run=create)])

Parse states
- start: build the binding (configuration errors are raised here).
- flags parsed: help pre-scan, priming, flag scanning.
- terminal: positionals bound, command resolved, or a fault raised.

Faults are raised, never printed, by parse(); the record keeps every value
bound before the failing token.
"""
import difflib
import logging
import shlex
import sys
from collections.abc import Iterable

from .binding import Binding
from .faults import *
from .utils import Unset, ordinal

logger = logging.getLogger(__name__)


class Command:
    """
    one entry of a command table.

    handlers
    - run(args): plain handler, receives the tokens after the command name.
    - run_global(record, args): receives the populated global record too.
      used only when the parse call had a record and no plain handler exists.
    """
    __slots__ = ("name", "usage", "run", "run_global")

    def __init__(self, name, usage="", /, *, run=Unset, run_global=Unset):
        if not isinstance(name, str) or not name.strip():
            raise ConfigurationError("command name must be a non-empty string")
        if any(character.isspace() for character in name):
            raise ConfigurationError(f"command name {name!r} cannot contain whitespace")
        if not isinstance(usage, str):
            raise ConfigurationError(f"command {name!r} usage must be a string")
        if run is not Unset and not callable(run):
            raise ConfigurationError(f"command {name!r} 'run' must be callable")
        if run_global is not Unset and not callable(run_global):
            raise ConfigurationError(f"command {name!r} 'run_global' must be callable")
        if run is Unset and run_global is Unset:
            raise ConfigurationError(f"command {name!r} must have a handler")
        self.name = name
        self.usage = usage
        self.run = run
        self.run_global = run_global

    def __repr__(self):
        return f"command(name={self.name!r}, usage={self.usage!r})"


class Parsed:
    """
    result of a successful parse call.

    attributes
    - prog: program name used for this pass.
    - record: the populated record (or None).
    - command: the resolved Command, or None when no table was given.
    - args: tokens after the command name (empty without a command).
    """
    __slots__ = ("prog", "record", "command", "args")

    def __init__(self, prog, record=None, command=None, args=()):
        self.prog = prog
        self.record = record
        self.command = command
        self.args = list(args)

    @property
    def route(self):
        """program name extended with the resolved command name."""
        return self.prog if self.command is None else f"{self.prog} {self.command.name}"

    def dispatch(self):
        return dispatch(self)

    def __repr__(self):
        return f"parsed(prog={self.prog!r}, record={self.record!r}, command={self.command!r}, args={self.args!r})"


def _tokens(args, prog):
    if args is Unset:
        args = sys.argv if prog is Unset else sys.argv[1:]
    if isinstance(args, str):
        args = shlex.split(args)
    elif isinstance(args, Iterable):
        args = list(args)
        for token in args:
            if not isinstance(token, str):
                raise TypeError("parse() argument must be a string or an iterable of strings")
    else:
        raise TypeError("parse() argument must be a string or an iterable of strings")

    if prog is not Unset:
        return prog, args
    if not args:
        raise TypeError("parse() argument must start with the program name")
    return args[0], args[1:]


def _lookup(name, commands):
    # first match wins
    return next((command for command in commands if command.name == name), None)


def unique_prefix(tokens, commands):
    """
    resolution strategy: accept an unambiguous prefix of a command name.

    returns (tokens, command); tokens are rewritten so that the first token
    is the full command name.
    """
    if not tokens:
        return tokens, None
    matches = list(dict.fromkeys(command.name for command in commands if command.name.startswith(tokens[0])))
    if len(matches) != 1:
        return tokens, None
    return [matches[0], *tokens[1:]], _lookup(matches[0], commands)


def _resolve(binding, tokens, commands, resolve, offset):
    # a blank token carries no command name
    skipped = 0
    while skipped < len(tokens) and not tokens[skipped].strip():
        skipped += 1
    tokens = tokens[skipped:]

    if not tokens:
        raise MissingCommandError(
            "no command to run",
            title="missing command",
            code=FaultCode.MISSING_COMMAND,
            prog=binding.prog,
            usage=binding.usage,
            hint="add one of: %s" % " · ".join(command.name for command in commands),
        )

    command = _lookup(tokens[0], commands)
    if command is None and resolve is not Unset:
        rewritten, command = resolve(list(tokens), commands)
        if command is None and rewritten:
            command = _lookup(rewritten[0], commands)
        if command is not None:
            logger.debug("%s: %r resolved to command %r", binding.prog, tokens[0], command.name)
            tokens = rewritten

    if command is None:
        names = [command.name for command in commands]
        suggestions = difflib.get_close_matches(tokens[0], names, 5)
        try:
            hint = "did you mean %r? run '%s -h' to see available commands" % (suggestions[0], binding.prog)
        except IndexError:
            hint = "run '%s -h' to see available commands" % binding.prog
        raise UnknownCommandError(
            "unknown command %r at %s position" % (tokens[0], ordinal(offset + skipped)),
            title="unknown command",
            code=FaultCode.UNKNOWN_COMMAND,
            prog=binding.prog,
            usage=binding.usage,
            input=tokens[0],
            index=offset + skipped,
            suggestions=suggestions,
            hint=hint,
        )

    return command, tokens[1:]


def parse(args=Unset, record=None, commands=(), /, *, prog=Unset, resolve=Unset):
    """
    Parse one invocation into `record` and resolve a subcommand.

    Parameters
    - args: Unset (sys.argv), a shell-like string, or an iterable of strings.
      args[0] is the program name unless `prog` is given, in which case every
      element is a token (the form handlers use for their remaining args).
    - record: a dataclass instance to populate, or None.
    - commands: iterable of Command; first match by name wins.
    - resolve: strategy (tokens, commands) -> (tokens, command | None) tried
      once when the exact lookup fails.

    Returns
    - Parsed with the record, the resolved command (or None) and its args.

    Raises
    - ConfigurationError before any token is consumed.
    - HelpRequested when a help flag is reachable (the record is untouched).
    - ParseError subclasses for user-input mistakes.
    """
    prog, tokens = _tokens(args, prog)
    commands = tuple(commands)
    for command in commands:
        if not isinstance(command, Command):
            raise ConfigurationError(f"command table entries must be commands, got {type(command).__name__!r}")

    binding = Binding(prog, record, commands)

    binding.flagset.scan(tokens)
    binding.prime()
    leftovers = binding.flagset.parse(tokens)

    offset = len(tokens) - len(leftovers) + 1
    rest = binding.distribute(leftovers)
    offset += len(leftovers) - len(rest)

    if not commands:
        if not rest:
            return Parsed(prog, record)
        if not binding.positionals:
            raise UnexpectedPositionalError(
                "non-flag arguments are not permitted, got %r at %s position" % (rest[0], ordinal(offset)),
                title="unexpected positional",
                code=FaultCode.UNEXPECTED_POSITIONAL,
                prog=prog,
                usage=binding.usage,
                input=rest[0],
                index=offset,
                leftover=rest,
                hint="remove the extra values or run '%s -h' to see the expected usage" % prog,
            )
        raise TooManyPositionalsError(
            "expected only %d positional argument%s, got %r at %s position" % (
                binding.positionals, "s" * (binding.positionals != 1), rest[0], ordinal(offset)
            ),
            title="too many positionals",
            code=FaultCode.TOO_MANY_POSITIONALS,
            prog=prog,
            usage=binding.usage,
            input=rest[0],
            index=offset,
            leftover=rest,
            hint="remove the extra values or run '%s -h' to see the expected usage" % prog,
        )

    command, remaining = _resolve(binding, rest, commands, resolve, offset)
    logger.debug("%s: dispatching to %r with %r", prog, command.name, remaining)
    return Parsed(prog, record, command, remaining)


def dispatch(parsed, /):
    """
    invoke the resolved command's handler and return its result.

    policy
    - no command resolved: nothing to do, returns None.
    - no global record: only the plain handler applies.
    - global record: the plain handler if present, else run_global(record, args).
    - no applicable handler: ConfigurationError.
    """
    command = parsed.command
    if command is None:
        return None
    if command.run is not Unset:
        return command.run(parsed.args)
    if parsed.record is None:
        raise ConfigurationError(f"command {command.name!r} needs a global record but none was parsed")
    if command.run_global is not Unset:
        return command.run_global(parsed.record, parsed.args)
    raise ConfigurationError(f"command {command.name!r} has no handler")


def run(args=Unset, record=None, commands=(), /, **options):
    """
    parse then dispatch; returns the handler's result (None without commands).
    """
    return dispatch(parse(args, record, commands, **options))


def must_parse(args=Unset, record=None, commands=(), /, *, usage=Unset, **options):
    """
    parse like parse(), but settle faults at the process level.

    help requests print the help on stderr and exit with status 0; parse
    faults print the help and the fault on stderr and exit with status 1.
    `usage`, when given, replaces the default help printing: it is called
    with a print_defaults(file=stderr) function.
    """
    try:
        return parse(args, record, commands, **options)
    except CommandException as exception:
        trigger(exception, shell=True, hook=usage or None)


def must_run(args=Unset, record=None, commands=(), /, **options):
    """
    must_parse() then dispatch().
    """
    return dispatch(must_parse(args, record, commands, **options))


__all__ = (
    "Command",
    "Parsed",
    "parse",
    "dispatch",
    "run",
    "must_parse",
    "must_run",
    "unique_prefix",
)
