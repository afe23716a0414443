"""
Flag set building: wire reflected fields into a FlagSet.

Binding is created fresh for every parse call. It

- reflects the record once (configuration errors surface here),
- registers every alias of every flag field against the same cell,
- builds the Usage description (flags, positionals, commands),
- primes initial values (zero value, then environment, then default literal),
- distributes leftover tokens into positional fields.

Precedence while priming a flag field
- the environment variable, when named, set and valid for the field's kind;
- otherwise the `default` literal, when present;
- otherwise the field keeps its value (Unset becomes the kind's zero value).
An invalid environment value is reported with InvalidEnvironmentWarning and
the default literal is applied instead. An invalid default literal is a
ConfigurationError, detected while building the description.
"""
import json
import logging
import os

from .faults import *
from .fields import Kind, reflect
from .flagset import FlagSet
from .usage import Entry, Usage
from .utils import Unset, nullify
from .values import Cell, supports_value

logger = logging.getLogger(__name__)


def _shown(cell, value):
    # zero values are not worth a "(default: ...)" annotation
    if value is Unset or value is None:
        return None
    if isinstance(cell, Cell):
        if not value:
            return None
        if cell.kind == "string":
            return json.dumps(value, ensure_ascii=False)
        return cell.format(value)
    if supports_value(value):
        return value.__render__() or None
    return str(value) or None


class Binding:
    def __init__(self, prog, record=None, commands=()):
        self.prog = prog
        self.record = record
        self.flagset = FlagSet(prog)
        self.descriptors = []
        if record is not None:
            self.descriptors = [descriptor for descriptor in reflect(record) if descriptor.bound]
        self.singles = [descriptor for descriptor in self.descriptors if descriptor.kind is Kind.SINGLE]
        self.multi = next((descriptor for descriptor in self.descriptors if descriptor.kind is Kind.MULTI), None)

        flags = []
        for descriptor in self.descriptors:
            if descriptor.kind is not Kind.FLAG:
                continue
            for name in descriptor.names:
                self.flagset.var(descriptor.cell, name, descriptor.usage)
            flags.append(Entry(
                "/".join("-" + name for name in descriptor.names),
                descriptor.type,
                self._default(descriptor),
                nullify(descriptor.env),
                descriptor.usage,
            ))

        self.usage = Usage(
            prog,
            flags,
            [Entry(descriptor.label, descriptor.type, usage=descriptor.usage) for descriptor in self.singles],
            Entry(self.multi.label + "...", self.multi.type, usage=self.multi.usage) if self.multi else None,
            commands,
        )
        self.flagset.usage = self.usage

    @property
    def positionals(self):
        return len(self.singles) + (self.multi is not None)

    def _default(self, descriptor):
        cell = descriptor.cell
        if descriptor.default is Unset:
            return _shown(cell, getattr(self.record, descriptor.attribute, Unset))
        if not isinstance(cell, Cell):
            return descriptor.default or None
        try:
            return _shown(cell, cell.convert(descriptor.default))
        except ValueError as exception:
            raise ConfigurationError(
                f"field {descriptor.attribute!r} default {descriptor.default!r} is not a valid {cell.kind}"
            ) from exception

    def prime(self):
        """
        apply zero values, environment values and default literals.
        """
        for descriptor in self.descriptors:
            match descriptor.kind:
                case Kind.SINGLE:
                    if getattr(self.record, descriptor.attribute, Unset) is Unset:
                        setattr(self.record, descriptor.attribute, "")
                case Kind.MULTI:
                    if getattr(self.record, descriptor.attribute, Unset) is Unset:
                        setattr(self.record, descriptor.attribute, [])
                case Kind.FLAG:
                    if isinstance(descriptor.cell, Cell):
                        if descriptor.cell.get() is Unset:
                            setattr(self.record, descriptor.attribute, descriptor.cell.zero)
                    else:
                        descriptor.cell.get()
                    self._initialize(descriptor)

    def _initialize(self, descriptor):
        cell = descriptor.cell

        if descriptor.env is not Unset and (text := os.environ.get(descriptor.env)) is not None:
            try:
                cell.__assign__(text)
            except ValueError as exception:
                trigger(InvalidEnvironmentWarning(
                    "environment variable %s=%r is not a valid %s for flag '-%s'" % (
                        descriptor.env, text, cell.kind, descriptor.names[0]
                    ),
                    title="invalid environment value",
                    code=FaultCode.INVALID_ENVIRONMENT,
                    prog=self.prog,
                    input=descriptor.env,
                    hint="fix or unset %s (%s); the declared default is used meanwhile" % (descriptor.env, exception),
                ))
            else:
                logger.debug("%s: %s.%s set from environment %s", self.prog, type(self.record).__name__, descriptor.attribute, descriptor.env)
                return

        if descriptor.default is not Unset:
            try:
                cell.__assign__(descriptor.default)
            except ValueError as exception:
                raise ConfigurationError(
                    f"field {descriptor.attribute!r} default {descriptor.default!r} is not a valid {cell.kind}"
                ) from exception
            logger.debug("%s: %s.%s set from default %r", self.prog, type(self.record).__name__, descriptor.attribute, descriptor.default)

    def distribute(self, tokens, /):
        """
        bind leftover tokens to positional fields; return the unconsumed ones.

        token i goes to the i-th single positional; once singles run out the
        list positional (if any) takes the whole remaining tail.
        """
        tokens = list(tokens)
        for index, token in enumerate(tokens):
            if index < len(self.singles):
                setattr(self.record, self.singles[index].attribute, token)
            elif self.multi is not None:
                setattr(self.record, self.multi.attribute, tokens[index:])
                return []
            else:
                return tokens[index:]
        return []


__all__ = (
    "Binding",
)
