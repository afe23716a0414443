"""
Field reflection: from a dataclass instance to field descriptors.

Records are plain dataclasses. Each field may carry metadata under the keys

- name:    comma-separated flag aliases ("level,l"), "-" to skip the field, or
           the positional marker "#nonflag" / "#nonflag:LABEL".
- usage:   free text shown in help.
- env:     environment variable consulted before the default literal.
- default: textual default, parsed the same way a command-line value is.
- short:   derive a one-letter alias instead of the lower-camel name.

The helpers flag(), nonflag() and skip() build dataclasses.field objects with
that metadata; tags() builds the mapping for a hand-written field(metadata=...).

Quick example:
    >>> @dataclass
    ... class Options:
    ...     verbose: bool = flag(short=True, usage="print more")
    ...     port: int = flag(env="PORT", default="8080")
    ...     source: str = nonflag()
    ...     targets: list[str] = nonflag("TARGET")
    ...
    >>> [d.names or d.label for d in reflect(Options())]
    [('v',), ('port',), 'SOURCE', 'TARGET']

Classification (declaration order)
- skipped: names starting with "_", nested dataclass fields, name == "-".
- positional: str fields are single captures consumed in order; one
  list[str] field captures the tail.
- flag: every other field. bool/int/uint/float/str use a primitive cell;
  other annotations must implement the value capability (see values).

Declaration mistakes raise ConfigurationError right away.
"""
import dataclasses
import enum
import logging
import typing
from types import MappingProxyType

from .faults import ConfigurationError
from .utils import Unset, split_names, lower_first
from .values import Cell, ValueCell, kindof, supports_value, parse_bool

logger = logging.getLogger(__name__)

NONFLAG = "#nonflag"
SKIP = "-"


class Kind(enum.Enum):
    FLAG = "flag"
    SINGLE = "single"
    MULTI = "multi"
    SKIPPED = "skipped"


@dataclasses.dataclass(frozen=True)
class FieldDescriptor:
    """
    what the reflector learned about one record field.

    positional descriptors carry no cell: the binder writes them with setattr
    once flag scanning is over.
    """
    attribute: str
    kind: Kind
    names: tuple = ()
    type: str = ""
    env: object = Unset
    default: object = Unset
    usage: str = ""
    label: str = ""
    cell: object = None

    @property
    def bound(self):
        return self.kind is not Kind.SKIPPED


def tags(name=Unset, /, *, usage=Unset, env=Unset, default=Unset, short=Unset):
    """
    build a read-only metadata mapping for dataclasses.field(metadata=...).

    only the provided keys are stored. strings are required everywhere except
    `short`, which also accepts a bool.
    """
    for key, object in (("name", name), ("usage", usage), ("env", env), ("default", default)):
        if not isinstance(object, str | Unset):
            raise ConfigurationError(f"field {key!r} metadata must be a string")
    if not isinstance(short, bool | str | Unset):
        raise ConfigurationError("field 'short' metadata must be a bool or a boolean literal")

    return MappingProxyType({
        key: object
        for key, object in (("name", name), ("usage", usage), ("env", env), ("default", default), ("short", short))
        if object is not Unset
    })


def flag(name=Unset, /, *, usage=Unset, env=Unset, default=Unset, short=Unset, factory=Unset, **options):
    """
    declare a flag field.

    the field starts as Unset (replaced by its kind's zero value, the
    environment value or the default literal when the record is bound) unless
    a `factory` is given, which is used as the dataclass default_factory.
    remaining options are forwarded to dataclasses.field.
    """
    metadata = tags(name, usage=usage, env=env, default=default, short=short)
    if factory is not Unset:
        return dataclasses.field(default_factory=factory, metadata=metadata, **options)
    return dataclasses.field(default=Unset, metadata=metadata, **options)


def nonflag(label=Unset, /, *, usage=Unset, factory=Unset, **options):
    """
    declare a positional field; `label` replaces the upper-cased name in help.
    """
    if not isinstance(label, str | Unset):
        raise ConfigurationError("positional label must be a string")
    name = NONFLAG if not label else f"{NONFLAG}:{label}"
    metadata = tags(name, usage=usage)
    if factory is not Unset:
        return dataclasses.field(default_factory=factory, metadata=metadata, **options)
    return dataclasses.field(default=Unset, metadata=metadata, **options)


def skip(**options):
    """
    declare a field the binder must ignore (defaults to None).
    """
    if "default" not in options and "default_factory" not in options:
        options["default"] = None
    return dataclasses.field(metadata=tags(SKIP), **options)


def _is_string_list(annotation):
    return typing.get_origin(annotation) is list and typing.get_args(annotation) == (str,)


def _is_embedded(annotation):
    return isinstance(annotation, type) and dataclasses.is_dataclass(annotation) and not supports_value(annotation)


def _short(object, attribute):
    if object is Unset:
        return False
    if isinstance(object, bool):
        return object
    if object == "":
        return True
    try:
        return parse_bool(object)
    except (TypeError, ValueError):
        raise ConfigurationError(f"field {attribute!r} 'short' must be a boolean literal") from None


def _text(metadata, key, attribute):
    object = metadata.get(key, Unset)
    if not isinstance(object, str | Unset):
        raise ConfigurationError(f"field {attribute!r} {key!r} metadata must be a string")
    return object


def _reflect_positional(record, field, annotation, name):
    label = name[len(NONFLAG):]
    if label and not label.startswith(":"):
        raise ConfigurationError(f"field {field.name!r} positional marker must be {NONFLAG!r} or '{NONFLAG}:LABEL'")
    label = label[1:].strip() or field.name.upper()

    if annotation is str:
        kind = Kind.SINGLE
    elif _is_string_list(annotation):
        kind = Kind.MULTI
    else:
        raise ConfigurationError(f"only str/list[str] allowed for positional field {field.name!r}")

    return FieldDescriptor(
        field.name,
        kind,
        type="string",
        usage=_text(field.metadata, "usage", field.name) or "",
        label=label,
    )


def _reflect_flag(record, field, annotation, name):
    if name:
        if not (names := split_names(name)):
            raise ConfigurationError(f"field {field.name!r} 'name' metadata has no usable alias")
    elif _short(field.metadata.get("short", Unset), field.name):
        names = [field.name[0].lower()]
    else:
        names = [lower_first(field.name)]

    if kind := kindof(annotation):
        cell = Cell(record, field.name, kind)
    elif supports_value(current := getattr(record, field.name, Unset)) or supports_value(annotation):
        cell = ValueCell(record, field.name, annotation if isinstance(annotation, type) else type(current))
        kind = cell.kind
    else:
        raise ConfigurationError(
            f"field {field.name!r} of type {annotation!r} cannot be bound to a flag; "
            f"implement __assign__/__render__ or mark it with name={SKIP!r}"
        )

    return FieldDescriptor(
        field.name,
        Kind.FLAG,
        names=tuple(dict.fromkeys(names)),
        type=kind,
        env=_text(field.metadata, "env", field.name) or Unset,
        default=_text(field.metadata, "default", field.name),
        usage=_text(field.metadata, "usage", field.name) or "",
        cell=cell,
    )


def reflect(record, /):
    """
    classify every field of a dataclass instance, in declaration order.

    returns a list of FieldDescriptor (skipped fields included). nothing is
    written to the record.

    raises ConfigurationError for non-dataclass or frozen records, positional
    fields of the wrong type, a second list[str] positional field, and flag
    fields that cannot be bound.
    """
    if not dataclasses.is_dataclass(record) or isinstance(record, type):
        raise ConfigurationError(f"expected a dataclass instance, got {type(record).__name__!r}")
    if type(record).__dataclass_params__.frozen:
        raise ConfigurationError(f"record {type(record).__name__!r} is frozen and cannot be bound")

    try:
        hints = typing.get_type_hints(type(record))
    except NameError as exception:
        raise ConfigurationError(f"record {type(record).__name__!r} has unresolvable annotations") from exception

    descriptors = []
    multi = None

    for field in dataclasses.fields(record):
        annotation = hints.get(field.name, field.type)
        name = _text(field.metadata, "name", field.name)

        if field.name.startswith("_") or name == SKIP or _is_embedded(annotation):
            logger.debug("%s.%s skipped", type(record).__name__, field.name)
            descriptors.append(FieldDescriptor(field.name, Kind.SKIPPED))
            continue

        if name and name.startswith(NONFLAG):
            descriptor = _reflect_positional(record, field, annotation, name)
            if descriptor.kind is Kind.MULTI:
                if multi is not None:
                    raise ConfigurationError(
                        f"duplicated {NONFLAG!r} field of type list[str]: {field.name!r} (already {multi!r})"
                    )
                multi = field.name
        else:
            descriptor = _reflect_flag(record, field, annotation, name)

        descriptors.append(descriptor)

    return descriptors


__all__ = (
    "NONFLAG",
    "SKIP",
    "Kind",
    "FieldDescriptor",
    "tags",
    "flag",
    "nonflag",
    "skip",
    "reflect",
)
