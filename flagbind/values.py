"""
Typed cells: the storage side of a bound flag.

A cell is a location-reference into a caller-owned record: it pairs the
record with one of its attribute names and knows how to write text into it
and how to render the current value back to text.

- Cell wraps the primitive kinds (bool, int, uint, float, string) and does
  the text conversion itself.
- ValueCell delegates to a field value that implements the value capability:

    __assign__(self, text)  -> None   # parse text, update self, raise ValueError
    __render__(self)        -> str    # current value as text

  a value may also set `__boolean__ = True` to be settable by bare presence
  (like a bool flag).

Conversions follow the usual command-line conventions:
- bool accepts 1, t, T, TRUE, true, True, 0, f, F, FALSE, false, False.
- int/uint accept base prefixes (0x, 0o, 0b), legacy leading-zero octal and
  digit-group underscores; uint rejects signs.
- float accepts decimal, exponent, hex-float, inf and nan spellings.
"""
import re
from typing import NewType

uint = NewType("uint", int)

_TRUE = frozenset(("1", "t", "T", "TRUE", "true", "True"))
_FALSE = frozenset(("0", "f", "F", "FALSE", "false", "False"))


def parse_bool(text, /):
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"invalid boolean syntax {text!r}")


def parse_int(text, /):
    # legacy octal: 0755 (python itself rejects leading zeros)
    if re.fullmatch(r"[+-]?0(_?[0-7])+", text):
        return int(text.replace("_", ""), 8)
    try:
        return int(text, 0)
    except ValueError:
        raise ValueError(f"invalid integer syntax {text!r}") from None


def parse_uint(text, /):
    if text[:1] in ("+", "-"):
        raise ValueError(f"invalid unsigned integer syntax {text!r}")
    return parse_int(text)


def parse_float(text, /):
    try:
        return float(text)
    except ValueError:
        pass
    if re.fullmatch(r"[+-]?0[xX][0-9a-fA-F_.]+([pP][+-]?\d+)?", text):
        try:
            return float.fromhex(text.replace("_", ""))
        except ValueError:
            pass
    raise ValueError(f"invalid floating-point syntax {text!r}")


def parse_string(text, /):
    return text


def format_bool(value, /):
    return "true" if value else "false"


# kind label -> (annotation, zero value, parser, formatter)
KINDS = {
    "bool": (bool, False, parse_bool, format_bool),
    "int": (int, 0, parse_int, str),
    "uint": (uint, 0, parse_uint, str),
    "float": (float, 0.0, parse_float, repr),
    "string": (str, "", parse_string, str),
}

_ANNOTATIONS = {annotation: kind for kind, (annotation, *_) in KINDS.items()}


def kindof(annotation, /):
    """
    return the primitive kind label for an annotation, or None.

    lookup is by identity so that bool is not mistaken for int and the uint
    marker is not mistaken for int.
    """
    try:
        return _ANNOTATIONS.get(annotation)
    except TypeError:  # unhashable annotation objects
        return None


def supports_value(object, /):
    """
    tell whether an object (or a class) implements the value capability.
    """
    return callable(getattr(object, "__assign__", None)) and callable(getattr(object, "__render__", None))


class Cell:
    """
    primitive-kind cell bound to `record.attribute`.
    """
    __slots__ = ("record", "attribute", "kind")

    def __init__(self, record, attribute, kind):
        if kind not in KINDS:
            raise ValueError(f"unknown cell kind {kind!r}")
        self.record = record
        self.attribute = attribute
        self.kind = kind

    @property
    def boolean(self):
        return self.kind == "bool"

    @property
    def zero(self):
        return KINDS[self.kind][1]

    def get(self):
        return getattr(self.record, self.attribute)

    def convert(self, text, /):
        """parse text into a value of this cell's kind without storing it."""
        return KINDS[self.kind][2](text)

    def format(self, value, /):
        return KINDS[self.kind][3](value)

    def __assign__(self, text, /):
        setattr(self.record, self.attribute, self.convert(text))

    def __render__(self):
        return self.format(self.get())

    def __repr__(self):
        return f"cell({type(self.record).__name__}.{self.attribute}, kind={self.kind!r})"


class ValueCell:
    """
    cell for a field whose value implements the value capability.

    when the field holds no value yet (Unset or None) the annotated class is
    instantiated with no arguments the first time the cell is primed.
    """
    __slots__ = ("record", "attribute", "factory")

    def __init__(self, record, attribute, factory):
        self.record = record
        self.attribute = attribute
        self.factory = factory

    @property
    def kind(self):
        # reading the label never materializes the value
        if (name := getattr(self.factory, "__name__", None)) is None:
            name = type(getattr(self.record, self.attribute, None)).__name__
        return name.lower()

    @property
    def boolean(self):
        return bool(getattr(self.value if self.ready else self.factory, "__boolean__", False))

    @property
    def ready(self):
        return supports_value(getattr(self.record, self.attribute, None))

    @property
    def value(self):
        if not self.ready:
            setattr(self.record, self.attribute, self.factory())
        return getattr(self.record, self.attribute)

    def get(self):
        return self.value

    def __assign__(self, text, /):
        self.value.__assign__(text)

    def __render__(self):
        return self.value.__render__()

    def __repr__(self):
        return f"cell({type(self.record).__name__}.{self.attribute}, kind={self.kind!r})"


__all__ = (
    "uint",
    "Cell",
    "ValueCell",
    "kindof",
    "supports_value",
    "parse_bool",
    "parse_int",
    "parse_uint",
    "parse_float",
)
