"""
Internal helpers shared by the binder modules.

Scope
- Unset: the "not provided" sentinel used for metadata and field values.
- nullify(): collapse Unset into a concrete default at API boundaries.
- ordinal(): position-first wording for fault messages ("second position").
- split_names() / lower_first(): flag-name derivation from field metadata.
"""
import functools
from typing import final


@final
class UnsetType:
    """
    internal singleton sentinel representing an "unset" value.

    intent
    - distinguishes "not provided" from a user-supplied value (including None,
      empty strings and other falsy values) in field metadata and in record
      fields declared through flag()/nonflag().

    behavior
    - truthiness: bool(Unset) is False.
    - identity: Unset is a process-wide singleton (see __new__).
    - display: repr(Unset) -> "Unset".
    - final: subclassing is forbidden to preserve semantics.

    typing helpers
    - union: participates in PEP 604 unions so `isinstance(x, str | Unset)`
      reads naturally in validation code.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return type(self), ()

    def __init_subclass__(cls):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def nullify(object, default=None, /):
    """
    return `default` when `object` is Unset; otherwise return `object` unchanged.
    """
    return default if object is Unset else object


def ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def split_names(source, /):
    """
    split a comma-separated alias list into clean flag names.

    each alias is trimmed and stripped of its leading dashes; empty aliases
    are dropped while the declared order is kept.
    """
    names = []
    for name in source.split(","):
        if name := name.strip().lstrip("-"):
            names.append(name)
    return names


def lower_first(name, /):
    """
    lower-case the first letter of an identifier, keeping the rest unchanged.
    """
    return name[:1].lower() + name[1:]


__all__ = (
    "UnsetType",
    "Unset",
    "nullify",
    "ordinal",
    "split_names",
    "lower_first",
)
