"""String helpers: trimming, ASCII case mapping, replacing, number picking,
wildcard matching, delimited-field splitting and simple tag extraction."""

from __future__ import annotations

import re
import string
from collections.abc import Iterator

__all__ = [
    "delete_lchr",
    "delete_rchr",
    "delete_lrchr",
    "to_upper",
    "to_lower",
    "replace_str",
    "pick_number",
    "match_str",
    "CmdStr",
    "get_xml",
    "get_xml_int",
    "get_xml_uint",
    "get_xml_float",
    "get_xml_bool",
]

_TO_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)
_TO_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)

_INT_PREFIX = re.compile(r"[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)")


def _check_char(cc: str) -> None:
    if len(cc) != 1:
        raise ValueError(f"expected a single character, got {cc!r}")


def delete_lchr(s: str, cc: str = " ") -> str:
    """Remove every leading occurrence of the character ``cc``."""
    _check_char(cc)
    return s.lstrip(cc)


def delete_rchr(s: str, cc: str = " ") -> str:
    """Remove every trailing occurrence of the character ``cc``."""
    _check_char(cc)
    return s.rstrip(cc)


def delete_lrchr(s: str, cc: str = " ") -> str:
    """Remove the character ``cc`` from both ends of ``s``."""
    _check_char(cc)
    return s.strip(cc)


def to_upper(s: str) -> str:
    """Upper-case ASCII letters only; every other character is kept."""
    return s.translate(_TO_UPPER)


def to_lower(s: str) -> str:
    """Lower-case ASCII letters only; every other character is kept."""
    return s.translate(_TO_LOWER)


def replace_str(s: str, old: str, new: str, loop: bool = False) -> str:
    """Replace ``old`` with ``new`` in ``s``.

    Without ``loop`` each occurrence is replaced once, scanning left to right.
    With ``loop`` the replacement is repeated until ``old`` no longer occurs,
    which is refused when ``new`` itself contains ``old``.
    """
    if not old:
        raise ValueError("the text to replace must not be empty")
    if loop and old in new:
        raise ValueError("looped replacement would never end: new text contains old text")
    if not s:
        return s
    if not loop:
        return s.replace(old, new)
    while old in s:
        s = s.replace(old, new, 1)
    return s


def pick_number(src: str, signed: bool = False, dot: bool = False) -> str:
    """Keep only the ASCII digits of ``src``, plus signs and dots if asked."""
    allowed = set(string.digits)
    if signed:
        allowed.update("+-")
    if dot:
        allowed.add(".")
    return "".join(ch for ch in src if ch in allowed)


def _match_rule(name: str, parts: list[str]) -> bool:
    last = len(parts) - 1
    pos = 0
    for index, part in enumerate(parts):
        if index == 0 and not name.startswith(part):
            return False
        if index == last and (len(part) > len(name) or not name.endswith(part)):
            return False
        found = name.find(part, pos)
        if found < 0:
            return False
        pos = found + len(part)
    return True


def match_str(s: str, rules: str) -> bool:
    """Tell whether ``s`` matches any of the comma-separated ``*`` patterns.

    Matching ignores the case of ASCII letters; empty patterns never match.
    """
    if not rules:
        return False
    if rules == "*":
        return True
    name = to_upper(s)
    for rule in to_upper(rules).split(","):
        if rule and _match_rule(name, rule.split("*")):
            return True
    return False


def _parse_int(text: str) -> int:
    match = _INT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"no integer in {text!r}")
    return int(match.group())


def _parse_float(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"no number in {text!r}")
    return float(match.group())


def _truncate(value: str, length: int) -> str:
    if 0 < length < len(value):
        return value[:length]
    return value


class CmdStr:
    """Fields of a string split on a separator string."""

    def __init__(self, buffer: str | None = None, sep: str = ",", strip: bool = False) -> None:
        self._fields: list[str] = []
        if buffer is not None:
            self.split(buffer, sep, strip)

    def split(self, buffer: str, sep: str = ",", strip: bool = False) -> None:
        """Replace the fields with those of ``buffer`` split on ``sep``.

        With ``strip`` the spaces around each field are removed.
        """
        if not sep:
            raise ValueError("separator must not be empty")
        fields = buffer.split(sep)
        if strip:
            fields = [delete_lrchr(field) for field in fields]
        self._fields = fields

    def __len__(self) -> int:
        return len(self._fields)

    def __getitem__(self, index: int) -> str:
        return self._fields[index]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __str__(self) -> str:
        return "".join(f"[{index}]={field}\n" for index, field in enumerate(self._fields))

    def _field(self, index: int) -> str:
        if not 0 <= index < len(self._fields):
            raise IndexError(f"field {index} out of range ({len(self._fields)} fields)")
        return self._fields[index]

    def get_str(self, index: int, length: int = 0) -> str:
        """Return field ``index``, cut to ``length`` characters when positive."""
        return _truncate(self._field(index), length)

    def get_int(self, index: int) -> int:
        """Return field ``index`` as a signed integer."""
        return _parse_int(pick_number(self._field(index), signed=True))

    def get_uint(self, index: int) -> int:
        """Return field ``index`` as an integer, ignoring any sign."""
        return _parse_int(pick_number(self._field(index)))

    def get_float(self, index: int) -> float:
        """Return field ``index`` as a float."""
        return _parse_float(pick_number(self._field(index), signed=True, dot=True))

    def get_bool(self, index: int) -> bool:
        """Return True when field ``index`` reads ``true`` in any case."""
        return to_upper(self._field(index)) == "TRUE"


def get_xml(xml: str, field: str, length: int = 0) -> str:
    """Return the text between ``<field>`` and ``</field>`` in ``xml``.

    ``length`` cuts the value when positive. A missing tag raises KeyError.
    """
    start_tag = f"<{field}>"
    end_tag = f"</{field}>"
    start = xml.find(start_tag)
    if start < 0:
        raise KeyError(field)
    end = xml.find(end_tag)
    if end < 0:
        raise KeyError(field)
    begin = start + len(start_tag)
    size = end - begin
    if size < 0:
        return xml[begin:]
    if 0 < length < size:
        size = length
    return xml[begin:begin + size]


def get_xml_int(xml: str, field: str) -> int:
    """Return the tag's value as a signed integer."""
    return _parse_int(pick_number(get_xml(xml, field), signed=True))


def get_xml_uint(xml: str, field: str) -> int:
    """Return the tag's value as an integer, ignoring any sign."""
    return _parse_int(pick_number(get_xml(xml, field)))


def get_xml_float(xml: str, field: str) -> float:
    """Return the tag's value as a float."""
    return _parse_float(pick_number(get_xml(xml, field), signed=True, dot=True))


def get_xml_bool(xml: str, field: str) -> bool:
    """Return True when the tag's value reads ``true`` in any case."""
    return to_upper(get_xml(xml, field)) == "TRUE"