"""XML-backed hierarchical configuration addressed by dotted keys.

Keys name elements below the document root, separated by dots. A segment
may carry a zero-based index among same-named siblings (``Device[1]``) and
the last segment may select an attribute (``Device[1][@port]``).
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from os import PathLike
from typing import Optional, Union

_MISSING = object()

_SEGMENT = re.compile(
    r"^(?P<name>[^\[\]@]*)(?:\[(?P<index>\d+)\])?(?:\[@(?P<attr>[^\]]+)\])?$"
)
_TRUE_WORDS = frozenset({"true", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "no", "off"})

PathType = Union[str, "PathLike[str]"]


class ConfigError(Exception):
    """Raised for missing keys, malformed values or unparsable XML."""


def _parse_int(text: str, key: str) -> int:
    value = text.strip()
    try:
        if value.lower().startswith(("0x", "-0x", "+0x")):
            return int(value, 16)
        return int(value)
    except ValueError as exc:
        raise ConfigError(f"{key}: not an integer: {text!r}") from exc


def _parse_float(text: str, key: str) -> float:
    try:
        return float(text.strip())
    except ValueError as exc:
        raise ConfigError(f"{key}: not a number: {text!r}") from exc


def _parse_bool(text: str, key: str) -> bool:
    value = text.strip().lower()
    if value in _TRUE_WORDS:
        return True
    if value in _FALSE_WORDS:
        return False
    try:
        return int(value) != 0
    except ValueError as exc:
        raise ConfigError(f"{key}: not a boolean: {text!r}") from exc


class XMLConfiguration:
    """A configuration tree read from and written to an XML document."""

    def __init__(self, path: Optional[PathType] = None, root_name: str = "config"):
        self._root = ET.Element(root_name)
        if path is not None:
            self.load(path)

    def load(self, path: PathType) -> None:
        """Replace the tree with the document at ``path``.

        A missing file raises ``FileNotFoundError``; malformed XML raises
        ``ConfigError``.
        """
        try:
            tree = ET.parse(path)
        except ET.ParseError as exc:
            raise ConfigError(f"error parsing {path}: {exc}") from exc
        self._root = tree.getroot()

    def save(self, path: PathType) -> None:
        """Write the tree to ``path`` as UTF-8 XML."""
        ET.ElementTree(self._root).write(path, encoding="utf-8", xml_declaration=True)

    # -- key resolution -------------------------------------------------

    @staticmethod
    def _segments(key: str) -> list[tuple[str, int, Optional[str]]]:
        if not key:
            return []
        parts = key.split(".")
        result = []
        for position, part in enumerate(parts):
            match = _SEGMENT.match(part)
            if match is None:
                raise ConfigError(f"invalid key: {key!r}")
            name = match.group("name")
            index_text = match.group("index")
            attr = match.group("attr")
            if not name and (index_text is not None or attr is None):
                raise ConfigError(f"invalid key: {key!r}")
            if attr is not None and position != len(parts) - 1:
                raise ConfigError(f"attribute must be last in key: {key!r}")
            result.append((name, int(index_text or 0), attr))
        return result

    def _lookup(self, key: str, create: bool = False):
        node = self._root
        attr = None
        for name, index, segment_attr in self._segments(key):
            if name:
                matches = [child for child in node if child.tag == name]
                if index < len(matches):
                    node = matches[index]
                elif create:
                    for _ in range(index - len(matches) + 1):
                        created = ET.SubElement(node, name)
                    node = created
                else:
                    return None, None
            attr = segment_attr
        return node, attr

    def _raw(self, key: str) -> Optional[str]:
        node, attr = self._lookup(key)
        if node is None:
            return None
        if attr is not None:
            return node.get(attr)
        return "".join(node.itertext())

    @staticmethod
    def _fallback(key: str, default):
        if default is _MISSING:
            raise ConfigError(f"key not found: {key}")
        return default

    # -- getters ----------------------------------------------------------

    def get_string(self, key: str, default=_MISSING):
        """Return the text at ``key``, or ``default`` when it is absent."""
        raw = self._raw(key)
        if raw is None:
            return self._fallback(key, default)
        return raw

    def get_int(self, key: str, default=_MISSING):
        """Return the integer at ``key``; ``0x`` prefixes are read as hex."""
        raw = self._raw(key)
        if raw is None:
            return self._fallback(key, default)
        return _parse_int(raw, key)

    def get_double(self, key: str, default=_MISSING):
        """Return the floating-point value at ``key``."""
        raw = self._raw(key)
        if raw is None:
            return self._fallback(key, default)
        return _parse_float(raw, key)

    def get_bool(self, key: str, default=_MISSING):
        """Return the boolean at ``key`` (true/yes/on, false/no/off, or a number)."""
        raw = self._raw(key)
        if raw is None:
            return self._fallback(key, default)
        return _parse_bool(raw, key)

    # -- setters ----------------------------------------------------------

    def set_string(self, key: str, value: str) -> None:
        """Store ``value`` at ``key``, creating elements as needed."""
        if not key:
            raise ConfigError("cannot set the root element")
        node, attr = self._lookup(key, create=True)
        if attr is not None:
            node.set(attr, value)
        else:
            node.text = value

    def set_int(self, key: str, value: int) -> None:
        self.set_string(key, str(int(value)))

    def set_bool(self, key: str, value: bool) -> None:
        self.set_string(key, "true" if value else "false")

    def keys(self, key: str = "") -> list[str]:
        """Return the element names directly below ``key``, in document order."""
        node, attr = self._lookup(key)
        if node is None or attr is not None:
            return []
        return [child.tag for child in node if isinstance(child.tag, str)]