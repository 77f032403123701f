# config.py -- Reading and writing repository configuration files
# Copyright (C) 2026 The wit developers
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# Wit is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Reading and writing repository configuration files.

The format is the git-style INI dialect::

    [core]
        repositoryformatversion = 0
    [remote "origin"]
        url = "https://example.com/repo"

Section and variable names are case-insensitive, subsection names are not.
Values are kept as bytes.

Todo:
 * preserve formatting and comments when updating configuration files
"""

__all__ = [
    "ConfigDict",
    "ConfigFile",
]

import os
from collections.abc import Iterator
from typing import IO, overload

from .file import WitFile, _WitFile
from .log_utils import getLogger

logger = getLogger(__name__)

Section = tuple[bytes, ...]
SectionLike = bytes | str | tuple[bytes | str, ...]
NameLike = bytes | str
ValueLike = bytes | str | bool | int


def _lower_section(section: Section) -> Section:
    # Only the section name is case-insensitive, subsections keep their case.
    return (section[0].lower(), *section[1:])


class ConfigDict:
    """Configuration values held in memory, keyed by section tuple."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        # section key -> (original section, {lowered name: (name, value)})
        self._values: dict[Section, tuple[Section, dict[bytes, tuple[bytes, bytes]]]] = {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({list(self.sections())!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigDict):
            return NotImplemented
        return [
            (s, list(self.items(s))) for s in self.sections()
        ] == [(s, list(other.items(s))) for s in other.sections()]

    def _check_section_and_name(
        self, section: SectionLike, name: NameLike
    ) -> tuple[Section, bytes]:
        if not isinstance(section, tuple):
            section = (section,)
        checked = tuple(
            part.encode(self.encoding) if isinstance(part, str) else part
            for part in section
        )
        if isinstance(name, str):
            name = name.encode(self.encoding)
        return checked, name

    def _section(self, section: Section) -> dict[bytes, tuple[bytes, bytes]]:
        return self._values[_lower_section(section)][1]

    def get(self, section: SectionLike, name: NameLike) -> bytes:
        """Retrieve the contents of a configuration setting.

        Args:
          section: Section name, or tuple of section and subsection names
          name: Variable name
        Returns:
          Contents of the setting
        Raises:
          KeyError: if the value is not set
        """
        checked, name = self._check_section_and_name(section, name)
        return self._section(checked)[name.lower()][1]

    @overload
    def get_boolean(self, section: SectionLike, name: NameLike, default: bool) -> bool: ...

    @overload
    def get_boolean(self, section: SectionLike, name: NameLike) -> bool | None: ...

    def get_boolean(
        self, section: SectionLike, name: NameLike, default: bool | None = None
    ) -> bool | None:
        """Retrieve a configuration setting as boolean.

        Raises:
          ValueError: if the value is not a recognised boolean
        """
        try:
            value = self.get(section, name)
        except KeyError:
            return default
        if value.lower() in (b"true", b"yes", b"on", b"1"):
            return True
        if value.lower() in (b"false", b"no", b"off", b"0", b""):
            return False
        raise ValueError(f"not a valid boolean string: {value!r}")

    def get_int(self, section: SectionLike, name: NameLike, default: int) -> int:
        """Retrieve a configuration setting as an integer.

        Raises:
          ValueError: if the value is not an integer
        """
        try:
            value = self.get(section, name)
        except KeyError:
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise ValueError(f"not a valid integer: {value!r}") from exc

    def set(self, section: SectionLike, name: NameLike, value: ValueLike) -> None:
        """Set a configuration value, replacing any existing one."""
        checked, name = self._check_section_and_name(section, name)
        if isinstance(value, bool):
            value = b"true" if value else b"false"
        elif isinstance(value, int):
            value = str(value).encode("ascii")
        elif isinstance(value, str):
            value = value.encode(self.encoding)
        key = _lower_section(checked)
        if key not in self._values:
            self._values[key] = (checked, {})
        self._values[key][1][name.lower()] = (name, value)

    def items(self, section: SectionLike) -> Iterator[tuple[bytes, bytes]]:
        """Iterate over the (name, value) pairs of a section."""
        checked, _ = self._check_section_and_name(section, b"")
        try:
            values = self._section(checked)
        except KeyError:
            return iter([])
        return iter(list(values.values()))

    def sections(self) -> Iterator[Section]:
        """Iterate over the sections, in the case they were first given."""
        return iter([original for original, _ in self._values.values()])

    def has_section(self, section: SectionLike) -> bool:
        checked, _ = self._check_section_and_name(section, b"")
        return _lower_section(checked) in self._values


_ESCAPE_TABLE = {
    ord(b"\\"): ord(b"\\"),
    ord(b'"'): ord(b'"'),
    ord(b"n"): ord(b"\n"),
    ord(b"t"): ord(b"\t"),
    ord(b"b"): ord(b"\b"),
}
_COMMENT_CHARS = (ord(b"#"), ord(b";"))
_WHITESPACE_CHARS = (ord(b"\t"), ord(b" "))


def _parse_string(value: bytes) -> bytes:
    """Unquote and unescape a raw value, dropping any trailing comment."""
    raw = bytearray(value.strip())
    ret = bytearray()
    pending_whitespace = bytearray()
    in_quotes = False
    i = 0
    while i < len(raw):
        c = raw[i]
        if c == ord(b"\\"):
            i += 1
            if i >= len(raw):
                raise ValueError("escape at end of value")
            try:
                ret += pending_whitespace
                ret.append(_ESCAPE_TABLE[raw[i]])
            except KeyError as exc:
                raise ValueError(f"escape character {chr(raw[i])!r} not allowed") from exc
            pending_whitespace = bytearray()
        elif c == ord(b'"'):
            in_quotes = not in_quotes
        elif c in _COMMENT_CHARS and not in_quotes:
            break
        elif c in _WHITESPACE_CHARS and not in_quotes:
            # Trailing whitespace is dropped, inner whitespace kept.
            pending_whitespace.append(c)
        else:
            ret += pending_whitespace
            pending_whitespace = bytearray()
            ret.append(c)
        i += 1
    if in_quotes:
        raise ValueError("missing end quote")
    return bytes(ret)


def _escape_value(value: bytes) -> bytes:
    value = value.replace(b"\\", b"\\\\")
    value = value.replace(b"\n", b"\\n")
    value = value.replace(b"\t", b"\\t")
    value = value.replace(b'"', b'\\"')
    return value


def _format_string(value: bytes) -> bytes:
    if (
        value.startswith((b" ", b"\t"))
        or value.endswith((b" ", b"\t"))
        or b"#" in value
        or b";" in value
    ):
        return b'"' + _escape_value(value) + b'"'
    return _escape_value(value)


def _check_variable_name(name: bytes) -> bool:
    return bool(name) and name[:1].isalpha() and all(
        chr(c).isalnum() or c == ord(b"-") for c in bytearray(name)
    )


def _check_section_name(name: bytes) -> bool:
    return bool(name) and all(
        chr(c).isalnum() or c in (ord(b"-"), ord(b".")) for c in bytearray(name)
    )


def _strip_comments(line: bytes) -> bytes:
    string_open = False
    for i, c in enumerate(bytearray(line)):
        if c == ord(b'"'):
            string_open = not string_open
        elif not string_open and c in _COMMENT_CHARS:
            return line[:i]
    return line


def _parse_section_header_line(line: bytes) -> tuple[Section, bytes]:
    """Parse a ``[section]`` or ``[section "sub"]`` header.

    Returns: Tuple of the section and whatever follows the closing bracket
    """
    line = _strip_comments(line).rstrip()
    last = line.find(b"]")
    if last == -1:
        raise ValueError("expected trailing ]")
    pts = line[1:last].split(b" ", 1)
    rest = line[last + 1 :]
    if len(pts) == 2:
        if not (pts[1][:1] == b'"' and pts[1][-1:] == b'"'):
            raise ValueError(f"Invalid subsection {pts[1]!r}")
        if not _check_section_name(pts[0]):
            raise ValueError(f"invalid section name {pts[0]!r}")
        return (pts[0], pts[1][1:-1]), rest
    if not _check_section_name(pts[0]):
        raise ValueError(f"invalid section name {pts[0]!r}")
    return tuple(pts[0].split(b".", 1)), rest


class ConfigFile(ConfigDict):
    """A configuration file, like .wit/config."""

    def __init__(self, encoding: str = "utf-8") -> None:
        super().__init__(encoding=encoding)
        self.path: str | None = None

    @classmethod
    def from_file(cls, f: IO[bytes]) -> "ConfigFile":
        """Read configuration from a file-like object.

        Raises:
          ValueError: if the file is not valid configuration syntax
        """
        ret = cls()
        section: Section | None = None
        for lineno, line in enumerate(f.readlines(), 1):
            if lineno == 1 and line.startswith(b"\xef\xbb\xbf"):
                line = line[3:]
            line = line.strip()
            if line[:1] == b"[":
                section, line = _parse_section_header_line(line)
                if not ret.has_section(section):
                    key = _lower_section(section)
                    ret._values[key] = (section, {})
            if _strip_comments(line).strip() == b"":
                continue
            if section is None:
                raise ValueError(f"setting {line!r} without section (line {lineno})")
            try:
                setting, value = line.split(b"=", 1)
            except ValueError:
                setting = line
                value = b"true"
            setting = setting.strip()
            if not _check_variable_name(setting):
                raise ValueError(f"invalid variable name {setting!r} (line {lineno})")
            ret.set(section, setting, _parse_string(value))
        return ret

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> "ConfigFile":
        """Read configuration from a file on disk."""
        with WitFile(path, "rb") as f:
            ret = cls.from_file(f)
        ret.path = os.fspath(path)
        logger.debug("read configuration from %s", ret.path)
        return ret

    def write_to_path(self, path: str | os.PathLike[str] | None = None) -> None:
        """Write configuration to a file on disk, replacing it atomically."""
        if path is None:
            if self.path is None:
                raise ValueError("No path specified and no default path available")
            path = self.path
        with WitFile(path, "wb") as f:
            self.write_to_file(f)

    def write_to_file(self, f: "IO[bytes] | _WitFile") -> None:
        """Write configuration to a file-like object."""
        for section in self.sections():
            if len(section) == 1:
                f.write(b"[" + section[0] + b"]\n")
            else:
                f.write(b"[" + section[0] + b' "' + section[1] + b'"]\n')
            for name, value in self.items(section):
                f.write(b"\t" + name + b" = " + _format_string(value) + b"\n")
