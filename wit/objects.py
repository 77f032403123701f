# objects.py -- Access to base wit objects
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

"""Access to base wit objects.

There are exactly four kinds of object: blobs, trees, commits and tags. Each
is identified by the SHA-1 of its frame, ``<type> <length>\\0<payload>``.
"""

__all__ = [
    "OBJECT_CLASSES",
    "Blob",
    "Commit",
    "Tag",
    "Tree",
    "TreeLeaf",
    "WitObject",
    "build_object",
    "filename_to_hex",
    "frame_sha",
    "hex_to_filename",
    "hex_to_sha",
    "object_class",
    "object_header",
    "parse_kvlm",
    "parse_tree",
    "serialize_kvlm",
    "serialize_tree",
    "sha_to_hex",
    "valid_hexsha",
]

import binascii
import hashlib
import os
import stat
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, NamedTuple

from . import scan
from .errors import EncodingError, MalformedObject, MissingData, UnknownObjectType

if TYPE_CHECKING:
    from .repository import Repository

HEXSHA_LENGTH = 40
BINSHA_LENGTH = 20

# Header fields for commits
_TREE_HEADER = b"tree"
_PARENT_HEADER = b"parent"

# Header fields for tags
_OBJECT_HEADER = b"object"
_TYPE_HEADER = b"type"
_TAG_HEADER = b"tag"


def sha_to_hex(sha: bytes) -> str:
    """Convert a binary digest to its hex form."""
    hexsha = binascii.hexlify(sha).decode("ascii")
    if len(hexsha) != HEXSHA_LENGTH:
        raise ValueError(f"Incorrect length of sha1 string: {hexsha}")
    return hexsha


def hex_to_sha(hex: str) -> bytes:
    """Convert a hex digest to its binary form."""
    if len(hex) != HEXSHA_LENGTH:
        raise ValueError(f"Incorrect length of hexsha: {hex}")
    try:
        return binascii.unhexlify(hex)
    except binascii.Error as exc:
        raise ValueError(exc.args[0]) from exc


def valid_hexsha(hex: str | bytes) -> bool:
    """Check whether hex is a full-length lowercase or uppercase hex digest."""
    if len(hex) != HEXSHA_LENGTH:
        return False
    try:
        binascii.unhexlify(hex)
    except (TypeError, binascii.Error):
        return False
    return True


def hex_to_filename(path: str, hex: str) -> str:
    """Takes a hex sha and returns its filename relative to the given path."""
    return os.path.join(path, hex[:2], hex[2:])


def filename_to_hex(filename: str) -> str:
    """Takes an object filename and returns its corresponding hex sha."""
    names = filename.rsplit(os.path.sep, 2)[-2:]
    hex = names[0] + names[1]
    if not valid_hexsha(hex):
        raise ValueError(f"Invalid object filename: {filename}")
    return hex


def object_header(type_name: bytes, length: int) -> bytes:
    """Return the frame header for an object of the given type and size."""
    return type_name + b" " + str(length).encode("ascii") + b"\0"


def frame_sha(frame: bytes) -> str:
    """Return the hex digest of a framed object."""
    return hashlib.sha1(frame).hexdigest()


def _decode_sha(value: bytes, field: bytes) -> str:
    try:
        sha = value.decode("ascii")
    except UnicodeDecodeError as exc:
        raise EncodingError(f"{field.decode()} is not ASCII: {value!r}") from exc
    if not valid_hexsha(sha):
        raise MalformedObject(f"{field.decode()} is not a valid digest: {sha}")
    return sha.lower()


class WitObject:
    """Base class for the four object kinds.

    Subclasses set type_name and implement _serialize and _deserialize. The
    repository an object belongs to is optional; it is only needed to store
    the object or to look up the objects it refers to.

    An object parsed from a payload keeps that payload and serializes back
    to it byte for byte until it is modified, so its id stays the digest it
    was stored under.
    """

    type_name: bytes

    def __init__(self, repo: "Repository | None" = None) -> None:
        self.repo = repo
        self._raw: bytes | None = None
        self._needs_serialization = True

    def _serialize(self) -> bytes:
        raise NotImplementedError(self._serialize)

    def _deserialize(self, data: bytes) -> None:
        raise NotImplementedError(self._deserialize)

    def serialize(self) -> bytes:
        """Return the payload of this object, without frame header."""
        if self._needs_serialization or self._raw is None:
            self._raw = self._serialize()
            self._needs_serialization = False
        return self._raw

    def deserialize(self, data: bytes) -> None:
        """Replace the contents of this object with a parsed payload."""
        self._deserialize(data)
        self._raw = bytes(data)
        self._needs_serialization = False

    def as_framed_string(self) -> bytes:
        """Return the header and payload, as hashed and stored."""
        data = self.serialize()
        return object_header(self.type_name, len(data)) + data

    @property
    def id(self) -> str:
        """The hex digest that identifies this object."""
        return frame_sha(self.as_framed_string())

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.id}>"

    def __eq__(self, other: object) -> bool:
        """Return true if the digests of the two objects match."""
        return isinstance(other, WitObject) and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


class Blob(WitObject):
    """An opaque chunk of data, typically the contents of a file."""

    type_name = b"blob"

    def __init__(self, repo: "Repository | None" = None) -> None:
        super().__init__(repo)
        self._data = b""

    @classmethod
    def from_string(cls, data: bytes, repo: "Repository | None" = None) -> "Blob":
        """Create a blob holding data."""
        blob = cls(repo)
        blob.deserialize(data)
        return blob

    def _get_data(self) -> bytes:
        return self._data

    def _set_data(self, data: bytes) -> None:
        self._data = bytes(data)
        self._needs_serialization = True

    data = property(_get_data, _set_data, doc="The contents of the blob.")

    def _serialize(self) -> bytes:
        return self._data

    def _deserialize(self, data: bytes) -> None:
        self._data = bytes(data)


def parse_kvlm(raw: bytes) -> tuple[dict[bytes, list[bytes]], bytes]:
    """Parse a key-value list with message.

    Header lines are ``key value``; lines starting with a space continue the
    previous value. A blank line separates the headers from the message.

    Args:
      raw: Serialized commit or tag payload
    Returns: Tuple of (headers, message); headers maps each key to its values
        in the order they appear.
    """
    headers: dict[bytes, list[bytes]] = {}
    start = 0
    while True:
        spc = scan.find_signed(raw, b" ", start)
        nl = scan.find_signed(raw, b"\n", start)

        # A newline before any space (or no space at all) means a blank line,
        # the remainder is the message.
        if spc < 0 or nl < spc:
            if nl != start:
                raise MalformedObject(
                    f"Expected blank line before message at offset {start}"
                )
            return headers, raw[start + 1 :]

        key = raw[start:spc]
        end = spc
        while True:
            found = scan.find_some(raw, b"\n", end + 1)
            if found is None:
                raise MalformedObject(f"Unterminated header {key!r}")
            end = found
            if raw[end + 1 : end + 2] != b" ":
                break
        value = scan.replace(raw[spc + 1 : end], b"\n ", b"\n")
        headers.setdefault(key, []).append(value)
        start = end + 1


def serialize_kvlm(headers: dict[bytes, list[bytes]], message: bytes) -> bytes:
    """Serialize headers and message in the format parse_kvlm reads."""
    ret = bytearray()
    for key, values in headers.items():
        if not key or b" " in key or b"\n" in key:
            raise ValueError(f"invalid header name {key!r}")
        for value in values:
            ret += key + b" " + scan.replace(value, b"\n", b"\n ") + b"\n"
    ret += b"\n"
    ret += message
    return bytes(ret)


class _KeyValueObject(WitObject):
    """Shared behaviour of commits and tags: ordered headers plus message.

    Values of a repeated key are kept together, so a modified object writes
    them as one run at the position of the key's first occurrence.
    """

    def __init__(self, repo: "Repository | None" = None) -> None:
        super().__init__(repo)
        self._headers: dict[bytes, list[bytes]] = {}
        self._message = b""

    def _serialize(self) -> bytes:
        return serialize_kvlm(self._headers, self._message)

    def _deserialize(self, data: bytes) -> None:
        self._headers, self._message = parse_kvlm(data)

    @property
    def headers(self) -> dict[bytes, list[bytes]]:
        """A copy of the headers, mapping each key to its values."""
        return {key: list(values) for key, values in self._headers.items()}

    def _get_message(self) -> bytes:
        return self._message

    def _set_message(self, message: bytes) -> None:
        self._message = message
        self._needs_serialization = True

    message = property(_get_message, _set_message, doc="The free-form message.")

    def get_all(self, key: bytes) -> list[bytes]:
        """Return every value recorded for key, possibly none."""
        return list(self._headers.get(key, []))

    def get(self, key: bytes) -> bytes | None:
        """Return the first value recorded for key, or None."""
        values = self._headers.get(key)
        if not values:
            return None
        return values[0]

    def set(self, key: bytes, value: bytes) -> None:
        """Replace all values of key with a single value."""
        self._headers[key] = [value]
        self._needs_serialization = True

    def add(self, key: bytes, value: bytes) -> None:
        """Append a value to key, keeping earlier values."""
        self._headers.setdefault(key, []).append(value)
        self._needs_serialization = True

    def remove(self, key: bytes) -> None:
        """Drop every value of key."""
        if self._headers.pop(key, None) is not None:
            self._needs_serialization = True


class Commit(_KeyValueObject):
    """A snapshot of a tree plus the commits it descends from."""

    type_name = b"commit"

    @property
    def tree(self) -> str | None:
        """Digest of the tree recorded by this commit."""
        value = self.get(_TREE_HEADER)
        if value is None:
            return None
        return _decode_sha(value, _TREE_HEADER)

    @tree.setter
    def tree(self, sha: str) -> None:
        self.set(_TREE_HEADER, sha.encode("ascii"))

    @property
    def parents(self) -> list[str]:
        """Digests of the parent commits, in recorded order."""
        return [_decode_sha(v, _PARENT_HEADER) for v in self.get_all(_PARENT_HEADER)]

    @parents.setter
    def parents(self, shas: Iterable[str]) -> None:
        values = [sha.encode("ascii") for sha in shas]
        if values:
            self._headers[_PARENT_HEADER] = values
            self._needs_serialization = True
        else:
            self.remove(_PARENT_HEADER)


class Tag(_KeyValueObject):
    """An annotated pointer to another object."""

    type_name = b"tag"

    @property
    def object(self) -> str | None:
        """Digest of the tagged object."""
        value = self.get(_OBJECT_HEADER)
        if value is None:
            return None
        return _decode_sha(value, _OBJECT_HEADER)

    @object.setter
    def object(self, sha: str) -> None:
        self.set(_OBJECT_HEADER, sha.encode("ascii"))

    @property
    def object_type(self) -> bytes | None:
        """Type name the tag claims for the tagged object."""
        return self.get(_TYPE_HEADER)

    @property
    def tag_name(self) -> bytes | None:
        return self.get(_TAG_HEADER)


class TreeLeaf(NamedTuple):
    """A single entry of a tree."""

    mode: int
    path: str
    sha: str


def parse_tree(text: bytes) -> Iterator[TreeLeaf]:
    """Parse a tree payload.

    Args:
      text: Serialized tree
    Returns: Iterator over TreeLeaf records, in stored order
    Raises:
      MalformedObject: if the payload is truncated or a mode is not octal
    """
    pos = 0
    length = len(text)
    while pos < length:
        mode_end = scan.find_some(text, b" ", pos)
        if mode_end is None:
            raise MalformedObject(f"Tree leaf at offset {pos} has no mode")
        try:
            mode = int(text[pos:mode_end], 8)
        except ValueError as exc:
            raise MalformedObject(f"Invalid mode {text[pos:mode_end]!r}") from exc
        name_end = scan.find_some(text, 0, mode_end)
        if name_end is None:
            raise MalformedObject(f"Tree leaf at offset {pos} has no path terminator")
        try:
            path = text[mode_end + 1 : name_end].decode("utf-8")
        except UnicodeDecodeError as exc:
            raise EncodingError(f"Tree path is not UTF-8: {text[mode_end + 1 : name_end]!r}") from exc
        pos = name_end + 1 + BINSHA_LENGTH
        binsha = text[name_end + 1 : pos]
        if len(binsha) != BINSHA_LENGTH:
            raise MalformedObject(f"Truncated digest for tree leaf {path!r}")
        yield TreeLeaf(mode, path, sha_to_hex(binsha))


def _leaf_sort_key(leaf: TreeLeaf) -> bytes:
    name = leaf.path.encode("utf-8")
    if stat.S_ISDIR(leaf.mode):
        name += b"/"
    return name


def serialize_tree(leaves: Iterable[TreeLeaf]) -> bytes:
    """Serialize tree leaves in the order given."""
    chunks = []
    for mode, path, sha in leaves:
        chunks.append(
            (f"{mode:04o} ").encode("ascii") + path.encode("utf-8") + b"\0" + hex_to_sha(sha)
        )
    return b"".join(chunks)


class Tree(WitObject):
    """A directory listing: ordered leaves of (mode, path, digest).

    Leaves parsed from a payload keep their stored order. Adding a leaf
    sorts the tree the way new trees are written, directories comparing as
    if their name ended in a slash.
    """

    type_name = b"tree"

    def __init__(self, repo: "Repository | None" = None) -> None:
        super().__init__(repo)
        self._leaves: list[TreeLeaf] = []

    @property
    def leaves(self) -> list[TreeLeaf]:
        """The leaves of this tree, in stored order."""
        return list(self._leaves)

    def add(self, mode: int, path: str, sha: str) -> None:
        """Add a leaf, replacing any existing leaf with the same path."""
        leaves = [leaf for leaf in self._leaves if leaf.path != path]
        leaves.append(TreeLeaf(mode, path, sha.lower()))
        self._leaves = sorted(leaves, key=_leaf_sort_key)
        self._needs_serialization = True

    def __iter__(self) -> Iterator[TreeLeaf]:
        return iter(self._leaves)

    def __len__(self) -> int:
        return len(self._leaves)

    def _serialize(self) -> bytes:
        return serialize_tree(self._leaves)

    def _deserialize(self, data: bytes) -> None:
        self._leaves = list(parse_tree(data))


OBJECT_CLASSES: tuple[type[WitObject], ...] = (
    Commit,
    Tree,
    Blob,
    Tag,
)

_TYPE_MAP: dict[bytes, type[WitObject]] = {}

for cls in OBJECT_CLASSES:
    _TYPE_MAP[cls.type_name] = cls

# Payloads without which these kinds can not be built
_DATA_REQUIRED = (Blob, Tree)


def object_class(type_name: bytes) -> type[WitObject] | None:
    """Get the object class corresponding to the given type name.

    Returns: The WitObject subclass, or None if the type is not known
    """
    return _TYPE_MAP.get(type_name)


def build_object(
    type_name: bytes,
    repo: "Repository | None" = None,
    data: bytes | None = None,
) -> WitObject:
    """Construct an object of the given kind.

    The object is allocated first and then populated from data, if given.

    Args:
      type_name: One of b"blob", b"commit", b"tree" or b"tag"
      repo: Repository the object belongs to
      data: Serialized payload
    Raises:
      UnknownObjectType: if type_name is not a known kind
      MissingData: if a blob or tree is requested without data
    """
    cls = object_class(type_name)
    if cls is None:
        raise UnknownObjectType(type_name)
    if data is None and cls in _DATA_REQUIRED:
        raise MissingData(
            f"Data is required to construct a {type_name.decode('ascii')}."
        )
    obj = cls(repo)
    if data is not None:
        obj.deserialize(data)
    return obj
