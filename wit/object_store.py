# object_store.py -- Object store for wit objects
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


"""Loose object storage.

Objects live at ``objects/<first two hex digits>/<remaining 38>`` below the
control directory, each file holding the zlib-compressed frame
``<type> <length>\\0<payload>``. The digest is taken over the uncompressed
frame, so identical content always maps to the same file.
"""

__all__ = [
    "LOOSE_OBJECT_MODE",
    "DiskObjectStore",
    "hash_object",
    "parse_object_frame",
    "read_object",
    "write_object",
]

import os
import sys
import zlib
from collections.abc import Iterator
from typing import TYPE_CHECKING

from . import scan
from .errors import (
    ElementNotFound,
    EncodingError,
    MalformedObject,
    RepositoryNotFound,
    UnknownObjectType,
)
from .file import WitFile
from .log_utils import getLogger
from .objects import (
    HEXSHA_LENGTH,
    WitObject,
    build_object,
    frame_sha,
    object_class,
    valid_hexsha,
)

if TYPE_CHECKING:
    from .config import ConfigDict
    from .repository import Repository

logger = getLogger(__name__)

OBJECTDIR = "objects"
LOOSE_OBJECT_MODE = 0o444 if sys.platform != "win32" else 0o644


def _decompress(string: bytes) -> bytes:
    dcomp = zlib.decompressobj()
    dcomped = dcomp.decompress(string)
    dcomped += dcomp.flush()
    return dcomped


def parse_object_frame(raw: bytes, sha: str) -> tuple[bytes, bytes]:
    """Split an uncompressed frame into its type name and payload.

    Args:
      raw: The frame, ``<type> <length>\\0<payload>``
      sha: Digest of the object, used in error messages
    Returns: Tuple of (type_name, payload)
    Raises:
      MalformedObject: if a separator is missing or the declared length does
        not match the payload
      EncodingError: if the length field is not ASCII
    """
    try:
        x = scan.find(raw, b" ")
        y = scan.find(raw, b"\0", x)
    except ElementNotFound as exc:
        raise MalformedObject(
            f"Malformed object {sha}: missing header separator"
        ) from exc
    type_name = raw[:x]
    try:
        size_text = raw[x + 1 : y].decode("ascii")
    except UnicodeDecodeError as exc:
        raise EncodingError(
            f"Malformed object {sha}: length is not ASCII: {raw[x + 1 : y]!r}"
        ) from exc
    if not size_text.isdigit():
        raise MalformedObject(f"Malformed object {sha}: bad length {size_text!r}")
    if int(size_text) != len(raw) - y - 1:
        raise MalformedObject(f"Malformed object {sha}: bad length")
    return type_name, raw[y + 1 :]


class DiskObjectStore:
    """Object store keeping each object in its own compressed file.

    Args:
      repo: Repository whose control directory holds the objects
      loose_compression_level: zlib level, -1 (zlib default) to 9
      fsync_object_files: Whether to fsync object files before they are
        moved into place
    """

    def __init__(
        self,
        repo: "Repository",
        *,
        loose_compression_level: int = -1,
        fsync_object_files: bool = False,
    ) -> None:
        if not -1 <= loose_compression_level <= 9:
            raise ValueError(
                f"invalid compression level {loose_compression_level}"
            )
        self.repo = repo
        self.loose_compression_level = loose_compression_level
        self.fsync_object_files = fsync_object_files

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.repo.repo_path(OBJECTDIR)!r})>"

    @classmethod
    def from_config(cls, repo: "Repository", config: "ConfigDict") -> "DiskObjectStore":
        """Create a DiskObjectStore configured from a repository config.

        Reads core.looseCompression (falling back to core.compression) and
        core.fsyncObjectFiles.
        """
        default_compression_level = config.get_int("core", "compression", -1)
        loose_compression_level = config.get_int(
            "core", "looseCompression", default_compression_level
        )
        fsync_object_files = config.get_boolean("core", "fsyncObjectFiles", False)
        return cls(
            repo,
            loose_compression_level=loose_compression_level,
            fsync_object_files=fsync_object_files,
        )

    def _get_shafile_path(self, sha: str, mkdir: bool = False) -> str:
        sha = sha.lower()
        return self.repo.file(OBJECTDIR, sha[:2], sha[2:], mkdir=mkdir)

    def __contains__(self, sha: str) -> bool:
        """Check if an object with the given digest is stored."""
        try:
            return os.path.isfile(self._get_shafile_path(sha))
        except (FileNotFoundError, NotADirectoryError):
            return False

    def get_raw(self, sha: str) -> tuple[bytes, bytes]:
        """Read the type name and payload of a stored object.

        Raises:
          FileNotFoundError: if no object with this digest is stored
          MalformedObject: if the frame is damaged
          UnknownObjectType: if the frame names an unknown type
        """
        path = self._get_shafile_path(sha)
        with WitFile(path, "rb") as f:
            raw = _decompress(f.read())
        type_name, payload = parse_object_frame(raw, sha)
        if object_class(type_name) is None:
            raise UnknownObjectType(type_name, sha)
        logger.debug("read %s object %s", type_name.decode("ascii"), sha)
        return type_name, payload

    def __getitem__(self, sha: str) -> WitObject:
        """Read an object, bound to this store's repository."""
        type_name, payload = self.get_raw(sha)
        return build_object(type_name, self.repo, payload)

    def add_object(self, obj: WitObject) -> str:
        """Add a single object to this object store.

        Storing an object that is already present leaves the existing file
        alone.

        Returns: The digest of the object
        """
        frame = obj.as_framed_string()
        sha = frame_sha(frame)
        path = self._get_shafile_path(sha, mkdir=True)
        if os.path.exists(path):
            logger.debug("object %s already present at %s", sha, path)
            return sha
        with WitFile(
            path, "wb", mask=LOOSE_OBJECT_MODE, fsync=self.fsync_object_files
        ) as f:
            f.write(zlib.compress(frame, self.loose_compression_level))
        logger.debug("wrote %s object %s to %s", obj.type_name.decode("ascii"), sha, path)
        return sha

    def iter_prefix(self, prefix: str) -> Iterator[str]:
        """Iterate over the digests of stored objects starting with prefix.

        Args:
          prefix: Hex prefix, at least two characters long
        Returns: Iterator over full digests, in sorted order
        """
        if len(prefix) < 2:
            raise ValueError(f"prefix too short: {prefix!r}")
        prefix = prefix.lower()
        base = prefix[:2]
        rest = prefix[2:]
        try:
            names = os.listdir(self.repo.dir(OBJECTDIR, base))
        except (FileNotFoundError, NotADirectoryError):
            logger.debug("no fan-out directory for prefix %s", prefix)
            return
        for name in sorted(names):
            if name.startswith(rest) and valid_hexsha(base + name):
                yield base + name

    def __iter__(self) -> Iterator[str]:
        """Iterate over the digests of all stored objects."""
        try:
            objects_dir = self.repo.dir(OBJECTDIR)
        except FileNotFoundError:
            return
        for base in sorted(os.listdir(objects_dir)):
            if len(base) != 2:
                continue
            subdir = os.path.join(objects_dir, base)
            if not os.path.isdir(subdir):
                continue
            for rest in sorted(os.listdir(subdir)):
                if len(rest) == HEXSHA_LENGTH - 2 and valid_hexsha(base + rest):
                    yield base + rest


def read_object(repo: "Repository", sha: str) -> WitObject:
    """Read the object with the given digest from a repository."""
    return repo.object_store[sha]


def write_object(obj: WitObject, actually_write: bool = True) -> str:
    """Compute the digest of an object and optionally store it.

    Args:
      obj: Object to hash
      actually_write: Whether to store the object in its repository
    Returns: The digest of the object
    Raises:
      RepositoryNotFound: if the object has to be stored but has no
        repository
    """
    if not actually_write:
        return obj.id
    if obj.repo is None:
        raise RepositoryNotFound("No repository found for object")
    return obj.repo.object_store.add_object(obj)


def hash_object(
    path: str | os.PathLike[str],
    type_name: bytes = b"blob",
    repo: "Repository | None" = None,
) -> str:
    """Hash the contents of a file as an object of the given type.

    Args:
      path: File to read
      type_name: Kind of object the contents form
      repo: Repository to store the object in; only the digest is computed
        if this is None
    Returns: The digest of the object
    """
    with open(path, "rb") as f:
        data = f.read()
    obj = build_object(type_name, repo, data)
    return write_object(obj, actually_write=repo is not None)
