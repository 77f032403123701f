# file.py -- Safe access to wit files
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

"""Lock-protected writes to files in a wit repository."""

__all__ = [
    "FileLocked",
    "WitFile",
    "ensure_dir_exists",
]

import os
import warnings
from types import TracebackType
from typing import IO

from .errors import WitError

PathLike = str | os.PathLike[str]


def ensure_dir_exists(dirname: PathLike) -> None:
    """Ensure a directory exists, creating it and its parents if necessary."""
    try:
        os.makedirs(dirname)
    except FileExistsError:
        pass


def WitFile(
    filename: PathLike,
    mode: str = "rb",
    bufsize: int = -1,
    mask: int = 0o644,
    fsync: bool = False,
) -> "IO[bytes] | _WitFile":
    """Open a file, using the lock file protocol for writes.

    Only binary read ('rb') and binary write ('wb') are supported. Writing
    returns a :class:`_WitFile`; reading returns a plain file object.

    Args:
      filename: Path to the file
      mode: 'rb' or 'wb'
      bufsize: Buffer size passed on to open()
      mask: Permission bits for a newly created file
      fsync: Whether to fsync() the data before it replaces the target
    """
    if "a" in mode:
        raise OSError("append mode not supported for wit files")
    if "+" in mode:
        raise OSError("read/write mode not supported for wit files")
    if "b" not in mode:
        raise OSError("text mode not supported for wit files")
    if "w" in mode:
        return _WitFile(filename, mode, bufsize, mask, fsync)
    return open(filename, mode, bufsize)


class FileLocked(WitError):
    """The lock file for a path already exists."""

    kind = "file-locked"

    def __init__(self, filename: PathLike, lockfilename: str) -> None:
        """Initialize FileLocked.

        Args:
          filename: Path that was being written
          lockfilename: The lock file that is in the way
        """
        self.filename = filename
        self.lockfilename = lockfilename
        super().__init__(f"{lockfilename} already exists; is another process writing {filename}?")


class _WitFile:
    """File that writes to ``<name>.lock`` and renames it into place on close.

    Readers never observe a partially written file: the target is replaced
    atomically, or left untouched if the write is aborted.

    Note: You *must* call close() or abort() for the lock to be released;
        using the object as a context manager does this for you.
    """

    def __init__(
        self,
        filename: PathLike,
        mode: str,
        bufsize: int,
        mask: int,
        fsync: bool = False,
    ) -> None:
        self._filename = os.fspath(filename)
        self._lockfilename = self._filename + ".lock"
        self._fsync = fsync
        try:
            fd = os.open(
                self._lockfilename,
                os.O_RDWR | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0),
                mask,
            )
        except FileExistsError as exc:
            raise FileLocked(filename, self._lockfilename) from exc
        self._file = os.fdopen(fd, mode, bufsize)
        self._closed = False

    @property
    def name(self) -> str:
        return self._filename

    @property
    def closed(self) -> bool:
        """Return whether the file is closed."""
        return self._closed

    def write(self, data: bytes) -> int:
        return self._file.write(data)

    def writelines(self, lines: list[bytes]) -> None:
        self._file.writelines(lines)

    def flush(self) -> None:
        self._file.flush()

    def abort(self) -> None:
        """Discard the lock file without touching the target.

        Does nothing if the file is already closed.
        """
        if self._closed:
            return
        self._file.close()
        try:
            os.remove(self._lockfilename)
        except FileNotFoundError:
            pass
        self._closed = True

    def close(self) -> None:
        """Close the file, moving the lock file over the target.

        Raises:
          OSError: if the target could not be replaced; the lock file is
            removed in that case.
        """
        if self._closed:
            return
        self._file.flush()
        if self._fsync:
            os.fsync(self._file.fileno())
        self._file.close()
        try:
            os.replace(self._lockfilename, self._filename)
        finally:
            self.abort()

    def __del__(self) -> None:
        if not getattr(self, "_closed", True):
            warnings.warn(f"unclosed {self!r}", ResourceWarning, stacklevel=2)
            self.abort()

    def __enter__(self) -> "_WitFile":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            self.abort()
        else:
            self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self._filename!r})>"
