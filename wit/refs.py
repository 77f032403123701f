# refs.py -- For dealing with wit refs
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

"""Ref handling.

A ref is a file below the control directory holding either a digest or
``ref: <other ref>``, a symbolic reference. ``HEAD`` is normally symbolic.
"""

__all__ = [
    "HEADREF",
    "LOCAL_BRANCH_PREFIX",
    "SYMREF",
    "DiskRefsContainer",
    "SymrefLoop",
    "check_ref_format",
    "local_branch_name",
    "parse_symref_value",
]

import os

from .errors import UnknownReference, WitError
from .file import WitFile, ensure_dir_exists
from .log_utils import getLogger
from .objects import HEXSHA_LENGTH, valid_hexsha

logger = getLogger(__name__)

HEADREF = "HEAD"
SYMREF = b"ref: "
LOCAL_BRANCH_PREFIX = "refs/heads/"
MAX_SYMREF_DEPTH = 5
BAD_REF_CHARS = set("\177 ~^:?*[")


class SymrefLoop(WitError):
    """There is a loop between one or more symrefs."""

    kind = "symref-loop"

    def __init__(self, ref: str, depth: int) -> None:
        self.ref = ref
        self.depth = depth
        super().__init__(f"Symbolic reference {ref} nests deeper than {depth} levels")


def parse_symref_value(contents: bytes) -> str:
    """Parse a symref value.

    Args:
      contents: Contents to parse
    Returns: Name of the ref pointed at
    """
    if contents.startswith(SYMREF):
        return contents[len(SYMREF) :].rstrip(b"\r\n").decode("utf-8")
    raise ValueError(contents)


def check_ref_format(refname: str) -> bool:
    """Check if a refname is correctly formatted.

    Follows the rules of git-check-ref-format: no component may start with a
    dot or end with ``.lock``, no ``..``, no control characters or any of
    ``~^:?*[\\``, and the name may not end with a slash or a dot.
    """
    if "/" not in refname and refname != HEADREF:
        return False
    if ".." in refname or "@{" in refname or "\\" in refname:
        return False
    if refname.endswith(("/", ".")):
        return False
    for c in refname:
        if ord(c) < 0o40 or c in BAD_REF_CHARS:
            return False
    for component in refname.split("/"):
        if not component or component.startswith(".") or component.endswith(".lock"):
            return False
    return True


def local_branch_name(name: str) -> str:
    """Build the full ref name for a local branch."""
    if name.startswith(LOCAL_BRANCH_PREFIX):
        return name
    return LOCAL_BRANCH_PREFIX + name


class DiskRefsContainer:
    """Refs stored as loose files in a control directory."""

    def __init__(self, path: str) -> None:
        self.path = path

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path!r})"

    def refpath(self, name: str) -> str:
        """Return the disk path of a ref."""
        return os.path.join(self.path, *name.split("/"))

    def read_ref(self, name: str) -> bytes | None:
        """Read a ref file and return its contents.

        A symbolic ref yields its whole first line, anything else the first
        40 bytes.

        Returns: The contents of the ref file, or None if it can not be read
        """
        try:
            with WitFile(self.refpath(name), "rb") as f:
                header = f.read(len(SYMREF))
                if header == SYMREF:
                    return header + f.readline().rstrip(b"\r\n")
                return header + f.read(HEXSHA_LENGTH - len(SYMREF))
        except OSError:
            return None

    def follow(self, name: str) -> tuple[list[str], str | None]:
        """Follow a reference name.

        Returns: a tuple of (refnames, sha), where refnames are the names of
            references in the chain and sha is None if the chain ends at a
            missing ref
        """
        contents: bytes | None = SYMREF + name.encode("utf-8")
        depth = 0
        refnames = []
        while contents and contents.startswith(SYMREF):
            refname = parse_symref_value(contents)
            refnames.append(refname)
            contents = self.read_ref(refname)
            if not contents:
                break
            depth += 1
            if depth > MAX_SYMREF_DEPTH:
                raise SymrefLoop(name, MAX_SYMREF_DEPTH)
        if not contents:
            return refnames, None
        return refnames, contents.decode("ascii", "replace")

    def __contains__(self, name: str) -> bool:
        return self.read_ref(name) is not None

    def __getitem__(self, name: str) -> str:
        """Get the digest a ref points at, following symbolic refs.

        Raises:
          UnknownReference: if the chain ends at a missing ref or at
            something that is not a digest
        """
        refnames, sha = self.follow(name)
        if sha is None:
            raise UnknownReference(
                f"Reference {name} points at {refnames[-1]}, which does not exist."
            )
        if not valid_hexsha(sha):
            raise UnknownReference(f"Reference {refnames[-1]} is not a digest: {sha!r}")
        logger.debug("resolved %s via %s to %s", name, " -> ".join(refnames), sha)
        return sha.lower()

    def _write(self, name: str, contents: bytes) -> None:
        if not check_ref_format(name):
            raise ValueError(f"invalid ref name {name!r}")
        path = self.refpath(name)
        ensure_dir_exists(os.path.dirname(path))
        with WitFile(path, "wb") as f:
            f.write(contents + b"\n")

    def __setitem__(self, name: str, sha: str) -> None:
        """Point a ref directly at a digest."""
        if not valid_hexsha(sha):
            raise ValueError(f"not a digest: {sha!r}")
        self._write(name, sha.lower().encode("ascii"))

    def set_symbolic_ref(self, name: str, other: str) -> None:
        """Make a ref point at another ref."""
        self._write(name, SYMREF + other.encode("utf-8"))
