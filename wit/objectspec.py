# objectspec.py -- Object specification
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


"""Object specification.

Turns the names a user types (``HEAD``, a full digest or a short hex prefix)
into digests, and optionally peels tags and commits until an object of the
requested kind is reached.
"""

__all__ = [
    "find",
    "parse_commit",
    "parse_object",
    "parse_tree",
    "resolve",
    "to_bytes",
]

import re
from typing import TYPE_CHECKING

from .errors import AmbiguousReference, UnknownObject, UnknownObjectType, UnknownReference
from .log_utils import getLogger
from .objects import HEXSHA_LENGTH, Commit, Tag, Tree, WitObject, object_class
from .refs import HEADREF

if TYPE_CHECKING:
    from .repository import Repository

logger = getLogger(__name__)

_HEX_RE = re.compile(r"^[0-9A-Fa-f]{4,40}$")


def to_bytes(text: str | bytes) -> bytes:
    """Convert text to bytes.

    Args:
      text: Text to convert (str or bytes)

    Returns:
      Bytes representation of text
    """
    if isinstance(text, str):
        return text.encode("ascii")
    return text


def resolve(repo: "Repository", name: str) -> list[str]:
    """Find the digests a name could refer to.

    An empty list means nothing matched; more than one entry means the name
    is ambiguous. A full digest is returned as is, without checking that the
    object exists.

    Args:
      repo: Repository to look in
      name: ``HEAD``, a full digest or a hex prefix of at least four
        characters
    Returns: List of candidate digests, lowercase
    Raises:
      UnknownReference: if name is ``HEAD`` and HEAD can not be resolved
    """
    if not name.strip():
        return []

    if name == HEADREF:
        return [repo.refs[HEADREF]]

    if _HEX_RE.match(name):
        name = name.lower()
        if len(name) == HEXSHA_LENGTH:
            return [name]
        candidates = list(repo.object_store.iter_prefix(name))
        logger.debug("prefix %s matched %d object(s)", name, len(candidates))
        return candidates

    # Branch and tag names are not looked up here.
    return []


def find(
    repo: "Repository",
    name: str,
    type_name: bytes | str | None = None,
    follow: bool = True,
) -> str:
    """Find the single object a name refers to.

    If type_name is given, the object must be of that kind. With follow set,
    a tag is replaced by the object it points at, and a commit by its tree
    when a tree is wanted, until the kind matches.

    Args:
      repo: Repository to look in
      name: Name to resolve, see resolve()
      type_name: Kind of object wanted, or None for any
      follow: Whether to peel tags and commits
    Returns: The digest of the object found
    Raises:
      UnknownReference: if the name matches nothing
      AmbiguousReference: if the name matches more than one object
      UnknownObject: if the object is not of the wanted kind and can not be
        peeled to it
    """
    candidates = resolve(repo, name)
    if not candidates:
        raise UnknownReference(f"Unknown reference {name}.")
    if len(candidates) > 1:
        raise AmbiguousReference(name, candidates)

    sha = candidates[0]
    if type_name is None:
        return sha

    type_name = to_bytes(type_name)
    if object_class(type_name) is None:
        raise UnknownObjectType(type_name)

    seen: set[str] = set()
    while True:
        if sha in seen:
            raise UnknownObject(f"Reference {name} loops back to object {sha}.")
        seen.add(sha)

        obj = repo.object_store[sha]
        if obj.type_name == type_name:
            logger.debug("found %s %s for %s", type_name.decode("ascii"), sha, name)
            return sha
        if not follow:
            raise UnknownObject(f"Unknown object {sha}.")

        if isinstance(obj, Tag):
            next_sha = obj.object
        elif isinstance(obj, Commit) and type_name == Tree.type_name:
            next_sha = obj.tree
        else:
            next_sha = None
        if next_sha is None:
            raise UnknownObject(
                f"Object {sha} is a {obj.type_name.decode('ascii')}, "
                f"not a {type_name.decode('ascii')}."
            )
        logger.debug("following %s %s to %s", obj.type_name.decode("ascii"), sha, next_sha)
        sha = next_sha


def parse_object(
    repo: "Repository",
    name: str,
    type_name: bytes | str | None = None,
    follow: bool = True,
) -> WitObject:
    """Read the object a name refers to.

    See find() for the meaning of the arguments and the errors raised.
    """
    return repo.object_store[find(repo, name, type_name, follow)]


def parse_tree(repo: "Repository", treeish: str) -> Tree:
    """Parse a string referring to a tree.

    Tags and commits are peeled to the tree they point at.
    """
    tree = parse_object(repo, treeish, Tree.type_name)
    assert isinstance(tree, Tree)
    return tree


def parse_commit(repo: "Repository", committish: str) -> Commit:
    """Parse a string referring to a single commit.

    Tags are peeled to the commit they point at.
    """
    commit = parse_object(repo, committish, Commit.type_name)
    assert isinstance(commit, Commit)
    return commit
