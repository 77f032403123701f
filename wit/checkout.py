# checkout.py -- Materializing trees in the file system
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


"""Writing the contents of a tree to a directory."""

__all__ = [
    "INVALID_PATH_ELEMENTS",
    "build_file_from_blob",
    "checkout",
    "checkout_revision",
    "validate_path_element",
]

import os
from collections.abc import Iterator
from typing import TYPE_CHECKING

from .errors import CheckoutError, UnknownObject
from .log_utils import getLogger
from .objects import Blob, Tree, TreeLeaf
from .objectspec import find
from .repository import CONTROLDIR

if TYPE_CHECKING:
    from .repository import Repository

logger = getLogger(__name__)

INVALID_PATH_ELEMENTS = frozenset(["", ".", "..", CONTROLDIR])


def validate_path_element(element: str) -> bool:
    """Check that a tree leaf name is safe to create in a directory."""
    if element.lower() in INVALID_PATH_ELEMENTS:
        return False
    return "/" not in element and "\0" not in element


def build_file_from_blob(blob: Blob, target_path: str) -> None:
    """Write the contents of a blob to a file, replacing any existing file."""
    with open(target_path, "wb") as f:
        f.write(blob.data)


def _checked_leaves(tree: Tree, sha: str) -> Iterator[TreeLeaf]:
    leaves = tree.leaves
    for leaf in leaves:
        if not validate_path_element(leaf.path):
            raise CheckoutError(f"Invalid path {leaf.path!r} in tree {sha}")
    return iter(leaves)


def checkout(repo: "Repository", tree: Tree, path: str | os.PathLike[str]) -> None:
    """Materialize a tree below a directory.

    Blob leaves become files and tree leaves become subdirectories, visited
    depth first in the order the tree stores them. The leaves of each tree
    are validated before any of them is written. A failure stops the
    checkout; files written so far are left in place.

    Args:
      repo: Repository holding the objects the tree refers to
      tree: Tree to materialize
      path: Directory to write to; created if missing
    Raises:
      CheckoutError: if a leaf has an unsafe name
      UnknownObject: if a leaf is neither a blob nor a tree
    """
    root = os.fspath(path)
    os.makedirs(root, exist_ok=True)
    stack = [(_checked_leaves(tree, tree.id), root)]
    while stack:
        leaves, dirname = stack[-1]
        leaf = next(leaves, None)
        if leaf is None:
            stack.pop()
            continue
        dest = os.path.join(dirname, leaf.path)
        obj = repo.object_store[leaf.sha]
        if isinstance(obj, Blob):
            logger.debug("checking out blob %s to %s", leaf.sha, dest)
            build_file_from_blob(obj, dest)
        elif isinstance(obj, Tree):
            logger.debug("checking out tree %s to %s", leaf.sha, dest)
            os.makedirs(dest, exist_ok=True)
            stack.append((_checked_leaves(obj, leaf.sha), dest))
        else:
            raise UnknownObject(
                f"Object {dest} of type {obj.type_name.decode('ascii')} "
                "cannot be checked out."
            )


def checkout_revision(
    repo: "Repository", name: str, path: str | os.PathLike[str]
) -> str:
    """Check out the tree a name refers to into a new directory.

    Tags and commits are peeled to their tree.

    Args:
      repo: Repository to read from
      name: Name of a tree, commit or tag, see wit.objectspec.resolve
      path: Directory to write to; must be missing or empty
    Returns: The digest of the tree that was checked out
    Raises:
      CheckoutError: if path exists and is not an empty directory
    """
    path = os.fspath(path)
    if os.path.exists(path):
        if not os.path.isdir(path):
            raise CheckoutError(f"Not a directory {path}!")
        if os.listdir(path):
            raise CheckoutError(f"Not empty {path}!")
    tree_id = find(repo, name, Tree.type_name)
    tree = repo.object_store[tree_id]
    assert isinstance(tree, Tree)
    checkout(repo, tree, path)
    return tree_id
