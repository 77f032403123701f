# utils.py -- Test utilities for wit
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


"""Utility functions common to wit tests."""

import os
import shutil
import tempfile
import unittest
import zlib
from collections.abc import Iterable, Sequence

from wit.objects import Blob, Commit, Tag, Tree, WitObject, object_header
from wit.repository import Repository

# Plain files are very frequently used in tests, so let the mode be very short.
F = 0o100644  # Shorthand mode for Files.
D = 0o40000  # Shorthand mode for Directories.


def init_temp_repo(testcase: unittest.TestCase) -> Repository:
    """Create an empty repository in a temporary directory.

    The directory is removed when the test finishes.
    """
    temp_dir = tempfile.mkdtemp()
    testcase.addCleanup(shutil.rmtree, temp_dir)
    return Repository.init(temp_dir)


def write_raw_object(repo: Repository, sha: str, frame: bytes) -> str:
    """Store arbitrary frame bytes under a digest, bypassing all checks.

    Returns: The path the object was written to
    """
    path = repo.file("objects", sha[:2], sha[2:], mkdir=True)
    if os.path.exists(path):
        os.remove(path)
    with open(path, "wb") as f:
        f.write(zlib.compress(frame))
    return path


def make_frame(type_name: bytes, payload: bytes) -> bytes:
    return object_header(type_name, len(payload)) + payload


def make_blob(repo: Repository, data: bytes) -> Blob:
    """Create a blob and add it to the repository."""
    blob = Blob.from_string(data, repo)
    repo.object_store.add_object(blob)
    return blob


def make_tree(
    repo: Repository, entries: Iterable[tuple[str, WitObject] | tuple[str, WitObject, int]]
) -> Tree:
    """Create a tree from (path, object[, mode]) entries and store it.

    The mode defaults to F for blobs and D for trees. Objects in entries are
    stored too.
    """
    tree = Tree(repo)
    for entry in entries:
        if len(entry) == 2:
            path, obj = entry  # type: ignore[misc]
            mode = D if isinstance(obj, Tree) else F
        else:
            path, obj, mode = entry  # type: ignore[misc]
        repo.object_store.add_object(obj)
        tree.add(mode, path, obj.id)
    repo.object_store.add_object(tree)
    return tree


def make_commit(
    repo: Repository | None = None,
    tree: str = "4b825dc642cb6eb9a060e54bf8d69288fbee4904",
    parents: Sequence[str] = (),
    message: bytes = b"Test message.\n",
) -> Commit:
    """Make a Commit object with a default set of headers."""
    commit = Commit(repo)
    commit.tree = tree
    commit.parents = parents
    commit.set(b"author", b"Test Author <test@nodomain.com> 1262304000 +0000")
    commit.set(b"committer", b"Test Committer <test@nodomain.com> 1262304000 +0000")
    commit.message = message
    return commit


def make_tag(
    repo: Repository | None,
    target: WitObject,
    name: bytes = b"v1.0",
    message: bytes = b"Test tag.\n",
) -> Tag:
    """Make a Tag object pointing at target."""
    tag = Tag(repo)
    tag.object = target.id
    tag.set(b"type", target.type_name)
    tag.set(b"tag", name)
    tag.set(b"tagger", b"Test Tagger <test@nodomain.com> 1262304000 +0000")
    tag.message = message
    return tag


def build_commit_graph(
    repo: Repository, commit_graph: Sequence[Sequence[int]]
) -> list[Commit]:
    """Build a commit graph from a concise description.

    Sample usage:
    >>> c1, c2, c3 = build_commit_graph(repo, [[1], [2, 1], [3, 1, 2]])
    >>> repo.object_store[c3.id].parents == [c1.id, c2.id]
    True

    Args:
      repo: Repository to store the commits in
      commit_graph: An iterable of iterables of ints defining the commit graph.
        Each entry defines one commit, and entries must be in topological
        order. The first element of each entry is a commit number, and the
        remaining elements are its parents.
    Returns: The list of commit objects created.
    Raises:
      ValueError: If an undefined commit identifier is listed as a parent.
    """
    empty_tree = make_tree(repo, [])
    nums: dict[int, str] = {}
    commits = []
    for commit in commit_graph:
        commit_num = commit[0]
        try:
            parent_ids = [nums[pn] for pn in commit[1:]]
        except KeyError as e:
            (missing_parent,) = e.args
            raise ValueError(f"Unknown parent {missing_parent}") from e
        commit_obj = make_commit(
            repo,
            tree=empty_tree.id,
            parents=parent_ids,
            message=f"Commit {commit_num}\n".encode("ascii"),
        )
        nums[commit_num] = repo.object_store.add_object(commit_obj)
        commits.append(commit_obj)
    return commits
