# graph.py -- Commit ancestry export
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


"""Exporting commit ancestry as Graphviz edge statements.

Each (commit, parent) pair becomes one line ``c_<child> -> c_<parent>``. The
``digraph { ... }`` wrapper is left to the caller.
"""

__all__ = [
    "format_edge",
    "iter_ancestry_edges",
    "write_graphviz",
]

from collections.abc import Iterator
from typing import TYPE_CHECKING, TextIO

from .errors import UnknownObject
from .log_utils import getLogger
from .objects import Commit

if TYPE_CHECKING:
    from .repository import Repository

logger = getLogger(__name__)


def _read_commit(repo: "Repository", sha: str) -> Commit:
    obj = repo.object_store[sha]
    if not isinstance(obj, Commit):
        raise UnknownObject(
            f"Cannot log a non-commit object; found {obj.type_name.decode('ascii')}"
        )
    return obj


def iter_ancestry_edges(
    repo: "Repository", sha: str, seen: set[str] | None = None
) -> Iterator[tuple[str, str]]:
    """Iterate over the (child, parent) edges reachable from a commit.

    Edges come out depth first: each edge is followed by the ancestry of its
    parent before the next parent of the same child. A commit already in
    seen is not visited again, but edges pointing at it are still produced.

    Args:
      repo: Repository to read commits from
      sha: Digest of the commit to start at
      seen: Digests already visited; updated in place
    Raises:
      UnknownObject: if a visited digest is not a commit; edges produced
        before that point are not withdrawn
    """
    if seen is None:
        seen = set()
    if sha in seen:
        return
    seen.add(sha)
    stack = [(sha, iter(_read_commit(repo, sha).parents))]
    while stack:
        child, parents = stack[-1]
        parent = next(parents, None)
        if parent is None:
            stack.pop()
            continue
        yield child, parent
        if parent not in seen:
            seen.add(parent)
            stack.append((parent, iter(_read_commit(repo, parent).parents)))
    logger.debug("visited %d commit(s) from %s", len(seen), sha)


def format_edge(child: str, parent: str) -> str:
    """Format an edge as a Graphviz statement."""
    return f"c_{child} -> c_{parent}"


def write_graphviz(
    repo: "Repository", sha: str, f: TextIO, seen: set[str] | None = None
) -> int:
    """Write the ancestry of a commit to a text stream.

    Returns: Number of edges written
    """
    count = 0
    for child, parent in iter_ancestry_edges(repo, sha, seen):
        f.write(format_edge(child, parent) + "\n")
        count += 1
    return count
