#!/usr/bin/python3
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

# Print the ancestry of a commit as a Graphviz graph.
#
# Example usage:
#  python examples/graphviz.py HEAD | dot -Tsvg > history.svg

import sys

from wit.graph import write_graphviz
from wit.objectspec import find
from wit.repository import Repository

if len(sys.argv) < 2:
    print(f"usage: {sys.argv[0]} commit")
    sys.exit(1)

repo = Repository.discover()
sha = find(repo, sys.argv[1], b"commit")

print("digraph witlog{")
print("  node[shape=rect]")
write_graphviz(repo, sha, sys.stdout)
print("}")
