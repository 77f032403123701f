#!/usr/bin/python3
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

# Check out a commit, tag or tree into an empty directory.
#
# Example usage:
#  python examples/checkout.py HEAD /tmp/snapshot

import sys

from wit.checkout import checkout_revision
from wit.errors import WitError
from wit.log_utils import default_logging_config
from wit.repository import Repository

if len(sys.argv) < 3:
    print(f"usage: {sys.argv[0]} name directory")
    sys.exit(1)

default_logging_config()
repo = Repository.discover()
try:
    tree_id = checkout_revision(repo, sys.argv[1], sys.argv[2])
except WitError as e:
    print(f"{e.kind}: {e.message}", file=sys.stderr)
    sys.exit(1)
print(f"Checked out tree {tree_id} into {sys.argv[2]}")
