#!/usr/bin/python3
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

# Compute the digest of a file, storing it when -w is given.
#
# Example usage:
#  python examples/hash_object.py -w README

import sys

from wit.object_store import hash_object
from wit.repository import Repository

args = sys.argv[1:]
write = "-w" in args
if write:
    args.remove("-w")
if len(args) != 1:
    print(f"usage: {sys.argv[0]} [-w] filename")
    sys.exit(1)

repo = Repository.discover() if write else None
print(hash_object(args[0], b"blob", repo))
