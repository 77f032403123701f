# scan.py -- Forward search over byte sequences
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

"""Searching sequences for a single element.

All positions returned are absolute offsets into the sequence, even when the
search starts at a later offset. Byte strings are searched with their native
``find``; any other sequence is compared element by element.
"""

__all__ = [
    "find",
    "find_exact",
    "find_signed",
    "find_some",
    "replace",
]

from collections.abc import Sequence
from typing import Any

from .errors import ElementNotFound

_BYTES_TYPES = (bytes, bytearray)


def find_some(seq: Sequence[Any], element: Any, start: int = 0) -> int | None:
    """Find the first occurrence of element at or after start.

    Args:
      seq: Sequence to search
      element: Element to look for; for byte strings either an int or a
        single byte
      start: Offset to start searching at
    Returns: Position of the element, or None if it does not occur
    """
    if isinstance(seq, _BYTES_TYPES):
        if isinstance(element, _BYTES_TYPES) and len(element) != 1:
            raise ValueError(f"expected a single byte, got {element!r}")
        pos = seq.find(element, start)
        return None if pos == -1 else pos
    for pos in range(max(start, 0), len(seq)):
        if seq[pos] == element:
            return pos
    return None


def find(seq: Sequence[Any], element: Any, start: int = 0) -> int:
    """Find the first occurrence of element at or after start.

    Raises:
      ElementNotFound: if the element does not occur
    """
    pos = find_some(seq, element, start)
    if pos is None:
        raise ElementNotFound(f"{element!r} not found.")
    return pos


def find_signed(seq: Sequence[Any], element: Any, start: int = 0) -> int:
    """Like find_some, but returns -1 when the element does not occur."""
    pos = find_some(seq, element, start)
    return -1 if pos is None else pos


def find_exact(seq: Sequence[Any], element: Any, start: int = 0) -> int:
    """Find an element the caller already knows to be present."""
    pos = find_some(seq, element, start)
    assert pos is not None, f"{element!r} not present"
    return pos


def replace(data: bytes, old: bytes, new: bytes) -> bytes:
    """Replace every non-overlapping occurrence of old in data with new.

    Candidate positions are located by scanning for the first byte of old;
    the rest of the pattern is compared before splicing.

    Args:
      data: Bytes to rewrite
      old: Pattern to replace, at least one byte long
      new: Replacement bytes
    Returns: The rewritten bytes
    """
    if not old:
        raise ValueError("empty pattern")
    ret = bytearray()
    start = 0
    pos = find_some(data, old[0], start)
    while pos is not None:
        if data.startswith(old, pos):
            ret += data[start:pos]
            ret += new
            start = pos + len(old)
            pos = find_some(data, old[0], start)
        else:
            pos = find_some(data, old[0], pos + 1)
    ret += data[start:]
    return bytes(ret)
