# errors.py -- errors for wit
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

"""Wit-related exception classes.

Every error raised by the object core is a :class:`WitError`. Subclasses set
``kind`` to a short tag so callers can dispatch on the failure without
matching message text.
"""

__all__ = [
    "AmbiguousReference",
    "CheckoutError",
    "ElementNotFound",
    "EncodingError",
    "MalformedObject",
    "MissingData",
    "NotWitRepository",
    "RepositoryNotFound",
    "UnknownObject",
    "UnknownObjectType",
    "UnknownReference",
    "WitError",
]

from collections.abc import Sequence


class WitError(Exception):
    """Base class for all wit errors.

    Subclasses define a kind attribute naming the failure.
    """

    kind = "wit"

    def __init__(self, message: str) -> None:
        """Initialize a WitError.

        Args:
          message: Human-readable description of the failure
        """
        self.message = message
        Exception.__init__(self, message)


class ElementNotFound(WitError):
    """A scanned sequence does not contain the requested element."""

    kind = "not-found"


class MalformedObject(WitError):
    """A stored object does not follow the expected format."""

    kind = "malformed-object"


class UnknownObjectType(WitError):
    """An object header names a type that is not blob, commit, tree or tag."""

    kind = "unknown-object-type"

    def __init__(self, type_name: bytes, sha: str | None = None) -> None:
        """Initialize an UnknownObjectType.

        Args:
          type_name: The unrecognised type tag
          sha: Digest of the object carrying the tag, if known
        """
        self.type_name = type_name
        self.sha = sha
        text = type_name.decode("ascii", "replace")
        if sha is None:
            message = f"Unknown object type {text}"
        else:
            message = f"Unknown object type {text} for object {sha}"
        super().__init__(message)


class UnknownObject(WitError):
    """An object is not of the kind the caller needs."""

    kind = "unknown-object"


class UnknownReference(WitError):
    """A name does not resolve to any object."""

    kind = "unknown-reference"


class AmbiguousReference(WitError):
    """A name resolves to more than one object."""

    kind = "ambiguous-reference"

    def __init__(self, name: str, candidates: Sequence[str]) -> None:
        """Initialize an AmbiguousReference.

        Args:
          name: The name that was looked up
          candidates: All digests the name matched
        """
        self.name = name
        self.candidates = list(candidates)
        listing = "".join(f"\n- {sha}" for sha in self.candidates)
        super().__init__(
            f"Ambiguous reference {name}: Candidates are:{listing}\n"
        )


class MissingData(WitError):
    """An object that needs a payload was built without one."""

    kind = "missing-data"


class RepositoryNotFound(WitError):
    """An object has to be stored but is not associated with a repository."""

    kind = "repository-not-found"


class NotWitRepository(WitError):
    """No wit repository was found."""

    kind = "not-a-repository"


class EncodingError(WitError):
    """Bytes that must be text could not be decoded."""

    kind = "encoding"


class CheckoutError(WitError):
    """A tree can not be materialized at the requested location."""

    kind = "checkout"
