# test_errors.py -- tests for errors.py
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


"""Tests for wit.errors."""

from wit.errors import (
    AmbiguousReference,
    CheckoutError,
    ElementNotFound,
    EncodingError,
    MalformedObject,
    MissingData,
    NotWitRepository,
    RepositoryNotFound,
    UnknownObject,
    UnknownObjectType,
    UnknownReference,
    WitError,
)
from wit.file import FileLocked
from wit.refs import SymrefLoop
from wit.repository import UnsupportedVersion

from . import TestCase


class WitErrorTests(TestCase):
    def test_message(self) -> None:
        e = WitError("something broke")
        self.assertEqual("something broke", e.message)
        self.assertEqual("something broke", str(e))
        self.assertEqual("wit", e.kind)

    def test_kinds_are_distinct(self) -> None:
        classes = [
            AmbiguousReference,
            CheckoutError,
            ElementNotFound,
            EncodingError,
            FileLocked,
            MalformedObject,
            MissingData,
            NotWitRepository,
            RepositoryNotFound,
            SymrefLoop,
            UnknownObject,
            UnknownObjectType,
            UnknownReference,
            UnsupportedVersion,
        ]
        for cls in classes:
            self.assertTrue(issubclass(cls, WitError), cls)
        kinds = [cls.kind for cls in classes]
        self.assertEqual(len(kinds), len(set(kinds)))
        self.assertNotIn(WitError.kind, kinds)

    def test_unknown_object_type(self) -> None:
        e = UnknownObjectType(b"blub")
        self.assertEqual("Unknown object type blub", e.message)
        e = UnknownObjectType(b"blub", "ab" * 20)
        self.assertEqual(f"Unknown object type blub for object {'ab' * 20}", e.message)
        self.assertEqual("ab" * 20, e.sha)

    def test_ambiguous_reference(self) -> None:
        e = AmbiguousReference("abcd", ["abcd1", "abcd2"])
        self.assertEqual("abcd", e.name)
        self.assertEqual(["abcd1", "abcd2"], e.candidates)
        self.assertEqual(
            "Ambiguous reference abcd: Candidates are:\n- abcd1\n- abcd2\n", e.message
        )

    def test_symref_loop(self) -> None:
        e = SymrefLoop("HEAD", 5)
        self.assertEqual("HEAD", e.ref)
        self.assertEqual(5, e.depth)

    def test_unsupported_version(self) -> None:
        self.assertEqual(
            "Unsupported repository format version 2", UnsupportedVersion(2).message
        )
