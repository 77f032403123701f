# test_objectspec.py -- tests for objectspec.py
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


"""Tests for name resolution."""

from wit.errors import AmbiguousReference, UnknownObject, UnknownObjectType, UnknownReference
from wit.objects import Blob, Commit, Tree
from wit.objectspec import find, parse_commit, parse_object, parse_tree, resolve, to_bytes

from . import TestCase
from .utils import (
    init_temp_repo,
    make_blob,
    make_commit,
    make_frame,
    make_tag,
    make_tree,
    write_raw_object,
)


class ToBytesTests(TestCase):
    def test_str(self) -> None:
        self.assertEqual(b"tree", to_bytes("tree"))

    def test_bytes(self) -> None:
        self.assertEqual(b"tree", to_bytes(b"tree"))


class ResolveTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.repo = init_temp_repo(self)

    def test_empty(self) -> None:
        self.assertEqual([], resolve(self.repo, ""))

    def test_whitespace(self) -> None:
        self.assertEqual([], resolve(self.repo, "  \t"))

    def test_full_digest_not_checked(self) -> None:
        self.assertEqual(["ab" * 20], resolve(self.repo, "ab" * 20))

    def test_full_digest_lowered(self) -> None:
        self.assertEqual(["ab" * 20], resolve(self.repo, "AB" * 20))

    def test_unique_prefix(self) -> None:
        blob = make_blob(self.repo, b"unique")
        self.assertEqual([blob.id], resolve(self.repo, blob.id[:4]))
        self.assertEqual([blob.id], resolve(self.repo, blob.id[:10].upper()))

    def test_ambiguous_prefix(self) -> None:
        first = "abcd" + "1" * 36
        second = "abcd" + "2" * 36
        write_raw_object(self.repo, first, make_frame(b"blob", b"one"))
        write_raw_object(self.repo, second, make_frame(b"blob", b"two"))
        self.assertEqual([first, second], resolve(self.repo, "abcd"))
        self.assertEqual([second], resolve(self.repo, "abcd2"))

    def test_prefix_without_fanout(self) -> None:
        self.assertEqual([], resolve(self.repo, "deadbeef"))

    def test_too_short(self) -> None:
        blob = make_blob(self.repo, b"short")
        self.assertEqual([], resolve(self.repo, blob.id[:3]))

    def test_too_long(self) -> None:
        self.assertEqual([], resolve(self.repo, "a" * 41))

    def test_not_hex(self) -> None:
        self.assertEqual([], resolve(self.repo, "master"))

    def test_head(self) -> None:
        commit = make_commit(self.repo)
        sha = self.repo.object_store.add_object(commit)
        self.repo.refs["refs/heads/master"] = sha
        self.assertEqual([sha], resolve(self.repo, "HEAD"))

    def test_unborn_head(self) -> None:
        self.assertRaises(UnknownReference, resolve, self.repo, "HEAD")


class FindTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.repo = init_temp_repo(self)
        self.blob = make_blob(self.repo, b"file contents\n")
        self.tree = make_tree(self.repo, [("file.txt", self.blob)])
        self.commit = make_commit(self.repo, tree=self.tree.id)
        self.repo.object_store.add_object(self.commit)
        self.tag = make_tag(self.repo, self.commit)
        self.repo.object_store.add_object(self.tag)

    def test_unknown_reference(self) -> None:
        with self.assertRaises(UnknownReference) as cm:
            find(self.repo, "deadbeef", None, False)
        self.assertEqual("unknown-reference", cm.exception.kind)
        self.assertEqual("Unknown reference deadbeef.", cm.exception.message)

    def test_empty_name(self) -> None:
        self.assertRaises(UnknownReference, find, self.repo, "")

    def test_ambiguous(self) -> None:
        first = "abcd" + "1" * 36
        second = "abcd" + "2" * 36
        write_raw_object(self.repo, first, make_frame(b"blob", b"one"))
        write_raw_object(self.repo, second, make_frame(b"blob", b"two"))
        with self.assertRaises(AmbiguousReference) as cm:
            find(self.repo, "abcd")
        self.assertEqual([first, second], cm.exception.candidates)
        self.assertEqual(
            f"Ambiguous reference abcd: Candidates are:\n- {first}\n- {second}\n",
            cm.exception.message,
        )

    def test_no_type(self) -> None:
        self.assertEqual(self.blob.id, find(self.repo, self.blob.id[:8]))

    def test_no_type_not_read(self) -> None:
        # Without a wanted type the object is never opened.
        self.assertEqual("ef" * 20, find(self.repo, "ef" * 20))

    def test_matching_type(self) -> None:
        self.assertEqual(self.blob.id, find(self.repo, self.blob.id, b"blob"))
        self.assertEqual(self.commit.id, find(self.repo, self.commit.id, "commit"))

    def test_mismatch_without_follow(self) -> None:
        with self.assertRaises(UnknownObject) as cm:
            find(self.repo, self.commit.id, b"tree", follow=False)
        self.assertEqual(f"Unknown object {self.commit.id}.", cm.exception.message)

    def test_commit_to_tree(self) -> None:
        self.assertEqual(self.tree.id, find(self.repo, self.commit.id, b"tree"))

    def test_tag_to_commit(self) -> None:
        self.assertEqual(self.commit.id, find(self.repo, self.tag.id, b"commit"))

    def test_tag_to_tree(self) -> None:
        self.assertEqual(self.tree.id, find(self.repo, self.tag.id, b"tree"))

    def test_nested_tags(self) -> None:
        outer = make_tag(self.repo, self.tag, name=b"outer")
        self.repo.object_store.add_object(outer)
        self.assertEqual(self.commit.id, find(self.repo, outer.id, b"commit"))
        self.assertEqual(self.tree.id, find(self.repo, outer.id, b"tree"))

    def test_commit_not_followed_to_blob(self) -> None:
        self.assertRaises(UnknownObject, find, self.repo, self.commit.id, b"blob")

    def test_blob_not_followed(self) -> None:
        self.assertRaises(UnknownObject, find, self.repo, self.blob.id, b"commit")

    def test_tree_not_followed_to_commit(self) -> None:
        self.assertRaises(UnknownObject, find, self.repo, self.tree.id, b"commit")

    def test_tag_loop(self) -> None:
        sha = "ee" * 20
        payload = b"object " + sha.encode("ascii") + b"\ntype tag\ntag loop\n\n"
        write_raw_object(self.repo, sha, make_frame(b"tag", payload))
        self.assertRaises(UnknownObject, find, self.repo, sha, b"commit")

    def test_unknown_wanted_type(self) -> None:
        self.assertRaises(UnknownObjectType, find, self.repo, self.blob.id, b"blub")

    def test_head(self) -> None:
        self.repo.refs["refs/heads/master"] = self.commit.id
        self.assertEqual(self.tree.id, find(self.repo, "HEAD", b"tree"))


class ParseTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.repo = init_temp_repo(self)
        self.tree = make_tree(self.repo, [("a", Blob.from_string(b"a"))])
        self.commit = make_commit(self.repo, tree=self.tree.id)
        self.repo.object_store.add_object(self.commit)
        self.tag = make_tag(self.repo, self.commit)
        self.repo.object_store.add_object(self.tag)

    def test_parse_object(self) -> None:
        obj = parse_object(self.repo, self.commit.id[:6])
        self.assertEqual(self.commit, obj)

    def test_parse_tree(self) -> None:
        tree = parse_tree(self.repo, self.tag.id)
        self.assertIsInstance(tree, Tree)
        self.assertEqual(self.tree, tree)

    def test_parse_commit(self) -> None:
        commit = parse_commit(self.repo, self.tag.id)
        self.assertIsInstance(commit, Commit)
        self.assertEqual(self.commit, commit)

    def test_parse_commit_from_tree(self) -> None:
        self.assertRaises(UnknownObject, parse_commit, self.repo, self.tree.id)
