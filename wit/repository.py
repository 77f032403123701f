# repository.py -- For dealing with wit repositories
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

"""Repository access.

A :class:`Repository` maps logical names below its control directory
(``objects``, ``refs/heads/master``, ``config``) to paths on disk, and owns
the object store and refs container for that directory.
"""

__all__ = [
    "CONTROLDIR",
    "DEFAULT_BRANCH",
    "OBJECTDIR",
    "REFSDIR",
    "Repository",
    "UnsupportedVersion",
]

import errno
import os

from .config import ConfigFile
from .errors import NotWitRepository, WitError
from .file import WitFile
from .log_utils import getLogger
from .object_store import DiskObjectStore
from .refs import HEADREF, DiskRefsContainer, local_branch_name

logger = getLogger(__name__)

CONTROLDIR = ".wit"
OBJECTDIR = "objects"
REFSDIR = "refs"
REFSDIR_TAGS = "tags"
REFSDIR_HEADS = "heads"
DEFAULT_BRANCH = "master"

BASE_DIRECTORIES = [
    ["branches"],
    [OBJECTDIR],
    [REFSDIR, REFSDIR_TAGS],
    [REFSDIR, REFSDIR_HEADS],
]

DEFAULT_DESCRIPTION = (
    b"Unnamed repository; edit this file 'description' to name the repository.\n"
)


class UnsupportedVersion(WitError):
    """Unsupported repository format version."""

    kind = "unsupported-version"

    def __init__(self, version: int) -> None:
        self.version = version
        super().__init__(f"Unsupported repository format version {version}")


class Repository:
    """A wit repository: a work tree with a ``.wit`` control directory.

    Args:
      root: Path of the work tree
      object_store: Object store to use; by default one is configured from
        the repository's config file
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        object_store: DiskObjectStore | None = None,
    ) -> None:
        root = os.fspath(root)
        controldir = os.path.join(root, CONTROLDIR)
        if not os.path.isdir(controldir):
            raise NotWitRepository(f"No wit repository was found at {root}")
        self.path = root
        self._controldir = controldir

        config = self.get_config()
        format_version = config.get_int("core", "repositoryformatversion", 0)
        if format_version != 0:
            raise UnsupportedVersion(format_version)

        self.refs = DiskRefsContainer(controldir)
        if object_store is None:
            object_store = DiskObjectStore.from_config(self, config)
        self.object_store = object_store

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} for {self.path!r}>"

    def controldir(self) -> str:
        """Return the path of the control directory."""
        return self._controldir

    def repo_path(self, *components: str) -> str:
        """Return the path of components below the control directory."""
        return os.path.join(self._controldir, *components)

    def dir(self, *components: str, mkdir: bool = False) -> str:
        """Return the path of a directory below the control directory.

        Args:
          components: Path components, e.g. ("objects", "ab")
          mkdir: Create the directory and its parents if they are missing
        Raises:
          FileNotFoundError: if the directory is missing and mkdir is False
          NotADirectoryError: if the path exists but is not a directory
        """
        path = self.repo_path(*components)
        if os.path.isdir(path):
            return path
        if os.path.exists(path):
            raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), path)
        if not mkdir:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)
        os.makedirs(path, exist_ok=True)
        return path

    def file(self, *components: str, mkdir: bool = False) -> str:
        """Return the path of a file below the control directory.

        The directory holding the file must exist, or is created when mkdir
        is set; the file itself is not checked.
        """
        self.dir(*components[:-1], mkdir=mkdir)
        return self.repo_path(*components)

    def get_config(self) -> ConfigFile:
        """Retrieve the config object, empty if there is no config file."""
        path = self.repo_path("config")
        try:
            return ConfigFile.from_path(path)
        except FileNotFoundError:
            ret = ConfigFile()
            ret.path = path
            return ret

    def head(self) -> str:
        """Return the digest HEAD points at."""
        return self.refs[HEADREF]

    @classmethod
    def init(
        cls,
        path: str | os.PathLike[str],
        *,
        mkdir: bool = False,
        default_branch: str = DEFAULT_BRANCH,
    ) -> "Repository":
        """Create a new repository.

        Args:
          path: Path of the work tree
          mkdir: Create the work tree directory if it does not exist
          default_branch: Branch HEAD points at
        Raises:
          FileExistsError: if a non-empty control directory is already present
        Returns: The new repository
        """
        path = os.fspath(path)
        if mkdir:
            os.makedirs(path, exist_ok=True)
        controldir = os.path.join(path, CONTROLDIR)
        if os.path.exists(controldir):
            if not os.path.isdir(controldir) or os.listdir(controldir):
                raise FileExistsError(
                    errno.EEXIST, f"{controldir} is not empty", controldir
                )
        else:
            os.mkdir(controldir)
        for d in BASE_DIRECTORIES:
            os.makedirs(os.path.join(controldir, *d))

        with WitFile(os.path.join(controldir, "description"), "wb") as f:
            f.write(DEFAULT_DESCRIPTION)
        DiskRefsContainer(controldir).set_symbolic_ref(
            HEADREF, local_branch_name(default_branch)
        )

        config = ConfigFile()
        config.set("core", "repositoryformatversion", 0)
        config.set("core", "filemode", False)
        config.set("core", "bare", False)
        config.write_to_path(os.path.join(controldir, "config"))

        logger.debug("initialized empty repository in %s", controldir)
        return cls(path)

    @classmethod
    def discover(cls, start: str | os.PathLike[str] = ".") -> "Repository":
        """Find the repository containing start.

        Parent directories are tried in turn until one holds a control
        directory.

        Raises:
          NotWitRepository: if no parent directory is a repository
        """
        path = os.path.abspath(start)
        while True:
            try:
                return cls(path)
            except NotWitRepository:
                new_path, _tail = os.path.split(path)
                if new_path == path:
                    break
                path = new_path
        raise NotWitRepository(f"No wit repository was found at {os.fspath(start)}")
