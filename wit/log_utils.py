# log_utils.py -- Logging utilities for wit
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

"""Logging utilities for wit.

Wit is a library, so by default nothing it logs should reach the user. A
no-op handler is attached to the ``wit`` logger at import time; applications
that want output call :func:`default_logging_config` or set up logging
themselves after :func:`remove_null_handler`.

Modules only need ``getLogger``, which is re-exported here.
"""

__all__ = [
    "default_logging_config",
    "getLogger",
    "remove_null_handler",
]

import logging
import os
import sys

getLogger = logging.getLogger

TRACE_ENVIRONMENT_VARIABLE = "WIT_TRACE"
TRACE_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"


class _NullHandler(logging.Handler):
    """Handler that drops every record."""

    def emit(self, record: logging.LogRecord) -> None:
        pass


_NULL_HANDLER = _NullHandler()
_WIT_LOGGER = getLogger("wit")
_WIT_LOGGER.addHandler(_NULL_HANDLER)


def _get_trace_target() -> str | int | None:
    """Work out where trace output should go from WIT_TRACE.

    Returns:
        - None if tracing is disabled or the value is not understood
        - 2 for stderr ("1", "2" or "true")
        - an int between 3 and 9 for an inherited file descriptor
        - an absolute path to a file or directory
    """
    value = os.environ.get(TRACE_ENVIRONMENT_VARIABLE, "")
    if not value or value.lower() in ("0", "false"):
        return None
    if value.lower() in ("1", "2", "true"):
        return 2
    try:
        fd = int(value)
    except ValueError:
        pass
    else:
        if 3 <= fd <= 9:
            return fd
    if os.path.isabs(value):
        return value
    return None


def _configure_logging_from_trace() -> bool:
    """Configure debug logging from WIT_TRACE.

    Returns: True if tracing was set up, False otherwise.
    """
    target = _get_trace_target()
    if target is None:
        return False

    if target == 2:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format=TRACE_FORMAT)
        return True

    try:
        if isinstance(target, int):
            stream = os.fdopen(target, "w", buffering=1)
            logging.basicConfig(level=logging.DEBUG, stream=stream, format=TRACE_FORMAT)
            return True
        if os.path.isdir(target):
            target = os.path.join(target, f"trace.{os.getpid()}")
        logging.basicConfig(
            level=logging.DEBUG, filename=target, filemode="a", format=TRACE_FORMAT
        )
    except OSError as e:
        sys.stderr.write(f"Warning: Failed to open {TRACE_ENVIRONMENT_VARIABLE} target {target}: {e}\n")
        return False
    return True


def default_logging_config() -> None:
    """Set up the default wit loggers.

    Debug output is enabled through WIT_TRACE; without it, INFO and above go
    to stderr.
    """
    remove_null_handler()
    if not _configure_logging_from_trace():
        logging.basicConfig(
            level=logging.INFO,
            stream=sys.stderr,
            format="%(asctime)s %(levelname)s: %(message)s",
        )


def remove_null_handler() -> None:
    """Remove the null handler from the wit logger."""
    _WIT_LOGGER.removeHandler(_NULL_HANDLER)
