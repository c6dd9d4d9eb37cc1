# /*
# Copyright 2026 The KNE Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""External command execution and path lookup."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

import sh

from kne_deploy import logger
from kne_deploy.errors import CommandError

PathResolver = Callable[[str], str]

class Execer(Protocol):
    """Runs one external command per call and returns its stdout."""

    def exec(self, cmd: str, *args: str) -> str: ...

class ShExecer:
    """Execer backed by the ``sh`` library."""

    def exec(self, cmd: str, *args: str) -> str:
        command_line = " ".join([cmd, *args])
        logger.debug("exec: %s", command_line)
        try:
            return str(sh.Command(cmd)(*args))
        except sh.ErrorReturnCode as err:
            raise CommandError(command_line, err.exit_code, err.stderr.decode(errors="replace")) from err
        except sh.CommandNotFound as err:
            raise CommandError(command_line, stderr=f"{cmd}: command not found") from err


def look_path(cmd: str) -> str:
    """Resolve a command on the system PATH.

    Args:
        cmd: Name of the CLI command to find.

    Returns:
        Absolute path of the command.

    Raises:
        LookupError: If the command is not found.
    """
    try:
        path = sh.which(cmd)
    except (sh.ErrorReturnCode, sh.CommandNotFound) as err:
        raise LookupError(f"{cmd} not found on PATH") from err
    if not path:
        raise LookupError(f"{cmd} not found on PATH")
    return str(path).strip()


def default_execer() -> Execer:
    return ShExecer()
