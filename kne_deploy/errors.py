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

"""Error taxonomy for component deployment and readiness checks."""

from __future__ import annotations


class DeployError(RuntimeError):
    """Base class for every failure raised by a component's deploy or healthy call."""


class DependencyError(DeployError):
    """A required CLI tool is not on the execution path."""

    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(f'install dependency "{tool}" to deploy')


class CommandError(DeployError):
    """An external command exited non-zero or could not be started.

    Attributes:
        command: Full command line that was run.
        exit_code: Process exit code, or None if it never ran.
        stderr: Captured standard error text.
    """

    def __init__(self, command: str, exit_code: int | None = None, stderr: str = "") -> None:
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        msg = f"command {command!r} failed"
        if exit_code is not None:
            msg += f" with exit code {exit_code}"
        if stderr:
            msg += f": {stderr.strip()}"
        super().__init__(msg)


class StepError(DeployError):
    """One step of a multi-step deploy sequence failed."""

    def __init__(self, step: str, cause: BaseException) -> None:
        self.step = step
        super().__init__(f"{step}: {cause}")


class ObjectStoreError(DeployError):
    """A get/create/update against the cluster API failed.

    Attributes:
        op: Operation that failed (``get``, ``create``, ``update``, ``watch``).
    """

    def __init__(self, op: str, message: str) -> None:
        self.op = op
        super().__init__(message)


class ConfigurationError(DeployError):
    """Runtime configuration could not be resolved."""


class WatchError(DeployError):
    """A readiness watch failed or closed before the object became ready."""


class CancellationError(DeployError):
    """The caller's context ended before the wait finished."""


class ContextCanceledError(CancellationError):
    def __init__(self) -> None:
        super().__init__("context canceled")


class DeadlineExceededError(CancellationError):
    def __init__(self) -> None:
        super().__init__("context deadline exceeded")
