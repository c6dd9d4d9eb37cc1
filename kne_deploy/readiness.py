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

"""Watch-driven readiness checks shared by every component."""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable
from typing import Any

from kubernetes import client

from kne_deploy import logger
from kne_deploy.constants import WATCH_BUFFER_SIZE
from kne_deploy.context import Context
from kne_deploy.errors import ObjectStoreError, WatchError
from kne_deploy.kube import ClusterClient, EventStream, EventType, Kind, WatchEvent

Predicate = Callable[[Any], bool]


# ============================================================================
# Predicates
# ============================================================================

def deployment_ready(d: client.V1Deployment) -> bool:
    """Ready once no replica is unavailable and all desired replicas are ready.

    The desired count is ``spec.replicas``, or 1 when the platform left it unset.
    """
    desired = 1
    if d.spec is not None and d.spec.replicas is not None:
        desired = d.spec.replicas
    status = d.status
    if status is None:
        return False
    return (status.unavailable_replicas or 0) == 0 and (status.ready_replicas or 0) == desired


def daemon_set_ready(ds: client.V1DaemonSet) -> bool:
    """Ready once nothing is unavailable and every scheduled pod is ready."""
    status = ds.status
    if status is None:
        return False
    return (status.number_unavailable or 0) == 0 and (status.number_ready or 0) == (
        status.desired_number_scheduled or 0
    )


PREDICATES: dict[Kind, Predicate] = {
    Kind.DEPLOYMENT: deployment_ready,
    Kind.DAEMON_SET: daemon_set_ready,
}


# ============================================================================
# Watcher
# ============================================================================

class _Wake:
    """Posted by the context callback so the consumer re-checks the context."""


class _Closed:
    def __init__(self, cause: BaseException | None) -> None:
        self.cause = cause


def _pump(stream: EventStream, inbox: queue.SimpleQueue, slots: threading.Semaphore,
          stopped: threading.Event) -> None:
    """Move events from *stream* to *inbox*, holding at most the buffer size in flight."""
    cause: BaseException | None = None
    try:
        for event in stream:
            slots.acquire()
            if stopped.is_set():
                return
            inbox.put(event)
    except Exception as err:
        cause = err
    if not stopped.is_set():
        inbox.put(_Closed(cause))


def wait_ready(
    ctx: Context,
    kube: ClusterClient,
    kind: Kind,
    namespace: str,
    name: str,
    predicate: Predicate | None = None,
) -> None:
    """Block until the named object satisfies *predicate* or *ctx* is done.

    A listener thread reads the watch stream and hands events over through
    a bounded buffer. The consumer blocks on that buffer and is also woken
    by the context, whichever comes first. The watch is stopped on every
    exit path.

    Args:
        ctx: Cancellation scope for the wait.
        kube: Cluster client used to open the watch.
        kind: Kind of object to watch.
        namespace: Namespace of the object.
        name: Name of the object.
        predicate: Readiness test; defaults to the kind's standard predicate.

    Raises:
        CancellationError: If *ctx* is canceled or its deadline passes first.
        WatchError: If the watch reports an error or closes before readiness.
    """
    err = ctx.error()
    if err is not None:
        raise err
    if predicate is None:
        predicate = PREDICATES[kind]
    target = f"{kind.value} {namespace}/{name}"

    try:
        stream = kube.watch(kind, namespace, name)
    except ObjectStoreError:
        raise
    except Exception as err:
        raise WatchError(f"failed to watch {target}: {err}") from err

    inbox: queue.SimpleQueue = queue.SimpleQueue()
    slots = threading.Semaphore(WATCH_BUFFER_SIZE)
    stopped = threading.Event()
    listener = threading.Thread(
        target=_pump, args=(stream, inbox, slots, stopped), name=f"watch-{namespace}-{name}", daemon=True
    )
    unregister = ctx.on_done(lambda: inbox.put(_Wake()))
    listener.start()
    try:
        while True:
            item = inbox.get()
            err = ctx.error()
            if err is not None:
                logger.debug("Stopped waiting for %s: %s", target, err)
                raise err
            if isinstance(item, _Wake):
                continue
            if isinstance(item, _Closed):
                if item.cause is not None:
                    raise WatchError(f"watch for {target} failed: {item.cause}") from item.cause
                raise WatchError(f"watch for {target} closed before it became ready")
            slots.release()
            if _handle(item, target, predicate):
                return
    finally:
        unregister()
        stopped.set()
        stream.stop()
        # Unblock a listener waiting for buffer space so it can see the stop.
        slots.release()


def _handle(event: WatchEvent, target: str, predicate: Predicate) -> bool:
    if event.type is EventType.ERROR:
        raise WatchError(f"watch for {target} failed: {_status_message(event.object)}")
    if event.type is EventType.DELETED:
        logger.info("%s deleted while waiting for it to become ready", target)
        return False
    if event.object is None:
        return False
    ready = predicate(event.object)
    logger.debug("%s %s: ready=%s", target, event.type.value, ready)
    return ready


def _status_message(obj: Any) -> str:
    if isinstance(obj, dict):
        return obj.get("message") or obj.get("reason") or str(obj)
    return str(obj)
