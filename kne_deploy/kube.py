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

"""Typed access to the cluster objects the components create and watch."""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Protocol

from kubernetes import client, config, watch
from kubernetes.client.rest import ApiException
from kubernetes.watch.watch import iter_resp_lines

from kne_deploy import logger
from kne_deploy.errors import ObjectStoreError


class Kind(enum.Enum):
    DEPLOYMENT = "deployment"
    DAEMON_SET = "daemonset"


class EventType(enum.Enum):
    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    ERROR = "ERROR"


_EVENT_TYPES = {t.value for t in EventType}


@dataclass(frozen=True)
class WatchEvent:
    """One change notification for a watched object.

    Attributes:
        type: What happened to the object.
        object: Snapshot of the object, or the API status for ERROR events.
    """

    type: EventType
    object: Any


class EventStream(Protocol):
    """Open watch subscription; iterating yields events until the server closes it."""

    def __iter__(self) -> Iterator[WatchEvent]: ...

    def stop(self) -> None: ...


class ClusterClient(Protocol):
    def get_secret(self, namespace: str, name: str) -> client.V1Secret | None: ...

    def create_secret(self, namespace: str, name: str, string_data: dict[str, str]) -> client.V1Secret: ...

    def put_config_map(self, namespace: str, name: str, data: dict[str, str]) -> client.V1ConfigMap: ...

    def watch(self, kind: Kind, namespace: str, name: str) -> EventStream: ...


class _KubeEventStream:
    """Iterates one open watch response; :meth:`stop` closes the connection.

    Args:
        resp: Unread HTTP response of a ``watch=True`` list call.
        return_type: Model name the event objects are deserialized into.
    """

    def __init__(self, resp, return_type: str) -> None:
        self._resp = resp
        self._return_type = return_type
        self._watch = watch.Watch()
        self._stopped = False

    def __iter__(self) -> Iterator[WatchEvent]:
        try:
            for line in iter_resp_lines(self._resp):
                if self._stopped:
                    return
                raw = self._watch.unmarshal_event(line, self._return_type)
                if raw is None or raw["type"] not in _EVENT_TYPES:
                    continue
                event_type = EventType(raw["type"])
                obj = raw["raw_object"] if event_type is EventType.ERROR else raw["object"]
                yield WatchEvent(event_type, obj)
        except Exception:
            # Reads fail once stop() has closed the response.
            if self._stopped:
                return
            raise

    def stop(self) -> None:
        self._stopped = True
        self._resp.close()
        self._resp.release_conn()


class KubeClient:
    """ClusterClient backed by the official Kubernetes Python client.

    Args:
        api_client: Configured API client shared by the typed APIs.
    """

    def __init__(self, api_client: client.ApiClient) -> None:
        self._core = client.CoreV1Api(api_client)
        self._apps = client.AppsV1Api(api_client)

    @classmethod
    def from_kubeconfig(cls, path: str | None = None) -> KubeClient:
        """Build a client from a kubeconfig file, or the default one if *path* is None."""
        logger.debug("Loading kubeconfig from %s", path or "default location")
        return cls(config.new_client_from_config(config_file=path))

    def get_secret(self, namespace: str, name: str) -> client.V1Secret | None:
        try:
            return self._core.read_namespaced_secret(name, namespace)
        except ApiException as err:
            if err.status == 404:
                return None
            raise ObjectStoreError("get", f"get secret {namespace}/{name}: {err.reason}") from err

    def create_secret(self, namespace: str, name: str, string_data: dict[str, str]) -> client.V1Secret:
        body = client.V1Secret(
            metadata=client.V1ObjectMeta(name=name, namespace=namespace),
            string_data=string_data,
        )
        try:
            return self._core.create_namespaced_secret(namespace, body)
        except ApiException as err:
            raise ObjectStoreError("create", f"create secret {namespace}/{name}: {err.reason}") from err

    def put_config_map(self, namespace: str, name: str, data: dict[str, str]) -> client.V1ConfigMap:
        """Create the config map, replacing its data if it already exists."""
        body = client.V1ConfigMap(
            metadata=client.V1ObjectMeta(name=name, namespace=namespace),
            data=data,
        )
        try:
            return self._core.create_namespaced_config_map(namespace, body)
        except ApiException as err:
            if err.status != 409:
                raise ObjectStoreError("create", f"create configmap {namespace}/{name}: {err.reason}") from err
        try:
            return self._core.replace_namespaced_config_map(name, namespace, body)
        except ApiException as err:
            raise ObjectStoreError("update", f"update configmap {namespace}/{name}: {err.reason}") from err

    def watch(self, kind: Kind, namespace: str, name: str) -> EventStream:
        """Open a watch on one named object.

        The HTTP response is kept unread so that stopping the stream can
        close the connection instead of waiting for the next server event.
        """
        list_fn, return_type = {
            Kind.DEPLOYMENT: (self._apps.list_namespaced_deployment, "V1Deployment"),
            Kind.DAEMON_SET: (self._apps.list_namespaced_daemon_set, "V1DaemonSet"),
        }[kind]
        try:
            resp = list_fn(
                namespace,
                field_selector=f"metadata.name={name}",
                watch=True,
                _preload_content=False,
            )
        except ApiException as err:
            raise ObjectStoreError("watch", f"watch {kind.value} {namespace}/{name}: {err.reason}") from err
        return _KubeEventStream(resp, return_type)
