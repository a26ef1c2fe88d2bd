"""Access to the Kube-OVN ``IP`` records backing VM interfaces."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional

import urllib3
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException

from .exceptions import RecordNotFound, StoreUnavailable
from .models import AddressRecord

LOG = logging.getLogger(__name__)

KUBEOVN_GROUP = "kubeovn.io"
KUBEOVN_VERSION = "v1"
KUBEOVN_IP_PLURAL = "ips"


def new_custom_objects_api(
    kubeconfig: Optional[str] = None, context: Optional[str] = None
) -> client.CustomObjectsApi:
    """Build a ``CustomObjectsApi``.

    Without an explicit kubeconfig or context the in-cluster service account
    is tried first, then the default kubeconfig (``$KUBECONFIG``).
    """

    if kubeconfig is None and context is None:
        try:
            config.load_incluster_config()
            LOG.debug("Loaded in-cluster Kubernetes config")
            return client.CustomObjectsApi()
        except ConfigException:
            LOG.debug("Not running in-cluster, falling back to kubeconfig")

    api_client = config.new_client_from_config(config_file=kubeconfig, context=context)
    LOG.debug("Loaded kubeconfig %s", kubeconfig or "(default)")
    return client.CustomObjectsApi(api_client)


class AddressRecordStore(ABC):
    """Keyed lookup over the address records assigned by the IPAM."""

    @abstractmethod
    def fetch(self, identifier: str) -> AddressRecord:
        """Return the record named ``identifier``.

        Implementations raise :class:`RecordNotFound` when the record does
        not exist and :class:`StoreUnavailable` on any other failure.
        """


class InMemoryRecordStore(AddressRecordStore):
    """Dict backed store, used for offline replays and tests."""

    def __init__(self, records: Optional[Mapping[str, AddressRecord]] = None) -> None:
        self._records: Dict[str, AddressRecord] = dict(records or {})

    @classmethod
    def from_resources(cls, resources: Mapping[str, Mapping[str, Any]]) -> "InMemoryRecordStore":
        """Build a store from ``{name: <IP custom resource body>}``."""

        return cls({name: AddressRecord.from_resource(body) for name, body in resources.items()})

    def add(self, identifier: str, record: AddressRecord) -> None:
        self._records[identifier] = record

    def fetch(self, identifier: str) -> AddressRecord:
        try:
            return self._records[identifier]
        except KeyError:
            raise RecordNotFound(identifier) from None


class KubeOvnIPStore(AddressRecordStore):
    """Read Kube-OVN ``IP`` custom resources through the Kubernetes API.

    ``IP`` resources are cluster scoped and named after the pod/VM they are
    assigned to, see :mod:`kubeovn_netid.naming`.

    Parameters
    ----------
    api:
        Pre-built ``CustomObjectsApi`` (or any object exposing
        ``get_cluster_custom_object``).  When omitted, the API client is
        created on first use from the in-cluster service account, falling
        back to ``kubeconfig`` (or ``$KUBECONFIG``).
    kubeconfig, context:
        Kubeconfig file and context used when building the client.
    request_timeout:
        Per-request timeout in seconds handed to the Kubernetes client.
    """

    def __init__(
        self,
        api: Any = None,
        *,
        kubeconfig: Optional[str] = None,
        context: Optional[str] = None,
        group: str = KUBEOVN_GROUP,
        version: str = KUBEOVN_VERSION,
        plural: str = KUBEOVN_IP_PLURAL,
        request_timeout: Optional[float] = None,
    ) -> None:
        self._api = api
        self._kubeconfig = kubeconfig
        self._context = context
        self._group = group
        self._version = version
        self._plural = plural
        self._request_timeout = request_timeout

    @property
    def api(self) -> Any:
        if self._api is None:
            self._api = self._build_api()
        return self._api

    def _build_api(self) -> client.CustomObjectsApi:
        try:
            return new_custom_objects_api(self._kubeconfig, self._context)
        except Exception as exc:
            # ConfigException, unreadable files and kubeconfig YAML errors alike
            raise StoreUnavailable(f"failed to create Kube-OVN client: {exc}") from exc

    def fetch(self, identifier: str) -> AddressRecord:
        kwargs: Dict[str, Any] = {}
        if self._request_timeout is not None:
            kwargs["_request_timeout"] = self._request_timeout

        try:
            body = self.api.get_cluster_custom_object(
                group=self._group,
                version=self._version,
                plural=self._plural,
                name=identifier,
                **kwargs,
            )
        except ApiException as exc:
            if exc.status == 404:
                raise RecordNotFound(identifier) from exc
            raise StoreUnavailable(
                f"failed to retrieve the IP custom resource '{identifier}': "
                f"{exc.status} {exc.reason}",
                identifier,
            ) from exc
        except urllib3.exceptions.HTTPError as exc:
            raise StoreUnavailable(
                f"failed to reach the Kubernetes API for IP '{identifier}': {exc}",
                identifier,
            ) from exc

        LOG.debug("Fetched IP custom resource %s", identifier)
        return AddressRecord.from_resource(body)
