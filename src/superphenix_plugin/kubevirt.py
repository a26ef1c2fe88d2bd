"""KubeVirt object helpers used by the backup action."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence

from kubernetes import client
from kubernetes.config.config_exception import ConfigException

from kubeovn_netid.exceptions import InvalidInput
from kubeovn_netid.models import MultusNetwork, NetworkDeclaration, PodNetwork, VirtualMachine, VMIdentity
from kubeovn_netid.store import new_custom_objects_api

from .config import VELERO_EXCLUDE_LABEL

LOG = logging.getLogger(__name__)

KUBEVIRT_GROUP = "kubevirt.io"
KUBEVIRT_VERSION = "v1"
VMI_PLURAL = "virtualmachineinstances"

CDI_GROUP = "cdi.kubevirt.io"
CDI_VERSION = "v1beta1"
DV_PLURAL = "datavolumes"

STATUS_STARTING = "Starting"
STATUS_RUNNING = "Running"


@dataclass(frozen=True)
class KubeVirtVM:
    """A ``VirtualMachine`` object reduced to what the backup action reads."""

    vm: VirtualMachine
    printable_status: str = ""
    volumes: Sequence[Mapping[str, Any]] = field(default_factory=tuple)
    data_volume_templates: Sequence[str] = field(default_factory=tuple)

    @property
    def name(self) -> str:
        return self.vm.name

    @property
    def namespace(self) -> str:
        return self.vm.namespace

    @property
    def is_running(self) -> bool:
        return self.printable_status in (STATUS_STARTING, STATUS_RUNNING)


def _parse_network(entry: Mapping[str, Any]) -> NetworkDeclaration:
    name = str(entry.get("name", ""))
    pod = entry.get("pod")
    multus = entry.get("multus")

    if pod is not None and multus is not None:
        raise InvalidInput(f"network '{name}' declares both a pod and a multus source")
    if pod is not None:
        return PodNetwork(name=name)
    if multus is not None:
        default = multus.get("default", False)
        if not isinstance(default, bool):
            raise InvalidInput(f"network '{name}' multus.default must be a boolean, got {default!r}")
        return MultusNetwork(
            name=name,
            network_name=str(multus.get("networkName", "")),
            default=default,
        )
    raise InvalidInput(f"network '{name}' declares neither a pod nor a multus source")


def vm_from_unstructured(obj: Mapping[str, Any]) -> KubeVirtVM:
    """Deserialize a ``VirtualMachine`` object body."""

    if not isinstance(obj, Mapping):
        raise InvalidInput("VirtualMachine object must be a mapping")

    metadata = obj.get("metadata") or {}
    spec = obj.get("spec") or {}
    template_spec = (spec.get("template") or {}).get("spec") or {}
    status = obj.get("status") or {}

    networks = [_parse_network(entry) for entry in template_spec.get("networks") or []]
    templates = [
        (tpl.get("metadata") or {}).get("name", "")
        for tpl in spec.get("dataVolumeTemplates") or []
    ]

    return KubeVirtVM(
        vm=VirtualMachine(
            identity=VMIdentity(
                name=str(metadata.get("name", "")),
                namespace=str(metadata.get("namespace", "")),
            ),
            networks=tuple(networks),
        ),
        printable_status=str(status.get("printableStatus", "")),
        volumes=tuple(template_spec.get("volumes") or []),
        data_volume_templates=tuple(templates),
    )


def volume_in_dv_templates(volume: Mapping[str, Any], vm: KubeVirtVM) -> bool:
    data_volume = volume.get("dataVolume")
    if not data_volume:
        return False
    return data_volume.get("name") in vm.data_volume_templates


class KubeVirtClient:
    """Reads KubeVirt and CDI objects; the APIs are built lazily."""

    def __init__(
        self,
        api: Any = None,
        *,
        core_api: Any = None,
        kubeconfig: Optional[str] = None,
        context: Optional[str] = None,
        exclude_label: str = VELERO_EXCLUDE_LABEL,
    ) -> None:
        self._api = api
        self._core_api = core_api
        self._kubeconfig = kubeconfig
        self._context = context
        self._exclude_label = exclude_label

    @property
    def api(self) -> Any:
        if self._api is None:
            try:
                self._api = new_custom_objects_api(self._kubeconfig, self._context)
            except (ConfigException, OSError) as exc:
                raise RuntimeError(f"failed to create KubeVirt client: {exc}") from exc
        return self._api

    @property
    def core_api(self) -> Any:
        if self._core_api is None:
            self._core_api = client.CoreV1Api(self.api.api_client)
        return self._core_api

    def get_vmi(self, namespace: str, name: str) -> Dict[str, Any]:
        return self.api.get_namespaced_custom_object(
            group=KUBEVIRT_GROUP,
            version=KUBEVIRT_VERSION,
            namespace=namespace,
            plural=VMI_PLURAL,
            name=name,
        )

    def is_vmi_excluded_by_label(self, vm: KubeVirtVM) -> bool:
        vmi = self.get_vmi(vm.namespace, vm.name)
        excluded = self._labels_excluded((vmi.get("metadata") or {}).get("labels"))
        if excluded:
            LOG.debug("VMI %s/%s carries %s=true", vm.namespace, vm.name, self._exclude_label)
        return excluded

    def _labels_excluded(self, labels: Optional[Mapping[str, str]]) -> bool:
        return (labels or {}).get(self._exclude_label) == "true"

    def is_volume_excluded_by_label(self, vm: KubeVirtVM, volume: Mapping[str, Any]) -> bool:
        """Whether the DataVolume or PVC behind ``volume`` is excluded by label.

        Volumes of any other kind are never excluded.
        """

        data_volume = volume.get("dataVolume")
        claim = volume.get("persistentVolumeClaim")
        if data_volume:
            dv = self.api.get_namespaced_custom_object(
                group=CDI_GROUP,
                version=CDI_VERSION,
                namespace=vm.namespace,
                plural=DV_PLURAL,
                name=data_volume.get("name", ""),
            )
            excluded = self._labels_excluded((dv.get("metadata") or {}).get("labels"))
        elif claim:
            pvc = self.core_api.read_namespaced_persistent_volume_claim(
                claim.get("claimName", ""), vm.namespace
            )
            excluded = self._labels_excluded(pvc.metadata.labels)
        else:
            return False

        if excluded:
            LOG.debug("Volume %s of VM %s/%s carries %s=true",
                      volume.get("name", ""), vm.namespace, vm.name, self._exclude_label)
        return excluded


def template_annotations(obj: Dict[str, Any]) -> Dict[str, str]:
    """Return (creating it if needed) ``spec.template.metadata.annotations``."""

    node = obj
    for key in ("spec", "template", "metadata", "annotations"):
        if node.get(key) is None:
            node[key] = {}
        node = node[key]
    return node
