"""Data structures shared by the resolution engine.

These light-weight dataclasses describe the already-materialised view of a
KubeVirt ``VirtualMachine`` the engine works on, and the Kube-OVN ``IP``
records it reads.  They carry no behaviour beyond simple conversions so that
the engine stays independent from the Kubernetes object model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Sequence, Union


@dataclass(frozen=True)
class VMIdentity:
    """Name/namespace pair uniquely identifying a VM in a cluster."""

    name: str
    namespace: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class PodNetwork:
    """Interface mounting the cluster's default (pod) network."""

    name: str = "default"


@dataclass(frozen=True)
class MultusNetwork:
    """Interface mounting a NetworkAttachmentDefinition through Multus.

    Attributes
    ----------
    name:
        The interface name inside the VM spec.
    network_name:
        Reference to the NetworkAttachmentDefinition, ``<namespace>/<name>``.
    default:
        Whether Multus should treat this network as the primary interface,
        replacing the pod network.
    """

    name: str
    network_name: str
    default: bool = False


NetworkDeclaration = Union[PodNetwork, MultusNetwork]


@dataclass(frozen=True)
class VirtualMachine:
    """The subset of a VM the engine needs: who it is and what it mounts."""

    identity: VMIdentity
    networks: Sequence[NetworkDeclaration] = field(default_factory=tuple)

    @property
    def name(self) -> str:
        return self.identity.name

    @property
    def namespace(self) -> str:
        return self.identity.namespace


@dataclass(frozen=True)
class AddressRecord:
    """Addresses Kube-OVN assigned to one interface. Any field may be empty."""

    mac_address: str = ""
    ipv4_address: str = ""
    ipv6_address: str = ""

    @classmethod
    def from_resource(cls, obj: Mapping[str, Any]) -> "AddressRecord":
        """Build a record from a Kube-OVN ``IP`` custom resource body."""

        spec = obj.get("spec") or {}
        return cls(
            mac_address=spec.get("macAddress") or "",
            ipv4_address=spec.get("v4IpAddress") or "",
            ipv6_address=spec.get("v6IpAddress") or "",
        )


@dataclass(frozen=True)
class NetInfo:
    """Resolved network identity of one VM interface."""

    attachment_reference: str
    mac_address: str
    ip_addresses: str

    def to_annotations(self) -> Dict[str, str]:
        """Return the two Kube-OVN annotations pinning this interface."""

        return {
            f"{self.attachment_reference}/mac_address": self.mac_address,
            f"{self.attachment_reference}/ip_address": self.ip_addresses,
        }
