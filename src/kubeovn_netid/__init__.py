"""Kube-OVN network identity resolution for KubeVirt VMs.

Kube-OVN keeps the MAC and IP addresses it assigned to every interface in
cluster-scoped ``IP`` custom resources.  A VM restored from backup only gets
the same addresses back if its pod template carries the matching
``<network>/mac_address`` and ``<network>/ip_address`` annotations.

This package computes those annotations:

* :mod:`kubeovn_netid.naming` maps interfaces to annotation prefixes and
  ``IP`` resource names;
* :mod:`kubeovn_netid.store` reads the ``IP`` resources;
* :mod:`kubeovn_netid.enumerator` decides which interfaces a VM really has;
* :mod:`kubeovn_netid.annotations` renders the annotations; and
* :class:`kubeovn_netid.resolver.NetIdentityResolver` ties them together.

The package only reads addresses; it never allocates or releases them.
"""

from .exceptions import NetIdentityError, ResolutionError  # noqa: F401
from .models import AddressRecord, MultusNetwork, PodNetwork, VirtualMachine, VMIdentity  # noqa: F401
from .resolver import NetIdentityResolver  # noqa: F401
from .store import AddressRecordStore, InMemoryRecordStore, KubeOvnIPStore  # noqa: F401

__all__ = [
    "AddressRecord",
    "AddressRecordStore",
    "InMemoryRecordStore",
    "KubeOvnIPStore",
    "MultusNetwork",
    "NetIdentityError",
    "NetIdentityResolver",
    "PodNetwork",
    "ResolutionError",
    "VMIdentity",
    "VirtualMachine",
]
