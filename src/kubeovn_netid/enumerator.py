"""Enumerate the interfaces of a VM whose addresses must be persisted.

A VM's interface set is not simply its ``networks`` list:

* a VM without any network implicitly gets the pod network, and only it;
* a Multus network flagged ``default`` replaces the pod network;
* unless the pod network is declared explicitly or a Multus network is
  primary, KubeVirt still plugs an unnamed pod network next to the
  secondary networks.

Each interface is mapped to its attachment reference and the matching
Kube-OVN ``IP`` record is fetched.  The first failure aborts the walk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import reduce
from typing import List, Tuple

from .models import AddressRecord, MultusNetwork, NetworkDeclaration, PodNetwork, VirtualMachine
from .naming import DEFAULT_NETWORK_ANNOTATION, network_name_to_attachment_reference, record_identifier_for
from .store import AddressRecordStore

LOG = logging.getLogger(__name__)

ResolvedAttachment = Tuple[str, AddressRecord]


@dataclass(frozen=True)
class _Walk:
    """Accumulator threaded through the declarations."""

    results: Tuple[ResolvedAttachment, ...] = ()
    saw_pod: bool = False
    saw_primary_multus: bool = False


def _resolve(reference: str, vm: VirtualMachine, store: AddressRecordStore) -> ResolvedAttachment:
    identifier = record_identifier_for(reference, vm.name, vm.namespace)
    LOG.debug("VM %s: looking up IP %s for %s", vm.identity, identifier, reference)
    return reference, store.fetch(identifier)


def resolve_default_attachment(vm: VirtualMachine, store: AddressRecordStore) -> ResolvedAttachment:
    return _resolve(DEFAULT_NETWORK_ANNOTATION, vm, store)


def _step(vm: VirtualMachine, store: AddressRecordStore):
    def step(walk: _Walk, network: NetworkDeclaration) -> _Walk:
        if isinstance(network, PodNetwork):
            return _Walk(
                results=walk.results + (resolve_default_attachment(vm, store),),
                saw_pod=True,
                saw_primary_multus=walk.saw_primary_multus,
            )

        if isinstance(network, MultusNetwork):
            reference = network_name_to_attachment_reference(network.network_name)
            return _Walk(
                results=walk.results + (_resolve(reference, vm, store),),
                saw_pod=walk.saw_pod,
                saw_primary_multus=walk.saw_primary_multus or network.default,
            )

        raise TypeError(f"Unsupported network declaration: {network!r}")

    return step


def enumerate_attachments(vm: VirtualMachine, store: AddressRecordStore) -> List[ResolvedAttachment]:
    """Return ``(attachment reference, IP record)`` pairs for every interface.

    Pairs follow declaration order; an implicit pod network is appended last.
    """

    if not vm.networks:
        return [resolve_default_attachment(vm, store)]

    walk = reduce(_step(vm, store), vm.networks, _Walk())

    results = list(walk.results)
    if not walk.saw_primary_multus and not walk.saw_pod:
        LOG.debug("VM %s has no primary network declared, adding the pod network", vm.identity)
        results.append(resolve_default_attachment(vm, store))

    return results
