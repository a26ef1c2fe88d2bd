"""Kube-OVN naming conventions for interfaces and IP records.

Kube-OVN exposes three string forms that must line up exactly:

* the KubeVirt ``networkName`` of a Multus interface, ``<namespace>/<nad>``;
* the annotation prefix used to pin an interface's addresses, either
  ``ovn.kubernetes.io`` for the default network or
  ``<nad>.<namespace>.ovn.kubernetes.io`` for a secondary network;
* the name of the ``IP`` custom resource Kube-OVN creates for the interface,
  ``<vm>.<namespace>`` or ``<vm>.<namespace>.<nad>.<nad-namespace>.ovn``.

The helpers below translate between these forms.  They never normalise their
input: anything that does not match the grammar is rejected.
"""

from __future__ import annotations

from .exceptions import (
    EmptyIdentity,
    InvalidReferenceSuffix,
    MalformedReference,
    NamespaceMismatch,
)

DEFAULT_NETWORK_ANNOTATION = "ovn.kubernetes.io"

DEFAULT_NETWORK_PATTERN = "{vm_name}.{vm_namespace}"
NAD_NETWORK_PATTERN = "{vm_name}.{vm_namespace}.{nad_name}.{nad_namespace}.ovn"


def is_default_reference(reference: str) -> bool:
    return reference == DEFAULT_NETWORK_ANNOTATION


def network_name_to_attachment_reference(network_name: str) -> str:
    """Translate a KubeVirt ``<namespace>/<nad>`` network name.

    ``"tenant/vlan10"`` becomes ``"vlan10.tenant.ovn.kubernetes.io"``.
    """

    parts = network_name.split("/")
    if len(parts) != 2 or not all(parts):
        raise MalformedReference(network_name, "[NS]/[NAD]")

    namespace, nad_name = parts
    return f"{nad_name}.{namespace}.{DEFAULT_NETWORK_ANNOTATION}"


def default_record_identifier(vm_name: str, vm_namespace: str) -> str:
    """Name of the IP record backing a VM's default network interface."""

    if not vm_name or not vm_namespace:
        raise EmptyIdentity(vm_name, vm_namespace)

    return DEFAULT_NETWORK_PATTERN.format(vm_name=vm_name, vm_namespace=vm_namespace)


def _nad_record_identifier(reference: str, vm_name: str, vm_namespace: str) -> str:
    remainder = reference[: -len("." + DEFAULT_NETWORK_ANNOTATION)]

    # What is left must be exactly [NAD].[NS]
    parts = remainder.split(".")
    if len(parts) != 2:
        raise MalformedReference(remainder, "[NAD].[NS]")

    nad_name, nad_namespace = parts
    if nad_namespace != vm_namespace:
        raise NamespaceMismatch(nad_namespace, vm_namespace)

    return NAD_NETWORK_PATTERN.format(
        vm_name=vm_name,
        vm_namespace=vm_namespace,
        nad_name=nad_name,
        nad_namespace=nad_namespace,
    )


def record_identifier_for(reference: str, vm_name: str, vm_namespace: str) -> str:
    """Return the IP record name for ``reference`` on VM ``vm_namespace/vm_name``.

    Parameters
    ----------
    reference:
        Attachment reference (annotation prefix) of the interface, e.g.
        ``ovn.kubernetes.io`` or ``vlan10.tenant.ovn.kubernetes.io``.
    vm_name, vm_namespace:
        Identity of the VM owning the interface.  Both must be non-empty.

    Raises
    ------
    EmptyIdentity
        ``vm_name`` or ``vm_namespace`` is empty.
    InvalidReferenceSuffix
        ``reference`` is not a Kube-OVN annotation prefix.
    MalformedReference
        A secondary reference is not of the form ``<nad>.<ns>.<suffix>``.
    NamespaceMismatch
        The secondary network belongs to another namespace than the VM.
    """

    if not vm_name or not vm_namespace:
        raise EmptyIdentity(vm_name, vm_namespace)

    if is_default_reference(reference):
        return default_record_identifier(vm_name, vm_namespace)

    if not reference.endswith("." + DEFAULT_NETWORK_ANNOTATION):
        raise InvalidReferenceSuffix(reference, DEFAULT_NETWORK_ANNOTATION)

    return _nad_record_identifier(reference, vm_name, vm_namespace)
