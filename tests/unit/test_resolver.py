import pytest

from kubeovn_netid.annotations import join_addresses, merge_annotations, to_net_info
from kubeovn_netid.exceptions import (
    InvalidInput,
    NamespaceMismatch,
    RecordNotFound,
    ResolutionError,
    StoreUnavailable,
)
from kubeovn_netid.models import AddressRecord, MultusNetwork, NetInfo, VirtualMachine, VMIdentity
from kubeovn_netid.resolver import NetIdentityResolver
from kubeovn_netid.store import AddressRecordStore


def test_join_addresses_is_ordered_and_skips_empty_fields():
    assert join_addresses(AddressRecord("m", "10.0.0.1", "fd00::1")) == "10.0.0.1,fd00::1"
    assert join_addresses(AddressRecord("m", "10.0.0.1")) == "10.0.0.1"
    assert join_addresses(AddressRecord("m", ipv6_address="fd00::1")) == "fd00::1"
    assert join_addresses(AddressRecord("m")) == ""


def test_net_info_annotations():
    info = to_net_info("test-nad.test-ns.ovn.kubernetes.io", AddressRecord("m", "10.0.0.1"))

    assert info == NetInfo("test-nad.test-ns.ovn.kubernetes.io", "m", "10.0.0.1")
    assert info.to_annotations() == {
        "test-nad.test-ns.ovn.kubernetes.io/mac_address": "m",
        "test-nad.test-ns.ovn.kubernetes.io/ip_address": "10.0.0.1",
    }


def test_merge_annotations_unions_interfaces():
    infos = [
        NetInfo("ovn.kubernetes.io", "m1", "10.0.0.1"),
        NetInfo("a.ns.ovn.kubernetes.io", "m2", "10.0.0.2"),
    ]

    assert merge_annotations(infos) == {
        "ovn.kubernetes.io/mac_address": "m1",
        "ovn.kubernetes.io/ip_address": "10.0.0.1",
        "a.ns.ovn.kubernetes.io/mac_address": "m2",
        "a.ns.ovn.kubernetes.io/ip_address": "10.0.0.2",
    }


def test_resolve_default_network_only(store):
    resolver = NetIdentityResolver(store)
    vm = VirtualMachine(identity=VMIdentity("test-vm", "test-ns"))

    assert resolver.resolve_annotations(vm) == {
        "ovn.kubernetes.io/mac_address": "00:00:00:00:00:01",
        "ovn.kubernetes.io/ip_address": "10.0.0.1",
    }


def test_resolve_secondary_network_before_default(store):
    resolver = NetIdentityResolver(store)
    vm = VirtualMachine(
        identity=VMIdentity("test-vm", "test-ns"),
        networks=(MultusNetwork("net1", "test-ns/test-nad"),),
    )

    infos = resolver.resolve_net_info(vm)

    assert [i.attachment_reference for i in infos] == [
        "test-nad.test-ns.ovn.kubernetes.io",
        "ovn.kubernetes.io",
    ]
    assert infos[0].ip_addresses == "10.0.1.2,fd00::2"
    assert resolver.resolve_annotations(vm) == {
        "test-nad.test-ns.ovn.kubernetes.io/mac_address": "00:00:00:00:00:02",
        "test-nad.test-ns.ovn.kubernetes.io/ip_address": "10.0.1.2,fd00::2",
        "ovn.kubernetes.io/mac_address": "00:00:00:00:00:01",
        "ovn.kubernetes.io/ip_address": "10.0.0.1",
    }


def test_resolve_rejects_missing_vm(store):
    with pytest.raises(InvalidInput):
        NetIdentityResolver(store).resolve_annotations(None)


def test_resolve_wraps_errors_with_vm_identity(store):
    resolver = NetIdentityResolver(store)
    vm = VirtualMachine(
        identity=VMIdentity("test-vm", "test-ns"),
        networks=(MultusNetwork("net1", "other-ns/test-nad"),),
    )

    with pytest.raises(ResolutionError) as exc:
        resolver.resolve_annotations(vm)

    assert "test-ns/test-vm" in str(exc.value)
    assert isinstance(exc.value.reason, NamespaceMismatch)
    assert exc.value.__cause__ is exc.value.reason


def test_resolve_has_no_partial_outcome(store):
    resolver = NetIdentityResolver(store)
    vm = VirtualMachine(
        identity=VMIdentity("test-vm", "test-ns"),
        networks=(
            MultusNetwork("net1", "test-ns/test-nad"),
            MultusNetwork("net2", "test-ns/missing-nad"),
        ),
    )

    with pytest.raises(ResolutionError) as exc:
        resolver.resolve_annotations(vm)

    assert isinstance(exc.value.reason, RecordNotFound)


def test_resolve_refetches_every_call(store):
    resolver = NetIdentityResolver(store)
    vm = VirtualMachine(identity=VMIdentity("test-vm", "test-ns"))

    resolver.resolve_annotations(vm)
    store.add("test-vm.test-ns", AddressRecord("00:00:00:00:00:09", "10.0.0.9"))

    assert resolver.resolve_annotations(vm)["ovn.kubernetes.io/ip_address"] == "10.0.0.9"
    assert store.fetched == ["test-vm.test-ns", "test-vm.test-ns"]


class BrokenStore(AddressRecordStore):
    def fetch(self, identifier):
        raise ConnectionError("down")


def test_resolve_labels_foreign_store_errors():
    resolver = NetIdentityResolver(BrokenStore())
    vm = VirtualMachine(identity=VMIdentity("test-vm", "test-ns"))

    with pytest.raises(ResolutionError) as exc:
        resolver.resolve_annotations(vm)

    assert "test-ns/test-vm" in str(exc.value)
    assert isinstance(exc.value.reason, StoreUnavailable)
    assert isinstance(exc.value.__cause__, ConnectionError)
