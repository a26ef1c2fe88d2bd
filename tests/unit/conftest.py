import pytest

from kubeovn_netid.models import AddressRecord
from kubeovn_netid.store import InMemoryRecordStore


class RecordingStore(InMemoryRecordStore):
    def __init__(self, records=None):
        super().__init__(records)
        self.fetched: list[str] = []

    def fetch(self, identifier):
        self.fetched.append(identifier)
        return super().fetch(identifier)


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore(
        {
            "test-vm.test-ns": AddressRecord("00:00:00:00:00:01", "10.0.0.1"),
            "test-vm.test-ns.test-nad.test-ns.ovn": AddressRecord("00:00:00:00:00:02", "10.0.1.2", "fd00::2"),
            "test-vm.test-ns.other-nad.test-ns.ovn": AddressRecord("00:00:00:00:00:03", "10.0.2.3"),
        }
    )
