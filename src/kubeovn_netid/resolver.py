"""Single entry point turning a VM into its Kube-OVN annotations.

This module mirrors the way the backup action consumes the engine: it hands
over an already deserialised VM and expects either the complete annotation
set for every interface or an error.  There is no partial outcome.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .annotations import merge_annotations, to_net_info
from .enumerator import enumerate_attachments
from .exceptions import InvalidInput, NetIdentityError, ResolutionError, StoreUnavailable
from .models import NetInfo, VirtualMachine
from .store import AddressRecordStore

LOG = logging.getLogger(__name__)


class NetIdentityResolver:
    """Resolve the MAC/IP identity Kube-OVN assigned to a VM's interfaces."""

    def __init__(self, store: AddressRecordStore) -> None:
        self._store = store

    def resolve_net_info(self, vm: Optional[VirtualMachine]) -> List[NetInfo]:
        if vm is None:
            raise InvalidInput("VM object is nil")

        try:
            attachments = enumerate_attachments(vm, self._store)
        except NetIdentityError as exc:
            raise ResolutionError(vm.namespace, vm.name, exc) from exc
        except Exception as exc:
            # Stores other than ours may raise their own errors
            reason = StoreUnavailable(f"record store failed: {exc!r}")
            reason.__cause__ = exc
            raise ResolutionError(vm.namespace, vm.name, reason) from exc

        infos = [to_net_info(reference, record) for reference, record in attachments]
        LOG.info("Resolved %d interface(s) for VM %s", len(infos), vm.identity)
        return infos

    def resolve_annotations(self, vm: Optional[VirtualMachine]) -> Dict[str, str]:
        """Return the annotations pinning every interface of ``vm``.

        Raises :class:`InvalidInput` when ``vm`` is missing and
        :class:`ResolutionError` (chained to the original error) otherwise.
        """

        return merge_annotations(self.resolve_net_info(vm))
