"""Backup item action persisting Kube-OVN addresses on VirtualMachines."""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Dict, Optional, Sequence

from kubeovn_netid.exceptions import InvalidInput
from kubeovn_netid.resolver import NetIdentityResolver

from .backup import Backup, VolumeExclusion, can_be_safely_backed_up, is_metadata_backup, restore_possible
from .base import BackupItemAction, ExecuteResult, ResourceSelector
from .config import METADATA_BACKUP_LABEL, VM_RESOURCE
from .kubevirt import KubeVirtVM, template_annotations, vm_from_unstructured, volume_in_dv_templates

LOG = logging.getLogger(__name__)


class BackupActionError(RuntimeError):
    """The VM must not be backed up as-is."""


class VMBackupItemAction(BackupItemAction):
    """Pin the MAC/IP addresses of a VM's interfaces in its pod template.

    Parameters
    ----------
    resolver:
        Resolves the Kube-OVN annotations of a VM.
    vmi_excluded:
        Predicate telling whether the running VM's ``VirtualMachineInstance``
        is excluded from backups by label.  Usually
        :meth:`superphenix_plugin.kubevirt.KubeVirtClient.is_vmi_excluded_by_label`.
    included_resources:
        Resources this action is registered for.
    metadata_backup_label:
        Label marking backups taken for metadata only, which skip the
        volume consistency checks.
    volume_excluded:
        Predicate telling whether the DataVolume or PVC behind a VM volume
        is excluded from backups by label.  Volume labels are not checked
        when omitted.
    """

    def __init__(
        self,
        resolver: NetIdentityResolver,
        vmi_excluded: Callable[[KubeVirtVM], bool],
        *,
        included_resources: Sequence[str] = (VM_RESOURCE,),
        metadata_backup_label: str = METADATA_BACKUP_LABEL,
        volume_excluded: Optional[VolumeExclusion] = None,
    ) -> None:
        self._resolver = resolver
        self._vmi_excluded = vmi_excluded
        self._included_resources = tuple(included_resources)
        self._metadata_backup_label = metadata_backup_label
        self._volume_excluded = volume_excluded

    def applies_to(self) -> ResourceSelector:
        return ResourceSelector(included_resources=self._included_resources)

    def execute(self, item: Dict[str, Any], backup: Optional[Backup]) -> ExecuteResult:
        LOG.info("Executing VMBackupItemAction")

        if backup is None:
            raise InvalidInput("backup object is nil")

        vm = vm_from_unstructured(item)

        try:
            safe = can_be_safely_backed_up(vm, backup, self._vmi_excluded)
        except Exception as exc:
            raise BackupActionError(
                f"failed to check whether VM {vm.namespace}/{vm.name} can be backed up: {exc}"
            ) from exc
        if not safe:
            raise BackupActionError("VM cannot be safely backed up")

        # Consistency checks are irrelevant when only metadata is captured
        if not is_metadata_backup(backup, self._metadata_backup_label):
            def skip_volume(volume):
                return volume_in_dv_templates(volume, vm)

            try:
                restorable = restore_possible(vm, backup, skip_volume, self._volume_excluded)
            except Exception as exc:
                raise BackupActionError(
                    f"failed to check whether VM {vm.namespace}/{vm.name} can be restored: {exc}"
                ) from exc
            if not restorable:
                raise BackupActionError("VM would not be restored correctly")

        annotations = self._resolver.resolve_annotations(vm.vm)

        output = copy.deepcopy(item)
        template_annotations(output).update(annotations)
        LOG.info(
            "Added %d Kube-OVN annotation(s) to VM %s/%s",
            len(annotations),
            vm.namespace,
            vm.name,
        )
        return output, []


def build_vm_action(
    resolver: NetIdentityResolver,
    vmi_excluded: Callable[[KubeVirtVM], bool],
    **kwargs: Any,
) -> VMBackupItemAction:
    """Helper mirroring the factory functions registered with the plugin server."""

    return VMBackupItemAction(resolver, vmi_excluded, **kwargs)
