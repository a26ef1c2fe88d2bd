"""Velero ``Backup`` helpers and the backup consistency predicates.

The predicates follow the inclusion/exclusion logic of the KubeVirt Velero
plugin: a VM is only worth annotating if the KubeVirt plugin would back it up
in a restorable state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Sequence

from .config import METADATA_BACKUP_LABEL
from .kubevirt import KubeVirtVM

LOG = logging.getLogger(__name__)

VolumePredicate = Callable[[Mapping[str, Any]], bool]
VolumeExclusion = Callable[[KubeVirtVM, Mapping[str, Any]], bool]


@dataclass(frozen=True)
class Backup:
    """The part of a Velero ``Backup`` the plugin looks at."""

    name: str = ""
    labels: Mapping[str, str] = field(default_factory=dict)
    included_resources: Sequence[str] = field(default_factory=tuple)
    excluded_resources: Sequence[str] = field(default_factory=tuple)

    @classmethod
    def from_unstructured(cls, obj: Mapping[str, Any]) -> "Backup":
        metadata = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        return cls(
            name=str(metadata.get("name", "")),
            labels=dict(metadata.get("labels") or {}),
            included_resources=tuple(spec.get("includedResources") or ()),
            excluded_resources=tuple(spec.get("excludedResources") or ()),
        )


def is_resource_in_backup(resource: str, backup: Backup) -> bool:
    """Whether ``resource`` (plural, e.g. ``pods``) is part of ``backup``.

    Exclusions win over inclusions; an empty inclusion list or ``*`` means
    every resource is included.
    """

    if resource in backup.excluded_resources or "*" in backup.excluded_resources:
        return False

    included = backup.included_resources
    return not included or "*" in included or resource in included


def is_metadata_backup(backup: Backup, label: str = METADATA_BACKUP_LABEL) -> bool:
    return backup.labels.get(label) == "true"


def can_be_safely_backed_up(
    vm: KubeVirtVM,
    backup: Backup,
    vmi_excluded: Callable[[KubeVirtVM], bool],
) -> bool:
    """Check a running VM's runtime objects are captured along with it.

    ``vmi_excluded`` is only called for running VMs, as the
    ``VirtualMachineInstance`` does not exist otherwise.
    """

    if not vm.is_running:
        return True

    if not is_resource_in_backup("virtualmachineinstances", backup):
        LOG.info("Backup of a running VM does not contain VMI")
        return False

    if vmi_excluded(vm):
        LOG.info("VM is running but VMI is not included in the backup")
        return False

    if not is_resource_in_backup("pods", backup) and is_resource_in_backup(
        "persistentvolumeclaims", backup
    ):
        LOG.info("Backup of a running VM does not contain Pod but contains PVC")
        return False

    return True


def restore_possible(
    vm: KubeVirtVM,
    backup: Backup,
    skip_volume: Optional[VolumePredicate] = None,
    volume_excluded: Optional[VolumeExclusion] = None,
) -> bool:
    """Check every persistent volume of ``vm`` can be restored from ``backup``.

    DataVolume volumes for which ``skip_volume`` returns ``True`` are ignored,
    typically those re-created from the VM's ``dataVolumeTemplates``.
    ``volume_excluded`` tells whether the DataVolume or PVC behind a volume
    is excluded from backups by label, see
    :meth:`superphenix_plugin.kubevirt.KubeVirtClient.is_volume_excluded_by_label`.
    """

    for volume in vm.volumes:
        name = volume.get("name", "")
        if volume.get("dataVolume"):
            if skip_volume is not None and skip_volume(volume):
                continue
            if not is_resource_in_backup("datavolumes", backup):
                LOG.info("Volume %s of VM %s/%s is a DataVolume missing from the backup",
                         name, vm.namespace, vm.name)
                return False

        if volume.get("persistentVolumeClaim") or volume.get("dataVolume"):
            if not is_resource_in_backup("persistentvolumeclaims", backup):
                LOG.info("Volume %s of VM %s/%s needs a PVC missing from the backup",
                         name, vm.namespace, vm.name)
                return False

        if volume_excluded is not None and volume_excluded(vm, volume):
            LOG.info("Volume %s of VM %s/%s is excluded from backups by label",
                     name, vm.namespace, vm.name)
            return False

    return True
