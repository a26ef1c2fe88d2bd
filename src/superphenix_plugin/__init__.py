"""Velero backup item action pinning KubeVirt VM addresses for Kube-OVN."""

from .action import BackupActionError, VMBackupItemAction  # noqa: F401
from .config import PluginConfig, load_config  # noqa: F401
from .registry import ActionRegistry  # noqa: F401

__all__ = [
    "ActionRegistry",
    "BackupActionError",
    "PluginConfig",
    "VMBackupItemAction",
    "load_config",
]
