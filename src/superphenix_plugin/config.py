"""YAML configuration loader for the backup plugin."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml
from oslo_config import cfg

from .opts import KUBEOVN_GROUP_NAME, kubeovn_opts

DEFAULT_ACTION_NAME = "superphenix.net/backup-virtualmachine"
VM_RESOURCE = "virtualmachines.kubevirt.io"
VELERO_EXCLUDE_LABEL = "velero.io/exclude-from-backup"
METADATA_BACKUP_LABEL = "velero.kubevirt.io/metadataBackup"


@dataclass
class ActionConfig:
    name: str = DEFAULT_ACTION_NAME
    included_resources: Sequence[str] = (VM_RESOURCE,)
    exclude_label: str = VELERO_EXCLUDE_LABEL
    metadata_backup_label: str = METADATA_BACKUP_LABEL


@dataclass
class PluginConfig:
    action: ActionConfig = field(default_factory=ActionConfig)
    kubeovn: Dict[str, Any] = field(default_factory=dict)

    def apply(self, conf: cfg.ConfigOpts) -> None:
        """Push the ``kubeovn`` section onto ``conf`` as option overrides."""

        for name, value in self.kubeovn.items():
            conf.set_override(name, value, group=KUBEOVN_GROUP_NAME)


_KUBEOVN_KEYS = frozenset(opt.dest for opt in kubeovn_opts)


def _parse_action(section: dict) -> ActionConfig:
    included: Optional[List[str]] = section.get("included_resources")
    if included is not None and not isinstance(included, list):
        raise ValueError("action 'included_resources' must be a list if provided")

    return ActionConfig(
        name=str(section.get("name", DEFAULT_ACTION_NAME)),
        included_resources=tuple(str(r) for r in included) if included else (VM_RESOURCE,),
        exclude_label=str(section.get("exclude_label", VELERO_EXCLUDE_LABEL)),
        metadata_backup_label=str(
            section.get("metadata_backup_label", METADATA_BACKUP_LABEL)
        ),
    )


def _parse_kubeovn(section: dict) -> Dict[str, Any]:
    unknown = set(section) - _KUBEOVN_KEYS
    if unknown:
        raise ValueError(f"Unsupported kubeovn option(s): {', '.join(sorted(unknown))}")
    return dict(section)


def load_config(path: Path) -> PluginConfig:
    data = yaml.safe_load(path.read_text())
    if data is None:
        return PluginConfig()
    if not isinstance(data, dict):
        raise ValueError("Plugin configuration must be a mapping")

    action_section = data.get("action", {})
    if not isinstance(action_section, dict):
        raise ValueError("'action' section must be a mapping")

    kubeovn_section = data.get("kubeovn", {})
    if not isinstance(kubeovn_section, dict):
        raise ValueError("'kubeovn' section must be a mapping")

    return PluginConfig(
        action=_parse_action(action_section),
        kubeovn=_parse_kubeovn(kubeovn_section),
    )
