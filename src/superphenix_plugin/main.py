"""Entry point running the backup item action against a single object.

Velero loads real plugins over gRPC; this command exercises the same action
on a ``VirtualMachine`` and ``Backup`` read from files, which is how the
plugin is driven from backup hooks and debugged in the lab.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from kubeovn_netid.exceptions import NetIdentityError
from kubeovn_netid.resolver import NetIdentityResolver
from kubeovn_netid.store import AddressRecordStore, InMemoryRecordStore

from .action import BackupActionError, build_vm_action
from .backup import Backup
from .config import PluginConfig, load_config
from .kubevirt import KubeVirtClient
from .opts import KUBEOVN_GROUP_NAME, build_store, new_conf
from .registry import ActionRegistry

LOG = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        stream=sys.stderr,
    )


def _load_document(path: Path) -> Any:
    # YAML is a superset of JSON, one loader covers both
    return yaml.safe_load(path.read_text())


def build_registry(
    config: PluginConfig,
    store: AddressRecordStore,
    kubevirt: KubeVirtClient,
) -> ActionRegistry:
    action = build_vm_action(
        NetIdentityResolver(store),
        kubevirt.is_vmi_excluded_by_label,
        included_resources=config.action.included_resources,
        metadata_backup_label=config.action.metadata_backup_label,
        volume_excluded=kubevirt.is_volume_excluded_by_label,
    )
    registry = ActionRegistry()
    registry.register(config.action.name, action)
    return registry


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Annotate a VirtualMachine with its Kube-OVN addresses"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to the plugin configuration file",
    )
    parser.add_argument(
        "--item",
        type=Path,
        required=True,
        help="VirtualMachine object (JSON or YAML)",
    )
    parser.add_argument(
        "--backup",
        type=Path,
        required=True,
        help="Velero Backup object (JSON or YAML)",
    )
    parser.add_argument(
        "--records",
        type=Path,
        help="Resolve addresses from a file mapping IP names to IP resources "
             "instead of the cluster",
    )
    parser.add_argument(
        "--action",
        help="Registered action name to run (defaults to the configured one)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        config = load_config(args.config) if args.config else PluginConfig()
        conf = new_conf()
        config.apply(conf)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        LOG.error("Invalid configuration %s: %s", args.config, exc)
        return 1

    if args.records:
        records = _load_document(args.records) or {}
        if not isinstance(records, dict):
            parser.error("--records must contain a mapping of IP names")
        store: AddressRecordStore = InMemoryRecordStore.from_resources(records)
    else:
        store = build_store(conf)

    kubeovn = conf[KUBEOVN_GROUP_NAME]
    kubevirt = KubeVirtClient(
        kubeconfig=kubeovn.kubeconfig,
        context=kubeovn.context,
        exclude_label=config.action.exclude_label,
    )
    registry = build_registry(config, store, kubevirt)

    action_name = args.action or config.action.name
    if action_name not in registry.names():
        LOG.error("Unknown action %s, registered: %s", action_name, ", ".join(registry.names()))
        return 1

    item = _load_document(args.item)
    backup = Backup.from_unstructured(_load_document(args.backup) or {})

    try:
        output, _ = registry.execute(action_name, item, backup)
    except (NetIdentityError, BackupActionError) as exc:
        LOG.error("Backup of %s failed: %s", args.item, exc)
        return 1

    json.dump(output, sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
