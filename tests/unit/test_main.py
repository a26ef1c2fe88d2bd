import json
from pathlib import Path

import yaml

from superphenix_plugin.main import main


def write_inputs(tmp_path: Path, network_name="test-ns/test-nad"):
    item = tmp_path / "vm.yaml"
    item.write_text(
        yaml.safe_dump(
            {
                "apiVersion": "kubevirt.io/v1",
                "kind": "VirtualMachine",
                "metadata": {"name": "test-vm", "namespace": "test-ns"},
                "spec": {
                    "template": {
                        "spec": {
                            "networks": [{"name": "net1", "multus": {"networkName": network_name}}],
                        }
                    }
                },
            }
        )
    )
    backup = tmp_path / "backup.json"
    backup.write_text(json.dumps({"metadata": {"name": "nightly"}, "spec": {"includedResources": ["*"]}}))
    records = tmp_path / "ips.yaml"
    records.write_text(
        yaml.safe_dump(
            {
                "test-vm.test-ns": {"spec": {"macAddress": "00:00:00:00:00:01", "v4IpAddress": "10.0.0.1"}},
                "test-vm.test-ns.test-nad.test-ns.ovn": {
                    "spec": {"macAddress": "00:00:00:00:00:02", "v4IpAddress": "10.0.1.2"}
                },
            }
        )
    )
    return item, backup, records


def test_main_prints_annotated_vm(tmp_path: Path, capsys):
    item, backup, records = write_inputs(tmp_path)

    rc = main(["--item", str(item), "--backup", str(backup), "--records", str(records)])

    assert rc == 0
    output = json.loads(capsys.readouterr().out)
    assert output["spec"]["template"]["metadata"]["annotations"] == {
        "test-nad.test-ns.ovn.kubernetes.io/mac_address": "00:00:00:00:00:02",
        "test-nad.test-ns.ovn.kubernetes.io/ip_address": "10.0.1.2",
        "ovn.kubernetes.io/mac_address": "00:00:00:00:00:01",
        "ovn.kubernetes.io/ip_address": "10.0.0.1",
    }


def test_main_uses_configured_action_name(tmp_path: Path, capsys):
    item, backup, records = write_inputs(tmp_path)
    config = tmp_path / "plugin.yaml"
    config.write_text("action:\n  name: example.net/vm\n")

    rc = main(
        [
            "--config", str(config),
            "--item", str(item),
            "--backup", str(backup),
            "--records", str(records),
            "--action", "example.net/vm",
        ]
    )

    assert rc == 0
    assert "ovn.kubernetes.io/ip_address" in capsys.readouterr().out


def test_main_reports_resolution_failure(tmp_path: Path, capsys):
    item, backup, records = write_inputs(tmp_path, network_name="other-ns/test-nad")

    rc = main(["--item", str(item), "--backup", str(backup), "--records", str(records)])

    assert rc == 1
    assert capsys.readouterr().out == ""


def test_main_reports_invalid_config(tmp_path: Path, capsys):
    item, backup, records = write_inputs(tmp_path)
    config = tmp_path / "plugin.yaml"
    config.write_text("- not\n- a mapping\n")

    rc = main(["--config", str(config), "--item", str(item), "--backup", str(backup), "--records", str(records)])

    assert rc == 1
    assert capsys.readouterr().out == ""


def test_main_reports_missing_config(tmp_path: Path, capsys):
    item, backup, records = write_inputs(tmp_path)

    rc = main(
        [
            "--config", str(tmp_path / "absent.yaml"),
            "--item", str(item),
            "--backup", str(backup),
            "--records", str(records),
        ]
    )

    assert rc == 1
    assert capsys.readouterr().out == ""


def test_main_reports_unknown_action(tmp_path: Path, capsys):
    item, backup, records = write_inputs(tmp_path)

    rc = main(
        ["--item", str(item), "--backup", str(backup), "--records", str(records), "--action", "example.net/unknown"]
    )

    assert rc == 1
    assert capsys.readouterr().out == ""
