"""Kube-OVN annotation helpers."""

from __future__ import annotations

from typing import Dict, Iterable

from .models import AddressRecord, NetInfo


def join_addresses(record: AddressRecord) -> str:
    """Comma-join the IPv4 then IPv6 address, skipping empty ones."""

    return ",".join(ip for ip in (record.ipv4_address, record.ipv6_address) if ip)


def to_net_info(reference: str, record: AddressRecord) -> NetInfo:
    return NetInfo(
        attachment_reference=reference,
        mac_address=record.mac_address,
        ip_addresses=join_addresses(record),
    )


def merge_annotations(infos: Iterable[NetInfo]) -> Dict[str, str]:
    annotations: Dict[str, str] = {}
    for info in infos:
        annotations.update(info.to_annotations())
    return annotations
