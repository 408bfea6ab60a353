from __future__ import annotations

from collections import defaultdict
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from dnsids.data.records import DnsQueryRecord
from dnsids.features.domain_features import extract_base_domain

GroupedRecords = Mapping[str, tuple[DnsQueryRecord, ...]]


def _freeze(groups: dict[str, list[DnsQueryRecord]]) -> GroupedRecords:
    return MappingProxyType({key: tuple(groups[key]) for key in sorted(groups)})


def group_by_ip(records: Iterable[DnsQueryRecord]) -> GroupedRecords:
    """Partition records by client IP. Keys iterate in sorted order."""
    groups: dict[str, list[DnsQueryRecord]] = defaultdict(list)
    for record in records:
        groups[record.client_ip].append(record)
    return _freeze(groups)


def group_by_base_domain(records: Iterable[DnsQueryRecord]) -> GroupedRecords:
    """Partition records by base domain, skipping records without a query name."""
    groups: dict[str, list[DnsQueryRecord]] = defaultdict(list)
    for record in records:
        if not record.query_name:
            continue
        groups[extract_base_domain(record.query_name)].append(record)
    return _freeze(groups)


def time_window(records: Sequence[DnsQueryRecord]) -> int:
    """Seconds spanned by the records, never less than one."""
    if not records:
        return 1
    timestamps = [r.timestamp for r in records]
    return max(1, max(timestamps) - min(timestamps) + 1)


def adaptive_threshold(n: int, divisor: float, floor: float, cap: float) -> float:
    """Scale a threshold with traffic volume: ``n / divisor`` clamped to [floor, cap]."""
    return min(cap, max(floor, n / divisor))
