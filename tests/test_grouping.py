from __future__ import annotations

import pytest

from dnsids.data.records import DnsQueryRecord
from dnsids.features.grouping import adaptive_threshold, group_by_base_domain, group_by_ip, time_window


def _rec(ip: str, name: str | None, ts: int = 1000) -> DnsQueryRecord:
    return DnsQueryRecord(timestamp=ts, client_ip=ip, client_port=5353, query_name=name, query_type="A")


def test_group_by_ip_partitions_and_sorts_keys() -> None:
    records = [_rec("10.0.0.2", "a.com"), _rec("10.0.0.1", "b.com"), _rec("10.0.0.2", "c.com")]
    grouped = group_by_ip(records)
    assert list(grouped) == ["10.0.0.1", "10.0.0.2"]
    assert [r.query_name for r in grouped["10.0.0.2"]] == ["a.com", "c.com"]


def test_grouping_is_read_only() -> None:
    grouped = group_by_ip([_rec("10.0.0.1", "a.com")])
    with pytest.raises(TypeError):
        grouped["10.0.0.9"] = ()  # type: ignore[index]


def test_group_by_base_domain_skips_missing_names() -> None:
    records = [
        _rec("10.0.0.1", "x.example.com"),
        _rec("10.0.0.1", "y.example.com."),
        _rec("10.0.0.1", None),
        _rec("10.0.0.1", ""),
        _rec("10.0.0.1", "www.other.org"),
    ]
    grouped = group_by_base_domain(records)
    assert set(grouped) == {"example.com", "other.org"}
    assert len(grouped["example.com"]) == 2


def test_time_window_has_one_second_floor() -> None:
    assert time_window([_rec("10.0.0.1", "a.com", ts=5)] * 3) == 1
    assert time_window([_rec("10.0.0.1", "a.com", ts=5), _rec("10.0.0.1", "a.com", ts=14)]) == 10
    assert time_window([]) == 1


@pytest.mark.parametrize(
    ("n", "divisor", "floor", "cap", "expected"),
    [
        (10, 5, 5, 20, 5),
        (50, 5, 5, 20, 10),
        (500, 5, 5, 20, 20),
        (14, 7, 3, 15, 3),
        (70, 2, 5, 40, 35),
    ],
)
def test_adaptive_threshold_clamps(n: int, divisor: float, floor: float, cap: float, expected: float) -> None:
    assert adaptive_threshold(n, divisor, floor, cap) == expected
