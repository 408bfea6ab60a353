from __future__ import annotations

from dnsids.data.records import DnsQueryRecord
from dnsids.features.grouping import group_by_ip
from dnsids.models.alerts import ThreatType
from dnsids.models.detectors import (
    AmplificationDetector,
    ExfiltrationDetector,
    FloodingDetector,
    NxdomainFloodDetector,
    RandomSubdomainDetector,
    is_suspicious_subdomain,
)

BASE_TS = 1_700_000_000


def _rec(
    ip: str,
    name: str | None = "www.example.com",
    ts: int = BASE_TS,
    **kwargs: object,
) -> DnsQueryRecord:
    params: dict[str, object] = {"query_type": "A", "raw_length": 120, "query_size": 40}
    params.update(kwargs)
    return DnsQueryRecord(timestamp=ts, client_ip=ip, client_port=40000, query_name=name, **params)  # type: ignore[arg-type]


def _background(count: int) -> list[DnsQueryRecord]:
    return [_rec(f"10.0.1.{i % 50}", ts=BASE_TS + i) for i in range(count)]


def test_flooding_scenario_single_ip_burst() -> None:
    records = [_rec("10.9.9.9") for _ in range(150)] + _background(350)
    alerts = FloodingDetector().detect(group_by_ip(records))
    assert len(alerts) == 1
    alert = alerts[0]
    assert alert.type == ThreatType.FLOODING
    assert alert.source_ip == "10.9.9.9"
    # 150 q/s sits on the lowest tier; the 75 tier starts above 150.
    assert alert.risk_score == 70
    assert "150 queries/sec" in alert.description


def test_flooding_score_bounds_for_heavier_bursts() -> None:
    records = [_rec("10.9.9.9") for _ in range(600)]
    alerts = FloodingDetector().detect(group_by_ip(records))
    assert alerts[0].risk_score == 95
    assert 70 <= alerts[0].risk_score <= 95


def test_flooding_ignores_spread_out_traffic() -> None:
    records = [_rec("10.9.9.9", ts=BASE_TS + i // 50) for i in range(500)]
    assert FloodingDetector().detect(group_by_ip(records)) == []


def test_nxdomain_ratio_alone_triggers() -> None:
    records = [
        _rec("10.2.2.2", name=f"n{i}.missing.test", ts=BASE_TS + i, response_code=3 if i < 11 else 0)
        for i in range(15)
    ]
    alerts = NxdomainFloodDetector().detect(group_by_ip(records))
    assert len(alerts) == 1
    assert alerts[0].type == ThreatType.NXDOMAIN_FLOOD
    assert alerts[0].risk_score == 75


def test_nxdomain_requires_more_than_ten_failures_for_ratio_rule() -> None:
    records = [_rec("10.2.2.2", ts=BASE_TS + i, response_code=3) for i in range(10)]
    assert NxdomainFloodDetector().detect(group_by_ip(records)) == []


def test_nxdomain_rate_rule() -> None:
    records = [_rec("10.2.2.2", response_code=3 if i < 40 else 0) for i in range(100)]
    alerts = NxdomainFloodDetector().detect(group_by_ip(records))
    assert alerts[0].risk_score == 90


def test_random_subdomain_scenario() -> None:
    names = [f"s{i}.victim.com" for i in range(40)] + ["s0.victim.com"] * 5
    records = [_rec("10.3.3.3", name=name) for name in names]
    alerts = RandomSubdomainDetector().detect(group_by_ip(records))
    assert len(alerts) == 1
    alert = alerts[0]
    assert alert.type == ThreatType.RANDOM_SUBDOMAIN_ATTACK
    assert "victim.com" in alert.description
    # base 70, no unique/ratio bonus at 40 names / 88.9 %, +5 for 45 q/s
    assert alert.risk_score == 75


def test_random_subdomain_skips_missing_names_and_low_uniqueness() -> None:
    records = [_rec("10.3.3.3", name=f"s{i % 20}.victim.com") for i in range(60)]
    records += [_rec("10.3.3.3", name=None), _rec("10.3.3.3", name="")]
    assert RandomSubdomainDetector().detect(group_by_ip(records)) == []


def test_amplification_any_queries() -> None:
    records = [
        _rec("10.4.4.4", name="isc.org", query_type="ANY", raw_length=3000, query_size=30)
        for _ in range(20)
    ]
    alerts = AmplificationDetector().detect(group_by_ip(records))
    assert len(alerts) == 1
    alert = alerts[0]
    assert alert.type == ThreatType.DNS_AMPLIFICATION
    assert "Large responses: 20 queries" in alert.description
    assert "Suspicious ANY queries: 20 queries" in alert.description
    assert "High amplification" in alert.description
    # large >10: 10, ANY >10: 20, avg 100x: 20, max exactly 100x: no bonus
    assert alert.risk_score == 50


def test_amplification_tcp_fallback_only() -> None:
    records = [_rec("10.4.4.4", protocol="tcp") for _ in range(6)] + [_rec("10.4.4.4") for _ in range(30)]
    alerts = AmplificationDetector().detect(group_by_ip(records))
    assert len(alerts) == 1
    assert "TCP fallback pattern: 6 TCP queries" in alerts[0].description


def test_amplification_ignores_ordinary_traffic() -> None:
    records = [_rec("10.4.4.4", ts=BASE_TS + i) for i in range(40)]
    assert AmplificationDetector().detect(group_by_ip(records)) == []


def test_exfiltration_long_subdomains() -> None:
    records = [_rec("10.5.5.5", name=("a" * 60) + ".tunnel.net", ts=BASE_TS + i) for i in range(5)]
    alerts = ExfiltrationDetector().detect(group_by_ip(records))
    assert len(alerts) == 1
    alert = alerts[0]
    assert alert.type == ThreatType.DNS_DATA_EXFILTRATION
    # 5 suspicious: 10, max length 60: 5, zero entropy / TXT / unique bonus
    assert alert.risk_score == 15


def test_exfiltration_txt_ratio() -> None:
    records = [_rec("10.5.5.5", query_type="TXT" if i < 4 else "A", ts=BASE_TS + i) for i in range(10)]
    alerts = ExfiltrationDetector().detect(group_by_ip(records))
    assert len(alerts) == 1
    assert "4 TXT queries" in alerts[0].description
    assert alerts[0].risk_score == 0


def test_exfiltration_unique_subdomains_per_domain() -> None:
    records = [_rec("10.5.5.5", name=f"c{i}.drop.io", ts=BASE_TS + i) for i in range(12)]
    alerts = ExfiltrationDetector().detect(group_by_ip(records))
    assert len(alerts) == 1
    assert "12 unique subdomains under 'drop.io'" in alerts[0].description


def test_exfiltration_ignores_plain_names() -> None:
    records = [_rec("10.5.5.5", ts=BASE_TS + i) for i in range(30)] + [_rec("10.5.5.5", name=None)]
    assert ExfiltrationDetector().detect(group_by_ip(records)) == []


def test_suspicious_subdomain_rules() -> None:
    assert not is_suspicious_subdomain("")
    assert not is_suspicious_subdomain("www")
    assert is_suspicious_subdomain("x" * 51)
    assert is_suspicious_subdomain("dGhpcyBpcyBzZWNyZXQgZGF0YQ")
