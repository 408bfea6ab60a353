from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

import numpy as np

from dnsids.data.records import DnsQueryRecord
from dnsids.features.domain_features import (
    extract_subdomain,
    looks_encoded,
    shannon_entropy,
)
from dnsids.features.grouping import (
    GroupedRecords,
    adaptive_threshold,
    group_by_base_domain,
    time_window,
)
from dnsids.models.alerts import ThreatAlert, ThreatType
from dnsids.models.scoring import (
    amplification_risk_score,
    exfiltration_risk_score,
    flooding_risk_score,
    nxdomain_risk_score,
    subdomain_risk_score,
)


FLOODING_THRESHOLD = 100  # queries/sec from one IP

NXDOMAIN_RATE_THRESHOLD = 20  # NXDOMAIN/sec
NXDOMAIN_RATIO_THRESHOLD = 0.7
NXDOMAIN_MIN_COUNT = 10

SUBDOMAIN_UNIQUE_THRESHOLD = 30
SUBDOMAIN_UNIQUENESS_RATIO = 0.8

LARGE_RESPONSE_BYTES = 512  # classic UDP DNS payload limit
LARGE_RESPONSE_RATIO = 0.5
ANY_QUERY_RATIO = 0.3
AMPLIFICATION_RATIO_THRESHOLD = 5.0

EXFIL_SUBDOMAIN_LENGTH = 50
EXFIL_ENTROPY_THRESHOLD = 4.5
TXT_QUERY_RATIO = 0.4
MAX_EXAMPLES = 3


class Detector(Protocol):
    category: ThreatType

    def detect(self, grouped: GroupedRecords) -> list[ThreatAlert]: ...


class FloodingDetector:
    """Flags IPs whose average query rate reaches the flooding threshold."""

    category = ThreatType.FLOODING

    def __init__(self, threshold: float = FLOODING_THRESHOLD) -> None:
        self.threshold = threshold

    def detect(self, grouped: GroupedRecords) -> list[ThreatAlert]:
        alerts: list[ThreatAlert] = []
        for ip, records in grouped.items():
            window = time_window(records)
            rate = len(records) / window
            if rate < self.threshold:
                continue
            alerts.append(
                ThreatAlert(
                    type=self.category,
                    source_ip=ip,
                    description=(
                        f"High volume flooding detected: {rate:.0f} queries/sec from {ip} "
                        f"(threshold: {self.threshold:g}/sec). Total queries: {len(records)} "
                        f"over {window} seconds."
                    ),
                    risk_score=flooding_risk_score(rate),
                )
            )
        return alerts


class NxdomainFloodDetector:
    category = ThreatType.NXDOMAIN_FLOOD

    def detect(self, grouped: GroupedRecords) -> list[ThreatAlert]:
        alerts: list[ThreatAlert] = []
        for ip, records in grouped.items():
            nx_count = sum(1 for r in records if r.is_nxdomain)
            if nx_count == 0:
                continue
            ratio = nx_count / len(records)
            window = time_window(records)
            rate = nx_count / window
            high_rate = rate >= NXDOMAIN_RATE_THRESHOLD
            high_ratio = ratio >= NXDOMAIN_RATIO_THRESHOLD and nx_count > NXDOMAIN_MIN_COUNT
            if not (high_rate or high_ratio):
                continue
            alerts.append(
                ThreatAlert(
                    type=self.category,
                    source_ip=ip,
                    description=(
                        f"NXDOMAIN flood detected from {ip}: {rate:.0f} NXDOMAIN/sec "
                        f"({ratio:.1%} of queries). Total NXDOMAIN: {nx_count}/{len(records)} "
                        f"queries over {window} seconds. This may indicate DNS tunneling "
                        f"or reconnaissance."
                    ),
                    risk_score=nxdomain_risk_score(rate, ratio),
                )
            )
        return alerts


class RandomSubdomainDetector:
    """Many distinct names under one base domain defeat resolver caching (water torture)."""

    category = ThreatType.RANDOM_SUBDOMAIN_ATTACK

    def detect(self, grouped: GroupedRecords) -> list[ThreatAlert]:
        alerts: list[ThreatAlert] = []
        for ip, records in grouped.items():
            for base_domain, domain_records in group_by_base_domain(records).items():
                total = len(domain_records)
                unique_count = len({r.query_name for r in domain_records})
                uniqueness = unique_count / total
                if unique_count < SUBDOMAIN_UNIQUE_THRESHOLD or uniqueness < SUBDOMAIN_UNIQUENESS_RATIO:
                    continue
                window = time_window(domain_records)
                rate = total / window
                alerts.append(
                    ThreatAlert(
                        type=self.category,
                        source_ip=ip,
                        description=(
                            f"Random subdomain attack detected from {ip} targeting '{base_domain}': "
                            f"{unique_count} unique names out of {total} queries "
                            f"({uniqueness:.1%} unique) over {window} seconds. "
                            f"Rate: {rate:.1f} queries/sec. This pattern bypasses DNS caching "
                            f"and loads the authoritative servers."
                        ),
                        risk_score=subdomain_risk_score(unique_count, uniqueness, rate),
                    )
                )
        return alerts


@dataclass
class AmplificationStats:
    total: int
    large_count: int
    any_count: int
    tcp_count: int
    avg_amplification: float
    max_amplification: float

    @property
    def large_ratio(self) -> float:
        return self.large_count / self.total

    @property
    def any_ratio(self) -> float:
        return self.any_count / self.total

    @property
    def tcp_ratio(self) -> float:
        return self.tcp_count / self.total


def amplification_stats(records: Sequence[DnsQueryRecord]) -> AmplificationStats:
    large = [r for r in records if r.raw_length > LARGE_RESPONSE_BYTES]
    ratios = np.array(
        [r.raw_length / r.query_size for r in large if r.query_size > 0],
        dtype=np.float64,
    )
    return AmplificationStats(
        total=len(records),
        large_count=len(large),
        any_count=sum(1 for r in records if r.query_type == "ANY"),
        tcp_count=sum(1 for r in records if r.protocol.upper() == "TCP"),
        avg_amplification=float(ratios.mean()) if ratios.size else 0.0,
        max_amplification=float(ratios.max()) if ratios.size else 0.0,
    )


class AmplificationDetector:
    """Reflection/amplification: large responses, ANY queries and TCP fallback.

    Count thresholds scale with the IP's own volume so that a handful of
    large answers from a chatty resolver is not flagged, while a low-volume
    source sending mostly ANY queries still is.
    """

    category = ThreatType.DNS_AMPLIFICATION

    def matched_patterns(self, stats: AmplificationStats) -> list[str]:
        n = stats.total
        large_threshold = adaptive_threshold(n, 5, 5, 20)
        any_threshold = adaptive_threshold(n, 10, 3, 10)
        tcp_threshold = adaptive_threshold(n, 7, 5, 15)

        patterns: list[str] = []
        if stats.large_count >= large_threshold or stats.large_ratio >= LARGE_RESPONSE_RATIO:
            patterns.append(
                f"Large responses: {stats.large_count} queries ({stats.large_ratio:.1%}) "
                f"exceed {LARGE_RESPONSE_BYTES} bytes"
            )
        if stats.any_count >= any_threshold or stats.any_ratio >= ANY_QUERY_RATIO:
            patterns.append(
                f"Suspicious ANY queries: {stats.any_count} queries ({stats.any_ratio:.1%} of total)"
            )
        if stats.tcp_count >= tcp_threshold:
            patterns.append(
                f"TCP fallback pattern: {stats.tcp_count} TCP queries ({stats.tcp_ratio:.1%}), "
                f"indicates oversized UDP responses"
            )
        if stats.large_count >= large_threshold and stats.avg_amplification > AMPLIFICATION_RATIO_THRESHOLD:
            patterns.append(
                f"High amplification from single IP: {stats.large_count} large responses "
                f"with avg {stats.avg_amplification:.1f}x amplification"
            )
        return patterns

    def detect(self, grouped: GroupedRecords) -> list[ThreatAlert]:
        alerts: list[ThreatAlert] = []
        for ip, records in grouped.items():
            stats = amplification_stats(records)
            patterns = self.matched_patterns(stats)
            if not patterns:
                continue
            window = time_window(records)
            avg_size = float(np.mean([r.raw_length for r in records]))
            lines = [
                f"DNS amplification attack from {ip}",
                f"Total queries: {stats.total} over {window} seconds "
                f"({stats.total / window:.1f} queries/sec)",
                f"Average response size: {avg_size:.0f} bytes",
                "Detected patterns:",
            ]
            lines.extend(f"  {i}. {pattern}" for i, pattern in enumerate(patterns, 1))
            if stats.avg_amplification > 0:
                lines.append(
                    f"Amplification ratio: avg {stats.avg_amplification:.1f}x | "
                    f"max {stats.max_amplification:.1f}x"
                )
            alerts.append(
                ThreatAlert(
                    type=self.category,
                    source_ip=ip,
                    description="\n".join(lines),
                    risk_score=amplification_risk_score(
                        stats.large_count,
                        stats.any_count,
                        stats.tcp_count,
                        stats.avg_amplification,
                        stats.max_amplification,
                    ),
                )
            )
        return alerts


def is_suspicious_subdomain(subdomain: str) -> bool:
    if not subdomain:
        return False
    return (
        len(subdomain) > EXFIL_SUBDOMAIN_LENGTH
        or shannon_entropy(subdomain) > EXFIL_ENTROPY_THRESHOLD
        or looks_encoded(subdomain)
    )


class ExfiltrationDetector:
    """Data smuggled out through query names (long/random/encoded labels) or TXT lookups."""

    category = ThreatType.DNS_DATA_EXFILTRATION

    def detect(self, grouped: GroupedRecords) -> list[ThreatAlert]:
        alerts: list[ThreatAlert] = []
        for ip, records in grouped.items():
            alert = self._analyze_ip(ip, records)
            if alert is not None:
                alerts.append(alert)
        return alerts

    def _analyze_ip(self, ip: str, records: Sequence[DnsQueryRecord]) -> ThreatAlert | None:
        n = len(records)
        named = [r for r in records if r.query_name]

        subdomains = [extract_subdomain(r.query_name) for r in named]
        suspicious = [r.query_name for r, sub in zip(named, subdomains) if is_suspicious_subdomain(sub)]
        max_entropy = max((shannon_entropy(sub) for sub in subdomains), default=0.0)
        max_length = max((len(sub) for sub in subdomains), default=0)

        unique_threshold = adaptive_threshold(n, 2, 5, 40)
        unique_by_domain = {
            domain: len({extract_subdomain(r.query_name) for r in domain_records} - {""})
            for domain, domain_records in group_by_base_domain(named).items()
        }
        flagged_domains = [d for d, count in unique_by_domain.items() if count >= unique_threshold]
        max_unique = max(unique_by_domain.values(), default=0)

        txt_count = sum(1 for r in records if r.query_type == "TXT")
        txt_ratio = txt_count / n
        txt_threshold = adaptive_threshold(n, 7, 3, 15)
        txt_flagged = txt_count >= txt_threshold or txt_ratio >= TXT_QUERY_RATIO

        if not (suspicious or flagged_domains or txt_flagged):
            return None

        findings: list[str] = []
        if suspicious:
            examples = ", ".join(name[:80] for name in suspicious[:MAX_EXAMPLES])
            findings.append(f"{len(suspicious)} queries with long, random or encoded subdomains (e.g. {examples})")
        for domain in flagged_domains:
            findings.append(f"{unique_by_domain[domain]} unique subdomains under '{domain}'")
        if txt_flagged:
            findings.append(f"{txt_count} TXT queries ({txt_ratio:.1%} of total)")

        lines = [f"Possible DNS data exfiltration/tunneling from {ip} across {n} queries:"]
        lines.extend(f"  - {finding}" for finding in findings)
        lines.append(f"Max subdomain entropy: {max_entropy:.2f} bits | max subdomain length: {max_length}")

        return ThreatAlert(
            type=self.category,
            source_ip=ip,
            description="\n".join(lines),
            risk_score=exfiltration_risk_score(len(suspicious), max_entropy, max_length, txt_count, max_unique),
        )


def default_detectors() -> list[Detector]:
    return [
        FloodingDetector(),
        NxdomainFloodDetector(),
        RandomSubdomainDetector(),
        AmplificationDetector(),
        ExfiltrationDetector(),
    ]
