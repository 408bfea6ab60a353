from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum


class ThreatType(str, Enum):
    FLOODING = "FLOODING"
    NXDOMAIN_FLOOD = "NXDOMAIN_FLOOD"
    RANDOM_SUBDOMAIN_ATTACK = "RANDOM_SUBDOMAIN_ATTACK"
    DNS_AMPLIFICATION = "DNS_AMPLIFICATION"
    DNS_DATA_EXFILTRATION = "DNS_DATA_EXFILTRATION"


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ThreatAlert:
    type: ThreatType
    source_ip: str
    description: str
    risk_score: int
    timestamp: int = field(default_factory=now_ms)

    def __post_init__(self) -> None:
        if not 0 <= self.risk_score <= 100:
            raise ValueError(f"risk_score must be within [0, 100], got {self.risk_score}")


@dataclass(frozen=True)
class AnalysisReport:
    attack_type: str
    queries_analyzed: int
    threats_detected: int
    threats: tuple[ThreatAlert, ...]
    risk_score: int
    severity: str
    recommendation: str
    analysis_time_ms: int
    timestamp: int = field(default_factory=now_ms)
