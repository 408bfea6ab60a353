from __future__ import annotations

import logging
import time
from typing import Iterable, Sequence

from dnsids.data.records import DnsQueryRecord
from dnsids.data.store import RecordSource
from dnsids.features.grouping import group_by_ip
from dnsids.models.alerts import AnalysisReport, ThreatAlert, ThreatType
from dnsids.models.detectors import Detector, default_detectors
from dnsids.models.explain import (
    NO_QUERIES_RECOMMENDATION,
    build_recommendation,
    classify_attack,
    severity_from_score,
)

logger = logging.getLogger(__name__)


def sort_threats(threats: Iterable[ThreatAlert]) -> list[ThreatAlert]:
    """Highest risk first; ties broken by source IP then category."""
    return sorted(threats, key=lambda t: (-t.risk_score, t.source_ip, t.type.value))


class ThreatAnalyzer:
    """Runs every registered detector over one record batch and builds the report.

    The analyzer keeps no state between calls beyond its detector list.
    """

    def __init__(self, source: RecordSource, detectors: Sequence[Detector] | None = None) -> None:
        self.source = source
        self.detectors: list[Detector] = list(detectors) if detectors is not None else default_detectors()

    def register(self, detector: Detector) -> None:
        self.detectors.append(detector)

    def analyze(self) -> AnalysisReport:
        return self.analyze_records(self.source.fetch_all())

    def analyze_records(self, records: Sequence[DnsQueryRecord]) -> AnalysisReport:
        started = time.perf_counter()
        if not records:
            logger.info("No records to analyze")
            return AnalysisReport(
                attack_type="NONE",
                queries_analyzed=0,
                threats_detected=0,
                threats=(),
                risk_score=0,
                severity="NONE",
                recommendation=NO_QUERIES_RECOMMENDATION,
                analysis_time_ms=_elapsed_ms(started),
            )

        grouped = group_by_ip(records)
        logger.info("Analyzing %d records from %d source IPs", len(records), len(grouped))

        collected: list[ThreatAlert] = []
        fired: list[ThreatType] = []
        for detector in self.detectors:
            alerts = detector.detect(grouped)
            logger.debug("%s produced %d alert(s)", type(detector).__name__, len(alerts))
            if alerts and detector.category not in fired:
                fired.append(detector.category)
            collected.extend(alerts)

        threats = sort_threats(collected)
        risk_score = max((t.risk_score for t in threats), default=0)
        report = AnalysisReport(
            attack_type=classify_attack(fired),
            queries_analyzed=len(records),
            threats_detected=len(threats),
            threats=tuple(threats),
            risk_score=risk_score,
            severity=severity_from_score(risk_score),
            recommendation=build_recommendation(threats),
            analysis_time_ms=_elapsed_ms(started),
        )
        logger.info(
            "Analysis finished: %s, %d threat(s), risk=%d (%s)",
            report.attack_type,
            report.threats_detected,
            report.risk_score,
            report.severity,
        )
        return report


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
