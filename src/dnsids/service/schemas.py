from __future__ import annotations

from pydantic import BaseModel, Field

from dnsids.models.alerts import AnalysisReport, ThreatAlert


class ThreatAlertResponse(BaseModel):
    type: str
    source_ip: str
    description: str
    risk_score: int = Field(ge=0, le=100)
    timestamp: int

    @classmethod
    def from_alert(cls, alert: ThreatAlert) -> ThreatAlertResponse:
        return cls(
            type=alert.type.value,
            source_ip=alert.source_ip,
            description=alert.description,
            risk_score=alert.risk_score,
            timestamp=alert.timestamp,
        )


class AnalysisResponse(BaseModel):
    attack_type: str
    queries_analyzed: int = Field(ge=0)
    threats_detected: int = Field(ge=0)
    threats: list[ThreatAlertResponse]
    risk_score: int = Field(ge=0, le=100)
    severity: str
    recommendation: str
    analysis_time_ms: int
    timestamp: int

    @classmethod
    def from_report(cls, report: AnalysisReport) -> AnalysisResponse:
        return cls(
            attack_type=report.attack_type,
            queries_analyzed=report.queries_analyzed,
            threats_detected=report.threats_detected,
            threats=[ThreatAlertResponse.from_alert(t) for t in report.threats],
            risk_score=report.risk_score,
            severity=report.severity,
            recommendation=report.recommendation,
            analysis_time_ms=report.analysis_time_ms,
            timestamp=report.timestamp,
        )


class GenerateResponse(BaseModel):
    message: str
    query_count: int
