from __future__ import annotations

from typing import Sequence

Bands = Sequence[tuple[float, int]]

MAX_SCORE = 100

SUBDOMAIN_BASE_SCORE = 70
UNIQUE_SUBDOMAIN_BANDS: Bands = [(100, 15), (70, 10), (50, 5)]
UNIQUENESS_RATIO_BANDS: Bands = [(0.95, 10), (0.9, 5)]
SUBDOMAIN_RATE_BANDS: Bands = [(50, 10), (30, 5)]

LARGE_RESPONSE_BANDS: Bands = [(100, 25), (50, 20), (20, 15), (10, 10)]
ANY_QUERY_BANDS: Bands = [(50, 30), (30, 25), (10, 20), (0, 10)]
TCP_QUERY_BANDS: Bands = [(50, 20), (30, 15), (15, 10)]
AMPLIFICATION_RATIO_BANDS: Bands = [(50, 20), (30, 15), (10, 10), (5, 5)]
EXTREME_AMPLIFICATION = 100
EXTREME_AMPLIFICATION_BONUS = 5

SUSPICIOUS_RECORD_BANDS: Bands = [(50, 25), (30, 20), (10, 15), (0, 10)]
ENTROPY_BANDS: Bands = [(5.5, 20), (5.0, 15), (4.5, 10)]
SUBDOMAIN_LENGTH_BANDS: Bands = [(100, 15), (70, 10), (50, 5)]
TXT_QUERY_BANDS: Bands = [(50, 20), (30, 15), (15, 10)]
EXFIL_UNIQUE_SUBDOMAIN_BANDS: Bands = [(100, 15), (60, 10), (40, 5)]


def clamp_score(score: float) -> int:
    return int(max(0, min(MAX_SCORE, score)))


def band_bonus(value: float, bands: Bands) -> int:
    """Points for the first band whose (exclusive) lower bound ``value`` exceeds."""
    for bound, points in bands:
        if value > bound:
            return points
    return 0


def flooding_risk_score(queries_per_sec: float) -> int:
    if queries_per_sec > 500:
        return 95
    if queries_per_sec > 300:
        return 90
    if queries_per_sec > 200:
        return 85
    if queries_per_sec > 150:
        return 75
    return 70


def nxdomain_risk_score(nxdomain_per_sec: float, ratio: float) -> int:
    if nxdomain_per_sec > 50:
        return 95
    if nxdomain_per_sec > 30:
        return 90
    if ratio > 0.9:
        return 85
    if ratio > 0.8:
        return 80
    if ratio > 0.7:
        return 75
    return 70


def subdomain_risk_score(unique_count: int, uniqueness_ratio: float, queries_per_sec: float) -> int:
    score = SUBDOMAIN_BASE_SCORE
    score += band_bonus(unique_count, UNIQUE_SUBDOMAIN_BANDS)
    score += band_bonus(uniqueness_ratio, UNIQUENESS_RATIO_BANDS)
    score += band_bonus(queries_per_sec, SUBDOMAIN_RATE_BANDS)
    return clamp_score(score)


def amplification_risk_score(
    large_count: int,
    any_count: int,
    tcp_count: int,
    avg_amplification: float,
    max_amplification: float,
) -> int:
    score = band_bonus(large_count, LARGE_RESPONSE_BANDS)
    score += band_bonus(any_count, ANY_QUERY_BANDS)
    score += band_bonus(tcp_count, TCP_QUERY_BANDS)
    score += band_bonus(avg_amplification, AMPLIFICATION_RATIO_BANDS)
    if max_amplification > EXTREME_AMPLIFICATION:
        score += EXTREME_AMPLIFICATION_BONUS
    return clamp_score(score)


def exfiltration_risk_score(
    suspicious_count: int,
    max_entropy: float,
    max_subdomain_length: int,
    txt_count: int,
    max_unique_subdomains: int,
) -> int:
    score = band_bonus(suspicious_count, SUSPICIOUS_RECORD_BANDS)
    score += band_bonus(max_entropy, ENTROPY_BANDS)
    score += band_bonus(max_subdomain_length, SUBDOMAIN_LENGTH_BANDS)
    score += band_bonus(txt_count, TXT_QUERY_BANDS)
    score += band_bonus(max_unique_subdomains, EXFIL_UNIQUE_SUBDOMAIN_BANDS)
    return clamp_score(score)
