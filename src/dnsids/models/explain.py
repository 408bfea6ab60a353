from __future__ import annotations

from typing import Collection, Sequence

from dnsids.models.alerts import ThreatAlert, ThreatType

NO_QUERIES_RECOMMENDATION = "No queries found in the record store. Generate a dataset first."
NO_THREATS_RECOMMENDATION = "No threats detected. All DNS queries appear normal."

MULTIPLE_ATTACKS = "MULTIPLE_ATTACKS_DETECTED"
NO_THREATS = "NO_THREATS_DETECTED"

REMEDIATION: dict[ThreatType, tuple[str, list[str]]] = {
    ThreatType.DNS_DATA_EXFILTRATION: (
        "DNS data exfiltration / tunneling",
        [
            "Isolate the source host and review running processes for tunneling tools",
            "Block or sinkhole the base domains receiving encoded subdomains",
            "Restrict TXT lookups from clients that have no business need for them",
            "Enforce egress DNS through monitored resolvers only",
            "Preserve query logs for incident response",
        ],
    ),
    ThreatType.DNS_AMPLIFICATION: (
        "DNS amplification attack (critical)",
        [
            "Enable Response Rate Limiting (RRL) immediately",
            "Block or severely rate-limit ANY queries",
            "Disable recursion on authoritative nameservers",
            "Apply BCP38 anti-spoofing filters at the network edge",
            "Enable DNS cookies (RFC 7873) to resist source address spoofing",
            "Watch outbound traffic for reflection toward victim addresses",
            "Consider dropping UDP responses larger than 512 bytes",
            "Alert the SOC/NOC, this may be part of an active DDoS campaign",
            "Check whether the server appears on open resolver lists",
        ],
    ),
    ThreatType.RANDOM_SUBDOMAIN_ATTACK: (
        "Random subdomain attack",
        [
            "Rate-limit queries per base domain for the attacking IP",
            "Block queries with high-entropy random subdomains",
            "Enable response rate limiting (RRL) on DNS servers",
            "Check for DNS tunneling or data exfiltration from the same source",
            "Consider QNAME minimization",
            "Add DNS firewall rules for the observed name patterns",
        ],
    ),
    ThreatType.NXDOMAIN_FLOOD: (
        "NXDOMAIN flood",
        [
            "Block or rate-limit the attacking IP addresses",
            "Investigate for DNS tunneling or data exfiltration",
            "Check the source for malware or botnet activity",
            "Enable NXDOMAIN rate limiting on DNS servers",
            "Monitor for reconnaissance or scanning",
        ],
    ),
    ThreatType.FLOODING: (
        "DNS flooding",
        [
            "Rate-limit the detected IP addresses",
            "Block or throttle these IPs temporarily",
            "Monitor for continued attack patterns",
            "Add firewall rules limiting per-source DNS volume",
        ],
    ),
}

# Dict order above is the priority order of the recommendation blocks.
RECOMMENDATION_ORDER = list(REMEDIATION)


def severity_from_score(score: int) -> str:
    if score >= 90:
        return "CRITICAL"
    if score >= 75:
        return "HIGH"
    if score >= 50:
        return "MEDIUM"
    if score > 0:
        return "LOW"
    return "NONE"


def classify_attack(fired: Collection[ThreatType]) -> str:
    if len(fired) > 1:
        return MULTIPLE_ATTACKS
    if len(fired) == 1:
        return next(iter(fired)).value
    return NO_THREATS


def build_recommendation(threats: Sequence[ThreatAlert]) -> str:
    if not threats:
        return NO_THREATS_RECOMMENDATION
    present = {t.type for t in threats}
    blocks = [f"Detected {len(threats)} threat(s). Recommended actions:"]
    for category in RECOMMENDATION_ORDER:
        if category not in present:
            continue
        title, steps = REMEDIATION[category]
        lines = [f"{title}:"]
        lines.extend(f"{i}. {step}" for i, step in enumerate(steps, 1))
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)
