from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass

from dnsids.data.records import NXDOMAIN_RCODE, DnsQueryRecord

NORMAL_DOMAINS = ["google.com", "facebook.com", "youtube.com", "amazon.com", "twitter.com"]
SUBDOMAIN_PREFIXES = ["api", "data", "user", "cdn", "img", "login", "shop"]
RANDOM_CHARS = string.ascii_lowercase + string.digits
ENCODED_CHARS = string.ascii_letters + string.digits + "-_"

FLOODING_IP = "192.168.1.100"
NXDOMAIN_IP = "192.168.1.150"
SUBDOMAIN_IP = "192.168.1.200"
AMPLIFICATION_IP = "192.168.1.250"
EXFILTRATION_IP = "192.168.1.66"

NXDOMAIN_TARGET = "nonexistentdomain.xyz"
SUBDOMAIN_TARGET = "attacksite.com"
AMPLIFICATION_TARGET = "isc.org"
EXFILTRATION_TARGET = "exfil-tunnel.net"


@dataclass
class DatasetMix:
    """Share of the total assigned to each attack archetype; normal traffic gets the rest."""

    flooding: float = 0.20
    nxdomain: float = 0.10
    random_subdomain: float = 0.10
    amplification: float = 0.08
    exfiltration: float = 0.08


# Smallest count at which each archetype trips its detector on its own.
MIN_FLOODING = 100
MIN_NXDOMAIN = 11
MIN_RANDOM_SUBDOMAIN = 30
MIN_AMPLIFICATION = 5
MIN_EXFILTRATION = 3


def _random_string(rng: random.Random, length: int, chars: str = RANDOM_CHARS) -> str:
    return "".join(rng.choices(chars, k=length))


def _port(rng: random.Random) -> int:
    return rng.randint(1024, 65535)


def _normal(rng: random.Random, ts: int, i: int) -> DnsQueryRecord:
    return DnsQueryRecord(
        timestamp=ts + i,
        client_ip=f"192.168.1.{rng.randint(10, 49)}",
        client_port=_port(rng),
        query_name=f"www.{rng.choice(NORMAL_DOMAINS)}",
        query_type=rng.choice(["A", "A", "A", "AAAA"]),
        response_code=0,
        answer_count=1,
        raw_length=rng.randint(100, 300),
        query_size=rng.randint(30, 60),
        ttl=rng.choice([60, 300, 3600]),
    )


def _flooding(rng: random.Random, ts: int, i: int) -> DnsQueryRecord:
    return DnsQueryRecord(
        timestamp=ts,
        client_ip=FLOODING_IP,
        client_port=_port(rng),
        query_name=f"www.{rng.choice(NORMAL_DOMAINS)}",
        query_type="A",
        response_code=0,
        answer_count=1,
        raw_length=rng.randint(150, 250),
        query_size=rng.randint(30, 60),
        ttl=300,
    )


def _nxdomain(rng: random.Random, ts: int, i: int) -> DnsQueryRecord:
    return DnsQueryRecord(
        timestamp=ts,
        client_ip=NXDOMAIN_IP,
        client_port=_port(rng),
        query_name=f"{_random_string(rng, 10)}.{NXDOMAIN_TARGET}",
        query_type="A",
        response_code=NXDOMAIN_RCODE,
        answer_count=0,
        raw_length=rng.randint(80, 120),
        query_size=rng.randint(40, 60),
    )


def _random_subdomain(rng: random.Random, ts: int, i: int) -> DnsQueryRecord:
    name = f"{rng.choice(SUBDOMAIN_PREFIXES)}{i}.{_random_string(rng, 6)}.{SUBDOMAIN_TARGET}"
    return DnsQueryRecord(
        timestamp=ts,
        client_ip=SUBDOMAIN_IP,
        client_port=_port(rng),
        query_name=name,
        query_type="A",
        response_code=0,
        answer_count=1,
        raw_length=rng.randint(120, 200),
        query_size=rng.randint(40, 70),
        ttl=60,
    )


def _amplification(rng: random.Random, ts: int, i: int) -> DnsQueryRecord:
    raw_length = rng.randint(1500, 4000)
    protocol = "TCP" if rng.random() < 0.3 else "UDP"
    return DnsQueryRecord(
        timestamp=ts + i % 2,
        client_ip=AMPLIFICATION_IP,
        client_port=53,
        query_name=AMPLIFICATION_TARGET,
        query_type="ANY" if rng.random() < 0.75 else "DNSKEY",
        response_code=0,
        answer_count=rng.randint(10, 40),
        raw_length=raw_length,
        query_size=rng.randint(28, 40),
        protocol=protocol,
        truncated=protocol == "UDP" and raw_length > 512,
        ttl=3600,
    )


def _exfiltration(rng: random.Random, ts: int, i: int) -> DnsQueryRecord:
    chunk = _random_string(rng, rng.randint(40, 63), ENCODED_CHARS)
    qtype = "TXT" if rng.random() < 0.5 else "A"
    return DnsQueryRecord(
        timestamp=ts + i,
        client_ip=EXFILTRATION_IP,
        client_port=_port(rng),
        query_name=f"{chunk}.{EXFILTRATION_TARGET}",
        query_type=qtype,
        response_code=0,
        answer_count=1,
        raw_length=rng.randint(90, 200),
        query_size=len(chunk) + 30,
        ttl=0,
    )


def generate_dataset(
    total: int,
    seed: int | None = None,
    start_ts: int | None = None,
    mix: DatasetMix | None = None,
) -> list[DnsQueryRecord]:
    """Build exactly ``total`` records mixing normal traffic and five attack archetypes."""
    if total < 1:
        raise ValueError("total must be at least 1")
    rng = random.Random(seed)
    mix = mix or DatasetMix()
    ts = int(time.time()) if start_ts is None else start_ts

    plan = [
        [_flooding, int(total * mix.flooding), MIN_FLOODING],
        [_nxdomain, int(total * mix.nxdomain), MIN_NXDOMAIN],
        [_random_subdomain, int(total * mix.random_subdomain), MIN_RANDOM_SUBDOMAIN],
        [_amplification, int(total * mix.amplification), MIN_AMPLIFICATION],
        [_exfiltration, int(total * mix.exfiltration), MIN_EXFILTRATION],
    ]
    # Top up to trigger level, cheapest archetypes first, while the total allows.
    for entry in sorted(plan, key=lambda e: e[2]):
        shortfall = entry[2] - entry[1]
        if shortfall > 0 and sum(e[1] for e in plan) + shortfall <= total:
            entry[1] = entry[2]
    attack_total = sum(e[1] for e in plan)
    plan.insert(0, [_normal, total - attack_total, 0])

    records: list[DnsQueryRecord] = []
    for factory, count, _ in plan:
        records.extend(factory(rng, ts, i) for i in range(count))
    return records
