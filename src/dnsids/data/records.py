from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any

NXDOMAIN_RCODE = 3


@dataclass(frozen=True)
class DnsQueryRecord:
    timestamp: int
    client_ip: str
    client_port: int
    query_name: str | None
    query_type: str
    response_code: int = 0
    answer_count: int = 0
    raw_length: int = 0
    query_size: int = 0
    protocol: str = "UDP"
    truncated: bool = False
    ttl: int = 0

    @property
    def is_nxdomain(self) -> bool:
        return self.response_code == NXDOMAIN_RCODE


RECORD_FIELDS = [f.name for f in fields(DnsQueryRecord)]


def record_to_dict(record: DnsQueryRecord) -> dict[str, Any]:
    return asdict(record)


def record_from_dict(row: dict[str, Any]) -> DnsQueryRecord:
    name = row.get("query_name")
    if name is not None and not isinstance(name, str):
        # pandas hands back NaN for empty cells
        name = None
    return DnsQueryRecord(
        timestamp=int(row["timestamp"]),
        client_ip=str(row["client_ip"]),
        client_port=int(row.get("client_port") or 0),
        query_name=name,
        query_type=str(row.get("query_type") or "A"),
        response_code=int(row.get("response_code") or 0),
        answer_count=int(row.get("answer_count") or 0),
        raw_length=int(row.get("raw_length") or 0),
        query_size=int(row.get("query_size") or 0),
        protocol=str(row.get("protocol") or "UDP"),
        truncated=bool(row.get("truncated") or False),
        ttl=int(row.get("ttl") or 0),
    )
