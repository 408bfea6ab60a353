from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import pandas as pd

from dnsids.data.records import RECORD_FIELDS, DnsQueryRecord, record_from_dict, record_to_dict

logger = logging.getLogger(__name__)


def records_to_frame(records: Iterable[DnsQueryRecord]) -> pd.DataFrame:
    return pd.DataFrame([record_to_dict(r) for r in records], columns=RECORD_FIELDS)


def export_records_csv(records: Iterable[DnsQueryRecord], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    frame = records_to_frame(records)
    frame.to_csv(path, index=False)
    logger.info("Dataset written to %s (%d rows)", path, len(frame))
    return path


def read_records_csv(path: Path) -> list[DnsQueryRecord]:
    frame = pd.read_csv(path, dtype={"query_name": "string", "client_ip": "string"})
    missing = [col for col in ("timestamp", "client_ip") if col not in frame.columns]
    if missing:
        raise ValueError(f"CSV {path} is missing required columns: {', '.join(missing)}")
    frame = frame.astype(object).where(frame.notna(), None)
    return [record_from_dict(row) for row in frame.to_dict(orient="records")]
