from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from dnsids.config import DEFAULT_QUERY_COUNT, MAX_QUERY_COUNT, get_db_path
from dnsids.data.export import records_to_frame
from dnsids.data.simulations import generate_dataset
from dnsids.data.store import InMemoryRecordStore, SqliteRecordStore
from dnsids.models.engine import ThreatAnalyzer
from dnsids.service.schemas import AnalysisResponse, GenerateResponse

logger = logging.getLogger(__name__)

app = FastAPI(title="DNS IDS Threat Analysis Service", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=r"http://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

STORE: SqliteRecordStore | InMemoryRecordStore | None = None


def _get_store() -> SqliteRecordStore | InMemoryRecordStore:
    global STORE
    if STORE is None:
        STORE = SqliteRecordStore(get_db_path())
    return STORE


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/api/dataset/generate", response_model=GenerateResponse)
def generate_dataset_endpoint(
    query_count: int = Query(DEFAULT_QUERY_COUNT, alias="queryCount", ge=1, le=MAX_QUERY_COUNT),
) -> GenerateResponse:
    try:
        store = _get_store()
        records = generate_dataset(query_count)
        store.clear()
        saved = store.save_all(records)
        return GenerateResponse(
            message=f"Dataset generated successfully with {len(saved)} queries",
            query_count=len(saved),
        )
    except Exception as exc:
        logger.exception("Failed to generate dataset")
        raise HTTPException(status_code=500, detail=f"Dataset generation failed: {exc}") from exc


@app.post("/api/detection/analysis", response_model=AnalysisResponse)
def analysis_endpoint() -> AnalysisResponse:
    try:
        report = ThreatAnalyzer(_get_store()).analyze()
        return AnalysisResponse.from_report(report)
    except Exception as exc:
        logger.exception("Failed to analyze stored queries")
        raise HTTPException(status_code=500, detail=f"Analysis failed: {exc}") from exc


@app.get("/api/dataset/export")
def export_endpoint() -> Response:
    try:
        frame = records_to_frame(_get_store().fetch_all())
    except Exception as exc:
        logger.exception("Failed to export dataset")
        raise HTTPException(status_code=500, detail=f"Export failed: {exc}") from exc
    return Response(
        content=frame.to_csv(index=False),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="dns_dataset.csv"'},
    )
