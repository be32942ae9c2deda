# api/main.py
import logging
import os
import sqlite3
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Literal, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from ingestor.emitter import MetricSample
from scripts.status_poller import start_poller, stop_poller
from storage.base import SinkError
from storage.sqlite_backend import SQLiteSink

# ----- logging -----
logger = logging.getLogger("uvicorn.error")

DB_PATH = os.getenv("DB_PATH", "openvpn_samples.db")

_sink: Optional[SQLiteSink] = None


def close_sink() -> None:
    global _sink
    if _sink is not None:
        _sink.close()
        _sink = None


def get_sink() -> SQLiteSink:
    global _sink
    if _sink is None or _sink.conn is None:
        _sink = SQLiteSink(db_path=DB_PATH).connect()
    return _sink


# ----- lifespan (startup/shutdown) -----
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    sink = get_sink()
    logger.info("[openvpn] sample store at %s", DB_PATH)
    if start_poller(sink) is not None:
        logger.info("[openvpn] Status poller started")
    yield
    # Shutdown
    stop_poller()
    close_sink()


app = FastAPI(
    title="OpenVPN Status Collector API",
    version="0.1.0",
    lifespan=lifespan,
)


# ----- Schemas -----
class SampleModel(BaseModel):
    plugin: str = "openvpn"
    category: Literal["traffic", "compression", "users"]
    scope: str = Field(..., min_length=1)
    subscope: Optional[str] = None
    values: List[int] = Field(..., min_length=1, max_length=2)
    time: Optional[datetime] = None


class BatchIngest(BaseModel):
    source: Optional[str] = None
    samples: List[SampleModel]


# ----- Routes -----
@app.get("/health")
def health(sink: SQLiteSink = Depends(get_sink)):
    try:
        sink.query_samples({"limit": 1})
        return {"status": "ok"}
    except sqlite3.Error as e:
        return {"status": "degraded", "error": str(e)}


@app.post("/ingest/batch")
def ingest_batch(payload: BatchIngest, sink: SQLiteSink = Depends(get_sink)):
    samples = [
        MetricSample(
            category=s.category,
            scope=s.scope,
            subscope=s.subscope,
            values=tuple(s.values),
            time=s.time,
            plugin=s.plugin,
        )
        for s in payload.samples
    ]
    try:
        sink.write_batch(samples)
    except SinkError as e:
        raise HTTPException(status_code=500, detail=f"DB error: {e}")
    return {"ok": True, "received": len(samples)}


@app.get("/samples")
def list_samples(
    scope: Optional[str] = None,
    category: Optional[str] = None,
    limit: int = 200,
    sink: SQLiteSink = Depends(get_sink),
):
    filters = {"limit": limit}
    if scope:
        filters["scope"] = scope
    if category:
        filters["category"] = category
    return {"samples": sink.query_samples(filters)}
