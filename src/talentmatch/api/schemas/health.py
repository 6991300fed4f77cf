from __future__ import annotations

from pydantic import BaseModel


class WorkerHealth(BaseModel):
    id: str
    running: bool
    ticks: int


class HealthResponse(BaseModel):
    status: str = "ok"
    records: dict[str, int]
    worker: WorkerHealth
