import logging
import uuid
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from app.aggregate import load_summary
from app.config import load_settings
from app.db import ensure_db, insert_attempt, read_attempts

REQUIRED_ATTEMPT_FIELDS = ("userId", "taskType", "answers", "errorRatio")

logger = logging.getLogger(__name__)

settings = load_settings()
app = FastAPI(title="Planning Fallacy Workshop API", version="0.1.0")


@app.on_event("startup")
def _startup() -> None:
    ensure_db(settings.db_path)


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}


@app.post("/v1/sessions")
def create_session() -> dict[str, Any]:
    return {"ok": True, "user_id": uuid.uuid4().hex}


@app.post("/v1/attempts")
def create_attempt(body: dict[str, Any]) -> JSONResponse:
    if settings.api_key and str(body.get("api_key", "")) != settings.api_key:
        raise HTTPException(status_code=401, detail="invalid_api_key")

    attempt = body.get("attempt")
    if not isinstance(attempt, dict):
        raise HTTPException(status_code=400, detail="attempt_must_be_object")
    missing = [name for name in REQUIRED_ATTEMPT_FIELDS if name not in attempt]
    if missing:
        raise HTTPException(status_code=400, detail=f"attempt_missing_fields:{','.join(missing)}")
    if not isinstance(attempt["answers"], list):
        raise HTTPException(status_code=400, detail="answers_must_be_list")
    if not any(key.startswith("predicted") for key in attempt):
        raise HTTPException(status_code=400, detail="attempt_missing_prediction")

    ensure_db(settings.db_path)
    attempt_id, created_at = insert_attempt(settings.db_path, attempt)
    logger.info("Stored attempt id=%s task_type=%s", attempt_id, attempt.get("taskType"))
    return JSONResponse(
        content={"ok": True, "id": attempt_id, "timestamp": created_at},
        status_code=200,
    )


@app.get("/v1/attempts")
def list_attempts() -> dict[str, Any]:
    documents = read_attempts(settings.db_path)
    return {"ok": True, "attempts": documents, "count": len(documents)}


@app.get("/v1/summary")
def summary() -> dict[str, Any]:
    return load_summary(settings.db_path).to_dict()
