from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session
import redis

from urlshortener.db import database

router = APIRouter(tags=["health"])


# simple liveness
@router.get("/health")
def health():
    return {"status": "healthy", "service": "url-shortener"}


# readiness: the store is required, the cache only degrades latency
@router.get("/ready")
def readiness(
    db: Session = Depends(database.get_db),
    redis_client: redis.Redis = Depends(database.get_redis),
):
    details = {"db": "unknown", "redis": "unknown"}
    try:
        db.execute(text("SELECT 1"))
        details["db"] = "ok"
    except Exception as e:
        details["db"] = f"error: {type(e).__name__}"

    try:
        redis_client.ping()
        details["redis"] = "ok"
    except redis.exceptions.RedisError as e:
        details["redis"] = f"degraded: {type(e).__name__}"

    ready = details["db"] == "ok"
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"ready": ready, "details": details},
    )
