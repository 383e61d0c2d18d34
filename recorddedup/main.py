from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
import uvicorn

from .core.config import settings
from .core.detection import (
    DetectionCancelled, InvalidInputError, RecordKind, ScorerConstructionError, scorer_registry
)
from .core.logging import logger
from .services.deduplication_service import DeduplicationService

# Create FastAPI app
app = FastAPI(
    title="Record Dedup",
    description="Fuzzy duplicate detection for tabular records",
    version="0.1.0"
)


class DuplicatesRequest(BaseModel):
    records: List[Dict[str, Any]]
    keys: Optional[List[str]] = None
    threshold: Optional[int] = None
    kind: RecordKind = RecordKind.GENERAL
    algorithm: Optional[str] = None


@app.on_event("startup")
async def startup_event():
    """Log configuration on startup."""
    logger.info("Starting Record Dedup API...")
    logger.info(f"Scorers available: {', '.join(scorer_registry.list_scorers())}; "
                f"record limit {settings.max_records}")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "Record Dedup"}


async def _run_detection(request: DuplicatesRequest):
    service = DeduplicationService(timeout_seconds=settings.request_timeout_seconds)
    try:
        results = await service.find_duplicates_async(
            request.records,
            keys=request.keys,
            threshold=request.threshold,
            kind=request.kind,
            algorithm=request.algorithm
        )
    except InvalidInputError as e:
        logger.warning(f"Rejected detection request: {e}")
        raise HTTPException(status_code=400, detail=f"Invalid input: {e}")
    except DetectionCancelled as e:
        logger.error(f"Detection timeout: {e}")
        raise HTTPException(status_code=408, detail="Detection timeout - too many records")
    except ScorerConstructionError as e:
        logger.error(f"Scorer unavailable: {e}")
        raise HTTPException(status_code=500, detail=f"Scorer unavailable: {e}")
    except Exception as e:
        logger.error(f"Error finding duplicates: {e}")
        raise HTTPException(status_code=500, detail="Failed to find duplicates")
    return service, results


@app.post("/duplicates")
async def find_duplicates(request: DuplicatesRequest):
    """Find pairs of near-duplicate records."""
    service, results = await _run_detection(request)
    report = service.get_report(results)
    return {
        "session_id": results.session_id,
        "summary": report["summary"],
        "duplicates": report["duplicates"],
        "errors": report["errors"]
    }


@app.post("/deduplicate")
async def deduplicate(request: DuplicatesRequest):
    """Find duplicates and return the records that remain after removing them."""
    service, results = await _run_detection(request)
    report = service.get_report(results)
    survivors = service.deduplicate(request.records, results.pairs)
    return {
        "session_id": results.session_id,
        "summary": report["summary"],
        "duplicates": report["duplicates"],
        "errors": report["errors"],
        "records": survivors
    }


if __name__ == "__main__":
    uvicorn.run(
        "recorddedup.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
