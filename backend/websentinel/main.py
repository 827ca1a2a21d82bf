import logging
from typing import List
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.concurrency import run_in_threadpool
from websentinel.core.config import get_settings
from websentinel.core.engine import run_scan
from websentinel.core.history import build_history_store
from websentinel.core.http import FetchError, InvalidTargetError
from websentinel.models.schemas import AnalyzeRequest, SecurityReport

settings = get_settings()
logging.basicConfig(level=settings.log_level, format="%(levelname)s: %(name)s: %(message)s")

app = FastAPI(title="WebSentinel API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_HISTORY = build_history_store(settings)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/analyze", response_model=SecurityReport)
async def analyze_target(req: AnalyzeRequest):
    try:
        report = await run_scan(req.url, settings)
    except InvalidTargetError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FetchError as e:
        raise HTTPException(status_code=502, detail=str(e))
    # file-backed stores block on disk I/O
    await run_in_threadpool(_HISTORY.save, report)
    return report


@app.get("/history", response_model=List[SecurityReport])
def get_history():
    return _HISTORY.load()


@app.delete("/history")
def clear_history():
    _HISTORY.clear()
    return {"status": "cleared"}
