"""
FastAPI application for the issue/chat proxy.

Endpoints:
    POST /api/chat          forward a message to Gemini, with optional sessions
    POST /api/chat/end      drop a chat session
    GET  /api/jira/issues   issues assigned to the X-User-Email user
    GET  /api/jira/issue    one issue by key
"""

import re
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from agent import ConversationHandle, get_engine, reset_engine, upstream_status
from config import MISSING_GEMINI_KEY_MESSAGE, get_config, validate_config_on_startup
from connection import (
    JiraNotConfiguredError, JiraRequestError, JiraUpstreamError, get_jira_client, reset_jira_client
)
from logger import get_logger
from models import (
    ChatRequest, ChatResponse,
    EndSessionRequest, EndSessionResponse,
    JiraIssue, JiraIssueList, JiraIssueSummary
)
from session_store import SessionStore

logger = get_logger(__name__)

JIRA_KEY_PATTERN = re.compile(r"^[A-Z][A-Z0-9]+-\d+$")

config = get_config()


def _start_conversation(system_instruction: Optional[str]) -> ConversationHandle:
    return get_engine().start_conversation(system_instruction)


session_store = SessionStore(
    handle_factory=_start_conversation,
    ttl_seconds=config.session_ttl_seconds,
    max_sessions=config.max_sessions
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting issue/chat proxy", serverless=config.is_serverless)
    try:
        validate_config_on_startup()
    except ValueError as e:
        logger.error(f"Configuration validation failed: {e}")

    yield

    logger.info("Shutting down")
    reset_engine()
    reset_jira_client()
    session_store.clear()


app = FastAPI(
    title="Issue Chat Proxy",
    description="Jira passthrough and Gemini chat backend",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report the first offending field as a 400 instead of FastAPI's 422."""
    field = "body"
    errors = exc.errors()
    if errors:
        names = [part for part in errors[0].get("loc", ()) if isinstance(part, str) and part != "body"]
        if names:
            field = names[-1]
    logger.warning("Request validation failed", path=request.url.path, field=field)
    return _error(status.HTTP_400_BAD_REQUEST, f"Missing or invalid '{field}'")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all uncaught exceptions."""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        exc_info=True,
        path=request.url.path,
        method=request.method
    )
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing."""
    start_time = time.time()
    request_id = str(uuid.uuid4())[:8]

    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(
            f"Request failed: {str(e)}",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            duration_ms=round((time.time() - start_time) * 1000, 2)
        )
        raise

    logger.request(
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=(time.time() - start_time) * 1000,
        request_id=request_id
    )
    return response


@app.get("/")
async def root():
    return {
        "message": app.title,
        "version": app.version,
        "status": "running",
        "serverless": config.is_serverless,
    }


@app.get("/health")
async def health_check():
    """Report which upstream services are configured and how many chat sessions are live."""
    current = get_config()
    return {
        "status": "healthy" if current.gemini_configured and current.jira_configured else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "services": {
            "gemini": {"configured": current.gemini_configured, "model": current.gemini_model_name},
            "jira": {"configured": current.jira_configured},
        },
        "sessions": session_store.stats(),
    }


def require_gemini_key() -> None:
    """Reject chat requests before body validation when no API key is set."""
    if not get_config().gemini_configured:
        logger.error("Chat request rejected: GEMINI_API_KEY not configured")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=MISSING_GEMINI_KEY_MESSAGE)


@app.post("/api/chat", response_model=ChatResponse)
def chat(request: ChatRequest, _: None = Depends(require_gemini_key)):
    """
    Forward a message to Gemini.

    Without a live ``sessionId`` a new conversation is started (seeded with
    ``systemInstruction`` if given) and its id is returned for follow-ups.
    """
    session_store.sweep()

    session_id, is_new = None, False
    try:
        handle, session_id, is_new = session_store.resolve(
            request.session_id,
            request.system_instruction
        )
        reply = handle.send(request.message)
    except Exception as e:
        logger.error(
            f"Gemini request failed: {str(e)}",
            exc_info=True,
            session_id=(session_id or "")[:8],
            new_session=is_new
        )
        if is_new:
            # the client never saw this id
            session_store.end(session_id)
        message = getattr(e, "message", None) or str(e) or "Gemini request failed."
        return _error(upstream_status(e), str(message))

    return ChatResponse(reply=reply, session_id=session_id)


@app.post("/api/chat/end", response_model=EndSessionResponse)
async def end_chat(request: Request):
    """End a chat session. Unknown, missing or malformed ids still succeed."""
    session_id = None
    try:
        payload = await request.json()
        session_id = EndSessionRequest.model_validate(payload).session_id
    except (ValueError, ValidationError):
        logger.debug("End-session request without a usable sessionId")

    session_store.end(session_id)
    return EndSessionResponse(ok=True)


@app.get("/api/jira/issues", response_model=JiraIssueList)
def list_jira_issues(x_user_email: Optional[str] = Header(None)):
    """List issues assigned to the user named by the X-User-Email header."""
    email = (x_user_email or "").strip()
    if not email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="X-User-Email header required")

    try:
        client = get_jira_client()
        raw_issues = client.search_assigned_issues(email)
    except JiraNotConfiguredError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Jira not configured")
    except JiraUpstreamError as e:
        return JSONResponse(status_code=e.status_code, content=e.payload)
    except JiraRequestError as e:
        logger.error(f"Jira search failed: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch Jira issues")

    return JiraIssueList(issues=[JiraIssueSummary.from_api(raw) for raw in raw_issues])


@app.get("/api/jira/issue", response_model=JiraIssue)
def get_jira_issue(key: Optional[str] = Query(None)):
    """Fetch a single issue by key, e.g. ``CAV-1868``. Any issue may be requested."""
    key = (key or "").strip().upper()
    if not key:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="query param key required")
    if not JIRA_KEY_PATTERN.match(key):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid Jira key")

    try:
        client = get_jira_client()
        raw = client.get_issue(key)
    except JiraNotConfiguredError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Jira not configured")
    except JiraUpstreamError as e:
        return JSONResponse(status_code=e.status_code, content=e.payload)
    except JiraRequestError as e:
        logger.error(f"Jira issue fetch failed: {str(e)}", key=key)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch Jira issue")

    return JiraIssue.from_api(raw)


if __name__ == "__main__":
    import uvicorn

    if not config.gemini_configured:
        logger.warning(MISSING_GEMINI_KEY_MESSAGE)
    uvicorn.run(
        "app:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower()
    )
