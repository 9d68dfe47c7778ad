import asyncio
import json
import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import StreamingResponse

from . import __version__, config
from .feedback.analyzer import analyze
from .feedback.blend import enrich_suggestions
from .feedback.scenarios import PERSONALITIES, SCENARIOS, get_scenario, resolve_scenario
from .feedback.tracker import LiveFeedbackState
from .session import ConversationSession
from .middleware.request_id import RequestIdMiddleware
from .telemetry import TURN_ANALYSES_TOTAL

logger = config.configure_logging()
chat_logger = logging.getLogger("practice_coach.chat")

SSE_KEEPALIVE_SECONDS = config.env_int("SSE_KEEPALIVE_SECONDS", 15)
MAX_SESSIONS = config.MAX_SESSIONS

app = FastAPI(
    title="Practice Coach API",
    description="Live and per-turn feedback for conversation practice, with a practice counterpart.",
    version=__version__,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-Id"],
    allow_credentials=False,
)
app.add_middleware(RequestIdMiddleware)

# In-memory only; insertion order doubles as age for eviction
app.state.sessions = {}


def _sse_data_event(text: str) -> str:
    """
    Encode text as a well-formed SSE data event.
    Splits on newlines and prefixes each with 'data: ', ending with a blank line.
    """
    lines = str(text).splitlines()
    if not lines:
        return "data: \n\n"
    return "".join(f"data: {line}\n" for line in lines) + "\n"


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status)


async def _json_body(request: Request) -> Tuple[Optional[Dict[str, Any]], Optional[JSONResponse]]:
    try:
        body = await request.json()
    except Exception:
        return None, _error(400, "invalid JSON body")
    if not isinstance(body, dict):
        return None, _error(400, "JSON object expected")
    return body, None


async def _text_body(request: Request) -> Tuple[Optional[Dict[str, Any]], Optional[JSONResponse]]:
    body, err = await _json_body(request)
    if err is not None:
        return None, err
    if not isinstance(body.get("text"), str):
        return None, _error(400, "text is required")
    return body, None


def _string_field(body: Dict[str, Any], key: str) -> Tuple[Optional[str], Optional[JSONResponse]]:
    value = body.get(key)
    if value is None or isinstance(value, str):
        return value, None
    return None, _error(400, f"{key} must be a string")


def _store_session(session: ConversationSession) -> None:
    sessions = app.state.sessions
    while sessions and len(sessions) >= max(1, MAX_SESSIONS):
        evicted = next(iter(sessions))
        del sessions[evicted]
        logger.info(json.dumps({"event": "session_evicted", "sessionId": evicted}))
    sessions[session.id] = session


def _get_session(session_id: str) -> Optional[ConversationSession]:
    return app.state.sessions.get(session_id)


def _session_not_found() -> JSONResponse:
    return _error(404, "session not found")


@app.get("/health", tags=["meta"], description="Liveness endpoint for health checks.")
async def health():
    return {"status": "ok"}


@app.get("/metrics", tags=["meta"], include_in_schema=False)
async def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/api/v1/scenarios", tags=["catalogue"], description="Practice scenarios and counterpart personalities.")
async def list_scenarios():
    return {
        "scenarios": [s.to_dict() for s in SCENARIOS.values()],
        "personalities": [{"key": k, **v} for k, v in PERSONALITIES.items()],
    }


@app.post("/api/v1/analyze", tags=["feedback"], description="Stateless analysis of one utterance.")
async def analyze_utterance(request: Request):
    body, err = await _text_body(request)
    if err is not None:
        return err
    raw_scenario = body.get("scenario") or body.get("scenarioId")
    if raw_scenario is not None and not isinstance(raw_scenario, (str, dict)):
        return _error(400, "scenario must be a string or an object")
    scenario = resolve_scenario(raw_scenario)
    result = analyze(body["text"], scenario)
    TURN_ANALYSES_TOTAL.labels(scenario=result.scenario or "none").inc()
    out = result.to_dict()
    out["tips"] = enrich_suggestions(result, body["text"], scenario)
    return out


@app.post("/api/v1/sessions", tags=["sessions"], description="Start a practice conversation.")
async def create_session(request: Request):
    body: Dict[str, Any] = {}
    raw = await request.body()
    if raw.strip():
        parsed, err = await _json_body(request)
        if err is not None:
            return err
        body = parsed or {}
    scenario_id, err = _string_field(body, "scenarioId")
    if err is not None:
        return err
    if scenario_id and get_scenario(scenario_id) is None:
        return _error(400, f"unknown scenario: {scenario_id}")
    personality, err = _string_field(body, "personality")
    if err is not None:
        return err
    personality = personality or "neutral"
    if personality not in PERSONALITIES:
        return _error(400, f"unknown personality: {personality}")
    session = ConversationSession(scenario_id, personality)
    _store_session(session)
    opening = session.greet()
    return JSONResponse(
        {
            "sessionId": session.id,
            "scenario": session.scenario.to_dict() if session.scenario else None,
            "personality": session.personality,
            "greeting": opening,
            "feedback": session.panel.snapshot().to_dict(),
        },
        status_code=201,
    )


@app.post("/api/v1/sessions/{session_id}/input", tags=["feedback"], description="Live update while composing.")
async def session_input(session_id: str, request: Request):
    session = _get_session(session_id)
    if session is None:
        return _session_not_found()
    body, err = await _text_body(request)
    if err is not None:
        return err
    return session.on_input_change(body["text"]).to_dict()


@app.get("/api/v1/sessions/{session_id}/feedback", tags=["feedback"], description="Current live feedback.")
async def session_feedback(session_id: str):
    session = _get_session(session_id)
    if session is None:
        return _session_not_found()
    return session.panel.snapshot().to_dict()


@app.get(
    "/api/v1/sessions/{session_id}/feedback/stream",
    tags=["feedback"],
    description="SSE stream of live feedback snapshots.",
)
async def session_feedback_stream(session_id: str, request: Request):
    session = _get_session(session_id)
    if session is None:
        return _session_not_found()

    queue: "asyncio.Queue[LiveFeedbackState]" = asyncio.Queue()

    async def _gen():
        session.panel.subscribe(queue.put_nowait)
        try:
            yield _sse_data_event(json.dumps(session.panel.snapshot().to_dict()))
            while True:
                if await request.is_disconnected():
                    break
                try:
                    state = await asyncio.wait_for(queue.get(), timeout=SSE_KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                yield _sse_data_event(json.dumps(state.to_dict()))
        finally:
            session.panel.unsubscribe(queue.put_nowait)

    return StreamingResponse(_gen(), media_type="text/event-stream", headers={"Cache-Control": "no-cache"})


@app.post("/api/v1/sessions/{session_id}/messages", tags=["sessions"], description="Send a message.")
async def session_message(session_id: str, request: Request):
    session = _get_session(session_id)
    if session is None:
        return _session_not_found()
    body, err = await _text_body(request)
    if err is not None:
        return err
    if not body["text"].strip():
        return _error(400, "text must not be blank")
    out = await session.send(body["text"], request_id=_request_id(request))
    if out is not None and out["reply"]["source"] == "fallback":
        chat_logger.info(json.dumps({
            "event": "chat_fallback_used",
            "requestId": _request_id(request),
            "sessionId": session.id,
        }))
    return out


@app.post("/api/v1/sessions/{session_id}/reset", tags=["sessions"], description="Restart the conversation.")
async def session_reset(session_id: str):
    session = _get_session(session_id)
    if session is None:
        return _session_not_found()
    session.reset()
    return {"sessionId": session.id, "feedback": session.panel.snapshot().to_dict()}


@app.get("/api/v1/sessions/{session_id}/summary", tags=["sessions"], description="Conversation summary.")
async def session_summary(session_id: str):
    session = _get_session(session_id)
    if session is None:
        return _session_not_found()
    return session.conversation_summary()


@app.get("/api/v1/sessions/{session_id}/export", tags=["sessions"], description="Conversation export.")
async def session_export(session_id: str):
    session = _get_session(session_id)
    if session is None:
        return _session_not_found()
    return Response(session.export(), media_type="application/json")
