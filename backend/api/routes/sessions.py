import json
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from fastapi.responses import Response, StreamingResponse
from agents.orchestrator import Orchestrator
from config import get_settings
from models.language import LANGUAGES
from models.requests import SessionRequest
from models.session import ReadingSession
from services.llm_service import LLMService, get_llm_service
from services.pdf_exporter import export_filename
from services.validation import InputValidationError, validate_source_text

logger = logging.getLogger("api.sessions")
router = APIRouter(prefix="/api/sessions", tags=["sessions"])

# In-memory reading sessions (per session_id); nothing is persisted
sessions: dict[str, ReadingSession] = {}

TERMINAL_STATUSES = ("completed", "failed", "cleared")


def get_session(session_id: str) -> ReadingSession:
    session = sessions.get(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def evict_stale_sessions():
    """Drop sessions past their TTL, then the oldest ones until there is room for one more."""
    settings = get_settings()
    cutoff = datetime.now(timezone.utc) - timedelta(minutes=settings.SESSION_TTL_MINUTES)

    for session_id, session in list(sessions.items()):
        if session.created_at < cutoff:
            del sessions[session_id]
            logger.info(f"Expired session {session_id}")

    # dict order is creation order
    while sessions and len(sessions) >= settings.MAX_SESSIONS:
        session_id = next(iter(sessions))
        del sessions[session_id]
        logger.info(f"Evicted session {session_id} (limit {settings.MAX_SESSIONS})")


async def run_session_pipeline(session: ReadingSession, llm: LLMService, options: SessionRequest):
    """Background task: run the full reading pipeline for a session."""
    orchestrator = Orchestrator(llm)

    async def on_progress(event):
        event["session_id"] = session.id
        session.events.append(event)

    orchestrator.on_progress(on_progress)

    try:
        await orchestrator.run_pipeline(
            session,
            target_language=options.language,
            explain_terms=options.explain_terms,
            speak=options.speak,
        )
    except Exception as e:
        logger.error(f"Pipeline failed for session {session.id}: {e}")
        session.status = "failed"
        session.events.append({"stage": "error", "status": "failed", "detail": str(e)})


@router.post("")
async def create_session(
    body: SessionRequest,
    background_tasks: BackgroundTasks,
    llm: LLMService = Depends(get_llm_service),
):
    """Start a reading session: simplify, then optionally translate, explain terms and speak."""
    text = validate_source_text(body.text)
    if body.language not in LANGUAGES:
        raise InputValidationError("Unsupported language")

    evict_stale_sessions()
    session = ReadingSession(input_text=text)
    sessions[session.id] = session

    background_tasks.add_task(run_session_pipeline, session, llm, body)

    return {"session_id": session.id, "status": "processing"}


@router.get("/{session_id}")
async def read_session(session_id: str):
    return get_session(session_id).to_payload()


@router.get("/{session_id}/audio")
async def session_audio(session_id: str):
    session = get_session(session_id)
    if session.audio is None:
        raise HTTPException(status_code=404, detail=session.audio_skipped_reason or "Audio not available")
    return Response(content=session.audio, media_type="audio/mpeg")


@router.get("/{session_id}/export")
async def session_export(session_id: str):
    session = get_session(session_id)
    if session.pdf is None:
        raise HTTPException(status_code=404, detail="Export not available")
    filename = export_filename(session.language)
    return Response(
        content=session.pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/{session_id}")
async def clear_session(session_id: str):
    session = get_session(session_id)
    session.clear()
    sessions.pop(session_id, None)
    return {"session_id": session_id, "status": session.status}


@router.get("/{session_id}/stream")
async def stream_progress(session_id: str):
    """SSE endpoint for real-time pipeline progress."""
    session = get_session(session_id)

    async def event_generator():
        sent_count = 0
        max_wait = 300  # 5 minute timeout
        waited = 0.0

        while waited < max_wait:
            while sent_count < len(session.events):
                event = session.events[sent_count]
                yield f"data: {json.dumps(event)}\n\n"
                sent_count += 1

            if session.status in TERMINAL_STATUSES:
                yield f"data: {json.dumps({'stage': 'complete', 'status': session.status})}\n\n"
                return

            await asyncio.sleep(0.5)
            waited += 0.5

    return StreamingResponse(event_generator(), media_type="text/event-stream")
