"""API routes for the chat transcript and streamed generation."""

import logging

from fastapi import APIRouter
from sse_starlette.sse import EventSourceResponse

from edtech.api.deps import Controller, CurrentProfile, Repository
from edtech.config import sanitize_error
from edtech.schemas.chat import (
    AssessmentRequest,
    ChatMessageRequest,
    LessonPlanRequest,
    RubricRequest,
    TranscriptResponse,
)
from edtech.services.conversation import ConversationController, Turn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


def _stream_response(controller: ConversationController, turn: Turn) -> EventSourceResponse:
    """
    Wrap a prepared turn in Server-Sent Events.

    Events:
    - 'user': The persisted user message
    - 'message': Full assistant message snapshot (replace, don't append)
    - 'done': Finalized assistant message, already saved to the transcript
    - 'error': Unexpected failure outside the completion stream
    """

    async def event_generator():
        yield {"event": "user", "data": turn.user_message.model_dump_json()}
        final = None
        try:
            async for snapshot in controller.stream_turn(turn):
                final = snapshot
                yield {"event": "message", "data": snapshot.model_dump_json()}
            yield {"event": "done", "data": final.model_dump_json()}
        except Exception as e:
            logger.exception("Error during chat streaming")
            safe_msg = sanitize_error(e, generic_message="An error occurred during chat.")
            yield {"event": "error", "data": safe_msg}

    return EventSourceResponse(event_generator())


@router.get("/transcript", response_model=TranscriptResponse)
async def get_transcript(
    profile: CurrentProfile,
    repository: Repository,
):
    """Get the user's full transcript, oldest first."""
    messages = await repository.get_transcript(profile.id)
    return TranscriptResponse(messages=messages, total=len(messages))


@router.post("/messages/stream")
async def stream_chat_message(
    request: ChatMessageRequest,
    profile: CurrentProfile,
    controller: Controller,
):
    """
    Send a chat message and stream the response using Server-Sent Events (SSE).

    Returns 503 before streaming starts if the AI service is not set up.
    A failure mid-stream ends with an error-flagged assistant message in
    the 'done' event; the conversation stays usable. If the client goes
    away, the turn still finishes and is saved.
    """
    turn = await controller.prepare_turn(
        profile,
        request.message,
        intent=request.intent,
        output_format=request.format,
        document_id=request.document_id,
        include_document=request.include_document,
        thinking=request.thinking,
    )
    return _stream_response(controller, turn)


@router.post("/generate/rubric/stream")
async def generate_rubric(
    request: RubricRequest,
    profile: CurrentProfile,
    controller: Controller,
):
    """Generate a rubric (table format) and stream it."""
    turn = await controller.prepare_generation(profile, request)
    return _stream_response(controller, turn)


@router.post("/generate/lesson/stream")
async def generate_lesson_plan(
    request: LessonPlanRequest,
    profile: CurrentProfile,
    controller: Controller,
):
    """Generate a lesson plan (report format); the reply offers quiz and rubric follow-ups."""
    turn = await controller.prepare_generation(profile, request)
    return _stream_response(controller, turn)


@router.post("/generate/quiz/stream")
async def generate_assessment(
    request: AssessmentRequest,
    profile: CurrentProfile,
    controller: Controller,
):
    """Generate a quiz / assessment and stream it."""
    turn = await controller.prepare_generation(profile, request)
    return _stream_response(controller, turn)
