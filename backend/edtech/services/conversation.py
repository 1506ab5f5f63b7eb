"""
Conversation controller: quota checks, context assembly, streaming and
transcript persistence for one user's chat.

Turn lifecycle:
    idle -> assembling_context -> streaming -> finalizing -> idle
    idle -> errored -> idle                      (missing API key)
    streaming -> errored -> idle                 (stream failure)
Document uploads go through awaiting_quota_check instead.

One turn at a time per controller; callers disable sending while a turn
streams. There is no cancellation: a started turn runs in its own task and
is saved even if whoever was reading its snapshots goes away.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

from edtech.schemas.admin import AdminStatsRead
from edtech.schemas.chat import (
    AssessmentRequest,
    LessonPlanRequest,
    Message,
    OutputFormatType,
    RubricRequest,
)
from edtech.schemas.documents import DocumentRecord
from edtech.schemas.user import PlanType, UserProfile
from edtech.services.completion import CompletionStream, apply_chunks
from edtech.services.context_assembler import (
    DEFAULT_SYSTEM_INSTRUCTION,
    DOCUMENT_MAX_CHARS,
    AssembledContext,
    assemble_context,
)
from edtech.services.errors import (
    NotFoundError,
    PermissionDeniedError,
    QuotaExceededError,
    SetupRequiredError,
)
from edtech.services.quota import PLAN_LIMITS, PlanLimits, check_document_upload
from edtech.services.repository import EntityRepository
from edtech.services.suggestions import Intent, classify
from edtech.services.templates import GenerationPlan, assessment_plan, lesson_plan, rubric_plan
from edtech.services.text_extractor import TextExtractor, text_extractor

logger = logging.getLogger(__name__)

STREAM_ERROR_TEXT = "Sorry, something went wrong while generating this response. Please try again."

# Strong references to running turns so they are not garbage-collected mid-stream
_running_turns: set[asyncio.Task] = set()


def _forget_turn(task: asyncio.Task) -> None:
    _running_turns.discard(task)
    if not task.cancelled() and task.exception() is not None:
        logger.error("Chat turn failed", exc_info=task.exception())


class ConversationState(str, Enum):
    IDLE = "idle"
    AWAITING_QUOTA_CHECK = "awaiting_quota_check"
    ASSEMBLING_CONTEXT = "assembling_context"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    ERRORED = "errored"


@dataclass
class Turn:
    """A prepared turn whose user message is already persisted."""

    owner_id: UUID
    user_message: Message
    transcript: list[Message]
    history: list[dict]
    context: AssembledContext
    intent: Intent | None
    output_format: OutputFormatType
    thinking: bool = False
    task: asyncio.Task | None = field(default=None, repr=False)


class ConversationController:
    """Orchestrates the repository, context assembly, streaming and suggestions."""

    def __init__(
        self,
        repository: EntityRepository,
        completion: CompletionStream,
        *,
        api_key: str | None,
        default_system_instruction: str = DEFAULT_SYSTEM_INSTRUCTION,
        plan_limits: Mapping[str, PlanLimits] = PLAN_LIMITS,
        extractor: TextExtractor = text_extractor,
        max_document_chars: int = DOCUMENT_MAX_CHARS,
    ):
        self.repository = repository
        self.completion = completion
        self.api_key = api_key
        self.default_system_instruction = default_system_instruction
        self.plan_limits = plan_limits
        self.extractor = extractor
        self.max_document_chars = max_document_chars
        self.state = ConversationState.IDLE

    def _transition(self, state: ConversationState) -> None:
        logger.debug("Conversation state %s -> %s", self.state.value, state.value)
        self.state = state

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    # =========================================================================
    # SYSTEM INSTRUCTION / PROFILE
    # =========================================================================

    async def system_instruction(self) -> str:
        """Stored instruction, or the built-in default when none is stored."""
        stored = await self.repository.get_system_instruction()
        return stored or self.default_system_instruction

    async def set_system_instruction(self, profile: UserProfile, text: str) -> None:
        if not profile.is_admin:
            raise PermissionDeniedError("Only admins can change the system instruction.")
        await self.repository.set_system_instruction(text)
        logger.info("System instruction updated by %s (%d chars)", profile.id, len(text))

    async def upgrade_plan(self, profile: UserProfile, plan: PlanType) -> UserProfile:
        """Move a profile to another plan tier. Payment is handled elsewhere."""
        updated = profile.model_copy(update={"plan": plan})
        await self.repository.save_profile(updated)
        logger.info("Plan changed for %s: %s -> %s", profile.id, profile.plan, plan)
        return updated

    # =========================================================================
    # ADMIN DASHBOARD
    # =========================================================================

    @staticmethod
    def _require_admin(profile: UserProfile) -> None:
        if not profile.is_admin:
            raise PermissionDeniedError("Admin access required.")

    async def usage_stats(self, profile: UserProfile) -> AdminStatsRead:
        self._require_admin(profile)
        stats = await self.repository.get_stats()
        users = await self.repository.list_profiles()
        return AdminStatsRead(users=len(users), docs=stats.docs, queries=stats.queries)

    async def list_users(self, profile: UserProfile) -> list[UserProfile]:
        self._require_admin(profile)
        return await self.repository.list_profiles()

    async def delete_user(self, profile: UserProfile, user_id: UUID) -> None:
        """
        Remove a stored profile. The user's documents, events and transcript stay.

        Raises:
            PermissionDeniedError: Caller is not an admin, or targets themselves
            NotFoundError: No stored profile with that id
        """
        self._require_admin(profile)
        if user_id == profile.id:
            raise PermissionDeniedError("Admins cannot delete their own account.")
        if not await self.repository.delete_profile(user_id):
            raise NotFoundError("User not found.")
        logger.info("User %s deleted by %s", user_id, profile.id)

    # =========================================================================
    # DOCUMENTS
    # =========================================================================

    def limits_for(self, profile: UserProfile) -> PlanLimits:
        return self.plan_limits.get(profile.plan, self.plan_limits["free"])

    async def check_upload(self, profile: UserProfile, file_size: int) -> None:
        """
        Raise QuotaExceededError if `profile` may not store one more file of `file_size` bytes.

        The count is checked before the size.
        """
        existing = await self.repository.list_documents(profile.id)
        decision = check_document_upload(profile.plan, len(existing), file_size, self.plan_limits)
        if not decision.allowed:
            logger.info("Upload denied for %s (%s): %s", profile.id, profile.plan, decision.reason.value)
            raise QuotaExceededError(decision.reason, decision.message)

    async def upload_document(self, profile: UserProfile, filename: str, data: bytes) -> DocumentRecord:
        """
        Store a new document for `profile` after the quota check and text extraction.

        Raises:
            QuotaExceededError: Document count or size over the plan limit
            ExtractionError: File could not be turned into text
        """
        self._transition(ConversationState.AWAITING_QUOTA_CHECK)
        try:
            await self.check_upload(profile, len(data))

            kind, text = await self.extractor.extract(filename, data)
            document = DocumentRecord(
                owner_id=profile.id,
                name=filename,
                kind=kind,
                content=text,
                size_bytes=len(data),
            )
            await self.repository.save_document(document)
            await self.repository.increment_stat("docs")
            logger.info(
                "Document stored for %s: %s (%d bytes, %d chars)",
                profile.id,
                filename,
                len(data),
                len(text),
            )
            return document
        finally:
            self._transition(ConversationState.IDLE)

    async def get_document(self, owner_id: UUID, document_id: UUID) -> DocumentRecord:
        for document in await self.repository.list_documents(owner_id):
            if document.id == document_id:
                return document
        raise NotFoundError("Document not found.")

    # =========================================================================
    # CHAT TURNS
    # =========================================================================

    @staticmethod
    def history_for(transcript: list[Message]) -> list[dict]:
        """Prior turns for the completion service. Error messages are never replayed."""
        return [
            {"role": message.role, "content": message.text}
            for message in transcript
            if not message.is_error and message.text
        ]

    async def prepare_turn(
        self,
        profile: UserProfile,
        text: str,
        *,
        intent: Intent | str | None = None,
        output_format: OutputFormatType = "auto",
        document_id: UUID | None = None,
        include_document: bool | None = None,
        thinking: bool = False,
    ) -> Turn:
        """
        Check preconditions, assemble context and persist the user turn.

        Raises:
            SetupRequiredError: No completion API key (nothing is persisted)
            NotFoundError: `document_id` does not belong to the user
        """
        if not self.is_configured:
            self._transition(ConversationState.ERRORED)
            self._transition(ConversationState.IDLE)
            raise SetupRequiredError()

        self._transition(ConversationState.ASSEMBLING_CONTEXT)
        try:
            document = None
            if document_id is not None:
                document = await self.get_document(profile.id, document_id)

            context = assemble_context(
                await self.system_instruction(),
                text,
                document=document,
                output_format=output_format,
                include_document=include_document,
                max_document_chars=self.max_document_chars,
            )

            transcript = await self.repository.get_transcript(profile.id)
            history = self.history_for(transcript)

            user_message = Message(role="user", text=text)
            transcript.append(user_message)
            await self.repository.save_transcript(profile.id, transcript)
            await self.repository.increment_stat("queries")
        except Exception:
            self._transition(ConversationState.IDLE)
            raise

        return Turn(
            owner_id=profile.id,
            user_message=user_message,
            transcript=transcript,
            history=history,
            context=context,
            intent=Intent(intent) if intent is not None else None,
            output_format=output_format,
            thinking=thinking,
        )

    async def stream_turn(self, turn: Turn) -> AsyncIterator[Message]:
        """
        Stream the assistant reply for a prepared turn.

        Yields the placeholder, then one full snapshot per chunk, then the
        finalized message once the transcript has been saved. A failed
        stream yields a single error message instead of the partial text.

        The turn itself runs in `turn.task`. Closing this iterator early
        only stops the snapshots; the task still finishes and saves.
        """
        snapshots: asyncio.Queue[Message | None] = asyncio.Queue()
        turn.task = asyncio.create_task(self._run_turn(turn, snapshots))
        _running_turns.add(turn.task)
        turn.task.add_done_callback(_forget_turn)

        while (snapshot := await snapshots.get()) is not None:
            yield snapshot
        await turn.task

    async def _run_turn(self, turn: Turn, snapshots: asyncio.Queue) -> None:
        self._transition(ConversationState.STREAMING)
        placeholder = Message(role="assistant", text="", format=turn.output_format)
        try:
            snapshots.put_nowait(placeholder.model_copy(deep=True))

            try:
                chunks = self.completion.stream(
                    self.api_key,
                    turn.context.user_content,
                    turn.context.system,
                    turn.history,
                    thinking=turn.thinking,
                )
                async for snapshot in apply_chunks(placeholder, chunks):
                    snapshots.put_nowait(snapshot)
            except Exception:
                logger.exception("Completion stream failed for user %s", turn.owner_id)
                self._transition(ConversationState.ERRORED)
                final = Message(
                    id=placeholder.id,
                    role="assistant",
                    text=STREAM_ERROR_TEXT,
                    created_at=placeholder.created_at,
                    is_error=True,
                )
            else:
                self._transition(ConversationState.FINALIZING)
                final = placeholder
                final.suggestions = classify(turn.user_message.text, final.text, turn.intent)

            turn.transcript.append(final)
            await self.repository.save_transcript(turn.owner_id, turn.transcript)
            snapshots.put_nowait(final.model_copy(deep=True))
        finally:
            snapshots.put_nowait(None)
            self._transition(ConversationState.IDLE)

    async def send_message(self, profile: UserProfile, text: str, **options) -> Message:
        """Run a whole turn and return the finalized assistant message."""
        turn = await self.prepare_turn(profile, text, **options)
        final = None
        async for snapshot in self.stream_turn(turn):
            final = snapshot
        return final

    # =========================================================================
    # TEMPLATED GENERATORS
    # =========================================================================

    def plan_generation(
        self, request: RubricRequest | LessonPlanRequest | AssessmentRequest
    ) -> GenerationPlan:
        if isinstance(request, RubricRequest):
            return rubric_plan(request)
        if isinstance(request, LessonPlanRequest):
            return lesson_plan(request)
        return assessment_plan(request)

    async def prepare_generation(
        self,
        profile: UserProfile,
        request: RubricRequest | LessonPlanRequest | AssessmentRequest,
    ) -> Turn:
        """Prepare a turn from a generator form. `use_active_doc=False` answers from general knowledge."""
        plan = self.plan_generation(request)
        return await self.prepare_turn(
            profile,
            plan.prompt,
            intent=plan.intent,
            output_format=plan.output_format,
            document_id=request.document_id,
            include_document=plan.include_document,
        )
