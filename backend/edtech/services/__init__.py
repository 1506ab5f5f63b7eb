"""Domain services: storage, quotas, prompt assembly, streaming and orchestration."""

from edtech.services.completion import CompletionStream, apply_chunks
from edtech.services.context_assembler import assemble_context
from edtech.services.conversation import ConversationController, ConversationState
from edtech.services.quota import check_document_upload, limits_for
from edtech.services.repository import (
    EntityRepository,
    FallbackRepository,
    LocalRepository,
    RemoteRepository,
)
from edtech.services.suggestions import Intent, classify
from edtech.services.text_extractor import text_extractor

__all__ = [
    "CompletionStream",
    "apply_chunks",
    "assemble_context",
    "ConversationController",
    "ConversationState",
    "check_document_upload",
    "limits_for",
    "EntityRepository",
    "FallbackRepository",
    "LocalRepository",
    "RemoteRepository",
    "Intent",
    "classify",
    "text_extractor",
]
