"""Prompt assembly: system instruction, grounding document, output format."""

from dataclasses import dataclass

from edtech.schemas.chat import OutputFormatType
from edtech.schemas.documents import DocumentRecord

# Hard cap on grounding text sent with a request (characters)
DOCUMENT_MAX_CHARS = 30000

DEFAULT_SYSTEM_INSTRUCTION = """
ROLE: You are "Edtech AI", an elite pedagogical consultant and educational content specialist.
CORE DIRECTIVES:
1. EDUCATIONAL EXPERTISE: Always apply best practices from Bloom's Taxonomy, the 5E Instructional Model, and Understanding by Design (UbD).
2. CONTEXT AWARENESS: When a document is provided, strictly ground your answers in that source material unless explicitly asked for outside knowledge.
3. FORMATTING: Use professional, structured formatting. Use bolding for key terms, lists for steps, and clear headings.
4. TONE: Professional, encouraging, and academically rigorous yet accessible.
5. SAFETY: Do not generate content that promotes academic dishonesty (like writing full essays for students to submit as their own) or unsafe classroom practices.

SPECIFIC OUTPUT RULES:
- If generating a Rubric: Use a table format.
- If generating a Quiz: Include an answer key at the bottom.
- If summarizing: Use the "Bottom Line Up Front" (BLUF) method.
""".strip()

FORMAT_INSTRUCTIONS: dict[str, str] = {
    "auto": "Answer naturally based on the query.",
    "report": (
        "Format the response as a professional report. Use H1 for the main title, H2 for sections, "
        "bullet points for lists, and bold for key insights. Ensure the tone is formal and structured."
    ),
    "table": (
        "Present the answer primarily as a Markdown table. If there is data to compare or list, "
        "use columns and rows. Ensure headers are clear."
    ),
    "concise": (
        "Provide a very brief, high-level summary. Use bullet points. Keep it under 200 words if "
        "possible. Focus on the 'Bottom Line Up Front' (BLUF)."
    ),
    "step": (
        "Break the answer down into a numbered step-by-step guide. Use bold numbering "
        "(e.g., Step 1:) and clear instructions."
    ),
}


@dataclass(frozen=True)
class AssembledContext:
    system: str
    user_content: str
    document_segment: str | None = None


def truncate_document(text: str, max_chars: int = DOCUMENT_MAX_CHARS) -> str:
    """Cut document text to at most `max_chars` characters."""
    return text[:max_chars]


def assemble_context(
    base_instruction: str,
    user_text: str,
    *,
    document: DocumentRecord | None = None,
    output_format: OutputFormatType | None = None,
    include_document: bool | None = None,
    max_document_chars: int = DOCUMENT_MAX_CHARS,
) -> AssembledContext:
    """
    Build the instruction and user payload for one completion request.

    Layout of the instruction: base instruction, then the grounding
    document block, then the format directive. The selected document is
    included unless `include_document` is False. The format directive
    comes last so it is the final instruction the model reads.
    """
    system = base_instruction

    segment = None
    if document is not None and include_document is not False:
        segment = truncate_document(document.content, max_document_chars)
        system = f"""{system}

---

DOCUMENT CONTENT ({document.name}):
{segment}

---

Ground your answer in the document above unless the user asks for outside knowledge."""

    directive = FORMAT_INSTRUCTIONS.get(output_format) if output_format else None
    if directive:
        system = f"{system}\n\nOUTPUT INSTRUCTION: {directive}"

    return AssembledContext(system=system, user_content=user_text, document_segment=segment)
