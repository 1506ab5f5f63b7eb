"""Prompt templates for the rubric, lesson plan and assessment generators."""

from dataclasses import dataclass

from edtech.schemas.chat import AssessmentRequest, LessonPlanRequest, OutputFormatType, RubricRequest
from edtech.services.suggestions import Intent

LESSON_TEMPLATES: dict[str, dict] = {
    "5e": {
        "name": "5E Instructional Model",
        "sections": ["Engage", "Explore", "Explain", "Elaborate", "Evaluate"],
    },
    "direct": {
        "name": "Direct Instruction",
        "sections": [
            "Anticipatory Set",
            "Direct Instruction",
            "Guided Practice",
            "Independent Practice",
            "Closure",
        ],
    },
    "ubd": {
        "name": "Understanding by Design (UbD)",
        "sections": ["Desired Results", "Assessment Evidence", "Learning Plan"],
    },
}

ASSESSMENT_TYPES = {
    "mixed": "mixed-format",
    "mcq": "multiple-choice",
    "srq": "short-response",
    "erq": "extended-response",
}


@dataclass(frozen=True)
class GenerationPlan:
    """What a generator asks the controller to run."""

    prompt: str
    intent: Intent
    output_format: OutputFormatType
    include_document: bool


def _with_extras(prompt: str, **extras: str) -> str:
    lines = [prompt]
    for label, value in extras.items():
        if value:
            lines.append(f"{label.replace('_', ' ').title()}: {value}")
    return "\n".join(lines)


def rubric_plan(request: RubricRequest) -> GenerationPlan:
    prompt = (
        f'Generate a {request.scale}-point rubric for "{request.assignment}" '
        f"({request.grade_level}) focusing on {request.blooms_level}."
    )
    return GenerationPlan(
        prompt=_with_extras(prompt, objectives=request.objectives),
        intent=Intent.NONE,
        output_format="table",
        include_document=request.use_active_doc,
    )


def lesson_plan(request: LessonPlanRequest) -> GenerationPlan:
    template = LESSON_TEMPLATES[request.template_id]
    prompt = (
        f'Generate a lesson plan for "{request.topic}" ({request.grade_level}) '
        f"using the {template['name']} model. Sections: {', '.join(template['sections'])}."
    )
    return GenerationPlan(
        prompt=_with_extras(
            prompt,
            duration=request.duration,
            objectives=request.objectives,
            standards=request.standards,
        ),
        intent=Intent.LESSON,
        output_format="report",
        include_document=request.use_active_doc,
    )


def assessment_plan(request: AssessmentRequest) -> GenerationPlan:
    prompt = (
        f"Generate a {request.count}-question {ASSESSMENT_TYPES[request.type]} assessment "
        f'for "{request.topic}" ({request.grade_level}) at {request.difficulty} difficulty.'
    )
    if request.include_key:
        prompt += " Include an answer key at the bottom."
    return GenerationPlan(
        prompt=prompt,
        intent=Intent.QUIZ,
        output_format="report",
        include_document=request.use_active_doc,
    )
