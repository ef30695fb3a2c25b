"""
Planner - Builds the plan prompt from repository context and parses the
LLM's answer into an ExecutionPlan.

Parsing is lenient on purpose: models wrap JSON in prose or code fences,
so the span from the first "{" to the last "}" is taken as the document.
"""
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from codeplan.errors import ParseError
from codeplan.prompts.planner import (
    PLANNER_SYSTEM_PROMPT,
    PLANNER_USER_PROMPT,
    REFERENCED_FILES_SECTION,
    RELEVANT_FILES_SECTION,
)
from codeplan.services.agent.intent import IntentType, classify_intent
from codeplan.services.agent.relevance import (
    MAX_KEYWORDS,
    MAX_RELEVANT_FILES,
    filter_relevant_files,
)
from codeplan.services.context import list_files, render_tree

logger = logging.getLogger(__name__)


class Complexity(str, Enum):
    """Estimated task complexity."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class PlanStep:
    """A single step in the execution plan."""
    step: int                       # Plan's own step number
    action: str                     # Short title
    description: str                # What to do, including how to verify it
    files: tuple[str, ...] = ()     # Relative paths to create or modify
    reasoning: str = ""

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "action": self.action,
            "description": self.description,
            "files": list(self.files),
            "reasoning": self.reasoning,
        }


@dataclass(frozen=True)
class ExecutionPlan:
    """Plan returned by the LLM. Never mutated after parsing."""
    summary: str
    steps: tuple[PlanStep, ...]
    estimated_complexity: Complexity = Complexity.MEDIUM
    prerequisites: tuple[str, ...] = ()
    risks: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        """Serialize back to the JSON wire format."""
        return {
            "summary": self.summary,
            "steps": [step.to_dict() for step in self.steps],
            "estimatedComplexity": self.estimated_complexity.value,
            "prerequisites": list(self.prerequisites),
            "risks": list(self.risks),
        }


@dataclass
class PromptPair:
    system_prompt: str
    user_prompt: str


@dataclass
class PlanContext:
    """Repository context that goes into the plan prompt."""
    file_tree: str
    referenced_files: list[str]
    relevant_files: list[str]
    intent: IntentType
    all_files: list[str] = field(default_factory=list)


def gather_plan_context(
    user_input: str,
    referenced_files: list[str],
    root: Path,
    max_relevant_files: int = MAX_RELEVANT_FILES,
    max_keywords: int = MAX_KEYWORDS
) -> PlanContext:
    """Read the tree and listing for root and shortlist files for the request."""
    file_tree = render_tree(root)
    all_files = list_files(root)
    relevant = filter_relevant_files(
        user_input,
        list(referenced_files),
        all_files,
        limit=max_relevant_files,
        max_keywords=max_keywords
    )
    intent = classify_intent(user_input)

    logger.info(f"Plan context: {len(all_files)} files, {len(relevant)} relevant, intent={intent.value}")
    return PlanContext(
        file_tree=file_tree,
        referenced_files=list(referenced_files),
        relevant_files=relevant,
        intent=intent,
        all_files=all_files
    )


def build_plan_prompt(
    user_input: str,
    referenced_files: list[str],
    root: Path,
    context: PlanContext | None = None
) -> PromptPair:
    """
    Build the system/user prompt pair for plan generation.

    Args:
        user_input: Raw request, e.g. "Add error handling to @src/index.ts"
        referenced_files: Files the user tagged with @
        root: Project root
        context: Precomputed context (computed from root if omitted)
    """
    if context is None:
        context = gather_plan_context(user_input, referenced_files, root)

    # Sections only appear when there is something to list
    file_context = ""
    if context.referenced_files:
        file_context = REFERENCED_FILES_SECTION.format(
            files="\n".join(f"- {f}" for f in context.referenced_files)
        )

    relevant_files_context = ""
    if context.relevant_files:
        relevant_files_context = RELEVANT_FILES_SECTION.format(
            files="\n".join(f"- {f}" for f in context.relevant_files)
        )

    system_prompt = PLANNER_SYSTEM_PROMPT.format(
        file_tree=context.file_tree,
        file_context=file_context,
        relevant_files_context=relevant_files_context
    )
    user_prompt = PLANNER_USER_PROMPT.format(
        user_input=user_input,
        intent=context.intent.value
    )

    return PromptPair(system_prompt=system_prompt, user_prompt=user_prompt)


def _extract_json(content: str) -> str:
    """Greedy span from the first '{' to the last '}'."""
    start = content.find("{")
    end = content.rfind("}")
    if start == -1 or end < start:
        raise ParseError("No JSON found in response")
    return content[start:end + 1]


def _as_text(value) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_int(value, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def _as_text_tuple(value) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,) if value else ()
    if not isinstance(value, list):
        return ()
    return tuple(_as_text(item) for item in value if item is not None)


def _parse_step(raw, position: int) -> PlanStep:
    """Build a PlanStep from whatever shape the model produced."""
    if not isinstance(raw, dict):
        raw = {}
    return PlanStep(
        step=_as_int(raw.get("step"), position),
        action=_as_text(raw.get("action")),
        description=_as_text(raw.get("description")),
        files=_as_text_tuple(raw.get("files")),
        reasoning=_as_text(raw.get("reasoning"))
    )


def _decode_plan(llm_response: str) -> ExecutionPlan:
    data = json.loads(_extract_json(llm_response))

    if not isinstance(data, dict):
        raise ParseError("Plan is not a JSON object")
    if not data.get("summary") or not isinstance(data.get("steps"), list):
        raise ParseError("Invalid plan structure")

    try:
        complexity = Complexity(_as_text(data.get("estimatedComplexity")).lower())
    except ValueError:
        complexity = Complexity.MEDIUM

    return ExecutionPlan(
        summary=_as_text(data["summary"]),
        steps=tuple(_parse_step(s, i + 1) for i, s in enumerate(data["steps"])),
        estimated_complexity=complexity,
        prerequisites=_as_text_tuple(data.get("prerequisites")),
        risks=_as_text_tuple(data.get("risks"))
    )


def parse_plan(llm_response: str) -> ExecutionPlan | None:
    """
    Parse raw LLM text into an ExecutionPlan.

    Returns None instead of raising, so the caller can show the raw
    text to the user. Only "summary" and "steps" are required; step
    fields are filled with defaults when missing.
    """
    try:
        plan = _decode_plan(llm_response)
    except (ValueError, RecursionError, ParseError) as e:
        logger.warning(f"Failed to parse LLM response: {e}")
        logger.debug(f"Raw: {llm_response[:500]}")
        return None

    logger.info(f"Parsed plan: {len(plan.steps)} steps, complexity={plan.estimated_complexity.value}")
    return plan


def format_plan(plan: ExecutionPlan) -> str:
    """Render a plan for human review."""
    output = "\n📋 Execution Plan\n"
    output += f"═{'═' * 50}\n\n"
    output += f"📝 Summary: {plan.summary}\n\n"
    output += f"⚡ Complexity: {plan.estimated_complexity.value.upper()}\n\n"

    if plan.prerequisites:
        output += "📋 Prerequisites:\n"
        for prereq in plan.prerequisites:
            output += f"  • {prereq}\n"
        output += "\n"

    if plan.risks:
        output += "⚠️  Risks & Considerations:\n"
        for risk in plan.risks:
            output += f"  • {risk}\n"
        output += "\n"

    output += "📋 Steps:\n"
    for step in plan.steps:
        output += f"\n{step.step}. {step.action}\n"
        output += f"   {step.description}\n"
        if step.files:
            output += f"   📁 Files: {', '.join(step.files)}\n"
        output += f"   💭 Reasoning: {step.reasoning}\n"

    return output
