"""
Executor - Applies an ExecutionPlan step by step.
Each file in a step gets its own LLM call: new files are generated from the
step description, existing files are rewritten in full with their current
content as context.

Execution is sequential and not transactional. A step that fails halfway
leaves the files it already wrote in place.
"""
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from codeplan.errors import FileSystemError
from codeplan.prompts.executor import (
    CREATE_FILE_SYSTEM_PROMPT,
    CREATE_FILE_USER_PROMPT,
    MODIFY_FILE_SYSTEM_PROMPT,
    MODIFY_FILE_USER_PROMPT,
)
from codeplan.services.agent.planner import ExecutionPlan, PlanStep
from codeplan.services.context import read_file_content, render_tree

logger = logging.getLogger(__name__)

NO_FILES_MESSAGE = "No files to modify (documentation or verification step)"

# A leading "```lang" line and a trailing "```" line
OPENING_FENCE_PATTERN = re.compile(r"^```\w*\n")
CLOSING_FENCE_PATTERN = re.compile(r"\n```$")


class TextGenerator(Protocol):
    async def generate(self, system_prompt: str, user_prompt: str, model: str | None = None) -> str:
        ...


@dataclass
class StepResult:
    """Outcome of a single plan step."""
    step: int
    success: bool
    message: str


@dataclass
class ExecutionResult:
    """Result of executing the plan."""
    total_steps: int
    success_count: int = 0
    failed_steps: list[int] = field(default_factory=list)  # Plan step numbers
    results: list[StepResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed_steps and self.success_count == self.total_steps


def strip_code_fences(content: str) -> str:
    """Remove a single markdown fence wrapper if the model added one anyway."""
    cleaned = content.strip()
    if cleaned.startswith("```"):
        cleaned = OPENING_FENCE_PATTERN.sub("", cleaned, count=1)
        cleaned = CLOSING_FENCE_PATTERN.sub("", cleaned, count=1)
    return cleaned


def _resolve_target(root: Path, file_path: str) -> Path:
    """Resolve a plan path under root, refusing anything that escapes it."""
    resolved_root = Path(root).resolve()
    target = (resolved_root / file_path).resolve()
    if not target.is_relative_to(resolved_root):
        raise FileSystemError(f"Path escapes project root: {file_path}")
    return target


def _write_file(full_path: Path, content: str) -> None:
    try:
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise FileSystemError(f"Could not write {full_path}: {e}") from e


async def create_file(
    root: Path,
    file_path: str,
    step: PlanStep,
    client: TextGenerator,
    model: str | None = None
) -> None:
    """Generate a new file from the step description and write it."""
    full_path = _resolve_target(root, file_path)

    user_prompt = CREATE_FILE_USER_PROMPT.format(
        file_path=file_path,
        action=step.action,
        description=step.description,
        reasoning=step.reasoning,
        file_tree=render_tree(root)
    )
    content = await client.generate(CREATE_FILE_SYSTEM_PROMPT, user_prompt, model=model)

    # Overwrites if something appeared at the path since the existence check
    _write_file(full_path, strip_code_fences(content))
    logger.info(f"[Executor] ✓ Created {file_path}")


async def modify_file(
    root: Path,
    file_path: str,
    step: PlanStep,
    client: TextGenerator,
    model: str | None = None
) -> None:
    """Rewrite an existing file in full with the model's modified version."""
    full_path = _resolve_target(root, file_path)

    try:
        current_content = read_file_content(root, file_path)
    except (OSError, UnicodeDecodeError) as e:
        raise FileSystemError(f"Could not read {file_path}: {e}") from e

    user_prompt = MODIFY_FILE_USER_PROMPT.format(
        file_path=file_path,
        action=step.action,
        description=step.description,
        reasoning=step.reasoning,
        file_tree=render_tree(root),
        current_content=current_content
    )
    content = await client.generate(MODIFY_FILE_SYSTEM_PROMPT, user_prompt, model=model)

    _write_file(full_path, strip_code_fences(content))
    logger.info(f"[Executor] ✓ Modified {file_path}")


async def execute_step(
    step: PlanStep,
    root: Path,
    client: TextGenerator,
    model: str | None = None
) -> StepResult:
    """
    Execute one step: create missing files, modify existing ones.

    Any error raised while processing the step's files becomes the
    step's failure message.
    """
    logger.info(f"[Executor] Step {step.step}: {step.action}")

    if not step.files:
        return StepResult(step=step.step, success=True, message=NO_FILES_MESSAGE)

    try:
        for file_path in step.files:
            if (Path(root) / file_path).exists():
                logger.info(f"[Executor]   Modifying {file_path}...")
                await modify_file(root, file_path, step, client, model=model)
            else:
                logger.info(f"[Executor]   Creating {file_path}...")
                await create_file(root, file_path, step, client, model=model)
    except Exception as e:
        return StepResult(step=step.step, success=False, message=str(e) or type(e).__name__)

    return StepResult(step=step.step, success=True, message=f"Successfully completed: {step.action}")


async def execute_plan(
    plan: ExecutionPlan,
    root: Path,
    client: TextGenerator,
    continue_on_error: bool = False,
    model: str | None = None
) -> ExecutionResult:
    """
    Execute all steps in plan order.

    Args:
        plan: Parsed plan (read only)
        root: Project root the plan's paths are relative to
        client: LLM client used for every file
        continue_on_error: Keep going after a failed step instead of stopping
        model: Model override for file generation

    Returns:
        ExecutionResult; steps after an early stop are neither run nor counted
    """
    root = Path(root)
    result = ExecutionResult(total_steps=len(plan.steps))
    logger.info(f"[Executor] Starting execution of {result.total_steps} steps in {root}")

    for step in plan.steps:
        step_result = await execute_step(step, root, client, model=model)
        result.results.append(step_result)

        if step_result.success:
            result.success_count += 1
            logger.info(f"[Executor] ✓ {step_result.message}")
            continue

        result.failed_steps.append(step.step)
        logger.error(f"[Executor] ✗ Step {step.step} failed: {step_result.message}")

        if not continue_on_error:
            logger.warning("[Executor] Stopping execution due to error")
            break

    logger.info(
        f"[Executor] Summary: total={result.total_steps}, "
        f"successful={result.success_count}, failed={len(result.failed_steps)}"
    )
    if result.failed_steps:
        logger.info(f"[Executor] Failed step numbers: {', '.join(map(str, result.failed_steps))}")

    return result
