"""
Agent Loop - Orchestrates plan generation and plan execution.
Coordinates: Context → Prompt → LLM → Parse → (review) → Execute
"""
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from codeplan.errors import CodePlanError
from codeplan.services.agent.executor import ExecutionResult, TextGenerator, execute_plan
from codeplan.services.agent.intent import IntentType
from codeplan.services.agent.planner import (
    ExecutionPlan,
    PromptPair,
    build_plan_prompt,
    gather_plan_context,
    parse_plan,
)
from codeplan.services.agent.relevance import MAX_KEYWORDS, MAX_RELEVANT_FILES

logger = logging.getLogger(__name__)


@dataclass
class PlanGeneration:
    """Everything produced while generating a plan."""
    plan: ExecutionPlan | None        # None when the response could not be parsed
    raw_response: str
    prompts: PromptPair
    intent: IntentType
    relevant_files: list[str]


@dataclass
class AgentStep:
    """A single step in the agent execution trace."""
    name: str
    status: str          # completed, failed
    duration_ms: int
    details: dict = field(default_factory=dict)


@dataclass
class AgentResult:
    """Complete result of a generate-and-execute run."""
    success: bool
    message: str
    trace: list[AgentStep]
    total_duration_ms: int
    plan: ExecutionPlan | None = None
    raw_response: str | None = None
    execution: ExecutionResult | None = None


async def generate_plan(
    instruction: str,
    referenced_files: list[str],
    root: Path,
    client: TextGenerator,
    model: str | None = None,
    max_relevant_files: int = MAX_RELEVANT_FILES,
    max_keywords: int = MAX_KEYWORDS
) -> PlanGeneration:
    """
    Build the plan prompt, call the LLM and parse the answer.

    LLM errors propagate. An unparseable answer is not an error:
    the result carries plan=None and the raw text.
    """
    context = gather_plan_context(
        instruction,
        referenced_files,
        root,
        max_relevant_files=max_relevant_files,
        max_keywords=max_keywords
    )
    prompts = build_plan_prompt(instruction, referenced_files, root, context=context)

    logger.info(f"Generating plan: {instruction[:80]}...")
    raw_response = await client.generate(prompts.system_prompt, prompts.user_prompt, model=model)

    return PlanGeneration(
        plan=parse_plan(raw_response),
        raw_response=raw_response,
        prompts=prompts,
        intent=context.intent,
        relevant_files=context.relevant_files
    )


async def run_agent(
    instruction: str,
    root: Path,
    client: TextGenerator,
    referenced_files: list[str] | None = None,
    continue_on_error: bool = False,
    planner_model: str | None = None,
    executor_model: str | None = None,
    verbose: bool = True
) -> AgentResult:
    """
    Run the full pipeline without a review pause:
    1. Generate plan (prompt + LLM + parse)
    2. Execute plan (one LLM call per file)

    Args:
        instruction: Natural language change request
        root: Project root
        client: LLM client
        referenced_files: Files tagged with @ in the request
        continue_on_error: Executor policy on failed steps
        planner_model: Model override for plan generation
        executor_model: Model override for file generation
        verbose: Log step details

    Returns:
        AgentResult with plan, execution summary and trace
    """
    trace: list[AgentStep] = []
    start_time = time.time()

    def log_step(name: str, status: str, duration_ms: int, details: dict = None):
        step = AgentStep(
            name=name,
            status=status,
            duration_ms=duration_ms,
            details=details or {}
        )
        trace.append(step)

        status_icon = "✓" if status == "completed" else "✗"
        logger.info(f"[Agent] {status_icon} {name} ({duration_ms}ms)")
        if details and verbose:
            for k, v in details.items():
                logger.debug(f"  {k}: {v}")

    def elapsed_ms(since: float) -> int:
        return int((time.time() - since) * 1000)

    # =========================================================================
    # STEP 1: Generate Plan
    # =========================================================================
    step_start = time.time()
    try:
        generation = await generate_plan(
            instruction,
            list(referenced_files or []),
            root,
            client,
            model=planner_model
        )
    except (CodePlanError, OSError) as e:
        log_step("generate_plan", "failed", elapsed_ms(step_start), {"error": str(e)})
        return AgentResult(
            success=False,
            message=f"Plan generation failed: {e}",
            trace=trace,
            total_duration_ms=elapsed_ms(start_time)
        )

    if generation.plan is None:
        log_step("generate_plan", "failed", elapsed_ms(step_start), {"error": "unparseable response"})
        return AgentResult(
            success=False,
            message="Could not parse a plan from the LLM response",
            trace=trace,
            total_duration_ms=elapsed_ms(start_time),
            raw_response=generation.raw_response
        )

    plan = generation.plan
    log_step(
        "generate_plan",
        "completed",
        elapsed_ms(step_start),
        {
            "intent": generation.intent.value,
            "relevant_files": generation.relevant_files,
            "steps": len(plan.steps),
            "complexity": plan.estimated_complexity.value
        }
    )

    # =========================================================================
    # STEP 2: Execute Plan
    # =========================================================================
    step_start = time.time()
    execution = await execute_plan(
        plan,
        root,
        client,
        continue_on_error=continue_on_error,
        model=executor_model
    )
    log_step(
        "execute",
        "completed" if execution.success else "failed",
        elapsed_ms(step_start),
        {
            "total_steps": execution.total_steps,
            "success_count": execution.success_count,
            "failed_steps": execution.failed_steps
        }
    )

    total_duration = elapsed_ms(start_time)
    if execution.success:
        message = f"Completed {execution.success_count}/{execution.total_steps} steps"
    else:
        message = f"Failed steps: {', '.join(map(str, execution.failed_steps))}"

    logger.info(f"[Agent] {'✓' if execution.success else '✗'} Complete in {total_duration}ms")

    return AgentResult(
        success=execution.success,
        message=message,
        trace=trace,
        total_duration_ms=total_duration,
        plan=plan,
        raw_response=generation.raw_response,
        execution=execution
    )
