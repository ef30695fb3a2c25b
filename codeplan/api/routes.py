"""
Plan API routes - Generate a plan, review it, then execute it.
"""
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException

from codeplan.config import Settings, get_settings
from codeplan.errors import CodePlanError, ConfigError, ProtocolError, TransportError
from codeplan.schemas import (
    AgentStepInfo,
    ExecuteRequest,
    ExecuteResponse,
    ExecutionPlanModel,
    PlanRequest,
    PlanResponse,
    RunRequest,
    RunResponse,
)
from codeplan.services.agent.executor import TextGenerator, execute_plan
from codeplan.services.agent.loop import generate_plan, run_agent
from codeplan.services.agent.planner import format_plan
from codeplan.services.agent.relevance import extract_file_references
from codeplan.services.llm import LLMClient

logger = logging.getLogger(__name__)
router = APIRouter()


def get_llm_client(settings: Settings = Depends(get_settings)) -> TextGenerator:
    return LLMClient(settings)


def get_project_path(project: str, settings: Settings) -> Path:
    """Resolve and validate project path. It must stay under the base path."""
    base_path = Path(settings.projects_base_path).resolve()
    project_path = (base_path / project).resolve()

    if project_path == base_path or not project_path.is_relative_to(base_path) or not project_path.is_dir():
        raise HTTPException(
            status_code=404,
            detail=f"Project '{project}' not found"
        )

    return project_path


def _referenced_files(request: PlanRequest) -> list[str]:
    """Explicit referenced files first, then @-references from the instruction."""
    referenced = list(request.referenced_files)
    for path in extract_file_references(request.instruction):
        if path not in referenced:
            referenced.append(path)
    return referenced


def _to_http_error(e: Exception) -> HTTPException:
    if isinstance(e, ConfigError):
        return HTTPException(status_code=500, detail=f"Configuration error: {e}")
    if isinstance(e, (TransportError, ProtocolError)):
        return HTTPException(status_code=502, detail=f"LLM request failed: {e}")
    return HTTPException(status_code=500, detail=f"Plan generation failed: {e}")


@router.post("/generate", response_model=PlanResponse)
async def plan_generate(
    request: PlanRequest,
    settings: Settings = Depends(get_settings),
    client: TextGenerator = Depends(get_llm_client)
) -> PlanResponse:
    """
    Generate an execution plan for review.

    If the LLM answer cannot be parsed, success is false and the raw
    text is returned so it can be inspected or fixed by hand.
    """
    logger.info(f"[Plan] Request: project={request.project}, instruction={request.instruction[:50]}...")

    project_path = get_project_path(request.project, settings)

    try:
        generation = await generate_plan(
            request.instruction,
            _referenced_files(request),
            project_path,
            client,
            model=settings.model_planner,
            max_relevant_files=settings.max_relevant_files,
            max_keywords=settings.max_keywords
        )
    except (CodePlanError, OSError) as e:
        logger.error(f"[Plan] Error: {e}")
        raise _to_http_error(e)

    if generation.plan is None:
        return PlanResponse(
            success=False,
            raw_response=generation.raw_response,
            message="Could not parse a plan from the LLM response",
            intent=generation.intent.value,
            relevant_files=generation.relevant_files
        )

    return PlanResponse(
        success=True,
        plan=ExecutionPlanModel.from_plan(generation.plan),
        formatted=format_plan(generation.plan),
        raw_response=generation.raw_response,
        message=f"Generated plan with {len(generation.plan.steps)} steps",
        intent=generation.intent.value,
        relevant_files=generation.relevant_files
    )


@router.post("/execute", response_model=ExecuteResponse)
async def plan_execute(
    request: ExecuteRequest,
    settings: Settings = Depends(get_settings),
    client: TextGenerator = Depends(get_llm_client)
) -> ExecuteResponse:
    """Apply a reviewed plan. Step failures are reported, not raised."""
    project_path = get_project_path(request.project, settings)

    continue_on_error = request.continue_on_error
    if continue_on_error is None:
        continue_on_error = settings.agent_continue_on_error

    logger.info(f"[Plan] Execute: project={request.project}, steps={len(request.plan.steps)}")

    result = await execute_plan(
        request.plan.to_plan(),
        project_path,
        client,
        continue_on_error=continue_on_error,
        model=settings.model_executor
    )
    return ExecuteResponse.from_result(result)


@router.post("/run", response_model=RunResponse)
async def plan_run(
    request: RunRequest,
    settings: Settings = Depends(get_settings),
    client: TextGenerator = Depends(get_llm_client)
) -> RunResponse:
    """Generate and immediately execute a plan, skipping review."""
    project_path = get_project_path(request.project, settings)

    continue_on_error = request.continue_on_error
    if continue_on_error is None:
        continue_on_error = settings.agent_continue_on_error

    result = await run_agent(
        request.instruction,
        project_path,
        client,
        referenced_files=_referenced_files(request),
        continue_on_error=continue_on_error,
        planner_model=settings.model_planner,
        executor_model=settings.model_executor,
        verbose=settings.agent_verbose
    )

    trace = [
        AgentStepInfo(
            name=step.name,
            status=step.status,
            duration_ms=step.duration_ms,
            details=step.details
        )
        for step in result.trace
    ] if settings.agent_verbose else []

    return RunResponse(
        success=result.success,
        message=result.message,
        plan=ExecutionPlanModel.from_plan(result.plan) if result.plan else None,
        raw_response=result.raw_response,
        execution=ExecuteResponse.from_result(result.execution) if result.execution else None,
        total_duration_ms=result.total_duration_ms,
        trace=trace
    )
