from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from codeplan.services.agent.executor import ExecutionResult
from codeplan.services.agent.planner import Complexity, ExecutionPlan, PlanStep


class PlanRequest(BaseModel):
    """Request to generate an execution plan."""
    instruction: str = Field(
        ...,
        description="Natural language change request, may contain @path references",
        min_length=1,
        max_length=4000
    )
    project: str = Field(
        ...,
        description="Project directory name under the configured base path"
    )
    referenced_files: list[str] = Field(
        default_factory=list,
        description="Files to always include in the prompt context"
    )


class PlanStepModel(BaseModel):
    """A single plan step in wire format."""
    step: int
    action: str = ""
    description: str = ""
    files: list[str] = Field(default_factory=list)
    reasoning: str = ""


class ExecutionPlanModel(BaseModel):
    """Execution plan in wire format (camelCase keys)."""
    model_config = ConfigDict(populate_by_name=True)

    summary: str = Field(..., min_length=1)
    steps: list[PlanStepModel]
    estimated_complexity: Literal["low", "medium", "high"] = Field(
        default="medium",
        alias="estimatedComplexity"
    )
    prerequisites: list[str] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)

    @classmethod
    def from_plan(cls, plan: ExecutionPlan) -> "ExecutionPlanModel":
        return cls.model_validate(plan.to_dict())

    def to_plan(self) -> ExecutionPlan:
        return ExecutionPlan(
            summary=self.summary,
            steps=tuple(
                PlanStep(
                    step=s.step,
                    action=s.action,
                    description=s.description,
                    files=tuple(s.files),
                    reasoning=s.reasoning
                )
                for s in self.steps
            ),
            estimated_complexity=Complexity(self.estimated_complexity),
            prerequisites=tuple(self.prerequisites),
            risks=tuple(self.risks)
        )


class PlanResponse(BaseModel):
    """Generated plan, or the raw LLM text when no plan could be parsed."""
    success: bool = Field(..., description="Whether a plan was parsed")
    plan: ExecutionPlanModel | None = None
    formatted: str = Field(default="", description="Human-readable plan for review")
    raw_response: str = Field(default="", description="Unmodified LLM output")
    message: str = Field(default="")
    intent: str | None = None
    relevant_files: list[str] = Field(default_factory=list)


class ExecuteRequest(BaseModel):
    """Request to apply a (reviewed) plan to a project."""
    project: str
    plan: ExecutionPlanModel
    continue_on_error: bool | None = Field(
        default=None,
        description="Keep going after a failed step (defaults to server setting)"
    )


class StepResultInfo(BaseModel):
    step: int
    success: bool
    message: str


class ExecuteResponse(BaseModel):
    """Execution summary."""
    success: bool
    total_steps: int
    success_count: int
    failed_steps: list[int] = Field(default_factory=list)
    results: list[StepResultInfo] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ExecutionResult) -> "ExecuteResponse":
        return cls(
            success=result.success,
            total_steps=result.total_steps,
            success_count=result.success_count,
            failed_steps=list(result.failed_steps),
            results=[
                StepResultInfo(step=r.step, success=r.success, message=r.message)
                for r in result.results
            ]
        )


class RunRequest(PlanRequest):
    """Generate and execute in one call, without review."""
    continue_on_error: bool | None = None


class AgentStepInfo(BaseModel):
    """Information about a single agent step."""
    name: str
    status: str
    duration_ms: int
    details: dict = Field(default_factory=dict)


class RunResponse(BaseModel):
    """Response from a generate-and-execute run."""
    success: bool
    message: str = ""
    plan: ExecutionPlanModel | None = None
    raw_response: str | None = None
    execution: ExecuteResponse | None = None
    total_duration_ms: int = 0
    trace: list[AgentStepInfo] = Field(default_factory=list)
