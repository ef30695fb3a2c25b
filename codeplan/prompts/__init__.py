"""
Centralized prompts for the plan pipeline.

All prompts are organized by component:
- planner: Execution plan generation prompts
- executor: Per-file create/modify prompts
"""

from codeplan.prompts.planner import (
    PLANNER_SYSTEM_PROMPT,
    PLANNER_USER_PROMPT,
    REFERENCED_FILES_SECTION,
    RELEVANT_FILES_SECTION,
)

from codeplan.prompts.executor import (
    CREATE_FILE_SYSTEM_PROMPT,
    CREATE_FILE_USER_PROMPT,
    MODIFY_FILE_SYSTEM_PROMPT,
    MODIFY_FILE_USER_PROMPT,
)

__all__ = [
    # Planner
    "PLANNER_SYSTEM_PROMPT",
    "PLANNER_USER_PROMPT",
    "REFERENCED_FILES_SECTION",
    "RELEVANT_FILES_SECTION",
    # Executor
    "CREATE_FILE_SYSTEM_PROMPT",
    "CREATE_FILE_USER_PROMPT",
    "MODIFY_FILE_SYSTEM_PROMPT",
    "MODIFY_FILE_USER_PROMPT",
]
