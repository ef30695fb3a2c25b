"""
Intent classifier - Labels a change request with a coarse category.
Pure keyword matching, no LLM call. The label is passed to the planner
so it can tailor the plan to the kind of change.
"""
import logging
from enum import Enum

logger = logging.getLogger(__name__)


class IntentType(str, Enum):
    """Types of code change intents."""
    CREATE = "Create/Add new functionality"
    MODIFY = "Modify existing functionality"
    FIX = "Fix bugs or errors"
    REMOVE = "Remove/Delete functionality"
    REFACTOR = "Refactor/Improve code"
    TEST = "Add or modify tests"
    DOCS = "Add or update documentation"
    GENERAL = "General code changes"


# Checked top to bottom, first group with a hit wins.
# Reordering changes the label for requests that match several groups.
INTENT_TRIGGERS: list[tuple[IntentType, tuple[str, ...]]] = [
    (IntentType.CREATE, ("add", "create", "new")),
    (IntentType.MODIFY, ("modify", "change", "update")),
    (IntentType.FIX, ("fix", "bug", "error")),
    (IntentType.REMOVE, ("remove", "delete", "clean")),
    (IntentType.REFACTOR, ("refactor", "improve", "optimize")),
    (IntentType.TEST, ("test", "testing")),
    (IntentType.DOCS, ("document", "comment", "readme")),
]


def classify_intent(text: str) -> IntentType:
    """
    Classify a change request by substring matching.

    "Fix the crash on add" is CREATE, not FIX: "add" is a substring
    and the create group is checked first.
    """
    lowered = text.lower()

    for intent, triggers in INTENT_TRIGGERS:
        if any(trigger in lowered for trigger in triggers):
            logger.debug(f"Intent: {intent.value}")
            return intent

    return IntentType.GENERAL
