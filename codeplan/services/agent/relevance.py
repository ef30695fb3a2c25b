"""
Relevance filter - Cheap keyword shortlist of files to mention in the plan prompt.
Matches request keywords against file paths only (no content reads, no embeddings).
"""
import logging
import re

logger = logging.getLogger(__name__)

MAX_RELEVANT_FILES = 20
MAX_KEYWORDS = 10

# Words that carry no signal for path matching
STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
    "is", "are", "was", "were", "be", "been", "have", "has", "had", "do", "does", "did",
    "will", "would", "could", "should", "may", "might", "can", "must", "shall",
    "this", "that", "these", "those", "i", "you", "he", "she", "it", "we", "they",
    "me", "him", "her", "us", "them", "my", "your", "his", "its", "our", "their",
})

KEYWORD_SPLIT_PATTERN = re.compile(r"[\s,.\-]+")

# "@src/app.py" style references inside a request
FILE_REFERENCE_PATTERN = re.compile(r"(?<!\S)@([^\s@]+)")


def extract_keywords(text: str, limit: int = MAX_KEYWORDS) -> list[str]:
    """
    Extract path-matching keywords from a request.

    "Add error handling to the authentication service"
    → ["add", "error", "handling", "authentication", "service"]
    """
    words = KEYWORD_SPLIT_PATTERN.split(text.lower())
    keywords = [w for w in words if len(w) > 2 and w not in STOP_WORDS]
    return keywords[:limit]


def extract_file_references(text: str) -> list[str]:
    """Return the @-referenced paths of a request, in order, without duplicates."""
    references = []
    for match in FILE_REFERENCE_PATTERN.finditer(text):
        path = match.group(1).rstrip(",;:!?)")
        # A trailing period ends the sentence, not the path
        if path.endswith("."):
            path = path.rstrip(".")
        if path and path not in references:
            references.append(path)
    return references


def filter_relevant_files(
    text: str,
    referenced_files: list[str],
    all_files: list[str],
    limit: int = MAX_RELEVANT_FILES,
    max_keywords: int = MAX_KEYWORDS
) -> list[str]:
    """
    Shortlist files for the prompt.

    Referenced files come first in the given order, then any file whose
    path contains a keyword (case-insensitive), in listing order.
    """
    keywords = extract_keywords(text, limit=max_keywords)
    relevant: list[str] = []
    seen: set[str] = set()

    for path in referenced_files:
        if path not in seen:
            relevant.append(path)
            seen.add(path)

    for path in all_files:
        if path in seen:
            continue
        lowered = path.lower()
        if any(keyword in lowered for keyword in keywords):
            relevant.append(path)
            seen.add(path)

    logger.debug(f"Keywords: {keywords}, relevant files: {len(relevant)}")
    return relevant[:limit]
