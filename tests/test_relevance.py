"""Keyword extraction and relevance filter tests."""

from codeplan.services.agent.relevance import (
    STOP_WORDS,
    extract_file_references,
    extract_keywords,
    filter_relevant_files,
)


def test_extract_keywords_drops_stop_words_and_short_tokens() -> None:
    keywords = extract_keywords("Add error handling to the authentication service")
    assert keywords == ["add", "error", "handling", "authentication", "service"]


def test_extract_keywords_splits_on_punctuation_runs() -> None:
    keywords = extract_keywords("user-profile, settings.page...  dark-mode")
    assert keywords == ["user", "profile", "settings", "page", "dark", "mode"]


def test_extract_keywords_caps_at_ten_in_original_order() -> None:
    text = "alpha bravo charlie delta echo foxtrot golf hotel india juliet kilo lima"
    keywords = extract_keywords(text)
    assert keywords == ["alpha", "bravo", "charlie", "delta", "echo",
                        "foxtrot", "golf", "hotel", "india", "juliet"]


def test_extract_keywords_never_returns_stop_words_or_short_words() -> None:
    text = "It should be that we could have done this for them, or maybe not. A UI fix"
    keywords = extract_keywords(text)
    assert len(keywords) <= 10
    assert all(len(k) > 2 for k in keywords)
    assert not set(keywords) & STOP_WORDS
    assert "fix" in keywords


def test_filter_puts_referenced_files_first() -> None:
    all_files = ["docs/auth.md", "src/app.py", "src/auth.py"]
    relevant = filter_relevant_files("Update auth flow", ["src/app.py"], all_files)
    assert relevant == ["src/app.py", "docs/auth.md", "src/auth.py"]


def test_filter_matches_case_insensitively() -> None:
    relevant = filter_relevant_files("fix LOGIN bug", [], ["src/Login.tsx", "src/other.ts"])
    assert relevant == ["src/Login.tsx"]


def test_filter_has_no_duplicates_and_caps_at_twenty() -> None:
    all_files = [f"src/widget_{i}.py" for i in range(40)]
    referenced = ["src/widget_3.py", "src/widget_3.py", "README.md"]

    relevant = filter_relevant_files("Refactor every widget", referenced, all_files)

    assert len(relevant) == 20
    assert len(set(relevant)) == len(relevant)
    assert relevant[:2] == ["src/widget_3.py", "README.md"]


def test_filter_referenced_prefix_survives_truncation() -> None:
    referenced = [f"ref_{i}.py" for i in range(25)]
    relevant = filter_relevant_files("anything", referenced, ["anything.py"])
    assert relevant == referenced[:20]


def test_filter_is_deterministic() -> None:
    all_files = ["b/service.py", "a/service.py", "c/model.py"]
    first = filter_relevant_files("service model", [], all_files)
    second = filter_relevant_files("service model", [], all_files)
    assert first == second == ["b/service.py", "a/service.py", "c/model.py"]


def test_extract_file_references() -> None:
    text = "Add error handling to @src/index.ts and @src/api.ts. Also see @src/index.ts, mail me@example.com"
    assert extract_file_references(text) == ["src/index.ts", "src/api.ts"]


def test_extract_file_references_none() -> None:
    assert extract_file_references("Add a dark mode toggle") == []
