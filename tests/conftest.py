from pathlib import Path

import pytest


class FakeLLM:
    """Stands in for LLMClient: returns queued responses and records every call."""

    def __init__(self, responses=None, default: str = "generated content", fail_paths=None, error=None):
        self._responses = list(responses or [])
        self._default = default
        self._fail_paths = set(fail_paths or [])
        self._error = error
        self.calls: list[dict] = []

    async def generate(self, system_prompt: str, user_prompt: str, model: str | None = None) -> str:
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "model": model,
        })
        if self._error is not None:
            raise self._error
        for path in self._fail_paths:
            if f"file at: {path}\n" in user_prompt:
                raise RuntimeError(f"upstream refused {path}")
        if self._responses:
            return self._responses.pop(0)
        return self._default


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Small project tree with some housekeeping directories."""
    root = tmp_path / "demo"
    (root / "src" / "auth").mkdir(parents=True)
    (root / "src" / "auth" / "service.py").write_text("def login():\n    pass\n", encoding="utf-8")
    (root / "src" / "app.py").write_text("print('hello')\n", encoding="utf-8")
    (root / "README.md").write_text("# demo\n", encoding="utf-8")
    (root / "node_modules" / "left-pad").mkdir(parents=True)
    (root / "node_modules" / "left-pad" / "index.js").write_text("", encoding="utf-8")
    (root / ".git").mkdir()
    (root / ".git" / "HEAD").write_text("ref: refs/heads/main\n", encoding="utf-8")
    (root / ".env").write_text("SECRET=1\n", encoding="utf-8")
    return root
