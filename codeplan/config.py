from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Gemini generateContent endpoint
    # Override llm_base_url to point at a proxy or a different API version
    gemini_api_key: str = ""
    llm_base_url: str = "https://generativelanguage.googleapis.com/v1"

    # Model selection per task
    model_planner: str = "gemini-2.5-pro"   # Plan generation
    model_executor: str = "gemini-2.5-pro"  # File creation/modification

    # Generation settings (fixed for every call)
    llm_temperature: float = 0.7
    llm_top_k: int = 40
    llm_top_p: float = 0.95
    max_tokens: int = 8192
    llm_timeout: float | None = None  # None = wait for the upstream indefinitely

    # Base directory that API project names are resolved against
    projects_base_path: str = "."

    # Prompt context limits
    max_relevant_files: int = 20
    max_keywords: int = 10

    # Agent settings
    agent_continue_on_error: bool = False
    agent_verbose: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()
