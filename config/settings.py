# config/settings.py
import os
import sys
from typing import Optional
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from util.enums import Environment
import logging


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()

_log = logging.getLogger("config.settings")


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(..., validation_alias="APP_ENV")
    REDIS_URL: str = Field(..., validation_alias="REDIS_URL")
    DATABASE_URL: str = Field(..., validation_alias="DATABASE_URL")
    PERSISTENCE_TTL_SECONDS: int = Field(
        ..., validation_alias="PERSISTENCE_TTL_SECONDS"
    )

    # CORS & Limits
    ALLOWED_ORIGIN: str = Field(..., validation_alias="ALLOWED_ORIGIN")
    RATE_LIMIT_TIMES: int = Field(..., validation_alias="RATE_LIMIT_TIMES")
    RATE_LIMIT_SECONDS: int = Field(..., validation_alias="RATE_LIMIT_SECONDS")
    MAX_FILE_MB: int = Field(default=50, validation_alias="MAX_FILE_MB")
    TRUST_PROXY: bool = Field(..., validation_alias="TRUST_PROXY")

    # Database pool
    DATABASE_POOL_SIZE: int = 5
    DATABASE_POOL_RECYCLE_SECONDS: int = 1800

    # Storage
    CHAT_LOG_DIR: str = Field(default="data/chat_logs", validation_alias="CHAT_LOG_DIR")
    UPLOAD_DIR: str = Field(default="data/uploads", validation_alias="UPLOAD_DIR")
    # Remote blob container URL (e.g. https://acct.blob.core.windows.net/advisor).
    # When unset, uploads land on local disk under UPLOAD_DIR.
    BLOB_BASE_URL: Optional[str] = Field(default=None, validation_alias="BLOB_BASE_URL")
    BLOB_SAS_TOKEN: Optional[str] = Field(
        default=None, validation_alias="BLOB_SAS_TOKEN"
    )
    BLOB_TIMEOUT_SECONDS: float = 30.0

    # Anthropic Settings
    ANTHROPIC_API_URL: str = Field(..., validation_alias="ANTHROPIC_API_URL")
    ANTHROPIC_MODEL: str = Field(..., validation_alias="ANTHROPIC_MODEL")
    ANTHROPIC_VERSION: str = Field(..., validation_alias="ANTHROPIC_VERSION")
    ANTHROPIC_API_KEY: str = Field(..., validation_alias="ANTHROPIC_API_KEY")
    COMPLETION_TIMEOUT_SECONDS: float = 30.0
    COMPLETION_MAX_TOKENS: int = 1600
    COMPLETION_TEMPERATURE: float = 0.2
    COMPLETION_HISTORY_MESSAGES: int = 6

    # PDF extraction budgets
    BULLETIN_MAX_PAGES: int = 25
    BULLETIN_MAX_CHARS: int = 200_000
    DOCUMENT_MAX_PAGES: int = 15
    DOCUMENT_MAX_CHARS: int = 50_000

    # Retrieval
    RAG_TOP_K: int = 3
    RAG_SNIPPET_CHARS: int = 900
    DOCUMENT_RAG_TOP_K: int = 2
    DOCUMENT_SNIPPET_CHARS: int = 400
    SUPPORTING_DOCS_MAX: int = 5

    # Recommendation & prompt sizing
    RECOMMEND_COUNT: int = 6
    PROMPT_REQUIRED_SAMPLE: int = 15
    PROMPT_ELECTIVE_SAMPLE: int = 10
    DEFAULT_BULLETIN_CATEGORY: str = "Major"

    # Logging knobs
    LOGGER_NAME: str = "university-advisor"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")

    # Prompts
    PLANNING_PROMPT_RULES: str = (
        "You are an AI Academic Advisor.\n"
        "\n"
        "STRICT RULES:\n"
        "- You may ONLY recommend courses listed in PROVIDED RECOMMENDED COURSES below.\n"
        "- Do NOT invent course codes, names, or credits.\n"
        "- Keep it SHORT.\n"
        "- Do NOT repeat the full Student DB Context.\n"
        "- If asked for a course number, give 3–5 course codes.\n"
        "\n"
        "Output format:\n"
        "## Answer\n"
        "## Recommended Next Courses\n"
        "## Suggested Schedule (12–15 credits)\n"
        "## Notes"
    )

    GENERAL_PROMPT_RULES: str = (
        "You are an AI Academic Advisor.\n"
        "\n"
        "STRICT RULES:\n"
        "- Use the short snapshot for identity/completed courses.\n"
        "- Use ONLY the course list provided below for codes/names.\n"
        "- Do NOT invent course codes, names, or credits.\n"
        "- Prefer the BULLETIN EXCERPTS over supporting documents when both cover the question.\n"
        "- Only cite excerpts that are provided below; do not make up page numbers.\n"
        "- Keep it short and do NOT repeat the full DB context."
    )


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
