"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Reserved lexical tokens (must match what clients type)
ATTACHMENT_MARKER: str = "📎"
ASSISTANT_HANDLE: str = os.getenv("ASSISTANT_HANDLE", "zani").strip().lstrip("@") or "zani"

# Cached in place of an answer when the query service fails (never retried)
ASSISTANT_ERROR_RESPONSE: str = "Sorry, I encountered an error processing your request."

# Dispatch
QUERY_TIMEOUT_SECONDS: float = float(os.getenv("QUERY_TIMEOUT_SECONDS", "60") or 60)
HISTORY_MAX_MESSAGES: int = 20

# Attachment fallback for recognized image files that were never uploaded
PLACEHOLDER_IMAGE_URL: str = (
    os.getenv("PLACEHOLDER_IMAGE_URL", "/static/placeholder-image.png").strip()
    or "/static/placeholder-image.png"
)

# Storage (relative to project root)
DATA_DIR_NAME: str = "data"
ATTACHMENT_DB_NAME: str = "attachments.db"
RESPONSE_DB_NAME: str = "responses.db"
DOCUMENT_DB_NAME: str = "documents.db"

# API timeouts (seconds)
LLM_API_TIMEOUT: float = 60.0

# OpenAI (assistant LLM). When set, the assistant uses OpenAI instead of Hugging Face.
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_LLM_MODEL: str = (
    os.getenv("OPENAI_LLM_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
)

# Hugging Face chat (fallback LLM when OPENAI_API_KEY is not set)
HF_API_KEY: str = os.getenv("HF_API_KEY", "").strip()
HF_CHAT_URL: str = "https://router.huggingface.co/v1/chat/completions"
HF_LLM_MODEL: str = (
    os.getenv("HF_LLM_MODEL", "meta-llama/Llama-3.2-3B-Instruct").strip()
    or "meta-llama/Llama-3.2-3B-Instruct"
)

ASSISTANT_MAX_TOKENS: int = 512
