import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent

DOCUMENT_PATH = os.environ.get("SMARTFIN_DOCUMENT_PATH", str(PROJECT_ROOT / "smartfin.json"))
USER_ID = os.environ.get("SMARTFIN_USER_ID", "user_default")
SYNC_DEBOUNCE_SECONDS = 1.5

GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", os.environ.get("API_KEY", ""))
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-3-flash-preview")
GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
GEMINI_TIMEOUT_SECONDS = 15

LOG_LEVEL = os.environ.get("SMARTFIN_LOG_LEVEL", "WARNING")
