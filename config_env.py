# Configuration from environment variables (.env or deployment variables).

import os
from dotenv import load_dotenv

load_dotenv()


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _env_int(key: str, default: int) -> int:
    try:
        return int(_env(key, str(default)))
    except ValueError:
        return default


def _env_float(key: str, default: float) -> float:
    try:
        return float(_env(key, str(default)))
    except ValueError:
        return default


def _env_str_list(key: str, default: list = None) -> list:
    s = _env(key)
    if not s:
        return list(default or [])
    s = s.strip().strip("[]")
    result = []
    for x in s.split(","):
        x = x.strip().strip("[]").strip("'\"").lower()
        if x and x not in result:
            result.append(x)
    return result if result else list(default or [])


# ============================================================================
# LLM (OpenAI-compatible) -- generative data source for location data
# ============================================================================
LLM_API_KEY = _env("LLM_API_KEY", _env("OPENAI_API_KEY"))
LLM_BASE_URL = _env("LLM_BASE_URL", "https://api.openai.com/v1")
LLM_MODEL = _env("LLM_MODEL", "gpt-4o-mini")
LLM_TIMEOUT_SECONDS = _env_float("LLM_TIMEOUT_SECONDS", 120.0)

# ============================================================================
# Location population
# ============================================================================
# Telugu, Hindi, Kannada, Tamil, Marathi
AUTO_LANGUAGES = _env_str_list("AUTO_LANGUAGES", ["te", "hi", "kn", "ta", "mr"])
LOCATION_COUNTRY = _env("LOCATION_COUNTRY", "India")

POPULATE_MAX_ITEMS = {
    "sub_region": _env_int("POPULATE_MAX_SUB_REGIONS", 40),
    "local_area": _env_int("POPULATE_MAX_LOCAL_AREAS", 40),
    "settlement": _env_int("POPULATE_MAX_SETTLEMENTS", 40),
}

# Settlements are only fetched for the first N local areas of each sub-region
POPULATE_SETTLEMENT_PARENT_LIMIT = _env_int("POPULATE_SETTLEMENT_PARENT_LIMIT", 10)

# Pause before every external call (seconds)
POPULATE_REQUEST_DELAY = _env_float("POPULATE_REQUEST_DELAY", 0.5)
POPULATE_FETCH_ATTEMPTS = _env_int("POPULATE_FETCH_ATTEMPTS", 2)
POPULATE_TRANSLATION_BATCH = _env_int("POPULATE_TRANSLATION_BATCH", 40)

# "memory" keeps job history for the process lifetime, "database" persists it
JOB_STORE = _env("JOB_STORE", "memory").lower()

# ============================================================================
# Misc
# ============================================================================
LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()

# Backend API URL (for CLI --remote mode)
BACKEND_URL = _env("BACKEND_URL", "http://localhost:8000")
