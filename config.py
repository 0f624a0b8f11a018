# config.py
import os


def env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# -------------------------
# Configurable constants
# -------------------------
DEFAULT_PORT = int(os.getenv("PORT", 3000))
HOST = os.getenv("HOST", "0.0.0.0")

DOMAINS_FILE = os.getenv("DOMAINS_FILE", "disposable_domains.json")      # JSON array of domains
RATE_LIMIT_FILE = os.getenv("RATE_LIMIT_FILE", "rate_limit_data.json")   # ip -> {count, resetTime}
MAX_REQUESTS_PER_DAY = int(os.getenv("MAX_REQUESTS_PER_DAY", 100))

# Render / Heroku sit behind a proxy; without this every client shares its IP
TRUST_PROXY = env_flag("TRUST_PROXY", True)

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
