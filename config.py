import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./sessions.db")
    CREATE_TABLES_ON_STARTUP = bool(data.get("CREATE_TABLES_ON_STARTUP", True))
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

    # Sessions
    SESSION_TTL_HOURS = float(data.get("SESSION_TTL_HOURS", 24))
    SESSION_MAX_CONCURRENT = int(data.get("SESSION_MAX_CONCURRENT", 0))
    SESSION_RETENTION_DAYS = float(data.get("SESSION_RETENTION_DAYS", 90))
    SESSION_REAPER_INTERVAL_SECONDS = float(data.get("SESSION_REAPER_INTERVAL_SECONDS", 0))
    SESSION_COOKIE_NAME = data.get("SESSION_COOKIE_NAME", "session_token")
