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
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./receivables.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    ENABLE_SENTRY = data.get("ENABLE_SENTRY", 0)
    DSN_SENTRY = data.get("DSN_SENTRY", "")
    SENTRY_ENVIRONMENT = data.get("SENTRY_ENVIRONMENT", "dev")
    INIT_SCHEMA_ON_STARTUP = bool(data.get("INIT_SCHEMA_ON_STARTUP", True))

    # Report cache: "memory" or "redis"
    CACHE_BACKEND = data.get("CACHE_BACKEND", "memory")
    REDIS_URL = data.get("REDIS_URL", "redis://localhost:6379/0")
    CACHE_TTL_SECONDS = data.get("CACHE_TTL_SECONDS", 1800)

    # Outbound notifications; log only when no webhook is set
    NOTIFIER_WEBHOOK_URL = data.get("NOTIFIER_WEBHOOK_URL", None)
    COMPANY_NAME = data.get("COMPANY_NAME", "Receivables")

    INVOICE_NUMBER_PREFIX = data.get("INVOICE_NUMBER_PREFIX", "INV")

    # Recurring invoice worker
    RECURRING_ENABLED = bool(data.get("RECURRING_ENABLED", True))
    RECURRING_INTERVAL_SECONDS = data.get("RECURRING_INTERVAL_SECONDS", 3600)

    # Overdue escalation worker
    OVERDUE_ENABLED = bool(data.get("OVERDUE_ENABLED", True))
    OVERDUE_INTERVAL_SECONDS = data.get("OVERDUE_INTERVAL_SECONDS", 86400)  # Daily
    INSTALLMENT_REMINDER_DAYS_AHEAD = data.get("INSTALLMENT_REMINDER_DAYS_AHEAD", 7)
