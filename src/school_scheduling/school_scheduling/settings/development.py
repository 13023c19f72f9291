import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# memory | mysql | rest
STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_scheduling"),
}

REST_URL = os.getenv("REST_URL", "")
REST_KEY = os.getenv("REST_KEY", "")
REST_TIMEOUT = float(os.getenv("REST_TIMEOUT", "15"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply database/schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
