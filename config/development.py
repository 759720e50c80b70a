import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "approval_db"),
}

# "mysql" or "memory"
STORE = os.getenv("STORE", "mysql")

# Remote collaborators
USER_SERVICE_URL = os.getenv("USER_SERVICE_URL", "http://localhost:8081")
LEAVE_SERVICE_URL = os.getenv("LEAVE_SERVICE_URL", "http://localhost:8082")
REMOTE_TIMEOUT_SECONDS = float(os.getenv("REMOTE_TIMEOUT_SECONDS", "5"))
LEAVE_RETRY_ATTEMPTS = int(os.getenv("LEAVE_RETRY_ATTEMPTS", "0"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, schema.sql is applied on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
