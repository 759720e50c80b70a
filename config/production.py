import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "approval"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "approval_db"),
}

STORE = os.getenv("STORE", "mysql")

USER_SERVICE_URL = os.getenv("USER_SERVICE_URL", "http://user-service")
LEAVE_SERVICE_URL = os.getenv("LEAVE_SERVICE_URL", "http://attendance-service")
REMOTE_TIMEOUT_SECONDS = float(os.getenv("REMOTE_TIMEOUT_SECONDS", "3"))
LEAVE_RETRY_ATTEMPTS = int(os.getenv("LEAVE_RETRY_ATTEMPTS", "1"))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
