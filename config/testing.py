import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "approval_test_db"),
}

STORE = os.getenv("STORE", "memory")

USER_SERVICE_URL = "http://users.test"
LEAVE_SERVICE_URL = "http://leave.test"
REMOTE_TIMEOUT_SECONDS = 1.0
LEAVE_RETRY_ATTEMPTS = 0

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
