import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "academic_records_test"),
}

PUBLIC_BASE_URL = "http://testserver"

TOKEN_VALIDITY_MINUTES = 15
TOKEN_MAX_VALIDITY_MINUTES = 720
TOKEN_BYTES = 32
# No background sweeper in tests; sweeps run on issue.
TOKEN_SWEEP_SECONDS = 0

DEBUG = False
TESTING = True

LOG_LEVEL = "WARNING"
LOG_JSON = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
