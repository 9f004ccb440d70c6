import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "academic_records"),
}

PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:5000")

TOKEN_VALIDITY_MINUTES = int(os.getenv("TOKEN_VALIDITY_MINUTES", "15"))
TOKEN_MAX_VALIDITY_MINUTES = int(os.getenv("TOKEN_MAX_VALIDITY_MINUTES", "720"))
TOKEN_BYTES = int(os.getenv("TOKEN_BYTES", "32"))
TOKEN_SWEEP_SECONDS = float(os.getenv("TOKEN_SWEEP_SECONDS", "60"))

DEBUG = False

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = bool(int(os.getenv("LOG_JSON", "1")))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
