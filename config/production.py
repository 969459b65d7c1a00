import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False

DATA_DIR = os.getenv("DATA_DIR", "instance/cache")
LOCAL_CACHE_MAX_BYTES = int(os.getenv("LOCAL_CACHE_MAX_BYTES", "5242880"))

CLOUD_ENABLED = bool(int(os.getenv("CLOUD_ENABLED", "1")))
REMOTE_DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "madrasti"),
}
SYNC_DEBOUNCE_SECONDS = float(os.getenv("SYNC_DEBOUNCE_SECONDS", "1.0"))
# How long a request waits for a school's first remote fetch before serving cached data
SYNC_LOAD_TIMEOUT_SECONDS = float(os.getenv("SYNC_LOAD_TIMEOUT_SECONDS", "5.0"))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

SYSTEM_ADMIN_USERNAME = os.getenv("SYSTEM_ADMIN_USERNAME", "")
SYSTEM_ADMIN_PASSWORD_HASH = os.getenv("SYSTEM_ADMIN_PASSWORD_HASH", "")

SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_USE_TLS = bool(int(os.getenv("SMTP_USE_TLS", "1")))
SMTP_SENDER = os.getenv("SMTP_SENDER", "")
