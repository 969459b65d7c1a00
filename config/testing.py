SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

# In-memory cache, no remote store
DATA_DIR = ""
LOCAL_CACHE_MAX_BYTES = 0
CLOUD_ENABLED = False
REMOTE_DB_CONFIG = {
    "host": "localhost",
    "port": 3306,
    "user": "root",
    "password": "",
    "database": "madrasti_test",
}
SYNC_DEBOUNCE_SECONDS = 0.0
SYNC_LOAD_TIMEOUT_SECONDS = 0.0

AUTO_INIT_DB = False

SYSTEM_ADMIN_USERNAME = "operator"
SYSTEM_ADMIN_PASSWORD_HASH = ""

SMTP_HOST = ""
SMTP_PORT = 587
SMTP_USER = ""
SMTP_PASSWORD = ""
SMTP_USE_TLS = False
SMTP_SENDER = ""
