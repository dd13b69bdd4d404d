import os
import tempfile

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "face_attendance_test"),
}

STORAGE_BACKEND = "memory"

FACE_DISTANCE_THRESHOLD = 0.48

UPLOAD_FOLDER = os.path.join(tempfile.gettempdir(), "face_attendance_test_uploads")

DEBUG = False
TESTING = True

LOG_LEVEL = "WARNING"
# None: console only, no log files
LOG_DIR = None

AUTO_INIT_DB = False
AUTO_SEED_DB = False
