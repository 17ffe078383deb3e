import os

from . import db_config_from_env

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env(default_pool_size=1)

GOOGLE_CLIENT_ID = None
GOOGLE_CLIENT_SECRET = None

STUDENT_NAME = "Test Student"

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = False
