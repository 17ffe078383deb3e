"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MAX_PRESENT_PER_MONTH = 16
MAX_TOPIC_LENGTH = 255
MIN_PASSWORD_LENGTH = 6

DEFAULT_STUDENT_NAME = "Default Student"
DEFAULT_STUDENT_EMAIL = "student@example.com"
FALLBACK_REPORT_NAME = "Student"

DEFAULT_POOL_SIZE = 5
MAX_POOL_SIZE = 32
DEFAULT_CONNECT_TIMEOUT = 5
DEFAULT_SESSION_DAYS = 30

CAPACITY_MESSAGE = f"Maximum {MAX_PRESENT_PER_MONTH} present entries per month reached"
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
