"""Collection names, table names and default values shared across the tool."""

# Firestore collections
USERS_COLLECTION = "users"
CHANNELS_COLLECTION = "channels"
MESSAGES_COLLECTION = "messages"
REPLIES_COLLECTION = "replies"
REACTIONS_COLLECTION = "reactions"
TASKS_COLLECTION = "tasks"
NOTIFICATIONS_COLLECTION = "notifications"
STUDENTS_COLLECTION = "students"
CLASSES_COLLECTION = "classes"
COURSES_COLLECTION = "courses"
ENROLLMENTS_COLLECTION = "enrollments"
PAYMENTS_COLLECTION = "payments"

# Option collections: Firestore collection -> Supabase table
OPTION_COLLECTIONS = {
    "funnelSteps": "funnel_steps",
    "courseInterests": "course_interests",
    "platforms": "platforms",
    "countries": "countries",
}
CITIES_COLLECTION = "cities"
CATEGORIES_COLLECTION = "categories"

# Supabase tables
USER_PROFILES_TABLE = "user_profiles"

# Source field used for ascending ordering when a collection carries it
CREATED_AT_FIELD = "createdAt"

# Status defaults
TASK_STATUS_DEFAULT = "pending"
CLASS_STATUS_DEFAULT = "active"
ENROLLMENT_STATUS_DEFAULT = "active"
PAYMENT_STATUS_DEFAULT = "pending"
PAYMENT_RECORD_STATUS_DEFAULT = "completed"

# Retry
MAX_RETRY_DELAY = 60
RETRY_BACKOFF_FACTOR = 2.0
RETRYABLE_STATUS_CODES = frozenset({"429", "500", "502", "503", "504"})

# Process exit codes
EXIT_OK = 0
EXIT_FATAL = 1
EXIT_COMPLETED_WITH_ERRORS = 2

# Log file naming
LOG_FILE_PREFIX = "migration"
RUN_TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S"
