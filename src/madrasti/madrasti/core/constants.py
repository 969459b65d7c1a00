"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Slot keys persisted per school as "{school_id}_{slot_key}".
SLOT_SETTINGS = "settings_v1"
SLOT_WEEK = "week_v1"
SLOT_SUBJECTS = "subjects_v1"
SLOT_CLASSES = "classes_v1"
SLOT_SCHEDULE = "schedule_v1"
SLOT_STUDENTS = "students_v1"
SLOT_TEACHERS = "teachers_v1"
SLOT_PLANS = "plans_v1"
SLOT_ARCHIVES = "archives_v1"
SLOT_ATTENDANCE = "attendance_v1"
SLOT_MESSAGES = "messages_v1"
SLOT_ATTENDANCE_ARCHIVES = "attendance_archives_v1"

# Tenant registry: local cache key and remote system documents.
REGISTRY_LOCAL_KEY = "system_schools"
REGISTRY_REMOTE_KEY = "schools_registry"
PRICING_REMOTE_KEY = "pricing_config"
SYSTEM_ADMIN_PROFILE_KEY = "system_admin_profile"

DEFAULT_DEBOUNCE_SECONDS = 1.0

DAYS_OF_WEEK = ("الأحد", "الاثنين", "الثلاثاء", "الأربعاء", "الخميس")
PERIODS_PER_DAY = 7

TRIAL_DAYS = 7
QUARTERLY_DAYS = 90
ANNUAL_DAYS = 365

DEFAULT_CLASS_GRADE = "عام"
