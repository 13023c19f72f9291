"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

DEFAULT_SHIFT_START = "08:00"
DEFAULT_SHIFT_END = "16:00"
DEFAULT_GRACE_MINUTES = 15
DEFAULT_CATEGORY = "Standard"

DEFAULT_SLOT_SUBJECT = "New Subject"
DEFAULT_SLOT_DAY = "Monday"
DEFAULT_SLOT_START = "08:00"
DEFAULT_SLOT_END = "09:00"

DEFAULT_TIMETABLE_LABEL = "Standard Schedule"
DEFAULT_TARGET_NAME = "Unknown Entity"

# Record store collections
SHIFTS = "shifts"
SHIFT_CATEGORIES = "shift_categories"
SHIFT_ASSIGNMENTS = "shift_assignments"
TIME_TABLES = "time_tables"
USERS = "users"
CLASSES = "classes"

# Corrective statements offered for known schema drift
SCHEMA_PATCHES = {
    (SHIFT_ASSIGNMENTS, "start_date"): (
        "ALTER TABLE shift_assignments ADD COLUMN IF NOT EXISTS start_date DATE; "
        "ALTER TABLE shift_assignments ADD COLUMN IF NOT EXISTS end_date DATE;"
    ),
    (SHIFT_ASSIGNMENTS, "end_date"): (
        "ALTER TABLE shift_assignments ADD COLUMN IF NOT EXISTS start_date DATE; "
        "ALTER TABLE shift_assignments ADD COLUMN IF NOT EXISTS end_date DATE;"
    ),
    (SHIFTS, "early_mark_minutes"): (
        "ALTER TABLE shifts ADD COLUMN IF NOT EXISTS early_mark_minutes INT DEFAULT 0;"
    ),
    (TIME_TABLES, "school"): "ALTER TABLE time_tables ADD COLUMN IF NOT EXISTS school VARCHAR(100);",
}
