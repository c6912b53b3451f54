"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import ClassDuration

DURATION_HOURS = {
    ClassDuration.MIN_30.value: 0.5,
    ClassDuration.MIN_45.value: 0.75,
    ClassDuration.HR_1.value: 1.0,
    ClassDuration.HR_1_5.value: 1.5,
    ClassDuration.HR_1_75.value: 1.75,
    ClassDuration.HR_2.value: 2.0,
    ClassDuration.HR_2_5.value: 2.5,
    ClassDuration.HR_3.value: 3.0,
}

# Durations a teacher may pick when marking a class.
MARKABLE_DURATIONS = (
    ClassDuration.MIN_30,
    ClassDuration.HR_1,
    ClassDuration.HR_1_5,
    ClassDuration.HR_2,
)

DEFAULT_TOP_TEACHERS_LIMIT = 5
DEFAULT_MISSED_LOOKBACK_DAYS = 30
RECENT_CLASSES_LIMIT = 10
USER_SEARCH_LIMIT = 10
USER_LIST_LIMIT = 1000

SUBJECT_NAME_MAX = 100
SUBJECT_DESCRIPTION_MAX = 500

ATTENDANCE_ALREADY_MARKED = "Attendance already marked for this class today"
USER_NOT_FOUND = "User not found"
