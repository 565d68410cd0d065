"""
Domain Constants.

Closed value sets and field limits for notes and users.
"""

NOTE_CATEGORIES: tuple[str, ...] = (
    "Sermons",
    "Prayer",
    "Bible Study",
    "General",
    "Ministry",
    "Personal",
)

NOTE_TYPES: tuple[str, ...] = (
    "sermon",
    "prayer",
    "study",
    "general",
    "ministry",
    "personal",
)

NOTE_PRIORITIES: tuple[str, ...] = ("low", "medium", "high")
DEFAULT_PRIORITY = "medium"

TITLE_MAX_LENGTH = 200
TAG_MAX_LENGTH = 50
MAX_TAGS = 10
DUPLICATE_TITLE_SUFFIX = " (Copy)"

SORTABLE_FIELDS: tuple[str, ...] = (
    "createdAt",
    "updatedAt",
    "title",
    "category",
    "type",
    "priority",
)
DEFAULT_SORT_FIELD = "createdAt"
DEFAULT_SORT_ORDER = "desc"

# Largest row offset a signed 64-bit OFFSET accepts
MAX_OFFSET = 2**63 - 1

DEFAULT_RECENT_DAYS = 7
MAX_RECENT_DAYS = 36500

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
NAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 254
PASSWORD_MIN_LENGTH = 8
# bcrypt only looks at the first 72 bytes
PASSWORD_MAX_BYTES = 72
PASSWORD_SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'
