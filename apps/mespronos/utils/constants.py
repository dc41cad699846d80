"""
Constants used across the MesPronos reminder system.
"""

# Setting keys (database "settings" table) and their environment fallbacks
REMINDER_ENABLED_KEY = "reminder_enabled"
REMINDER_ENABLED_ENV = "REMINDER_ENABLED"
REMINDER_HOURS_KEY = "reminder_hours"
REMINDER_HOURS_ENV = "REMINDER_HOURS"

SITE_NAME_KEY = "site_name"
SITE_NAME_ENV = "SITE_NAME"
DEFAULT_SITE_NAME = "MesPronos"

SITE_URL_KEY = "site_url"
SITE_URL_ENV = "SITE_URL"
DEFAULT_SITE_URL = "http://localhost:8000"

DISPLAY_TIMEZONE_KEY = "display_timezone"
DISPLAY_TIMEZONE_ENV = "DISPLAY_TIMEZONE"

ADMIN_API_TOKEN_KEY = "admin_api_token"
ADMIN_API_TOKEN_ENV = "ADMIN_API_TOKEN"

# Seeded on startup when absent
DEFAULT_REMINDER_HOURS = "24,2"
