"""Configuration enums for type-safe settings.

These enums inherit from str so they serialize as plain strings, which is
what lets them cross the workflow/activity boundary.
"""

from enum import Enum


class PostHogOperation(str, Enum):
    """Worker operations, one per PostHog activity.

    The value is the Temporal activity name. Callers pass members of this
    enum as the operation reference when scheduling or invoking work.
    """

    CAPTURE = "posthog_capture"
    IDENTIFY = "posthog_identify"
    GROUP_IDENTIFY = "posthog_group_identify"
    ALIAS = "posthog_alias"
    CAPTURE_EXCEPTION = "posthog_capture_exception"

    GET_FEATURE_FLAG = "posthog_get_feature_flag"
    IS_FEATURE_ENABLED = "posthog_is_feature_enabled"
    GET_FEATURE_FLAG_PAYLOAD = "posthog_get_feature_flag_payload"
    GET_FEATURE_FLAG_RESULT = "posthog_get_feature_flag_result"
    GET_ALL_FLAGS = "posthog_get_all_flags"
    GET_ALL_FLAGS_AND_PAYLOADS = "posthog_get_all_flags_and_payloads"


class LogLevel(str, Enum):
    """Log levels accepted by LOG_LEVEL."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
