"""asana-digest: daily Slack digest of Asana tasks due or starting on a JST date."""

__version__ = "0.3.0"

from asana_digest.asana_client import AsanaAPIError, AsanaClient
from asana_digest.config import (
    AsanaConfig,
    ConfigError,
    DigestConfig,
    DisplayConfig,
    FileSettings,
    SlackConfig,
    load_settings,
)
from asana_digest.dates import (
    JST,
    InvalidDateError,
    UtcRange,
    jst_day_to_utc_range,
    resolve_target_date,
    today_jst,
)
from asana_digest.formatter import (
    build_field_labels,
    format_due_message,
    format_start_message,
    format_task_line,
)
from asana_digest.slack_client import (
    SlackAPIError,
    SlackClient,
    SlackWebhook,
    build_notifier,
    deliver,
)
from asana_digest.task_types import CustomField, ResultSet, Task

__all__ = [
    # asana_client
    "AsanaAPIError",
    "AsanaClient",
    # config
    "AsanaConfig",
    "ConfigError",
    "DigestConfig",
    "DisplayConfig",
    "FileSettings",
    "SlackConfig",
    "load_settings",
    # dates
    "JST",
    "InvalidDateError",
    "UtcRange",
    "jst_day_to_utc_range",
    "resolve_target_date",
    "today_jst",
    # formatter
    "build_field_labels",
    "format_due_message",
    "format_start_message",
    "format_task_line",
    # slack_client
    "SlackAPIError",
    "SlackClient",
    "SlackWebhook",
    "build_notifier",
    "deliver",
    # task_types
    "CustomField",
    "ResultSet",
    "Task",
]
