"""Configuration for the Asana digest.

Credentials and destinations come from environment variables (optionally
via a .env file); display settings and the Slack posting identity come
from an optional YAML file. The resulting DigestConfig is built once in
main() and passed to each component explicitly.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

DEFAULT_FIELD_NAMES: tuple[str, ...] = ("午前I", "午前II", "午後I", "午後II")


class ConfigError(ValueError):
    """Required configuration is missing or invalid."""


@dataclass(frozen=True)
class AsanaConfig:
    """Asana access and search filters."""

    token: str
    workspace_gid: str
    project_gids: tuple[str, ...] = ()
    assignee_gid: str = ""
    page_size: int = 100


@dataclass(frozen=True)
class SlackConfig:
    """Slack destination. Webhook takes precedence over bot token + channel."""

    webhook_url: str = ""
    bot_token: str = ""
    channel_id: str = ""
    username: str = "Asana"
    icon_emoji: str = ":ribbon:"

    @property
    def uses_webhook(self) -> bool:
        return bool(self.webhook_url)

    @property
    def is_configured(self) -> bool:
        return bool(self.webhook_url) or bool(self.bot_token and self.channel_id)


@dataclass(frozen=True)
class DisplayConfig:
    """Message rendering settings."""

    field_names: tuple[str, ...] = DEFAULT_FIELD_NAMES
    no_project_label: str = "（No Project）"
    link_label: str = "open"


@dataclass(frozen=True)
class FileSettings:
    """Settings read from the optional YAML file."""

    display: DisplayConfig = field(default_factory=DisplayConfig)
    slack: SlackConfig = field(default_factory=SlackConfig)


@dataclass(frozen=True)
class DigestConfig:
    """Top-level configuration for one digest run."""

    asana: AsanaConfig
    slack: SlackConfig
    display: DisplayConfig = field(default_factory=DisplayConfig)
    date_override: str = ""

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        settings: FileSettings | None = None,
    ) -> DigestConfig:
        """Create config from environment variables.

        Required: ASANA_TOKEN, ASANA_WORKSPACE_GID, and either
        SLACK_WEBHOOK_URL or both SLACK_BOT_TOKEN and SLACK_CHANNEL_ID.
        Optional: ASANA_PROJECT_GIDS (comma-separated), ASANA_ASSIGNEE_GID,
        DATE_OVERRIDE.

        Slack variables set in the environment override the same keys from
        the YAML ``slack`` section.

        Raises:
            ConfigError: If required variables are missing.
        """
        env = os.environ if environ is None else environ
        settings = settings or FileSettings()

        def get(name: str) -> str:
            return (env.get(name) or "").strip()

        missing = []
        token = get("ASANA_TOKEN")
        if not token:
            missing.append("ASANA_TOKEN")
        workspace = get("ASANA_WORKSPACE_GID")
        if not workspace:
            missing.append("ASANA_WORKSPACE_GID")

        base = settings.slack
        slack = replace(
            base,
            webhook_url=get("SLACK_WEBHOOK_URL") or base.webhook_url,
            bot_token=get("SLACK_BOT_TOKEN") or base.bot_token,
            channel_id=get("SLACK_CHANNEL_ID") or base.channel_id,
        )
        if not slack.is_configured:
            missing.append("SLACK_WEBHOOK_URL or SLACK_BOT_TOKEN+SLACK_CHANNEL_ID")

        if missing:
            raise ConfigError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        return cls(
            asana=AsanaConfig(
                token=token,
                workspace_gid=workspace,
                project_gids=split_gids(get("ASANA_PROJECT_GIDS")),
                assignee_gid=get("ASANA_ASSIGNEE_GID"),
            ),
            slack=slack,
            display=settings.display,
            date_override=get("DATE_OVERRIDE"),
        )


def split_gids(raw: str) -> tuple[str, ...]:
    """Split a comma-separated gid list, dropping blanks."""
    return tuple(s.strip() for s in raw.split(",") if s.strip())


def _build_sub(cls: type, data: dict[str, Any] | None) -> Any:
    """Build a frozen dataclass from a dict, ignoring unknown keys."""
    if data is None:
        return cls()
    valid = {f.name for f in cls.__dataclass_fields__.values()}
    filtered = {k: v for k, v in data.items() if k in valid}
    return cls(**filtered)


def _section(raw: dict[str, Any], name: str) -> dict[str, Any] | None:
    data = raw.get(name)
    if data is not None and not isinstance(data, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return data


def _build_display(data: dict[str, Any] | None) -> DisplayConfig:
    if data and "field_names" in data:
        names = data["field_names"]
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise ConfigError("display.field_names must be a list of strings")
        data = {**data, "field_names": tuple(names)}
    return _build_sub(DisplayConfig, data)


def load_settings(config_path: Path) -> FileSettings:
    """Load display and Slack identity settings from a YAML file.

    Example::

        display:
          field_names: [午前I, 午前II, 午後I, 午後II]
          no_project_label: （No Project）
        slack:
          username: Asana
          icon_emoji: ":ribbon:"

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If YAML is malformed.
        ConfigError: If a section is not a mapping or field_names is not a
            list of strings.
    """
    raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        return FileSettings()

    return FileSettings(
        display=_build_display(_section(raw, "display")),
        slack=_build_sub(SlackConfig, _section(raw, "slack")),
    )
