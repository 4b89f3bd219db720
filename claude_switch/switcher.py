import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .config import BackupConfig, Config, ConfigStore, Provider, TokenKind
from .detector import (
    AUTH_TOKEN_KEY,
    BASE_URL_KEY,
    HAIKU_MODEL_KEY,
    OPUS_MODEL_KEY,
    SONNET_MODEL_KEY,
    TIMEOUT_KEY,
    detect_provider,
    detect_token_kind,
    is_alternate_provider_key,
    mask_token,
    validate_token_for_provider,
)

logger = logging.getLogger(__name__)

ZAI_BASE_URL = "https://api.z.ai/api/anthropic"
ZAI_TIMEOUT_MS = "3000000"
ZAI_OPUS_MODEL = "GLM-4.7"
ZAI_SONNET_MODEL = "GLM-4.7"
ZAI_HAIKU_MODEL = "GLM-4.5-Air"

TokenSupplierFunc = Callable[[], str]


class Outcome(str, Enum):
    SUCCESS = "success"
    ALREADY_ACTIVE = "already_active"
    FALLBACK_EMPTY_CONFIG = "fallback_empty_config"
    NOTHING_TO_CLEAR = "nothing_to_clear"


@dataclass
class Notice:
    level: str
    text: str


@dataclass
class SwitchResult:
    outcome: Outcome
    provider: Provider
    notices: List[Notice] = field(default_factory=list)
    backup_created_at: Optional[int] = None

    def info(self, text: str):
        self.notices.append(Notice("info", text))

    def warn(self, text: str):
        self.notices.append(Notice("warning", text))

    def success(self, text: str):
        self.notices.append(Notice("success", text))


@dataclass
class BackupStatus:
    available: bool = False
    is_default: bool = False
    created_at: Optional[int] = None
    token_kind: Optional[TokenKind] = None
    unknown_format: bool = False


@dataclass
class StatusReport:
    provider: Provider
    is_empty: bool
    base_url: str = ""
    details: List[Tuple[str, str]] = field(default_factory=list)
    token_kind: Optional[TokenKind] = None
    other_key_count: int = 0
    backup: BackupStatus = field(default_factory=BackupStatus)
    saved_token: bool = False


def format_timestamp(created_at: Optional[int]) -> str:
    if created_at is None:
        return "unknown"
    moment = datetime.fromtimestamp(created_at, tz=timezone.utc)
    return moment.strftime("%Y-%m-%d %H:%M:%S UTC")


def build_zai_config(token: str) -> Config:
    return Config(env={
        AUTH_TOKEN_KEY: token,
        BASE_URL_KEY: ZAI_BASE_URL,
        TIMEOUT_KEY: ZAI_TIMEOUT_MS,
        OPUS_MODEL_KEY: ZAI_OPUS_MODEL,
        SONNET_MODEL_KEY: ZAI_SONNET_MODEL,
        HAIKU_MODEL_KEY: ZAI_HAIKU_MODEL,
    })


class SwitchWorkflow:
    """Moves the assistant between Anthropic and Z.AI.

    Switching to Z.AI backs up an Anthropic configuration first (unless a
    valid backup already exists); switching back restores that backup with
    the Z.AI keys stripped.
    """

    def __init__(self, store: ConfigStore):
        self.store = store

    def switch_to_default(self) -> SwitchResult:
        current = self.store.load_settings()

        if detect_provider(current) == Provider.ANTHROPIC:
            result = SwitchResult(Outcome.ALREADY_ACTIVE, Provider.ANTHROPIC)
            result.warn("Already using Anthropic configuration")
            return result

        is_default, backup = self.store.load_backup()

        if not is_default or backup is None:
            self.store.save_settings(Config())
            logger.info("No Anthropic backup, wrote empty settings to %s", self.store.settings_file)

            result = SwitchResult(Outcome.FALLBACK_EMPTY_CONFIG, Provider.ANTHROPIC)
            result.warn("No valid Anthropic backup found")
            result.warn("Created empty configuration (re-authentication required)")
            return result

        restored = Config(env={
            key: value
            for key, value in backup.env.items()
            if not is_alternate_provider_key(key)
        })
        self.store.save_settings(restored)

        result = SwitchResult(
            Outcome.SUCCESS,
            Provider.ANTHROPIC,
            backup_created_at=backup.metadata.created_at,
        )
        if backup.metadata.created_at is not None:
            result.info(f"Restoring from backup created at: {format_timestamp(backup.metadata.created_at)}")
        result.success("Anthropic configuration restored from backup")
        return result

    def switch_to_alternate(self, token_supplier: TokenSupplierFunc) -> SwitchResult:
        current = self.store.load_settings()
        current_provider = detect_provider(current)

        if current_provider == Provider.ZAI:
            result = SwitchResult(Outcome.ALREADY_ACTIVE, Provider.ZAI)
            result.warn("Already using GLM configuration")
            return result

        result = SwitchResult(Outcome.SUCCESS, Provider.ZAI)

        if current_provider == Provider.ANTHROPIC:
            self._backup_anthropic_if_needed(current, result)
        elif current_provider == Provider.UNKNOWN:
            is_default, backup = self.store.load_backup()
            if is_default and backup is not None:
                result.info("Using existing Anthropic backup")
            else:
                result.warn("No Anthropic configuration to backup")
                result.warn("You may need to re-login when switching back")
        elif current_provider == Provider.CUSTOM:
            result.warn("Current config is custom provider - not backing up")
            result.warn("Anthropic backup will be preserved if it exists")

        token = token_supplier()
        validate_token_for_provider(token, Provider.ZAI)

        self.store.save_settings(build_zai_config(token))
        result.success("GLM configuration applied successfully")
        return result

    def _backup_anthropic_if_needed(self, current: Config, result: SwitchResult):
        is_default, existing = self.store.load_backup()

        if is_default and existing is not None:
            result.info("Existing Anthropic backup found (preserving configuration)")
            if existing.metadata.created_at is not None:
                result.info(f"Backed up at: {format_timestamp(existing.metadata.created_at)}")
            result.backup_created_at = existing.metadata.created_at
            return

        self.store.save_backup(current, Provider.ANTHROPIC)
        result.success("Anthropic configuration backed up")

    def show_status(self) -> StatusReport:
        config = self.store.load_settings()
        provider = detect_provider(config)
        base_url = config.env.get(BASE_URL_KEY, "")

        report = StatusReport(
            provider=provider,
            is_empty=config.is_empty(),
            base_url=base_url,
        )

        if provider == Provider.ZAI:
            self._describe_zai(config, report)
        elif provider == Provider.ANTHROPIC:
            report.details.append(("Base URL", "api.anthropic.com (default)"))
        elif provider == Provider.CUSTOM:
            report.details.append(("Base URL", base_url))

        report.other_key_count = sum(
            1 for key in config.env if not is_alternate_provider_key(key)
        )
        report.backup = self._backup_status()
        report.saved_token = self.store.load_token() is not None
        return report

    def _describe_zai(self, config: Config, report: StatusReport):
        env = config.env
        report.details.append(("Base URL", report.base_url))

        for label, key in (
            ("Sonnet Model", SONNET_MODEL_KEY),
            ("Opus Model", OPUS_MODEL_KEY),
            ("Haiku Model", HAIKU_MODEL_KEY),
        ):
            if key in env:
                report.details.append((label, env[key]))

        if TIMEOUT_KEY in env:
            report.details.append(("Timeout", f"{env[TIMEOUT_KEY]} ms"))

        token = env.get(AUTH_TOKEN_KEY)
        if token is not None:
            report.token_kind = detect_token_kind(token)
            suffix = {
                TokenKind.ZAI_API_KEY: " (API key)",
                TokenKind.ANTHROPIC_WEB_TOKEN: " (web token - unexpected for Z.AI)",
            }.get(report.token_kind, "")
            report.details.append(("Auth Token", mask_token(token) + suffix))

    def _backup_status(self) -> BackupStatus:
        is_default, backup = self.store.load_backup()

        if is_default and backup is not None:
            return BackupStatus(
                available=True,
                is_default=True,
                created_at=backup.metadata.created_at,
                token_kind=_backup_token_kind(backup),
            )

        return BackupStatus(unknown_format=self.store.has_backup_file())

    def clear_token(self) -> SwitchResult:
        if self.store.load_token() is None:
            result = SwitchResult(Outcome.NOTHING_TO_CLEAR, Provider.ZAI)
            result.warn("No saved token found")
            return result

        self.store.remove_token()
        result = SwitchResult(Outcome.SUCCESS, Provider.ZAI)
        result.success("Saved token removed successfully")
        return result


def _backup_token_kind(backup: BackupConfig) -> Optional[TokenKind]:
    token = backup.env.get(AUTH_TOKEN_KEY)
    if token is None:
        return None
    return detect_token_kind(token)
