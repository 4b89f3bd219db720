import json
import logging
import os
import platform
import time
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigIOError, ConfigParseError, HomeDirectoryUnavailable

logger = logging.getLogger(__name__)

BACKUP_FORMAT_VERSION = "2.2.0"
DEFAULT_TOKEN_ENV_VARS = ["Z_AI_AUTH_TOKEN", "GLM_AUTH_TOKEN"]


class Provider(str, Enum):
    ANTHROPIC = "anthropic"
    ZAI = "z_ai"
    CUSTOM = "custom"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        return {
            Provider.ANTHROPIC: "Anthropic (Default)",
            Provider.ZAI: "Z.AI (GLM Models)",
            Provider.CUSTOM: "Custom",
            Provider.UNKNOWN: "Unknown",
        }[self]


class TokenKind(str, Enum):
    ZAI_API_KEY = "z_ai_api_key"
    ANTHROPIC_WEB_TOKEN = "anthropic_web_token"
    UNKNOWN = "unknown"


class Config(BaseModel):
    """The ``env`` block of the assistant's settings.json."""

    env: Dict[str, str] = Field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.env


class BackupMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    provider: str
    created_at: Optional[int] = None
    format_version: str = Field(default=BACKUP_FORMAT_VERSION, alias="version")


class BackupConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    metadata: BackupMetadata = Field(alias="_metadata")
    env: Dict[str, str] = Field(default_factory=dict)


class StorePaths(BaseModel):
    config_dir: Path
    settings_file: Path
    backup_file: Path
    metadata_file: Path
    token_file: Path

    @classmethod
    def for_directory(cls, config_dir: Path) -> "StorePaths":
        return cls(
            config_dir=config_dir,
            settings_file=config_dir / "settings.json",
            backup_file=config_dir / "settings.json.backup",
            metadata_file=config_dir / "settings.json.meta",
            token_file=config_dir / ".z_ai_token",
        )

    @classmethod
    def resolve(cls, app_config: Optional["AppConfig"] = None) -> "StorePaths":
        """Pick the assistant's config directory.

        ``CLAUDE_CONFIG_DIR`` wins over the ``claude_dir`` preference, which
        wins over ``~/.claude``.
        """
        override = os.environ.get("CLAUDE_CONFIG_DIR")
        if override:
            return cls.for_directory(_expand(override))

        if app_config is not None and app_config.claude_dir:
            return cls.for_directory(_expand(app_config.claude_dir))

        return cls.for_directory(home_dir() / ".claude")


def home_dir() -> Path:
    try:
        return Path.home()
    except (RuntimeError, KeyError) as e:
        raise HomeDirectoryUnavailable(f"Could not find home directory: {e}") from e


def _expand(raw: str) -> Path:
    try:
        return Path(raw).expanduser()
    except (RuntimeError, KeyError) as e:
        raise HomeDirectoryUnavailable(f"Could not expand '{raw}': {e}") from e


class AppConfig(BaseModel):
    version: str = "1.0.0"
    claude_dir: Optional[str] = None
    token_env_vars: List[str] = Field(default_factory=lambda: list(DEFAULT_TOKEN_ENV_VARS))


class AppConfigManager:
    """Preferences of the switcher itself, kept apart from the assistant's files."""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or self._get_config_dir()
        self.config_path = self.config_dir / "config.yaml"

    def _get_config_dir(self) -> Path:
        if platform.system() == "Windows":
            return home_dir() / "AppData" / "Roaming" / "claude-switch"
        else:
            return home_dir() / ".config" / "claude-switch"

    def load(self) -> AppConfig:
        try:
            if self.config_path.exists():
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f)
                    return AppConfig(**data) if data else AppConfig()
        except (OSError, yaml.YAMLError, TypeError, ValidationError) as e:
            logger.warning("Ignoring unreadable preferences at %s: %s", self.config_path, e)
        return AppConfig()

    def save(self, config: AppConfig):
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            yaml.dump(config.model_dump(), f, default_flow_style=False)


class ConfigStore:
    """Owns every file the switcher reads or writes under the config directory.

    All writes go through :meth:`save_atomic`, so the settings, backup and
    metadata files are always either the old or the new content.
    """

    def __init__(self, paths: StorePaths):
        self.paths = paths

    @property
    def settings_file(self) -> Path:
        return self.paths.settings_file

    @property
    def backup_file(self) -> Path:
        return self.paths.backup_file

    @property
    def metadata_file(self) -> Path:
        return self.paths.metadata_file

    @property
    def token_file(self) -> Path:
        return self.paths.token_file

    def load(self, path: Path) -> Config:
        if not path.exists():
            return Config()

        try:
            content = path.read_text(encoding='utf-8')
        except OSError as e:
            raise ConfigIOError(f"Failed to read config file at {path}: {e}") from e

        try:
            return Config.model_validate(json.loads(content))
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigParseError(f"Failed to parse config file at {path}: {e}") from e

    def save_atomic(self, path: Path, model: BaseModel):
        document = _to_document(model)
        temp_path = path.with_name(path.name + ".tmp")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(temp_path, path)
        except OSError as e:
            raise ConfigIOError(f"Failed to write config file at {path}: {e}") from e

        logger.debug("Wrote %s", path)

    def load_settings(self) -> Config:
        return self.load(self.settings_file)

    def save_settings(self, config: Config):
        self.save_atomic(self.settings_file, config)

    def has_backup_file(self) -> bool:
        return self.backup_file.exists()

    def load_backup(self) -> Tuple[bool, Optional[BackupConfig]]:
        """Return ``(is_default_provider, backup)``.

        Accepts both the current format (with ``_metadata``) and the legacy
        bare settings format, which is always treated as an Anthropic backup.
        A missing or malformed backup is reported as ``(False, None)``; a backup
        that exists but cannot be read raises :class:`ConfigIOError`.
        """
        if not self.backup_file.exists():
            return False, None

        try:
            text = self.backup_file.read_text(encoding='utf-8')
        except OSError as e:
            raise ConfigIOError(f"Failed to read backup file at {self.backup_file}: {e}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.debug("Backup at %s is not valid JSON: %s", self.backup_file, e)
            return False, None

        try:
            backup = BackupConfig.model_validate(data)
            return backup.metadata.provider == Provider.ANTHROPIC.value, backup
        except ValidationError:
            pass

        try:
            legacy = Config.model_validate(data)
        except ValidationError as e:
            logger.debug("Backup at %s has an unknown format: %s", self.backup_file, e)
            return False, None

        metadata = BackupMetadata(
            provider=Provider.ANTHROPIC.value,
            created_at=_now(),
            format_version=BACKUP_FORMAT_VERSION,
        )
        return True, BackupConfig(metadata=metadata, env=legacy.env)

    def save_backup(self, config: Config, provider: Provider):
        metadata = BackupMetadata(
            provider=provider.value,
            created_at=_now(),
            format_version=BACKUP_FORMAT_VERSION,
        )
        backup = BackupConfig(metadata=metadata, env=dict(config.env))

        self.save_atomic(self.backup_file, backup)
        self.save_atomic(self.metadata_file, metadata)

    def save_token(self, token: str):
        try:
            self.token_file.parent.mkdir(parents=True, exist_ok=True)
            self.token_file.write_text(token, encoding='utf-8')
            if os.name == "posix":
                self.token_file.chmod(0o600)
        except OSError as e:
            raise ConfigIOError(f"Failed to save token to {self.token_file}: {e}") from e

        logger.debug("Saved token to %s", self.token_file)

    def load_token(self) -> Optional[str]:
        if not self.token_file.exists():
            return None

        try:
            token = self.token_file.read_text(encoding='utf-8').strip()
        except OSError as e:
            raise ConfigIOError(f"Failed to read saved token at {self.token_file}: {e}") from e

        return token or None

    def remove_token(self):
        if not self.token_file.exists():
            return

        try:
            self.token_file.unlink()
        except OSError as e:
            raise ConfigIOError(f"Failed to remove saved token at {self.token_file}: {e}") from e

        logger.debug("Removed %s", self.token_file)


def _now() -> int:
    return int(time.time())


def _to_document(model: BaseModel) -> Dict[str, Any]:
    # empty env blocks are omitted, matching what the assistant itself writes
    document = model.model_dump(by_alias=True)
    if "env" in document and not document["env"]:
        del document["env"]
    return document
