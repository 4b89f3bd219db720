"""
claude-switch - Claude Code API provider switcher

Swaps Claude Code's settings.json between the Anthropic default configuration
and a Z.AI (GLM) API key, keeping a backup of the Anthropic settings so they
can be restored.
"""

__version__ = "0.1.0"
__author__ = "claude-switch Contributors"
__description__ = "Switch Claude Code between Anthropic and Z.AI (GLM) API providers"

from .config import (
    AppConfig,
    AppConfigManager,
    BackupConfig,
    BackupMetadata,
    Config,
    ConfigStore,
    Provider,
    StorePaths,
    TokenKind,
)
from .detector import (
    detect_provider,
    detect_token_kind,
    is_alternate_provider_key,
    mask_token,
    validate_token_for_provider,
)
from .errors import (
    ClaudeSwitchError,
    ConfigIOError,
    ConfigParseError,
    EmptyTokenError,
    HomeDirectoryUnavailable,
)
from .switcher import Outcome, StatusReport, SwitchResult, SwitchWorkflow
from .token_supplier import TokenSupplier

__all__ = [
    "AppConfig",
    "AppConfigManager",
    "BackupConfig",
    "BackupMetadata",
    "Config",
    "ConfigStore",
    "Provider",
    "StorePaths",
    "TokenKind",
    "detect_provider",
    "detect_token_kind",
    "is_alternate_provider_key",
    "mask_token",
    "validate_token_for_provider",
    "ClaudeSwitchError",
    "ConfigIOError",
    "ConfigParseError",
    "EmptyTokenError",
    "HomeDirectoryUnavailable",
    "Outcome",
    "StatusReport",
    "SwitchResult",
    "SwitchWorkflow",
    "TokenSupplier",
]
