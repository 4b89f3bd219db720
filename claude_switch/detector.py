"""Classification of settings and tokens.

Everything here is pure: no file access, no prompting. The only side effect is
the advisory warning logged by :func:`validate_token_for_provider`.
"""

import logging

from .config import Config, Provider, TokenKind

logger = logging.getLogger(__name__)

BASE_URL_KEY = "ANTHROPIC_BASE_URL"
AUTH_TOKEN_KEY = "ANTHROPIC_AUTH_TOKEN"
TIMEOUT_KEY = "API_TIMEOUT_MS"
OPUS_MODEL_KEY = "ANTHROPIC_DEFAULT_OPUS_MODEL"
SONNET_MODEL_KEY = "ANTHROPIC_DEFAULT_SONNET_MODEL"
HAIKU_MODEL_KEY = "ANTHROPIC_DEFAULT_HAIKU_MODEL"

ZAI_DOMAIN_MARKER = "z.ai"
ZAI_KEY_PREFIXES = ("sk-", "glm-")

ZAI_KEYS = frozenset([
    BASE_URL_KEY,
    TIMEOUT_KEY,
    OPUS_MODEL_KEY,
    SONNET_MODEL_KEY,
    HAIKU_MODEL_KEY,
])

TOKEN_MASK = "********"


def detect_provider(config: Config) -> Provider:
    if not config.env:
        return Provider.UNKNOWN

    base_url = config.env.get(BASE_URL_KEY, "")

    if ZAI_DOMAIN_MARKER in base_url:
        return Provider.ZAI

    # no custom endpoint means the assistant talks to Anthropic directly
    if not base_url:
        return Provider.ANTHROPIC

    return Provider.CUSTOM


def is_alternate_provider_key(key: str) -> bool:
    return key in ZAI_KEYS


def detect_token_kind(token: str) -> TokenKind:
    """Guess where a token came from by its shape alone.

    Tokens between 100 and 200 characters without a dotted structure are
    left as UNKNOWN.
    """
    if not token:
        return TokenKind.UNKNOWN

    if token.startswith(ZAI_KEY_PREFIXES):
        return TokenKind.ZAI_API_KEY

    if token.count(".") >= 2 and len(token) > 100:
        return TokenKind.ANTHROPIC_WEB_TOKEN

    if len(token) > 200:
        return TokenKind.ANTHROPIC_WEB_TOKEN

    if len(token) < 100:
        return TokenKind.ZAI_API_KEY

    return TokenKind.UNKNOWN


def validate_token_for_provider(token: str, provider: Provider) -> bool:
    """Warn when a token looks wrong for ``provider``. Never rejects."""
    token_kind = detect_token_kind(token)

    if provider == Provider.ZAI and token_kind == TokenKind.ANTHROPIC_WEB_TOKEN:
        logger.warning(
            "Token looks like an Anthropic token. "
            "GLM typically uses API keys (sk-xxx or glm-xxx format)"
        )
    elif provider == Provider.ANTHROPIC and token_kind == TokenKind.ZAI_API_KEY:
        logger.warning(
            "Token looks like an API key. Anthropic uses longer JWT-style tokens"
        )

    return True


def mask_token(token: str) -> str:
    if len(token) <= 8:
        return TOKEN_MASK
    return f"{token[:4]}...{token[-4:]}"
