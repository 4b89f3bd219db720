"""Tests for provider and token classification."""

import logging

import pytest

from claude_switch.config import Config, Provider, TokenKind
from claude_switch.detector import (
    ZAI_KEYS,
    detect_provider,
    detect_token_kind,
    is_alternate_provider_key,
    mask_token,
    validate_token_for_provider,
)


class TestDetectProvider:
    def test_empty_config_is_unknown(self):
        assert detect_provider(Config()) == Provider.UNKNOWN

    def test_zai_base_url(self):
        config = Config(env={"ANTHROPIC_BASE_URL": "https://api.z.ai/api/anthropic"})
        assert detect_provider(config) == Provider.ZAI

    def test_empty_base_url_is_anthropic(self):
        config = Config(env={"ANTHROPIC_BASE_URL": ""})
        assert detect_provider(config) == Provider.ANTHROPIC

    def test_unrelated_keys_only_is_anthropic(self):
        """A config without a base URL but with other keys is not Unknown."""
        config = Config(env={"DISABLE_TELEMETRY": "1"})
        assert detect_provider(config) == Provider.ANTHROPIC

    def test_other_base_url_is_custom(self):
        config = Config(env={"ANTHROPIC_BASE_URL": "https://proxy.example.com"})
        assert detect_provider(config) == Provider.CUSTOM

    @pytest.mark.parametrize("extra", [
        {},
        {"ANTHROPIC_AUTH_TOKEN": "sk-abc"},
        {"API_TIMEOUT_MS": "1", "ANTHROPIC_DEFAULT_OPUS_MODEL": "x"},
    ])
    def test_only_base_url_matters(self, extra):
        base = {"ANTHROPIC_BASE_URL": "https://proxy.example.com"}
        assert detect_provider(Config(env={**base, **extra})) == Provider.CUSTOM


class TestAlternateKeys:
    def test_closed_set_of_five(self):
        assert len(ZAI_KEYS) == 5
        for key in [
            "ANTHROPIC_BASE_URL",
            "API_TIMEOUT_MS",
            "ANTHROPIC_DEFAULT_OPUS_MODEL",
            "ANTHROPIC_DEFAULT_SONNET_MODEL",
            "ANTHROPIC_DEFAULT_HAIKU_MODEL",
        ]:
            assert is_alternate_provider_key(key), f"'{key}' should be a Z.AI key"

    def test_auth_token_is_not_alternate_key(self):
        assert not is_alternate_provider_key("ANTHROPIC_AUTH_TOKEN")
        assert not is_alternate_provider_key("anthropic_base_url")


class TestTokenKind:
    def test_empty(self):
        assert detect_token_kind("") == TokenKind.UNKNOWN

    def test_prefixes(self):
        assert detect_token_kind("sk-test1234") == TokenKind.ZAI_API_KEY
        assert detect_token_kind("glm-" + "x" * 300) == TokenKind.ZAI_API_KEY

    def test_dotted_long_token(self):
        token = "a" * 50 + "." + "b" * 50 + "." + "c"
        assert len(token) > 100
        assert detect_token_kind(token) == TokenKind.ANTHROPIC_WEB_TOKEN

    def test_dotted_short_token_is_api_key(self):
        assert detect_token_kind("aaa.bbb.ccc") == TokenKind.ZAI_API_KEY

    def test_very_long_token(self):
        assert detect_token_kind("x" * 201) == TokenKind.ANTHROPIC_WEB_TOKEN

    def test_short_token(self):
        assert detect_token_kind("x" * 99) == TokenKind.ZAI_API_KEY

    @pytest.mark.parametrize("length", [100, 150, 200])
    def test_gap_stays_unknown(self, length):
        assert detect_token_kind("x" * length) == TokenKind.UNKNOWN


class TestValidateToken:
    def test_mismatch_warns_but_accepts(self, caplog):
        web_token = "x" * 250
        with caplog.at_level(logging.WARNING, logger="claude_switch.detector"):
            assert validate_token_for_provider(web_token, Provider.ZAI) is True
        assert "looks like an Anthropic token" in caplog.text

    def test_api_key_for_anthropic_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="claude_switch.detector"):
            assert validate_token_for_provider("sk-abc", Provider.ANTHROPIC) is True
        assert "looks like an API key" in caplog.text

    def test_matching_token_is_silent(self, caplog):
        with caplog.at_level(logging.WARNING, logger="claude_switch.detector"):
            assert validate_token_for_provider("sk-abc", Provider.ZAI) is True
        assert caplog.records == []

    @pytest.mark.parametrize("provider", [Provider.CUSTOM, Provider.UNKNOWN])
    def test_other_providers_never_warn(self, caplog, provider):
        with caplog.at_level(logging.WARNING, logger="claude_switch.detector"):
            assert validate_token_for_provider("x" * 250, provider) is True
        assert caplog.records == []


class TestMaskToken:
    @pytest.mark.parametrize("token", ["", "abc", "12345678"])
    def test_short_tokens_fully_masked(self, token):
        assert mask_token(token) == "********"

    def test_long_token(self):
        masked = mask_token("sk-1234567890abcdef")
        assert masked == "sk-1...cdef"
        assert len(masked) == 11

    def test_nine_characters(self):
        assert mask_token("123456789") == "1234...6789"
