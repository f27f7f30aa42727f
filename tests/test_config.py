"""Tests for configuration loading.

Covers: defaults, provider keys from TOML and environment, env
precedence, routing/fallback/pricing/default sections, malformed entries,
config path override, and credentials() construction.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from luwi_mcp.config import _ENV_VAR_MAP, CONFIG_PATH, Config, config_path, load_config
from luwi_mcp.fallback import DEFAULT_FALLBACKS
from luwi_mcp.pricing import ModelPricing
from luwi_mcp.types import Intent, ModelSelection

FULL_TOML = """\
[providers]
openai_api_key = "sk-file-openai"
claude_api_key = "sk-ant-file"
not_a_key = "ignored"

[routing.translation]
model = "gemini-1.5-pro"
provider = "google"
reason = "Long-context translation"

[fallbacks]
translation = [
    { model = "claude-3-haiku", provider = "claude" },
    { model = "deepseek-chat", provider = "deepseek" },
]

[pricing.openai]
"gpt-4o-mini" = 0.00000015

[pricing.claude.opus]
prompt = 0.000015
completion = 0.000075

[defaults]
enable_fallback = false
timeout = 45
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for env_var in _ENV_VAR_MAP:
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.delenv("LUWI_MCP_CONFIG", raising=False)


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(content, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "absent.toml")
        assert config.providers == {}
        assert config.routing == {}
        assert config.enable_fallback is True
        assert config.timeout == 120.0
        assert config.fallbacks == DEFAULT_FALLBACKS

    def test_fallbacks_are_copied(self) -> None:
        config = Config()
        config.fallbacks[Intent.TRANSLATION].clear()
        assert DEFAULT_FALLBACKS[Intent.TRANSLATION]


# ---------------------------------------------------------------------------
# TOML sections
# ---------------------------------------------------------------------------


class TestLoadToml:
    def test_provider_keys(self, tmp_path: Path) -> None:
        config = load_config(_write(tmp_path, FULL_TOML))
        assert config.providers == {"openai": "sk-file-openai", "claude": "sk-ant-file"}

    def test_routing(self, tmp_path: Path) -> None:
        config = load_config(_write(tmp_path, FULL_TOML))
        assert config.routing["translation"] == ModelSelection(
            "gemini-1.5-pro", "google", "Long-context translation"
        )

    def test_fallbacks_replace_intent_only(self, tmp_path: Path) -> None:
        config = load_config(_write(tmp_path, FULL_TOML))
        assert [a.model for a in config.fallbacks["translation"]] == [
            "claude-3-haiku",
            "deepseek-chat",
        ]
        assert config.fallbacks[Intent.CODE_ANALYSIS] == DEFAULT_FALLBACKS[Intent.CODE_ANALYSIS]

    def test_pricing_merged(self, tmp_path: Path) -> None:
        config = load_config(_write(tmp_path, FULL_TOML))
        assert config.pricing.get_pricing("openai", "gpt-4o-mini") == ModelPricing.flat(
            0.00000015
        )
        assert config.pricing.get_pricing("openai", "gpt-4o") == ModelPricing.flat(0.00003)
        assert config.pricing.get_pricing("claude", "claude-3-opus") == ModelPricing(
            0.000015, 0.000075
        )

    def test_defaults_section(self, tmp_path: Path) -> None:
        config = load_config(_write(tmp_path, FULL_TOML))
        assert config.enable_fallback is False
        assert config.timeout == 45.0

    def test_route_missing_provider_raises(self, tmp_path: Path) -> None:
        path = _write(tmp_path, '[routing.translation]\nmodel = "gpt-4o"\n')
        with pytest.raises(ValueError, match="routing.translation"):
            load_config(path)

    def test_fallback_missing_model_raises(self, tmp_path: Path) -> None:
        path = _write(tmp_path, '[fallbacks]\ntranslation = [{ provider = "claude" }]\n')
        with pytest.raises(ValueError, match="fallbacks"):
            load_config(path)

    @pytest.mark.parametrize("value", ['"false"', "0", '"yes"'])
    def test_non_boolean_enable_fallback_raises(self, tmp_path: Path, value: str) -> None:
        path = _write(tmp_path, f"[defaults]\nenable_fallback = {value}\n")
        with pytest.raises(ValueError, match="enable_fallback"):
            load_config(path)

    def test_route_reason_default(self, tmp_path: Path) -> None:
        path = _write(tmp_path, '[routing.poetry]\nmodel = "claude-3-opus"\nprovider = "claude"\n')
        assert load_config(path).routing["poetry"].reason == "Configured route"


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


class TestEnvironment:
    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env-openai")
        config = load_config(_write(tmp_path, FULL_TOML))
        assert config.providers["openai"] == "sk-env-openai"
        assert config.providers["claude"] == "sk-ant-file"

    def test_anthropic_env_maps_to_claude(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-env")
        assert load_config(tmp_path / "absent.toml").providers["claude"] == "sk-ant-env"

    def test_anthropic_wins_over_claude_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CLAUDE_API_KEY", "sk-claude-env")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-anthropic-env")
        assert load_config(tmp_path / "absent.toml").providers["claude"] == "sk-anthropic-env"
        assert Config().get_provider_key("claude") == "sk-anthropic-env"

    def test_get_provider_key_env_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-ds-env")
        assert Config().get_provider_key("deepseek") == "sk-ds-env"

    def test_get_provider_key_missing(self) -> None:
        assert Config().get_provider_key("google") is None

    def test_config_path_override(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        assert config_path() == CONFIG_PATH
        monkeypatch.setenv("LUWI_MCP_CONFIG", str(tmp_path / "custom.toml"))
        assert config_path() == tmp_path / "custom.toml"

    def test_load_uses_env_path(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        path = _write(tmp_path, '[providers]\ngoogle_api_key = "g-file"\n')
        monkeypatch.setenv("LUWI_MCP_CONFIG", str(path))
        assert load_config().providers == {"google": "g-file"}


class TestCredentials:
    def test_credentials_from_config(self) -> None:
        creds = Config(providers={"openai": "sk-a", "google": "g-b"}).credentials()
        assert creds.get("openai") == "sk-a"
        assert creds.get("google") == "g-b"
        assert creds.get("claude") is None
