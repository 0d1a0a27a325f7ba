"""Tests for configuration loading and validation."""

import json

from agents.llm_client import BACKENDS
from config import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_INCLUDE_PATTERNS,
    SUPPORTED_PROVIDERS,
    AnalyzerConfig,
    ProviderTag,
    load_config,
    resolve_api_key,
    validate_config,
)


class TestLoadConfig:

    def test_defaults_without_file(self, tmp_path):
        config = load_config(str(tmp_path))

        assert config.ai_provider == "openai"
        assert config.max_tokens == 2000
        assert config.include_patterns == DEFAULT_INCLUDE_PATTERNS
        assert config.exclude_patterns == DEFAULT_EXCLUDE_PATTERNS
        assert config.context_lines == 3

    def test_camel_case_file_overrides(self, tmp_path):
        (tmp_path / ".aicontext.json").write_text(json.dumps({
            "aiProvider": "anthropic",
            "maxTokens": 1000,
            "excludePatterns": ["vendor/**"],
            "customPrompts": {"codeAnalysis": "Be terse."},
        }))

        config = load_config(str(tmp_path))

        assert config.ai_provider == "anthropic"
        assert config.max_tokens == 1000
        assert config.exclude_patterns == ["vendor/**"]
        assert config.include_patterns == DEFAULT_INCLUDE_PATTERNS
        assert config.custom_prompts.code_analysis == "Be terse."

    def test_broken_file_falls_back_to_defaults(self, tmp_path):
        (tmp_path / ".aicontext.json").write_text("{not json")

        assert load_config(str(tmp_path)) == AnalyzerConfig()

    def test_invalid_values_fall_back_to_defaults(self, tmp_path):
        (tmp_path / ".aicontext.json").write_text(json.dumps({"maxTokens": "lots"}))

        assert load_config(str(tmp_path)).max_tokens == 2000

    def test_environment_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AI_PROVIDER", "Local")
        monkeypatch.setenv("AI_MODEL", "codellama")
        monkeypatch.setenv("AI_API_URL", "http://ollama:11434/api/chat")

        config = load_config(str(tmp_path))

        assert config.ai_provider == "local"
        assert config.model == "codellama"
        assert config.api_url == "http://ollama:11434/api/chat"


class TestApiKey:

    def test_config_key_first(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "env")
        assert resolve_api_key(AnalyzerConfig(api_key="cfg")) == "cfg"

    def test_provider_specific_variable(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "openai-key")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "anthropic-key")
        assert resolve_api_key(AnalyzerConfig(ai_provider="anthropic")) == "anthropic-key"

    def test_missing_key(self):
        assert resolve_api_key(AnalyzerConfig()) == ""


class TestValidateConfig:

    def test_valid(self):
        assert validate_config(AnalyzerConfig(api_key="k")) == []

    def test_local_needs_no_key(self):
        assert validate_config(AnalyzerConfig(ai_provider="local")) == []

    def test_collects_all_errors(self):
        errors = validate_config(AnalyzerConfig(max_tokens=50, temperature=1.5))

        assert len(errors) == 3
        assert errors[0].startswith("API key is required")
        assert "maxTokens should be between 100 and 8000" in errors
        assert "temperature should be between 0 and 1" in errors

    def test_unknown_provider(self):
        errors = validate_config(AnalyzerConfig(ai_provider="gemini", api_key="k"))
        assert errors == ["aiProvider must be one of: openai, anthropic, local"]

    def test_supported_providers_follow_provider_tags(self):
        assert SUPPORTED_PROVIDERS == ("openai", "anthropic", "local")
        assert set(BACKENDS) == set(ProviderTag)
        assert validate_config(AnalyzerConfig(ai_provider=ProviderTag.LOCAL.value)) == []
