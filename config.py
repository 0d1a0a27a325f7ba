import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".aicontext.json"


class ProviderTag(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    LOCAL = "local"


SUPPORTED_PROVIDERS = tuple(tag.value for tag in ProviderTag)

API_KEY_ENV_VARS = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}

DEFAULT_INCLUDE_PATTERNS = [
    "**/*.js",
    "**/*.ts",
    "**/*.tsx",
    "**/*.jsx",
    "**/*.py",
    "**/*.java",
    "**/*.cpp",
    "**/*.c",
    "**/*.h",
]

DEFAULT_EXCLUDE_PATTERNS = [
    "node_modules/**",
    "dist/**",
    "build/**",
    ".git/**",
    "**/*.test.*",
    "**/*.spec.*",
]

DEFAULT_CODE_ANALYSIS_PROMPT = """Analyze this code change and provide:
1. A clear summary of what the code does
2. The purpose and business value
3. Key technical changes made
4. Potential impact on the system
5. Any concerns or suggestions for improvement

Be concise but comprehensive. Focus on helping other developers understand the change quickly."""

DEFAULT_DOCUMENTATION_PROMPT = """Generate clear, helpful documentation for this code that includes:
1. What this code does (functionality)
2. Why it exists (purpose/business need)
3. How to use it (if applicable)
4. Important implementation details
5. Any dependencies or prerequisites

Write for developers who haven't seen this code before."""

DEFAULT_SUMMARY_PROMPT = (
    "Provide a brief, one-paragraph summary of this code change that would be "
    "useful in a commit message or pull request description."
)


class CustomPrompts(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code_analysis: str = Field(default=DEFAULT_CODE_ANALYSIS_PROMPT, alias="codeAnalysis")
    documentation: str = DEFAULT_DOCUMENTATION_PROMPT
    summary: str = DEFAULT_SUMMARY_PROMPT


class AnalyzerConfig(BaseModel):
    """Settings read from .aicontext.json (camelCase keys) and the environment."""

    model_config = ConfigDict(populate_by_name=True)

    ai_provider: str = Field(default="openai", alias="aiProvider")
    api_key: Optional[str] = Field(default=None, alias="apiKey")
    api_url: Optional[str] = Field(default=None, alias="apiUrl")
    model: Optional[str] = None  # None -> the backend's own default model
    max_tokens: int = Field(default=2000, alias="maxTokens")
    temperature: float = 0.3
    include_patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_INCLUDE_PATTERNS), alias="includePatterns")
    exclude_patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS), alias="excludePatterns")
    custom_prompts: CustomPrompts = Field(default_factory=CustomPrompts, alias="customPrompts")
    context_lines: int = Field(default=3, ge=0, alias="contextLines")
    request_timeout: float = Field(default=60.0, gt=0, alias="requestTimeout")


def _apply_env_overrides(config: AnalyzerConfig) -> AnalyzerConfig:
    overrides = {}
    if os.getenv("AI_PROVIDER"):
        overrides["ai_provider"] = os.getenv("AI_PROVIDER").lower()
    if os.getenv("AI_MODEL"):
        overrides["model"] = os.getenv("AI_MODEL")
    if os.getenv("AI_API_URL"):
        overrides["api_url"] = os.getenv("AI_API_URL")
    return config.model_copy(update=overrides) if overrides else config


def load_config(project_root: str) -> AnalyzerConfig:
    """
    Load <project_root>/.aicontext.json over the defaults, then apply
    AI_PROVIDER / AI_MODEL / AI_API_URL from the environment.
    An unreadable or invalid file falls back to the defaults with a warning.
    """
    path = Path(project_root) / CONFIG_FILENAME
    config = AnalyzerConfig()
    if path.exists():
        try:
            config = AnalyzerConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("Could not load %s, using defaults: %s", path, e)
    return _apply_env_overrides(config)


def resolve_api_key(config: AnalyzerConfig) -> str:
    if config.api_key:
        return config.api_key
    own_var = API_KEY_ENV_VARS.get(config.ai_provider)
    if own_var and os.getenv(own_var):
        return os.getenv(own_var)
    return os.getenv("OPENAI_API_KEY") or os.getenv("ANTHROPIC_API_KEY") or ""


def validate_config(config: AnalyzerConfig) -> List[str]:
    errors = []

    if config.ai_provider not in SUPPORTED_PROVIDERS:
        errors.append("aiProvider must be one of: " + ", ".join(SUPPORTED_PROVIDERS))
    elif config.ai_provider != ProviderTag.LOCAL and not resolve_api_key(config):
        errors.append(
            "API key is required. Set it in .aicontext.json or as environment "
            "variable (OPENAI_API_KEY or ANTHROPIC_API_KEY)"
        )

    if not 100 <= config.max_tokens <= 8000:
        errors.append("maxTokens should be between 100 and 8000")

    if not 0 <= config.temperature <= 1:
        errors.append("temperature should be between 0 and 1")

    return errors
