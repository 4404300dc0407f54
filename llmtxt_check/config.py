"""
Checker configuration.

The core consumes exactly three settings from its caller: the accepted
ecosystem languages, the reference allow-list and whether section order
violations are warnings or infos. `load_config` layers them from defaults,
an optional YAML file and `LLMTXT_CHECK_*` environment variables (a `.env`
file in the working directory is honoured).
"""

import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Optional

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


DEFAULT_CONFIG_FILENAMES = ("llmtxt-check.yaml", "llmtxt-check.yml", ".llmtxt-check.yaml")

ENV_ACCEPTED_LANGUAGES = "LLMTXT_CHECK_ACCEPTED_LANGUAGES"
ENV_ALLOWLIST = "LLMTXT_CHECK_ALLOWLIST"
ENV_STRICT_ORDER = "LLMTXT_CHECK_STRICT_ORDER"

DEFAULT_ACCEPTED_LANGUAGES = frozenset({"python"})

# Common third-party names that show up around package examples
COMMON_THIRD_PARTY = frozenset({
    "aiohttp", "attr", "attrs", "boto3", "click", "django", "fastapi", "flask",
    "httpx", "jinja2", "matplotlib", "np", "numpy", "pandas", "pd", "plt",
    "pydantic", "pytest", "requests", "rich", "scipy", "sklearn", "sqlalchemy",
    "tensorflow", "tf", "torch", "typer", "urllib3", "yaml",
})

# Python builtins frequently used with attribute access in examples
COMMON_BUILTINS = frozenset({
    "self", "cls", "super", "str", "int", "float", "dict", "list", "set",
    "tuple", "bytes", "object", "type", "print",
})


def _stdlib_names() -> FrozenSet[str]:
    return frozenset(getattr(sys, "stdlib_module_names", ()))


DEFAULT_REFERENCE_ALLOWLIST = _stdlib_names() | COMMON_THIRD_PARTY | COMMON_BUILTINS


class ConfigError(ValueError):
    """Raised when a configuration file or environment value is invalid."""


class CheckerConfig(BaseModel):
    """Settings consumed by `validate`."""
    model_config = ConfigDict(frozen=True)

    accepted_languages: FrozenSet[str] = Field(
        default=DEFAULT_ACCEPTED_LANGUAGES,
        description="Ecosystem languages accepted in the frontmatter `language` key"
    )
    reference_allowlist: FrozenSet[str] = Field(
        default=DEFAULT_REFERENCE_ALLOWLIST,
        description="Leading identifiers or dotted prefixes skipped by the reference checker"
    )
    strict_order: bool = Field(
        default=True,
        description="If False, section order violations are reported as info instead of warning"
    )

    @field_validator("accepted_languages", mode="before")
    @classmethod
    def normalize_languages(cls, v):
        return _normalize_languages(v)

    @field_validator("reference_allowlist", mode="before")
    @classmethod
    def normalize_allowlist(cls, v):
        return _normalize_allowlist(v)

    def with_overrides(
        self,
        languages: Optional[Iterable[str]] = None,
        allow: Optional[Iterable[str]] = None,
        strict_order: Optional[bool] = None,
    ) -> "CheckerConfig":
        """
        Return a copy with CLI-style overrides applied.

        `languages` replaces the accepted set, `allow` extends the allow-list.
        """
        update: Dict[str, Any] = {}
        if languages:
            update["accepted_languages"] = _normalize_languages(list(languages))
        if allow:
            update["reference_allowlist"] = self.reference_allowlist | _normalize_allowlist(list(allow))
        if strict_order is not None:
            update["strict_order"] = strict_order
        if not update:
            return self
        return self.model_copy(update=update)


def _split_csv(value: str):
    return [part for part in value.split(",") if part.strip()]


def _normalize_languages(value) -> FrozenSet[str]:
    if isinstance(value, str):
        value = _split_csv(value)
    return frozenset(item.strip().lower() for item in value if item and item.strip())


def _normalize_allowlist(value) -> FrozenSet[str]:
    if isinstance(value, str):
        value = _split_csv(value)
    return frozenset(item.strip() for item in value if item and item.strip())


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ConfigError(f"{name}: expected a boolean, got '{value}'")


def find_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """Look for a default config file in `start` (default: cwd)."""
    base = Path(start) if start else Path.cwd()
    for name in DEFAULT_CONFIG_FILENAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file does not exist: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping, got {type(data).__name__}")

    known = set(CheckerConfig.model_fields)
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"{path}: unknown setting(s): {', '.join(unknown)}")

    # A file allow-list extends the defaults rather than replacing them
    if "reference_allowlist" in data:
        extra = data["reference_allowlist"] or []
        if isinstance(extra, str):
            extra = _split_csv(extra)
        data["reference_allowlist"] = list(DEFAULT_REFERENCE_ALLOWLIST) + list(extra)

    return data


def _read_environment() -> Dict[str, Any]:
    values: Dict[str, Any] = {}

    languages = os.environ.get(ENV_ACCEPTED_LANGUAGES)
    if languages:
        values["accepted_languages"] = languages

    allowlist = os.environ.get(ENV_ALLOWLIST)
    if allowlist:
        values["extra_allowlist"] = _split_csv(allowlist)

    strict = os.environ.get(ENV_STRICT_ORDER)
    if strict:
        values["strict_order"] = _parse_bool(ENV_STRICT_ORDER, strict)

    return values


def load_config(path: Optional[Path] = None, use_env: bool = True) -> CheckerConfig:
    """
    Build a CheckerConfig from defaults, a YAML file and the environment.

    Args:
        path: Explicit config file. When omitted, a default file name in the
              current directory is used if present.
        use_env: Whether to read LLMTXT_CHECK_* variables (and `.env`).

    Returns:
        Frozen CheckerConfig

    Raises:
        ConfigError: If the file or an environment value is invalid
    """
    data: Dict[str, Any] = {}

    config_path = Path(path) if path else find_config_file()
    if config_path is not None:
        logger.debug(f"Loading config file: {config_path}")
        data.update(_read_config_file(config_path))

    extra_allowlist = []
    if use_env:
        load_dotenv(find_dotenv(usecwd=True))
        env_values = _read_environment()
        extra_allowlist = env_values.pop("extra_allowlist", [])
        data.update(env_values)

    try:
        config = CheckerConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    if extra_allowlist:
        config = config.with_overrides(allow=extra_allowlist)

    logger.debug(
        f"Config: languages={sorted(config.accepted_languages)} "
        f"allowlist={len(config.reference_allowlist)} entries strict_order={config.strict_order}"
    )
    return config
