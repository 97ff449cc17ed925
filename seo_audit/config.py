"""
Audit configuration.

Sources, later wins: built-in defaults, a YAML file (``seo-audit.yaml`` found by
walking up from the working directory, or the path in ``SEO_AUDIT_CONFIG``), then
CLI overrides.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "seo-audit.yaml"
CONFIG_ENV_VAR = "SEO_AUDIT_CONFIG"
OUTPUT_FORMATS = ("console", "json")
RENDER_MODES = ("auto", "on", "off")

NUMERIC_RANGES: dict[str, dict[str, float]] = {
    "crawler.max_pages": {"min": 1, "max": 500, "warn_above": 200},
    "crawler.timeout": {"min": 1, "max": 300},
    "crawler.delay": {"min": 0, "max": 60},
    "crawler.concurrency": {"min": 1, "max": 20, "warn_above": 10},
    "rule_timeout": {"min": 0.1, "max": 300},
}


class ConfigError(ValueError):
    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = list(errors or [])
        super().__init__(message if not self.errors else message + ":\n  - " + "\n  - ".join(self.errors))


@dataclass
class RulesConfig:
    enable: list[str] = field(default_factory=lambda: ["*"])
    disable: list[str] = field(default_factory=list)


@dataclass
class CrawlerConfig:
    max_pages: int = 100
    timeout: float = 30
    delay: float = 0.0
    concurrency: int = 4
    respect_robots: bool = True
    render: str = "off"


@dataclass
class OutputConfig:
    format: str = "console"
    path: str = ""


SECTION_TYPES: dict[str, type] = {"rules": RulesConfig, "crawler": CrawlerConfig, "output": OutputConfig}


@dataclass
class AuditConfig:
    rules: RulesConfig = field(default_factory=RulesConfig)
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    categories: list[str] = field(default_factory=list)
    rule_timeout: float = 30.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ConfigValidation:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if value is None:
            continue
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _lookup(data: Mapping[str, Any], dotted: str) -> Any:
    current: Any = data
    for part in dotted.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def _check_string_list(data: Mapping[str, Any], dotted: str, errors: list[str]) -> None:
    value = _lookup(data, dotted)
    if value is None:
        return
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        errors.append(f"{dotted} must be a list of strings")


def _section_fields(section: str) -> set[str]:
    return set(SECTION_TYPES[section].__dataclass_fields__)


def validate_config(data: Mapping[str, Any]) -> ConfigValidation:
    result = ConfigValidation()
    known_sections = set(AuditConfig.__dataclass_fields__)
    for key in data:
        if key not in known_sections:
            result.warnings.append(f"Unknown config key: {key}")
    for section in SECTION_TYPES:
        values = data.get(section)
        if values is None:
            continue
        if not isinstance(values, Mapping):
            result.errors.append(f"{section} must be a mapping")
            continue
        for key in values:
            if key not in _section_fields(section):
                result.warnings.append(f"Unknown config key: {section}.{key}")

    for dotted, limits in NUMERIC_RANGES.items():
        value = _lookup(data, dotted)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            result.errors.append(f"{dotted} must be a number")
            continue
        if value < limits["min"] or value > limits["max"]:
            result.errors.append(f"{dotted} must be between {limits['min']} and {limits['max']}")
            continue
        if "warn_above" in limits and value > limits["warn_above"]:
            result.warnings.append(f"{dotted} is high (>{limits['warn_above']}), may cause performance issues")

    _check_string_list(data, "rules.enable", result.errors)
    _check_string_list(data, "rules.disable", result.errors)
    _check_string_list(data, "categories", result.errors)

    enable = _lookup(data, "rules.enable")
    if isinstance(enable, list) and not enable:
        result.warnings.append("rules.enable is empty, no rules will run")

    fmt = _lookup(data, "output.format")
    if fmt is not None and fmt not in OUTPUT_FORMATS:
        result.errors.append(f"output.format must be one of: {', '.join(OUTPUT_FORMATS)}")
    render = _lookup(data, "crawler.render")
    if render is not None and render not in RENDER_MODES:
        result.errors.append(f"crawler.render must be one of: {', '.join(RENDER_MODES)}")
    robots = _lookup(data, "crawler.respect_robots")
    if robots is not None and not isinstance(robots, bool):
        result.errors.append("crawler.respect_robots must be a boolean")
    return result


def find_config_file(start_dir: str | Path | None = None) -> Path | None:
    env_path = os.getenv(CONFIG_ENV_VAR, "").strip()
    if env_path:
        return Path(env_path)
    current = Path(start_dir or Path.cwd()).resolve()
    home = Path.home().resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if directory == home:
            break
    return None


def parse_config_file(path: str | Path) -> dict[str, Any]:
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Failed to parse {path}: top level must be a mapping")
    return raw


def config_from_dict(data: Mapping[str, Any]) -> AuditConfig:
    validation = validate_config(data)
    if not validation.valid:
        raise ConfigError("Invalid configuration", validation.errors)
    for message in validation.warnings:
        logger.warning("config: %s", message)
    merged = deep_merge(AuditConfig().to_dict(), data)
    # unknown keys were reported as warnings above and are dropped here
    sections = {
        section: {key: value for key, value in merged[section].items() if key in _section_fields(section)}
        for section in SECTION_TYPES
    }
    return AuditConfig(
        rules=RulesConfig(**sections["rules"]),
        crawler=CrawlerConfig(**sections["crawler"]),
        output=OutputConfig(**sections["output"]),
        categories=list(merged["categories"]),
        rule_timeout=float(merged["rule_timeout"]),
    )


def load_config(
    path: str | Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    start_dir: str | Path | None = None,
) -> tuple[AuditConfig, Path | None]:
    config_path = Path(path) if path else find_config_file(start_dir)
    data: dict[str, Any] = {}
    if config_path is not None:
        data = parse_config_file(config_path)
        logger.info("loaded config from %s", config_path)
        # file errors are reported before CLI overrides are merged in
        file_errors = validate_config(data).errors
        if file_errors:
            raise ConfigError(f"Invalid configuration in {config_path}", file_errors)
    if overrides:
        data = deep_merge(data, overrides)
    return config_from_dict(data), config_path
