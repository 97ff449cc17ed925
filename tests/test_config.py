import pytest

from seo_audit.config import (
    CONFIG_ENV_VAR,
    AuditConfig,
    ConfigError,
    config_from_dict,
    deep_merge,
    find_config_file,
    load_config,
    validate_config,
)


def test_defaults() -> None:
    config = AuditConfig()
    assert config.rules.enable == ["*"]
    assert config.rules.disable == []
    assert config.crawler.max_pages == 100
    assert config.crawler.concurrency == 4
    assert config.crawler.respect_robots is True
    assert config.crawler.render == "off"
    assert config.rule_timeout == 30.0
    assert config.output.format == "console"


def test_load_config_reads_yaml_and_applies_overrides(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    path = tmp_path / "seo-audit.yaml"
    path.write_text(
        "rules:\n  disable: ['perf/*']\ncrawler:\n  max_pages: 50\n  delay: 0.5\ncategories: [core]\n",
        encoding="utf-8",
    )
    config, found = load_config(path, overrides={"crawler": {"max_pages": 20, "timeout": None}})
    assert found == path
    assert config.rules.enable == ["*"]
    assert config.rules.disable == ["perf/*"]
    assert config.crawler.max_pages == 20
    assert config.crawler.delay == 0.5
    assert config.crawler.timeout == 30
    assert config.categories == ["core"]


def test_find_config_file_walks_up(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    (tmp_path / "seo-audit.yaml").write_text("rule_timeout: 5\n", encoding="utf-8")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    assert find_config_file(nested) == tmp_path / "seo-audit.yaml"
    config, _ = load_config(start_dir=nested)
    assert config.rule_timeout == 5.0


def test_env_var_points_at_config(tmp_path, monkeypatch) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text("output:\n  format: json\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    config, found = load_config()
    assert found == path
    assert config.output.format == "json"


def test_validation_collects_errors_and_warnings() -> None:
    result = validate_config(
        {
            "crawler": {"max_pages": 900, "concurrency": 15, "render": "sometimes", "respect_robots": "yes"},
            "rules": {"enable": "core/*"},
            "output": {"format": "xml"},
            "surprise": True,
        }
    )
    assert not result.valid
    joined = "\n".join(result.errors)
    assert "crawler.max_pages" in joined
    assert "crawler.render" in joined
    assert "crawler.respect_robots" in joined
    assert "rules.enable" in joined
    assert "output.format" in joined
    assert any("crawler.concurrency" in w for w in result.warnings)
    assert any("surprise" in w for w in result.warnings)


def test_load_config_raises_with_every_error(tmp_path) -> None:
    path = tmp_path / "seo-audit.yaml"
    path.write_text("crawler:\n  timeout: 0\n  delay: -1\n", encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        load_config(path)
    assert len(excinfo.value.errors) == 2


def test_malformed_yaml_is_a_config_error(tmp_path) -> None:
    path = tmp_path / "seo-audit.yaml"
    path.write_text("rules: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(path)


def test_non_mapping_yaml_is_rejected(tmp_path) -> None:
    path = tmp_path / "seo-audit.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_empty_file_uses_defaults(tmp_path) -> None:
    path = tmp_path / "seo-audit.yaml"
    path.write_text("", encoding="utf-8")
    config, _ = load_config(path)
    assert config == AuditConfig()


def test_deep_merge_skips_none_and_merges_nested() -> None:
    merged = deep_merge({"a": {"b": 1, "c": 2}, "d": 3}, {"a": {"b": 5}, "d": None})
    assert merged == {"a": {"b": 5, "c": 2}, "d": 3}


def test_unknown_nested_keys_warn_and_are_dropped() -> None:
    data = {"crawler": {"maxPages": 5, "delay": 1}, "rules": {"enabled": ["core/*"]}}
    result = validate_config(data)
    assert result.valid
    assert "Unknown config key: crawler.maxPages" in result.warnings
    assert "Unknown config key: rules.enabled" in result.warnings

    config = config_from_dict(data)
    assert config.crawler.max_pages == 100
    assert config.crawler.delay == 1
    assert config.rules.enable == ["*"]


def test_non_mapping_section_is_a_config_error() -> None:
    result = validate_config({"crawler": "fast", "output": ["json"]})
    assert "crawler must be a mapping" in result.errors
    assert "output must be a mapping" in result.errors
    with pytest.raises(ConfigError, match="crawler must be a mapping"):
        config_from_dict({"crawler": "fast"})


def test_non_mapping_section_in_file_is_not_masked_by_overrides(tmp_path) -> None:
    path = tmp_path / "seo-audit.yaml"
    path.write_text("crawler: fast\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="crawler must be a mapping"):
        load_config(path, overrides={"crawler": {"max_pages": 5}})
