"""Tests for configuration management."""

import pytest

from wpt_metrics.config import (
    ConfigurationError,
    MetricsConfig,
    _parse_env_int,
    load_config,
    validate_config,
)


class TestMetricsConfig:
    """Tests for MetricsConfig dataclass."""

    def test_defaults(self):
        config = MetricsConfig()
        assert config.browser_count is None
        assert config.pass_policy == "strict"
        assert config.report_format == "console"
        assert config.compute_failures is True
        assert config.failure_browsers == []
        assert config.timeout_seconds is None
        assert config.console_max_rows == 20

    def test_failure_browsers_not_shared(self):
        c1 = MetricsConfig()
        c2 = MetricsConfig()
        c1.failure_browsers.append("chrome")
        assert c2.failure_browsers == []


class TestParseEnvInt:
    """Tests for _parse_env_int."""

    def test_unset(self, monkeypatch):
        monkeypatch.delenv("WPT_METRICS_TEST_INT", raising=False)
        assert _parse_env_int("WPT_METRICS_TEST_INT") is None

    def test_valid(self, monkeypatch):
        monkeypatch.setenv("WPT_METRICS_TEST_INT", "4")
        assert _parse_env_int("WPT_METRICS_TEST_INT") == 4

    def test_invalid(self, monkeypatch):
        monkeypatch.setenv("WPT_METRICS_TEST_INT", "four")
        with pytest.raises(ConfigurationError, match="must be a valid integer"):
            _parse_env_int("WPT_METRICS_TEST_INT")


@pytest.fixture
def clean_env(monkeypatch):
    for var in (
        "WPT_METRICS_BROWSER_COUNT",
        "WPT_METRICS_POLICY",
        "WPT_METRICS_REPORT_FORMAT",
        "WPT_METRICS_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self, clean_env):
        assert load_config() == MetricsConfig()

    def test_from_file(self, clean_env, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "browser_count: 4\n"
            "pass_policy: lenient\n"
            "report_format: json\n"
            "failure_browsers:\n"
            "  - chrome\n"
            "  - safari\n"
        )
        config = load_config(str(config_file))
        assert config.browser_count == 4
        assert config.pass_policy == "lenient"
        assert config.report_format == "json"
        assert config.failure_browsers == ["chrome", "safari"]

    def test_empty_file(self, clean_env, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")
        assert load_config(str(config_file)) == MetricsConfig()

    def test_env_overrides_file(self, clean_env, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("browser_count: 4\npass_policy: lenient\n")
        clean_env.setenv("WPT_METRICS_BROWSER_COUNT", "2")
        clean_env.setenv("WPT_METRICS_POLICY", "strict")
        clean_env.setenv("WPT_METRICS_REPORT_FORMAT", "json")
        clean_env.setenv("WPT_METRICS_TIMEOUT", "2.5")
        config = load_config(str(config_file))
        assert config.browser_count == 2
        assert config.pass_policy == "strict"
        assert config.report_format == "json"
        assert config.timeout_seconds == 2.5

    def test_invalid_env_timeout(self, clean_env):
        clean_env.setenv("WPT_METRICS_TIMEOUT", "0")
        with pytest.raises(ConfigurationError, match="must be positive"):
            load_config()

    def test_non_numeric_env_timeout(self, clean_env):
        clean_env.setenv("WPT_METRICS_TIMEOUT", "soon")
        with pytest.raises(ConfigurationError, match="must be a number"):
            load_config()

    def test_missing_file(self, clean_env, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, clean_env, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("browser_count: [4\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(str(config_file))

    def test_non_mapping_yaml(self, clean_env, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(str(config_file))

    def test_unknown_key(self, clean_env, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("unknown_option: true\n")
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(str(config_file))


class TestValidateConfig:
    """Tests for validate_config."""

    def test_valid_defaults(self):
        assert validate_config(MetricsConfig()) == []

    def test_negative_browser_count(self):
        errors = validate_config(MetricsConfig(browser_count=-1))
        assert any("browser_count" in e for e in errors)

    def test_zero_browser_count_allowed(self):
        assert validate_config(MetricsConfig(browser_count=0)) == []

    def test_unknown_policy(self):
        errors = validate_config(MetricsConfig(pass_policy="loose"))
        assert any("pass_policy" in e for e in errors)

    def test_unknown_report_format(self):
        errors = validate_config(MetricsConfig(report_format="junit"))
        assert any("report_format" in e for e in errors)

    def test_non_positive_timeout(self):
        errors = validate_config(MetricsConfig(timeout_seconds=0))
        assert any("timeout_seconds" in e for e in errors)

    def test_empty_failure_browser(self):
        errors = validate_config(MetricsConfig(failure_browsers=["chrome", ""]))
        assert errors == ["failure_browsers[1] is empty"]

    def test_multiple_errors(self):
        errors = validate_config(
            MetricsConfig(browser_count=-1, pass_policy="x", report_format="y")
        )
        assert len(errors) == 3
