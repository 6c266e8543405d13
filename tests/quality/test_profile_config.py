"""Tests for profile configuration loading and validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from docprofiler.quality.config import (
    ConfigurationError,
    ProfileConfig,
    RegexRule,
    build_profile_config,
    load_profile_config,
    strict_end_anchors,
)


class TestProfileConfig:
    """Tests for ProfileConfig validation."""

    def test_defaults(self):
        config = ProfileConfig()

        assert config.required_threshold == 0.9
        assert config.rare_field_max_fraction == 0.05
        assert config.examples_per_issue == 20
        assert config.regex_rules == {}
        assert config.check_field_name_variants is True
        assert config.sample_limit is None
        assert config.include_example is True
        assert config.nested_missing_fields is False
        assert config.include_subcollections is False
        assert config.examples_per_subcollection == 1

    def test_frozen(self):
        config = ProfileConfig()
        with pytest.raises(ValidationError):
            config.required_threshold = 0.5

    def test_shorthand_regex_rule(self):
        config = ProfileConfig(regex_rules={"code": "^[A-Z]{3}$"})

        assert config.regex_rules["code"] == RegexRule(pattern="^[A-Z]{3}$")

    def test_regex_rule_uses_search(self):
        assert RegexRule(pattern="[0-9]").matches("abc1")
        assert not RegexRule(pattern="^[0-9]+$").matches("abc1")

    def test_trailing_newline_fails_end_anchor(self):
        rule = RegexRule(pattern="^[A-Z]{3}$")

        assert rule.matches("ABC")
        assert not rule.matches("ABC\n")
        assert not rule.matches("ABC\r\n")

    def test_multiline_pattern_keeps_line_anchors(self):
        assert RegexRule(pattern="(?m)^[A-Z]{3}$").matches("ABC\nxyz")

    def test_rule_pattern_is_reported_unchanged(self):
        config = ProfileConfig(regex_rules={"code": "^[A-Z]{3}$"})

        assert config.regex_rules["code"].pattern == "^[A-Z]{3}$"
        assert config.model_dump()["regex_rules"] == {
            "code": {"pattern": "^[A-Z]{3}$", "note": None}
        }


class TestBuildProfileConfig:
    """Tests for build_profile_config() error reporting."""

    @pytest.mark.parametrize(
        ("options", "option"),
        [
            ({"required_threshold": 0}, "required_threshold"),
            ({"required_threshold": 1.5}, "required_threshold"),
            ({"rare_field_max_fraction": -0.1}, "rare_field_max_fraction"),
            ({"examples_per_issue": 0}, "examples_per_issue"),
            ({"sample_limit": 0}, "sample_limit"),
            ({"examples_per_subcollection": 0}, "examples_per_subcollection"),
            ({"unknown_option": True}, "unknown_option"),
        ],
    )
    def test_out_of_range(self, options, option):
        with pytest.raises(ConfigurationError) as exc_info:
            build_profile_config(options)

        assert exc_info.value.option == option

    def test_rare_must_be_below_required(self):
        with pytest.raises(ConfigurationError) as exc_info:
            build_profile_config({"required_threshold": 0.5, "rare_field_max_fraction": 0.5})

        assert exc_info.value.option == "rare_field_max_fraction"
        assert "required_threshold" in str(exc_info.value)

    def test_invalid_regex_names_the_rule(self):
        with pytest.raises(ConfigurationError) as exc_info:
            build_profile_config({"regex_rules": {"code": "[A-Z"}})

        assert exc_info.value.option == "regex_rules.code.pattern"
        assert "invalid regular expression" in str(exc_info.value)

    def test_overrides_take_precedence(self):
        config = build_profile_config(
            {"required_threshold": 0.8, "examples_per_issue": 5},
            examples_per_issue=3,
            sample_limit=None,
        )

        assert config.required_threshold == 0.8
        assert config.examples_per_issue == 3
        assert config.sample_limit is None


class TestLoadProfileConfig:
    """Tests for loading the YAML configuration."""

    def test_load_full_config(self, tmp_path: Path):
        config_file = tmp_path / "profile.yaml"
        config_file.write_text("""
required_threshold: 0.8
rare_field_max_fraction: 0.02
examples_per_issue: 5
check_field_name_variants: false
sample_limit: 1000
regex_rules:
  date:
    pattern: '^\\d{4}-\\d{2}-\\d{2}$'
    note: YYYY-MM-DD
  status.code: '^[A-Z]{3}$'
""")

        config = load_profile_config(config_file)

        assert config.required_threshold == 0.8
        assert config.rare_field_max_fraction == 0.02
        assert config.examples_per_issue == 5
        assert config.check_field_name_variants is False
        assert config.sample_limit == 1000
        assert list(config.regex_rules) == ["date", "status.code"]
        assert config.regex_rules["date"].note == "YYYY-MM-DD"
        assert config.regex_rules["date"].matches("2024-01-15")
        assert config.regex_rules["status.code"].note is None

    def test_cli_overrides(self, tmp_path: Path):
        config_file = tmp_path / "profile.yaml"
        config_file.write_text("required_threshold: 0.8\n")

        config = load_profile_config(config_file, required_threshold=0.95)

        assert config.required_threshold == 0.95

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        config_file = tmp_path / "profile.yaml"
        config_file.write_text("")

        assert load_profile_config(config_file) == ProfileConfig()

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigurationError, match="not found") as exc_info:
            load_profile_config(tmp_path / "nope.yaml")

        assert exc_info.value.option == "config"

    def test_invalid_yaml(self, tmp_path: Path):
        config_file = tmp_path / "profile.yaml"
        config_file.write_text("required_threshold: [0.8\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_profile_config(config_file)

    def test_not_a_mapping(self, tmp_path: Path):
        config_file = tmp_path / "profile.yaml"
        config_file.write_text("- 0.8\n- 0.05\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_profile_config(config_file)

    def test_error_names_file(self, tmp_path: Path):
        config_file = tmp_path / "profile.yaml"
        config_file.write_text("examples_per_issue: 0\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_profile_config(config_file)

        assert str(config_file) in str(exc_info.value)
        assert exc_info.value.option == "examples_per_issue"


@pytest.mark.parametrize(
    ("pattern", "expected"),
    [
        ("^a$", r"^a\Z"),
        (r"^\$\d+$", r"^\$\d+\Z"),
        ("^[$]+$", r"^[$]+\Z"),
        ("^[]$]$", r"^[]$]\Z"),
        ("^[^]$]$", r"^[^]$]\Z"),
        ("^(a$|b$)", r"^(a\Z|b\Z)"),
        (r"\\$", r"\\\Z"),
        ("abc", "abc"),
    ],
)
def test_strict_end_anchors(pattern, expected):
    assert strict_end_anchors(pattern) == expected
