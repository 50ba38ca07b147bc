"""Tests for RegSettings — unified settings with TOML/YAML source."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from regprune.config.settings import RegSettings
from regprune.domain.rules import NamedRetentionRule

pytestmark = pytest.mark.usefixtures("_isolated_cwd")

LEGACY_YAML = """\
DryRun: true
DockerRegistry:
  URL: https://registry.example.com/
  Username: admin
  Password: hunter2
RetentionPolicy:
  Default:
    TagsToKeep: 5
    DaysToKeep: 30
    KeepLatest: true
  Exceptions:
    - NameMatcher: ^web/
      TagMatcher: ^release-
      DaysToKeep: 365
    - NameMatcher: ^tmp/
      TagsToKeep: 1
"""


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = RegSettings.from_cli(start=tmp_path)
        assert settings.config_path is None
        assert settings.dry_run is False
        assert settings.registry.url == "http://localhost:5000"
        assert settings.registry.timeout == 30.0
        assert settings.registry.verify_tls is False
        default = settings.retention.default
        assert (default.tags_to_keep, default.days_to_keep, default.keep_latest) == (10, 0, True)
        assert settings.retention.exceptions == ()

    def test_frozen(self, tmp_path: Path) -> None:
        settings = RegSettings.from_cli(start=tmp_path)
        with pytest.raises(Exception):
            settings.dry_run = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "regprune.toml").write_text(
            'dry_run = true\n'
            '[registry]\nurl = "https://reg.local//"\nusername = "bot"\n'
            '[retention.default]\ndays_to_keep = 14\n'
            '[[retention.exceptions]]\nname_matcher = "^ci/"\ntags_to_keep = 3\n'
        )
        settings = RegSettings.from_cli(start=tmp_path)
        assert settings.config_path == tmp_path / "regprune.toml"
        assert settings.dry_run is True
        assert settings.registry.url == "https://reg.local"
        assert settings.registry.username == "bot"
        assert settings.retention.default.days_to_keep == 14
        assert settings.retention.default.tags_to_keep == 0
        (exc,) = settings.retention.exceptions
        assert isinstance(exc, NamedRetentionRule)
        assert exc.name_matcher == "^ci/"
        assert exc.tag_matcher == ".*"

    def test_walk_up_discovery(self, tmp_path: Path) -> None:
        (tmp_path / "regprune.toml").write_text('[registry]\nurl = "http://up"\n')
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert RegSettings.from_cli(start=nested).registry.url == "http://up"

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "regprune.toml").write_text("[registry\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            RegSettings.from_cli(start=tmp_path)


class TestYamlSource:
    def test_legacy_camel_case_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(LEGACY_YAML)
        settings = RegSettings.from_cli(config_path=str(path))
        assert settings.dry_run is True
        assert settings.registry.url == "https://registry.example.com"
        assert settings.registry.username == "admin"
        assert settings.registry.password is not None
        assert settings.registry.password.get_secret_value() == "hunter2"
        assert settings.retention.default.tags_to_keep == 5
        assert [e.name_matcher for e in settings.retention.exceptions] == ["^web/", "^tmp/"]
        assert settings.retention.exceptions[0].tag_matcher == "^release-"

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "regprune.yaml"
        path.write_text("registry: [unclosed\n")
        with pytest.raises(click.ClickException, match="Invalid YAML"):
            RegSettings.from_cli(config_path=str(path))

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "regprune.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(click.ClickException, match="mapping"):
            RegSettings.from_cli(config_path=str(path))


class TestValidation:
    def test_vacuous_rule_rejected_at_load(self, tmp_path: Path) -> None:
        (tmp_path / "regprune.toml").write_text(
            "[retention.default]\ntags_to_keep = 0\ndays_to_keep = 0\n"
        )
        with pytest.raises(click.ClickException, match="both empty"):
            RegSettings.from_cli(start=tmp_path)

    def test_bad_regex_rejected_at_load(self, tmp_path: Path) -> None:
        (tmp_path / "regprune.toml").write_text(
            '[[retention.exceptions]]\nname_matcher = "(unclosed"\ntags_to_keep = 1\n'
        )
        with pytest.raises(click.ClickException, match="invalid regular expression"):
            RegSettings.from_cli(start=tmp_path)

    def test_negative_rejected_at_load(self, tmp_path: Path) -> None:
        (tmp_path / "regprune.toml").write_text("[retention.default]\ntags_to_keep = -1\n")
        with pytest.raises(click.ClickException, match="negative"):
            RegSettings.from_cli(start=tmp_path)

    def test_missing_explicit_config(self, tmp_path: Path) -> None:
        with pytest.raises(click.ClickException, match="not found"):
            RegSettings.from_cli(config_path=str(tmp_path / "nope.toml"))


class TestPriority:
    def test_cli_flag_overrides_file(self, tmp_path: Path) -> None:
        (tmp_path / "regprune.toml").write_text("dry_run = true\n")
        settings = RegSettings.from_cli(start=tmp_path, dry_run=False)
        assert settings.dry_run is False

    def test_unset_flag_keeps_file_value(self, tmp_path: Path) -> None:
        (tmp_path / "regprune.toml").write_text("dry_run = true\n")
        settings = RegSettings.from_cli(start=tmp_path, dry_run=None)
        assert settings.dry_run is True

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "regprune.toml").write_text('[registry]\nurl = "http://file"\n')
        monkeypatch.setenv("REGPRUNE_REGISTRY__URL", "http://env/")
        settings = RegSettings.from_cli(start=tmp_path)
        assert settings.registry.url == "http://env"


class TestSummary:
    def test_password_masked(self, tmp_path: Path) -> None:
        path = tmp_path / "regprune.yaml"
        path.write_text(LEGACY_YAML)
        summary = RegSettings.from_cli(config_path=str(path)).summary()
        assert summary["registry"]["password"] != "hunter2"
        assert "hunter2" not in str(summary)
        assert summary["retention"]["default"]["tags_to_keep"] == 5
        assert "json_output" not in summary
