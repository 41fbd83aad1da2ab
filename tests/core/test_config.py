"""
Tests for TOML configuration loading.
"""

from pathlib import Path

import pytest

from song_ranker.core.config import (
    Config,
    DeduplicationConfig,
    RankingConfig,
    create_default_config,
    load_config,
    parse_config,
)


@pytest.fixture
def config_home(tmp_path, monkeypatch) -> Path:
    """Point XDG_CONFIG_HOME at a temp dir and clear env overrides."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.delenv("SONG_RANKER_STRATEGY", raising=False)
    monkeypatch.delenv("SONG_RANKER_LOG_LEVEL", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestParseConfig:
    """Test building Config from TOML data."""

    def test_empty_document_gives_defaults(self):
        assert parse_config({}) == Config()

    def test_reads_sections(self):
        config = parse_config(
            {
                "ranking": {"strategy": "legacy", "k_factor": 24.0},
                "deduplication": {"fuzzy_threshold": 90, "exclude_instrumentals": False},
                "session": {"large_session_warning": 50},
                "logging": {"level": "DEBUG"},
            }
        )
        assert config.ranking.strategy == "legacy"
        assert config.ranking.k_factor == 24.0
        assert config.ranking.fast_k_factor == 48.0
        assert config.deduplication == DeduplicationConfig(90, False)
        assert config.session.large_session_warning == 50
        assert config.logging.level == "DEBUG"

    def test_invalid_section_falls_back_to_defaults(self):
        config = parse_config({"ranking": {"strategy": "elo-only", "k_factor": 10.0}})
        assert config.ranking == RankingConfig()

    def test_invalid_threshold(self):
        config = parse_config({"deduplication": {"fuzzy_threshold": 150}})
        assert config.deduplication.fuzzy_threshold == 85

    def test_unknown_keys_are_ignored(self):
        config = parse_config({"ranking": {"strategy": "legacy", "colour": "blue"}})
        assert config.ranking.strategy == "legacy"

    @pytest.mark.parametrize(
        "toml_data,section",
        [
            ({"logging": {"level": 5}}, "logging"),
            ({"logging": {"log_file": 5}}, "logging"),
            ({"deduplication": {"fuzzy_threshold": "high"}}, "deduplication"),
            ({"ranking": {"k_factor": "fast"}}, "ranking"),
            ({"session": {"large_session_warning": "many"}}, "session"),
            ({"session": {"large_session_warning": 0}}, "session"),
            ({"ranking": 5}, "ranking"),
        ],
    )
    def test_wrong_types_fall_back_to_defaults(self, toml_data, section):
        """Test values of the wrong type reset their section instead of raising."""
        assert getattr(parse_config(toml_data), section) == getattr(Config(), section)

    def test_log_file_expands_user(self):
        config = parse_config({"logging": {"log_file": "~/ranker.log"}})
        assert config.logging.log_file == str(Path.home() / "ranker.log")

    def test_default_config_parses_to_defaults(self):
        import tomllib

        assert parse_config(tomllib.loads(create_default_config())) == Config()


class TestValidation:
    def test_fast_window_must_not_exceed_slow(self):
        with pytest.raises(ValueError, match="fast_decision_ms"):
            RankingConfig(fast_decision_ms=20000).validate()

    def test_k_factor_must_be_positive(self):
        with pytest.raises(ValueError, match="positive"):
            RankingConfig(slow_k_factor=0).validate()


class TestLoadConfig:
    """Test reading config files and environment overrides."""

    def test_writes_default_when_missing(self, config_home):
        config = load_config()
        assert config == Config()
        assert (config_home / "song-ranker" / "config.toml").exists()

    def test_explicit_missing_path_is_not_created(self, config_home):
        path = config_home / "nowhere.toml"
        assert load_config(path) == Config()
        assert not path.exists()

    def test_reads_explicit_file(self, config_home):
        path = config_home / "custom.toml"
        path.write_text('[ranking]\nstrategy = "legacy"\n', encoding="utf-8")
        assert load_config(path).ranking.strategy == "legacy"

    def test_malformed_file_uses_defaults(self, config_home):
        path = config_home / "broken.toml"
        path.write_text("[ranking\nstrategy = ", encoding="utf-8")
        assert load_config(path) == Config()

    def test_wrong_typed_file_uses_defaults(self, config_home):
        path = config_home / "typed.toml"
        path.write_text('[logging]\nlevel = 5\n\n[ranking]\nstrategy = "legacy"\n', encoding="utf-8")
        config = load_config(path)
        assert config.logging.level == "INFO"
        assert config.ranking.strategy == "legacy"

    def test_environment_overrides(self, config_home, monkeypatch):
        path = config_home / "custom.toml"
        path.write_text('[logging]\nlevel = "WARNING"\n', encoding="utf-8")
        monkeypatch.setenv("SONG_RANKER_STRATEGY", "legacy")
        monkeypatch.setenv("SONG_RANKER_LOG_LEVEL", "debug")

        config = load_config(path)
        assert config.ranking.strategy == "legacy"
        assert config.logging.level == "DEBUG"

    def test_invalid_environment_values_are_ignored(self, config_home, monkeypatch):
        monkeypatch.setenv("SONG_RANKER_STRATEGY", "bogus")
        monkeypatch.setenv("SONG_RANKER_LOG_LEVEL", "LOUD")
        config = load_config(config_home / "none.toml")
        assert config.ranking.strategy == "adaptive"
        assert config.logging.level == "INFO"

    def test_dotenv_file(self, config_home, monkeypatch):
        env_dir = config_home / "song-ranker"
        env_dir.mkdir()
        (env_dir / ".env").write_text("SONG_RANKER_STRATEGY=legacy\n", encoding="utf-8")
        # Register the variable so monkeypatch removes what load_dotenv sets
        monkeypatch.setenv("SONG_RANKER_STRATEGY", "unset")
        monkeypatch.delenv("SONG_RANKER_STRATEGY")

        assert load_config(config_home / "none.toml").ranking.strategy == "legacy"
