"""
Tests for the song-ranker command line.
"""

import pytest

from song_ranker import __version__
from song_ranker.cli import main


@pytest.fixture
def config_file(tmp_path, monkeypatch, restore_logging):
    """Config that logs into tmp_path, with XDG dirs isolated."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("SONG_RANKER_STRATEGY", raising=False)
    monkeypatch.delenv("SONG_RANKER_LOG_LEVEL", raising=False)

    path = tmp_path / "config.toml"
    path.write_text(
        f'[logging]\nlog_file = "{(tmp_path / "ranker.log").as_posix()}"\n\n'
        "[session]\nlarge_session_warning = 2\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def titles_file(tmp_path):
    path = tmp_path / "titles.txt"
    path.write_text(
        "\n".join(
            [
                "Karma Police",
                "Karma Police (Remastered)",
                "Creep",
                "",
                "Creep - Acoustic",
                "Airbag (Instrumental)",
                "Let Down",
            ]
        ),
        encoding="utf-8",
    )
    return path


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_command_is_required(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 2


class TestRate:
    def test_default_k(self, config_file, capsys):
        assert main(["--config", str(config_file), "rate", "1500", "1500", "1.0"]) == 0
        out = capsys.readouterr().out
        assert "K = 32" in out
        assert "A: 1500.0 -> 1516.0 (+16.0)" in out
        assert "B: 1500.0 -> 1484.0 (-16.0)" in out

    def test_fast_decision(self, config_file, capsys):
        assert main(
            ["--config", str(config_file), "rate", "1500", "1500", "0", "--decision-ms", "1200"]
        ) == 0
        out = capsys.readouterr().out
        assert "K = 48" in out
        assert "A: 1500.0 -> 1476.0 (-24.0)" in out

    def test_explicit_k(self, config_file, capsys):
        assert main(["--config", str(config_file), "rate", "1500", "1500", "0.5", "--k", "20"]) == 0
        assert "K = 20" in capsys.readouterr().out

    def test_rejects_other_scores(self, config_file):
        with pytest.raises(SystemExit):
            main(["--config", str(config_file), "rate", "1500", "1500", "0.7"])


def test_wrong_typed_config_still_runs(config_file, capsys):
    config_file.write_text("[logging]\nlevel = 5\n", encoding="utf-8")
    assert main(["--config", str(config_file), "rate", "1500", "1500", "1"]) == 0
    assert "K = 32" in capsys.readouterr().out


class TestDedupe:
    def test_apply_prints_merged_list(self, config_file, titles_file, capsys):
        assert main(["--config", str(config_file), "dedupe", str(titles_file), "--apply"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines == ["Karma Police", "Creep", "Let Down"]

    def test_review_output(self, config_file, titles_file, capsys):
        assert main(["--config", str(config_file), "dedupe", str(titles_file)]) == 0
        out = capsys.readouterr().out
        assert "Airbag (Instrumental)" in out
        assert "2 duplicate groups" in out
        assert "5 songs -> 3 after merging" in out
        assert "might take a long time" in out

    def test_missing_file(self, config_file, tmp_path, capsys):
        assert main(["--config", str(config_file), "dedupe", str(tmp_path / "missing.txt")]) == 1
        assert "Error:" in capsys.readouterr().out

    def test_writes_log_file(self, config_file, titles_file, tmp_path):
        main(["--config", str(config_file), "dedupe", str(titles_file), "--apply"])
        assert "Deduplicated 5 titles" in (tmp_path / "ranker.log").read_text(encoding="utf-8")


class TestSimulate:
    def test_favourite(self, config_file, capsys):
        args = ["--config", str(config_file), "simulate", "--songs", "10", "--comparisons", "20"]
        assert main(args + ["--favorite", "song-3", "--seed", "7"]) == 0
        out = capsys.readouterr().out
        assert "adaptive strategy: 20 duels, 10 songs" in out
        assert "Phases: coverage" in out
        assert "song-3 finished at rank #" in out

    def test_legacy_strategy(self, config_file, capsys):
        args = ["--config", str(config_file), "simulate", "--songs", "6", "--comparisons", "5"]
        assert main(args + ["--strategy", "legacy"]) == 0
        assert "legacy strategy: 5 duels, 6 songs" in capsys.readouterr().out
