import pytest

from organizer.cli import main
from organizer.store import TRASH_DIR_NAME


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setattr("organizer.config.settings_dir", lambda: tmp_path / "settings")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("TMDB_API_KEY", raising=False)


def test_series_dry_run_changes_nothing(tmp_path, capsys):
    show = tmp_path / "lib" / "The Wire"
    show.mkdir(parents=True)
    (show / "E01.mkv").write_bytes(b"")

    assert main(["series", str(show), "--dry-run"]) == 0

    out = capsys.readouterr().out
    assert "[DRY RUN - nothing will be changed]" in out
    assert "[MKDIR] [DRY] Create folder S01" in out
    assert (show / "E01.mkv").exists()
    assert not (show / "S01").exists()


def test_series_each_subfolder(tmp_path):
    lib = tmp_path / "lib"
    (lib / "The Wire").mkdir(parents=True)
    (lib / "The Wire" / "E01.mkv").write_bytes(b"")
    (lib / "Fargo S02").mkdir()
    (lib / "Fargo S02" / "Fargo.S02E03.mkv").write_bytes(b"")

    assert main(["series", str(lib), "--each"]) == 0

    assert (lib / "The Wire" / "S01" / "The Wire - S01E01.mkv").is_file()
    assert (lib / "Fargo" / "S02" / "Fargo - S02E03.mkv").is_file()


def test_clean_moves_junk_to_trash(tmp_path):
    root = tmp_path / "lib"
    (root / "Sample").mkdir(parents=True)
    (root / "readme.txt").write_text("x")

    assert main(["clean", str(root)]) == 0

    assert not (root / "readme.txt").exists()
    assert not (root / "Sample").exists()
    assert (root / TRASH_DIR_NAME).is_dir()


def test_missing_directory(tmp_path, capsys):
    assert main(["movie", str(tmp_path / "nope")]) == 1
    assert "Not a directory" in capsys.readouterr().out


def test_tmdb_without_key_is_a_configuration_error(tmp_path, capsys):
    folder = tmp_path / "Heat"
    folder.mkdir()
    assert main(["movie", str(folder), "--use-tmdb"]) == 1
    assert "tmdb_api_key" in capsys.readouterr().out
