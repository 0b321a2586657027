from pathlib import Path

import pytest

from parish_pivot.config import DEFAULT_DATA_DIR, load_app_config


def _write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "parish_pivot_config.toml"
    path.write_text(content, encoding="utf-8")
    return path


def test_defaults_when_no_config_file(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    cfg = load_app_config()

    assert cfg.data.directory == Path(DEFAULT_DATA_DIR).resolve()
    assert cfg.data.balances_file == "balances.json"
    assert cfg.display.currency_symbol == "£"
    assert cfg.display.mode == "table"
    assert cfg.log_level is None


def test_default_config_file_in_current_directory(tmp_path, monkeypatch) -> None:
    _write_config(tmp_path, '[display]\nmode = "both"\n')
    monkeypatch.chdir(tmp_path)

    assert load_app_config().display.mode == "both"


def test_full_config(tmp_path) -> None:
    path = _write_config(
        tmp_path,
        """
[data]
directory = "finance/data/"
balances_file = "opening.json"

[display]
currency_symbol = "€"
mode = "html"

[logging]
level = "DEBUG"
""",
    )

    cfg = load_app_config(str(path))

    assert cfg.data.directory == (tmp_path / "finance" / "data").resolve()
    assert cfg.data.balances_file == "opening.json"
    assert cfg.display.currency_symbol == "€"
    assert cfg.display.mode == "html"
    assert cfg.log_level == "DEBUG"


def test_absolute_directory_is_kept(tmp_path) -> None:
    data_dir = tmp_path / "data"
    path = _write_config(tmp_path, f'[data]\ndirectory = "{data_dir.as_posix()}/"\n')

    assert load_app_config(str(path)).data.directory == data_dir.resolve()


def test_empty_directory_means_not_configured(tmp_path) -> None:
    path = _write_config(tmp_path, '[data]\ndirectory = ""\n')

    assert load_app_config(str(path)).data.directory is None


def test_invalid_display_mode(tmp_path) -> None:
    path = _write_config(tmp_path, '[display]\nmode = "pdf"\n')

    with pytest.raises(ValueError, match="display.mode"):
        load_app_config(str(path))


def test_invalid_toml(tmp_path) -> None:
    path = _write_config(tmp_path, "[data\ndirectory = 1\n")

    with pytest.raises(ValueError, match="Failed to parse TOML"):
        load_app_config(str(path))


def test_explicit_missing_config_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "missing.toml"))
