from pathlib import Path

import pytest

from st20 import config
from st20.rtl.dictionary import DEFAULT_SSL_PATH


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for name in (
        "ST20_SSL_FILE",
        "ST20_SSL_DIR",
        "ST20_DEBUG_DECODER",
        "ST20_FOLD_CONSTANTS",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


def test_defaults() -> None:
    cfg = config.load_decoder_config()
    assert cfg.ssl_path == DEFAULT_SSL_PATH
    assert cfg.debug_decoder is False
    assert cfg.fold_constants is False


def test_flags(monkeypatch) -> None:
    monkeypatch.setenv("ST20_DEBUG_DECODER", "1")
    monkeypatch.setenv("ST20_FOLD_CONSTANTS", "yes")
    cfg = config.load_decoder_config()
    assert cfg.debug_decoder is True
    assert cfg.fold_constants is True

    monkeypatch.setenv("ST20_DEBUG_DECODER", " Off ")
    assert config.load_decoder_config().debug_decoder is False


def test_absolute_ssl_file(monkeypatch, tmp_path) -> None:
    target = tmp_path / "custom.ssl"
    monkeypatch.setenv("ST20_SSL_FILE", str(target))
    monkeypatch.setenv("ST20_SSL_DIR", "/elsewhere")
    assert config.load_decoder_config().ssl_path == target


def test_relative_ssl_file_uses_dir(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("ST20_SSL_FILE", "frontend/st20.ssl")
    monkeypatch.setenv("ST20_SSL_DIR", str(tmp_path))
    assert config.load_decoder_config().ssl_path == tmp_path / "frontend" / "st20.ssl"


def test_relative_ssl_file_defaults_to_cwd(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ST20_SSL_FILE", "st20.ssl")
    assert config.load_decoder_config().ssl_path == Path.cwd() / "st20.ssl"


def test_blank_ssl_file_means_default(monkeypatch) -> None:
    monkeypatch.setenv("ST20_SSL_FILE", "  ")
    assert config.load_decoder_config().ssl_path == DEFAULT_SSL_PATH
