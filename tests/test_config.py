import json

import pytest

from treenotes import config
from treenotes.paths import get_config_path


@pytest.fixture(autouse=True)
def app_home(tmp_path, monkeypatch):
    monkeypatch.setenv('TREENOTES_HOME', str(tmp_path))
    for name in ('TREENOTES_DARK_MODE', 'TREENOTES_EXPORT_NAME', 'TREENOTES_LOG_LEVEL', 'TREENOTES_PORT'):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def test_config_path_follows_home(app_home):
    assert get_config_path() == app_home / 'config.json'


def test_missing_config_is_empty():
    assert config.load_config() == {}


def test_unreadable_config_is_empty(app_home):
    (app_home / 'config.json').write_text('{broken', encoding='utf-8')
    assert config.load_config() == {}


def test_dark_mode_persists(app_home):
    assert config.get_dark_mode() is False
    config.set_dark_mode(True)
    assert config.get_dark_mode() is True
    with (app_home / 'config.json').open(encoding='utf-8') as f:
        assert json.load(f) == {'dark_mode': True}


def test_env_overrides_file(monkeypatch):
    config.save_config({'dark_mode': True, 'export_filename': 'a.json', 'port': 9000})
    monkeypatch.setenv('TREENOTES_DARK_MODE', 'off')
    monkeypatch.setenv('TREENOTES_EXPORT_NAME', 'b.json')
    monkeypatch.setenv('TREENOTES_PORT', '9100')
    assert config.get_dark_mode() is False
    assert config.get_export_filename() == 'b.json'
    assert config.get_port() == 9100


def test_defaults():
    assert config.get_export_filename() == 'treenotes.json'
    assert config.get_log_level() == 'INFO'
    assert config.get_port() == config.DEFAULT_PORT


def test_bad_port_falls_back(monkeypatch):
    monkeypatch.setenv('TREENOTES_PORT', 'eighty')
    assert config.get_port() == config.DEFAULT_PORT


def test_non_object_config_is_empty(app_home):
    (app_home / 'config.json').write_text('["dark_mode"]', encoding='utf-8')
    assert config.load_config() == {}


def test_save_creates_missing_home(tmp_path, monkeypatch):
    home = tmp_path / 'portable' / 'treenotes'
    monkeypatch.setenv('TREENOTES_HOME', str(home))
    config.set_dark_mode(True)
    assert (home / 'config.json').is_file()
    assert config.get_dark_mode() is True
