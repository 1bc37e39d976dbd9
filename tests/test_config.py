"""
Unit tests for configuration loading.
"""

import pytest

from catalog import config as config_module
from catalog.config import AppConfig, get_config, load_config, load_yaml_config, set_config
from catalog.errors import ConfigurationError

ENV_KEYS = ['FLASK_ENV', 'LOG_LEVEL', 'SECRET_KEY', 'OUTPUT_FOLDER', 'IMAGE_PROXY_URL', 'IMAGE_PROXY_KEY',
            'IMAGE_FETCH_TIMEOUT', 'LOGO_URL', 'SITE_LABEL']


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Run in an empty directory with a clean environment."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    directory = tmp_path / 'config'
    directory.mkdir()
    return directory


class TestLoadYamlConfig:

    def test_missing_file(self, tmp_path):
        assert load_yaml_config(str(tmp_path / 'nope.yaml')) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / 'broken.yaml'
        path.write_text("LOG_LEVEL: [unclosed\n", encoding='utf-8')

        with pytest.raises(ConfigurationError):
            load_yaml_config(str(path))


class TestLoadConfig:

    def test_defaults_without_files(self, config_dir):
        config = load_config()

        assert config.FLASK_ENV == 'development'
        assert config.DEBUG is True
        assert config.IMAGE_PROXY_URL is None
        assert config.NO_CATEGORY_LABEL == 'Sem Categoria'
        assert config.PDF_AUTHOR == 'Sistema de Gestão'

    def test_environment_file_overrides_base(self, config_dir):
        (config_dir / 'settings.yaml').write_text("LOG_LEVEL: INFO\nSITE_LABEL: loja.example\n", encoding='utf-8')
        (config_dir / 'settings_production.yaml').write_text("LOG_LEVEL: WARNING\n", encoding='utf-8')

        config = load_config('production')

        assert config.LOG_LEVEL == 'WARNING'
        assert config.SITE_LABEL == 'loja.example'
        assert config.DEBUG is False

    def test_environment_variables_win(self, config_dir, monkeypatch):
        (config_dir / 'settings.yaml').write_text("IMAGE_FETCH_TIMEOUT: 10\n", encoding='utf-8')
        monkeypatch.setenv('IMAGE_PROXY_URL', 'https://proxy.example.com/image-proxy')
        monkeypatch.setenv('IMAGE_FETCH_TIMEOUT', '2.5')

        config = load_config()

        assert config.IMAGE_PROXY_URL == 'https://proxy.example.com/image-proxy'
        assert config.IMAGE_FETCH_TIMEOUT == 2.5

    def test_overrides_win(self, config_dir):
        config = load_config(overrides={'CURRENCY_PREFIX': '₲', 'NEW_PRODUCT_DAYS': 30})

        assert config.CURRENCY_PREFIX == '₲'
        assert config.NEW_PRODUCT_DAYS == 30

    def test_invalid_value(self, config_dir):
        with pytest.raises(ConfigurationError):
            load_config(overrides={'LOGO_WIDTH_PX': 'wide'})


class TestGlobalConfig:

    def test_set_and_get(self, monkeypatch):
        monkeypatch.setattr(config_module, '_config_instance', None)
        custom = AppConfig(SITE_LABEL='loja.example')

        set_config(custom)

        assert get_config() is custom
