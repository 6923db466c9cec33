"""
Tests for the Config classes from the config module
"""
import os
import pytest
from orgdesk.cache import FileStorage, MemoryStorage, StorageBackend
from orgdesk.config import BaseConfig, OrgDeskConfig


class _Config(BaseConfig):
    def validate_env_vars(self):
        pass


@pytest.fixture
def _env_setup(monkeypatch):
    """
    declare an environment
    """
    for name in list(os.environ):
        if name.startswith('ORGDESK_'):
            monkeypatch.delenv(name)
    monkeypatch.setenv("VAR_1", "value1")
    monkeypatch.setenv("TO_LIST_VAR", "A, B,C")
    monkeypatch.setenv("JSON_STRING", '{"some_key":"some_value"}')


def test_create_config(_env_setup):
    """
    Test retrieving the vars and asserting their values
    """
    config = _Config()
    assert config.get_env_var("VAR_1") == "value1"
    assert config.get_env_var("MISSING_VAR") is None
    assert config.get_env_var("MISSING_VAR", "fallback") == "fallback"


def test_var_as_list(_env_setup):
    """
    Test reading a comma-delimited string as a list
    """
    config = _Config()
    assert config.get_var_as_list("TO_LIST_VAR") == ["A", "B", "C"]
    assert config.get_var_as_list("MISSING_VAR") is None


def test_var_from_json(_env_setup):
    """
    Test converting a json string into a pythonic type
    """
    config = _Config()
    assert config.convert_var_from_json_string("JSON_STRING") is True
    assert config.get_env_var("JSON_STRING") == {"some_key": "some_value"}
    assert config.convert_var_from_json_string("VAR_1") is False


def test_project_toml_version(_env_setup, tmp_path):
    """
    Test reading the project version from a pyproject.toml
    """
    config = _Config()
    assert config.load_toml(str(tmp_path)) is False

    (tmp_path / 'pyproject.toml').write_text('[project]\nversion = "1.0.0"\n', encoding='UTF-8')
    assert config.load_toml(str(tmp_path)) is True
    assert config.get_project_version() == "1.0.0"


def test_defaults(_env_setup):
    config = OrgDeskConfig()

    assert config.storage_backend == StorageBackend.memory
    assert isinstance(config.build_storage(), MemoryStorage)
    assert config.default_ttl == 30
    assert config.ttl_for('people') == 10
    assert config.ttl_for('licenses') == 15
    assert config.ttl_for('organizations') == 30
    assert config.ttl_for('unknown') == 30


def test_ttl_overrides(_env_setup, monkeypatch):
    monkeypatch.setenv('ORGDESK_TTL_SEATS', '1')
    monkeypatch.setenv('ORGDESK_DEFAULT_TTL_MINUTES', '45')
    config = OrgDeskConfig()

    assert config.ttl_for('seats') == 1.0
    assert config.ttl_for('people') == 45.0
    assert config.ttl_for('unknown') == 45.0


def test_default_ttl_applies_to_every_collection(_env_setup, monkeypatch):
    monkeypatch.setenv('ORGDESK_DEFAULT_TTL_MINUTES', '5')
    config = OrgDeskConfig()

    assert [config.ttl_for(entity) for entity in OrgDeskConfig.DEFAULT_TTLS] == [5.0] * 6


def test_file_backend(_env_setup, monkeypatch, tmp_path):
    monkeypatch.setenv('ORGDESK_STORAGE_BACKEND', 'file')
    monkeypatch.setenv('ORGDESK_CACHE_DIR', str(tmp_path / 'cache'))
    config = OrgDeskConfig()

    storage = config.build_storage()
    assert isinstance(storage, FileStorage)
    assert storage.directory == str(tmp_path / 'cache')


@pytest.mark.parametrize('name, value', [
    ('ORGDESK_STORAGE_BACKEND', 'redis'),
    ('ORGDESK_STORAGE_BACKEND', 'dynamodb'),
    ('ORGDESK_TTL_PEOPLE', 'ten'),
    ('ORGDESK_DEFAULT_TTL_MINUTES', '0'),
    ('ORGDESK_TTL_ASSETS', '-3'),
])
def test_invalid_settings(_env_setup, monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        OrgDeskConfig()


def test_dynamodb_options(_env_setup, monkeypatch):
    monkeypatch.setenv('ORGDESK_STORAGE_BACKEND', 'dynamodb')
    monkeypatch.setenv('ORGDESK_DYNAMODB_TABLE', 'orgdesk-cache')
    monkeypatch.setenv('AWS_REGION', 'eu-west-1')
    config = OrgDeskConfig()

    options = config.storage_options()
    assert options['table_name'] == 'orgdesk-cache'
    assert options['region_name'] == 'eu-west-1'
