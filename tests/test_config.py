# tests/test_config.py

import logging
import pytest
from unittest.mock import patch
from src.content_gen.config import Settings
from src.content_gen.exceptions import ConfigurationError
from src.content_gen.logging_config import setup_logging


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv('OPENAI_API_KEY', 'sk-test')
    monkeypatch.setenv('MONGODB_URI', 'mongodb://db:27017')
    monkeypatch.setenv('OPENAI_MODEL', 'gpt-4o')
    monkeypatch.delenv('MONGODB_DB_NAME', raising=False)
    monkeypatch.delenv('EMBEDDING_MODEL', raising=False)

    settings = Settings.from_env(str(tmp_path / 'missing.env'))

    assert settings.openai_api_key == 'sk-test'
    assert settings.mongodb_uri == 'mongodb://db:27017'
    assert settings.model == 'gpt-4o'
    assert settings.mongodb_db_name == 'mental_health_db'
    assert settings.embedding_model == 'text-embedding-3-small'


def test_from_env_reads_dotenv_file(monkeypatch, tmp_path):
    monkeypatch.delenv('VECTOR_INDEX_NAME', raising=False)
    env_file = tmp_path / '.env'
    env_file.write_text('VECTOR_INDEX_NAME=custom_index\n')

    with patch.dict('os.environ', {}, clear=False):
        settings = Settings.from_env(str(env_file))
        assert settings.vector_index_name == 'custom_index'


def test_missing_credentials():
    settings = Settings()
    with pytest.raises(ConfigurationError):
        settings.require_openai()
    with pytest.raises(ConfigurationError):
        settings.require_mongodb()


def test_credentials_present(settings):
    assert settings.require_openai() == 'test-key'
    assert settings.require_mongodb() == 'mongodb://localhost:27017'


@patch('src.content_gen.logging_config.logging.basicConfig')
def test_setup_logging(mock_basic_config):
    setup_logging('debug')
    kwargs = mock_basic_config.call_args.kwargs
    assert kwargs['level'] == 'DEBUG'
    assert kwargs['format'] == '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    assert logging.getLogger('pymongo').level == logging.WARNING
