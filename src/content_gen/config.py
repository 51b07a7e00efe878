# src/content_gen/config.py
"""
Runtime configuration loaded from the environment (.env supported).

Services receive a Settings instance explicitly instead of reading the
environment on import, so tests can build one directly.
"""
import os
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_OUTPUT_FILE = "articles-data.json"


@dataclass
class Settings:
    """Configuration shared by the generation, storage and embedding services"""
    openai_api_key: Optional[str] = None
    mongodb_uri: Optional[str] = None
    mongodb_db_name: str = "mental_health_db"
    articles_collection: str = "articles"
    model: str = DEFAULT_MODEL
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    vector_index_name: str = "article_vector_index"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """
        Build settings from environment variables

        Args:
            env_file: Optional path to a .env file (defaults to ./.env lookup)

        Returns:
            Settings instance
        """
        load_dotenv(env_file)
        return cls(
            openai_api_key=os.getenv('OPENAI_API_KEY'),
            mongodb_uri=os.getenv('MONGODB_URI'),
            mongodb_db_name=os.getenv('MONGODB_DB_NAME', 'mental_health_db'),
            articles_collection=os.getenv('ARTICLES_COLLECTION', 'articles'),
            model=os.getenv('OPENAI_MODEL', DEFAULT_MODEL),
            embedding_model=os.getenv('EMBEDDING_MODEL', DEFAULT_EMBEDDING_MODEL),
            vector_index_name=os.getenv('VECTOR_INDEX_NAME', 'article_vector_index'),
            log_level=os.getenv('LOG_LEVEL', 'INFO'),
        )

    def require_openai(self) -> str:
        """Return the OpenAI API key or fail before any work begins"""
        if not self.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is not set in environment variables")
        return self.openai_api_key

    def require_mongodb(self) -> str:
        """Return the MongoDB URI or fail before any work begins"""
        if not self.mongodb_uri:
            raise ConfigurationError("MONGODB_URI is not set in environment variables")
        return self.mongodb_uri
