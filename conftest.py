# conftest.py
import os
import sys

import pytest

# Make the src.content_gen imports work without installing the package
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from src.content_gen.config import Settings  # noqa: E402
from src.content_gen.schema import NUMERIC_FIELDS, required_fields_for  # noqa: E402


def build_article(category, title="Sleep and Mood", **overrides):
    """Complete flat article for a category with every required field filled"""
    article = {
        'title': title,
        'slug': title.lower().replace(' ', '-'),
        'summary': f"{title} is a well studied topic in mental health.",
        'category': category,
        'status': 'draft',
        'tags': ['sleep', 'mood'],
    }
    for name in required_fields_for(category):
        if name in article:
            continue
        if name in NUMERIC_FIELDS:
            article[name] = 0.8
        else:
            article[name] = f"Text for {name.replace('_', ' ')} [1]."
    article.update(overrides)
    return article


@pytest.fixture
def settings():
    return Settings(
        openai_api_key='test-key',
        mongodb_uri='mongodb://localhost:27017',
        mongodb_db_name='test_db',
    )


@pytest.fixture
def make_article():
    return build_article
