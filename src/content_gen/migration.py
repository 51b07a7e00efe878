# src/content_gen/migration.py
"""
Migrate stored articles to the consolidated field names.
"""
from typing import Any, Dict, Mapping
import logging

from .database.db import ArticleDatabase
from .database.models import BatchResult
from .exceptions import DatabaseError
from .normalizer import (
    consolidate_legacy_fields,
    inject_default_reliability_score,
)

logger = logging.getLogger(__name__)


def migrate_content_blocks(article: Mapping[str, Any]) -> Dict[str, Any]:
    """Consolidated content_blocks of a stored article, with the default score"""
    category = article.get('category')
    blocks = consolidate_legacy_fields(article.get('content_blocks') or {}, category)
    return inject_default_reliability_score(
        {'category': category, 'content_blocks': blocks}
    )['content_blocks']


def migrate_articles(db: ArticleDatabase) -> BatchResult:
    """
    Consolidate legacy content blocks of every stored article

    Only articles whose content blocks change are written; the others are
    counted as skipped.

    Returns:
        BatchResult keyed by slug
    """
    articles = db.select(projection={'slug': 1, 'title': 1, 'category': 1, 'content_blocks': 1})
    logger.info(f"Migrating {len(articles)} articles")

    batch = BatchResult(operation='migrate')
    for article in articles:
        slug = article.get('slug', '<no slug>')
        current = article.get('content_blocks') or {}
        migrated = migrate_content_blocks(article)
        if migrated == current:
            batch.record_skip(slug, 'already migrated')
            continue
        try:
            db.update(slug, {'content_blocks': migrated})
        except DatabaseError as e:
            batch.record_failure(slug, e)
            continue
        logger.info(f"Migrated content blocks of {slug}")
        batch.record_success(slug)

    return batch
