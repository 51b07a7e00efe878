# src/content_gen/uploader.py
"""
Validation report and bulk upload of article files.
"""
from typing import Any, List, Mapping, NamedTuple, Sequence, Tuple
import logging

from .database.db import ArticleDatabase
from .database.models import BatchResult
from .exceptions import DatabaseError, UnknownCategoryError
from .normalizer import prepare_article
from .schema import ValidationIssue, validate_article

logger = logging.getLogger(__name__)


class InvalidArticle(NamedTuple):
    index: int
    title: str
    errors: List[ValidationIssue]


def _check(article: Mapping[str, Any]) -> List[ValidationIssue]:
    try:
        return validate_article(article).errors
    except UnknownCategoryError as e:
        return [ValidationIssue('category', str(e))]


def validate_articles(articles: Sequence[Mapping[str, Any]]) -> Tuple[int, List[InvalidArticle]]:
    """
    Validate every article of a file as it is stored, without normalizing

    Returns:
        Tuple of the number of valid articles and the invalid ones
    """
    valid_count = 0
    invalid: List[InvalidArticle] = []
    for index, article in enumerate(articles):
        errors = _check(article) if isinstance(article, Mapping) else [
            ValidationIssue('', 'Article must be a JSON object')
        ]
        if errors:
            title = article.get('title', '<untitled>') if isinstance(article, Mapping) else '<invalid>'
            logger.debug(f"Article {index + 1} '{title}' is invalid")
            invalid.append(InvalidArticle(index, title, errors))
        else:
            valid_count += 1
    logger.info(f"Validated {len(articles)} articles: {valid_count} valid, {len(invalid)} invalid")
    return valid_count, invalid


def bulk_upload(articles: Sequence[Mapping[str, Any]], db: ArticleDatabase) -> BatchResult:
    """
    Normalize, validate and upsert articles by slug

    Invalid articles and failed writes are recorded and skipped; the rest of
    the batch is still uploaded.

    Args:
        articles: Raw articles (flat or nested)
        db: Article storage

    Returns:
        BatchResult keyed by article slug (or title when no slug exists)
    """
    batch = BatchResult(operation='upload')
    for index, raw in enumerate(articles):
        if not isinstance(raw, Mapping):
            batch.record_failure(f'#{index + 1}', 'Article must be a JSON object')
            continue
        label = raw.get('slug') or raw.get('title') or f'#{index + 1}'
        article = prepare_article(raw)
        label = article.get('slug') or label

        errors = _check(article)
        if errors:
            batch.record_failure(label, "; ".join(str(error) for error in errors))
            continue

        try:
            db.upsert(article)
        except DatabaseError as e:
            batch.record_failure(label, e)
            continue
        batch.record_success(label)

    logger.info(
        f"Upload finished: {len(batch.succeeded)} uploaded, {len(batch.failed)} failed "
        f"out of {len(articles)}"
    )
    return batch
