# src/content_gen/article_file.py
"""
Articles interchange file: a JSON array of articles shared by the
generation, validation and upload commands.
"""
from typing import Any, Dict, List, Mapping, Sequence
from pathlib import Path
import json
import logging

logger = logging.getLogger(__name__)


def load_articles(path) -> List[Dict[str, Any]]:
    """
    Read articles from a JSON file

    Args:
        path: File path

    Returns:
        List of articles, empty if the file does not exist

    Raises:
        ValueError: If the file does not hold a JSON array
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"{path} does not exist, starting with no articles")
        return []
    with path.open('r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array of articles")
    return data


def save_articles(path, articles: Sequence[Mapping[str, Any]]) -> None:
    path = Path(path)
    with path.open('w', encoding='utf-8') as f:
        json.dump(list(articles), f, indent=2, ensure_ascii=False)
    logger.info(f"Saved {len(articles)} articles to {path}")


def clear_articles(path) -> None:
    """Reset the file to an empty array"""
    save_articles(path, [])


def append_article(path, article: Mapping[str, Any]) -> int:
    """
    Append one article to the file

    Returns:
        int: Number of articles in the file afterwards
    """
    articles = load_articles(path)
    articles.append(dict(article))
    save_articles(path, articles)
    return len(articles)
