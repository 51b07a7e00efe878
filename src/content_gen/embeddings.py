# src/content_gen/embeddings.py
"""
Article embeddings for semantic search.

Each stored article carries three vectors: the title, the JSON encoded
content blocks and the summary.
"""
from typing import Any, Dict, List, Mapping, Optional
from concurrent.futures import ThreadPoolExecutor, as_completed
import json
import logging

from openai import OpenAI

from .config import Settings
from .database.db import ArticleDatabase
from .database.models import BatchResult
from .exceptions import EmbeddingError
from .utils import batched, pause, truncate_to_tokens

logger = logging.getLogger(__name__)

BACKFILL_BATCH_SIZE = 5


class EmbeddingService:
    """Generate, store and search article embeddings"""

    def __init__(self, settings: Settings, db: ArticleDatabase, client: Optional[OpenAI] = None):
        self.settings = settings
        self.db = db
        self.model = settings.embedding_model
        self.client = client or OpenAI(api_key=settings.require_openai())

    def generate_embedding(self, text: str) -> List[float]:
        """
        Embed one text

        Raises:
            EmbeddingError: If the text is empty or the request fails
        """
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")
        try:
            response = self.client.embeddings.create(
                model=self.model,
                input=truncate_to_tokens(text, self.model),
            )
            return response.data[0].embedding
        except Exception as e:
            logger.error(f"Error generating embedding: {e}")
            raise EmbeddingError(f"Embedding request failed: {str(e)}")

    def embeddings_for(self, article: Mapping[str, Any]) -> Dict[str, Optional[List[float]]]:
        """
        Embeddings for the title, content blocks and summary of an article

        Embeddings already present on the article are kept. The summary
        embedding is None when the article has no summary.
        """
        content = json.dumps(article.get('content_blocks') or {}, ensure_ascii=False, default=str)
        summary = article.get('summary')
        return {
            'title_embedding': article.get('title_embedding') or self.generate_embedding(article['title']),
            'content_embedding': article.get('content_embedding') or self.generate_embedding(content),
            'summary_embedding': article.get('summary_embedding') or (
                self.generate_embedding(summary) if summary else None
            ),
        }

    def update_article_embeddings(self, article: Mapping[str, Any]) -> Dict[str, Optional[List[float]]]:
        """Compute the missing embeddings of a stored article and save them"""
        embeddings = self.embeddings_for(article)
        self.db.update(article['slug'], embeddings)
        logger.info(f"Updated embeddings for {article['slug']}")
        return embeddings

    def backfill_embeddings(self, batch_size: int = BACKFILL_BATCH_SIZE, delay: float = 1.0) -> BatchResult:
        """
        Fill in missing embeddings of all stored articles

        Articles are processed in batches; the articles of one batch run
        concurrently and the whole batch finishes before the next one starts.

        Args:
            batch_size: Articles processed concurrently
            delay: Seconds to wait between batches

        Returns:
            BatchResult keyed by slug
        """
        articles = self.db.articles_missing_embeddings()
        logger.info(f"Found {len(articles)} articles needing embeddings")

        result = BatchResult(operation='backfill_embeddings')
        batches = list(batched(articles, batch_size))
        for number, batch in enumerate(batches, start=1):
            logger.info(f"Processing batch {number}/{len(batches)} ({len(batch)} articles)")
            with ThreadPoolExecutor(max_workers=batch_size) as executor:
                future_to_slug = {
                    executor.submit(self.update_article_embeddings, article): article.get('slug', '<no slug>')
                    for article in batch
                }
                for future in as_completed(future_to_slug):
                    slug = future_to_slug[future]
                    try:
                        future.result()
                        result.record_success(slug)
                    except Exception as e:
                        result.record_failure(slug, e)

            if number < len(batches):
                pause(delay)

        logger.info(f"Backfill completed: {len(result.succeeded)} updated, {len(result.failed)} failed")
        return result

    def search_articles(
        self,
        query: str,
        similarity_threshold: float = 0.7,
        match_count: int = 5,
    ) -> List[Dict[str, Any]]:
        """
        Find the articles most similar to a free text query

        Args:
            query: Search text
            similarity_threshold: Minimum similarity (0-1)
            match_count: Maximum number of results

        Returns:
            Matching articles with their similarity
        """
        query_embedding = self.generate_embedding(query)
        return self.db.vector_search(
            query_embedding,
            similarity_threshold=similarity_threshold,
            match_count=match_count,
        )
