# src/content_gen/diagnostics.py
"""
Diagnostics for the article store: connection, stored fields and an end to
end embedding and search check.
"""
from typing import Any, Dict, List, Optional
import logging

from .database.db import EMBEDDING_FIELDS, ArticleDatabase
from .database.db_connection import DatabaseConnection
from .embeddings import EmbeddingService
from .exceptions import ContentGenError

logger = logging.getLogger(__name__)

TEST_ARTICLE = {
    'title': 'Test Article',
    'slug': 'test-article-verification',
    'summary': 'A test article for verifying the embedding system.',
    'status': 'draft',
    'category': 'mental_health',
    'tags': ['test', 'verification'],
    'content_blocks': {
        'overview': 'A test article for verifying the embedding system.',
        'prevalence': 'Test prevalence data.',
        'causes_and_mechanisms': 'Test causes and mechanisms.',
        'symptoms_and_impact': 'Test symptoms and impact.',
        'evidence_summary': 'Test evidence summary.',
        'practical_applications': 'Test practical applications.',
        'common_myths': 'Test common myths.',
        'future_directions': 'Test future directions.',
        'references_and_resources': 'Test references.',
    },
}


class SetupVerifier:
    def __init__(self, connection: DatabaseConnection, db: ArticleDatabase, embeddings: EmbeddingService):
        self.connection = connection
        self.db = db
        self.embeddings = embeddings

    def check_connection(self) -> bool:
        """Verify MongoDB connection"""
        return self.connection.ping()

    def list_collections(self) -> Dict[str, int]:
        """Document count of every collection in the database"""
        counts = {}
        for name in self.connection.db.list_collection_names():
            counts[name] = self.connection.db[name].count_documents({})
            logger.info(f"- {name}: {counts[name]} documents")
        return counts

    def describe_schema(self) -> Optional[Dict[str, Any]]:
        """
        Fields of one stored article

        Returns:
            Dict with the article's fields, its content block names and
            whether the embedding and reliability fields exist, or None
            when the collection is empty
        """
        articles = self.db.select(limit=1)
        if not articles:
            logger.warning("No articles found in database")
            return None

        article = articles[0]
        blocks = article.get('content_blocks') or {}
        return {
            'fields': sorted(k for k in article.keys() if k != '_id'),
            'content_blocks': sorted(blocks.keys()),
            'embedding_fields': {name: name in article for name in EMBEDDING_FIELDS},
            'has_reliability_score': 'reliability_score' in blocks,
        }

    def verify_setup(self) -> Dict[str, bool]:
        """
        Insert a test article, embed it, search for it and delete it

        The test article is always removed, also when a step fails.

        Returns:
            Dict of step name -> success
        """
        steps: Dict[str, bool] = {'connection': self.check_connection()}
        if not steps['connection']:
            return steps

        inserted = False
        try:
            self.db.delete(TEST_ARTICLE['slug'])
            self.db.insert(TEST_ARTICLE)
            inserted = True
            steps['insert'] = True
            logger.info("Test article created")

            self.embeddings.update_article_embeddings(TEST_ARTICLE)
            steps['embeddings'] = True
            logger.info("Embeddings generated for test article")

            results = self.embeddings.search_articles('test article verification', 0.7, 1)
            steps['search'] = bool(results)
            if not results:
                logger.warning("Search returned no results (the vector index may still be building)")
        except ContentGenError as e:
            logger.error(f"Setup verification failed: {e}")
            for step in ('insert', 'embeddings', 'search'):
                steps.setdefault(step, False)
        finally:
            if inserted:
                self.db.delete(TEST_ARTICLE['slug'])
                logger.info("Test article removed")
        return steps

    @staticmethod
    def failed_steps(steps: Dict[str, bool]) -> List[str]:
        return [name for name, ok in steps.items() if not ok]
