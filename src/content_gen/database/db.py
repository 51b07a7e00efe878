"""
Article storage on MongoDB, with Atlas vector search over the embedding fields
"""
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
import logging

from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..exceptions import DatabaseError
from .db_connection import DatabaseConnection
from .models import ArticleRecord, utc_now

logger = logging.getLogger(__name__)

EMBEDDING_FIELDS = ('title_embedding', 'content_embedding', 'summary_embedding')


class ArticleDatabase:
    """Articles collection keyed by slug"""

    def __init__(self, collection: Collection, vector_index_name: str = 'article_vector_index'):
        """
        Args:
            collection: The articles collection
            vector_index_name: Name of the Atlas vector search index
        """
        self.articles = collection
        self.vector_index_name = vector_index_name

    @classmethod
    def from_connection(cls, connection: DatabaseConnection) -> 'ArticleDatabase':
        return cls(
            connection.get_collection(),
            vector_index_name=connection.settings.vector_index_name,
        )

    def setup_indexes(self):
        """Setup required database indexes"""
        try:
            self.articles.create_index([("slug", ASCENDING)], unique=True)
            self.articles.create_index([("category", ASCENDING)])
            self.articles.create_index([("created_at", DESCENDING)])
            logger.info("Article indexes created successfully")
        except PyMongoError as e:
            logger.error(f"Index creation failed: {e}")
            raise DatabaseError(f"Index creation failed: {str(e)}")

    def select(
        self,
        query: Optional[Mapping[str, Any]] = None,
        projection: Optional[Mapping[str, Any]] = None,
        limit: int = 0,
        sort: Optional[Sequence[Tuple[str, int]]] = None,
    ) -> List[Dict]:
        """
        Find articles

        Args:
            query: MongoDB filter (all articles when omitted)
            projection: Fields to return
            limit: Maximum number of documents, 0 for no limit
            sort: Sort specification, e.g. [("created_at", -1)]

        Returns:
            List of article documents
        """
        try:
            cursor = self.articles.find(dict(query or {}), projection)
            if sort:
                cursor = cursor.sort(list(sort))
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)
        except PyMongoError as e:
            logger.error(f"Error selecting articles: {e}")
            raise DatabaseError(f"Failed to select articles: {str(e)}")

    def select_by_categories(self, categories: Sequence[str]) -> List[Dict]:
        return self.select({'category': {'$in': list(categories)}})

    def find_by_slug(self, slug: str) -> Optional[Dict]:
        try:
            return self.articles.find_one({'slug': slug})
        except PyMongoError as e:
            logger.error(f"Error getting article {slug}: {e}")
            raise DatabaseError(f"Failed to get article: {str(e)}")

    def insert(self, article: Mapping[str, Any]) -> str:
        """
        Insert a new article

        Args:
            article: Nested article (top-level fields and content_blocks)

        Returns:
            str: Inserted document ID

        Raises:
            DatabaseError: If the insert fails, e.g. on a duplicate slug
        """
        document = ArticleRecord(**article).to_document()
        try:
            inserted_id = str(self.articles.insert_one(document).inserted_id)
            logger.info(f"Inserted article {document['slug']}")
            return inserted_id
        except PyMongoError as e:
            logger.error(f"Error inserting article {document['slug']}: {e}")
            raise DatabaseError(f"Failed to insert article: {str(e)}")

    def upsert(self, article: Mapping[str, Any]) -> bool:
        """
        Insert or replace an article keyed by its slug

        Args:
            article: Nested article (top-level fields and content_blocks)

        Returns:
            bool: True if a new document was inserted
        """
        document = ArticleRecord(**article).to_document()
        created_at = document.pop('created_at')
        try:
            result = self.articles.update_one(
                {'slug': document['slug']},
                {'$set': document, '$setOnInsert': {'created_at': created_at}},
                upsert=True,
            )
        except PyMongoError as e:
            logger.error(f"Error upserting article (slug: {document['slug']}): {e}")
            raise DatabaseError(f"Failed to upsert article: {str(e)}")

        inserted = result.upserted_id is not None
        logger.info(f"Article {document['slug']} {'inserted' if inserted else 'updated'}")
        return inserted

    def update(self, slug: str, fields: Mapping[str, Any]) -> int:
        """
        Patch fields of one article

        Args:
            slug: Article slug
            fields: Fields to set; dotted paths such as
                ``content_blocks.reliability_score`` patch a single block

        Returns:
            int: Number of modified documents
        """
        if not fields:
            raise ValueError("fields must be a non-empty mapping")
        update = dict(fields)
        update['updated_at'] = utc_now()
        try:
            result = self.articles.update_one({'slug': slug}, {'$set': update})
        except PyMongoError as e:
            logger.error(f"Error updating article {slug}: {e}")
            raise DatabaseError(f"Failed to update article: {str(e)}")

        if result.matched_count == 0:
            raise DatabaseError(f"Article {slug} not found")
        logger.info(f"Updated article {slug}. Modified fields: {', '.join(fields.keys())}")
        return result.modified_count

    def update_content_block(self, slug: str, block: str, value: Any) -> int:
        return self.update(slug, {f'content_blocks.{block}': value})

    def delete(self, slug: str) -> int:
        try:
            result = self.articles.delete_one({'slug': slug})
        except PyMongoError as e:
            logger.error(f"Error deleting article {slug}: {e}")
            raise DatabaseError(f"Failed to delete article: {str(e)}")
        logger.info(f"Deleted {result.deleted_count} article(s) with slug {slug}")
        return result.deleted_count

    def articles_missing_embeddings(self) -> List[Dict]:
        """
        Articles where an embedding that can be computed is missing or null

        A null summary embedding only counts when the article has a summary.
        """
        return self.select({'$or': [
            {'title_embedding': None},
            {'content_embedding': None},
            {'summary_embedding': None, 'summary': {'$nin': [None, '']}},
        ]})

    def vector_search(
        self,
        query_embedding: List[float],
        similarity_threshold: float = 0.7,
        match_count: int = 5,
        path: str = 'content_embedding',
    ) -> List[Dict]:
        """
        Find articles similar to a query embedding

        Args:
            query_embedding: Embedding of the query text
            similarity_threshold: Minimum similarity score (0-1)
            match_count: Maximum number of results
            path: Embedding field to search

        Returns:
            Matching articles with a ``similarity`` field, best first
        """
        pipeline = [
            {"$vectorSearch": {
                "index": self.vector_index_name,
                "path": path,
                "queryVector": query_embedding,
                "numCandidates": max(match_count * 10, 100),
                "limit": match_count,
            }},
            {"$project": {
                "_id": 0,
                "title": 1,
                "slug": 1,
                "summary": 1,
                "category": 1,
                "similarity": {"$meta": "vectorSearchScore"},
            }},
            {"$match": {"similarity": {"$gte": similarity_threshold}}},
        ]
        try:
            results = list(self.articles.aggregate(pipeline))
        except PyMongoError as e:
            logger.error(f"Vector search failed: {e}")
            raise DatabaseError(f"Vector search failed: {str(e)}")
        logger.info(f"Found {len(results)} articles in vector search")
        return results
