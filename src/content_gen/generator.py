# src/content_gen/generator.py

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
import json
import logging

from openai import OpenAI

from .config import Settings
from .database.db import ArticleDatabase
from .database.models import BatchResult
from .exceptions import DatabaseError, GenerationError
from .normalizer import prepare_article
from .prompts import (
    CATEGORY_INSTRUCTIONS,
    FORMAT_RULES,
    SECTION_ORDER,
    SECTION_PROMPTS,
    SECTION_SYSTEM_PROMPT,
    SUMMARY_RULES,
    SYSTEM_PROMPT,
    example_article_for,
)
from .schema import TOP_LEVEL_FIELDS, schema_for, validate_article
from .utils import pause

logger = logging.getLogger(__name__)


class ArticleGenerator:
    """Generate mental health articles with an OpenAI chat model"""

    def __init__(self, settings: Settings, client: Optional[OpenAI] = None, model: Optional[str] = None):
        """
        Args:
            settings: Runtime settings
            client: Optional OpenAI client (created from settings when omitted)
            model: Chat model overriding settings.model
        """
        self.settings = settings
        self.model = model or settings.model
        self.client = client or OpenAI(api_key=settings.require_openai())
        logger.info(f"Article generator initialized with model {self.model}")

    def build_prompt(self, topic: str, category: str) -> str:
        """
        Build the user prompt for one article

        Args:
            topic: Article topic
            category: Article category

        Returns:
            str: Prompt with the field contract, category guidance and an example
        """
        schema = schema_for(category)
        field_lines = "\n".join(
            f"- {name}: {description}" for name, description in schema.describe().items()
        )
        sections = SECTION_ORDER.get(category)
        order = f"\nOrder the content sections as: {', '.join(sections)}\n" if sections else ""
        example = json.dumps(example_article_for(category), indent=2)

        return f"""Generate a comprehensive article about "{topic}" for the {category} category.

## Required fields
{field_lines}
{order}
## Summary
{SUMMARY_RULES}

{CATEGORY_INSTRUCTIONS[category]}

{FORMAT_RULES}

## Example article
{example}

Return the article as a single JSON object with category set to "{category}"."""

    def _chat(self, messages: List[Dict[str, str]], json_mode: bool = False, temperature: float = 0.7) -> str:
        params: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
        }
        if json_mode:
            params["response_format"] = {"type": "json_object"}
        try:
            response = self.client.chat.completions.create(**params)
        except Exception as e:
            logger.error(f"OpenAI request failed: {e}")
            raise GenerationError(f"OpenAI request failed: {str(e)}")

        content = response.choices[0].message.content
        if not content:
            raise GenerationError("Empty response from the model")
        return content

    def generate_article(self, topic: str, category: str) -> Dict[str, Any]:
        """
        Generate, normalize and validate one article

        Args:
            topic: Article topic
            category: Article category

        Returns:
            Dict: Nested article ready for storage

        Raises:
            UnknownCategoryError: If the category is unknown (before any request)
            GenerationError: If the response is not JSON or fails validation
        """
        schema = schema_for(category)
        logger.info(f"Generating {category} article about '{topic}'")

        system_prompt = SYSTEM_PROMPT.format(
            category=category,
            required_fields=", ".join(schema.required_fields),
        )
        content = self._chat(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": self.build_prompt(topic, category)},
            ],
            json_mode=True,
        )

        try:
            raw = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"Model returned invalid JSON for '{topic}': {e}")
            raise GenerationError(f"Invalid JSON in model response: {str(e)}")
        if not isinstance(raw, dict):
            raise GenerationError("Model response is not a JSON object")

        if raw.get('category') != category:
            if raw.get('category'):
                logger.warning(f"Model answered category '{raw['category']}', using '{category}'")
            raw['category'] = category

        article = prepare_article(raw)
        result = validate_article(article)
        if not result.is_valid:
            for issue in result.errors:
                logger.error(f"Validation error in '{topic}': {issue}")
            raise GenerationError(
                f"Generated article '{topic}' failed validation with {len(result.errors)} error(s)",
                issues=result.errors,
            )

        logger.info(f"Generated article '{article['title']}' ({article['slug']})")
        return article

    def generate_many(
        self,
        topics: Sequence[str],
        category: str,
        delay: float = 5.0,
    ) -> Tuple[List[Dict[str, Any]], BatchResult]:
        """
        Generate one article per topic, continuing past failures

        Args:
            topics: Article topics
            category: Category shared by all articles
            delay: Seconds to wait between requests

        Returns:
            Tuple of the generated articles and the batch result
        """
        schema_for(category)
        articles = []
        batch = BatchResult(operation=f'generate_{category}')
        for index, topic in enumerate(topics):
            if index:
                pause(delay)
            logger.info(f"[{index + 1}/{len(topics)}] Generating article for: {topic}")
            try:
                article = self.generate_article(topic, category)
            except GenerationError as e:
                batch.record_failure(topic, e)
                continue
            articles.append(article)
            batch.record_success(topic)

        logger.info(f"Generated {len(batch.succeeded)} of {len(topics)} articles")
        return articles, batch

    def generate_section(self, title: str, category: str, section: str) -> str:
        """
        Write new text for one section of an article

        Raises:
            GenerationError: If there is no prompt for the section
        """
        template = SECTION_PROMPTS.get(section)
        if template is None:
            raise GenerationError(f"No prompt template defined for section: {section}")
        prompt = template.format(topic=title, category=category)
        return self._chat(
            [
                {"role": "system", "content": SECTION_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ]
        ).strip()

    def regenerate_section(self, article: Mapping[str, Any], section: str) -> Dict[str, Any]:
        """
        Replace one section of an article with newly generated text

        The section is replaced where it lives, at the top level or in
        content_blocks.

        Args:
            article: Article to update
            section: Section name, e.g. summary or overview

        Returns:
            Dict: Updated copy of the article

        Raises:
            GenerationError: If the section has no prompt or is not in the article
        """
        blocks = article.get('content_blocks')
        in_blocks = isinstance(blocks, Mapping) and section in blocks
        if section not in article and not in_blocks:
            raise GenerationError(f"Section {section} not found in article structure")

        new_content = self.generate_section(article['title'], article['category'], section)
        updated = dict(article)
        if section in article:
            updated[section] = new_content
        else:
            updated['content_blocks'] = dict(blocks, **{section: new_content})
        logger.info(f"Updated {section} for '{article['title']}'")
        return updated

    def update_sections(
        self,
        articles: Sequence[Mapping[str, Any]],
        section: str,
        count: int = 10,
        delay: float = 1.0,
    ) -> Tuple[List[Dict[str, Any]], BatchResult]:
        """
        Regenerate a section of the last ``count`` articles of a list

        Returns:
            Tuple of the full (partly updated) article list and the batch result
        """
        if section not in SECTION_PROMPTS:
            raise GenerationError(f"No prompt template defined for section: {section}")

        updated = [dict(article) for article in articles]
        start = max(len(updated) - count, 0)
        batch = BatchResult(operation=f'update_{section}')
        for position, index in enumerate(range(start, len(updated))):
            title = updated[index].get('title', f'#{index}')
            if position:
                pause(delay)
            try:
                updated[index] = self.regenerate_section(updated[index], section)
            except GenerationError as e:
                batch.record_failure(title, e)
                continue
            batch.record_success(title)
        return updated, batch

    def update_stored_summaries(self, db: ArticleDatabase, count: int = 10, delay: float = 1.0) -> BatchResult:
        """Regenerate the summaries of the ``count`` most recent stored articles"""
        articles = db.select(
            projection={'title': 1, 'slug': 1, 'category': 1, 'summary': 1},
            limit=count,
            sort=[('created_at', -1)],
        )
        logger.info(f"Found {len(articles)} articles to update")

        batch = BatchResult(operation='update_summary')
        for index, article in enumerate(articles):
            slug = article.get('slug', '<no slug>')
            if index:
                pause(delay)
            try:
                summary = self.generate_section(article['title'], article['category'], 'summary')
                db.update(slug, {'summary': summary})
            except (GenerationError, DatabaseError) as e:
                batch.record_failure(slug, e)
                continue
            logger.info(f"Updated summary for {slug}")
            batch.record_success(slug)
        return batch
