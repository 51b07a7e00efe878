# src/content_gen/normalizer.py
"""
Content normalizer.

Turns a raw article (LLM output or a legacy record) into the canonical
storage shape: the top-level fields plus one open ``content_blocks`` mapping.

Steps must run in this order, which prepare_article() enforces:
field names -> tags -> slug -> legacy consolidation -> default score -> nesting.
"""
from typing import Any, Dict, List, Mapping, Optional
import logging
import re

from .schema import TOP_LEVEL_FIELDS

logger = logging.getLogger(__name__)

EVIDENCE_LEGACY_FIELDS = ('key_evidence', 'effectiveness', 'evidence_base')

# Fields a nested article may carry both at the top level and in content_blocks
CONSOLIDATED_FIELDS = EVIDENCE_LEGACY_FIELDS + (
    'evidence_summary', 'practical_takeaways', 'practical_applications',
)

# Categories where practical_takeaways is a field in its own right
TAKEAWAY_CATEGORIES = ('risk_factors', 'neurodiversity')

DEFAULT_SCORE_CATEGORIES = ('interventions', 'lifestyle_factors')
DEFAULT_RELIABILITY_SCORE = 0.5

# List-valued fields that must stay lists
LIST_FIELDS = ('tags', 'faqs')

_CAMEL_BOUNDARY = re.compile(r'(?<=[a-z0-9])(?=[A-Z])')
_NON_SLUG_CHARS = re.compile(r'[^a-z0-9]+')


def slugify(title: str) -> str:
    """
    Build a URL slug from a title

    >>> slugify("Understanding Autism Spectrum Disorder!!")
    'understanding-autism-spectrum-disorder'
    """
    return _NON_SLUG_CHARS.sub('-', title.lower()).strip('-')


def to_snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub('_', name).lower()


def join_paragraph(items: List[Any]) -> str:
    """Join list items into one paragraph: '. ' between items and a closing period"""
    return '. '.join(str(item) for item in items) + '.'


def normalize_field_names(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Rename camelCase keys to snake_case and flatten list-valued text fields

    Models sometimes answer ``keyEvidence: ["...", "..."]`` instead of
    ``key_evidence: "..."``. A renamed key replaces an existing snake_case key.

    Args:
        raw: Article as returned by the model

    Returns:
        New article dict
    """
    processed: Dict[str, Any] = {}
    renamed: Dict[str, Any] = {}
    for key, value in raw.items():
        name = to_snake_case(key)
        if name not in LIST_FIELDS and name != 'content_blocks' and isinstance(value, list) and value \
                and all(isinstance(item, str) for item in value):
            logger.debug(f"Joining list value of '{key}' into a paragraph")
            value = join_paragraph(value)
        if name != key:
            logger.debug(f"Renaming field '{key}' to '{name}'")
            renamed[name] = value
        else:
            processed[name] = value
    processed.update(renamed)
    return processed


def normalize_tags(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Make sure tags is a list, splitting comma separated strings"""
    article = dict(raw)
    tags = article.get('tags')
    if isinstance(tags, str):
        article['tags'] = [tag.strip() for tag in tags.split(',') if tag.strip()]
    elif not isinstance(tags, list):
        article['tags'] = []
    return article


def ensure_slug(raw: Mapping[str, Any]) -> Dict[str, Any]:
    article = dict(raw)
    if not article.get('slug') and isinstance(article.get('title'), str):
        article['slug'] = slugify(article['title'])
    return article


def _join_present(values: List[Any]) -> str:
    return ' '.join(str(v) for v in values if v).strip()


def consolidate_legacy_fields(fields: Mapping[str, Any], category: Optional[str] = None) -> Dict[str, Any]:
    """
    Merge legacy field names into the consolidated fields

    ``key_evidence``, ``effectiveness`` and ``evidence_base`` are appended (in
    that order, after any existing text) to ``evidence_summary``;
    ``practical_takeaways`` is merged with ``practical_applications``. The
    legacy keys are removed. Risk factor and neurodiversity articles keep
    ``practical_takeaways`` and only use it to fill a missing
    ``practical_applications``.

    Works on a flat article or on a ``content_blocks`` mapping. For a nested
    article the top-level copies of these fields are first joined into the
    content blocks (block text first), then the blocks are consolidated.
    Running it again on its own output changes nothing.

    Args:
        fields: Article or content blocks
        category: Article category, read from ``fields`` when omitted

    Returns:
        New dict with consolidated fields
    """
    category = category or fields.get('category')

    blocks = fields.get('content_blocks')
    if isinstance(blocks, Mapping):
        article = {k: v for k, v in fields.items() if k != 'content_blocks'}
        merged = dict(blocks)
        for name in CONSOLIDATED_FIELDS:
            if name not in article:
                continue
            value = article.pop(name)
            merged[name] = _join_present([merged[name], value]) if name in merged else value
        article['content_blocks'] = _consolidate(merged, category)
        return article
    return _consolidate(fields, category)


def _consolidate(fields: Mapping[str, Any], category: Optional[str]) -> Dict[str, Any]:
    result = dict(fields)

    present = [name for name in EVIDENCE_LEGACY_FIELDS if name in result]
    if present:
        evidence = _join_present([result.get('evidence_summary')] + [result.pop(name) for name in present])
        if evidence:
            result['evidence_summary'] = evidence
        logger.debug(f"Consolidated {', '.join(present)} into evidence_summary")

    if 'practical_takeaways' in result:
        if category in TAKEAWAY_CATEGORIES:
            if not result.get('practical_applications') and result['practical_takeaways']:
                result['practical_applications'] = result['practical_takeaways']
        else:
            takeaways = result.pop('practical_takeaways')
            applications = _join_present([takeaways, result.get('practical_applications')])
            if applications:
                result['practical_applications'] = applications
            logger.debug("Consolidated practical_takeaways into practical_applications")

    return result


def inject_default_reliability_score(article: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Set the placeholder reliability score on interventions and lifestyle articles

    The placeholder is replaced later by the evidence based score
    (see reliability.py).
    """
    result = dict(article)
    if result.get('category') not in DEFAULT_SCORE_CATEGORIES:
        return result

    blocks = result.get('content_blocks')
    if isinstance(blocks, Mapping):
        if 'reliability_score' not in blocks and 'reliability_score' not in result:
            result['content_blocks'] = dict(blocks, reliability_score=DEFAULT_RELIABILITY_SCORE)
    elif 'reliability_score' not in result:
        result['reliability_score'] = DEFAULT_RELIABILITY_SCORE
    return result


def nest_content_blocks(article: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Move every non top-level field into ``content_blocks``

    Unrecognized fields are kept as content blocks, never dropped. Values
    already present in an existing ``content_blocks`` mapping win over
    top-level duplicates.

    Args:
        article: Flat or partially nested article

    Returns:
        Dict with the top-level fields and a ``content_blocks`` mapping
    """
    nested: Dict[str, Any] = {}
    content_blocks: Dict[str, Any] = {}
    for key, value in article.items():
        if key == 'content_blocks':
            continue
        if key in TOP_LEVEL_FIELDS:
            nested[key] = value
        else:
            content_blocks[key] = value

    existing = article.get('content_blocks')
    if isinstance(existing, Mapping):
        content_blocks.update(existing)

    nested['content_blocks'] = content_blocks
    return nested


def prepare_article(raw: Mapping[str, Any], status: Optional[str] = None) -> Dict[str, Any]:
    """
    Run the full normalization pipeline on a raw article

    Args:
        raw: Article as produced by the model or read from a file
        status: Optional status overriding the article's own

    Returns:
        Nested article ready for validation and storage
    """
    article = normalize_field_names(raw)
    article = normalize_tags(article)
    article = ensure_slug(article)
    article = consolidate_legacy_fields(article)
    article = inject_default_reliability_score(article)
    if status:
        article['status'] = status
    elif not article.get('status'):
        article['status'] = 'draft'
    return nest_content_blocks(article)
