# src/content_gen/schema.py
"""
Category schema registry.

Articles form a discriminated union keyed by ``category``. The required
content fields of every variant live in one table (CATEGORY_VARIANTS); the
pydantic models used for validation are generated from it, so the table is
the only place a field list is declared.
"""
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Tuple, Type
from dataclasses import dataclass, field
from enum import Enum
import logging

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    Strict,
    StrictStr,
    StringConstraints,
    ValidationError,
    create_model,
)

from .exceptions import UnknownCategoryError

logger = logging.getLogger(__name__)


class Category(str, Enum):
    """Article categories"""
    MENTAL_HEALTH = "mental_health"
    NEUROSCIENCE = "neuroscience"
    PSYCHOLOGY = "psychology"
    BRAIN_HEALTH = "brain_health"
    NEURODIVERSITY = "neurodiversity"
    INTERVENTIONS = "interventions"
    LIFESTYLE_FACTORS = "lifestyle_factors"
    LAB_TESTING = "lab_testing"
    RISK_FACTORS = "risk_factors"


CATEGORIES: Tuple[str, ...] = tuple(c.value for c in Category)

STATUSES = ('published', 'draft', 'archived')
DEFAULT_STATUS = 'draft'

SLUG_PATTERN = r'^[a-z0-9-]+$'

# Fields kept at the top level of a stored article
TOP_LEVEL_FIELDS = ('title', 'slug', 'summary', 'category', 'status', 'tags')

# Content blocks every category requires
SHARED_CONTENT_FIELDS = (
    'overview',
    'future_directions',
    'references_and_resources',
    'evidence_summary',
    'practical_applications',
)

BASE_REQUIRED_FIELDS = TOP_LEVEL_FIELDS + SHARED_CONTENT_FIELDS

# Fields holding a number in [0, 1] instead of text
NUMERIC_FIELDS = ('reliability_score',)

# variant name -> (member categories, additional required fields)
CATEGORY_VARIANTS: Dict[str, Tuple[Tuple[str, ...], Tuple[str, ...]]] = {
    'mental_health': (
        ('mental_health',),
        ('prevalence', 'causes_and_mechanisms', 'symptoms_and_impact', 'common_myths'),
    ),
    'neuroscience': (
        ('neuroscience', 'psychology', 'brain_health'),
        ('definition', 'mechanisms', 'relevance', 'key_studies', 'common_misconceptions'),
    ),
    'neurodiversity': (
        ('neurodiversity',),
        ('neurodiversity_perspective', 'common_strengths_and_challenges',
         'prevalence_and_demographics', 'mechanisms_and_understanding',
         'common_misconceptions', 'lived_experience'),
    ),
    'interventions': (
        ('interventions', 'lifestyle_factors'),
        ('how_it_works', 'common_myths', 'risks_and_limitations', 'reliability_score'),
    ),
    'lab_testing': (
        ('lab_testing',),
        ('how_it_works', 'applications', 'strengths_and_limitations', 'risks_and_limitations'),
    ),
    'risk_factors': (
        ('risk_factors',),
        ('prevalence', 'mechanisms', 'modifiable_factors', 'protective_factors',
         'practical_takeaways', 'reliability_score'),
    ),
}

NonEmptyText = Annotated[StrictStr, StringConstraints(strip_whitespace=True, min_length=1)]
Slug = Annotated[StrictStr, StringConstraints(min_length=1, pattern=SLUG_PATTERN)]
Score = Annotated[float, Strict(), Field(ge=0.0, le=1.0)]


class FAQEntry(BaseModel):
    question: StrictStr
    answer: StrictStr


class ArticleBase(BaseModel):
    """Fields shared by every category; extra content blocks are allowed"""
    model_config = ConfigDict(extra='allow')

    title: NonEmptyText
    slug: Slug
    summary: NonEmptyText
    status: Literal['published', 'draft', 'archived'] = DEFAULT_STATUS
    tags: List[StrictStr]
    faqs: Optional[List[FAQEntry]] = None
    overview: NonEmptyText
    future_directions: NonEmptyText
    references_and_resources: NonEmptyText
    evidence_summary: NonEmptyText
    practical_applications: NonEmptyText


@dataclass(frozen=True)
class CategorySchema:
    """Field-level contract of one schema variant"""
    name: str
    categories: Tuple[str, ...]
    content_fields: Tuple[str, ...]
    model: Type[BaseModel] = field(compare=False, repr=False)

    @property
    def required_fields(self) -> Tuple[str, ...]:
        """Base fields followed by the variant's own fields"""
        return BASE_REQUIRED_FIELDS + tuple(
            f for f in self.content_fields if f not in BASE_REQUIRED_FIELDS
        )

    @property
    def numeric_fields(self) -> Tuple[str, ...]:
        return tuple(f for f in self.content_fields if f in NUMERIC_FIELDS)

    @property
    def text_fields(self) -> Tuple[str, ...]:
        return tuple(
            f for f in self.required_fields
            if f not in NUMERIC_FIELDS and f not in ('category', 'status', 'tags')
        )

    def describe(self) -> Dict[str, str]:
        """Human readable field contract, used when prompting the model"""
        description = {}
        for name in self.required_fields:
            if name in NUMERIC_FIELDS:
                description[name] = "number between 0 and 1"
            elif name == 'category':
                description[name] = " | ".join(self.categories)
            elif name == 'status':
                description[name] = " | ".join(STATUSES) + f" (default {DEFAULT_STATUS})"
            elif name == 'tags':
                description[name] = "array of strings"
            elif name == 'slug':
                description[name] = "string, lowercase letters, digits and hyphens"
            else:
                description[name] = "non-empty string"
        description['faqs'] = "optional array of {question, answer}"
        return description


def _build_schema(name: str, categories: Tuple[str, ...], content_fields: Tuple[str, ...]) -> CategorySchema:
    fields: Dict[str, Any] = {'category': (Literal[categories], ...)}
    for field_name in content_fields:
        if field_name in NUMERIC_FIELDS:
            fields[field_name] = (Score, ...)
        else:
            fields[field_name] = (NonEmptyText, ...)
    model = create_model(f"{name.title().replace('_', '')}Article", __base__=ArticleBase, **fields)
    return CategorySchema(name=name, categories=categories, content_fields=content_fields, model=model)


_VARIANT_SCHEMAS: Dict[str, CategorySchema] = {
    name: _build_schema(name, members, content_fields)
    for name, (members, content_fields) in CATEGORY_VARIANTS.items()
}

_SCHEMAS_BY_CATEGORY: Dict[str, CategorySchema] = {
    category: schema
    for schema in _VARIANT_SCHEMAS.values()
    for category in schema.categories
}


def schema_for(category: Any) -> CategorySchema:
    """
    Get the schema variant for a category

    Args:
        category: Category identifier (string or Category)

    Returns:
        CategorySchema shared by every category of the same variant

    Raises:
        UnknownCategoryError: If the category is not a known category
    """
    key = category.value if isinstance(category, Category) else category
    try:
        return _SCHEMAS_BY_CATEGORY[key]
    except (KeyError, TypeError):
        raise UnknownCategoryError(category)


def required_fields_for(category: Any) -> Tuple[str, ...]:
    return schema_for(category).required_fields


@dataclass(frozen=True)
class ValidationIssue:
    path: str
    message: str

    def __str__(self):
        return f"{self.path}: {self.message}"


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)
    article: Optional[Dict[str, Any]] = None


def merged_view(article: Mapping[str, Any]) -> Dict[str, Any]:
    """Flatten an article: top-level fields plus its content blocks (top level wins)"""
    view = {k: v for k, v in article.items() if k != 'content_blocks'}
    blocks = article.get('content_blocks')
    if isinstance(blocks, Mapping):
        for key, value in blocks.items():
            view.setdefault(key, value)
    return view


def _issue_path(loc: Tuple[Any, ...], nested: bool) -> str:
    path = ".".join(str(part) for part in loc)
    if nested and loc and loc[0] not in TOP_LEVEL_FIELDS and loc[0] != 'faqs':
        return f"content_blocks.{path}"
    return path


def validate_article(article: Mapping[str, Any]) -> ValidationResult:
    """
    Validate an article against the schema of its category

    The category is the discriminant: it is resolved first and selects the
    schema variant. Missing, empty or out-of-range fields are reported as
    issues, never raised.

    Args:
        article: Flat or nested (content_blocks) article

    Returns:
        ValidationResult with ordered (path, message) issues

    Raises:
        UnknownCategoryError: If the category is absent or unknown
    """
    category = article.get('category') if isinstance(article, Mapping) else None
    schema = schema_for(category)

    nested = 'content_blocks' in article
    issues: List[ValidationIssue] = []
    if nested and not isinstance(article['content_blocks'], Mapping):
        issues.append(ValidationIssue('content_blocks', 'Content blocks must be a mapping'))

    try:
        validated = schema.model.model_validate(merged_view(article))
    except ValidationError as e:
        for error in e.errors():
            issues.append(ValidationIssue(_issue_path(error['loc'], nested), error['msg']))
        logger.debug(f"Article '{article.get('title')}' failed validation with {len(issues)} issue(s)")
        return ValidationResult(is_valid=False, errors=issues)

    if issues:
        return ValidationResult(is_valid=False, errors=issues)
    return ValidationResult(is_valid=True, article=validated.model_dump(exclude_none=True))
