# src/content_gen/reliability.py
"""
Evidence reliability scoring.

The model grades an article's evidence summary on four dimensions; the
score is a weighted sum of the per-dimension scores below.
"""
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple
from decimal import Decimal, ROUND_HALF_UP
import json
import logging

from openai import OpenAI

from .config import Settings
from .database.db import ArticleDatabase
from .database.models import BatchResult
from .exceptions import DatabaseError
from .prompts import EVIDENCE_ASSESSMENT_PROMPT, EVIDENCE_SYSTEM_PROMPT
from .utils import pause

logger = logging.getLogger(__name__)

RELIABILITY_CRITERIA: Dict[str, Dict[str, float]] = {
    'effectSize': {
        'large': 1.0,          # > 0.5
        'medium': 0.7,         # 0.3 - 0.5
        'small': 0.4,          # 0.1 - 0.3
        'verySmall': 0.2,      # < 0.1
    },
    'studyQuality': {
        'metaAnalysis': 1.0,
        'rct': 0.8,
        'longitudinal': 0.6,
        'crossSectional': 0.4,
        'caseStudy': 0.2,
    },
    'replication': {
        'highlyConsistent': 1.0,
        'mostlyConsistent': 0.7,
        'mixed': 0.4,
        'inconsistent': 0.2,
    },
    'sampleSize': {
        'large': 1.0,          # > 1000 participants
        'medium': 0.7,         # 100 - 1000
        'small': 0.4,          # < 100
    },
}

RELIABILITY_WEIGHTS: Dict[str, float] = {
    'effectSize': 0.4,
    'studyQuality': 0.3,
    'replication': 0.15,
    'sampleSize': 0.15,
}

DEFAULT_DIMENSION_SCORE = 0.4
FALLBACK_SCORE = 0.5

SCORED_CATEGORIES = ('interventions', 'lifestyle_factors', 'risk_factors')


class ReliabilityScore(NamedTuple):
    value: float
    is_fallback: bool = False


def _round_score(value) -> float:
    return float(Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


def _label(entry: Any) -> Optional[str]:
    # Accepts "large" as well as {"assessment": "large", "reasoning": "..."}
    if isinstance(entry, Mapping):
        entry = entry.get('assessment')
    return entry if isinstance(entry, str) else None


def _score(assessment: Optional[Mapping[str, Any]]) -> ReliabilityScore:
    if assessment is None:
        return ReliabilityScore(FALLBACK_SCORE, is_fallback=True)

    # Exact weighted sum, so 0.385 rounds to 0.39
    total = Decimal(0)
    for dimension, weight in RELIABILITY_WEIGHTS.items():
        label = _label(assessment.get(dimension))
        dimension_score = RELIABILITY_CRITERIA[dimension].get(label, DEFAULT_DIMENSION_SCORE)
        total += Decimal(str(dimension_score)) * Decimal(str(weight))
    return ReliabilityScore(_round_score(min(max(total, Decimal(0)), Decimal(1))))


def compute_reliability_score(assessment: Optional[Mapping[str, Any]]) -> float:
    """
    Weighted reliability score of an evidence assessment

    Missing or unrecognized labels count as 0.4; a missing assessment yields
    the 0.5 fallback.

    Args:
        assessment: Labels per dimension, flat or as returned by the model

    Returns:
        float: Score in [0, 1], rounded to 2 decimal places
    """
    return _score(assessment).value


def summarize_scores(results: Sequence[Mapping[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Average, highest and lowest score per category"""
    by_category: Dict[str, List[Mapping[str, Any]]] = {}
    for result in results:
        by_category.setdefault(result['category'], []).append(result)

    summary = {}
    for category, items in by_category.items():
        ranked = sorted(items, key=lambda r: r['reliability_score'], reverse=True)
        summary[category] = {
            'count': len(items),
            'average': _round_score(sum(r['reliability_score'] for r in items) / len(items)),
            'highest': (ranked[0]['title'], ranked[0]['reliability_score']),
            'lowest': (ranked[-1]['title'], ranked[-1]['reliability_score']),
        }
    return summary


class ReliabilityScorer:
    """Grades evidence summaries with the LLM and stores the resulting scores"""

    def __init__(self, settings: Settings, client: Optional[OpenAI] = None):
        self.settings = settings
        self.model = settings.model
        self.client = client or OpenAI(api_key=settings.require_openai())

    def assess_evidence(self, title: str, evidence_summary: str) -> Optional[Dict[str, Any]]:
        """
        Ask the model for a structured assessment of an evidence summary

        Returns:
            The assessment dict, or None if the call or parsing failed
        """
        prompt = EVIDENCE_ASSESSMENT_PROMPT.format(title=title, evidence_summary=evidence_summary)
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": EVIDENCE_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.1,
                response_format={"type": "json_object"},
            )
            assessment = json.loads(response.choices[0].message.content)
        except json.JSONDecodeError as e:
            logger.error(f"Could not parse evidence assessment for '{title}': {e}")
            return None
        except Exception as e:
            logger.error(f"Evidence assessment failed for '{title}': {e}")
            return None

        if not isinstance(assessment, dict):
            logger.error(f"Evidence assessment for '{title}' is not a JSON object")
            return None
        return assessment

    def score_article(self, article: Mapping[str, Any]) -> float:
        """Score a stored (nested) or flat article from its evidence summary"""
        blocks = article.get('content_blocks') or {}
        evidence_summary = blocks.get('evidence_summary') or article.get('evidence_summary')
        if not evidence_summary:
            return FALLBACK_SCORE
        return compute_reliability_score(self.assess_evidence(article.get('title', ''), evidence_summary))

    def update_reliability_scores(
        self,
        db: ArticleDatabase,
        categories: Sequence[str] = SCORED_CATEGORIES,
        delay: float = 1.0,
        report_path: Optional[str] = None,
    ) -> Tuple[BatchResult, Dict[str, Dict[str, Any]]]:
        """
        Recompute and store reliability scores of stored articles

        Articles without an evidence summary are skipped. A failed assessment
        leaves the stored score untouched.

        Args:
            db: Article storage
            categories: Categories to rescore
            delay: Seconds to wait between model calls
            report_path: Optional JSON file receiving the per-article results

        Returns:
            Tuple of the batch result and the per-category summary
        """
        articles = db.select_by_categories(categories)
        logger.info(f"Found {len(articles)} articles to analyze")

        batch = BatchResult(operation='update_reliability_score')
        results = []
        for index, article in enumerate(articles):
            slug = article.get('slug', '<no slug>')
            blocks = article.get('content_blocks') or {}
            evidence_summary = blocks.get('evidence_summary')
            if not evidence_summary:
                batch.record_skip(slug, 'no evidence_summary')
                continue

            if index:
                pause(delay)

            assessment = self.assess_evidence(article.get('title', slug), evidence_summary)
            score = _score(assessment)
            if score.is_fallback:
                batch.record_failure(slug, 'evidence assessment failed')
                continue

            try:
                db.update_content_block(slug, 'reliability_score', score.value)
            except DatabaseError as e:
                batch.record_failure(slug, e)
                continue

            logger.info(f"Updated reliability score for {slug}: {score.value}")
            batch.record_success(slug)
            results.append({
                'title': article.get('title', slug),
                'slug': slug,
                'category': article.get('category'),
                'reliability_score': score.value,
                'analysis': assessment,
            })

        if report_path:
            with open(report_path, 'w', encoding='utf-8') as f:
                json.dump(results, f, indent=2, ensure_ascii=False)
            logger.info(f"Detailed results saved to {report_path}")

        return batch, summarize_scores(results)
