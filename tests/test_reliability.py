# tests/test_reliability.py

import itertools
import json
import pytest
from unittest.mock import MagicMock, patch
from src.content_gen.reliability import (
    RELIABILITY_CRITERIA,
    ReliabilityScorer,
    compute_reliability_score,
    summarize_scores,
)
from src.content_gen.exceptions import DatabaseError


def _chat_response(content):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


BEST = {
    'effectSize': 'large',
    'studyQuality': 'metaAnalysis',
    'replication': 'highlyConsistent',
    'sampleSize': 'large',
}


def test_best_evidence_scores_one():
    assert compute_reliability_score(BEST) == 1.0


def test_low_tier_scores_point_four():
    assessment = {
        'effectSize': 'small',
        'studyQuality': 'crossSectional',
        'replication': 'mixed',
        'sampleSize': 'small',
    }
    assert compute_reliability_score(assessment) == 0.4


def test_missing_dimension_counts_as_point_four():
    assessment = dict(BEST)
    del assessment['effectSize']
    # 0.4 * 0.4 + 1.0 * 0.6
    assert compute_reliability_score(assessment) == 0.76


def test_unknown_label_counts_as_point_four():
    assessment = dict(BEST, studyQuality='anecdote')
    # 1.0 * 0.7 + 0.4 * 0.3
    assert compute_reliability_score(assessment) == 0.82


def test_nested_model_shape():
    assessment = {
        'effectSize': {'assessment': 'medium', 'reasoning': 'd = 0.4'},
        'studyQuality': {'assessment': 'rct', 'reasoning': '...'},
        'replication': {'assessment': 'mostlyConsistent', 'reasoning': '...'},
        'sampleSize': {'assessment': 'medium', 'reasoning': '...'},
        'confidence': 'medium',
    }
    # 0.7*0.4 + 0.8*0.3 + 0.7*0.15 + 0.7*0.15
    assert compute_reliability_score(assessment) == 0.73


def test_missing_assessment_falls_back():
    assert compute_reliability_score(None) == 0.5
    assert compute_reliability_score({}) == 0.4


def test_rounding_is_half_up():
    # 0.2*0.4 + 0.4*0.3 + 0.7*0.15 + 0.7*0.15 = 0.41
    assessment = {'effectSize': 'verySmall', 'studyQuality': 'crossSectional',
                  'replication': 'mostlyConsistent', 'sampleSize': 'medium'}
    assert compute_reliability_score(assessment) == 0.41
    # 0.4*0.4 + 0.2*0.3 + 0.7*0.15 + 0.4*0.15 = 0.385 -> 0.39
    assessment = {'effectSize': 'small', 'studyQuality': 'caseStudy',
                  'replication': 'mostlyConsistent', 'sampleSize': 'small'}
    assert compute_reliability_score(assessment) == 0.39


def test_every_label_combination_is_in_range():
    dimensions = list(RELIABILITY_CRITERIA)
    for labels in itertools.product(*(list(RELIABILITY_CRITERIA[d]) for d in dimensions)):
        score = compute_reliability_score(dict(zip(dimensions, labels)))
        assert 0.0 <= score <= 1.0
        assert round(score, 2) == score


def test_summarize_scores():
    summary = summarize_scores([
        {'title': 'A', 'category': 'interventions', 'reliability_score': 0.9},
        {'title': 'B', 'category': 'interventions', 'reliability_score': 0.5},
        {'title': 'C', 'category': 'risk_factors', 'reliability_score': 0.6},
    ])
    assert summary['interventions']['average'] == 0.7
    assert summary['interventions']['highest'] == ('A', 0.9)
    assert summary['interventions']['lowest'] == ('B', 0.5)
    assert summary['risk_factors']['count'] == 1


@pytest.fixture
def scorer(settings):
    client = MagicMock()
    return ReliabilityScorer(settings, client=client)


def test_assess_evidence(scorer):
    scorer.client.chat.completions.create.return_value = _chat_response(json.dumps(BEST))
    assert scorer.assess_evidence('Exercise', 'Many RCTs.') == BEST

    kwargs = scorer.client.chat.completions.create.call_args.kwargs
    assert kwargs['temperature'] == 0.1
    assert kwargs['response_format'] == {'type': 'json_object'}
    assert 'Many RCTs.' in kwargs['messages'][1]['content']


def test_assess_evidence_returns_none_on_failure(scorer):
    scorer.client.chat.completions.create.return_value = _chat_response('not json')
    assert scorer.assess_evidence('Exercise', 'Many RCTs.') is None

    scorer.client.chat.completions.create.side_effect = RuntimeError('timeout')
    assert scorer.assess_evidence('Exercise', 'Many RCTs.') is None


def test_score_article(scorer):
    scorer.client.chat.completions.create.return_value = _chat_response(json.dumps(BEST))
    article = {'title': 'Exercise', 'content_blocks': {'evidence_summary': 'Many RCTs.'}}
    assert scorer.score_article(article) == 1.0
    assert scorer.score_article({'title': 'Empty', 'content_blocks': {}}) == 0.5


@patch('src.content_gen.reliability.pause')
def test_update_reliability_scores(mock_pause, scorer, tmp_path):
    db = MagicMock()
    db.select_by_categories.return_value = [
        {'slug': 'exercise', 'title': 'Exercise', 'category': 'interventions',
         'content_blocks': {'evidence_summary': 'Meta-analyses.'}},
        {'slug': 'no-evidence', 'title': 'No Evidence', 'category': 'interventions',
         'content_blocks': {}},
        {'slug': 'broken', 'title': 'Broken', 'category': 'risk_factors',
         'content_blocks': {'evidence_summary': 'Some studies.'}},
        {'slug': 'locked', 'title': 'Locked', 'category': 'lifestyle_factors',
         'content_blocks': {'evidence_summary': 'Some studies.'}},
    ]
    scorer.client.chat.completions.create.side_effect = [
        _chat_response(json.dumps(BEST)),
        _chat_response('oops'),
        _chat_response(json.dumps(BEST)),
    ]
    db.update_content_block.side_effect = [1, DatabaseError('write failed')]
    report = tmp_path / 'report.json'

    batch, summary = scorer.update_reliability_scores(db, delay=0, report_path=str(report))

    db.select_by_categories.assert_called_once_with(('interventions', 'lifestyle_factors', 'risk_factors'))
    db.update_content_block.assert_any_call('exercise', 'reliability_score', 1.0)
    assert batch.succeeded == ['exercise']
    assert batch.skipped == ['no-evidence']
    assert [f.item for f in batch.failed] == ['broken', 'locked']
    assert summary == {'interventions': {
        'count': 1, 'average': 1.0, 'highest': ('Exercise', 1.0), 'lowest': ('Exercise', 1.0),
    }}
    saved = json.loads(report.read_text())
    assert saved[0]['slug'] == 'exercise'
    assert saved[0]['reliability_score'] == 1.0
