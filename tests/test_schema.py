# tests/test_schema.py

import pytest
from src.content_gen.schema import (
    BASE_REQUIRED_FIELDS,
    CATEGORIES,
    Category,
    required_fields_for,
    schema_for,
    validate_article,
)
from src.content_gen.normalizer import nest_content_blocks
from src.content_gen.exceptions import UnknownCategoryError

BASE = {
    'title', 'slug', 'summary', 'category', 'status', 'tags',
    'overview', 'future_directions', 'references_and_resources',
    'evidence_summary', 'practical_applications',
}

EXPECTED_EXTRA_FIELDS = {
    'mental_health': {'prevalence', 'causes_and_mechanisms', 'symptoms_and_impact', 'common_myths'},
    'neuroscience': {'definition', 'mechanisms', 'relevance', 'key_studies', 'common_misconceptions'},
    'psychology': {'definition', 'mechanisms', 'relevance', 'key_studies', 'common_misconceptions'},
    'brain_health': {'definition', 'mechanisms', 'relevance', 'key_studies', 'common_misconceptions'},
    'neurodiversity': {
        'neurodiversity_perspective', 'common_strengths_and_challenges',
        'prevalence_and_demographics', 'mechanisms_and_understanding',
        'common_misconceptions', 'lived_experience',
    },
    'interventions': {'how_it_works', 'common_myths', 'risks_and_limitations', 'reliability_score'},
    'lifestyle_factors': {'how_it_works', 'common_myths', 'risks_and_limitations', 'reliability_score'},
    'lab_testing': {'how_it_works', 'applications', 'strengths_and_limitations', 'risks_and_limitations'},
    'risk_factors': {
        'prevalence', 'mechanisms', 'modifiable_factors', 'protective_factors',
        'practical_takeaways', 'reliability_score',
    },
}


def test_base_fields():
    assert set(BASE_REQUIRED_FIELDS) == BASE


@pytest.mark.parametrize('category', sorted(EXPECTED_EXTRA_FIELDS))
def test_required_fields_per_category(category):
    assert set(required_fields_for(category)) == BASE | EXPECTED_EXTRA_FIELDS[category]


def test_every_category_has_a_schema():
    assert set(CATEGORIES) == set(EXPECTED_EXTRA_FIELDS)
    for category in Category:
        assert category.value in schema_for(category).categories


def test_shared_variants():
    assert schema_for('neuroscience') is schema_for('psychology')
    assert schema_for('psychology') is schema_for('brain_health')
    assert schema_for('interventions') is schema_for('lifestyle_factors')
    assert schema_for('risk_factors') is not schema_for('interventions')


@pytest.mark.parametrize('category', [None, '', 'astrology'])
def test_unknown_category(category):
    with pytest.raises(UnknownCategoryError):
        schema_for(category)
    article = {'title': 'X'}
    if category is not None:
        article['category'] = category
    with pytest.raises(UnknownCategoryError):
        validate_article(article)


@pytest.mark.parametrize('category', CATEGORIES)
def test_complete_article_is_valid(category, make_article):
    result = validate_article(make_article(category))
    assert result.is_valid, result.errors
    assert result.errors == []
    assert result.article['category'] == category


@pytest.mark.parametrize('category', CATEGORIES)
def test_nested_article_is_valid(category, make_article):
    result = validate_article(nest_content_blocks(make_article(category)))
    assert result.is_valid, result.errors


@pytest.mark.parametrize('category', CATEGORIES)
def test_missing_field_is_reported(category, make_article):
    for name in required_fields_for(category):
        if name == 'category':
            continue
        article = make_article(category)
        del article[name]
        result = validate_article(article)
        if name == 'status':
            # status falls back to draft
            assert result.is_valid
            assert result.article['status'] == 'draft'
            continue
        assert not result.is_valid
        assert any(issue.path == name for issue in result.errors), (name, result.errors)


def test_missing_content_block_path_on_nested_article(make_article):
    article = nest_content_blocks(make_article('lab_testing'))
    del article['content_blocks']['applications']
    del article['summary']
    result = validate_article(article)
    paths = [issue.path for issue in result.errors]
    assert 'content_blocks.applications' in paths
    assert 'summary' in paths


def test_empty_text_field_is_invalid(make_article):
    result = validate_article(make_article('mental_health', overview='   '))
    assert not result.is_valid
    assert [issue.path for issue in result.errors] == ['overview']


def test_text_field_must_be_a_string(make_article):
    result = validate_article(make_article('mental_health', prevalence=['a', 'b']))
    assert not result.is_valid
    assert result.errors[0].path == 'prevalence'


@pytest.mark.parametrize('score, valid', [(0.0, True), (1.0, True), (1, True), (1.5, False), (-0.1, False), ('0.8', False)])
def test_reliability_score_range(score, valid, make_article):
    result = validate_article(make_article('interventions', reliability_score=score))
    assert result.is_valid is valid


def test_invalid_slug(make_article):
    result = validate_article(make_article('psychology', slug='Not A Slug'))
    assert not result.is_valid
    assert result.errors[0].path == 'slug'


def test_invalid_status(make_article):
    result = validate_article(make_article('psychology', status='pending'))
    assert not result.is_valid
    assert result.errors[0].path == 'status'


def test_tags_must_be_strings(make_article):
    result = validate_article(make_article('psychology', tags=['ok', 3]))
    assert not result.is_valid
    assert result.errors[0].path.startswith('tags')


def test_faqs_are_optional_but_checked(make_article):
    ok = make_article('psychology', faqs=[{'question': 'Q?', 'answer': 'A.'}])
    assert validate_article(ok).is_valid
    bad = make_article('psychology', faqs=[{'question': 'Q?'}])
    result = validate_article(bad)
    assert not result.is_valid
    assert result.errors[0].path.startswith('faqs')


def test_unrecognized_fields_are_allowed(make_article):
    result = validate_article(make_article('mental_health', foo='bar'))
    assert result.is_valid
    assert result.article['foo'] == 'bar'


def test_content_blocks_must_be_a_mapping(make_article):
    article = make_article('mental_health')
    article['content_blocks'] = 'not a mapping'
    result = validate_article(article)
    assert not result.is_valid
    assert result.errors[0].path == 'content_blocks'


def test_describe_lists_required_fields():
    description = schema_for('risk_factors').describe()
    assert description['reliability_score'] == "number between 0 and 1"
    assert 'practical_takeaways' in description
    assert 'faqs' in description
