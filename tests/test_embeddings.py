# tests/test_embeddings.py

import json
import pytest
from unittest.mock import MagicMock, patch
from src.content_gen.embeddings import EmbeddingService
from src.content_gen.exceptions import EmbeddingError


def _embedding_response(vector):
    response = MagicMock()
    response.data = [MagicMock(embedding=vector)]
    return response


@pytest.fixture(autouse=True)
def no_tokenizer():
    """Skip loading tiktoken encodings"""
    with patch('src.content_gen.embeddings.truncate_to_tokens', side_effect=lambda text, model: text) as mock:
        yield mock


@pytest.fixture
def service(settings):
    client = MagicMock()
    client.embeddings.create.return_value = _embedding_response([0.1, 0.2, 0.3])
    return EmbeddingService(settings, db=MagicMock(), client=client)


def test_generate_embedding(service):
    assert service.generate_embedding('sleep and anxiety') == [0.1, 0.2, 0.3]
    service.client.embeddings.create.assert_called_once_with(
        model='text-embedding-3-small', input='sleep and anxiety'
    )


def test_generate_embedding_truncates_input(no_tokenizer, service):
    mock_truncate = no_tokenizer
    mock_truncate.side_effect = None
    mock_truncate.return_value = 'short'
    service.generate_embedding('very long text')
    mock_truncate.assert_called_once_with('very long text', 'text-embedding-3-small')
    assert service.client.embeddings.create.call_args.kwargs['input'] == 'short'


def test_generate_embedding_errors(service):
    with pytest.raises(EmbeddingError):
        service.generate_embedding('   ')
    service.client.embeddings.create.side_effect = RuntimeError('quota')
    with pytest.raises(EmbeddingError):
        service.generate_embedding('text')


def test_embeddings_for_keeps_existing(service):
    article = {
        'slug': 'sleep',
        'title': 'Sleep',
        'summary': 'Sleep is rest.',
        'content_blocks': {'overview': 'O'},
        'title_embedding': [9.0],
    }
    embeddings = service.embeddings_for(article)

    assert embeddings['title_embedding'] == [9.0]
    inputs = [c.kwargs['input'] for c in service.client.embeddings.create.call_args_list]
    assert inputs == [json.dumps({'overview': 'O'}), 'Sleep is rest.']


def test_embeddings_for_without_summary(service):
    embeddings = service.embeddings_for({'slug': 's', 'title': 'T', 'content_blocks': {}})
    assert embeddings['summary_embedding'] is None


def test_update_article_embeddings(service):
    service.update_article_embeddings({'slug': 'sleep', 'title': 'Sleep', 'summary': 'S'})
    slug, fields = service.db.update.call_args.args
    assert slug == 'sleep'
    assert set(fields) == {'title_embedding', 'content_embedding', 'summary_embedding'}


@patch('src.content_gen.embeddings.pause')
def test_backfill_in_batches(mock_pause, service):
    articles = [{'slug': f'a{i}', 'title': f'A{i}', 'summary': 'S'} for i in range(12)]
    service.db.articles_missing_embeddings.return_value = articles

    with patch.object(service, 'update_article_embeddings') as mock_update:
        result = service.backfill_embeddings()

    assert mock_update.call_count == 12
    assert sorted(result.succeeded) == sorted(a['slug'] for a in articles)
    # three batches of at most 5, pause between them only
    assert mock_pause.call_count == 2
    mock_pause.assert_called_with(1.0)


@patch('src.content_gen.embeddings.pause')
def test_backfill_continues_past_failures(mock_pause, service):
    service.db.articles_missing_embeddings.return_value = [
        {'slug': 'ok', 'title': 'OK', 'summary': 'S'},
        {'slug': 'bad', 'title': 'Bad', 'summary': 'S'},
        {'slug': 'also-ok', 'title': 'Also OK', 'summary': 'S'},
    ]

    def update(article):
        if article['slug'] == 'bad':
            raise EmbeddingError('quota')
        return {}

    with patch.object(service, 'update_article_embeddings', side_effect=update):
        result = service.backfill_embeddings()

    assert sorted(result.succeeded) == ['also-ok', 'ok']
    assert [f.item for f in result.failed] == ['bad']
    mock_pause.assert_not_called()


@patch('src.content_gen.embeddings.pause')
def test_backfill_continues_past_unexpected_errors(mock_pause, service):
    service.db.articles_missing_embeddings.return_value = [
        {'slug': f'a{i}', 'title': f'A{i}', 'summary': 'S'} for i in range(7)
    ]

    def update(article):
        if article['slug'] == 'a1':
            raise ValueError('No fields to update')
        if article['slug'] == 'a5':
            raise TypeError('bad content_blocks')
        return {}

    with patch.object(service, 'update_article_embeddings', side_effect=update):
        result = service.backfill_embeddings()

    assert sorted(f.item for f in result.failed) == ['a1', 'a5']
    assert sorted(result.succeeded) == ['a0', 'a2', 'a3', 'a4', 'a6']
    mock_pause.assert_called_once_with(1.0)


def test_search_articles(service):
    service.db.vector_search.return_value = [{'slug': 'sleep', 'similarity': 0.91}]

    results = service.search_articles('racing thoughts at night', similarity_threshold=0.75, match_count=2)

    assert results == [{'slug': 'sleep', 'similarity': 0.91}]
    service.db.vector_search.assert_called_once_with(
        [0.1, 0.2, 0.3], similarity_threshold=0.75, match_count=2
    )
