# tests/test_article_file.py

import json
import pytest
from src.content_gen.article_file import append_article, clear_articles, load_articles, save_articles


def test_missing_file_is_empty(tmp_path):
    assert load_articles(tmp_path / 'articles-data.json') == []


def test_append_and_load(tmp_path):
    path = tmp_path / 'articles-data.json'
    clear_articles(path)
    assert append_article(path, {'title': 'A'}) == 1
    assert append_article(path, {'title': 'B'}) == 2
    assert [a['title'] for a in load_articles(path)] == ['A', 'B']


def test_save_uses_indented_json(tmp_path):
    path = tmp_path / 'out.json'
    save_articles(path, [{'title': 'Ångest'}])
    text = path.read_text(encoding='utf-8')
    assert text.startswith('[\n  {')
    assert 'Ångest' in text


def test_non_array_file_is_rejected(tmp_path):
    path = tmp_path / 'bad.json'
    path.write_text(json.dumps({'title': 'A'}))
    with pytest.raises(ValueError):
        load_articles(path)
