# src/content_gen/cli.py
"""
Command-line interface for article generation, upload and maintenance jobs

Usage: python -m src.content_gen.cli <command> [options]
"""
from typing import List, Optional, Sequence
import argparse
import logging
import sys

from .article_file import append_article, clear_articles, load_articles, save_articles
from .config import DEFAULT_OUTPUT_FILE, Settings
from .database.db import ArticleDatabase
from .database.db_connection import DatabaseConnection
from .database.models import BatchResult
from .diagnostics import SetupVerifier
from .embeddings import EmbeddingService
from .exceptions import ConfigurationError, ContentGenError, GenerationError
from .generator import ArticleGenerator
from .logging_config import setup_logging
from .migration import migrate_articles
from .prompts import RISK_FACTOR_TOPICS, SECTION_PROMPTS
from .reliability import ReliabilityScorer
from .schema import CATEGORIES
from .uploader import bulk_upload, validate_articles

logger = logging.getLogger(__name__)


def _split_topics(value: str) -> List[str]:
    return [topic.strip() for topic in value.split(',') if topic.strip()]


def print_batch_summary(batch: BatchResult) -> None:
    print(f"\n{batch.operation} summary:")
    print(f"✓ Succeeded: {len(batch.succeeded)}")
    if batch.skipped:
        print(f"- Skipped: {len(batch.skipped)}")
    if batch.failed:
        print(f"✗ Failed: {len(batch.failed)}")
        for failure in batch.failed:
            print(f"  - {failure.item}: {failure.error}")


def _open_database(settings: Settings):
    connection = DatabaseConnection(settings)
    return connection, ArticleDatabase.from_connection(connection)


def _save_generated(path: str, articles: Sequence[dict], clear: bool) -> None:
    existing = [] if clear else load_articles(path)
    save_articles(path, existing + list(articles))


def cmd_generate(args, settings: Settings) -> int:
    generator = ArticleGenerator(settings, model=args.model)
    try:
        article = generator.generate_article(args.topic, args.category)
    except GenerationError as e:
        print(f"✗ {e}")
        for issue in e.issues:
            print(f"  - {issue}")
        return 1

    if not args.no_clear:
        clear_articles(args.output)
    total = append_article(args.output, article)
    print(f"✓ Generated '{article['title']}' ({article['category']})")
    print(f"Saved to: {args.output} ({total} articles)")
    return 0


def _generate_topics(args, settings: Settings, topics: List[str], category: str) -> int:
    generator = ArticleGenerator(settings, model=args.model)
    print(f"Generating {len(topics)} {category} articles...")
    articles, batch = generator.generate_many(topics, category, delay=args.delay)
    _save_generated(args.output, articles, clear=not args.no_clear)
    print_batch_summary(batch)
    print(f"Saved {len(articles)} articles to {args.output}")
    return 0 if articles else 1


def cmd_generate_multiple(args, settings: Settings) -> int:
    topics = _split_topics(args.topics)
    if not topics:
        print("No topics specified.")
        return 1
    return _generate_topics(args, settings, topics, args.category)


def cmd_generate_risk_factors(args, settings: Settings) -> int:
    if args.all:
        topics = list(RISK_FACTOR_TOPICS)
    elif args.topics:
        topics = _split_topics(args.topics)
    else:
        topics = RISK_FACTOR_TOPICS[:max(args.number, 0)]
    if not topics:
        print("No topics specified. Use --topics, --number or --all.")
        return 1
    return _generate_topics(args, settings, topics, 'risk_factors')


def cmd_validate(args, settings: Settings) -> int:
    articles = load_articles(args.input)
    print(f"Validating {len(articles)} articles in {args.input}")
    valid_count, invalid = validate_articles(articles)
    for entry in invalid:
        print(f"\n✗ Article {entry.index + 1}: {entry.title}")
        for issue in entry.errors:
            print(f"  - {issue}")

    print("\nValidation Summary:")
    print(f"✓ Valid articles: {valid_count}")
    print(f"✗ Invalid articles: {len(invalid)}")
    print(f"Total articles: {len(articles)}")
    return 1 if invalid else 0


def cmd_upload(args, settings: Settings) -> int:
    articles = load_articles(args.input)
    connection, db = _open_database(settings)
    try:
        db.setup_indexes()
        batch = bulk_upload(articles, db)
    finally:
        connection.close()
    print_batch_summary(batch)
    return 1 if batch.failed else 0


def cmd_migrate(args, settings: Settings) -> int:
    connection, db = _open_database(settings)
    try:
        batch = migrate_articles(db)
    finally:
        connection.close()
    print_batch_summary(batch)
    return 1 if batch.failed else 0


def cmd_update_reliability(args, settings: Settings) -> int:
    scorer = ReliabilityScorer(settings)
    connection, db = _open_database(settings)
    try:
        batch, summary = scorer.update_reliability_scores(
            db, delay=args.delay, report_path=args.report
        )
    finally:
        connection.close()

    print_batch_summary(batch)
    for category, stats in summary.items():
        print(f"\n{category.upper()}:")
        print(f"  Average reliability score: {stats['average']:.2f}")
        print(f"  Highest: {stats['highest'][0]} ({stats['highest'][1]})")
        print(f"  Lowest: {stats['lowest'][0]} ({stats['lowest'][1]})")
    return 1 if batch.failed else 0


def cmd_backfill_embeddings(args, settings: Settings) -> int:
    connection, db = _open_database(settings)
    try:
        service = EmbeddingService(settings, db)
        batch = service.backfill_embeddings(batch_size=args.batch_size, delay=args.delay)
    finally:
        connection.close()
    print_batch_summary(batch)
    return 1 if batch.failed else 0


def cmd_search(args, settings: Settings) -> int:
    connection, db = _open_database(settings)
    try:
        service = EmbeddingService(settings, db)
        results = service.search_articles(args.query, args.threshold, args.count)
    finally:
        connection.close()

    if not results:
        print("No matching articles found.")
        return 0
    for i, result in enumerate(results, 1):
        print(f"{i}. {result.get('title')} [{result.get('category')}] "
              f"similarity={result.get('similarity', 0):.3f}")
        print(f"   {result.get('summary', '')}")
    return 0


def cmd_update_content(args, settings: Settings) -> int:
    articles = load_articles(args.input)
    print(f"Found {len(articles)} articles.")
    generator = ArticleGenerator(settings, model=args.model)
    updated, batch = generator.update_sections(articles, args.section, count=args.count, delay=args.delay)
    save_articles(args.input, updated)
    print_batch_summary(batch)
    return 1 if batch.failed else 0


def cmd_update_summaries(args, settings: Settings) -> int:
    generator = ArticleGenerator(settings, model=args.model)
    connection, db = _open_database(settings)
    try:
        batch = generator.update_stored_summaries(db, count=args.count, delay=args.delay)
    finally:
        connection.close()
    print_batch_summary(batch)
    return 1 if batch.failed else 0


def cmd_verify_setup(args, settings: Settings) -> int:
    connection, db = _open_database(settings)
    try:
        verifier = SetupVerifier(connection, db, EmbeddingService(settings, db))
        schema = verifier.describe_schema()
        steps = verifier.verify_setup()
    finally:
        connection.close()

    if schema:
        print(f"Article fields: {', '.join(schema['fields'])}")
        for name, present in schema['embedding_fields'].items():
            print(f"{'✓' if present else '✗'} {name}")
    for step, ok in steps.items():
        print(f"{'✓' if ok else '✗'} {step}")
    # An empty search result is expected while the vector index is building
    failed = [step for step in SetupVerifier.failed_steps(steps) if step != 'search']
    return 1 if failed else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='content-gen',
        description='Generate, validate and maintain mental health articles',
    )
    parser.add_argument('--log-level', default=None, help='Logging level (default: LOG_LEVEL or INFO)')
    parser.add_argument('--env-file', default=None, help='Path to a .env file')
    subparsers = parser.add_subparsers(dest='command', required=True)

    p = subparsers.add_parser('generate', help='Generate one article')
    p.add_argument('-t', '--topic', required=True, help='Article topic')
    p.add_argument('-c', '--category', required=True, choices=CATEGORIES)
    p.add_argument('-m', '--model', default=None, help='Chat model (default: OPENAI_MODEL)')
    p.add_argument('-o', '--output', default=DEFAULT_OUTPUT_FILE, help='Output file')
    p.add_argument('--no-clear', action='store_true', help='Append instead of replacing the output file')
    p.set_defaults(func=cmd_generate)

    p = subparsers.add_parser('generate-multiple', help='Generate one article per topic')
    p.add_argument('-t', '--topics', required=True, help='Comma separated topics')
    p.add_argument('-c', '--category', required=True, choices=CATEGORIES)
    p.add_argument('-m', '--model', default=None)
    p.add_argument('-o', '--output', default=DEFAULT_OUTPUT_FILE)
    p.add_argument('--no-clear', action='store_true')
    p.add_argument('--delay', type=float, default=5.0, help='Seconds between requests')
    p.set_defaults(func=cmd_generate_multiple)

    p = subparsers.add_parser('generate-risk-factors', help='Generate risk factor articles')
    group = p.add_mutually_exclusive_group()
    group.add_argument('-t', '--topics', help='Comma separated topics')
    group.add_argument('-n', '--number', type=int, default=10, help='Number of predefined topics')
    group.add_argument('--all', action='store_true', help='All predefined topics')
    p.add_argument('-m', '--model', default=None)
    p.add_argument('-o', '--output', default=DEFAULT_OUTPUT_FILE)
    p.add_argument('--no-clear', action='store_true')
    p.add_argument('--delay', type=float, default=5.0)
    p.set_defaults(func=cmd_generate_risk_factors)

    p = subparsers.add_parser('validate', help='Validate an articles file')
    p.add_argument('-i', '--input', default=DEFAULT_OUTPUT_FILE)
    p.set_defaults(func=cmd_validate)

    p = subparsers.add_parser('upload', help='Upload an articles file to the database')
    p.add_argument('-i', '--input', default=DEFAULT_OUTPUT_FILE)
    p.set_defaults(func=cmd_upload)

    p = subparsers.add_parser('migrate', help='Consolidate legacy fields of stored articles')
    p.set_defaults(func=cmd_migrate)

    p = subparsers.add_parser('update-reliability', help='Recompute reliability scores')
    p.add_argument('--report', default=None, help='JSON file for the detailed results')
    p.add_argument('--delay', type=float, default=1.0)
    p.set_defaults(func=cmd_update_reliability)

    p = subparsers.add_parser('backfill-embeddings', help='Generate missing embeddings')
    p.add_argument('--batch-size', type=int, default=5)
    p.add_argument('--delay', type=float, default=1.0)
    p.set_defaults(func=cmd_backfill_embeddings)

    p = subparsers.add_parser('search', help='Semantic article search')
    p.add_argument('-q', '--query', required=True)
    p.add_argument('--threshold', type=float, default=0.7)
    p.add_argument('--count', type=int, default=5)
    p.set_defaults(func=cmd_search)

    p = subparsers.add_parser('update-content', help='Regenerate one section of articles in a file')
    p.add_argument('-s', '--section', required=True, choices=sorted(SECTION_PROMPTS))
    p.add_argument('-c', '--count', type=int, default=10, help='Number of most recent articles')
    p.add_argument('-m', '--model', default=None)
    p.add_argument('-i', '--input', default=DEFAULT_OUTPUT_FILE)
    p.add_argument('--delay', type=float, default=1.0)
    p.set_defaults(func=cmd_update_content)

    p = subparsers.add_parser('update-summaries', help='Regenerate summaries of stored articles')
    p.add_argument('-c', '--count', type=int, default=10)
    p.add_argument('-m', '--model', default=None)
    p.add_argument('--delay', type=float, default=1.0)
    p.set_defaults(func=cmd_update_summaries)

    p = subparsers.add_parser('verify-setup', help='Check database, embeddings and search')
    p.set_defaults(func=cmd_verify_setup)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env(args.env_file)
    setup_logging(args.log_level or settings.log_level)

    try:
        return args.func(args, settings)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 2
    except ContentGenError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}")
        return 1
    except (OSError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
