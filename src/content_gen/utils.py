import time
import logging
from typing import Iterator, List, Sequence, TypeVar

import tiktoken

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Input limit shared by the OpenAI embedding models
EMBEDDING_MAX_TOKENS = 8191


def batched(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """
    Split a sequence into consecutive batches

    Args:
        items: Items to split
        size: Maximum batch size

    Returns:
        Iterator over lists of at most ``size`` items
    """
    if size < 1:
        raise ValueError("Batch size must be at least 1")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def truncate_to_tokens(text: str, model: str, max_tokens: int = EMBEDDING_MAX_TOKENS) -> str:
    """
    Truncate text so that it fits in the model's token limit

    Args:
        text: Text to truncate
        model: Model name used to pick the encoding
        max_tokens: Maximum number of tokens to keep

    Returns:
        The original text if it fits, otherwise its first ``max_tokens`` tokens
    """
    if not text:
        return text
    try:
        encoding = tiktoken.encoding_for_model(model)
    except KeyError:
        encoding = tiktoken.get_encoding("cl100k_base")
    tokens = encoding.encode(text)
    if len(tokens) <= max_tokens:
        return text
    logger.warning(f"Truncating input from {len(tokens)} to {max_tokens} tokens")
    return encoding.decode(tokens[:max_tokens])


def pause(seconds: float) -> None:
    """Sleep between external calls to respect rate limits"""
    if seconds > 0:
        time.sleep(seconds)
