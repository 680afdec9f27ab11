import re
from typing import Iterable, List

from configs.settings import Config

SNIPPET_MAX_LENGTH = Config.SNIPPET_MAX_LENGTH
FALLBACK_SNIPPET_LENGTH = Config.FALLBACK_SNIPPET_LENGTH
ELLIPSIS = "..."

SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


def split_sentences(text: str) -> List[str]:
    return [s.strip() for s in SENTENCE_BOUNDARY.split(text or "") if s.strip()]


def is_grounded(snippet, contract_text: str) -> bool:
    """
    True when the trimmed snippet occurs verbatim (case-sensitive) in the text.
    """
    if not isinstance(snippet, str):
        return False
    candidate = snippet.strip()
    return bool(candidate) and candidate in (contract_text or "")


def truncate_snippet(snippet: str, max_length: int = SNIPPET_MAX_LENGTH) -> str:
    if len(snippet) <= max_length:
        return snippet
    return snippet[: max_length - len(ELLIPSIS)] + ELLIPSIS


def fallback_snippet(contract_text: str, length: int = FALLBACK_SNIPPET_LENGTH) -> str:
    return (contract_text or "")[:length]


def infer_snippet(
    contract_text: str,
    triggers: Iterable[str],
    max_length: int = SNIPPET_MAX_LENGTH,
) -> str:
    """
    First sentence of the text containing any trigger phrase, else the
    fallback slice.

    Example:
        >>> infer_snippet("Hello. We may amend these terms.", ["amend"])
        'We may amend these terms.'
    """
    triggers = [t.lower() for t in triggers if t]
    for sentence in split_sentences(contract_text):
        lowered = sentence.lower()
        if any(t in lowered for t in triggers):
            return truncate_snippet(sentence, max_length)
    return fallback_snippet(contract_text)


def ground_snippet(
    snippet,
    contract_text: str,
    triggers: Iterable[str],
    max_length: int = SNIPPET_MAX_LENGTH,
) -> str:
    """
    Keep a verified snippet, otherwise re-derive one from the contract text.
    """
    if is_grounded(snippet, contract_text):
        return truncate_snippet(snippet.strip(), max_length)
    return infer_snippet(contract_text, triggers, max_length)
