from fastapi import Path

from newsdesk.errors import ValidationError


def parse_article_id(raw: str | int) -> int:
    """
    Normalise an article identifier to its canonical integer form.

    ``7``, ``"7"``, ``"007"`` and ``" 007 "`` all name the same article.
    Anything that is not a non-negative decimal number is rejected.
    """
    text = str(raw).strip()
    if not text.isdigit():
        raise ValidationError("Invalid article id")
    return int(text)


def canonical_article_id(
    article_id: str = Path(description="Article id, padded (007) or not (7)."),
) -> int:
    """
    FastAPI dependency for the ``{article_id}`` path segment.

    Every article-scoped route resolves its identifier through here, so the
    padded and unpadded forms are normalised in exactly one place.
    """
    return parse_article_id(article_id)
