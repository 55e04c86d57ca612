import itertools
import re
import unicodedata

_dashes_re = re.compile(r"[-]+")


def slugify(text: str, maxlen: int = 200) -> str:
    if not text:
        return ""
    # Normalize unicode, remove accents
    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower()
    # Keep alnum, spaces and hyphens
    text = re.sub(r"[^a-z0-9\s-]", "", text)
    text = re.sub(r"\s+", "-", text).strip("-")
    text = _dashes_re.sub("-", text)
    return text[:maxlen].strip("-")


def _with_suffix(base: str, n: int, maxlen: int) -> str:
    suffix = f"-{n}"
    return base[: maxlen - len(suffix)].rstrip("-") + suffix


def generate_unique_slug(session, model, value, column="slug", maxlen=200,
                         fallback="event"):
    """
    Build a slug for ``value`` that is not yet used in ``model.column``.

    One prefix query loads the taken slugs; the first free candidate among
    ``base``, ``base-1``, ``base-2``... is returned. The column must still
    carry a unique constraint: two writers can compute the same candidate,
    and the caller retries on IntegrityError.
    """
    base = slugify(value, maxlen=maxlen) or fallback
    col = getattr(model, column)

    rows = session.query(col).filter(col.like(f"{base}%")).all()
    taken = {row[0] for row in rows if row and isinstance(row[0], str)}

    if base not in taken:
        return base

    for n in itertools.count(1):
        candidate = _with_suffix(base, n, maxlen)
        if candidate not in taken:
            return candidate
