import re
import uuid

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    slug = _NON_SLUG.sub("-", (text or "").lower()).strip("-")
    return slug or uuid.uuid4().hex[:8]


def unique_slug(base: str, exists) -> str:
    """Append -2, -3, ... until `exists(slug)` is False."""
    slug = slugify(base)
    candidate, n = slug, 2
    while exists(candidate):
        candidate = f"{slug}-{n}"
        n += 1
    return candidate
