"""Content digests used to tell unchanged entries apart from edited ones."""

import hashlib

DIGEST_PREFIX = 'sha256:'


def compute_content_hash(content: str | bytes) -> str:
    """Digest of an entry's raw content, e.g. 'sha256:9f86d0...'.

    Only the content counts. Touching a file without editing it keeps its digest.
    """
    raw = content.encode('utf-8') if isinstance(content, str) else content
    return f'{DIGEST_PREFIX}{hashlib.sha256(raw).hexdigest()}'
