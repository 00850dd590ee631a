import logging

from .errors import SourceError

log = logging.getLogger(__name__)


def fetch_code(filename):
    """Return the whole source file as text."""
    log.info("Reading code from: %s", filename)
    try:
        with open(filename, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as exc:
        reason = getattr(exc, "strerror", None) or exc
        raise SourceError(f"cannot open {filename}: {reason}") from exc
