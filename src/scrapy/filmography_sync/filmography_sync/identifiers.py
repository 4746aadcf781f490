# filmography_sync/identifiers.py
import re

IMDB_BASE_URL = 'https://www.imdb.com'

# "/name/nm0000123/" -- the trailing slash is optional
NAME_ID_PATTERN = re.compile(r'/name/([a-z]{2}\d+)(?=/|$|[?#])')


def extract_identifier(url):
    """Return the name identifier embedded in a profile URL, or None."""
    if not url or not isinstance(url, str):
        return None
    match = NAME_ID_PATTERN.search(url)
    return match.group(1) if match else None


def profile_url(identifier, base_url=IMDB_BASE_URL):
    return f"{base_url.rstrip('/')}/name/{identifier}/"


def title_url(title_id):
    if not title_id:
        return ''
    return f"{IMDB_BASE_URL}/title/{title_id}/"
