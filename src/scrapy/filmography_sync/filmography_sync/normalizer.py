# filmography_sync/normalizer.py
"""
Turns an IMDb profile page into flat credit records.

The page embeds its data as a Next.js ``__NEXT_DATA__`` JSON block. The layout
of that block is vendor controlled, so every lookup below tolerates a missing
link at any depth. Two page shapes are known:

* older pages only carry ``releasedPrimaryCredits`` and no episode or
  production fields;
* newer pages add ``unreleasedPrimaryCredits`` plus ``episodeCredits`` and
  ``productionStatus`` on each node.

Both go through the same code path; whatever is missing falls back to its
default.
"""
import json
import logging

from scrapy.selector import Selector

from .exceptions import MalformedDocument, SchemaDrift
from .identifiers import title_url

logger = logging.getLogger(__name__)

NEXT_DATA_SELECTOR = 'script#__NEXT_DATA__::text'

MAIN_COLUMN_PATH = ('props', 'pageProps', 'mainColumnData')
RELEASED_EDGES_PATH = MAIN_COLUMN_PATH + ('releasedPrimaryCredits', 0, 'credits', 'edges')
UNRELEASED_EDGES_PATH = MAIN_COLUMN_PATH + ('unreleasedPrimaryCredits', 0, 'credits', 'edges')

_MISSING = object()


def lookup(tree, path, default=None):
    """
    Walk ``tree`` along ``path`` (dict keys and list indexes).

    Returns ``default`` as soon as a link is missing, has the wrong container
    type, is out of range or is None.
    """
    node = tree
    for key in path:
        if isinstance(key, int):
            if not isinstance(node, list) or not -len(node) <= key < len(node):
                return default
            node = node[key]
        else:
            if not isinstance(node, dict):
                return default
            node = node.get(key, _MISSING)
            if node is _MISSING:
                return default
        if node is None:
            return default
    return node


def _first_text(tree, *paths, default=''):
    # first truthy value among the candidate paths
    for path in paths:
        value = lookup(tree, path)
        if value not in (None, ''):
            return value
    return default


# ----------------------------------------------------------------
# Payload location and decoding
# ----------------------------------------------------------------

def extract_payload(document):
    """Decode the __NEXT_DATA__ block, raising MalformedDocument if there is none."""
    if isinstance(document, bytes):
        document = document.decode('utf-8', errors='replace')
    if not document:
        raise MalformedDocument("Empty document")

    raw = Selector(text=document).css(NEXT_DATA_SELECTOR).get()
    if not raw or not raw.strip():
        raise MalformedDocument("__NEXT_DATA__ not found in HTML")

    try:
        payload = json.loads(raw)
    except ValueError as e:
        raise MalformedDocument(f"Failed to parse __NEXT_DATA__ JSON: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedDocument(
            f"__NEXT_DATA__ decoded to {type(payload).__name__}, expected an object")
    return payload


def credit_edges(payload):
    """Released edges followed by unreleased edges, each in page order."""
    released = lookup(payload, RELEASED_EDGES_PATH)
    unreleased = lookup(payload, UNRELEASED_EDGES_PATH)

    containers = [edges for edges in (released, unreleased) if isinstance(edges, list)]
    if not containers:
        raise SchemaDrift("No filmography data found in __NEXT_DATA__")

    edges = []
    for container in containers:
        edges.extend(container)
    return edges


# ----------------------------------------------------------------
# Field extraction
# ----------------------------------------------------------------

def normalize_edge(edge):
    """Map one credit edge to the output record fields (entity_id excluded)."""
    node = lookup(edge, ('node',), {})

    start_year = _first_text(
        node,
        ('episodeCredits', 'yearRange', 'year'),
        ('title', 'releaseYear', 'year'),
    )
    end_year = lookup(node, ('episodeCredits', 'yearRange', 'endYear'))

    try:
        episode_count = int(lookup(node, ('episodeCredits', 'total'), 0))
    except (TypeError, ValueError):
        episode_count = 0

    return {
        'title': str(lookup(node, ('title', 'titleText', 'text'), '')),
        'title_url': title_url(lookup(node, ('title', 'id'))),
        'start_year': str(start_year),
        'end_year': str(end_year) if end_year not in (None, '') else None,
        'episode_count': max(episode_count, 0),
        'credit_type': str(lookup(node, ('title', 'titleType', 'text'), '')),
        'role': str(_first_text(
            node,
            ('characters', 0, 'name'),
            ('category', 'text'),
        )),
        'production_stage': str(lookup(
            node, ('title', 'productionStatus', 'currentProductionStage', 'text'), '')),
    }


def normalize_document(document):
    """
    Return the credit records found in a profile page.

    A page without a usable data block, or whose block has no known credit
    container, yields an empty list. Neither case raises.
    """
    try:
        payload = extract_payload(document)
        edges = credit_edges(payload)
    except MalformedDocument as e:
        logger.error(f"Malformed document: {e}")
        return []
    except SchemaDrift as e:
        logger.warning(f"Schema drift: {e}")
        return []

    return [normalize_edge(edge) for edge in edges]
