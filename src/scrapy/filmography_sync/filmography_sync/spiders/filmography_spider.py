# filmography_sync/spiders/filmography_spider.py
import scrapy
from scrapy.spidermiddlewares.httperror import HttpError
from twisted.internet.error import DNSLookupError, TCPTimedOutError, TimeoutError

from ..exceptions import IdentifierAbsent, TransportFailure
from ..identifiers import IMDB_BASE_URL, extract_identifier, profile_url
from ..items import CreditItem
from ..normalizer import normalize_document


class FilmographySpider(scrapy.Spider):
    name = "filmography"

    def __init__(self, work_items=None, store=None, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # pending set, in the order the source query returned it
        self.work_items = list(work_items or [])
        # shared CreditStore, used by CreditStorePipeline
        self.store = store

    async def start(self):
        for request in self.profile_requests():
            yield request

    def profile_requests(self):
        """One profile request per pending entity, in pending order."""
        base_url = self.settings.get('IMDB_BASE_URL') or IMDB_BASE_URL
        total = len(self.work_items)
        self.crawler.stats.set_value('filmography/pending', total)
        self.logger.info(f"Starting sync for {total} pending entities")

        for index, work_item in enumerate(self.work_items):
            identifier = extract_identifier(work_item.source_url)
            self.logger.info(f"Processing entity {work_item.entity_id}, identifier: {identifier}")
            if identifier is None:
                self._skip(work_item)
                continue

            # lower priority for later entities keeps the pending order
            yield scrapy.Request(
                url=profile_url(identifier, base_url),
                callback=self.parse_profile,
                errback=self.on_fetch_error,
                cb_kwargs={'work_item': work_item},
                priority=total - index,
                dont_filter=True,
            )

    def _skip(self, work_item):
        reason = IdentifierAbsent(f"No valid IMDb ID found in {work_item.source_url!r}")
        self.crawler.stats.inc_value('filmography/skipped')
        self.logger.warning(f"Skipping entity {work_item.entity_id}: {reason}")

    def parse_profile(self, response, work_item):
        """Normalize a fetched profile page and yield its credits in page order."""
        credits = normalize_document(response.text)
        self.logger.info(f"Found {len(credits)} credits for entity {work_item.entity_id}")
        if not credits:
            self.crawler.stats.inc_value('filmography/empty')

        for credit in credits:
            yield CreditItem(entity_id=work_item.entity_id, **credit)

    def on_fetch_error(self, failure):
        """Log a failed fetch; the entity stays pending for the next run."""
        work_item = failure.request.cb_kwargs['work_item']

        if failure.check(HttpError):
            response = failure.value.response
            message = f"Failed to fetch IMDb page: {response.status} {response.url}"
        elif failure.check(DNSLookupError):
            message = f"DNS lookup failed for {failure.request.url}"
        elif failure.check(TimeoutError, TCPTimedOutError):
            message = f"Request timed out for {failure.request.url}"
        else:
            message = f"{failure.type.__name__}: {failure.getErrorMessage()}"

        error = TransportFailure(work_item.entity_id, message)
        self.crawler.stats.inc_value('filmography/failed')
        self.logger.error(f"Error processing IMDb for entity {error.entity_id}: {error}")
