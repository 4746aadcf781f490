# filmography_sync/pipelines.py
from scrapy.exceptions import DropItem

from .exceptions import PersistenceFailure
from .items import CreditItem


class CreditStorePipeline:
    """Writes each CreditItem as one row, in the order the spider yields them."""

    @classmethod
    def from_crawler(cls, crawler):
        return cls(crawler)

    def __init__(self, crawler):
        self.crawler = crawler
        self.stats = crawler.stats
        self.store = None
        # entities with a failed insert during this run
        self.failed_entities = set()

    def open_spider(self):
        """The store is opened by the caller and handed over through the spider."""
        self.store = self.crawler.spider.store

    def close_spider(self):
        # the connection outlives the crawl; the caller closes it
        self.store = None

    # ----------------------------------------------------------------
    # Item processing
    # ----------------------------------------------------------------

    def process_item(self, item):
        if not isinstance(item, CreditItem):
            return item

        entity_id = item['entity_id']
        if entity_id in self.failed_entities:
            raise DropItem(f"Skipping credit {item.get('title')!r}: entity {entity_id} already failed")

        try:
            self.store.insert_credit(item)
        except PersistenceFailure as e:
            self.failed_entities.add(entity_id)
            self.stats.inc_value('filmography/failed')
            self.crawler.spider.logger.error(f"DB Error persisting credits for entity {entity_id}: {e}")
            raise DropItem(f"Insert failed for entity {entity_id}")

        self.stats.inc_value('filmography/persisted')
        return item
