# filmography_sync/items.py
from collections import namedtuple

import scrapy


# One row of the pending set: an entity with no output rows yet
WorkItem = namedtuple('WorkItem', ['entity_id', 'source_url'])


class CreditItem(scrapy.Item):
    # output table columns
    entity_id = scrapy.Field()
    title = scrapy.Field()
    title_url = scrapy.Field()
    start_year = scrapy.Field()
    end_year = scrapy.Field()          # None for single-year or ongoing credits
    episode_count = scrapy.Field()
    credit_type = scrapy.Field()
    role = scrapy.Field()
    production_stage = scrapy.Field()
