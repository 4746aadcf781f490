# filmography_sync/settings.py

# Scrapy settings for filmography_sync project
#
# Only the settings that matter for this job are listed here. Connection
# details, user agent, timeout and log level are environment specific and are
# applied per run from SyncConfig (see config.py). You can find more settings
# consulting the documentation:
# https://docs.scrapy.org/en/latest/topics/settings.html

BOT_NAME = 'filmography_sync'

SPIDER_MODULES = ['filmography_sync.spiders']
NEWSPIDER_MODULE = 'filmography_sync.spiders'


# ----------------------------------------------------
# 1. Crawler identity
# ----------------------------------------------------

# Replaced per run by SyncConfig.user_agent
USER_AGENT = 'Mozilla/5.0 (compatible; IMDbProcessor/1.0; +https://yourdomain.com/)'

# Profile pages are built as <IMDB_BASE_URL>/name/<id>/
IMDB_BASE_URL = 'https://www.imdb.com'

# Only the profile page itself is requested
ROBOTSTXT_OBEY = False


# ----------------------------------------------------
# 2. Sequential processing
# ----------------------------------------------------

# One entity at a time, in pending-set order
CONCURRENT_REQUESTS = 1
CONCURRENT_REQUESTS_PER_DOMAIN = 1
DOWNLOAD_DELAY = 0.5

SCHEDULER_DISK_QUEUE = 'scrapy.squeues.PickleFifoDiskQueue'
SCHEDULER_MEMORY_QUEUE = 'scrapy.squeues.FifoMemoryQueue'

AUTOTHROTTLE_ENABLED = False

DOWNLOAD_TIMEOUT = 30

# A failed entity is left pending for the next run
RETRY_ENABLED = False


# ----------------------------------------------------
# 3. Pipeline configuration (database storage)
# ----------------------------------------------------

ITEM_PIPELINES = {
    'filmography_sync.pipelines.CreditStorePipeline': 300,
}


# ----------------------------------------------------
# 4. Other
# ----------------------------------------------------

LOG_LEVEL = 'INFO'

LOG_INSTALL_ROOT_HANDLER = True

COOKIES_ENABLED = False

TELNETCONSOLE_ENABLED = False
