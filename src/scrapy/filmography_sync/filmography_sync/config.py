# filmography_sync/config.py
"""Run configuration, built once at process start and passed down explicitly."""
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .identifiers import IMDB_BASE_URL

DEFAULT_USER_AGENT = 'Mozilla/5.0 (compatible; IMDbProcessor/1.0; +https://yourdomain.com/)'


def _get_required_env(environ, name):
    value = environ.get(name)
    if value is None or value == '':
        raise ConfigurationError(f"Missing required environment variable: {name}")
    return value


def _get_int_env(environ, name, default):
    value = environ.get(name)
    if value is None or value == '':
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"Environment variable {name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class DatabaseConfig:
    host: str
    name: str
    user: str
    password: str = ''
    port: int = 5432
    connect_timeout: int = 30

    def connect_kwargs(self):
        """Keyword arguments for psycopg2.connect."""
        return {
            'host': self.host,
            'port': self.port,
            'dbname': self.name,
            'user': self.user,
            'password': self.password,
            'connect_timeout': self.connect_timeout,
        }


@dataclass(frozen=True)
class TableConfig:
    source_table: str = 'talent_imdb_resume'
    source_id_column: str = 'talent_id'
    source_url_column: str = 'imdb_link'
    output_table: str = 'imdb_metadata'
    output_id_column: str = 'talent_id'


@dataclass(frozen=True)
class SyncConfig:
    database: DatabaseConfig
    tables: TableConfig = field(default_factory=TableConfig)
    user_agent: str = DEFAULT_USER_AGENT
    imdb_base_url: str = IMDB_BASE_URL
    download_timeout: int = 30
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls, environ=None, env_file=None):
        """
        Read the configuration from the process environment.

        A ``.env`` file (or ``env_file``) is loaded first; variables already set
        in the environment take precedence over it.
        """
        if environ is None:
            load_dotenv(dotenv_path=env_file)
            environ = os.environ

        database = DatabaseConfig(
            host=_get_required_env(environ, 'DB_HOST'),
            name=_get_required_env(environ, 'DB_NAME'),
            user=_get_required_env(environ, 'DB_USER'),
            password=environ.get('DB_PASSWORD', ''),
            port=_get_int_env(environ, 'DB_PORT', 5432),
            connect_timeout=_get_int_env(environ, 'DB_CONNECT_TIMEOUT', 30),
        )
        tables = TableConfig(
            source_table=environ.get('SOURCE_TABLE') or TableConfig.source_table,
            output_table=environ.get('OUTPUT_TABLE') or TableConfig.output_table,
        )
        return cls(
            database=database,
            tables=tables,
            user_agent=environ.get('USER_AGENT') or DEFAULT_USER_AGENT,
            imdb_base_url=environ.get('IMDB_BASE_URL') or IMDB_BASE_URL,
            download_timeout=_get_int_env(environ, 'DOWNLOAD_TIMEOUT', 30),
            log_level=(environ.get('LOG_LEVEL') or 'INFO').upper(),
        )

    def scrapy_settings(self):
        """Per-run overrides layered on top of settings.py."""
        return {
            'USER_AGENT': self.user_agent,
            'IMDB_BASE_URL': self.imdb_base_url,
            'DOWNLOAD_TIMEOUT': self.download_timeout,
            'LOG_LEVEL': self.log_level,
        }
