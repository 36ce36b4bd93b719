from .base import JobSource, parse_raw_jobs
from .apify import ApifyLinkedInSource
from .fixture import FixtureSource

from jobsift.config import Settings
from jobsift.errors import ConfigError
from jobsift.log import get_logger
from jobsift.models import ScrapeConfig

log = get_logger(__name__)

__all__ = [
    "JobSource", "ApifyLinkedInSource", "FixtureSource",
    "parse_raw_jobs", "get_source", "default_scrape_config",
]


def default_scrape_config(settings: Settings, max_jobs: int) -> ScrapeConfig:
    """The fixed LinkedIn search, sized by the run's job budget."""
    return ScrapeConfig(
        count=max_jobs,
        country_code=settings.country_code,
        scrape_company=settings.scrape_company,
        urls=list(settings.search_urls),
    )


def get_source(settings: Settings, fixture: bool = False) -> JobSource:
    if fixture:
        log.info("Registered source: fixture (offline sample jobs)")
        return FixtureSource()

    if not settings.apify_token:
        raise ConfigError("APIFY_API_KEY is not set")
    log.info("Registered source: LinkedIn (Apify actor %s)", settings.apify_actor_id)
    return ApifyLinkedInSource(
        settings.apify_token,
        settings.apify_actor_id,
        request_timeout=settings.request_timeout,
        run_timeout=settings.scrape_timeout,
    )
