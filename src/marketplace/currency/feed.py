"""Exchange-rate feed — the free fawazahmed0 currency API.

Rates are published per base currency at `/currencies/<base>.json` as
`{"date": ..., "aed": {"usd": 0.2723, ...}}`. The jsDelivr CDN is tried
first and the pages.dev mirror second.
"""

import os

import httpx
import structlog

logger = structlog.get_logger(__name__)

PRIMARY_URL = "https://cdn.jsdelivr.net/npm/@fawazahmed0/currency-api@latest/v1"
FALLBACK_URL = "https://latest.currency-api.pages.dev/v1"
TIMEOUT_SECONDS = 10.0


class CurrencyFeed:
    def __init__(self, base_urls=None, http_client: httpx.Client | None = None) -> None:
        self.base_urls = [url.rstrip("/") for url in (base_urls or (PRIMARY_URL, FALLBACK_URL))]
        self.http = http_client or httpx.Client(timeout=TIMEOUT_SECONDS)

    @classmethod
    def from_env(cls) -> "CurrencyFeed":
        urls = os.environ.get("CURRENCY_FEED_URLS")
        return cls(base_urls=urls.split(",") if urls else None)

    def fetch_rates(self, base: str = "aed") -> dict[str, float] | None:
        """Lower-cased currency code → units per one `base`, or None when every source failed."""
        base = base.lower()
        for base_url in self.base_urls:
            url = f"{base_url}/currencies/{base}.json"
            try:
                response = self.http.get(url, headers={"Accept": "application/json"})
                response.raise_for_status()
                rates = response.json().get(base)
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning("Currency feed request failed", url=url, error=str(exc))
                continue
            if isinstance(rates, dict) and rates:
                return rates
            logger.warning("Currency feed returned no rates", url=url)

        logger.error("All currency feed sources failed")
        return None


_feed_instance: CurrencyFeed | None = None


def get_feed() -> CurrencyFeed:
    global _feed_instance
    if _feed_instance is None:
        _feed_instance = CurrencyFeed.from_env()
    return _feed_instance


def set_feed(feed: CurrencyFeed) -> None:
    """Override the active feed (useful for tests)."""
    global _feed_instance
    _feed_instance = feed


def reset_feed() -> None:
    global _feed_instance
    _feed_instance = None
