"""Bitcoin price feed client"""

import logging
import math
from typing import Tuple

import requests

logger = logging.getLogger('OABTray.feed')

API_ENDPOINTS = {
    'binance': {
        'url': 'https://api.binance.com/api/v3/ticker/24hr',
        'params': {'symbol': 'BTCUSDT'},
    },
    'coingecko': {
        'url': 'https://api.coingecko.com/api/v3/simple/price',
        'params': {'ids': 'bitcoin', 'vs_currencies': 'usd', 'include_24hr_change': 'true'},
    },
}


class PriceFeedError(Exception):
    """Any failure to obtain a usable price: network, status or payload"""


def to_finite_float(value) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"non-finite value: {value!r}")
    return number


class PriceFeed:
    """Fetches (price, 24h change percent) from a single provider"""

    def __init__(self, provider: str = 'binance', timeout: float = 10, session=None):
        if provider not in API_ENDPOINTS:
            raise ValueError(f"Unsupported price provider: {provider}")
        self.provider = provider
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_price(self) -> Tuple[float, float]:
        config = API_ENDPOINTS[self.provider]
        try:
            response = self.session.get(config['url'], params=config['params'], timeout=self.timeout)
        except requests.RequestException as e:
            raise PriceFeedError(f"network error: {e}") from e

        if response.status_code != 200:
            raise PriceFeedError(f"API error: status code {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise PriceFeedError(f"JSON decode error: {e}") from e

        if self.provider == 'binance':
            return self.parse_binance(data)
        return self.parse_coingecko(data)

    @staticmethod
    def parse_binance(data) -> Tuple[float, float]:
        try:
            price = to_finite_float(data['lastPrice'])
        except (KeyError, TypeError, ValueError) as e:
            raise PriceFeedError(f"price parse error: {e}") from e
        try:
            change_percent = to_finite_float(data['priceChangePercent'])
        except (KeyError, TypeError, ValueError) as e:
            raise PriceFeedError(f"change percent parse error: {e}") from e
        return price, change_percent

    @staticmethod
    def parse_coingecko(data) -> Tuple[float, float]:
        try:
            bitcoin = data['bitcoin']
            return to_finite_float(bitcoin['usd']), to_finite_float(bitcoin['usd_24h_change'])
        except (KeyError, TypeError, ValueError) as e:
            raise PriceFeedError(f"payload parse error: {e}") from e
