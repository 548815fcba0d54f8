# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Market data context for yield forecasts.

The forecaster only needs a small market context (volatility, price, spread).
It comes from an injected provider, a zero-argument callable returning either
a MarketData or a plain mapping, or is derived synthetically from the
scenario volatility when no provider is available or the provider fails.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import requests

from .config import DEFAULT_MARKET_DATA_URL, ForecasterConfig
from .errors import DataSourceDegraded


# Bitstamp USD issuer on the XRP Ledger
DEFAULT_ISSUER = "rvYAfWj5gh67oV6fW32ZzP3Aw4Eubs59B"

DROPS_PER_XRP = 1_000_000


@dataclass
class MarketData:
    """Market context consumed by the sample generator.

    Attributes:
        base_volatility: Volatility for sampled movements. None defers to the
                         scenario volatility.
        base_price: Reference price of the traded pair.
        base_spread: Relative spread or price dispersion, if known.
        source: Where the data came from (e.g. "synthetic", "xrpl").
        synthetic: True when derived from scenario parameters instead of a feed.
        extra: Provider specific payload kept for callers.
    """
    base_volatility: Optional[float] = None
    base_price: float = 1.0
    base_spread: Optional[float] = None
    source: str = "provider"
    synthetic: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "MarketData":
        """Build MarketData from a provider dict using camelCase or snake_case keys."""
        def _pick(*keys):
            for key in keys:
                if payload.get(key) is not None:
                    return payload[key]
            return None

        known = {"baseVolatility", "base_volatility", "basePrice", "base_price",
                 "baseSpread", "base_spread", "source", "synthetic"}
        volatility = _pick("baseVolatility", "base_volatility")
        spread = _pick("baseSpread", "base_spread")
        price = _pick("basePrice", "base_price")
        return cls(
            base_volatility=float(volatility) if volatility is not None else None,
            base_price=float(price) if price is not None else 1.0,
            base_spread=float(spread) if spread is not None else None,
            source=str(payload.get("source") or "provider"),
            synthetic=bool(payload.get("synthetic", False)),
            extra={k: v for k, v in payload.items() if k not in known},
        )


MarketDataProvider = Callable[[], Union[MarketData, Mapping[str, Any]]]


def synthetic_market_data(volatility: float) -> MarketData:
    """Derive market context deterministically from the scenario volatility."""
    return MarketData(
        base_volatility=volatility,
        base_price=1.0,
        base_spread=0.002 + volatility * 0.01,
        source="synthetic",
        synthetic=True,
    )


def coerce_market_data(value: Union[MarketData, Mapping[str, Any]]) -> MarketData:
    """Normalize a provider return value to MarketData.

    Raises:
        DataSourceDegraded: If the value is neither MarketData nor a mapping
    """
    if isinstance(value, MarketData):
        return value
    if isinstance(value, Mapping):
        try:
            return MarketData.from_mapping(value)
        except (TypeError, ValueError) as e:
            raise DataSourceDegraded(f"Malformed market data: {e}") from e
    raise DataSourceDegraded(f"Unsupported market data type: {type(value).__name__}")


def _amount_value(amount: Any) -> float:
    """Convert a ledger amount to a float (issued currency object or XRP drops string)."""
    if isinstance(amount, dict):
        return float(amount["value"])
    return float(amount) / DROPS_PER_XRP


class OrderBookProvider:
    """Market data provider backed by a ledger order book.

    Calls the ``book_offers`` JSON-RPC method for an issued currency against
    XRP and turns the returned offers into a price and a price dispersion.
    Volatility is left unset, so the scenario volatility drives sampling.

    Example:
        >>> provider = OrderBookProvider(timeout_seconds=5)
        >>> forecaster.forecast(params, market_data_provider=provider)
    """

    def __init__(self,
                 url: str = DEFAULT_MARKET_DATA_URL,
                 currency: str = "USD",
                 issuer: str = DEFAULT_ISSUER,
                 limit: int = 20,
                 timeout_seconds: float = 10.0,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.currency = currency
        self.issuer = issuer
        self.limit = limit
        self.timeout_seconds = timeout_seconds
        self._session = session

    @classmethod
    def from_config(cls, config: ForecasterConfig) -> "OrderBookProvider":
        """Create a provider using a ForecasterConfig's endpoint and timeout."""
        return cls(url=config.market_data_url, timeout_seconds=config.market_data_timeout_seconds)

    def _request_body(self) -> Dict[str, Any]:
        return {
            "method": "book_offers",
            "params": [
                {
                    "taker_gets": {"currency": self.currency, "issuer": self.issuer},
                    "taker_pays": {"currency": "XRP"},
                    "limit": self.limit,
                }
            ],
        }

    def fetch_offers(self) -> List[Dict[str, Any]]:
        """Fetch raw offers from the order book.

        Raises:
            DataSourceDegraded: On transport, HTTP or payload errors
        """
        poster = self._session.post if self._session is not None else requests.post
        try:
            response = poster(self.url, json=self._request_body(), timeout=self.timeout_seconds)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise DataSourceDegraded(f"Order book request failed: {exc}") from exc
        except ValueError as exc:
            raise DataSourceDegraded(f"Order book response is not JSON: {exc}") from exc

        result = payload.get("result") if isinstance(payload, dict) else None
        if not isinstance(result, dict):
            raise DataSourceDegraded("Order book response has no result object")
        if result.get("status", "success") != "success":
            raise DataSourceDegraded(
                f"Order book request returned {result.get('error', result.get('status'))}"
            )
        offers = result.get("offers")
        if not isinstance(offers, list) or not offers:
            raise DataSourceDegraded("Order book is empty")
        return offers

    def __call__(self) -> MarketData:
        offers = self.fetch_offers()
        try:
            prices = [
                _amount_value(offer["TakerGets"]) / _amount_value(offer["TakerPays"])
                for offer in offers
            ]
        except (KeyError, TypeError, ValueError, ZeroDivisionError) as exc:
            raise DataSourceDegraded(f"Malformed order book offer: {exc}") from exc

        mean_price = sum(prices) / len(prices)
        spread = (max(prices) - min(prices)) / mean_price if mean_price > 0 else None
        return MarketData(
            base_volatility=None,
            base_price=prices[0],
            base_spread=spread,
            source="xrpl",
            synthetic=False,
            extra={"offer_count": len(offers)},
        )
