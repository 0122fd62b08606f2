import json
from datetime import datetime
from decimal import Decimal
from typing import Any

from domain.exceptions.currency import CacheError
from domain.models.currency import Currency, DynamicDetails, ExchangeRate
from infrastructure.cache.base import CacheNamespace


def _rate_to_dict(rate: ExchangeRate) -> dict:
    return {
        "currency": rate.currency.value,
        "rate_buy": str(rate.rate_buy),
        "rate_sell": str(rate.rate_sell),
        "timestamp": rate.timestamp.isoformat(),
    }


def _rate_from_dict(data: dict) -> ExchangeRate:
    return ExchangeRate(
        currency=Currency(data["currency"]),
        rate_buy=Decimal(data["rate_buy"]),
        rate_sell=Decimal(data["rate_sell"]),
        timestamp=datetime.fromisoformat(data["timestamp"]),
    )


def _details_to_dict(details: DynamicDetails) -> dict:
    return {
        "currency": details.currency.value,
        "percentage_change_buy": str(details.percentage_change_buy),
        "old_rate_timestamp": details.old_rate_timestamp.isoformat(),
        "percentage_change_sell": str(details.percentage_change_sell),
        "new_rate_timestamp": details.new_rate_timestamp.isoformat(),
    }


def _details_from_dict(data: dict) -> DynamicDetails:
    return DynamicDetails(
        currency=Currency(data["currency"]),
        percentage_change_buy=Decimal(data["percentage_change_buy"]),
        old_rate_timestamp=datetime.fromisoformat(data["old_rate_timestamp"]),
        percentage_change_sell=Decimal(data["percentage_change_sell"]),
        new_rate_timestamp=datetime.fromisoformat(data["new_rate_timestamp"]),
    )


def encode(namespace: CacheNamespace, value: Any) -> str:
    if namespace is CacheNamespace.LATEST:
        return json.dumps(_rate_to_dict(value))
    if namespace is CacheNamespace.HOURLY:
        return json.dumps(_details_to_dict(value))
    return json.dumps([_details_to_dict(d) for d in value])


def decode(namespace: CacheNamespace, data: str) -> Any:
    try:
        payload = json.loads(data)
        if namespace is CacheNamespace.LATEST:
            return _rate_from_dict(payload)
        if namespace is CacheNamespace.HOURLY:
            return _details_from_dict(payload)
        return [_details_from_dict(d) for d in payload]
    except (ValueError, KeyError, TypeError) as e:
        raise CacheError(f"Invalid json data for {namespace.value}: {e}") from e
