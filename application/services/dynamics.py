import logging
from decimal import ROUND_HALF_UP, Decimal

from domain.models.currency import Currency, DynamicDetails, ExchangeRate

logger = logging.getLogger(__name__)

RATIO_PLACES = Decimal("0.000001")
HUNDRED = Decimal(100)


def percentage_change(old_value: Decimal, new_value: Decimal) -> Decimal:
    """Percentage change from ``old_value`` to ``new_value``.

    The ratio is rounded half-up to 6 places before scaling, so
    ``percentage_change(Decimal("36.50"), Decimal("37.00")) == Decimal("1.369900")``.
    A change away from zero counts as 100% (maximal growth).
    """
    if old_value == 0:
        return Decimal(0) if new_value == 0 else HUNDRED

    ratio = ((new_value - old_value) / old_value).quantize(RATIO_PLACES, rounding=ROUND_HALF_UP)
    return ratio * HUNDRED


class DynamicsCalculator:
    def __init__(self, max_minutes_difference: int):
        self.max_minutes_difference = max_minutes_difference

    def dynamic_details(self, currency: Currency, older: ExchangeRate, newer: ExchangeRate) -> DynamicDetails:
        return DynamicDetails(
            currency=currency,
            percentage_change_buy=percentage_change(older.rate_buy, newer.rate_buy),
            old_rate_timestamp=older.timestamp,
            percentage_change_sell=percentage_change(older.rate_sell, newer.rate_sell),
            new_rate_timestamp=newer.timestamp,
        )

    def daily_dynamics(self, currency: Currency, rates: list[ExchangeRate]) -> list[DynamicDetails]:
        """
        Pairwise changes over rates sorted newest to oldest.

        Every rate is compared with the one iterated just before it, which is
        treated as the newer rate of the pair. Pairs whose timestamps are
        ``max_minutes_difference`` minutes or more apart are skipped.
        """
        rate_changes = []
        newer_rate = None

        for current_rate in rates:
            if newer_rate is not None:
                gap_minutes = self._minutes_between(newer_rate, current_rate)
                if gap_minutes < self.max_minutes_difference:
                    rate_changes.append(self.dynamic_details(currency, current_rate, newer_rate))
                else:
                    logger.debug(
                        f"Skipping {currency.value} pair {current_rate.timestamp} / {newer_rate.timestamp}: "
                        f"{gap_minutes} min apart"
                    )
            newer_rate = current_rate

        return rate_changes

    @staticmethod
    def _minutes_between(first: ExchangeRate, second: ExchangeRate) -> int:
        # Whole minutes, truncated
        return int(abs(second.timestamp - first.timestamp).total_seconds() // 60)
