"""Deposit and balance figures for a quote total."""

import logging

from ..models.quote import PaymentSummary
from ..utils.errors import ErrorCode, raise_error
from ..utils.money import round_money, to_decimal
from .service_factory import service_factory

logger = logging.getLogger(__name__)


class PaymentCalculatorService:
    """Derives payment status from the final quote total."""

    def calculate_payment(
        self, total: float, amount_paid: float = 0.0, deposit_percentage: float = 0.0
    ) -> PaymentSummary:
        """
        Calculate deposit, balance due and payment status.

        Args:
            total: Final quote total (after discount and tax)
            amount_paid: Amount received so far
            deposit_percentage: Required deposit as a percentage of the total (0-100)

        Returns:
            PaymentSummary; balance_due is never negative

        Raises:
            APIError: amount_paid is negative or deposit_percentage is outside 0-100
        """
        if amount_paid < 0:
            raise_error(ErrorCode.VALIDATION_ERROR, "amount_paid cannot be negative", 422)
        if not 0 <= deposit_percentage <= 100:
            raise_error(ErrorCode.VALIDATION_ERROR, "deposit_percentage must be between 0 and 100", 422)

        total = round_money(total)
        paid = round_money(amount_paid)
        deposit_amount = round_money(to_decimal(total) * to_decimal(deposit_percentage) / 100)
        balance_due = max(0.0, round_money(to_decimal(total) - to_decimal(paid)))

        if paid <= 0:
            status = "unpaid"
        elif balance_due == 0:
            status = "paid"
        elif deposit_amount > 0 and paid >= deposit_amount:
            status = "deposit_paid"
        else:
            status = "partially_paid"

        logger.debug(f"Payment: total {total}, paid {paid}, balance {balance_due} ({status})")
        return PaymentSummary(
            total=total,
            deposit_percentage=deposit_percentage,
            deposit_amount=deposit_amount,
            amount_paid=paid,
            balance_due=balance_due,
            status=status,
        )


@service_factory
def get_payment_calculator() -> PaymentCalculatorService:
    """Get PaymentCalculatorService singleton instance."""
    return PaymentCalculatorService()


def calculate_payment(
    total: float, amount_paid: float = 0.0, deposit_percentage: float = 0.0
) -> PaymentSummary:
    """Module-level shortcut for PaymentCalculatorService.calculate_payment."""
    return get_payment_calculator().calculate_payment(total, amount_paid, deposit_percentage)
