from decimal import Decimal, ROUND_HALF_UP
import logging

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def quantize(amount) -> Decimal:
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


class OrderCalculationService:
    """Pure pricing and preparation-time arithmetic for food orders."""

    @staticmethod
    def line_total(unit_price, quantity) -> Decimal:
        return quantize(Decimal(unit_price) * quantity)

    @staticmethod
    def calculate_totals(lines, tax_rate, service_charge_rate):
        """
        Compute order totals from ``(unit_price, quantity)`` pairs.

        Tax and service charge are each rounded to the cent before being
        added, so ``total_price`` always equals the sum of the stored parts.
        """
        subtotal = sum(
            (OrderCalculationService.line_total(price, qty) for price, qty in lines),
            Decimal("0.00"),
        )
        tax_amount = quantize(subtotal * Decimal(tax_rate))
        service_charge = quantize(subtotal * Decimal(service_charge_rate))
        return {
            "subtotal": quantize(subtotal),
            "tax_amount": tax_amount,
            "service_charge": service_charge,
            "total_price": quantize(subtotal + tax_amount + service_charge),
        }

    @staticmethod
    def estimate_preparation_minutes(lines) -> float:
        """
        Estimated kitchen time for ``(prep_minutes, quantity)`` pairs.

        A single line takes its own preparation time. Several lines take the
        slowest item plus half of the average per-line workload.
        """
        lines = list(lines)
        if not lines:
            return 0.0
        slowest = max(prep for prep, _ in lines)
        if len(lines) == 1:
            return float(slowest)
        workload = sum(prep * qty for prep, qty in lines)
        return slowest + (workload / len(lines)) / 2
