"""Purchase weight and price calculation for new transactions"""

from copra_credit.domain.models import TransactionTotals


def calculate_transaction_totals(quantity: float, less_kilo: float = 0.0, unit_price: float = 0.0) -> TransactionTotals:
    """
    Net weight and price of a copra purchase.

    less_kilo is deducted from the gross quantity (moisture, sacks); the net
    weight never goes below zero.

    Example:
        1000 kg gross, 50 kg less, 42.50/kg -> 950 kg, 40375.00
    """
    total_kilo = max(0.0, quantity - less_kilo)
    return TransactionTotals(total_kilo=total_kilo, total_price=total_kilo * unit_price)
