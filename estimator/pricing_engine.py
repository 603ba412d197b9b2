"""
Pricing Engine — cost totals and payment figures for a project.

Pure math. The order of operations below is the same one the estimator UI
runs, so both sides show identical numbers:

    material  = Σ materialCost × units
    labor_raw = Σ laborCost × units
    labor     = labor_raw − labor_raw × laborDiscount
    waste     = material × wasteFactor           (material only, never labor)
    subtotal  = material + waste + labor
    markup    = subtotal × markup
    tax       = subtotal × taxRate
    total     = subtotal + markup + tax + misc fees + transportation fee

Nothing is rounded until the output boundary.
"""

import logging
import math
from decimal import Context, Decimal, ROUND_HALF_UP

from .measurements import get_units, to_number
from .schemas import PaymentDetails, PaymentMethod, Totals

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

# Wide enough to hold any finite float to the cent
MONEY_CONTEXT = Context(prec=400)


def round_money(value: float) -> float:
    """
    Round to cents, half-up on the exact binary value.

    Same result as JavaScript's Number(x.toFixed(2)) for non-negative x.
    Non-finite values (an overflowed product) are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    return float(Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP, context=MONEY_CONTEXT))


def _get(obj, field: str, camel: str, default=None):
    if isinstance(obj, dict):
        return obj.get(camel, obj.get(field, default))
    return getattr(obj, field, default)


class PricingEngine:
    """Builds the Totals and PaymentDetails blocks of a project record."""

    DEPOSIT_METHOD = PaymentMethod.DEPOSIT.value

    def calculate_totals(self, categories: list, settings) -> Totals:
        """
        Full cost breakdown for a sanitized category tree.

        Args:
            categories: list of Category models (or stored category dicts)
            settings: ProjectSettings model (or stored settings dict)
        """
        material_cost, labor_before_discount = self._calculate_raw_costs(categories)

        s = settings or {}
        labor_discount_rate = to_number(_get(s, "labor_discount", "laborDiscount"))
        waste_factor = to_number(_get(s, "waste_factor", "wasteFactor"))
        markup_rate = to_number(_get(s, "markup", "markup"))
        tax_rate = to_number(_get(s, "tax_rate", "taxRate"))

        # Labor
        labor_discount_amount = labor_before_discount * labor_discount_rate
        labor_cost = labor_before_discount - labor_discount_amount

        # Waste applies to material only
        waste_cost = material_cost * waste_factor
        material_with_waste = material_cost + waste_cost

        subtotal = material_with_waste + labor_cost

        # Markup and tax are both taken from the waste-inclusive, discounted subtotal
        markup_amount = subtotal * markup_rate
        tax_amount = subtotal * tax_rate

        misc_fees_total = self._calculate_misc_fees(_get(s, "misc_fees", "miscFees", []))
        transportation_fee = to_number(_get(s, "transportation_fee", "transportationFee"))

        grand_total = subtotal + markup_amount + tax_amount + misc_fees_total + transportation_fee

        return Totals(
            material_cost=round_money(material_cost),
            labor_cost=round_money(labor_cost),
            labor_cost_before_discount=round_money(labor_before_discount),
            labor_discount=round_money(labor_discount_amount),
            waste_cost=round_money(waste_cost),
            tax_amount=round_money(tax_amount),
            markup_amount=round_money(markup_amount),
            misc_fees_total=round_money(misc_fees_total),
            transportation_fee=round_money(transportation_fee),
            subtotal=round_money(subtotal),
            total=round_money(grand_total),
        )

    def aggregate_payments(self, payments, grand_total: float) -> PaymentDetails:
        """
        Paid / due / deposit figures.

        Only paid entries count. Deposit-method payments also count toward
        depositAmount. Anything that is not a list counts as no payments.
        """
        total_paid = 0.0
        deposit_amount = 0.0

        if isinstance(payments, (list, tuple)):
            for p in payments:
                if not p or not _get(p, "is_paid", "isPaid", False):
                    continue
                amount = to_number(_get(p, "amount", "amount"))
                total_paid += amount
                method = _get(p, "method", "method")
                if getattr(method, "value", method) == self.DEPOSIT_METHOD:
                    deposit_amount += amount

        total_due = max(0.0, grand_total - total_paid)

        return PaymentDetails(
            total_paid=round_money(total_paid),
            total_due=round_money(total_due),
            grand_total=round_money(grand_total),
            deposit_amount=round_money(deposit_amount),
        )

    def _calculate_raw_costs(self, categories: list) -> tuple[float, float]:
        """Σ rate × units over every work item, for material and for labor."""
        material = 0.0
        labor = 0.0
        for category in categories or []:
            for item in _get(category, "work_items", "workItems", []) or []:
                units = get_units(item)
                material += to_number(_get(item, "material_cost", "materialCost")) * units
                labor += to_number(_get(item, "labor_cost", "laborCost")) * units
        return material, labor

    def _calculate_misc_fees(self, misc_fees) -> float:
        if not isinstance(misc_fees, (list, tuple)):
            return 0.0
        return sum(to_number(_get(f, "amount", "amount")) for f in misc_fees if f)
