"""
Settlement calculator: how much cash a transition applies.

Pure computation with no database access. Given the invoice's
current figures and the requested target status, it returns
the payment value to post and the outstanding amount the
invoice is left with:

    PARTIALLY_PAID  requested amount, 0 < amount <= outstanding
    PAID            the whole outstanding balance (any amount
                    supplied by the caller is ignored)
    OVERDUE         nothing
    CANCELLED       nothing

PENDING is only ever an initial status and is rejected as a
target. Whether the transition itself is legal is the state
machine's concern; the calculator only checks amounts.
"""

from decimal import Decimal, InvalidOperation

from invoice_settlement.exceptions import IllegalTransitionError, ValidationError
from invoice_settlement.models.enums import InvoiceStatus
from invoice_settlement.schemas.invoice import Settlement

ZERO = Decimal("0")

# Amounts are stored as Numeric(19, 4)
AMOUNT_EXPONENT = -4


def parse_amount(value, field: str = "payment_amount") -> Decimal:
    """
    Convert a caller-supplied amount to a finite Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1") and
    not its binary approximation. Booleans are rejected even
    though Python treats them as integers.
    """
    if value is None:
        raise ValidationError(f"{field} is required", details={"field": field})
    if isinstance(value, bool):
        raise ValidationError(
            f"{field} must be a number", details={"field": field}
        )
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(
            f"{field} must be a number, got {value!r}",
            details={"field": field},
        ) from None
    if not amount.is_finite():
        raise ValidationError(
            f"{field} must be a finite number", details={"field": field}
        )
    if amount.normalize().as_tuple().exponent < AMOUNT_EXPONENT:
        raise ValidationError(
            f"{field} has more than {-AMOUNT_EXPONENT} decimal places",
            details={"field": field},
        )
    return amount


class SettlementCalculator:

    def check_partial_payment(
        self, outstanding_amount: Decimal, requested_payment_amount
    ) -> Decimal:
        """
        Parse a partial payment and check 0 < amount <= outstanding.

        Has no side effects, so callers may run it before deciding
        whether the transition is legal.
        """
        outstanding = Decimal(outstanding_amount)
        payment = parse_amount(requested_payment_amount)
        if payment <= ZERO:
            raise ValidationError(
                f"Payment amount must be positive, got {payment}",
                details={"payment_amount": str(payment)},
            )
        if payment > outstanding:
            raise ValidationError(
                f"Payment amount {payment} exceeds the outstanding "
                f"amount {outstanding}",
                details={
                    "payment_amount": str(payment),
                    "outstanding_amount": str(outstanding),
                },
            )
        return payment

    def compute_settlement(
        self,
        current_status: InvoiceStatus,
        target_status: InvoiceStatus,
        outstanding_amount: Decimal,
        invoice_amount: Decimal,
        requested_payment_amount=None,
    ) -> Settlement:
        outstanding = Decimal(outstanding_amount)
        total = Decimal(invoice_amount)
        if outstanding < ZERO or outstanding > total:
            raise ValidationError(
                f"Outstanding amount {outstanding} is outside "
                f"0..{total} for the invoice",
                details={
                    "outstanding_amount": str(outstanding),
                    "invoice_amount": str(total),
                },
            )

        if target_status == InvoiceStatus.PARTIALLY_PAID:
            payment = self.check_partial_payment(outstanding, requested_payment_amount)
            # Zeroing the balance does not promote the invoice to PAID
            return Settlement(
                payment_value=payment,
                new_outstanding_amount=outstanding - payment,
            )

        if target_status == InvoiceStatus.PAID:
            return Settlement(payment_value=outstanding, new_outstanding_amount=ZERO)

        if target_status in (InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED):
            return Settlement(payment_value=ZERO, new_outstanding_amount=outstanding)

        raise IllegalTransitionError(
            f"{target_status.value} is an initial status only, "
            f"not a transition target",
            details={
                "from_status": current_status.value,
                "to_status": target_status.value,
            },
        )
