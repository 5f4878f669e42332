from decimal import Decimal, InvalidOperation
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone
import logging

from core_backend.config import app_settings
from core_backend.exceptions import (
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from orders.models import Order, SplitBill
from orders.services import OrderCalculationService, OrderService
from shifts.services import ShiftService
from .models import Payment
from .money import ZERO, quantize
from .signals import payment_recorded

logger = logging.getLogger(__name__)


class PaymentService:
    """Records tenders against orders and split bills."""

    @staticmethod
    def _amount(value, label: str) -> Decimal:
        try:
            return quantize(app_settings.currency, value)
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(f"{label} must be a decimal amount, got {value!r}")

    @staticmethod
    def _get_split(order: Order, split_bill_id) -> SplitBill:
        try:
            return SplitBill.objects.select_for_update().get(pk=split_bill_id, order=order, is_void=False)
        except (SplitBill.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError(
                "SplitBill",
                split_bill_id,
                message=f"Split bill '{split_bill_id}' not found on order {order.order_number}",
            )

    @staticmethod
    @transaction.atomic
    def record_payment(
        order_id,
        method: str,
        amount,
        processed_by: str,
        split_bill_id=None,
        tip_amount=ZERO,
        shift_id=None,
        card_last_four: str = "",
        card_type: str = "",
        transaction_reference: str = "",
        auth_code: str = "",
    ) -> Payment:
        """
        Record one payment.

        A split payment must cover its split exactly (within tolerance) and
        marks it paid. The order's tip becomes the sum of payment tips and
        the order is recomputed. The tender accumulates into the processing
        employee's OPEN shift (or the explicit ``shift_id``); the payment
        that settles the order also carries the order's tax and discount
        into that shift.
        """
        order = OrderService.get_order(order_id, for_update=True)
        OrderService.ensure_open(order, "take a payment")

        if method not in Payment.PaymentMethod.values:
            raise ValidationError(f"Unknown payment method '{method}'")
        if not processed_by:
            raise ValidationError("processed_by is required")

        amount = PaymentService._amount(amount, "Amount")
        tip_amount = PaymentService._amount(tip_amount or ZERO, "Tip")
        if amount <= ZERO:
            raise ValidationError("Payment amount must be greater than zero")
        if tip_amount < ZERO:
            raise ValidationError("Tip cannot be negative")

        tolerance = app_settings.rounding_tolerance
        has_split_set = order.split_bills.filter(is_void=False).exists()

        split = None
        if split_bill_id is not None:
            split = PaymentService._get_split(order, split_bill_id)
            if split.is_paid:
                raise InvalidStateError(
                    f"Split {split.split_number} of order {order.order_number} is already paid",
                    current_state="PAID",
                )
            if abs(amount - split.total) > tolerance:
                raise ValidationError(
                    f"Split {split.split_number} totals {split.total}; payment of {amount} does not settle it",
                    detail={"split_total": str(split.total), "amount": str(amount)},
                )
        elif has_split_set:
            raise ValidationError(
                f"Order {order.order_number} is split; pay a specific split bill",
                detail={"split_bill_ids": [str(pk) for pk in order.split_bills.filter(is_void=False, is_paid=False).values_list("id", flat=True)]},
            )
        else:
            outstanding = order.total - OrderService.amount_paid(order)
            if amount - outstanding > tolerance:
                raise ValidationError(
                    f"Payment of {amount} exceeds the outstanding balance {outstanding}",
                    detail={"outstanding": str(outstanding), "amount": str(amount)},
                )

        shift = None
        if shift_id is not None:
            shift = ShiftService.get_shift(shift_id)
        else:
            shift = ShiftService.get_open_shift(processed_by, outlet=order.outlet_id)
            if shift is None:
                logger.warning(
                    f"No open shift for {processed_by}; payment on order {order.order_number} "
                    f"is not attributed to a drawer"
                )

        payment = Payment.objects.create(
            order=order,
            split_bill=split,
            shift=shift,
            method=method,
            amount=amount,
            tip_amount=tip_amount,
            processed_by=processed_by,
            card_last_four=card_last_four or "",
            card_type=card_type or "",
            transaction_reference=transaction_reference or "",
            auth_code=auth_code or "",
        )

        if split is not None:
            split.is_paid = True
            split.paid_at = timezone.now()
            split.tip += tip_amount
            split.total += tip_amount
            split.save(update_fields=["is_paid", "paid_at", "tip", "total"])

        order.tip = order.payments.aggregate(tips=Sum("tip_amount"))["tips"] or ZERO
        order.save(update_fields=["tip", "updated_at"])
        order = OrderCalculationService.recalculate_order_totals(order)

        was_paid = order.payment_status == Order.PaymentStatus.PAID
        order = OrderService.update_payment_status(order)
        settles_order = not was_paid and order.payment_status == Order.PaymentStatus.PAID

        if shift is not None:
            ShiftService.record_sale(
                shift,
                method,
                amount,
                tip=tip_amount,
                tax=(order.tax_amount + order.service_charge) if settles_order else ZERO,
                discount=order.discount if settles_order else ZERO,
            )

        logger.info(
            f"Recorded {method} payment {amount} (tip {tip_amount}) on order {order.order_number}"
            f"{f' split {split.split_number}' if split else ''}; payment status {order.payment_status}"
        )

        def emit_payment_signals():
            """Deferred signal emission - runs after transaction commits"""
            try:
                payment_recorded.send(sender=PaymentService, payment=payment, order=order)
            except Exception as e:
                # Log but don't raise - payment is already committed
                logger.error(f"Error in post-payment signal handlers for payment {payment.id}: {e}")

        transaction.on_commit(emit_payment_signals)
        return payment

    @staticmethod
    def remaining_balance(order_id) -> Decimal:
        order = OrderService.get_order(order_id)
        return max(order.total - OrderService.amount_paid(order), ZERO)
