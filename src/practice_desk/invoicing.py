"""Invoice arithmetic and invoice drafts built from revenue tasks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from practice_desk.models import Task

CENTS = Decimal("0.01")
DEFAULT_CURRENCY = "USD"
DEFAULT_PAYMENT_TERMS_DAYS = 30


def _money(value: Decimal | int | float | str | None) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    return value if isinstance(value, Decimal) else Decimal(str(value))


def quantize_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class InvoiceTotals:
    """Subtotal, discount, tax and total of a single-service invoice."""

    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total: Decimal

    def formatted(self) -> dict[str, str]:
        """Amounts as 2-decimal strings, keyed as the invoice API expects."""
        return {
            "subtotal": f"{self.subtotal:.2f}",
            "discountAmount": f"{self.discount_amount:.2f}",
            "taxAmount": f"{self.tax_amount:.2f}",
            "totalAmount": f"{self.total:.2f}",
        }


def compute_invoice_totals(
    service_rate: Decimal | int | float | str | None,
    discount_amount: Decimal | int | float | str | None = None,
    tax_percent: Decimal | int | float | str | None = None,
) -> InvoiceTotals:
    """Compute invoice totals; tax is charged on the discounted subtotal."""
    subtotal = _money(service_rate)
    discount = _money(discount_amount)
    tax = (subtotal - discount) * _money(tax_percent) / 100
    return InvoiceTotals(
        subtotal=quantize_money(subtotal),
        discount_amount=quantize_money(discount),
        tax_amount=quantize_money(tax),
        total=quantize_money(subtotal - discount + tax),
    )


def invoice_number_for(task_id: int, issued_on: date) -> str:
    return f"INV-{issued_on:%Y%m%d}-{task_id}"


def build_invoice_from_task(
    task: Task,
    issued_on: date,
    tax_percent: Decimal | int | float | str | None = None,
    discount_amount: Decimal | int | float | str | None = None,
) -> dict[str, Any]:
    """Draft invoice payload for a revenue task.

    Defaults the discount and tax rate to those stored on the task.
    """
    discount = discount_amount if discount_amount is not None else task.discount_amount
    rate = tax_percent if tax_percent is not None else task.tax_percent
    totals = compute_invoice_totals(task.service_rate, discount, rate)
    due_date = task.due_date or issued_on + timedelta(days=DEFAULT_PAYMENT_TERMS_DAYS)

    payload: dict[str, Any] = {
        "invoiceNumber": invoice_number_for(task.id, issued_on),
        "clientId": task.client_id,
        "entityId": task.entity_id,
        "issueDate": issued_on.isoformat(),
        "dueDate": due_date.isoformat(),
        "currencyCode": task.currency or DEFAULT_CURRENCY,
        "status": "draft",
        "serviceDescription": task.task_details or "",
        "notes": "",
        "termsAndConditions": "",
        "taskId": task.id,
    }
    payload.update(totals.formatted())
    payload["amountDue"] = payload["totalAmount"]
    if task.tenant_id is not None:
        payload["tenantId"] = task.tenant_id
    return payload
