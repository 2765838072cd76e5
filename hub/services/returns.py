"""
Sale return state machine, shared by retail and B2B sales.

Status is never tracked by hand: after every mutation it is derived again
from the full item list with ``derive_status``.

    active/completed -> partially_returned -> returned

Swap-in lines (``is_swap``) cannot be returned themselves. They never count
towards "all returned".
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Type, TypeVar

from hub.core.enums import B2BSaleStatus, RetailSaleStatus
from hub.services.errors import (
    InvalidReturnTarget, ReturnQuantityError, SaleItemNotFound,
)

logger = logging.getLogger(__name__)

S = TypeVar("S", B2BSaleStatus, RetailSaleStatus)


def _returnable(items: Iterable) -> list:
    return [i for i in items if not getattr(i, "is_swap", False)]


def remaining_quantity(item) -> int:
    return int(item.quantity) - int(item.returned_quantity or 0)


def derive_status(items: Iterable, status_enum: Type[S]) -> S:
    """
    RETURNED when every non-swap item is fully returned, PARTIALLY_RETURNED
    when at least one non-swap item has a returned quantity, otherwise the initial state (ACTIVE for B2B,
    COMPLETED for retail).
    """
    items = list(items)
    initial = status_enum.ACTIVE if status_enum is B2BSaleStatus else status_enum.COMPLETED
    returnable = _returnable(items)
    if not returnable:
        return initial

    all_returned = all(
        int(i.returned_quantity or 0) >= int(i.quantity) for i in returnable
    )
    any_returned = any(int(i.returned_quantity or 0) > 0 for i in returnable)

    if all_returned:
        return status_enum.RETURNED
    if any_returned:
        return status_enum.PARTIALLY_RETURNED
    return initial


def find_item(sale, item_id: int):
    for item in sale.items:
        if item.id == item_id:
            return item
    raise SaleItemNotFound(f"Item {item_id} not found on sale {sale.id}")


def apply_return(item, quantity: int) -> int:
    """
    Adds ``quantity`` to the item's returned quantity.
    Raises without touching the item if the result would exceed the sold quantity.
    """
    if getattr(item, "is_swap", False):
        raise InvalidReturnTarget("Swap items cannot be returned")

    quantity = int(quantity)
    if quantity <= 0:
        raise ReturnQuantityError("Return quantity must be greater than zero")

    new_returned = int(item.returned_quantity or 0) + quantity
    if new_returned > int(item.quantity):
        raise ReturnQuantityError(
            f"Cannot return more than purchased quantity "
            f"(remaining {remaining_quantity(item)}, requested {quantity})"
        )

    item.returned_quantity = new_returned
    return new_returned


def partial_return(sale, item_id: int, quantity: int, status_enum: Type[S]) -> S:
    item = find_item(sale, item_id)
    apply_return(item, quantity)
    sale.status = derive_status(sale.items, status_enum)
    logger.info("Sale %s: returned %s of item %s -> %s", sale.id, quantity, item_id, sale.status.value)
    return sale.status


def full_return(sale, status_enum: Type[S]) -> S:
    for item in sale.items:
        item.returned_quantity = item.quantity
    sale.status = status_enum.RETURNED
    logger.info("Sale %s: full return", sale.id)
    return sale.status


def swap(sale, item_id: int, return_quantity: int, new_item, swap_note: Optional[str] = None):
    """
    Returns ``return_quantity`` of the source item and appends ``new_item`` as
    its replacement. ``new_item`` is an unsaved B2BSaleItem; its quantity
    defaults to the returned quantity.
    """
    source = find_item(sale, item_id)
    apply_return(source, return_quantity)

    new_item.is_swap = True
    new_item.swap_source_item_id = source.id
    new_item.swap_note = swap_note
    new_item.returned_quantity = 0
    if not new_item.quantity:
        new_item.quantity = int(return_quantity)
    sale.items.append(new_item)

    sale.status = derive_status(sale.items, B2BSaleStatus)
    logger.info(
        "Sale %s: swapped %s of item %s for '%s' -> %s",
        sale.id, return_quantity, item_id, new_item.product_name, sale.status.value,
    )
    return new_item
