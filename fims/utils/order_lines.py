# fims/utils/order_lines.py

"""
발주(PO)와 판매 주문(SO)이 공유하는 주문 품목 유틸리티입니다.

- build_order_lines: 요청 품목을 검증하고 소계/합계를 계산해 품목 행을 만듭니다.
- aggregate_by_item: 같은 품목을 가리키는 여러 줄을 한 줄로 합칩니다.
  상태 전이 시 품목당 재고 변경과 원장 기록이 정확히 한 번씩 일어나도록 합니다.
"""

from decimal import Decimal
from typing import Any, Dict, List, Sequence, Tuple, Type

from sqlmodel import SQLModel

from fims.core.exceptions import InvalidQuantityError


def build_order_lines(
    line_model: Type[SQLModel], lines: Sequence[Any], item_field: str
) -> Tuple[List[SQLModel], Decimal]:
    if not lines:
        raise InvalidQuantityError("Order must have at least one line")

    rows = []
    total = Decimal("0")
    for index, line in enumerate(lines):
        if line.quantity <= 0:
            raise InvalidQuantityError(
                "Line quantity must be positive", {"line": index, "quantity": line.quantity}
            )
        if line.price < 0:
            raise InvalidQuantityError(
                "Line price cannot be negative", {"line": index, "price": line.price}
            )
        subtotal = Decimal(line.quantity) * Decimal(line.price)
        rows.append(
            line_model(
                **{item_field: getattr(line, item_field)},
                quantity=line.quantity,
                price=line.price,
                subtotal=subtotal,
            )
        )
        total += subtotal
    return rows, total


def aggregate_by_item(lines: Sequence[Any], item_field: str) -> Dict[int, int]:
    """품목 ID → 수량 합계. 품목 ID 오름차순으로 정렬되어 잠금 순서가 일정합니다."""
    totals: Dict[int, int] = {}
    for line in lines:
        item_id = getattr(line, item_field)
        totals[item_id] = totals.get(item_id, 0) + line.quantity
    return dict(sorted(totals.items()))
