# fims/domains/inv/services.py

"""
재고 일관성 엔진: 수불 원장(StockLedger), 재고 변경기(StockMutator), BOM 소요량 계산기(BOMCalculator).

구매 입고, 작업지시 시작/완료, 판매 출하, 수동 재고 조정은 모두 이 모듈을 통해 재고를 바꿉니다.
세 구성요소는 커밋하지 않으며, 호출 측이 연 트랜잭션(fims.core.database.transaction_scope)에 참여합니다.
재고 변경 한 번에는 반드시 원장 기록 한 건이 같은 트랜잭션 안에서 짝지어집니다.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Type, Union, assert_never

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.crud_base import CRUDBase
from fims.core.database import transaction_scope
from fims.core.exceptions import InsufficientStockError, InvalidQuantityError, ItemNotFoundError
from fims.core.pagination import PageParams
from . import models as inv_models
from . import schemas as inv_schemas

logger = logging.getLogger(__name__)

StockItem = Union[inv_models.Material, inv_models.Product]


def stockable_model(kind: inv_models.ItemKind) -> Type[StockItem]:
    """품목 종류에 대응하는 테이블 모델을 반환합니다."""
    match kind:
        case inv_models.ItemKind.MATERIAL:
            return inv_models.Material
        case inv_models.ItemKind.PRODUCT:
            return inv_models.Product
        case _:
            assert_never(kind)


def _plain_number(value: Union[int, Decimal]) -> Union[int, float]:
    """Decimal 수량을 응답용 숫자로 바꿉니다. 정수값이면 int, 아니면 float."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def shortage_detail(kind: inv_models.ItemKind, item: StockItem, requested: Union[int, Decimal]) -> Dict[str, Any]:
    """InsufficientStockError / InsufficientMaterialsError에 담는 부족 품목 한 건"""
    return {
        "item_type": kind.value,
        "item_id": item.id,
        "name": item.name,
        "requested": _plain_number(requested),
        "available": item.stock,
        "shortage": _plain_number(requested - item.stock),
    }


# =============================================================================
# 1. 수불 원장 (Stock Ledger)
# =============================================================================
class StockLedger:
    """
    stock_logs 테이블에 대한 추가 전용 접근자입니다. 수정/삭제 연산은 제공하지 않습니다.
    """

    def __init__(self):
        self._logs = CRUDBase(inv_models.StockLog, resource_name="Stock log")

    async def record(
        self,
        db: AsyncSession,
        *,
        item_type: inv_models.ItemKind,
        item_id: int,
        movement_type: inv_models.MovementType,
        quantity: int,
        reference_type: Optional[inv_models.ReferenceType] = None,
        reference_id: Optional[int] = None,
        notes: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> inv_models.StockLog:
        """
        원장에 한 건을 추가합니다. quantity는 양의 정수(크기)이며 방향은 movement_type이 나타냅니다.
        flush만 수행하므로 호출 측 트랜잭션이 롤백되면 기록도 남지 않습니다.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidQuantityError(
                f"Ledger quantity must be a positive integer, got {quantity!r}",
                {"quantity": quantity},
            )
        entry = inv_models.StockLog(
            item_type=item_type,
            item_id=item_id,
            movement_type=movement_type,
            quantity=quantity,
            reference_type=reference_type,
            reference_id=reference_id,
            notes=notes,
            created_by=actor_id,
        )
        db.add(entry)
        await db.flush()
        return entry

    async def list(
        self,
        db: AsyncSession,
        *,
        params: PageParams,
        item_type: Optional[inv_models.ItemKind] = None,
        item_id: Optional[int] = None,
        movement_type: Optional[inv_models.MovementType] = None,
        reference_type: Optional[inv_models.ReferenceType] = None,
        reference_id: Optional[int] = None,
    ) -> Tuple[List[inv_models.StockLog], int]:
        """필터 조건에 맞는 기록을 최신순으로 한 페이지 조회하고 전체 건수와 함께 반환합니다."""
        filters = {
            "item_type": item_type,
            "item_id": item_id,
            "movement_type": movement_type,
            "reference_type": reference_type,
            "reference_id": reference_id,
        }
        entries = await self._logs.get_filtered(
            db, filters=filters, order_by_field="created_at", order_desc=True,
            skip=params.skip, limit=params.limit,
        )
        total = await self._logs.count_filtered(db, filters=filters)
        return entries, total

    async def list_by_item(
        self, db: AsyncSession, *, item_type: inv_models.ItemKind, item_id: int, params: PageParams
    ) -> Tuple[List[inv_models.StockLog], int]:
        return await self.list(db, params=params, item_type=item_type, item_id=item_id)

    async def count_for_reference(
        self, db: AsyncSession, *, reference_type: inv_models.ReferenceType, reference_id: int
    ) -> int:
        return await self._logs.count_filtered(
            db, filters={"reference_type": reference_type, "reference_id": reference_id}
        )


# =============================================================================
# 2. 재고 변경기 (Stock Mutator)
# =============================================================================
class StockMutator:
    """
    자재/제품의 stock 컬럼을 바꾸는 유일한 경로입니다.

    - IN: stock += quantity (증가량)
    - OUT: stock -= quantity (감소량). 현재고가 부족하면 InsufficientStockError, 변경 없음.
    - ADJUST: stock = quantity. quantity는 증감량이 아니라 조정 후 절대값입니다.
      조정 원장에 남길 |변경 전 - 변경 후|는 호출 측이 계산합니다.

    대상 행은 호출 측 트랜잭션 안에서 잠금 조회(SELECT ... FOR UPDATE)로 읽습니다.
    """

    async def load_for_update(self, db: AsyncSession, kind: inv_models.ItemKind, item_id: int) -> StockItem:
        model = stockable_model(kind)
        statement = (
            select(model)
            .where(model.id == item_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await db.execute(statement)
        item = result.scalars().first()
        if item is None:
            raise ItemNotFoundError(model.__name__, item_id)
        return item

    async def apply(
        self,
        db: AsyncSession,
        *,
        item_type: inv_models.ItemKind,
        item_id: int,
        movement_type: inv_models.MovementType,
        quantity: int,
    ) -> int:
        """재고를 변경하고 변경 후 재고를 반환합니다."""
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise InvalidQuantityError(f"Stock quantity must be an integer, got {quantity!r}", {"quantity": quantity})
        if movement_type == inv_models.MovementType.ADJUST:
            if quantity < 0:
                raise InvalidQuantityError("Adjusted stock cannot be negative", {"quantity": quantity})
        elif quantity <= 0:
            raise InvalidQuantityError(f"{movement_type.value} quantity must be positive", {"quantity": quantity})

        item = await self.load_for_update(db, item_type, item_id)

        match movement_type:
            case inv_models.MovementType.IN:
                item.stock += quantity
            case inv_models.MovementType.OUT:
                if item.stock < quantity:
                    raise InsufficientStockError([shortage_detail(item_type, item, quantity)])
                item.stock -= quantity
            case inv_models.MovementType.ADJUST:
                item.stock = quantity
            case _:
                assert_never(movement_type)

        db.add(item)
        await db.flush()
        logger.debug("Stock %s %s #%s by %s -> %s", movement_type.value, item_type.value, item_id, quantity, item.stock)
        return item.stock


stock_ledger = StockLedger()
stock_mutator = StockMutator()


async def post_movement(
    db: AsyncSession,
    *,
    item_type: inv_models.ItemKind,
    item_id: int,
    movement_type: inv_models.MovementType,
    quantity: int,
    reference_type: inv_models.ReferenceType,
    reference_id: int,
    notes: Optional[str],
    actor_id: Optional[int],
) -> inv_models.StockLog:
    """증감(IN/OUT) 변경 한 번과 그에 대응하는 원장 기록 한 건을 함께 수행합니다."""
    await stock_mutator.apply(
        db, item_type=item_type, item_id=item_id, movement_type=movement_type, quantity=quantity
    )
    return await stock_ledger.record(
        db,
        item_type=item_type,
        item_id=item_id,
        movement_type=movement_type,
        quantity=quantity,
        reference_type=reference_type,
        reference_id=reference_id,
        notes=notes,
        actor_id=actor_id,
    )


# =============================================================================
# 3. BOM 소요량 계산기 (BOM Requirement Calculator)
# =============================================================================
class BOMCalculator:
    """
    제품의 BOM을 생산 수량만큼 전개하여 자재별 소요량과 부족량을 계산합니다 (조회 전용).
    수량의 양수 여부는 검증하지 않습니다. 필요하면 호출 측에서 먼저 거부해야 합니다.
    """

    async def calculate(
        self, db: AsyncSession, *, product_id: int, quantity: Union[int, Decimal]
    ) -> List[inv_schemas.BOMRequirement]:
        statement = (
            select(inv_models.BillOfMaterial, inv_models.Material)
            .join(inv_models.Material, inv_models.Material.id == inv_models.BillOfMaterial.material_id)
            .where(inv_models.BillOfMaterial.product_id == product_id)
            .order_by(inv_models.BillOfMaterial.id)
        )
        result = await db.execute(statement)

        requirements = []
        for bom, material in result.all():
            required = Decimal(bom.quantity) * Decimal(quantity)
            requirements.append(
                inv_schemas.BOMRequirement(
                    material_id=material.id,
                    material_sku=material.sku,
                    material_name=material.name,
                    unit=material.unit,
                    required_quantity=required,
                    current_stock=material.stock,
                    shortage=max(Decimal(0), required - material.stock),
                )
            )
        return requirements


bom_calculator = BOMCalculator()


# =============================================================================
# 4. 수동 재고 조정
# =============================================================================
async def adjust_stock(
    db: AsyncSession,
    *,
    item_type: inv_models.ItemKind,
    item_id: int,
    new_stock: int,
    notes: Optional[str] = None,
    actor_id: Optional[int] = None,
) -> Dict[str, Any]:
    """
    재고를 new_stock(절대값)으로 맞추고 |변경 전 - 변경 후| 크기의 ADJUST 원장 한 건을 남깁니다.
    변경이 없는 조정과 음수 재고는 InvalidQuantityError로 거부합니다.
    """
    if new_stock < 0:
        raise InvalidQuantityError("Stock cannot be negative", {"new_stock": new_stock})

    async with transaction_scope(db):
        item = await stock_mutator.load_for_update(db, item_type, item_id)
        previous_stock = item.stock
        if previous_stock == new_stock:
            raise InvalidQuantityError(
                "No adjustment needed", {"previous_stock": previous_stock, "new_stock": new_stock}
            )

        await stock_mutator.apply(
            db, item_type=item_type, item_id=item_id,
            movement_type=inv_models.MovementType.ADJUST, quantity=new_stock,
        )
        entry = await stock_ledger.record(
            db,
            item_type=item_type,
            item_id=item_id,
            movement_type=inv_models.MovementType.ADJUST,
            quantity=abs(new_stock - previous_stock),
            reference_type=inv_models.ReferenceType.ADJUSTMENT,
            notes=notes or f"Stock adjusted from {previous_stock} to {new_stock}",
            actor_id=actor_id,
        )

    logger.info(
        "Stock adjusted: %s #%s %s -> %s (user %s)", item_type.value, item_id, previous_stock, new_stock, actor_id
    )
    return {
        "item_type": item_type,
        "item_id": item_id,
        "previous_stock": previous_stock,
        "new_stock": new_stock,
        "adjustment_quantity": abs(new_stock - previous_stock),
        "log": entry,
    }


# =============================================================================
# 5. 재고 현황 조회
# =============================================================================
async def low_stock_items(db: AsyncSession, kind: inv_models.ItemKind) -> List[StockItem]:
    """안전재고 이하(stock <= min_stock)인 사용 중 품목을 재고 오름차순으로 반환합니다."""
    model = stockable_model(kind)
    statement = (
        select(model)
        .where(model.status == inv_models.ItemStatus.ACTIVE)
        .where(model.stock <= model.min_stock)
        .order_by(model.stock, model.id)
    )
    result = await db.execute(statement)
    return result.scalars().all()


def _summary_row(item: StockItem) -> inv_schemas.StockSummaryRow:
    return inv_schemas.StockSummaryRow(
        id=item.id,
        sku=item.sku,
        name=item.name,
        stock=item.stock,
        min_stock=item.min_stock,
        difference=item.stock - item.min_stock,
        status=item.status,
    )


async def stock_summary(db: AsyncSession) -> inv_schemas.StockSummary:
    sections: Dict[inv_models.ItemKind, Tuple[list, list, inv_schemas.StockSummaryCounts]] = {}
    for kind in inv_models.ItemKind:
        model = stockable_model(kind)
        result = await db.execute(select(model).order_by(model.name, model.id))
        rows = [_summary_row(item) for item in result.scalars().all()]
        low = [
            row for row in rows
            if row.status == inv_models.ItemStatus.ACTIVE and row.stock <= row.min_stock
        ]
        counts = inv_schemas.StockSummaryCounts(
            total=len(rows),
            low_stock=len(low),
            out_of_stock=sum(1 for row in rows if row.stock == 0),
        )
        sections[kind] = (rows, low, counts)

    materials, low_materials, material_counts = sections[inv_models.ItemKind.MATERIAL]
    products, low_products, product_counts = sections[inv_models.ItemKind.PRODUCT]
    return inv_schemas.StockSummary(
        materials=materials,
        products=products,
        low_stock_materials=low_materials,
        low_stock_products=low_products,
        material_counts=material_counts,
        product_counts=product_counts,
    )
