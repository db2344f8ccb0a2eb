# tests/domains/test_inv_n.py

"""
'inv' 도메인 (자재, 제품, BOM) 기준정보 API 엔드포인트에 대한 통합 테스트 모듈입니다.
재고 엔진과 재고 수불 API는 test_stock_n.py에서 다룹니다.
"""

from datetime import date
from decimal import Decimal

from httpx import AsyncClient
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.domains.inv import models as inv_models
from fims.domains.prd import models as prd_models
from fims.domains.pur import models as pur_models
from fims.domains.sal import models as sal_models


async def _ledger_entries(db: AsyncSession, item_type: inv_models.ItemKind, item_id: int):
    result = await db.execute(
        select(inv_models.StockLog)
        .where(inv_models.StockLog.item_type == item_type, inv_models.StockLog.item_id == item_id)
    )
    return result.scalars().all()


# =============================================================================
# 1. 자재 (Material) 테스트
# =============================================================================
async def test_create_material_with_initial_stock(staff_client: AsyncClient, db_session: AsyncSession, supplier_factory):
    supplier = await supplier_factory()
    payload = {
        "sku": "MAT-001",
        "name": "Steel Plate",
        "unit": "kg",
        "unit_price": "12.50",
        "stock": 40,
        "min_stock": 10,
        "supplier_id": supplier.id,
    }
    response = await staff_client.post("/api/v1/inv/materials", json=payload)
    assert response.status_code == 201
    body = response.json()
    assert body["stock"] == 40
    assert Decimal(body["unit_price"]) == Decimal("12.50")

    entries = await _ledger_entries(db_session, inv_models.ItemKind.MATERIAL, body["id"])
    assert len(entries) == 1
    assert entries[0].movement_type == inv_models.MovementType.ADJUST
    assert entries[0].reference_type == inv_models.ReferenceType.ADJUSTMENT
    assert entries[0].quantity == 40
    assert entries[0].notes == "Initial stock"


async def test_create_material_without_stock_writes_no_ledger(staff_client: AsyncClient, db_session: AsyncSession):
    response = await staff_client.post("/api/v1/inv/materials", json={"sku": "MAT-002", "name": "Bolt"})
    assert response.status_code == 201
    assert await _ledger_entries(db_session, inv_models.ItemKind.MATERIAL, response.json()["id"]) == []


async def test_create_material_negative_stock_rejected(staff_client: AsyncClient):
    response = await staff_client.post("/api/v1/inv/materials", json={"sku": "MAT-NEG", "name": "X", "stock": -1})
    assert response.status_code == 422


async def test_create_material_duplicate_sku(staff_client: AsyncClient, material_factory):
    await material_factory("MAT-DUP")
    response = await staff_client.post("/api/v1/inv/materials", json={"sku": "MAT-DUP", "name": "Again"})
    assert response.status_code == 400
    assert response.json()["code"] == "DUPLICATE"


async def test_create_material_unknown_supplier(staff_client: AsyncClient):
    response = await staff_client.post(
        "/api/v1/inv/materials", json={"sku": "MAT-NS", "name": "Orphan", "supplier_id": 777}
    )
    assert response.status_code == 404


async def test_update_material_ignores_stock(staff_client: AsyncClient, material_factory):
    material = await material_factory("MAT-UPD", stock=5)
    response = await staff_client.put(
        f"/api/v1/inv/materials/{material.id}", json={"name": "Renamed", "stock": 999}
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"
    assert response.json()["stock"] == 5


async def test_update_material_sku_conflict(staff_client: AsyncClient, material_factory):
    await material_factory("MAT-A")
    other = await material_factory("MAT-B")
    response = await staff_client.put(f"/api/v1/inv/materials/{other.id}", json={"sku": "MAT-A"})
    assert response.status_code == 400


async def test_list_materials_search(staff_client: AsyncClient, material_factory):
    await material_factory("BOLT-01", name="Hex Bolt")
    await material_factory("NUT-01", name="Hex Nut")
    await material_factory("WSH-01", name="Washer")

    response = await staff_client.get("/api/v1/inv/materials", params={"search": "hex"})
    assert response.status_code == 200
    assert [m["sku"] for m in response.json()["items"]] == ["BOLT-01", "NUT-01"]

    response = await staff_client.get("/api/v1/inv/materials", params={"search": "wsh"})
    assert [m["sku"] for m in response.json()["items"]] == ["WSH-01"]


async def test_low_stock_materials(staff_client: AsyncClient, material_factory):
    await material_factory("LOW-1", stock=3, min_stock=5)
    await material_factory("LOW-2", stock=0, min_stock=1)
    await material_factory("OK-1", stock=50, min_stock=5)
    await material_factory("LOW-OFF", stock=0, min_stock=5, status=inv_models.ItemStatus.INACTIVE)

    response = await staff_client.get("/api/v1/inv/materials/low-stock")
    assert response.status_code == 200
    assert [m["sku"] for m in response.json()] == ["LOW-2", "LOW-1"]


async def test_delete_material_used_in_bom(admin_client: AsyncClient, material_factory, product_factory, bom_factory):
    material = await material_factory("MAT-BOM")
    product = await product_factory("PRD-BOM")
    await bom_factory(product.id, material.id, 2)

    response = await admin_client.delete(f"/api/v1/inv/materials/{material.id}")
    assert response.status_code == 400
    assert response.json()["code"] == "REFERENTIAL_INTEGRITY"


async def test_delete_material_with_open_po_line(
    admin_client: AsyncClient, db_session: AsyncSession, supplier_factory, material_factory
):
    supplier = await supplier_factory()
    material = await material_factory("MAT-PO")
    order = pur_models.PurchaseOrder(
        po_number="PO-M-1", supplier_id=supplier.id, order_date=date.today(),
        status=pur_models.PurchaseOrderStatus.APPROVED, total=Decimal("10"),
    )
    order.items = [pur_models.POItem(material_id=material.id, quantity=1, price=Decimal("10"), subtotal=Decimal("10"))]
    db_session.add(order)
    await db_session.commit()

    response = await admin_client.delete(f"/api/v1/inv/materials/{material.id}")
    assert response.status_code == 400
    assert response.json()["data"] == {"open_purchase_order_lines": 1}


async def test_delete_material_with_received_po_history(
    admin_client: AsyncClient, db_session: AsyncSession, supplier_factory, material_factory
):
    supplier = await supplier_factory()
    material = await material_factory("MAT-HIST")
    material_id = material.id
    order = pur_models.PurchaseOrder(
        po_number="PO-M-2", supplier_id=supplier.id, order_date=date.today(),
        status=pur_models.PurchaseOrderStatus.RECEIVED, total=Decimal("10"),
    )
    order.items = [pur_models.POItem(material_id=material_id, quantity=1, price=Decimal("10"), subtotal=Decimal("10"))]
    db_session.add(order)
    await db_session.commit()

    response = await admin_client.delete(f"/api/v1/inv/materials/{material_id}")
    assert response.status_code == 400
    assert response.json()["code"] == "REFERENTIAL_INTEGRITY"
    assert response.json()["data"] == {"purchase_order_lines": 1}
    assert await db_session.get(inv_models.Material, material_id) is not None


async def test_update_material_rejects_null_required_fields(staff_client: AsyncClient, material_factory):
    material = await material_factory("MAT-NULL", name="Keeps Name")
    for field in ("sku", "name", "unit", "unit_price", "min_stock", "status"):
        response = await staff_client.put(f"/api/v1/inv/materials/{material.id}", json={field: None})
        assert response.status_code == 422, field

    # 선택 항목은 null로 비울 수 있습니다.
    response = await staff_client.put(f"/api/v1/inv/materials/{material.id}", json={"category": None})
    assert response.status_code == 200
    assert response.json()["name"] == "Keeps Name"


async def test_delete_material(admin_client: AsyncClient, staff_client: AsyncClient, db_session: AsyncSession, material_factory):
    material = await material_factory("MAT-DEL")
    material_id = material.id

    forbidden = await staff_client.delete(f"/api/v1/inv/materials/{material_id}")
    assert forbidden.status_code == 403

    response = await admin_client.delete(f"/api/v1/inv/materials/{material_id}")
    assert response.status_code == 204
    assert await db_session.get(inv_models.Material, material_id) is None


# =============================================================================
# 2. 제품 (Product) 테스트
# =============================================================================
async def test_create_product(staff_client: AsyncClient):
    payload = {"sku": "PRD-001", "name": "Chair", "type": "furniture", "size": "M", "color": "black", "stock": 0}
    response = await staff_client.post("/api/v1/inv/products", json=payload)
    assert response.status_code == 201
    assert response.json()["color"] == "black"


async def test_list_products_filter_by_type(staff_client: AsyncClient, product_factory):
    await product_factory("PRD-T1", type="furniture")
    await product_factory("PRD-T2", type="lighting")

    response = await staff_client.get("/api/v1/inv/products", params={"type": "lighting"})
    assert [p["sku"] for p in response.json()["items"]] == ["PRD-T2"]


async def test_delete_product_with_open_work_order(
    admin_client: AsyncClient, db_session: AsyncSession, product_factory
):
    product = await product_factory("PRD-WO")
    db_session.add(prd_models.WorkOrder(wo_number="WO-P-1", product_id=product.id, quantity_planned=5))
    await db_session.commit()

    response = await admin_client.delete(f"/api/v1/inv/products/{product.id}")
    assert response.status_code == 400
    assert response.json()["data"] == {"open_work_orders": 1}


async def test_delete_product_with_closed_order_history(
    admin_client: AsyncClient, db_session: AsyncSession, product_factory, customer_factory
):
    product = await product_factory("PRD-HIST")
    product_id = product.id
    customer = await customer_factory()
    order = sal_models.SalesOrder(
        so_number="SO-P-1", customer_id=customer.id, order_date=date.today(),
        status=sal_models.SalesOrderStatus.SHIPPED, total=Decimal("5"),
    )
    order.items = [sal_models.SOItem(product_id=product_id, quantity=1, price=Decimal("5"), subtotal=Decimal("5"))]
    db_session.add(order)
    db_session.add(prd_models.WorkOrder(
        wo_number="WO-P-2", product_id=product_id, quantity_planned=5, quantity_produced=5,
        status=prd_models.WorkOrderStatus.COMPLETED,
    ))
    await db_session.commit()

    response = await admin_client.delete(f"/api/v1/inv/products/{product_id}")
    assert response.status_code == 400
    assert response.json()["code"] == "REFERENTIAL_INTEGRITY"
    assert response.json()["data"] == {"sales_order_lines": 1}


async def test_delete_product_with_completed_work_order(
    admin_client: AsyncClient, db_session: AsyncSession, product_factory
):
    product = await product_factory("PRD-WO-DONE")
    product_id = product.id
    db_session.add(prd_models.WorkOrder(
        wo_number="WO-P-3", product_id=product_id, quantity_planned=2, quantity_produced=2,
        status=prd_models.WorkOrderStatus.COMPLETED,
    ))
    await db_session.commit()

    response = await admin_client.delete(f"/api/v1/inv/products/{product_id}")
    assert response.status_code == 400
    assert response.json()["data"] == {"work_orders": 1}
    assert await db_session.get(inv_models.Product, product_id) is not None


async def test_update_product_rejects_null_required_fields(staff_client: AsyncClient, product_factory):
    product = await product_factory("PRD-NULL")
    for field in ("sku", "name", "unit_price", "min_stock", "status"):
        response = await staff_client.put(f"/api/v1/inv/products/{product.id}", json={field: None})
        assert response.status_code == 422, field


# =============================================================================
# 3. BOM 테스트
# =============================================================================
async def test_create_bom_entry(staff_client: AsyncClient, material_factory, product_factory):
    material = await material_factory("MAT-B1")
    product = await product_factory("PRD-B1")

    payload = {"product_id": product.id, "material_id": material.id, "quantity": "2.5"}
    response = await staff_client.post("/api/v1/inv/bom", json=payload)
    assert response.status_code == 201
    assert Decimal(response.json()["quantity"]) == Decimal("2.5")

    duplicate = await staff_client.post("/api/v1/inv/bom", json=payload)
    assert duplicate.status_code == 400
    assert duplicate.json()["code"] == "DUPLICATE"


async def test_create_bom_entry_validation(staff_client: AsyncClient, material_factory, product_factory):
    material = await material_factory("MAT-B2")
    product = await product_factory("PRD-B2")

    zero = await staff_client.post(
        "/api/v1/inv/bom", json={"product_id": product.id, "material_id": material.id, "quantity": 0}
    )
    assert zero.status_code == 422

    missing = await staff_client.post(
        "/api/v1/inv/bom", json={"product_id": product.id, "material_id": 999, "quantity": 1}
    )
    assert missing.status_code == 404


async def test_update_bom_entry_to_existing_pair(staff_client: AsyncClient, material_factory, product_factory, bom_factory):
    first = await material_factory("MAT-B3")
    second = await material_factory("MAT-B4")
    product = await product_factory("PRD-B3")
    await bom_factory(product.id, first.id, 1)
    other = await bom_factory(product.id, second.id, 1)

    response = await staff_client.put(f"/api/v1/inv/bom/{other.id}", json={"material_id": first.id})
    assert response.status_code == 400

    response = await staff_client.put(f"/api/v1/inv/bom/{other.id}", json={"quantity": "4"})
    assert response.status_code == 200
    assert Decimal(response.json()["quantity"]) == Decimal("4")

    for field in ("product_id", "material_id", "quantity"):
        response = await staff_client.put(f"/api/v1/inv/bom/{other.id}", json={field: None})
        assert response.status_code == 422, field


async def test_bom_by_product_and_filtered_list(staff_client: AsyncClient, material_factory, product_factory, bom_factory):
    m1 = await material_factory("MAT-L1")
    m2 = await material_factory("MAT-L2")
    p1 = await product_factory("PRD-L1")
    p2 = await product_factory("PRD-L2")
    await bom_factory(p1.id, m1.id, 1)
    await bom_factory(p1.id, m2.id, 3)
    await bom_factory(p2.id, m1.id, 2)

    response = await staff_client.get(f"/api/v1/inv/bom/product/{p1.id}")
    assert response.status_code == 200
    assert [entry["material_id"] for entry in response.json()] == [m1.id, m2.id]

    response = await staff_client.get("/api/v1/inv/bom", params={"material_id": m1.id})
    assert response.json()["meta"]["total_items"] == 2


async def test_delete_bom_entry(admin_client: AsyncClient, db_session: AsyncSession, material_factory, product_factory, bom_factory):
    material = await material_factory("MAT-BD")
    product = await product_factory("PRD-BD")
    entry = await bom_factory(product.id, material.id, 1)

    response = await admin_client.delete(f"/api/v1/inv/bom/{entry.id}")
    assert response.status_code == 204

    count = await db_session.execute(select(func.count()).select_from(inv_models.BillOfMaterial))
    assert count.scalar_one() == 0
