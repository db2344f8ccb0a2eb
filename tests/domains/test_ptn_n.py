# tests/domains/test_ptn_n.py

"""
'ptn' 도메인 (공급업체, 고객) 관련 API 엔드포인트에 대한 통합 테스트 모듈입니다.
"""

from datetime import date
from decimal import Decimal

from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.domains.ptn import models as ptn_models
from fims.domains.pur import models as pur_models
from fims.domains.sal import models as sal_models


# =============================================================================
# 1. 공급업체 (Supplier) 테스트
# =============================================================================
async def test_create_supplier(staff_client: AsyncClient):
    payload = {"name": "Steel Works", "contact": "Kim", "email": "sales@steelworks.com"}
    response = await staff_client.post("/api/v1/ptn/suppliers", json=payload)
    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Steel Works"
    assert body["status"] == "active"


async def test_create_supplier_invalid_email(staff_client: AsyncClient):
    response = await staff_client.post("/api/v1/ptn/suppliers", json={"name": "Bad", "email": "not-an-email"})
    assert response.status_code == 422


async def test_viewer_cannot_read_suppliers(viewer_client: AsyncClient):
    response = await viewer_client.get("/api/v1/ptn/suppliers")
    assert response.status_code == 403


async def test_list_suppliers_search_and_status(staff_client: AsyncClient, supplier_factory):
    await supplier_factory("Alpha Metals", contact="Lee")
    await supplier_factory("Beta Plastics", contact="Park")
    await supplier_factory("Gamma Metals", contact="Choi", status=ptn_models.PartnerStatus.INACTIVE)

    response = await staff_client.get("/api/v1/ptn/suppliers", params={"search": "metals"})
    assert response.status_code == 200
    assert [s["name"] for s in response.json()["items"]] == ["Alpha Metals", "Gamma Metals"]

    response = await staff_client.get("/api/v1/ptn/suppliers", params={"search": "park"})
    assert [s["name"] for s in response.json()["items"]] == ["Beta Plastics"]

    response = await staff_client.get("/api/v1/ptn/suppliers", params={"status": "inactive"})
    assert response.json()["meta"]["total_items"] == 1


async def test_update_supplier(staff_client: AsyncClient, supplier_factory):
    supplier = await supplier_factory("Old Name")
    response = await staff_client.put(f"/api/v1/ptn/suppliers/{supplier.id}", json={"name": "New Name"})
    assert response.status_code == 200
    assert response.json()["name"] == "New Name"


async def test_staff_cannot_delete_supplier(staff_client: AsyncClient, supplier_factory):
    supplier = await supplier_factory()
    response = await staff_client.delete(f"/api/v1/ptn/suppliers/{supplier.id}")
    assert response.status_code == 403


async def test_delete_supplier(admin_client: AsyncClient, db_session: AsyncSession, supplier_factory):
    supplier = await supplier_factory()
    supplier_id = supplier.id
    response = await admin_client.delete(f"/api/v1/ptn/suppliers/{supplier_id}")
    assert response.status_code == 204
    assert await db_session.get(ptn_models.Supplier, supplier_id) is None


async def test_delete_supplier_referenced_by_material(admin_client: AsyncClient, supplier_factory, material_factory):
    supplier = await supplier_factory()
    await material_factory("MAT-S1", supplier_id=supplier.id)

    response = await admin_client.delete(f"/api/v1/ptn/suppliers/{supplier.id}")
    assert response.status_code == 400
    assert response.json()["code"] == "REFERENTIAL_INTEGRITY"
    assert response.json()["data"] == {"materials": 1}


async def test_delete_supplier_with_open_purchase_order(
    admin_client: AsyncClient, db_session: AsyncSession, supplier_factory
):
    supplier = await supplier_factory()
    db_session.add(pur_models.PurchaseOrder(
        po_number="PO-OPEN-1", supplier_id=supplier.id, order_date=date.today(), total=Decimal("0")
    ))
    await db_session.commit()

    response = await admin_client.delete(f"/api/v1/ptn/suppliers/{supplier.id}")
    assert response.status_code == 400
    assert response.json()["data"] == {"open_purchase_orders": 1}


async def test_delete_supplier_with_closed_purchase_order_history(
    admin_client: AsyncClient, db_session: AsyncSession, supplier_factory
):
    supplier = await supplier_factory()
    supplier_id = supplier.id
    db_session.add(pur_models.PurchaseOrder(
        po_number="PO-DONE-1", supplier_id=supplier_id, order_date=date.today(),
        status=pur_models.PurchaseOrderStatus.RECEIVED, total=Decimal("0"),
    ))
    db_session.add(pur_models.PurchaseOrder(
        po_number="PO-DONE-2", supplier_id=supplier_id, order_date=date.today(),
        status=pur_models.PurchaseOrderStatus.CANCELLED, total=Decimal("0"),
    ))
    await db_session.commit()

    response = await admin_client.delete(f"/api/v1/ptn/suppliers/{supplier_id}")
    assert response.status_code == 400
    assert response.json()["code"] == "REFERENTIAL_INTEGRITY"
    assert response.json()["data"] == {"purchase_orders": 2}
    assert await db_session.get(ptn_models.Supplier, supplier_id) is not None


async def test_update_supplier_rejects_null_required_fields(staff_client: AsyncClient, supplier_factory):
    supplier = await supplier_factory("Keeps Name")
    for payload in ({"name": None}, {"status": None}):
        response = await staff_client.put(f"/api/v1/ptn/suppliers/{supplier.id}", json=payload)
        assert response.status_code == 422, payload

    # 선택 항목은 null로 비울 수 있습니다.
    response = await staff_client.put(f"/api/v1/ptn/suppliers/{supplier.id}", json={"contact": None})
    assert response.status_code == 200
    assert response.json()["name"] == "Keeps Name"


# =============================================================================
# 2. 고객 (Customer) 테스트
# =============================================================================
async def test_create_customer_requires_phone(staff_client: AsyncClient):
    response = await staff_client.post("/api/v1/ptn/customers", json={"name": "No Phone"})
    assert response.status_code == 422

    response = await staff_client.post(
        "/api/v1/ptn/customers", json={"name": "Wholesale Mart", "phone": "02-555-0000", "type": "wholesale"}
    )
    assert response.status_code == 201
    assert response.json()["type"] == "wholesale"


async def test_list_customers_by_type(staff_client: AsyncClient, customer_factory):
    await customer_factory("Retail One")
    await customer_factory("Bulk Buyer", type=ptn_models.CustomerType.WHOLESALE)

    response = await staff_client.get("/api/v1/ptn/customers", params={"type": "wholesale"})
    assert response.status_code == 200
    assert [c["name"] for c in response.json()["items"]] == ["Bulk Buyer"]


async def test_get_missing_customer(staff_client: AsyncClient):
    response = await staff_client.get("/api/v1/ptn/customers/404")
    assert response.status_code == 404


async def test_delete_customer_with_open_sales_order(
    admin_client: AsyncClient, db_session: AsyncSession, customer_factory
):
    customer = await customer_factory()
    customer_id = customer.id
    order = sal_models.SalesOrder(
        so_number="SO-OPEN-1", customer_id=customer_id, order_date=date.today(),
        status=sal_models.SalesOrderStatus.CONFIRMED, total=Decimal("0"),
    )
    db_session.add(order)
    await db_session.commit()

    response = await admin_client.delete(f"/api/v1/ptn/customers/{customer_id}")
    assert response.status_code == 400
    assert response.json()["data"] == {"open_sales_orders": 1}


async def test_delete_customer_with_sales_order_history(
    admin_client: AsyncClient, db_session: AsyncSession, customer_factory
):
    customer = await customer_factory()
    customer_id = customer.id
    db_session.add(sal_models.SalesOrder(
        so_number="SO-DONE-1", customer_id=customer_id, order_date=date.today(),
        status=sal_models.SalesOrderStatus.SHIPPED, total=Decimal("0"),
    ))
    await db_session.commit()

    response = await admin_client.delete(f"/api/v1/ptn/customers/{customer_id}")
    assert response.status_code == 400
    assert response.json()["code"] == "REFERENTIAL_INTEGRITY"
    assert response.json()["data"] == {"sales_orders": 1}


async def test_update_customer_rejects_null_phone(staff_client: AsyncClient, customer_factory):
    customer = await customer_factory()
    response = await staff_client.put(f"/api/v1/ptn/customers/{customer.id}", json={"phone": None})
    assert response.status_code == 422


async def test_delete_customer(admin_client: AsyncClient, db_session: AsyncSession, customer_factory):
    customer = await customer_factory()
    customer_id = customer.id
    response = await admin_client.delete(f"/api/v1/ptn/customers/{customer_id}")
    assert response.status_code == 204
    assert await db_session.get(ptn_models.Customer, customer_id) is None
