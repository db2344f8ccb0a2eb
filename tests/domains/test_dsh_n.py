# tests/domains/test_dsh_n.py

"""
'dsh' 도메인 (대시보드) 조회 API에 대한 통합 테스트 모듈입니다.
대시보드는 조회 전용 사용자(VIEWER)도 읽을 수 있어야 합니다.
"""

from datetime import date, timedelta
from decimal import Decimal

from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.domains.inv import models as inv_models
from fims.domains.prd import models as prd_models
from fims.domains.ptn import models as ptn_models
from fims.domains.pur import models as pur_models
from fims.domains.sal import models as sal_models

DSH_URL = "/api/v1/dsh"


async def test_dashboard_requires_login(client: AsyncClient):
    response = await client.get(f"{DSH_URL}/summary")
    assert response.status_code == 401


async def test_dashboard_summary_on_empty_database(viewer_client: AsyncClient):
    response = await viewer_client.get(f"{DSH_URL}/summary")
    assert response.status_code == 200
    body = response.json()
    assert body["purchase_orders"] == {
        "by_status": {"pending": 0, "approved": 0, "received": 0, "cancelled": 0},
        "today": 0,
    }
    assert body["work_orders"]["by_status"] == {"pending": 0, "in_progress": 0, "completed": 0, "cancelled": 0}
    assert body["sales_orders"]["today"] == 0
    assert body["low_stock"] == {"materials": 0, "products": 0}


async def test_dashboard_summary_counts(viewer_client: AsyncClient, db_session: AsyncSession,
                                        supplier_factory, customer_factory, material_factory, product_factory):
    supplier = await supplier_factory()
    customer = await customer_factory()
    product = await product_factory("DSH-P", stock=1, min_stock=2)
    await material_factory("DSH-LOW", stock=3, min_stock=5)
    await material_factory("DSH-OK", stock=30, min_stock=5)
    last_week = date.today() - timedelta(days=7)

    db_session.add_all([
        pur_models.PurchaseOrder(po_number="PO-D1", supplier_id=supplier.id, order_date=date.today(),
                                 total=Decimal("0")),
        pur_models.PurchaseOrder(po_number="PO-D2", supplier_id=supplier.id, order_date=last_week,
                                 status=pur_models.PurchaseOrderStatus.RECEIVED, total=Decimal("0")),
        sal_models.SalesOrder(so_number="SO-D1", customer_id=customer.id, order_date=date.today(),
                              status=sal_models.SalesOrderStatus.CONFIRMED, total=Decimal("0")),
        prd_models.WorkOrder(wo_number="WO-D1", product_id=product.id, quantity_planned=3,
                             status=prd_models.WorkOrderStatus.IN_PROGRESS),
    ])
    await db_session.commit()

    response = await viewer_client.get(f"{DSH_URL}/summary")
    assert response.status_code == 200
    body = response.json()
    assert body["purchase_orders"]["by_status"]["pending"] == 1
    assert body["purchase_orders"]["by_status"]["received"] == 1
    assert body["purchase_orders"]["today"] == 1
    assert body["sales_orders"]["by_status"]["confirmed"] == 1
    assert body["sales_orders"]["today"] == 1
    assert body["work_orders"]["by_status"]["in_progress"] == 1
    assert body["work_orders"]["today"] == 1
    assert body["low_stock"] == {"materials": 1, "products": 1}


async def test_dashboard_stats(viewer_client: AsyncClient, supplier_factory, customer_factory,
                               material_factory, product_factory):
    await material_factory("DSH-A", stock=10, unit_price=Decimal("2.50"))
    await material_factory("DSH-B", stock=3, unit_price=Decimal("1.00"))
    await material_factory("DSH-OFF", stock=100, status=inv_models.ItemStatus.INACTIVE)
    await product_factory("DSH-P", stock=4, unit_price=Decimal("12.50"))
    await supplier_factory("Active One")
    await supplier_factory("Active Two")
    await supplier_factory("Dormant", status=ptn_models.PartnerStatus.INACTIVE)
    await customer_factory()

    response = await viewer_client.get(f"{DSH_URL}/stats")
    assert response.status_code == 200
    body = response.json()
    assert body["inventory"]["materials"] == 2
    assert body["inventory"]["products"] == 1
    assert Decimal(body["inventory"]["material_value"]) == Decimal("28.00")
    assert Decimal(body["inventory"]["product_value"]) == Decimal("50.00")
    assert body["partners"] == {"suppliers": 2, "customers": 1}


async def test_dashboard_recent_activities(admin_client: AsyncClient, viewer_client: AsyncClient,
                                           material_factory, product_factory):
    material = await material_factory("DSH-ACT", stock=5)
    product = await product_factory("DSH-ACT-P", stock=0)
    for item_type, item_id, new_stock in (("material", material.id, 12), ("product", product.id, 6)):
        adjusted = await admin_client.post(
            "/api/v1/inv/stock/adjust", json={"item_type": item_type, "item_id": item_id, "new_stock": new_stock}
        )
        assert adjusted.status_code == 200

    response = await viewer_client.get(f"{DSH_URL}/activities")
    assert response.status_code == 200
    rows = response.json()
    assert len(rows) == 2
    assert {row["item_name"] for row in rows} == {"Material DSH-ACT", "Product DSH-ACT-P"}
    assert {row["created_by_name"] for row in rows} == {"Admin Test User"}
    assert {row["movement_type"] for row in rows} == {"adjust"}

    limited = await viewer_client.get(f"{DSH_URL}/activities", params={"limit": 1})
    assert len(limited.json()) == 1

    invalid = await viewer_client.get(f"{DSH_URL}/activities", params={"limit": 0})
    assert invalid.status_code == 422
