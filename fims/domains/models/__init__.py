# fims/domains/models/__init__.py

"""
이 파일은 모든 도메인의 SQLModel 모델들을 한 곳에서 중앙 관리하여,
다른 모듈에서 쉽게 임포트할 수 있도록 하는 역할을 합니다.
SQLModel.metadata가 모든 테이블을 인식하도록 보장합니다.
"""

# usr (User, UserRole)
from fims.domains.usr.models import User, UserRole

# ptn (Supplier, Customer)
from fims.domains.ptn.models import Supplier, Customer, PartnerStatus, CustomerType

# inv (Material, Product, BillOfMaterial, StockLog)
from fims.domains.inv.models import (
    Material, Product, BillOfMaterial, StockLog,
    ItemStatus, ItemKind, MovementType, ReferenceType,
)

# pur (PurchaseOrder, POItem)
from fims.domains.pur.models import PurchaseOrder, POItem, PurchaseOrderStatus

# prd (WorkOrder)
from fims.domains.prd.models import WorkOrder, WorkOrderStatus

# sal (SalesOrder, SOItem)
from fims.domains.sal.models import SalesOrder, SOItem, SalesOrderStatus

__all__ = [
    "User", "UserRole",
    "Supplier", "Customer", "PartnerStatus", "CustomerType",
    "Material", "Product", "BillOfMaterial", "StockLog",
    "ItemStatus", "ItemKind", "MovementType", "ReferenceType",
    "PurchaseOrder", "POItem", "PurchaseOrderStatus",
    "WorkOrder", "WorkOrderStatus",
    "SalesOrder", "SOItem", "SalesOrderStatus",
]
