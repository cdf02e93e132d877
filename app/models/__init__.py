# app/models/__init__.py
from .catalog import Branch, Ingredient
from .inventory import BranchInventory, InventoryTransaction, TxnType, RefType
from .supplier import Supplier
from .purchase_order import PurchaseOrder, PurchaseOrderItem, POStatus
from .transfer import InventoryTransfer, InventoryTransferItem, TransferStatus
from .waste import WasteLog, WasteReason
from .notification import Notification, NotificationType, Priority
from .sales import SalesOrder, SalesOrderItem

__all__ = [
    "Branch",
    "Ingredient",
    "BranchInventory",
    "InventoryTransaction",
    "TxnType",
    "RefType",
    "Supplier",
    "PurchaseOrder",
    "PurchaseOrderItem",
    "POStatus",
    "InventoryTransfer",
    "InventoryTransferItem",
    "TransferStatus",
    "WasteLog",
    "WasteReason",
    "Notification",
    "NotificationType",
    "Priority",
    "SalesOrder",
    "SalesOrderItem",
]
