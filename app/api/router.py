# app/api/router.py
from fastapi import APIRouter

from app.api.routes_system import router as system_router
from app.api.routes_purchase_orders import router as purchase_orders_router
from app.api.routes_transfers import router as transfers_router
from app.api.routes_waste_logs import router as waste_router
from app.api.routes_suppliers import router as suppliers_router
from app.api.routes_inventory import router as inventory_router
from app.api.routes_notifications import router as notifications_router
from app.api.routes_reports import router as reports_router

api_router = APIRouter()

api_router.include_router(system_router, tags=["system"])
api_router.include_router(purchase_orders_router)
api_router.include_router(transfers_router)
api_router.include_router(waste_router)
api_router.include_router(suppliers_router)
api_router.include_router(inventory_router)
api_router.include_router(notifications_router)
api_router.include_router(reports_router)
