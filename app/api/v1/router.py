from fastapi import APIRouter

# Auth
from app.api.v1.public.auth import router as auth_router

# Public: catalog (rooms, tables, gardens, menu) and quotes
from app.api.v1.public.catalog import (
    rooms_router,
    tables_router,
    gardens_router,
    menu_router,
)
from app.api.v1.public.pricing import router as pricing_router

# Public: bookings, orders, payments
from app.api.v1.public.bookings import router as bookings_router
from app.api.v1.public.orders import router as orders_router
from app.api.v1.public.payments import router as payments_router

# Public: user profile
from app.api.v1.public.me import router as me_router

# Admin / staff
from app.api.v1.admin.bookings import router as admin_bookings_router
from app.api.v1.admin.orders import router as admin_orders_router
from app.api.v1.admin.payments import router as admin_payments_router
from app.api.v1.admin.catalog import (
    rooms_router as admin_rooms_router,
    tables_router as admin_tables_router,
    gardens_router as admin_gardens_router,
    menu_router as admin_menu_router,
    menu_categories_router as admin_menu_categories_router,
)

api_router = APIRouter()

# --- Auth ---
api_router.include_router(auth_router)

# --- Public: catalog & quotes ---
api_router.include_router(rooms_router)
api_router.include_router(tables_router)
api_router.include_router(gardens_router)
api_router.include_router(menu_router)
api_router.include_router(pricing_router)

# --- Public: bookings, orders, payments ---
api_router.include_router(bookings_router)
api_router.include_router(orders_router)
api_router.include_router(payments_router)

# --- Public: profile ---
api_router.include_router(me_router)

# --- Admin ---
api_router.include_router(admin_bookings_router)
api_router.include_router(admin_orders_router)
api_router.include_router(admin_payments_router)
api_router.include_router(admin_rooms_router)
api_router.include_router(admin_tables_router)
api_router.include_router(admin_gardens_router)
api_router.include_router(admin_menu_categories_router)
api_router.include_router(admin_menu_router)
