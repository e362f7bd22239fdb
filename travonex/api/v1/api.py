from fastapi import APIRouter
from travonex.api.v1.routes.fares import router as fares_router
from travonex.api.v1.routes.bookings import router as bookings_router
from travonex.api.v1.routes.coupons import router as coupons_router
from travonex.api.v1.routes.leads import router as leads_router
from travonex.api.v1.routes.credits import router as credits_router
from travonex.api.v1.routes.wallet import router as wallet_router
from travonex.api.v1.routes.admin import router as admin_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(fares_router)
api_router.include_router(bookings_router)
api_router.include_router(coupons_router)
api_router.include_router(leads_router)
api_router.include_router(credits_router)
api_router.include_router(wallet_router)
api_router.include_router(admin_router)
