from fastapi import APIRouter

from laundry.api.v1.endpoints import orders


api_router = APIRouter(prefix="/api/v1")

api_router.include_router(orders.router, prefix="/orders")
