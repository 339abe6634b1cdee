"""
API v1 Router - Sunkool Orders
"""
from fastapi import APIRouter
from sunkool.api.v1.endpoints import (
    orders,
    dispatches,
    production_records,
    payments,
)

router = APIRouter()

# Orders, lines, status and timeline
router.include_router(orders.router)

# Dispatches and returns
router.include_router(dispatches.router)

# Production records
router.include_router(production_records.router)

# Payment status, follow-ups and payment records
router.include_router(payments.router)
