from fastapi import APIRouter

from rentledger.api.routers import (
    auth,
    billing,
    invoices,
    leases,
    maintenance_requests,
    meter_readings,
    payment_allocations,
    payments,
    properties,
    rent_installments,
    tenants,
    units,
    users,
)

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(properties.router)
api_router.include_router(units.router)
api_router.include_router(tenants.router)
api_router.include_router(invoices.router)
api_router.include_router(payments.router)
api_router.include_router(payment_allocations.router)
api_router.include_router(leases.router)
api_router.include_router(rent_installments.router)
api_router.include_router(meter_readings.router)
api_router.include_router(meter_readings.topups_router)
api_router.include_router(maintenance_requests.router)
api_router.include_router(billing.router)
