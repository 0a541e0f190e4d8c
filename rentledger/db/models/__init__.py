from rentledger.db.models.user import User
from rentledger.db.models.property import Property
from rentledger.db.models.unit import Unit
from rentledger.db.models.tenant import Tenant
from rentledger.db.models.lease import Lease
from rentledger.db.models.invoice import Invoice, InvoiceItem
from rentledger.db.models.rent_installment import RentInstallment
from rentledger.db.models.payment import Payment, PaymentAllocation
from rentledger.db.models.meter_reading import MeterReading, PumpTopup
from rentledger.db.models.maintenance_request import MaintenanceRequest

__all__ = [
    "User",
    "Property",
    "Unit",
    "Tenant",
    "Lease",
    "Invoice",
    "InvoiceItem",
    "RentInstallment",
    "Payment",
    "PaymentAllocation",
    "MeterReading",
    "PumpTopup",
    "MaintenanceRequest",
]
