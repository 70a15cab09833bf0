from app.models.proposal import Proposal
from app.models.payment import ClientPayment, CommissionPayment
from app.models.partner import Partner
from app.models.service_type import ServiceType

__all__ = [
    "Proposal",
    "ClientPayment",
    "CommissionPayment",
    "Partner",
    "ServiceType",
]
