from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Text, DateTime, Date, Numeric, Boolean, JSON
from sqlalchemy.orm import relationship
from app.database import Base


class Proposal(Base):
    __tablename__ = 'sales_proposals'
    # Deleted ids are never handed out again (per-proposal locks are keyed by id)
    __table_args__ = {'sqlite_autoincrement': True}

    id = Column(Integer, primary_key=True)
    # Proposal label, e.g. "264.24 – Orlando"
    name = Column(String(255), nullable=False)
    client_name = Column(String(255), nullable=True, index=True)
    client_type = Column(String(50), nullable=True)
    proposal_date = Column(Date, nullable=True, index=True)
    project_type = Column(String(50), nullable=True)
    contract_type = Column(String(50), nullable=True)
    # Names from the service_types catalog
    service_types = Column(JSON, nullable=True)
    structure_weight = Column(Numeric(12, 2), nullable=True)  # kg
    price_per_kg = Column(Numeric(12, 2), nullable=True)
    material_total = Column(Numeric(12, 2), nullable=True)
    negotiation_days = Column(Integer, nullable=True)
    repeat_client = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)

    total_value = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    commission_percent = Column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    # Ledger-controlled: written only by app.services.payments
    amount_paid = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    commission_paid = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    client_payments = relationship(
        "ClientPayment",
        back_populates="proposal",
        cascade="all, delete-orphan",
        order_by="(ClientPayment.payment_date, ClientPayment.id)",
    )
    commission_payments = relationship(
        "CommissionPayment",
        back_populates="proposal",
        cascade="all, delete-orphan",
        order_by="(CommissionPayment.payment_date, CommissionPayment.id)",
    )

    CLIENT_TYPES = [
        'Residential',
        'Commercial',
        'Industrial',
        'Agribusiness',
        'Public Sector',
    ]

    PROJECT_TYPES = [
        'PE',
        'PE + PC',
        'None',
    ]

    CONTRACT_TYPES = [
        'Supply Only',
        'Supply and Install',
        'Install Only',
    ]

    # Fields general updates may never write
    LEDGER_FIELDS = ('amount_paid', 'commission_paid')

    @property
    def derived(self):
        """Open balance and commission figures for this proposal."""
        from app.services.ledger import compute_derived
        return compute_derived(self)

    def __repr__(self):
        return f"<Proposal {self.name}>"
