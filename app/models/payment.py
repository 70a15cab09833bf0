from datetime import datetime
from sqlalchemy import Column, Integer, Text, DateTime, Date, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import declared_attr, relationship
from app.database import Base


class PaymentEntryMixin:
    """Columns shared by both payment ledgers.

    Entries are immutable once written: they are added or deleted, never
    edited in place.
    """

    id = Column(Integer, primary_key=True)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_date = Column(Date, nullable=False, index=True)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    @declared_attr
    def proposal_id(cls):
        return Column(
            Integer,
            ForeignKey('sales_proposals.id', ondelete='CASCADE'),
            nullable=False,
            index=True,
        )

    @declared_attr
    def __table_args__(cls):
        return (
            CheckConstraint('amount > 0', name=f'ck_{cls.__tablename__}_amount_positive'),
        )


class ClientPayment(PaymentEntryMixin, Base):
    """Installment paid by the client against a proposal."""
    __tablename__ = 'client_payments'

    proposal = relationship("Proposal", back_populates="client_payments")

    def __repr__(self):
        return f"<ClientPayment {self.amount} on {self.payment_date}>"


class CommissionPayment(PaymentEntryMixin, Base):
    """Commission paid out to the partner for a proposal."""
    __tablename__ = 'commission_payments'

    proposal = relationship("Proposal", back_populates="commission_payments")

    def __repr__(self):
        return f"<CommissionPayment {self.amount} on {self.payment_date}>"
