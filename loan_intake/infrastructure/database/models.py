"""SQLAlchemy ORM models for loan applications"""

from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class LoanRequest(Base):
    """Submitted loan application together with its decision"""

    __tablename__ = "loan_request"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_loan_request_amount_positive"),
        CheckConstraint("term_months > 0", name="ck_loan_request_term_positive"),
        Index("idx_loan_request_status", "status"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    legal_id = Column(String(12), nullable=False)
    full_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    term_months = Column(Integer, nullable=False)
    income = Column(Numeric(14, 2), nullable=True)
    status = Column(String(20), nullable=False, default="pending")  # pending | inadmissible | rejected | approved
    score = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
