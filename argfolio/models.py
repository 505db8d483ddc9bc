# argfolio/models.py
# argfolio/models.py
import enum
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, JSON, PrimaryKeyConstraint, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


# Enums shared by schemas, calculators and the document store
class MovementType(str, enum.Enum):
    BUY = "BUY"
    SELL = "SELL"
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    FEE = "FEE"
    DIVIDEND = "DIVIDEND"
    INTEREST = "INTEREST"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_OUT = "TRANSFER_OUT"
    DEBT_ADD = "DEBT_ADD"
    DEBT_PAY = "DEBT_PAY"


class Currency(str, enum.Enum):
    ARS = "ARS"
    USD = "USD"
    USDT = "USDT"
    USDC = "USDC"
    BTC = "BTC"
    ETH = "ETH"


class AssetCategory(str, enum.Enum):
    CEDEAR = "CEDEAR"
    CRYPTO = "CRYPTO"
    STABLE = "STABLE"
    FCI = "FCI"
    PF = "PF"
    WALLET = "WALLET"
    USD_CASH = "USD_CASH"
    ARS_CASH = "ARS_CASH"
    DEBT = "DEBT"


class AccountKind(str, enum.Enum):
    BROKER = "BROKER"
    EXCHANGE = "EXCHANGE"
    BANK = "BANK"
    WALLET = "WALLET"
    OTHER = "OTHER"


class FxType(str, enum.Enum):
    """
    ARS/USD rate families quoted in Argentina.

    MEP and CCL are implied by bond arbitrage, CRIPTO by USDT/ARS books.
    BLUE is the informal market and is only ever displayed, never chosen
    as a valuation preference.
    """
    OFICIAL = "OFICIAL"
    BLUE = "BLUE"
    MEP = "MEP"
    CCL = "CCL"
    CRIPTO = "CRIPTO"


class DebtStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class Document(Base):
    """
    One JSON document of the key-value store.

    Every collection (accounts, movements, ...) shares this table; the
    payload is the camelCase wire shape of the record and `id` is the
    record's own stable identifier, so put() is an upsert by id.
    """
    __tablename__ = "documents"
    __table_args__ = (
        PrimaryKeyConstraint("collection", "id", name="pk_documents"),
        Index("ix_documents_collection", "collection"),
    )

    collection: Mapped[str] = mapped_column(String(64))
    id: Mapped[str] = mapped_column(String(255))
    payload: Mapped[dict] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
