"""
Commission schemas: distribution calls, configs, ledger entries.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from commission_ledger.models import ActorRole, LedgerStatus

Percent = Decimal


class DistributeRequest(BaseModel):
    """Completed transaction reported by a service vertical."""

    service_type: str = Field(..., min_length=1, max_length=50)
    transaction_id: int = Field(..., ge=1)
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    provider: Optional[str] = Field(None, max_length=100)
    service_agent_id: Optional[int] = None
    pincode: Optional[str] = Field(None, max_length=10)
    registered_user_id: Optional[int] = None

    @model_validator(mode="after")
    def require_originator(self):
        if self.service_agent_id is None and not self.pincode:
            raise ValueError("service_agent_id or pincode is required")
        return self


class PayeeCommissionResponse(BaseModel):
    actor_id: int
    role: ActorRole
    rate: Decimal
    amount: Decimal
    ledger_entry_id: int
    status: LedgerStatus


class DistributionResponse(BaseModel):
    """Result of a distribution (or of its replay)."""

    distribution_id: int
    service_type: str
    transaction_id: int
    sequence: int
    amount: Decimal
    provider: Optional[str]
    config_id: int
    total_distributed: Decimal
    breakdown: Dict[ActorRole, Decimal]
    payees: List[PayeeCommissionResponse]
    replayed: bool = False

    @classmethod
    def from_result(cls, result) -> "DistributionResponse":
        return cls(
            distribution_id=result.distribution_id,
            service_type=result.service_type,
            transaction_id=result.transaction_id,
            sequence=result.sequence,
            amount=result.amount,
            provider=result.provider,
            config_id=result.config_id,
            total_distributed=result.total_distributed,
            breakdown=result.breakdown,
            payees=[PayeeCommissionResponse(**vars(p)) for p in result.payees],
            replayed=result.replayed,
        )


class ConfigBase(BaseModel):
    service_agent_pct: Percent = Field(Decimal("0"), ge=0, le=100)
    taluk_manager_pct: Percent = Field(Decimal("0"), ge=0, le=100)
    branch_manager_pct: Percent = Field(Decimal("0"), ge=0, le=100)
    admin_pct: Percent = Field(Decimal("0"), ge=0, le=100)
    registered_user_pct: Percent = Field(Decimal("0"), ge=0, le=100)


class ConfigCreate(ConfigBase):
    """New commission table (admin only)."""

    service_type: str = Field(..., min_length=1, max_length=50)
    provider: Optional[str] = Field(None, max_length=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_peak_rate: bool = False
    season_name: Optional[str] = Field(None, max_length=100)
    is_active: bool = True

    @model_validator(mode="after")
    def check_totals(self):
        total = (
            self.service_agent_pct + self.taluk_manager_pct + self.branch_manager_pct
            + self.admin_pct + self.registered_user_pct
        )
        if total > 100:
            raise ValueError(f"Percentages add up to {total}%, more than 100%")
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date is after end_date")
        return self

    def percentages(self) -> Dict[ActorRole, Decimal]:
        return {
            ActorRole.SERVICE_AGENT: self.service_agent_pct,
            ActorRole.TALUK_MANAGER: self.taluk_manager_pct,
            ActorRole.BRANCH_MANAGER: self.branch_manager_pct,
            ActorRole.ADMIN: self.admin_pct,
            ActorRole.REGISTERED_USER: self.registered_user_pct,
        }


class ConfigUpdate(BaseModel):
    """Partial update; only the fields sent are changed."""

    service_agent_pct: Optional[Percent] = Field(None, ge=0, le=100)
    taluk_manager_pct: Optional[Percent] = Field(None, ge=0, le=100)
    branch_manager_pct: Optional[Percent] = Field(None, ge=0, le=100)
    admin_pct: Optional[Percent] = Field(None, ge=0, le=100)
    registered_user_pct: Optional[Percent] = Field(None, ge=0, le=100)
    provider: Optional[str] = Field(None, max_length=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_peak_rate: Optional[bool] = None
    season_name: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None


class ConfigResponse(ConfigBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    service_type: str
    provider: Optional[str]
    total_pct: Decimal
    start_date: Optional[date]
    end_date: Optional[date]
    is_peak_rate: bool
    season_name: Optional[str]
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime]


class LedgerEntryResponse(BaseModel):
    """Commission ledger entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    distribution_id: int
    payee_id: int
    payee_role: ActorRole
    service_type: str
    transaction_id: int
    transaction_amount: Decimal
    commission_rate: Decimal
    commission_amount: Decimal
    provider: Optional[str]
    description: Optional[str]
    status: LedgerStatus
    paid_at: Optional[datetime]
    created_at: datetime


class MarkPaidRequest(BaseModel):
    entry_ids: List[int] = Field(..., min_length=1, max_length=1000)


class MarkPaidResponse(BaseModel):
    requested: int
    paid: int


class RedistributeRequest(BaseModel):
    service_type: str = Field(..., min_length=1, max_length=50)
    transaction_id: int = Field(..., ge=1)
    reason: Optional[str] = Field(None, max_length=500)
