"""
Commission distribution: the ledger's unit of work.

For one completed transaction the distributor
1. returns the stored result if the transaction was already distributed,
2. resolves the payee chain (agent -> taluk -> branch -> admin),
3. loads the active commission config,
4. computes every payee's cut,
5. writes the distribution header, one ledger row per payee and the wallet
   credits in a single database transaction.

A missing hierarchy role aborts the whole distribution: nothing is
credited. Any failure rolls back everything, so a retry always starts from
a clean state.

The distributor commits and rolls back its session. Give it a session that
carries no uncommitted work of the caller, otherwise a failed distribution
would roll that work back too.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from commission_ledger.config import settings
from commission_ledger.errors import (
    ActorNotFound,
    AlreadyDistributed,
    CommissionError,
    DistributionNotFound,
    HierarchyIntegrityError,
    InvalidCommissionInput,
    PrivilegeRequired,
)
from commission_ledger.models import (
    Actor,
    ActorRole,
    AuditAction,
    CommissionDistribution,
    CommissionTransaction,
    LedgerStatus,
)
from commission_ledger.repositories import ActorRepository, ConfigRepository, LedgerRepository
from commission_ledger.services.commission import (
    ZERO,
    calculate_commissions,
    to_money,
    total_commission,
)
from commission_ledger.services.config_store import CommissionConfigStore
from commission_ledger.services.hierarchy import HierarchyResolver, Payee
from commission_ledger.services.wallet import WalletAccessor
from commission_ledger.utils.audit import log_action

logger = logging.getLogger(__name__)


@dataclass
class TransactionEvent:
    """A completed transaction reported by a service vertical."""

    service_type: str
    transaction_id: int
    amount: Decimal
    provider: Optional[str] = None
    service_agent_id: Optional[int] = None
    # Used to look the agent up when service_agent_id is not known
    pincode: Optional[str] = None
    registered_user_id: Optional[int] = None


@dataclass
class PayeeCommission:
    actor_id: int
    role: ActorRole
    rate: Decimal
    amount: Decimal
    ledger_entry_id: int
    status: LedgerStatus = LedgerStatus.PENDING


@dataclass
class DistributionResult:
    distribution_id: int
    service_type: str
    transaction_id: int
    sequence: int
    amount: Decimal
    provider: Optional[str]
    config_id: int
    total_distributed: Decimal
    breakdown: Dict[ActorRole, Decimal] = field(default_factory=dict)
    payees: List[PayeeCommission] = field(default_factory=list)
    replayed: bool = False

    @classmethod
    def from_distribution(
        cls,
        distribution: CommissionDistribution,
        entries: Optional[Iterable[CommissionTransaction]] = None,
        replayed: bool = False,
    ) -> "DistributionResult":
        entries = list(entries if entries is not None else distribution.entries)
        payees = [
            PayeeCommission(
                actor_id=entry.payee_id,
                role=entry.payee_role,
                rate=entry.commission_rate,
                amount=to_money(entry.commission_amount),
                ledger_entry_id=entry.id,
                status=entry.status,
            )
            for entry in entries
        ]
        return cls(
            distribution_id=distribution.id,
            service_type=distribution.service_type,
            transaction_id=distribution.transaction_id,
            sequence=distribution.sequence,
            amount=to_money(distribution.amount),
            provider=distribution.provider,
            config_id=distribution.config_id,
            total_distributed=to_money(distribution.total_distributed),
            breakdown={p.role: p.amount for p in payees},
            payees=payees,
            replayed=replayed,
        )


class CommissionDistributor:
    """
    Orchestrates hierarchy resolution, calculation, ledger writes and
    wallet credits. Collaborators are injected; defaults are built on the
    given session.
    """

    def __init__(
        self,
        session: AsyncSession,
        actors: Optional[ActorRepository] = None,
        configs: Optional[CommissionConfigStore] = None,
        ledger: Optional[LedgerRepository] = None,
        wallet: Optional[WalletAccessor] = None,
        resolver: Optional[HierarchyResolver] = None,
    ):
        self.session = session
        self.actors = actors or ActorRepository(session)
        self.configs = configs or CommissionConfigStore(session, ConfigRepository(session))
        self.ledger = ledger or LedgerRepository(session)
        self.wallet = wallet or WalletAccessor(session)
        self.resolver = resolver or HierarchyResolver(self.actors, settings.max_hierarchy_depth)

    # ── distribution ─────────────────────────────────────

    async def distribute(self, event: TransactionEvent) -> DistributionResult:
        """
        Distribute commission for a completed transaction, exactly once.

        A repeated call for the same (service_type, transaction_id) returns
        the stored result with replayed=True and credits nothing.

        Raises:
            ConfigNotFound, HierarchyIncomplete, HierarchyCycle,
            HierarchyTooDeep, ActorNotFound, InvalidCommissionInput
        """
        prior = await self.ledger.get_distribution(event.service_type, event.transaction_id)
        if prior is not None:
            logger.info(
                f"Commission for {event.service_type}#{event.transaction_id} already "
                f"distributed (distribution {prior.id}), returning stored result"
            )
            result = DistributionResult.from_distribution(prior, replayed=True)
            # end the read-only transaction
            await self.session.rollback()
            return result

        try:
            result = await self._apply(event, sequence=0)
            await self.session.commit()
        except AlreadyDistributed:
            # Lost the race against a concurrent call for the same transaction
            await self.session.rollback()
            prior = await self.ledger.get_distribution(event.service_type, event.transaction_id)
            if prior is None:
                raise
            logger.info(
                f"Concurrent distribution of {event.service_type}#{event.transaction_id} "
                f"won by distribution {prior.id}"
            )
            result = DistributionResult.from_distribution(prior, replayed=True)
            await self.session.rollback()
            return result
        except HierarchyIntegrityError as e:
            await self.session.rollback()
            logger.critical(
                f"Corrupt actor hierarchy while distributing "
                f"{event.service_type}#{event.transaction_id}: {e}"
            )
            raise
        except CommissionError as e:
            await self.session.rollback()
            logger.error(
                f"Commission not distributed for {event.service_type}#{event.transaction_id}: {e}"
            )
            raise
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            f"Distributed {result.total_distributed} for {event.service_type}#{event.transaction_id} "
            f"to {len(result.payees)} payees (distribution {result.distribution_id})"
        )
        return result

    async def _payees_for(self, event: TransactionEvent) -> Tuple[int, List[Payee]]:
        """Originating agent id and every payee of the event."""
        if event.service_agent_id is not None:
            agent_id = (await self.resolver.get_service_agent(event.service_agent_id)).id
        elif event.pincode:
            agent_id = (await self.resolver.find_service_agent(event.pincode)).id
        else:
            raise InvalidCommissionInput("service_agent_id or pincode is required")

        chain = await self.resolver.resolve_payees(agent_id)
        payees = list(chain.members)

        user_id = event.registered_user_id
        if user_id is not None and user_id != agent_id:
            user = await self.actors.get(user_id)
            if user is None:
                raise ActorNotFound(user_id)
            if user_id in chain.actor_ids:
                # Already paid through the hierarchy; one ledger row per payee
                logger.warning(
                    f"Registered user {user_id} of {event.service_type}#{event.transaction_id} "
                    f"is in the payee chain, skipping the registered-user cut"
                )
            elif user.role != ActorRole.REGISTERED_USER:
                raise InvalidCommissionInput(
                    f"Actor {user_id} is a {user.role.value}, not a registered user"
                )
            else:
                payees.append(Payee(role=ActorRole.REGISTERED_USER, actor_id=user_id))
        return agent_id, payees

    async def _apply(
        self,
        event: TransactionEvent,
        sequence: int,
        requested_by: Optional[Actor] = None,
        reason: Optional[str] = None,
    ) -> DistributionResult:
        amount = Decimal(event.amount)
        if amount < ZERO:
            raise InvalidCommissionInput(f"Amount must be non-negative, got {amount}")
        amount = to_money(amount)

        agent_id, payees = await self._payees_for(event)
        config = await self.configs.get_active_config(event.service_type, event.provider)
        rates = config.rates()
        breakdown = calculate_commissions(amount, rates, roles=[p.role for p in payees])

        distribution = CommissionDistribution(
            service_type=event.service_type,
            transaction_id=event.transaction_id,
            sequence=sequence,
            amount=amount,
            provider=event.provider,
            service_agent_id=agent_id,
            registered_user_id=event.registered_user_id,
            config_id=config.id,
            total_distributed=total_commission(breakdown),
            is_redistribution=sequence > 0,
            requested_by_id=requested_by.id if requested_by else None,
            reason=reason,
        )
        await self.ledger.add_distribution(distribution)

        description = f"{event.service_type} commission for transaction #{event.transaction_id}"
        entries = await self.ledger.add_entries(
            CommissionTransaction(
                distribution_id=distribution.id,
                payee_id=payee.actor_id,
                payee_role=payee.role,
                service_type=event.service_type,
                transaction_id=event.transaction_id,
                transaction_amount=amount,
                commission_rate=rates[payee.role],
                commission_amount=breakdown[payee.role],
                provider=event.provider,
                description=description,
                status=LedgerStatus.PENDING,
            )
            for payee in payees
        )

        # Ascending actor id keeps row-lock order the same across distributions
        for entry in sorted(entries, key=lambda e: e.payee_id):
            if entry.commission_amount > ZERO:
                await self.wallet.credit(
                    entry.payee_id,
                    entry.commission_amount,
                    description=description,
                    service_type=event.service_type,
                    ledger_entry_id=entry.id,
                )

        return DistributionResult.from_distribution(distribution, entries)

    async def manually_redistribute(
        self,
        service_type: str,
        transaction_id: int,
        requested_by: Actor,
        reason: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> DistributionResult:
        """
        Privileged override: distribute an already distributed transaction again.

        Replays the stored event with the currently active config under the
        next sequence number, crediting every payee a second time. Logged
        at warning level and written to the audit log.
        """
        if requested_by.role != ActorRole.ADMIN:
            raise PrivilegeRequired("Only admins can redistribute commission")

        latest = await self.ledger.latest_distribution(service_type, transaction_id)
        if latest is None:
            raise DistributionNotFound(service_type, transaction_id)

        event = TransactionEvent(
            service_type=latest.service_type,
            transaction_id=latest.transaction_id,
            amount=latest.amount,
            provider=latest.provider,
            service_agent_id=latest.service_agent_id,
            registered_user_id=latest.registered_user_id,
        )
        sequence = latest.sequence + 1
        logger.warning(
            f"Manual redistribution of {service_type}#{transaction_id} by actor {requested_by.id}: "
            f"bypassing idempotency, sequence {sequence}"
        )

        try:
            result = await self._apply(event, sequence, requested_by=requested_by, reason=reason)
            await log_action(
                self.session,
                actor_id=requested_by.id,
                action=AuditAction.REDISTRIBUTE,
                target_type="distribution",
                target_id=result.distribution_id,
                action_metadata={
                    "service_type": service_type,
                    "transaction_id": transaction_id,
                    "sequence": sequence,
                    "total_distributed": result.total_distributed,
                    "reason": reason,
                },
                ip_address=ip_address,
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        return result

    # ── ledger queries and settlement ────────────────────

    async def get_distribution(
        self,
        service_type: str,
        transaction_id: int,
    ) -> List[DistributionResult]:
        """Every distribution of a transaction, the normal one first."""
        distributions = await self.ledger.list_distributions(service_type, transaction_id)
        if not distributions:
            raise DistributionNotFound(service_type, transaction_id)
        return [DistributionResult.from_distribution(d) for d in distributions]

    async def list_pending_ledger_entries(
        self,
        role: Optional[ActorRole] = None,
        service_type: Optional[str] = None,
    ) -> List[CommissionTransaction]:
        return await self.ledger.pending_entries(role=role, service_type=service_type)

    async def mark_paid(
        self,
        entry_ids: Iterable[int],
        performed_by: Optional[Actor] = None,
        ip_address: Optional[str] = None,
    ) -> int:
        """Settle pending entries. Returns how many moved to paid."""
        entry_ids = list(entry_ids)
        count = await self.ledger.mark_paid(entry_ids)
        if performed_by is not None:
            await log_action(
                self.session,
                actor_id=performed_by.id,
                action=AuditAction.MARK_PAID,
                target_type="ledger",
                action_metadata={"requested": len(entry_ids), "paid": count},
                ip_address=ip_address,
            )
        await self.session.commit()
        logger.info(f"Marked {count} of {len(entry_ids)} ledger entries paid")
        return count

    async def settle_older_than(self, days: int) -> int:
        """Mark paid every pending entry created more than `days` ago."""
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        ids = await self.ledger.pending_ids_created_before(cutoff)
        if not ids:
            return 0
        return await self.mark_paid(ids)

    async def commission_summary(self, actor_id: int) -> Dict[str, Decimal]:
        """Commission totals of a payee by ledger status."""
        totals = await self.ledger.totals_for_payee(actor_id)
        summary = {status.value: to_money(amount) for status, amount in totals.items()}
        summary["total"] = to_money(sum(totals.values(), ZERO))
        return summary
