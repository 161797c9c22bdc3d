"""
Actor repository.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from commission_ledger.models import Actor, ActorRole


class ActorRepository:
    """Read access to the actor hierarchy."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, actor_id: int) -> Optional[Actor]:
        return await self.session.get(Actor, actor_id)

    async def get_by_username(self, username: str) -> Optional[Actor]:
        result = await self.session.execute(
            select(Actor).where(Actor.username == username)
        )
        return result.scalar_one_or_none()

    async def get_root_admin(self) -> Optional[Actor]:
        """The admin at the top of the tree (lowest id if several)."""
        result = await self.session.execute(
            select(Actor)
            .where(Actor.role == ActorRole.ADMIN, Actor.parent_id.is_(None))
            .order_by(Actor.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def find_service_agent(self, pincode: str) -> Optional[Actor]:
        """Active service agent assigned to a pincode, lowest id first."""
        result = await self.session.execute(
            select(Actor)
            .where(
                Actor.role == ActorRole.SERVICE_AGENT,
                Actor.pincode == pincode,
                Actor.is_active.is_(True),
            )
            .order_by(Actor.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def children_of(self, actor_id: int) -> List[Actor]:
        result = await self.session.execute(
            select(Actor).where(Actor.parent_id == actor_id).order_by(Actor.id)
        )
        return list(result.scalars().all())

    def add(self, actor: Actor) -> Actor:
        self.session.add(actor)
        return actor
