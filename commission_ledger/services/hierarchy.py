"""
Hierarchy resolution: from a service agent up to the admin root.

The walk follows Actor.parent_id only. It is read-only, so callers may
retry it freely.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from commission_ledger.errors import (
    ActorNotFound,
    HierarchyCycle,
    HierarchyIncomplete,
    HierarchyIntegrityError,
    HierarchyTooDeep,
)
from commission_ledger.models import HIERARCHY_ROLES, Actor, ActorRole
from commission_ledger.repositories import ActorRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Payee:
    role: ActorRole
    actor_id: int


@dataclass
class PayeeChain:
    """Resolved payees in hierarchy order: agent, taluk, branch, admin."""

    members: List[Payee] = field(default_factory=list)

    @property
    def actor_ids(self) -> List[int]:
        return [p.actor_id for p in self.members]

    def get(self, role: ActorRole) -> Optional[Payee]:
        for payee in self.members:
            if payee.role == role:
                return payee
        return None


class HierarchyResolver:
    """Walks the parent relation of the actor tree."""

    def __init__(self, actors: ActorRepository, max_depth: int = 8):
        self.actors = actors
        self.max_depth = max_depth

    async def _walk(self, actor_id: int) -> List[Actor]:
        """Start actor followed by every ancestor, nearest first."""
        start = await self.actors.get(actor_id)
        if start is None:
            raise ActorNotFound(actor_id)

        path = [start]
        seen = {start.id}
        current = start
        while current.parent_id is not None:
            parent_id = current.parent_id
            if parent_id in seen:
                raise HierarchyCycle(parent_id, [a.id for a in path] + [parent_id])
            if len(path) > self.max_depth:
                raise HierarchyTooDeep(start.id, self.max_depth)

            parent = await self.actors.get(parent_id)
            if parent is None:
                raise HierarchyIncomplete(
                    "parent",
                    current.id,
                    detail=f"Actor {current.id} references missing parent {parent_id}",
                )
            path.append(parent)
            seen.add(parent.id)
            current = parent

        return path

    async def resolve_chain(self, actor_id: int) -> List[int]:
        """Ordered ancestor ids of an actor, nearest parent first."""
        path = await self._walk(actor_id)
        return [a.id for a in path[1:]]

    async def resolve_payees(self, service_agent_id: int) -> PayeeChain:
        """
        Resolve the four hierarchy payees for a service agent.

        Every role of HIERARCHY_ROLES must be present, in order, and the
        chain must end at the admin. Anything else aborts the distribution.
        """
        path = await self._walk(service_agent_id)

        chain = PayeeChain()
        for depth, role in enumerate(HIERARCHY_ROLES):
            if depth >= len(path):
                raise HierarchyIncomplete(role.value, path[-1].id)
            actor = path[depth]
            if actor.role != role:
                below = path[depth - 1].id if depth else actor.id
                raise HierarchyIncomplete(
                    role.value,
                    below,
                    detail=(
                        f"Expected {role.value} at depth {depth} above actor {below}, "
                        f"found actor {actor.id} ({actor.role.value})"
                    ),
                )
            chain.members.append(Payee(role=role, actor_id=actor.id))

        if len(path) > len(HIERARCHY_ROLES):
            raise HierarchyIntegrityError(
                f"Admin {path[len(HIERARCHY_ROLES) - 1].id} has a parent; the tree must be rooted at the admin"
            )

        logger.debug(f"Resolved payees for agent {service_agent_id}: {chain.actor_ids}")
        return chain

    async def get_service_agent(self, actor_id: int) -> Actor:
        """Originating agent named by id; held to the same rules as the pincode lookup."""
        agent = await self.actors.get(actor_id)
        if agent is None:
            raise ActorNotFound(actor_id)
        if not agent.is_active:
            raise HierarchyIncomplete(
                ActorRole.SERVICE_AGENT.value,
                actor_id,
                detail=f"Service agent {actor_id} is inactive",
            )
        return agent

    async def find_service_agent(self, pincode: str) -> Actor:
        agent = await self.actors.find_service_agent(pincode)
        if agent is None:
            raise HierarchyIncomplete(
                ActorRole.SERVICE_AGENT.value,
                detail=f"No active service agent for pincode {pincode}",
            )
        return agent
