"""
Stack Service

Storefront stacks: ordered collections of products.

Stacks sort by display_order (new stacks go to the end); members sort by a
dense 1..N position that is renumbered after every membership write.
Membership replacement and reordering are single transactions.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional, List, Sequence

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import NotFoundError, CatalogValidationError, StorageBackendError
from app.models.product import Product
from app.models.stack import Stack, StackProduct
from app.schemas.stack import StackCreate, StackUpdate, StackMemberIn, StackOrderEntry

logger = logging.getLogger(__name__)


@dataclass
class StackListing:
    """A stack with its members (each with product loaded), in position order."""
    stack: Stack
    members: List[StackProduct] = field(default_factory=list)


async def _commit(db: AsyncSession, operation: str) -> None:
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Stack {operation} failed: {e}")
        raise StorageBackendError(f"Stack {operation} failed", operation=operation) from e


def _normalize_members(members: Sequence[StackMemberIn]) -> List[str]:
    """
    Product ids in supplied-position order (stable for ties).

    Duplicate product ids are rejected.
    """
    seen = set()
    for member in members:
        if member.product_id in seen:
            raise CatalogValidationError(
                f"Product {member.product_id} listed more than once", field="members"
            )
        seen.add(member.product_id)

    ordered = sorted(enumerate(members), key=lambda pair: (pair[1].position, pair[0]))
    return [member.product_id for _, member in ordered]


class StackService:

    # ==================== Queries ====================

    @staticmethod
    async def list_stacks(db: AsyncSession, include_inactive: bool = False) -> List[StackListing]:
        """
        Stacks with their members.

        Public view (include_inactive=False): active stacks only, active member
        products only, and stacks left without members are dropped.
        """
        query = (
            select(Stack)
            .options(selectinload(Stack.members).selectinload(StackProduct.product))
            .order_by(Stack.display_order, Stack.created_at, Stack.id)
        )
        if not include_inactive:
            query = query.where(Stack.is_active.is_(True))

        result = await db.execute(query)
        listings = []
        for stack in result.scalars().all():
            members = sorted(stack.members, key=lambda m: m.position)
            if not include_inactive:
                members = [m for m in members if m.product is not None and m.product.is_active]
                if not members:
                    continue
            listings.append(StackListing(stack=stack, members=members))
        return listings

    @staticmethod
    async def _load_stack(db: AsyncSession, stack_id: str) -> Stack:
        result = await db.execute(
            select(Stack)
            .where(Stack.id == stack_id)
            .options(selectinload(Stack.members).selectinload(StackProduct.product))
            .execution_options(populate_existing=True)
        )
        stack = result.scalar_one_or_none()
        if stack is None:
            raise NotFoundError("stack", stack_id)
        return stack

    @staticmethod
    async def get_stack(db: AsyncSession, stack_id: str) -> StackListing:
        """One stack with all members (admin edit view)."""
        stack = await StackService._load_stack(db, stack_id)
        return StackListing(stack=stack, members=sorted(stack.members, key=lambda m: m.position))

    # ==================== Mutations ====================

    @staticmethod
    async def _check_products_exist(db: AsyncSession, product_ids: List[str]) -> None:
        if not product_ids:
            return
        result = await db.execute(select(Product.id).where(Product.id.in_(product_ids)))
        found = set(result.scalars().all())
        missing = [p for p in product_ids if p not in found]
        if missing:
            raise NotFoundError("product", missing[0])

    @staticmethod
    async def _write_members(db: AsyncSession, stack: Stack, product_ids: List[str]) -> None:
        """
        Replace the loaded stack's members with product_ids numbered 1..N.

        Old rows are flushed out before the new ones go in so the
        (stack_id, product_id) constraint never sees both.
        """
        await StackService._check_products_exist(db, product_ids)

        stack.members.clear()
        await db.flush()
        for position, product_id in enumerate(product_ids, start=1):
            stack.members.append(StackProduct(product_id=product_id, position=position))
        await db.flush()

    @staticmethod
    def _member_ids(stack: Stack) -> List[str]:
        return [m.product_id for m in sorted(stack.members, key=lambda m: m.position)]

    @staticmethod
    async def create_stack(
        db: AsyncSession,
        data: StackCreate,
        members: Optional[Sequence[StackMemberIn]] = None,
    ) -> StackListing:
        """Create a stack at the end of the display order."""
        if members is None:
            members = data.members
        product_ids = _normalize_members(members or [])
        await StackService._check_products_exist(db, product_ids)

        max_order = (await db.execute(select(func.max(Stack.display_order)))).scalar()
        stack = Stack(
            title=data.title.strip(),
            is_active=data.is_active,
            display_order=(max_order or 0) + 1,
            members=[
                StackProduct(product_id=product_id, position=position)
                for position, product_id in enumerate(product_ids, start=1)
            ],
        )
        db.add(stack)
        await _commit(db, "create")

        logger.info(f"Created stack {stack.title} (ID: {stack.id}, order {stack.display_order})")
        return await StackService.get_stack(db, stack.id)

    @staticmethod
    async def update_stack(
        db: AsyncSession,
        stack_id: str,
        data: StackUpdate,
        members: Optional[Sequence[StackMemberIn]] = None,
    ) -> StackListing:
        """
        Update scalars; a members list (including an empty one) replaces the
        whole membership set in the same transaction.
        """
        stack = await StackService._load_stack(db, stack_id)
        if members is None:
            members = data.members

        if data.title is not None:
            stack.title = data.title.strip()
        if data.is_active is not None:
            stack.is_active = data.is_active

        if members is not None:
            try:
                await StackService._write_members(db, stack, _normalize_members(members))
            except (NotFoundError, CatalogValidationError):
                await db.rollback()
                raise

        await _commit(db, "update")
        logger.info(f"Updated stack {stack_id}")
        return await StackService.get_stack(db, stack_id)

    @staticmethod
    async def delete_stack(db: AsyncSession, stack_id: str) -> None:
        """Delete the stack; its membership rows go with it."""
        stack = await StackService._load_stack(db, stack_id)
        await db.delete(stack)
        await _commit(db, "delete")

        logger.info(f"Deleted stack {stack_id}")

    @staticmethod
    async def toggle_active(db: AsyncSession, stack_id: str) -> Stack:
        stack = await StackService._load_stack(db, stack_id)
        stack.is_active = not stack.is_active
        await _commit(db, "toggle")

        logger.info(f"Stack {stack_id} is_active -> {stack.is_active}")
        return stack

    @staticmethod
    async def reorder_stacks(db: AsyncSession, entries: Sequence[StackOrderEntry]) -> None:
        """
        Write every (id, display_order) pair atomically.

        An unknown id or a store failure rolls back the whole batch.
        """
        try:
            for entry in entries:
                stack = await db.get(Stack, entry.id)
                if stack is None:
                    raise NotFoundError("stack", entry.id)
                stack.display_order = entry.display_order
            await db.commit()
        except NotFoundError:
            await db.rollback()
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Stack reorder of {len(entries)} entries failed: {e}")
            raise StorageBackendError(
                f"Reorder of {len(entries)} stacks failed", operation="reorder"
            ) from e

        logger.info(f"Reordered {len(entries)} stacks")

    # ==================== Members ====================

    @staticmethod
    async def add_product_to_stack(
        db: AsyncSession,
        stack_id: str,
        product_id: str,
        position: Optional[int] = None,
    ) -> StackListing:
        """Insert a product at a 1-based position (default: end) and renumber."""
        stack = await StackService._load_stack(db, stack_id)
        current = StackService._member_ids(stack)
        if product_id in current:
            raise CatalogValidationError(
                f"Product {product_id} is already in stack", field="product_id"
            )

        index = len(current) if position is None else max(0, min(position - 1, len(current)))
        current.insert(index, product_id)

        try:
            await StackService._write_members(db, stack, current)
        except NotFoundError:
            await db.rollback()
            raise
        await _commit(db, "add member")
        return await StackService.get_stack(db, stack_id)

    @staticmethod
    async def remove_product_from_stack(db: AsyncSession, stack_id: str, product_id: str) -> StackListing:
        stack = await StackService._load_stack(db, stack_id)
        current = StackService._member_ids(stack)
        if product_id not in current:
            raise NotFoundError("stack member", product_id)

        current.remove(product_id)
        await StackService._write_members(db, stack, current)
        await _commit(db, "remove member")
        return await StackService.get_stack(db, stack_id)

    @staticmethod
    async def move_stack_product(
        db: AsyncSession,
        stack_id: str,
        product_id: str,
        position: int,
    ) -> StackListing:
        """Move a member to a 1-based position (clamped) and renumber."""
        stack = await StackService._load_stack(db, stack_id)
        current = StackService._member_ids(stack)
        if product_id not in current:
            raise NotFoundError("stack member", product_id)

        current.remove(product_id)
        index = max(0, min(position - 1, len(current)))
        current.insert(index, product_id)

        await StackService._write_members(db, stack, current)
        await _commit(db, "move member")
        return await StackService.get_stack(db, stack_id)
