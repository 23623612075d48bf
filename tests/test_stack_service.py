"""
Tests for StackService: storefront listing, ordering and membership.
"""
import pytest
from sqlalchemy import select

from app.core.exceptions import NotFoundError, CatalogValidationError
from app.models.stack import Stack, StackProduct
from app.schemas.stack import StackCreate, StackUpdate, StackMemberIn, StackOrderEntry
from app.services.stack_service import StackService


def positions(listing):
    return [(m.product.title, m.position) for m in listing.members]


# ==================== Listing ====================

@pytest.mark.asyncio
async def test_public_listing_drops_empty_and_inactive(db, factory):
    active = await factory.product("Active")
    inactive = await factory.product("Inactive", active=False)
    await factory.stack("Full", 1, products=[active, inactive])
    await factory.stack("Only inactive products", 2, products=[inactive])
    await factory.stack("Empty", 3)
    await factory.stack("Switched off", 4, products=[active], active=False)

    public = await StackService.list_stacks(db, include_inactive=False)

    assert [l.stack.title for l in public] == ["Full"]
    assert [m.product.title for m in public[0].members] == ["Active"]


@pytest.mark.asyncio
async def test_admin_listing_keeps_everything(db, factory):
    inactive = await factory.product("Inactive", active=False)
    await factory.stack("B", 2, products=[inactive])
    await factory.stack("A", 1)
    await factory.stack("C", 3, active=False)

    listings = await StackService.list_stacks(db, include_inactive=True)

    assert [l.stack.title for l in listings] == ["A", "B", "C"]
    assert len(listings[1].members) == 1


@pytest.mark.asyncio
async def test_members_are_in_position_order(db, factory):
    first = await factory.product("Zeta")
    second = await factory.product("Alpha")
    await factory.stack("Ordered", 1, products=[first, second])

    listing = (await StackService.list_stacks(db))[0]

    assert positions(listing) == [("Zeta", 1), ("Alpha", 2)]


# ==================== Create / update / delete ====================

@pytest.mark.asyncio
async def test_create_appends_after_highest_order(db, factory):
    await factory.stack("New Arrivals", 4)

    listing = await StackService.create_stack(db, StackCreate(title="Sale"))

    assert listing.stack.display_order == 5


@pytest.mark.asyncio
async def test_first_stack_gets_order_one(db):
    listing = await StackService.create_stack(db, StackCreate(title="First"))

    assert listing.stack.display_order == 1


@pytest.mark.asyncio
async def test_create_normalizes_member_positions(db, factory):
    a = await factory.product("A")
    b = await factory.product("B")
    c = await factory.product("C")

    listing = await StackService.create_stack(
        db,
        StackCreate(title="Mixed"),
        members=[
            StackMemberIn(product_id=a.id, position=30),
            StackMemberIn(product_id=b.id, position=10),
            StackMemberIn(product_id=c.id, position=10),
        ],
    )

    assert positions(listing) == [("B", 1), ("C", 2), ("A", 3)]


@pytest.mark.asyncio
async def test_create_rejects_duplicate_members(db, factory):
    a = await factory.product("A")

    with pytest.raises(CatalogValidationError):
        await StackService.create_stack(
            db,
            StackCreate(title="Dup"),
            members=[StackMemberIn(product_id=a.id), StackMemberIn(product_id=a.id)],
        )


@pytest.mark.asyncio
async def test_create_with_unknown_product_creates_nothing(db):
    with pytest.raises(NotFoundError):
        await StackService.create_stack(
            db, StackCreate(title="Ghost"), members=[StackMemberIn(product_id="missing")]
        )

    result = await db.execute(select(Stack))
    assert result.scalars().all() == []


@pytest.mark.asyncio
async def test_update_replaces_members(db, factory):
    a = await factory.product("A")
    b = await factory.product("B")
    stack = await factory.stack("Swap", 1, products=[a])

    listing = await StackService.update_stack(
        db, stack.id, StackUpdate(members=[StackMemberIn(product_id=b.id, position=1)])
    )

    assert positions(listing) == [("B", 1)]


@pytest.mark.asyncio
async def test_update_with_empty_members_clears_and_hides_stack(db, factory):
    a = await factory.product("A")
    stack = await factory.stack("Clear me", 1, products=[a])

    listing = await StackService.update_stack(db, stack.id, StackUpdate(members=[]))

    assert listing.members == []
    assert await StackService.list_stacks(db, include_inactive=False) == []


@pytest.mark.asyncio
async def test_update_without_members_keeps_them(db, factory):
    a = await factory.product("A")
    stack = await factory.stack("Keep", 1, products=[a])

    listing = await StackService.update_stack(db, stack.id, StackUpdate(title="Renamed"))

    assert listing.stack.title == "Renamed"
    assert positions(listing) == [("A", 1)]


def test_blank_update_title_is_rejected():
    with pytest.raises(ValueError):
        StackUpdate(title="   ")

    assert StackUpdate(title=" Sale ").title == "Sale"
    assert StackUpdate().title is None


@pytest.mark.asyncio
async def test_update_title_is_stripped(db, factory):
    stack = await factory.stack("Old", 1)

    listing = await StackService.update_stack(db, stack.id, StackUpdate(title="  New  "))

    assert listing.stack.title == "New"


@pytest.mark.asyncio
async def test_delete_stack_removes_memberships(db, factory):
    a = await factory.product("A")
    stack = await factory.stack("Bye", 1, products=[a])

    await StackService.delete_stack(db, stack.id)

    assert (await db.execute(select(StackProduct))).scalars().all() == []
    with pytest.raises(NotFoundError):
        await StackService.get_stack(db, stack.id)


@pytest.mark.asyncio
async def test_toggle_active(db, factory):
    stack = await factory.stack("Flip", 1)

    toggled = await StackService.toggle_active(db, stack.id)

    assert toggled.is_active is False


@pytest.mark.asyncio
async def test_mutating_missing_stack_is_not_found(db):
    with pytest.raises(NotFoundError):
        await StackService.toggle_active(db, "missing")
    with pytest.raises(NotFoundError):
        await StackService.update_stack(db, "missing", StackUpdate(title="x"))
    with pytest.raises(NotFoundError):
        await StackService.delete_stack(db, "missing")


# ==================== Reorder ====================

@pytest.mark.asyncio
async def test_reorder_writes_every_pair(db, factory):
    p = await factory.product("P")
    a = await factory.stack("A", 1, products=[p])
    b = await factory.stack("B", 2, products=[p])
    c = await factory.stack("C", 3, products=[p])

    await StackService.reorder_stacks(db, [
        StackOrderEntry(id=b.id, display_order=1),
        StackOrderEntry(id=c.id, display_order=2),
        StackOrderEntry(id=a.id, display_order=3),
    ])

    listings = await StackService.list_stacks(db)
    assert [l.stack.title for l in listings] == ["B", "C", "A"]


@pytest.mark.asyncio
async def test_reorder_with_unknown_id_changes_nothing(db, factory):
    a = await factory.stack("A", 1)
    b = await factory.stack("B", 2)

    with pytest.raises(NotFoundError):
        await StackService.reorder_stacks(db, [
            StackOrderEntry(id=b.id, display_order=1),
            StackOrderEntry(id="missing", display_order=2),
            StackOrderEntry(id=a.id, display_order=3),
        ])

    result = await db.execute(select(Stack.title, Stack.display_order).order_by(Stack.title))
    assert result.all() == [("A", 1), ("B", 2)]


# ==================== Members ====================

@pytest.mark.asyncio
async def test_add_product_defaults_to_end(db, factory):
    a = await factory.product("A")
    b = await factory.product("B")
    stack = await factory.stack("S", 1, products=[a])

    listing = await StackService.add_product_to_stack(db, stack.id, b.id)

    assert positions(listing) == [("A", 1), ("B", 2)]


@pytest.mark.asyncio
async def test_add_product_at_position_renumbers(db, factory):
    a = await factory.product("A")
    b = await factory.product("B")
    c = await factory.product("C")
    stack = await factory.stack("S", 1, products=[a, b])

    listing = await StackService.add_product_to_stack(db, stack.id, c.id, position=1)

    assert positions(listing) == [("C", 1), ("A", 2), ("B", 3)]


@pytest.mark.asyncio
async def test_add_duplicate_product_is_rejected(db, factory):
    a = await factory.product("A")
    stack = await factory.stack("S", 1, products=[a])

    with pytest.raises(CatalogValidationError):
        await StackService.add_product_to_stack(db, stack.id, a.id)


@pytest.mark.asyncio
async def test_remove_product_closes_gap(db, factory):
    a = await factory.product("A")
    b = await factory.product("B")
    c = await factory.product("C")
    stack = await factory.stack("S", 1, products=[a, b, c])

    listing = await StackService.remove_product_from_stack(db, stack.id, b.id)

    assert positions(listing) == [("A", 1), ("C", 2)]


@pytest.mark.asyncio
async def test_remove_non_member_is_not_found(db, factory):
    a = await factory.product("A")
    stack = await factory.stack("S", 1)

    with pytest.raises(NotFoundError):
        await StackService.remove_product_from_stack(db, stack.id, a.id)


@pytest.mark.asyncio
async def test_move_product_clamps_and_renumbers(db, factory):
    a = await factory.product("A")
    b = await factory.product("B")
    c = await factory.product("C")
    stack = await factory.stack("S", 1, products=[a, b, c])

    listing = await StackService.move_stack_product(db, stack.id, a.id, position=99)
    assert positions(listing) == [("B", 1), ("C", 2), ("A", 3)]

    listing = await StackService.move_stack_product(db, stack.id, c.id, position=1)
    assert positions(listing) == [("C", 1), ("B", 2), ("A", 3)]
