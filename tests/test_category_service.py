"""
Tests for CategoryService.
"""
import pytest
from sqlalchemy import select

from app.core.exceptions import NotFoundError
from app.models.category import ProductCategory
from app.schemas.category import CategoryCreate, CategoryUpdate
from app.services.category_service import CategoryService


@pytest.mark.asyncio
async def test_create_uses_default_color(db):
    category = await CategoryService.create_category(db, CategoryCreate(title="Rings"))

    assert category.color == "#818CF8"
    assert category.is_active is True


def test_color_must_be_hex():
    with pytest.raises(ValueError):
        CategoryCreate(title="Bad", color="purple")

    assert CategoryCreate(title="Ok", color="#a1b2c3").color == "#A1B2C3"


def test_blank_titles_are_rejected():
    with pytest.raises(ValueError):
        CategoryCreate(title="   ")
    with pytest.raises(ValueError):
        CategoryUpdate(title="   ")

    assert CategoryUpdate(title="  Rings ").title == "Rings"


@pytest.mark.asyncio
async def test_update_keeps_title_when_only_color_changes(db, factory):
    category = await factory.category("Pearls")

    updated = await CategoryService.update_category(db, category.id, CategoryUpdate(color="#000000"))

    assert updated.title == "Pearls"
    assert updated.color == "#000000"


@pytest.mark.asyncio
async def test_list_is_sorted_and_hides_inactive(db, factory):
    await factory.category("Silver")
    await factory.category("Gold")
    await factory.category("Retired", active=False)

    public = await CategoryService.list_categories(db)
    admin = await CategoryService.list_categories(db, include_inactive=True)

    assert [c.title for c in public] == ["Gold", "Silver"]
    assert [c.title for c in admin] == ["Gold", "Retired", "Silver"]


@pytest.mark.asyncio
async def test_update_and_toggle(db, factory):
    category = await factory.category("Old")

    updated = await CategoryService.update_category(db, category.id, CategoryUpdate(title="New", color="#000000"))
    assert (updated.title, updated.color) == ("New", "#000000")

    toggled = await CategoryService.toggle_active(db, category.id)
    assert toggled.is_active is False


@pytest.mark.asyncio
async def test_delete_removes_associations(db, factory):
    category = await factory.category("Temp")
    product = await factory.product("Tagged")
    await CategoryService.replace_product_categories(db, product.id, [category.id])
    await db.commit()

    await CategoryService.delete_category(db, category.id)

    rows = (await db.execute(select(ProductCategory))).scalars().all()
    assert rows == []
    with pytest.raises(NotFoundError):
        await CategoryService.get_category(db, category.id)


@pytest.mark.asyncio
async def test_replace_product_categories_is_exact(db, factory):
    a = await factory.category("A")
    b = await factory.category("B")
    c = await factory.category("C")
    product = await factory.product("P")

    await CategoryService.replace_product_categories(db, product.id, [a.id, b.id])
    await CategoryService.replace_product_categories(db, product.id, [b.id, c.id, c.id])
    await db.commit()

    assert sorted(await CategoryService.get_product_category_ids(db, product.id)) == sorted([b.id, c.id])


@pytest.mark.asyncio
async def test_replace_with_unknown_category_keeps_existing(db, factory):
    a = await factory.category("A")
    product = await factory.product("P")
    category_id, product_id = a.id, product.id
    await CategoryService.replace_product_categories(db, product_id, [category_id])
    await db.commit()

    with pytest.raises(NotFoundError):
        await CategoryService.replace_product_categories(db, product_id, ["missing"])
    await db.rollback()

    assert await CategoryService.get_product_category_ids(db, product_id) == [category_id]
