"""Tests for admin user management."""

import pytest
from sqlalchemy import select

from conftest import utcnow
from quicksell_admin.core.errors import Forbidden, NotFound, ValidationError
from quicksell_admin.models.listing import Listing
from quicksell_admin.models.user import User
from quicksell_admin.services.listings import list_listings
from quicksell_admin.services.users import delete_user, get_user, list_users, update_user


@pytest.mark.asyncio
async def test_list_users_newest_first_with_counts(db, admin, seed):
    seller = await seed.user("seller")
    idle = await seed.user("idle")
    await seed.listing(seller)
    await seed.listing(seller)
    await seed.listing(seller, deleted=True)
    await seed.account(seller)
    await seed.account(seller)
    await seed.account(seller, is_active=False)

    page = await list_users(db, caller_id=admin.id)
    by_name = {u["username"]: u for u in page["items"]}

    assert [u["username"] for u in page["items"]] == ["idle", "seller", "root"]
    # two listings and two accounts must not multiply into four
    assert by_name["seller"]["listing_count"] == 2
    assert by_name["seller"]["connected_accounts"] == 2
    assert by_name["idle"]["listing_count"] == 0
    assert by_name["idle"]["connected_accounts"] == 0
    assert page["pagination"] == {"page": 1, "limit": 50, "total": 3, "total_pages": 1}


@pytest.mark.asyncio
async def test_list_users_pagination_last_page(db, admin, seed):
    for _ in range(6):
        await seed.user()

    # 7 users in total (admin + 6)
    first = await list_users(db, caller_id=admin.id, page=1, limit=3)
    last = await list_users(db, caller_id=admin.id, page=3, limit=3)

    assert first["pagination"]["total"] == 7
    assert first["pagination"]["total_pages"] == 3
    assert len(first["items"]) == 3
    assert len(last["items"]) == 7 - 3 * 2


@pytest.mark.asyncio
async def test_list_users_pagination_exact_multiple(db, admin, seed):
    for _ in range(5):
        await seed.user()

    last = await list_users(db, caller_id=admin.id, page=2, limit=3)
    assert last["pagination"]["total_pages"] == 2
    assert len(last["items"]) == 3


@pytest.mark.asyncio
async def test_search_is_case_insensitive_substring(db, admin, seed):
    await seed.user("someone", email="Foo@Bar.com")
    await seed.user("FOOTBALLER", email="kick@example.com")
    await seed.user("other", email="other@example.com")

    page = await list_users(db, caller_id=admin.id, search="foo")

    assert sorted(u["username"] for u in page["items"]) == ["FOOTBALLER", "someone"]
    assert page["pagination"]["total"] == 2


@pytest.mark.asyncio
async def test_search_wildcards_match_literally(db, admin, seed):
    await seed.user("half_off", email="h@example.com")
    await seed.user("halfXoff", email="x@example.com")

    page = await list_users(db, caller_id=admin.id, search="f_o")
    assert [u["username"] for u in page["items"]] == ["half_off"]


@pytest.mark.asyncio
async def test_tier_filter_exact_match(db, admin, seed):
    await seed.user("p1", tier="premium")
    await seed.user("pp1", tier="premium_plus")

    page = await list_users(db, caller_id=admin.id, tier="premium")
    assert [u["username"] for u in page["items"]] == ["p1"]


@pytest.mark.asyncio
async def test_unknown_tier_filter_rejected(db, admin):
    with pytest.raises(ValidationError):
        await list_users(db, caller_id=admin.id, tier="enterprise")


@pytest.mark.asyncio
async def test_list_users_forbidden(db, regular_user):
    with pytest.raises(Forbidden):
        await list_users(db, caller_id=regular_user.id)


@pytest.mark.asyncio
async def test_get_user(db, admin, seed):
    seller = await seed.user("seller", tier="premium")
    await seed.listing(seller)

    data = await get_user(db, caller_id=admin.id, user_id=seller.id)
    assert data["username"] == "seller"
    assert data["subscription_tier"] == "premium"
    assert data["listing_count"] == 1

    with pytest.raises(NotFound):
        await get_user(db, caller_id=admin.id, user_id=seller.id + 100)


@pytest.mark.asyncio
async def test_update_user_partial(db, admin, seed):
    seller = await seed.user("seller", email="seller@example.com")

    data = await update_user(
        db,
        caller_id=admin.id,
        user_id=seller.id,
        changes={"subscription_tier": "premium_plus", "points": 120},
    )

    assert data["subscription_tier"] == "premium_plus"
    assert data["points"] == 120
    assert data["email"] == "seller@example.com"
    assert data["updated_at"] is not None

    row = (await db.execute(select(User.subscription_tier, User.points).where(User.id == seller.id))).one()
    assert tuple(row) == ("premium_plus", 120)


@pytest.mark.asyncio
async def test_update_missing_user_changes_nothing(db, admin):
    with pytest.raises(NotFound):
        await update_user(db, caller_id=admin.id, user_id=admin.id + 50, changes={"points": 5})

    count = len((await db.execute(select(User.id))).all())
    assert count == 1


@pytest.mark.asyncio
async def test_update_user_duplicate_username(db, admin, seed):
    seller = await seed.user("seller")
    seller_id = seller.id

    with pytest.raises(ValidationError):
        await update_user(db, caller_id=admin.id, user_id=seller_id, changes={"username": "root"})

    # the rollback expired the ORM instances, so only plain ids are used from here on
    name = (await db.execute(select(User.username).where(User.id == seller_id))).scalar_one()
    assert name == "seller"


@pytest.mark.asyncio
async def test_update_user_rejects_bad_values(db, admin, seed):
    seller = await seed.user("seller")

    with pytest.raises(ValidationError):
        await update_user(db, caller_id=admin.id, user_id=seller.id, changes={"subscription_tier": "pro"})
    with pytest.raises(ValidationError):
        await update_user(db, caller_id=admin.id, user_id=seller.id, changes={"current_level": 9})


@pytest.mark.asyncio
async def test_update_user_forbidden(db, regular_user, seed):
    target = await seed.user("target", points=3)

    with pytest.raises(Forbidden):
        await update_user(db, caller_id=regular_user.id, user_id=target.id, changes={"points": 999})

    points = (await db.execute(select(User.points).where(User.id == target.id))).scalar_one()
    assert points == 3


@pytest.mark.asyncio
async def test_delete_user_soft_deletes_listings(db, admin, seed):
    seller = await seed.user("seller")
    l1 = await seed.listing(seller)
    l2 = await seed.listing(seller, status="draft")
    other = await seed.listing(admin)

    await delete_user(db, caller_id=admin.id, user_id=seller.id)

    assert (await db.execute(select(User.id).where(User.id == seller.id))).first() is None

    deleted = (
        await db.execute(select(Listing.id, Listing.deleted_at).where(Listing.id.in_([l1.id, l2.id])))
    ).all()
    assert len(deleted) == 2
    assert all(r.deleted_at is not None for r in deleted)

    page = await list_listings(db, caller_id=admin.id)
    assert [item["id"] for item in page["items"]] == [other.id]


@pytest.mark.asyncio
async def test_delete_missing_user_rolls_back(db, admin, seed):
    admin_id = admin.id

    with pytest.raises(NotFound):
        await delete_user(db, caller_id=admin_id, user_id=admin_id + 77)

    assert (await db.execute(select(User.id).where(User.id == admin_id))).first() is not None


@pytest.mark.asyncio
async def test_delete_user_failure_keeps_listings(db, admin, seed):
    # listing owned by an id with no user row: the soft delete matches it,
    # then the user delete finds nothing and the whole transaction is undone
    orphan = Listing(user_id=4242, title="Orphaned bike", status="active", created_at=utcnow(), updated_at=utcnow())
    db.add(orphan)
    await db.commit()
    orphan_id = orphan.id

    with pytest.raises(NotFound):
        await delete_user(db, caller_id=admin.id, user_id=4242)

    deleted_at = (await db.execute(select(Listing.deleted_at).where(Listing.id == orphan_id))).scalar_one()
    assert deleted_at is None


@pytest.mark.asyncio
async def test_delete_user_forbidden(db, regular_user, seed):
    victim = await seed.user("victim")
    lst = await seed.listing(victim)

    with pytest.raises(Forbidden):
        await delete_user(db, caller_id=regular_user.id, user_id=victim.id)

    assert (await db.execute(select(User.id).where(User.id == victim.id))).first() is not None
    assert (await db.execute(select(Listing.deleted_at).where(Listing.id == lst.id))).scalar_one() is None
