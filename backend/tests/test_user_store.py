import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import sessionmaker

from user_orders.core.exceptions import InfrastructureError
from user_orders.core.security import PASSWORD_MASK
from user_orders.models.user import User
from user_orders.schemas.user import OrderCreate, UserCreate
from user_orders.storage.user_store import UserStore


def make_user(user_payload, **overrides) -> UserCreate:
    return UserCreate.model_validate(user_payload(**overrides))


def make_order(name: str, price: float, quantity: int = 1) -> OrderCreate:
    return OrderCreate(product_name=name, price=price, quantity=quantity)


def test_exists_requires_an_identifier(store):
    with pytest.raises(ValueError):
        store.exists()


def test_exists_matches_either_identifier(store, user_payload):
    store.insert(make_user(user_payload, user_id=1, username="john_doe"))

    assert store.exists(user_id=1)
    assert store.exists(username="john_doe")
    assert store.exists(user_id=99, username="john_doe")
    assert store.exists(user_id=1, username="somebody_else")
    assert not store.exists(user_id=2, username="jane_doe")


def test_insert_normalizes_names_and_masks_password(store, user_payload):
    created = store.insert(make_user(user_payload))

    assert created.password == PASSWORD_MASK
    assert created.full_name.first_name == "John"
    assert created.full_name.last_name == "Doe"


def test_insert_stores_a_bcrypt_hash(store, session_factory, password_hasher, user_payload):
    store.insert(make_user(user_payload, password="s3cret-pass"))

    with session_factory() as db:
        stored = db.scalar(select(User.hashed_password).where(User.user_id == 1))

    assert stored != "s3cret-pass"
    assert password_hasher.verify("s3cret-pass", stored)


def test_find_by_user_id_returns_none_for_unknown_user(store):
    assert store.find_by_user_id(42) is None


def test_find_by_user_id_masks_password(store, user_payload):
    store.insert(make_user(user_payload))

    found = store.find_by_user_id(1)

    assert found.username == "john_doe"
    assert found.password == PASSWORD_MASK


def test_find_all_returns_users_in_creation_order(store, user_payload):
    store.insert(make_user(user_payload, user_id=2, username="second"))
    store.insert(make_user(user_payload, user_id=1, username="first"))

    assert [user.user_id for user in store.find_all()] == [2, 1]


def test_append_order_keeps_insertion_order(store, user_payload):
    store.insert(make_user(user_payload))

    assert store.append_order(1, make_order("Notebook", 4.5, 2))
    assert store.append_order(1, make_order("Pen", 1.25))

    orders = store.find_by_user_id(1).orders
    assert [order.product_name for order in orders] == ["Notebook", "Pen"]
    assert orders[0].quantity == 2


def test_append_order_to_unknown_user(store):
    assert store.append_order(42, make_order("Pen", 1.25)) is False


def test_replace_returns_the_updated_document(store, user_payload):
    store.insert(
        make_user(
            user_payload,
            orders=[{"productName": "Old", "price": 9.0, "quantity": 1}],
        )
    )

    updated = store.replace_by_user_id(
        1,
        make_user(
            user_payload,
            age=31,
            fullName={"firstName": "JANE", "lastName": "roe"},
            modifiedBy="editor",
        ),
    )

    assert updated.age == 31
    assert updated.full_name.first_name == "Jane"
    assert updated.full_name.last_name == "Roe"
    assert updated.modified_by == "editor"
    assert updated.date_modified is not None
    assert updated.password == PASSWORD_MASK
    # Full replace: the payload carried no orders
    assert updated.orders == []
    assert store.find_by_user_id(1).age == 31


def test_replace_unknown_user(store, user_payload):
    assert store.replace_by_user_id(42, make_user(user_payload, user_id=42)) is None


def test_duplicate_insert_is_rejected_by_unique_index(store, user_payload):
    store.insert(make_user(user_payload, user_id=1, username="john_doe"))

    with pytest.raises(InfrastructureError) as exc_info:
        store.insert(make_user(user_payload, user_id=2, username="john_doe"))

    assert isinstance(exc_info.value.__cause__, IntegrityError)
    assert exc_info.value.to_dict()["name"] == "IntegrityError"


def test_database_failures_are_wrapped(password_hasher, tmp_path):
    unreachable = create_engine(f"sqlite:///{tmp_path / 'missing' / 'users.db'}")
    broken_store = UserStore(sessionmaker(bind=unreachable), password_hasher)

    with pytest.raises(InfrastructureError) as exc_info:
        broken_store.exists(user_id=1)

    assert isinstance(exc_info.value.__cause__, OperationalError)
