from image_queue.services import directory
from image_queue.services.directory import UserDirectory


def test_mirror_creates_then_updates(make_user, record_store):
    user = make_user("person@example.com", verified=True)
    users = UserDirectory(record_store)

    created = users.mirror(user)
    updated = users.mirror(user)

    assert created.id == updated.id
    assert record_store.count("create", "Users") == 1
    assert record_store.count("update", "Users") == 1
    fields = record_store.tables["Users"][created.id]
    assert fields[directory.EMAIL] == "person@example.com"
    assert fields[directory.IS_VERIFIED] is True
    assert fields[directory.SUBSCRIPTION_TIER] == "free"
    assert directory.CREATED_DATE in fields


def test_find_unknown(record_store):
    assert UserDirectory(record_store).find("nobody@example.com") is None
