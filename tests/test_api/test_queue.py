import pytest
from fastapi.testclient import TestClient

from image_queue.main import app
from image_queue.schemas import queue as schema

BASE = "/api/airtable/queue"
OWNER = "owner@example.com"
TABLE = "Image Queue"


def seed_item(record_store, priority, email=OWNER, **fields):
    return record_store.seed(
        TABLE,
        {
            schema.USER_EMAIL: email,
            schema.IMAGE_URL: f"https://cdn.example.com/{priority}.webp",
            schema.FILE_NAME: f"{priority}.webp",
            schema.STATUS: "queued",
            schema.PRIORITY: priority,
            **fields,
        },
    )


@pytest.fixture
def owner(make_user):
    return make_user(OWNER, verified=True)


class TestAdd:
    def test_appends_after_highest_priority(self, client, record_store, owner):
        for priority in (1, 2, 3):
            seed_item(record_store, priority)
        seed_item(record_store, 9, email="other@example.com")

        response = client.post(
            f"{BASE}/add",
            json={"email": OWNER, "imageData": {"url": "https://cdn.example.com/new.webp", "name": "new.webp", "size": 1234}},
        )

        assert response.status_code == 200
        item = response.json()["queueItem"]
        assert item["priority"] == 4
        assert item["status"] == "queued"
        assert item["userEmail"] == OWNER
        assert item["notes"] == "Auto-queued from uploader"

    def test_unverified_user_is_rejected_before_any_write(self, client, record_store, make_user):
        make_user("pending@example.com", verified=False)

        response = client.post(
            f"{BASE}/add",
            json={"email": "pending@example.com", "imageData": {"url": "https://cdn.example.com/x.webp"}},
        )

        assert response.status_code == 403
        assert response.json() == {"error": "User not verified"}
        assert record_store.count("create") == 0

    def test_unknown_user(self, client, record_store):
        response = client.post(
            f"{BASE}/add",
            json={"email": "ghost@example.com", "imageData": {"url": "https://cdn.example.com/x.webp"}},
        )

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}
        assert record_store.count("create") == 0

    def test_requires_email_and_image(self, client):
        response = client.post(f"{BASE}/add", json={"email": OWNER})
        assert response.status_code == 400
        assert response.json() == {"error": "Email and image data are required"}

    def test_store_failure(self, client, record_store, owner):
        record_store.failing.add("create")

        response = client.post(
            f"{BASE}/add", json={"email": OWNER, "imageData": {"url": "https://cdn.example.com/x.webp"}}
        )

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to add image to queue"
        assert "503" in response.json()["details"]


def test_status_lists_by_priority(client, record_store):
    seed_item(record_store, 2)
    seed_item(record_store, 1)
    seed_item(record_store, 1, email="other@example.com")

    response = client.post(f"{BASE}/status", json={"email": OWNER})

    assert response.status_code == 200
    assert [item["priority"] for item in response.json()["queueItems"]] == [1, 2]


def test_status_requires_email(client):
    response = client.post(f"{BASE}/status", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "Email is required"}


def test_status_rejects_malformed_record(client, record_store):
    record_store.seed(TABLE, {schema.USER_EMAIL: OWNER, schema.STATUS: "queued"})

    response = client.post(f"{BASE}/status", json={"email": OWNER})

    assert response.status_code == 500
    assert "Image URL" in response.json()["details"]


@pytest.mark.parametrize(
    "field, value",
    [(schema.STATUS, "Queued"), (schema.FILE_SIZE, "large"), (schema.PRIORITY, "top")],
)
def test_status_rejects_mistyped_record(client, record_store, field, value):
    seed_item(record_store, 1, **{field: value})

    response = client.post(f"{BASE}/status", json={"email": OWNER})

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to get queue status"
    assert field in response.json()["details"]


class TestReorder:
    def test_rewrites_priorities_in_one_batch(self, client, record_store):
        a = seed_item(record_store, 1)
        b = seed_item(record_store, 2)
        c = seed_item(record_store, 3)

        response = client.post(f"{BASE}/reorder", json={"userEmail": OWNER, "newOrder": [c.id, a.id, b.id]})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Queue reordered successfully"}
        priorities = {rid: fields[schema.PRIORITY] for rid, fields in record_store.tables[TABLE].items()}
        assert priorities == {c.id: 1, a.id: 2, b.id: 3}
        assert record_store.batches == [[c.id, a.id, b.id]]

    @pytest.mark.parametrize(
        "body",
        [
            {"userEmail": OWNER},
            {"userEmail": OWNER, "newOrder": "rec1,rec2"},
            {"userEmail": OWNER, "newOrder": ["rec1", 7]},
            {"newOrder": ["rec1"]},
        ],
    )
    def test_invalid_body(self, client, record_store, body):
        response = client.post(f"{BASE}/reorder", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "User email and new order array are required"}
        assert record_store.batches == []

    def test_unknown_record_fails(self, client, record_store):
        a = seed_item(record_store, 1)

        response = client.post(f"{BASE}/reorder", json={"userEmail": OWNER, "newOrder": [a.id, "recMissing"]})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to reorder queue"


def test_delete(client, record_store):
    item = seed_item(record_store, 1)

    response = client.post(f"{BASE}/delete", json={"recordId": item.id})

    assert response.status_code == 200
    assert item.id not in record_store.tables[TABLE]


def test_delete_requires_record_id(client):
    response = client.post(f"{BASE}/delete", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "Record ID is required"}


def test_delete_unknown_record(client):
    response = client.post(f"{BASE}/delete", json={"recordId": "recMissing"})
    assert response.status_code == 500
    assert response.json()["error"] == "Failed to delete queue item"


def test_update_writes_only_given_fields(client, record_store):
    item = seed_item(record_store, 1, **{schema.PUBLISH_TIME: "08:00"})

    response = client.post(f"{BASE}/update", json={"recordId": item.id, "publishDate": "2026-12-01"})

    assert response.status_code == 200
    fields = record_store.tables[TABLE][item.id]
    assert fields[schema.PUBLISH_DATE] == "2026-12-01"
    assert fields[schema.PUBLISH_TIME] == "08:00"
    assert fields[schema.FILE_NAME] == "1.webp"


class TestBulkAdd:
    def test_queues_each_item_with_defaults(self, client, record_store, owner):
        seed_item(record_store, 5)

        response = client.post(
            f"{BASE}/bulk-add",
            json={
                "email": OWNER,
                "workspaceCode": "hnp",
                "queueItems": [
                    {"imageUrl": "https://cdn.example.com/a.webp", "fileName": "a.webp", "publishDate": "2026-11-02"},
                    {"imageUrl": "https://cdn.example.com/b.webp"},
                ],
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["summary"] == {"total": 2, "successful": 2, "failed": 0}
        assert "errors" not in body
        assert [r["fileName"] for r in body["results"]] == ["a.webp", "Uploaded Image"]

        created = [record_store.tables[TABLE][r["queueItemId"]] for r in body["results"]]
        assert [fields[schema.PRIORITY] for fields in created] == [6, 7]
        assert created[1][schema.NOTES] == "Uploaded via web interface"
        assert created[0][schema.EXPERIENCE_TYPE] == ["recquHAhmVdggGNOp"]

    def test_reports_per_item_failures(self, client, record_store, owner):
        record_store.failing.add("create")

        response = client.post(
            f"{BASE}/bulk-add",
            json={"email": OWNER, "queueItems": [{"imageUrl": "https://cdn.example.com/a.webp"}]},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["summary"] == {"total": 1, "successful": 0, "failed": 1}
        assert body["errors"][0]["status"] == "error"
        assert body["errors"][0]["originalId"] == "0"

    def test_unknown_user(self, client, record_store):
        response = client.post(
            f"{BASE}/bulk-add",
            json={"email": "ghost@example.com", "queueItems": [{"imageUrl": "https://cdn.example.com/a.webp"}]},
        )
        assert response.status_code == 404
        assert record_store.count("create") == 0

    def test_requires_items(self, client):
        response = client.post(f"{BASE}/bulk-add", json={"email": OWNER, "queueItems": []})
        assert response.status_code == 400
        assert response.json() == {"error": "Email and non-empty queue items array are required"}


def test_tags_round_trip(client, record_store):
    item = seed_item(record_store, 1, **{schema.TAGS: ["beach"]})
    seed_item(record_store, 2)

    tagged = client.post(f"{BASE}/tags", json={"recordId": item.id, "tags": ["sunset", "beach"]})
    found = client.get(f"{BASE}/tags", params={"email": OWNER, "tag": "sunset"})

    assert tagged.json()["queueItem"]["tags"] == ["beach", "sunset"]
    assert [i["id"] for i in found.json()["queueItems"]] == [item.id]


def test_processing_time(client, record_store):
    item = seed_item(record_store, 1)

    response = client.post(f"{BASE}/processing-time", json={"recordId": item.id, "processingTimeSeconds": 12.5})

    assert response.status_code == 200
    assert response.json()["queueItem"]["processingTime"] == 12.5


def test_processing_time_must_be_numeric(client, record_store):
    item = seed_item(record_store, 1)
    response = client.post(f"{BASE}/processing-time", json={"recordId": item.id, "processingTimeSeconds": True})
    assert response.status_code == 400


def test_unconfigured_record_store():
    response = TestClient(app).post(f"{BASE}/status", json={"email": OWNER})

    assert response.status_code == 500
    assert response.json() == {"error": "Airtable configuration missing"}
