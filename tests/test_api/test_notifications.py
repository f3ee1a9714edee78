import pytest

BASE = "/api/notifications"
EMAIL = "reader@example.com"


def create(client, title, **extra):
    response = client.post(
        BASE, json={"email": EMAIL, "type": "image_published", "title": title, "message": f"{title} is live", **extra}
    )
    assert response.status_code == 200
    return response.json()["notification"]


def test_create_and_list(client):
    first = create(client, "First", relatedImageId="rec123")

    response = client.get(BASE, params={"email": EMAIL})

    assert response.status_code == 200
    notifications = response.json()["notifications"]
    assert [n["id"] for n in notifications] == [first["id"]]
    assert notifications[0]["isRead"] is False
    assert notifications[0]["relatedImageId"] == "rec123"


def test_mark_one_read(client):
    first = create(client, "First")
    create(client, "Second")

    response = client.patch(BASE, json={"notificationId": first["id"]})
    unread = client.get(BASE, params={"email": EMAIL, "unreadOnly": "true"}).json()["notifications"]

    assert response.json()["message"] == "Notification marked as read"
    assert [n["title"] for n in unread] == ["Second"]


def test_mark_all_read(client, record_store):
    create(client, "First")
    create(client, "Second")

    response = client.patch(BASE, json={"email": EMAIL, "markAllAsRead": True})
    unread = client.get(BASE, params={"email": EMAIL, "unreadOnly": "true"}).json()["notifications"]

    assert response.status_code == 200
    assert unread == []
    assert len(record_store.batches) == 1


@pytest.mark.parametrize("body", [{}, {"markAllAsRead": True}, {"email": EMAIL}])
def test_patch_requires_target(client, body):
    response = client.patch(BASE, json=body)
    assert response.status_code == 400
    assert response.json() == {"error": "Either notificationId or markAllAsRead with email is required"}


def test_create_requires_fields(client):
    response = client.post(BASE, json={"email": EMAIL, "type": "info"})
    assert response.status_code == 400
    assert response.json() == {"error": "Email, type, title, and message are required"}


def test_list_requires_email(client):
    assert client.get(BASE).status_code == 400


def test_store_failure(client, record_store):
    record_store.failing.add("list")

    response = client.get(BASE, params={"email": EMAIL})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch notifications"}
