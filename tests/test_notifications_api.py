from __future__ import annotations

from sqlalchemy import func, select

from push_api.models.domain import DeliveryRecord

from conftest import expo_token


def test_send_returns_record_and_ticket(client, db, gateway, make_recipient):
    recipient = make_recipient(token=expo_token(1))

    response = client.post(
        "/notifications/send",
        json={"user_id": recipient.id, "title": "Hi", "body": "There", "data": {"a": 1}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Notification sent"
    assert body["result"]["status"] == "ok"
    record = db.get(DeliveryRecord, body["record_id"])
    assert record.user_id == recipient.id
    assert record.ticket_id == body["result"]["id"]


def test_send_to_unknown_recipient_is_404(client, db):
    response = client.post("/notifications/send", json={"user_id": 424242, "title": "T", "body": "B"})

    assert response.status_code == 404
    assert response.json()["detail"]["kind"] == "RecipientNotFound"
    assert db.scalar(select(func.count()).select_from(DeliveryRecord)) == 0


def test_send_to_recipient_without_token_is_400(client, make_recipient):
    recipient = make_recipient(token=None)

    response = client.post("/notifications/send", json={"user_id": recipient.id, "title": "T", "body": "B"})

    assert response.status_code == 400
    assert response.json()["detail"]["kind"] == "NoEndpoint"


def test_send_rejects_missing_fields(client, gateway):
    response = client.post("/notifications/send", json={"title": "T", "body": "B"})

    assert response.status_code == 422
    assert gateway.submissions == []


def test_send_bulk_mixed_recipients(client, db, gateway, make_recipient):
    a = make_recipient(token=expo_token(1))
    b = make_recipient(token=None)
    c = make_recipient(token="not-an-expo-token")

    response = client.post(
        "/notifications/send-bulk",
        json={"user_ids": [a.id, b.id, c.id], "title": "T", "body": "B"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["sent_count"] == 1
    assert len(body["results"]) == 1
    assert len(gateway.sent_messages) == 1
    records = db.scalars(select(DeliveryRecord)).all()
    assert [r.user_id for r in records] == [a.id]


def test_send_bulk_without_valid_recipients(client, make_recipient):
    a = make_recipient(token=None)

    response = client.post("/notifications/send-bulk", json={"user_ids": [a.id], "title": "T", "body": "B"})

    assert response.status_code == 400
    assert response.json()["detail"]["kind"] == "NoValidRecipients"


def test_send_bulk_requires_non_empty_ids(client):
    response = client.post("/notifications/send-bulk", json={"user_ids": [], "title": "T", "body": "B"})

    assert response.status_code == 422


def test_send_all_reports_count_only(client, db, gateway, make_recipient):
    for i in range(3):
        make_recipient(token=expo_token(i))

    response = client.post("/notifications/send-all", json={"title": "T", "body": "B"})

    assert response.status_code == 200
    body = response.json()
    assert body["sent_count"] == 3
    assert "results" not in body
    assert db.scalar(select(func.count()).select_from(DeliveryRecord)) == 0


def test_history_lists_callers_records(client, caller, make_recipient, db):
    other = make_recipient()
    db.add_all(
        [
            DeliveryRecord(user_id=caller.id, title="mine", body="B", data="{}", status="ok"),
            DeliveryRecord(user_id=other.id, title="theirs", body="B", data="{}", status="ok"),
        ]
    )
    db.commit()

    response = client.get("/notifications/history")

    assert response.status_code == 200
    titles = [item["title"] for item in response.json()["notifications"]]
    assert titles == ["mine"]


def test_history_store_failure_is_500(client, engine):
    DeliveryRecord.__table__.drop(engine)

    response = client.get("/notifications/history")

    assert response.status_code == 500
    assert response.json()["detail"]["kind"] == "StorageError"
