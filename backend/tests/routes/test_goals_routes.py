# backend/tests/routes/test_goals_routes.py
from tests._helpers import MENTEE_ID, MENTOR_ID, auth_headers

BASE = "/api/v1/goals"


def _create(client, user_id=MENTEE_ID, milestones=("Draft resume",)):
    return client.post(
        BASE,
        json={
            "mentor_id": MENTOR_ID,
            "mentee_id": MENTEE_ID,
            "title": "Land a backend role",
            "milestones": list(milestones),
        },
        headers=auth_headers(user_id),
    )


def test_goal_lifecycle(client):
    created = _create(client)
    assert created.status_code == 201
    goal = created.json()
    assert goal["status"] == "not-started"

    added = client.post(
        f"{BASE}/{goal['id']}/milestones",
        json={"title": "Mock interview"},
        headers=auth_headers(MENTOR_ID),
    )
    assert added.status_code == 201
    milestones = added.json()["milestones"]
    assert [m["title"] for m in milestones] == ["Draft resume", "Mock interview"]

    toggled = client.post(
        f"{BASE}/{goal['id']}/milestones/{milestones[0]['id']}/toggle",
        headers=auth_headers(MENTEE_ID),
    )
    assert toggled.json()["progress"] == 0.5
    assert toggled.json()["status"] == "in-progress"

    listed = client.get(BASE, headers=auth_headers(MENTOR_ID)).json()
    assert [g["id"] for g in listed] == [goal["id"]]


def test_stranger_cannot_create_or_read(client):
    assert _create(client, user_id="stranger").status_code == 403
    goal = _create(client).json()
    assert client.get(f"{BASE}/{goal['id']}", headers=auth_headers("stranger")).status_code == 403
