"""Auth user sync, profile, community presence, export and clear-data."""

API = "/api/v1"


def _opt_in(client, headers, username=None):
    body = {"show_in_community": True}
    if username:
        body["username"] = username
    r = client.patch(f"{API}/user/profile", json=body, headers=headers)
    assert r.status_code == 200
    return r.json()


def test_auth_user_upserts_from_token(client, auth_headers, token_factory):
    r = client.get(f"{API}/auth/user", headers=auth_headers)
    assert r.status_code == 200
    user = r.json()
    assert user["id"] == "user-1"
    assert user["email"] == "alice@example.com"
    assert user["first_name"] == "Alice"
    assert user["weekly_goal"] == 4
    assert user["show_in_community"] is False

    renamed = {"Authorization": f"Bearer {token_factory('user-1', 'alice@example.com', first_name='Ally')}"}
    assert client.get(f"{API}/auth/user", headers=renamed).json()["first_name"] == "Ally"


def test_auth_user_email_conflict(client, auth_headers, token_factory):
    client.get(f"{API}/auth/user", headers=auth_headers)
    impostor = {"Authorization": f"Bearer {token_factory('user-9', 'alice@example.com')}"}
    assert client.get(f"{API}/auth/user", headers=impostor).status_code == 409


def test_expired_token_rejected(client, token_factory):
    headers = {"Authorization": f"Bearer {token_factory('user-1', exp=1)}"}
    assert client.get(f"{API}/auth/user", headers=headers).status_code == 401


def test_profile_defaults_and_patch(client, auth_headers):
    profile = client.get(f"{API}/user/profile", headers=auth_headers).json()
    assert profile == {"username": None, "profile_image_url": None, "show_in_community": False}

    profile = _opt_in(client, auth_headers, username="alice")
    assert profile["username"] == "alice"
    assert profile["show_in_community"] is True

    r = client.patch(f"{API}/user/profile", json={"profile_image_url": "https://img/a.png"}, headers=auth_headers)
    assert r.json() == {"username": "alice", "profile_image_url": "https://img/a.png", "show_in_community": True}

    r = client.patch(f"{API}/user/profile", json={"username": None}, headers=auth_headers)
    assert r.json()["username"] is None
    assert r.json()["profile_image_url"] == "https://img/a.png"


def test_presence_requires_opt_in(client, auth_headers):
    body = {"workout_name": "Push day", "exercise_names": ["Bench Press", "Push-ups"]}
    r = client.post(f"{API}/community/presence", json=body, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["success"] is False
    assert r.json()["presence"] is None
    assert client.get(f"{API}/community/feed", headers=auth_headers).json()["activities"] == []

    _opt_in(client, auth_headers, username="alice")
    r = client.post(f"{API}/community/presence", json=body, headers=auth_headers)
    assert r.json()["success"] is True
    assert r.json()["presence"]["exercise_names"] == "Bench Press, Push-ups"

    feed = client.get(f"{API}/community/feed", headers=auth_headers).json()
    assert feed["active_users"] == 1
    assert len(feed["activities"]) == 1
    assert feed["activities"][0]["username"] == "alice"
    assert feed["activities"][0]["workout_name"] == "Push day"


def test_presence_username_falls_back_to_email(client, other_headers):
    _opt_in(client, other_headers)
    body = {"workout_name": "Run", "exercise_names": []}
    r = client.post(f"{API}/community/presence", json=body, headers=other_headers)
    assert r.json()["presence"]["username"] == "bob@example.com"


def test_heartbeat_counts_active_without_feed_entry(client, auth_headers, other_headers):
    r = client.post(f"{API}/community/heartbeat", headers=other_headers)
    assert r.status_code == 200
    assert r.json()["success"] is True

    feed = client.get(f"{API}/community/feed", headers=auth_headers).json()
    assert feed["active_users"] == 1
    assert feed["activities"] == []


def test_export_csv(client, auth_headers, exercise_ids):
    client.get(f"{API}/auth/user", headers=auth_headers)
    client.post(
        f"{API}/workouts",
        json={"name": "Pull", "exercises": [{"exercise_id": exercise_ids["Deadlift"], "sets": 3, "weight": 150}]},
        headers=auth_headers,
    )
    client.post(
        f"{API}/personal-records",
        json={"exercise_id": exercise_ids["Deadlift"], "weight": 160, "reps": 1},
        headers=auth_headers,
    )
    client.put(f"{API}/goals/monthly", json={"month": 1, "year": 2026, "target_workouts": 10}, headers=auth_headers)

    r = client.get(f"{API}/export/data", headers=auth_headers)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert r.headers["content-disposition"].startswith('attachment; filename="fit-tracker-export-')
    body = r.text
    for section in ("USER PROFILE", "WORKOUTS", "WORKOUT EXERCISES", "PERSONAL RECORDS", "MONTHLY GOALS"):
        assert f"=== {section} ===" in body
    assert "alice@example.com" in body
    assert "Pull" in body
    assert "Deadlift" in body
    assert "1,2026,10,0,0%" in body


def test_export_requires_auth(client):
    assert client.get(f"{API}/export/data").status_code == 401
    assert client.delete(f"{API}/clear/data").status_code == 401


def test_clear_data(client, auth_headers, other_headers, exercise_ids):
    _opt_in(client, auth_headers, username="alice")
    client.patch(f"{API}/user/profile", json={"profile_image_url": "https://img/a.png"}, headers=auth_headers)
    for name in ("A", "B"):
        client.post(
            f"{API}/workouts",
            json={"name": name, "exercises": [{"exercise_id": exercise_ids["Squat"], "sets": 1}]},
            headers=auth_headers,
        )
    client.post(f"{API}/workouts", json={"name": "Bob's"}, headers=other_headers)
    client.post(
        f"{API}/personal-records",
        json={"exercise_id": exercise_ids["Squat"], "weight": 100, "reps": 3},
        headers=auth_headers,
    )
    client.put(f"{API}/goals/monthly", json={"month": 2, "year": 2026, "target_workouts": 6}, headers=auth_headers)
    client.post(
        f"{API}/goals/photos",
        json={"month": 2, "year": 2026, "type": "before", "image_url": "https://img/b.jpg"},
        headers=auth_headers,
    )
    client.post(f"{API}/community/presence", json={"workout_name": "A", "exercise_names": []}, headers=auth_headers)

    r = client.delete(f"{API}/clear/data", headers=auth_headers)
    assert r.status_code == 200
    deleted = r.json()["deleted_records"]
    assert deleted == {
        "workouts": 2,
        "personal_records": 1,
        "monthly_goals": 1,
        "goal_photos": 1,
        "community_presence": 1,
        "total": 6,
    }

    assert client.get(f"{API}/workouts", headers=auth_headers).json() == []
    assert len(client.get(f"{API}/workouts", headers=other_headers).json()) == 1
    profile = client.get(f"{API}/user/profile", headers=auth_headers).json()
    assert profile["profile_image_url"] is None
    assert profile["show_in_community"] is False
    assert profile["username"] == "alice"
    assert len(client.get(f"{API}/exercises").json()) == 8
