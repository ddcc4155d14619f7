"""HTTP surface: routes call the engine and map rejections to status codes."""
from fastapi.testclient import TestClient

from canastra.services.tournament_engine import TournamentEngine


def _create_team(client: TestClient, name: str) -> dict:
    resp = client.post(
        "/api/teams",
        json={"name": name, "players": [{"name": f"{name} 1"}, {"name": f"{name} 2", "contact": "555"}]},
    )
    assert resp.status_code == 201
    return resp.json()["team"]


def test_health(client: TestClient):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_app_uses_overridden_engine(client: TestClient, engine: TournamentEngine):
    """Routes must act on the test engine, never on one built from the production database."""
    team = _create_team(client, "Ases")
    assert [t.id for t in engine.tournament.teams] == [team["id"]]


def test_get_tournament_returns_snapshot_and_loading_flag(client: TestClient):
    _create_team(client, "Ases")

    resp = client.get("/api/tournament")

    assert resp.status_code == 200
    data = resp.json()
    assert data["loading"] is False
    assert data["tournament"]["currentRoundNumber"] == 0
    team = data["tournament"]["teams"][0]
    assert (team["name"], team["lives"], team["eliminated"]) == ("Ases", 2, False)
    assert team["players"][1]["contact"] == "555"


def test_create_team_validation(client: TestClient):
    assert client.post("/api/teams", json={"name": "  "}).status_code == 422
    too_many = [{"name": "a"}, {"name": "b"}, {"name": "c"}]
    assert client.post("/api/teams", json={"name": "X", "players": too_many}).status_code == 422


def test_update_and_delete_team(client: TestClient):
    team = _create_team(client, "Ases")

    resp = client.put(f"/api/teams/{team['id']}", json={"name": "Ases de Ouro", "lives": 0})
    assert resp.status_code == 200
    assert resp.json()["team"]["eliminated"] is True

    assert client.put("/api/teams/missing", json={"name": "X"}).status_code == 404
    assert client.delete(f"/api/teams/{team['id']}").status_code == 204
    assert client.delete(f"/api/teams/{team['id']}").status_code == 404


def test_full_round_flow(client: TestClient):
    a, b, c, d = (_create_team(client, n) for n in "ABCD")
    rnd = client.post("/api/rounds").json()["round"]
    assert rnd["number"] == 1

    m1 = client.post(f"/api/rounds/{rnd['id']}/matches", json={"teamOneId": a["id"], "teamTwoId": b["id"]})
    m2 = client.post(f"/api/rounds/{rnd['id']}/matches", json={"teamOneId": c["id"], "teamTwoId": d["id"]})
    assert m1.status_code == 201 and m2.status_code == 201
    m1, m2 = m1.json()["match"], m2.json()["match"]
    assert m1["status"] == "WAITING"

    started = client.patch(f"/api/matches/{m1['id']}/status", json={"status": "IN_PROGRESS"})
    assert started.json()["match"]["startTime"] is not None
    scored = client.patch(f"/api/matches/{m1['id']}/score", json={"teamOneScore": 1200, "teamTwoScore": 800})
    assert scored.json()["match"]["status"] == "IN_PROGRESS"

    # round still open
    assert client.post("/api/rounds/advance").status_code == 409

    f1 = client.post(f"/api/matches/{m1['id']}/finish", json={"teamOneScore": 4000, "teamTwoScore": 3999})
    f2 = client.post(f"/api/matches/{m2['id']}/finish", json={"teamOneScore": 3000, "teamTwoScore": 3500})
    assert f1.json()["winnerId"] == a["id"]
    assert f2.json()["winnerId"] == d["id"]
    assert f2.json()["eliminated"] is False

    advanced = client.post("/api/rounds/advance")
    assert advanced.status_code == 201
    new_round = advanced.json()["round"]
    assert new_round["number"] == 2
    assert [(m["teamOneId"], m["teamTwoId"]) for m in new_round["matches"]] == [(a["id"], d["id"])]

    current = client.get("/api/tournament/current-round").json()
    assert current["round"]["id"] == new_round["id"]
    assert (current["totalMatches"], current["finishedMatches"]) == (1, 0)

    state = client.get("/api/tournament").json()["tournament"]
    assert state["rounds"][0]["completed"] is True


def test_match_rejections_map_to_status_codes(client: TestClient):
    a, b = (_create_team(client, n) for n in "AB")
    rnd = client.post("/api/rounds").json()["round"]

    self_match = client.post(f"/api/rounds/{rnd['id']}/matches", json={"teamOneId": a["id"], "teamTwoId": a["id"]})
    assert self_match.status_code == 422

    missing_round = client.post("/api/rounds/missing/matches", json={"teamOneId": a["id"], "teamTwoId": b["id"]})
    assert missing_round.status_code == 404

    match = client.post(f"/api/rounds/{rnd['id']}/matches", json={"teamOneId": a["id"], "teamTwoId": b["id"]})
    match_id = match.json()["match"]["id"]
    assert client.post(f"/api/matches/{match_id}/reverse").status_code == 409
    assert client.post(f"/api/matches/{match_id}/finish", json={"teamOneScore": -1, "teamTwoScore": 0}).status_code == 422
    assert client.patch(f"/api/matches/{match_id}/status", json={"status": "PAUSED"}).status_code == 422


def test_reverse_and_delete_match_restore_lives(client: TestClient):
    a, b = (_create_team(client, n) for n in "AB")
    rnd = client.post("/api/rounds").json()["round"]
    match = client.post(f"/api/rounds/{rnd['id']}/matches", json={"teamOneId": a["id"], "teamTwoId": b["id"]})
    match_id = match.json()["match"]["id"]

    client.post(f"/api/matches/{match_id}/finish", json={"teamOneScore": 0, "teamTwoScore": 4000})
    reversed_ = client.post(f"/api/matches/{match_id}/reverse")
    assert reversed_.status_code == 200
    assert reversed_.json()["restoredTeamId"] == a["id"]
    assert reversed_.json()["match"]["status"] == "IN_PROGRESS"

    client.post(f"/api/matches/{match_id}/finish", json={"teamOneScore": 0, "teamTwoScore": 4000})
    deleted = client.delete(f"/api/matches/{match_id}")
    assert deleted.status_code == 200
    teams = client.get("/api/tournament").json()["tournament"]["teams"]
    assert [t["lives"] for t in teams] == [2, 2]


def test_reregister_and_active_teams(client: TestClient):
    a, b = (_create_team(client, n) for n in "AB")
    client.put(f"/api/teams/{a['id']}", json={"name": "A", "lives": 0})

    active = client.get("/api/teams/active").json()
    assert [t["id"] for t in active] == [b["id"]]

    resp = client.post(f"/api/teams/{a['id']}/reregister")
    assert resp.status_code == 200
    assert resp.json()["team"]["reregistered"] is True
    assert len(client.get("/api/teams/active").json()) == 2

    for _ in range(5):
        client.post("/api/rounds")
    assert client.post(f"/api/teams/{a['id']}/reregister").status_code == 409


def test_advance_with_single_winner_is_conflict(client: TestClient):
    a, b = (_create_team(client, n) for n in "AB")
    rnd = client.post("/api/rounds").json()["round"]
    match = client.post(f"/api/rounds/{rnd['id']}/matches", json={"teamOneId": a["id"], "teamTwoId": b["id"]})
    client.post(f"/api/matches/{match.json()['match']['id']}/finish", json={"teamOneScore": 4000, "teamTwoScore": 0})

    resp = client.post("/api/rounds/advance")

    assert resp.status_code == 409
    assert "at least 2" in resp.json()["detail"]


def test_delete_round(client: TestClient):
    rnd = client.post("/api/rounds").json()["round"]
    assert client.delete(f"/api/rounds/{rnd['id']}").status_code == 200
    assert client.delete(f"/api/rounds/{rnd['id']}").status_code == 404
    assert client.get("/api/tournament").json()["tournament"]["currentRoundNumber"] == 0


def test_reregistrable_teams_lists_eliminated_teams_until_cutoff(client: TestClient):
    a, b = (_create_team(client, n) for n in "AB")
    assert client.get("/api/teams/reregistrable").json() == []

    client.put(f"/api/teams/{a['id']}", json={"name": "A", "lives": 0})
    assert [t["id"] for t in client.get("/api/teams/reregistrable").json()] == [a["id"]]

    client.post(f"/api/teams/{a['id']}/reregister")
    assert client.get("/api/teams/reregistrable").json() == []

    client.put(f"/api/teams/{b['id']}", json={"name": "B", "lives": 0})
    for _ in range(5):
        client.post("/api/rounds")
    assert client.get("/api/teams/reregistrable").json() == []
