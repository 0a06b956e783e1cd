from src.models.event import Event


def test_non_admin_is_forbidden(client, make_user, auth):
    u1 = make_user()
    assert client.get("/api/admins", headers=auth(u1)).status_code == 403
    assert client.get("/api/admin/users", headers=auth(u1)).status_code == 403
    assert client.post("/api/admins", json={"user_id": u1}, headers=auth(u1)).status_code == 403


def test_grant_and_revoke_admin(client, db, make_user, auth):
    admin = make_user(is_admin=True)
    u1 = make_user()

    r = client.post("/api/admins", json={"user_id": u1}, headers=auth(admin))
    assert r.status_code == 200
    assert {u["id"] for u in client.get("/api/admins", headers=auth(admin)).json()} == {admin, u1}

    # новый админ сразу получает доступ (флаг читается из БД, не из токена)
    assert client.get("/api/admin/users", headers=auth(u1)).status_code == 200

    r = client.delete(f"/api/admins/{u1}", headers=auth(admin))
    assert r.status_code == 200
    assert [u["id"] for u in client.get("/api/admins", headers=auth(admin)).json()] == [admin]

    types = [e.type for e in db.query(Event).order_by(Event.id).all()]
    assert types == ["admin_granted", "admin_revoked"]


def test_grant_unknown_user_is_404(client, make_user, auth):
    admin = make_user(is_admin=True)
    r = client.post("/api/admins", json={"user_id": 4242}, headers=auth(admin))
    assert r.status_code == 404


def test_list_all_users(client, make_user, auth):
    admin = make_user(is_admin=True)
    u1 = make_user(name="Bia")

    users = client.get("/api/admin/users", headers=auth(admin)).json()

    assert [u["id"] for u in users] == [admin, u1]
    assert set(users[0]) == {"id", "name", "email", "is_admin"}
