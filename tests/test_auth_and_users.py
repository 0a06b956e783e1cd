def _register(client, name="Ana", email="ana@uni.example", password="pass123"):
    return client.post("/api/register", json={"name": name, "email": email, "password": password})


def _login(client, email="ana@uni.example", password="pass123"):
    return client.post("/api/login", json={"email": email, "password": password})


def test_register_login_and_profile(client):
    r = _register(client)
    assert r.status_code == 201

    r = _login(client)
    assert r.status_code == 200
    body = r.json()
    assert body["first_login"] is True
    headers = {"Authorization": f"Bearer {body['token']}"}

    me = client.get("/api/users/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["email"] == "ana@uni.example"
    assert me.json()["id"] == body["user_id"]

    r = client.put(
        "/api/users/me",
        headers=headers,
        json={"course": "Computação", "semester": 3, "interests": ["IA", " ia ", "xadrez", ""]},
    )
    assert r.status_code == 200

    me = client.get("/api/users/me", headers=headers).json()
    assert me["course"] == "Computação"
    assert me["interests"] == ["IA", "xadrez"]
    assert me["first_login"] is False
    assert _login(client).json()["first_login"] is False


def test_duplicate_email_and_bad_credentials(client):
    assert _register(client).status_code == 201

    r = _register(client, email="ANA@uni.example")
    assert r.status_code == 400
    assert r.json() == {"message": "E-mail já cadastrado"}

    r = _login(client, password="wrong")
    assert r.status_code == 400
    assert r.json() == {"message": "Credenciais inválidas"}
    assert _login(client, email="nobody@uni.example").status_code == 400


def test_register_validation_is_400(client):
    r = client.post("/api/register", json={"name": "Ana"})
    assert r.status_code == 400
    assert "message" in r.json()


def test_change_password(client):
    _register(client)
    token = _login(client).json()["token"]
    headers = {"Authorization": f"Bearer {token}"}

    r = client.put("/api/users/me/senha", headers=headers, json={"old_password": "nope", "new_password": "x"})
    assert r.status_code == 400

    r = client.put("/api/users/me/senha", headers=headers, json={"old_password": "pass123", "new_password": "new456"})
    assert r.status_code == 200
    assert _login(client).status_code == 400
    assert _login(client, password="new456").status_code == 200


def test_logout(client):
    r = client.post("/api/logout")
    assert r.status_code == 200
    assert r.json()["token"] is None


def test_public_profile(client, make_user, auth):
    u1, u2 = make_user(), make_user(name="Bruno", course="Direito")

    r = client.get(f"/api/users/{u2}", headers=auth(u1))
    assert r.status_code == 200
    assert r.json()["name"] == "Bruno"
    assert "password_hash" not in r.json()

    assert client.get("/api/users/9999", headers=auth(u1)).status_code == 404


def test_search_hides_self_and_network(client, make_user, auth):
    me = make_user(name="Carla Souza", course="Física")
    friend = make_user(name="Carlos Lima", course="Física")
    refused = make_user(name="Carolina", course="Física")
    free = make_user(name="Caio", course="Física", interests=["astronomia"])
    other_course = make_user(name="Carmen", course="Letras", interests=["Astronomia"])
    client.post(f"/api/users/{friend}/conexoes", headers=auth(me))
    client.post(f"/api/users/{me}/conexoes", headers=auth(refused))
    client.put(f"/api/users/{refused}/conexoes/recusar", headers=auth(me))

    r = client.get("/api/users/search", params={"name": "ca"}, headers=auth(me))
    assert r.status_code == 200
    assert {u["id"] for u in r.json()} == {free, other_course}

    r = client.get("/api/users/search", params={"course": "Física"}, headers=auth(me))
    assert [u["id"] for u in r.json()] == [free]

    r = client.get("/api/users/search", params={"interests": "astronomia, pintura"}, headers=auth(me))
    assert {u["id"] for u in r.json()} == {free, other_course}


def test_search_requires_a_filter(client, make_user, auth):
    me = make_user()
    r = client.get("/api/users/search", headers=auth(me))
    assert r.status_code == 400
    assert "filtro" in r.json()["message"]


def test_search_treats_like_wildcards_literally(client, make_user, auth):
    me = make_user(name="Zeca")
    underscored = make_user(name="Ana_Maria")
    make_user(name="Ana Paula")
    percent = make_user(name="100% Bruno")

    r = client.get("/api/users/search", params={"name": "%"}, headers=auth(me))
    assert [u["id"] for u in r.json()] == [percent]

    r = client.get("/api/users/search", params={"name": "a_m"}, headers=auth(me))
    assert [u["id"] for u in r.json()] == [underscored]

    r = client.get("/api/users/search", params={"name": "\\"}, headers=auth(me))
    assert r.json() == []


def test_search_pages_by_name(client, make_user, auth):
    me = make_user(name="Zeca", course="Química")
    first = make_user(name="Alice", course="Química")
    second = make_user(name="Bia", course="Química")
    make_user(name="Cris", course="Química")

    r = client.get("/api/users/search", params={"course": "Química", "limit": 2}, headers=auth(me))
    assert [u["id"] for u in r.json()] == [first, second]

    r = client.get("/api/users/search", params={"course": "Química", "offset": 1, "limit": 1}, headers=auth(me))
    assert [u["id"] for u in r.json()] == [second]
