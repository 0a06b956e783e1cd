def _ids(resp):
    return [item["id"] for item in resp.json()]


def test_full_connection_scenario(client, make_user, auth):
    u1, u2 = make_user(name="Ana"), make_user(name="Bruno")
    h1, h2 = auth(u1), auth(u2)

    r = client.post(f"/api/users/{u2}/conexoes", headers=h1)
    assert r.status_code == 201
    assert r.json()["message"]

    sent = client.get(f"/api/users/{u1}/conexoes/enviadas", headers=h1)
    assert sent.status_code == 200
    assert _ids(sent) == [u2]
    assert _ids(client.get(f"/api/users/{u2}/conexoes/pendentes", headers=h2)) == [u1]

    r = client.put(f"/api/users/{u1}/conexoes/aceitar", headers=h2)
    assert r.status_code == 200

    friends1 = client.get(f"/api/users/{u1}/conexoes", headers=h1).json()
    friends2 = client.get(f"/api/users/{u2}/conexoes", headers=h2).json()
    assert [f["id"] for f in friends1] == [u2]
    assert [f["id"] for f in friends2] == [u1]
    assert friends1[0]["name"] == "Bruno"
    assert friends1[0]["connection_id"] == friends2[0]["connection_id"]

    r = client.delete(f"/api/users/{u2}/conexoes/desfazer", headers=h1)
    assert r.status_code == 200
    assert client.get(f"/api/users/{u1}/conexoes", headers=h1).json() == []
    assert client.get(f"/api/users/{u2}/conexoes", headers=h2).json() == []


def test_duplicate_request_is_400(client, make_user, auth):
    u1, u2 = make_user(), make_user()
    client.post(f"/api/users/{u2}/conexoes", headers=auth(u1))

    r = client.post(f"/api/users/{u2}/conexoes", headers=auth(u1))

    assert r.status_code == 400
    assert "pendente" in r.json()["message"]


def test_request_to_self_is_400(client, make_user, auth):
    u1 = make_user()
    r = client.post(f"/api/users/{u1}/conexoes", headers=auth(u1))
    assert r.status_code == 400


def test_accept_twice_is_400_and_missing_is_404(client, make_user, auth):
    u1, u2, u3 = make_user(), make_user(), make_user()
    client.post(f"/api/users/{u2}/conexoes", headers=auth(u1))
    assert client.put(f"/api/users/{u1}/conexoes/aceitar", headers=auth(u2)).status_code == 200

    r = client.put(f"/api/users/{u1}/conexoes/aceitar", headers=auth(u2))
    assert r.status_code == 400

    r = client.put(f"/api/users/{u3}/conexoes/aceitar", headers=auth(u2))
    assert r.status_code == 404
    assert r.json() == {"message": "Solicitação de conexão não encontrada."}


def test_cancel_refuse_block_and_history(client, make_user, auth):
    u1, u2, u3, u4 = make_user(), make_user(), make_user(), make_user()
    client.post(f"/api/users/{u2}/conexoes", headers=auth(u1))
    client.post(f"/api/users/{u3}/conexoes", headers=auth(u1))
    client.post(f"/api/users/{u4}/conexoes", headers=auth(u1))

    assert client.delete(f"/api/users/{u4}/conexoes", headers=auth(u1)).status_code == 200
    assert client.get(f"/api/users/{u4}/conexoes/pendentes", headers=auth(u4)).json() == []

    assert client.put(f"/api/users/{u1}/conexoes/recusar", headers=auth(u3)).status_code == 200
    assert client.put(f"/api/users/{u2}/conexoes/bloquear", headers=auth(u1)).status_code == 200
    assert client.get(f"/api/users/{u2}/conexoes/pendentes", headers=auth(u2)).json() == []

    r = client.post(f"/api/users/{u1}/conexoes", headers=auth(u2))
    assert r.status_code == 400
    assert "bloqueada" in r.json()["message"]

    history = client.get(f"/api/users/{u1}/conexoes/historico", headers=auth(u1)).json()
    statuses = {h["other_id"]: (h["status"], h["direction"]) for h in history}
    assert statuses == {u2: ("blocked", "sent"), u3: ("refused", "sent")}


def test_noop_transitions_report_success(client, make_user, auth):
    u1, u2 = make_user(), make_user()
    assert client.delete(f"/api/users/{u2}/conexoes", headers=auth(u1)).status_code == 200
    assert client.put(f"/api/users/{u2}/conexoes/recusar", headers=auth(u1)).status_code == 200
    assert client.delete(f"/api/users/{u2}/conexoes/desfazer", headers=auth(u1)).status_code == 200
    assert client.put(f"/api/users/{u2}/conexoes/bloquear", headers=auth(u1)).status_code == 200

    # блок без связи ничего не создаёт
    assert client.get(f"/api/users/{u1}/conexoes/historico", headers=auth(u1)).json() == []
    assert client.post(f"/api/users/{u1}/conexoes", headers=auth(u2)).status_code == 201


def test_lists_of_other_user_are_forbidden(client, make_user, auth):
    u1, u2 = make_user(), make_user()
    admin = make_user(is_admin=True)

    r = client.get(f"/api/users/{u2}/conexoes", headers=auth(u1))
    assert r.status_code == 403
    assert "message" in r.json()

    assert client.get(f"/api/users/{u2}/conexoes", headers=auth(admin)).status_code == 200


def test_suggestions_endpoint(client, make_user, auth):
    me = make_user(course="Engenharia", interests=["robótica"])
    peer = make_user(course="Engenharia")
    connected = make_user(course="Engenharia")
    client.post(f"/api/users/{connected}/conexoes", headers=auth(me))

    r = client.get(f"/api/users/{me}/sugestoes", headers=auth(me))

    assert r.status_code == 200
    assert _ids(r) == [peer]


def test_missing_and_invalid_token(client, make_user):
    u1 = make_user()

    r = client.get(f"/api/users/{u1}/conexoes")
    assert r.status_code == 403
    assert r.json() == {"message": "Token não fornecido"}

    r = client.get(f"/api/users/{u1}/conexoes", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401
