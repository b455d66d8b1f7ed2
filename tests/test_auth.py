from conftest import PASSWORD, auth_headers


def _login(client, email, password=PASSWORD):
    return client.post("/auth/login", data={"username": email, "password": password})


def test_registro_crea_guest(client):
    response = client.post("/auth/signup", json={
        "email": "Nuevo@Example.com", "password": "Clave1234", "name": "이순신"
    })
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "nuevo@example.com"
    assert data["role"] == "guest"
    assert "hashed_password" not in data


def test_registro_duplicado(client, guest):
    response = client.post("/auth/signup", json={"email": guest.email, "password": "Clave1234"})
    assert response.status_code == 409


def test_registro_password_debil(client):
    response = client.post("/auth/signup", json={"email": "a@example.com", "password": "sololetras"})
    assert response.status_code == 422


def test_login_y_sesion(client, guest):
    response = _login(client, guest.email)
    assert response.status_code == 200
    tokens = response.json()
    assert tokens["token_type"] == "bearer"
    assert tokens["refresh_token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == guest.email


def test_login_password_incorrecto(client, guest):
    assert _login(client, guest.email, "Incorrecta1").status_code == 401


def test_sin_token_redirige_a_login(client):
    response = client.get("/auth/me")
    assert response.status_code == 401
    assert response.headers["location"] == "/login"


def test_refresh(client, guest):
    tokens = _login(client, guest.email).json()

    response = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 200
    assert response.json()["access_token"]

    # un access token no sirve como refresh
    response = client.post("/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert response.status_code == 401


def test_logout(client, guest_headers):
    assert client.post("/auth/logout", headers=guest_headers).status_code == 200


def test_guardar_perfil_no_cambia_rol(client, db, guest):
    response = client.put("/users/me/profile", json={
        "english_name": "HONG GILDONG", "passport_number": "M12345678"
    }, headers=auth_headers(guest))

    assert response.status_code == 200
    data = response.json()
    assert data["english_name"] == "HONG GILDONG"
    assert data["passport_number"] == "M12345678"
    assert data["name"] == "홍길동"
    assert data["role"] == "guest"
