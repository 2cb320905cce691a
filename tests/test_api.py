BASE = "/api/v1"


def create_book(client, title="Rayuela", author="Julio Cortázar"):
    response = client.post(f"{BASE}/books/", json={"title": title, "author": author})
    assert response.status_code == 201, response.text
    return response.json()


def create_member(client, name="Ana Pérez", email="ana@mail.com"):
    response = client.post(f"{BASE}/members/", json={"name": name, "email": email})
    assert response.status_code == 201, response.text
    return response.json()


def checkout(client, book_id, member_id):
    return client.post(f"{BASE}/loans/", json={"book_id": book_id, "member_id": member_id})


def test_book_crud(client):
    book = create_book(client)
    assert book["available"] is True
    assert book["id"]

    response = client.post(f"{BASE}/books/", json={"title": "Rayuela", "author": "Julio Cortázar"})
    assert response.status_code == 409
    assert response.json()["detail"] == (
        "Error al agregar libro: Este libro ya existe en la biblioteca."
    )

    response = client.put(f"{BASE}/books/{book['id']}", json={"title": "Rayuela (ed. 2)"})
    assert response.status_code == 200
    assert response.json()["title"] == "Rayuela (ed. 2)"
    assert response.json()["author"] == "Julio Cortázar"

    listing = client.get(f"{BASE}/books/").json()
    assert [b["title"] for b in listing] == ["Rayuela (ed. 2)"]

    assert client.delete(f"{BASE}/books/{book['id']}").status_code == 204
    assert client.get(f"{BASE}/books/").json() == []


def test_book_validation_error(client):
    response = client.post(f"{BASE}/books/", json={"title": "", "author": "Julio Cortázar"})
    assert response.status_code == 400
    assert "El título es requerido" in response.json()["detail"]


def test_unknown_book_is_404(client):
    response = client.put(f"{BASE}/books/nope", json={"title": "Rayuela"})
    assert response.status_code == 404
    assert client.delete(f"{BASE}/books/nope").status_code == 404


def test_book_search(client):
    create_book(client)
    create_book(client, "Ficciones", "Jorge Luis Borges")

    response = client.get(f"{BASE}/books/", params={"q": "borges"})
    assert [b["title"] for b in response.json()] == ["Ficciones"]


def test_member_crud(client):
    member = create_member(client, email="Ana@Mail.com")
    assert member["email"] == "ana@mail.com"
    assert member["active"] is True

    response = client.post(f"{BASE}/members/", json={"name": "Otra Ana", "email": "ANA@mail.com"})
    assert response.status_code == 409

    response = client.put(f"{BASE}/members/{member['id']}", json={"active": False})
    assert response.status_code == 200
    assert response.json()["active"] is False
    assert client.get(f"{BASE}/members/active").json() == []

    assert client.delete(f"{BASE}/members/{member['id']}").status_code == 204


def test_member_invalid_email(client):
    response = client.post(f"{BASE}/members/", json={"name": "Ana Pérez", "email": "ana@"})
    assert response.status_code == 400
    assert "El formato del email no es válido" in response.json()["detail"]


def test_loan_lifecycle(client):
    book = create_book(client)
    member = create_member(client)

    response = checkout(client, book["id"], member["id"])
    assert response.status_code == 201
    loan = response.json()
    assert loan["status"] == "active"
    assert loan["book_title"] == "Rayuela"
    assert loan["member_email"] == "ana@mail.com"

    response = checkout(client, book["id"], member["id"])
    assert response.status_code == 409
    assert "ya está prestado" in response.json()["detail"]

    assert client.get(f"{BASE}/books/available").json() == []
    assert client.delete(f"{BASE}/books/{book['id']}").status_code == 409
    response = client.get(f"{BASE}/members/{member['id']}/can-delete")
    assert response.json() == {"member_id": member["id"], "can_delete": False}

    response = client.post(f"{BASE}/loans/{loan['id']}/return")
    assert response.status_code == 200
    assert response.json()["status"] == "returned"
    assert response.json()["returned_at"] is not None

    response = client.post(f"{BASE}/loans/{loan['id']}/return")
    assert response.status_code == 409

    history = client.get(f"{BASE}/loans/history").json()
    assert [l["id"] for l in history] == [loan["id"]]
    assert client.get(f"{BASE}/loans/active").json() == []
    assert len(client.get(f"{BASE}/loans/search", params={"q": "ana"}).json()) == 1


def test_loan_with_unknown_book_is_404(client):
    member = create_member(client)
    response = checkout(client, "missing", member["id"])
    assert response.status_code == 404


def test_loan_limit_is_422(client):
    member = create_member(client)
    titles = ["Rayuela", "Ficciones", "Pedro Páramo", "La tregua", "El túnel", "Aura"]
    books = [create_book(client, title, "Autor Varios") for title in titles]

    for book in books[:5]:
        assert checkout(client, book["id"], member["id"]).status_code == 201

    response = checkout(client, books[5]["id"], member["id"])
    assert response.status_code == 422
    assert "máximo de préstamos permitidos (5)" in response.json()["detail"]


def test_missing_loan_ids_is_400(client):
    response = client.post(f"{BASE}/loans/", json={})
    assert response.status_code == 400
    assert "ID del libro es requerido" in response.json()["detail"]


def test_statistics_use_original_keys(client):
    book = create_book(client)
    member = create_member(client)
    checkout(client, book["id"], member["id"])

    response = client.get(f"{BASE}/loans/statistics")
    assert response.status_code == 200
    assert response.json() == {
        "prestamosActivos": 1,
        "totalPrestamos": 1,
        "prestamosVencidos": 0,
    }


def test_dashboard_and_integrity(client):
    book = create_book(client)
    member = create_member(client)
    checkout(client, book["id"], member["id"])

    data = client.get(f"{BASE}/dashboard/").json()
    assert len(data["books"]) == 1
    assert len(data["members"]) == 1
    assert len(data["active_loans"]) == 1
    assert data["statistics"]["prestamosActivos"] == 1

    refresh = client.get(f"{BASE}/dashboard/loans").json()
    assert refresh["available_books"] == []
    assert len(refresh["active_members"]) == 1

    report = client.get(f"{BASE}/dashboard/integrity").json()
    assert report == {"valid": True, "problems": []}


def test_notification_feed(client):
    create_book(client)
    client.post(f"{BASE}/books/", json={"title": "Rayuela", "author": "Julio Cortázar"})

    feed = client.get(f"{BASE}/notifications/").json()
    assert feed["loading"] is None
    assert [(n["message"], n["kind"]) for n in feed["notifications"]] == [
        ("Libro agregado exitosamente", "success"),
        ("Error al agregar libro: Este libro ya existe en la biblioteca.", "error"),
    ]
