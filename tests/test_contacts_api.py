from conftest import ALICE

from core.errors import BulkUploadError, DataAccessError


def _create(client, **overrides):
    body = {**ALICE, **overrides}
    response = client.post("/contact", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_assigns_id_and_round_trips(client):
    created = _create(client)
    assert created["id"] == 1
    fetched = client.get(f"/contact/{created['id']}").json()
    assert fetched == {**ALICE, "id": 1}


def test_create_accepts_snake_case_and_ignores_client_id(client):
    response = client.post("/contact", json={"id": 99, "name": "Bob", "contact_num": "555-0002"})
    assert response.status_code == 201
    assert response.json()["id"] == 1
    assert response.json()["contactNum"] == "555-0002"


def test_create_without_name_is_a_bad_request(client):
    response = client.post("/contact", json={"gender": "Male"})
    assert response.status_code == 400


def test_create_with_empty_name_is_a_bad_request(client):
    assert client.post("/contact", json={"name": ""}).status_code == 400


def test_get_missing_contact_is_404(client):
    response = client.get("/contact/42")
    assert response.status_code == 404


def test_non_integer_id_is_a_bad_request(client):
    assert client.get("/contact/abc").status_code == 400


def test_list_is_ordered_by_id(client):
    _create(client, name="Zed")
    _create(client, name="Amy")
    names = [c["name"] for c in client.get("/contact").json()]
    assert names == ["Zed", "Amy"]


def test_update_replaces_all_fields(client):
    created = _create(client)
    response = client.put(f"/contact/{created['id']}", json={"name": "Alice B"})
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Alice B"
    assert body["gender"] is None
    assert body["contactNum"] is None


def test_update_missing_contact_is_404(client):
    assert client.put("/contact/5", json={"name": "Nobody"}).status_code == 404


def test_delete_then_delete_again(client):
    created = _create(client)
    first = client.delete(f"/contact/{created['id']}")
    assert first.status_code == 200
    assert first.json() == {"deleted": True, "id": created["id"]}
    assert client.delete(f"/contact/{created['id']}").status_code == 404


def test_delete_all_then_list_is_empty(client):
    _create(client)
    _create(client, name="Bob")
    response = client.delete("/contact/delete-all")
    assert response.status_code == 200
    assert response.json() == {"deleted": 2}
    assert client.get("/contact").json() == []


def test_search_by_name_is_case_insensitive_substring(client):
    _create(client, name="John Doe")
    _create(client, name="Jane Smith")
    names = [c["name"] for c in client.get("/contact/search-by-name", params={"name": "john"}).json()]
    assert names == ["John Doe"]


def test_search_by_name_requires_a_term(client):
    assert client.get("/contact/search-by-name").status_code == 400
    assert client.get("/contact/search-by-name", params={"name": "   "}).status_code == 400


def test_search_all_matches_fields_other_than_name(client):
    _create(client, name="Carol", address="42 Elm Road", contactNum="555-9999")
    _create(client, name="Dave", address="7 Oak Ave", contactNum="555-1234")
    by_address = client.get("/contact/search-all", params={"query": "elm"}).json()
    by_phone = client.get("/contact/search-all", params={"query": "1234"}).json()
    assert [c["name"] for c in by_address] == ["Carol"]
    assert [c["name"] for c in by_phone] == ["Dave"]
    assert client.get("/contact/search-all", params={"query": "nothing"}).json() == []


def test_paginated_single_contact(client):
    _create(client)
    page = client.get("/contact/paginated", params={"pageNumber": 1, "pageSize": 10}).json()
    assert page["items"] == [{**ALICE, "id": 1}]
    assert page["totalCount"] == 1
    assert page["totalPages"] == 1
    assert page["currentPage"] == 1
    assert page["pageSize"] == 10
    assert page["hasNextPage"] is False
    assert page["hasPreviousPage"] is False


def test_paginated_walk_has_no_gaps_or_duplicates(client):
    for i in range(7):
        _create(client, name=f"Person {i}")
    seen = []
    number = 1
    while True:
        page = client.get("/contact/paginated", params={"pageNumber": number, "pageSize": 3}).json()
        seen.extend(c["id"] for c in page["items"])
        assert page["totalPages"] == 3
        if not page["hasNextPage"]:
            break
        number += 1
    assert seen == list(range(1, 8))


def test_paginated_rejects_bad_page_values(client):
    assert client.get("/contact/paginated", params={"pageNumber": 0}).status_code == 400
    assert client.get("/contact/paginated", params={"pageSize": 0}).status_code == 400
    assert client.get("/contact/paginated", params={"pageSize": 51}).status_code == 400


def test_bulk_upload_returns_created_contacts(client):
    response = client.post(
        "/contact/bulk-upload",
        json=[{"name": "A"}, {"name": "B", "gender": "Female"}],
    )
    assert response.status_code == 201
    assert [(c["id"], c["name"]) for c in response.json()] == [(1, "A"), (2, "B")]


def test_bulk_upload_validates_every_item_before_inserting(client, store):
    response = client.post("/contact/bulk-upload", json=[{"name": "A"}, {"gender": "x"}])
    assert response.status_code == 400
    assert store.rows == {}


def test_bulk_upload_limit(client):
    response = client.post("/contact/bulk-upload", json=[{"name": str(i)} for i in range(6)])
    assert response.status_code == 400


def test_bulk_upload_reports_rejected_index(client, store, monkeypatch):
    async def reject(db, rows):
        raise BulkUploadError("Item 1 rejected: bad value", index=1)

    monkeypatch.setattr("contacts.repository.bulk_insert_contacts", reject)
    response = client.post("/contact/bulk-upload", json=[{"name": "A"}, {"name": "B"}])
    assert response.status_code == 400
    assert response.json()["detail"]["index"] == 1


def test_data_access_error_is_a_500(client, monkeypatch):
    async def broken(db):
        raise DataAccessError("connection refused")

    monkeypatch.setattr("contacts.repository.list_contacts", broken)
    response = client.get("/contact")
    assert response.status_code == 500
    assert response.json() == {"detail": "Database error."}


def test_health_endpoints(client, fake_db):
    assert client.get("/health").json() == {"status": "ok"}
    fake_db.queue(1)
    assert client.get("/health/db").status_code == 200
    fake_db.queue(DataAccessError("down"))
    assert client.get("/health/db").status_code == 503


def test_lifespan_opens_and_closes_the_database(store, fake_db):
    from fastapi.testclient import TestClient

    from conftest import make_config
    from main import create_app

    with TestClient(create_app(make_config(), db=fake_db)):
        assert fake_db.opened is True
    assert fake_db.closed is True


def test_blank_name_is_a_bad_request(client):
    assert client.post("/contact", json={"name": "   "}).status_code == 400
    assert client.post("/contact/bulk-upload", json=[{"name": "\t"}]).status_code == 400


def test_surrounding_whitespace_is_trimmed_on_input(client):
    created = _create(client, name="  Alice  ")
    assert created["name"] == "Alice"


def test_rows_longer_than_input_limits_are_still_served(client, store):
    store.rows[1] = {
        "id": 1,
        "name": "N" * 300,
        "gender": "g" * 80,
        "birthday": None,
        "address": None,
        "contact_num": "5" * 80,
    }
    store.next_id = 2
    response = client.get("/contact/1")
    assert response.status_code == 200
    assert len(response.json()["name"]) == 300
    assert client.get("/contact").status_code == 200


def test_ids_outside_the_serial_range_are_not_found(client, monkeypatch):
    async def unreachable(*args, **kwargs):
        raise AssertionError("repository must not be called")

    for name in ("get_contact", "update_contact", "delete_contact"):
        monkeypatch.setattr(f"contacts.repository.{name}", unreachable)

    for contact_id in (2**31, 0, -1):
        assert client.get(f"/contact/{contact_id}").status_code == 404
        assert client.put(f"/contact/{contact_id}", json={"name": "x"}).status_code == 404
        assert client.delete(f"/contact/{contact_id}").status_code == 404


def test_search_keeps_surrounding_spaces(client, monkeypatch):
    received = []

    async def search_all(db, query):
        received.append(query)
        return []

    monkeypatch.setattr("contacts.repository.search_all", search_all)
    client.get("/contact/search-all", params={"query": " Main "})
    assert received == [" Main "]
