LEGACY_CSV = (
    "ISBNコード,雑誌コード,タイトル,著者,出版社,年,タイムスタンプ,表紙,場所,状態,メモ\n"
    "9780441013593,,Dune,Frank Herbert,Ace,1990,,,A-1,貸出中,\n"
    ",,音楽・メディア論集,アドルノ,平凡社,1998,,,B-2,所蔵,\n"
)


def _upload(client, text, **params):
    return client.post(
        "/v1/catalog/import",
        params=params,
        files={"file": ("books.csv", text.encode("utf-8"), "text/csv")},
    )


def test_import_and_list(client):
    resp = _upload(client, LEGACY_CSV)
    assert resp.status_code == 200
    body = resp.json()
    assert body["variant"] == "localized-legacy"
    assert body["policy"] == "fill_blanks"
    assert body["added"] == 2

    listing = client.get("/v1/books").json()
    assert listing["total"] == 2
    assert [b["title"] for b in listing["items"]] == ["Dune", "音楽・メディア論集"]

    held = client.get("/v1/books", params={"status": "held"}).json()
    assert [b["title"] for b in held["items"]] == ["音楽・メディア論集"]


def test_import_rejects_unknown_header(client):
    resp = _upload(client, "書名,著者\nDune,Herbert\n")
    assert resp.status_code == 422
    detail = resp.json()["detail"]
    assert detail["error"] == "malformed_header"
    assert len(detail["accepted"]) == 6


def test_import_rejects_empty_file(client):
    resp = _upload(client, "")
    assert resp.status_code == 422
    assert resp.json()["detail"]["error"] == "EmptyImport"


def test_export_round_trip(client):
    _upload(client, LEGACY_CSV)

    resp = client.get("/v1/catalog/export")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert 'filename="Books_' in resp.headers["content-disposition"]
    assert resp.text.startswith("id,ISBNコード,")

    again = _upload(client, resp.text, policy="overwrite")
    assert again.json()["added"] == 0
    assert again.json()["updated"] == 0
    assert again.json()["skipped"] == 2


def test_create_update_and_delete(client):
    created = client.post(
        "/v1/books",
        json={"title": " Dune ", "isbn": "0-441-01359-7", "tags": "sf; classic", "status": "貸出中"},
    )
    assert created.status_code == 200
    book = created.json()
    assert book["title"] == "Dune"
    assert book["isbn"] == "9780441013593"
    assert book["tags"] == ["sf", "classic"]
    assert book["status"] == "checked-out"

    book_id = book["id"]
    updated = client.put(f"/v1/books/{book_id}", json={"title": "Dune", "note": "memo"})
    assert updated.json()["note"] == "memo"
    assert client.get(f"/v1/books/{book_id}").json()["note"] == "memo"

    assert client.delete(f"/v1/books/{book_id}").status_code == 409
    assert client.delete(f"/v1/books/{book_id}", params={"confirm": True}).json() == {"deleted": 1}
    assert client.get(f"/v1/books/{book_id}").status_code == 404


def test_update_unknown_book(client):
    assert client.put("/v1/books/nope", json={"title": "x"}).status_code == 404


def test_bulk_delete_needs_confirmation(client):
    samples = client.post("/v1/books/samples").json()
    ids = [b["id"] for b in samples[:2]]

    resp = client.post("/v1/books/bulk-delete", json={"ids": ids})
    assert resp.status_code == 409
    assert resp.json()["detail"]["count"] == 2

    resp = client.post("/v1/books/bulk-delete", json={"ids": ids, "confirm": True})
    assert resp.json() == {"deleted": 2}
    assert client.get("/v1/books").json()["total"] == 1


def test_tags_endpoint(client):
    client.post("/v1/books", json={"title": "A", "tags": ["b", "a"]})
    assert client.get("/v1/books/tags").json() == ["a", "b"]


def test_columns(client):
    client.post("/v1/books", json={"title": "A", "extras": {"寄贈者": "x"}})

    cols = client.get("/v1/columns").json()
    assert cols[-1] == {"key": "extra:寄贈者", "label": "寄贈者", "visible": False}

    patched = client.patch("/v1/columns/extra:寄贈者", json={"visible": True}).json()
    assert patched[-1]["visible"] is True

    assert client.patch("/v1/columns/missing", json={"visible": True}).status_code == 404

    reset = client.post("/v1/columns/reset").json()
    assert all(c["key"] != "extra:寄贈者" for c in reset)


def test_lookup_rejects_non_isbn(client):
    assert client.get("/v1/lookup/abc").status_code == 422


def test_legacy_record_without_id_is_addressable(client, db_session):
    from labshelf.core.config import settings
    from labshelf.crud.storage import put_payload

    put_payload(db_session, key=settings.catalog_storage_key, payload='[{"title": "Legacy"}]')

    (item,) = client.get("/v1/books").json()["items"]
    assert client.get(f"/v1/books/{item['id']}").json()["title"] == "Legacy"
    resp = client.delete(f"/v1/books/{item['id']}", params={"confirm": True})
    assert resp.json() == {"deleted": 1}
