from casedesk.api.llm_pipeline import REPLY_NO_DOCUMENTS

PASSWORD = "Str0ng!Pass"


def create_case(client, name="Smith v. Jones"):
    response = client.post("/cases", json={"name": name, "description": "Lease dispute"})
    assert response.status_code == 200
    return response.json()


def create_document(client, title="Memo", content="Hello world"):
    response = client.post("/documents", json={"title": title, "content": content})
    assert response.status_code == 200
    return response.json()


def test_register_login_and_profile(client):
    response = client.post("/register", json={"username": "newbie", "password": PASSWORD,
                                              "email": "newbie@example.com"})
    assert response.status_code == 200
    assert response.json()["username"] == "newbie"
    assert "password" not in response.json()

    response = client.post("/login", json={"username": "newbie", "password": PASSWORD})
    assert response.status_code == 200
    assert response.json()["user_details"]["email"] == "newbie@example.com"
    assert "token" in response.cookies

    profile = client.get("/get_user")
    assert profile.status_code == 200
    assert profile.json()["username"] == "newbie"


def test_register_rejects_weak_password_and_duplicates(client, user):
    weak = client.post("/register", json={"username": "weak", "password": "password", "email": "w@example.com"})
    assert weak.status_code == 400
    duplicate = client.post("/register", json={"username": "owner", "password": PASSWORD,
                                                "email": "other@example.com"})
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "User already exists"


def test_wrong_password_is_401(client, user):
    response = client.post("/login", json={"username": "owner", "password": "Wrong!Pass1"})
    assert response.status_code == 401


def test_logout_clears_session(logged_in):
    assert logged_in.post("/logout").status_code == 200
    assert logged_in.get("/get_user").status_code == 401


def test_anonymous_reads_are_empty_and_writes_401(client):
    assert client.get("/cases").json() == []
    assert client.get("/documents").json() == []
    assert client.post("/cases", json={"name": "x"}).status_code == 401
    assert client.get("/get_user").status_code == 401


def test_case_lifecycle(logged_in):
    case = create_case(logged_in)
    document = create_document(logged_in)

    attached = logged_in.post(f"/cases/{case['id']}/documents", json={"document_id": document["id"]})
    assert attached.status_code == 200
    assert attached.json()["document_count"] == 1
    assert attached.json()["total_size"] == len("Hello world")

    listed = logged_in.get(f"/cases/{case['id']}/documents").json()
    assert [d["id"] for d in listed] == [document["id"]]

    renamed = logged_in.patch(f"/cases/{case['id']}", json={"name": "Renamed"})
    assert renamed.json()["name"] == "Renamed"
    assert renamed.json()["description"] == "Lease dispute"

    detached = logged_in.delete(f"/cases/{case['id']}/documents/{document['id']}")
    assert detached.json()["document_count"] == 0

    assert logged_in.delete(f"/cases/{case['id']}").status_code == 200
    assert logged_in.get(f"/cases/{case['id']}").status_code == 404
    assert logged_in.get("/cases").json() == []


def test_foreign_case_is_404(client, make_user):
    make_user("alice")
    make_user("bob")
    client.post("/login", json={"username": "alice", "password": PASSWORD})
    case = create_case(client)

    client.post("/login", json={"username": "bob", "password": PASSWORD})
    assert client.get(f"/cases/{case['id']}").status_code == 404
    assert client.patch(f"/cases/{case['id']}", json={"name": "mine"}).status_code == 404
    response = client.post(f"/cases/{case['id']}/messages", json={"content": "hi"})
    assert response.status_code == 404
    assert response.json()["detail"] == "Case not found or access denied"
    assert client.get(f"/cases/{case['id']}/messages").json() == []


def test_ask_case_returns_and_stores_answer(logged_in, chat_model):
    case = create_case(logged_in)
    document = create_document(logged_in)
    logged_in.post(f"/cases/{case['id']}/documents", json={"document_id": document["id"]})

    response = logged_in.post(f"/cases/{case['id']}/messages", json={"content": "What does it say?"})
    assert response.status_code == 200
    reply = response.json()
    assert reply["ai_response"] == "Grounded answer (Contract)."

    transcript = logged_in.get(f"/cases/{case['id']}/messages").json()
    assert [m["id"] for m in transcript] == [reply["user_message_id"], reply["ai_message_id"]]
    assert [m["is_ai"] for m in transcript] == [False, True]
    chat_model.invoke.assert_called_once()


def test_ask_empty_case_gets_guidance(logged_in, chat_model):
    case = create_case(logged_in)
    response = logged_in.post(f"/cases/{case['id']}/messages", json={"content": "Anything?"})
    assert response.json()["ai_response"] == REPLY_NO_DOCUMENTS
    chat_model.invoke.assert_not_called()


def test_attach_conflicts_are_409(logged_in):
    first = create_case(logged_in, "First")
    second = create_case(logged_in, "Second")
    document = create_document(logged_in)
    logged_in.post(f"/cases/{first['id']}/documents", json={"document_id": document["id"]})

    response = logged_in.post(f"/cases/{second['id']}/documents", json={"document_id": document["id"]})
    assert response.status_code == 409


def test_file_upload_extract_and_document(logged_in, blob_store):
    case = create_case(logged_in)
    upload = logged_in.post(
        f"/cases/{case['id']}/files",
        files={"file": ("notes.txt", b"Deposition notes", "text/plain")},
    )
    assert upload.status_code == 200
    file_id = upload.json()["id"]
    assert upload.json()["size"] == len(b"Deposition notes")

    extracted = logged_in.post(f"/files/{file_id}/extract")
    assert extracted.json()["text"] == "Deposition notes"

    document = logged_in.post(f"/files/{file_id}/document")
    assert document.status_code == 200
    assert document.json()["case_id"] == case["id"]

    url = logged_in.get(f"/files/{file_id}/url")
    assert url.json()["url"].startswith("https://blobs.test/")

    assert logged_in.delete(f"/files/{file_id}").status_code == 200
    assert logged_in.get(f"/cases/{case['id']}/files").json() == []


def test_empty_upload_is_400(logged_in):
    case = create_case(logged_in)
    response = logged_in.post(f"/cases/{case['id']}/files", files={"file": ("empty.txt", b"", "text/plain")})
    assert response.status_code == 400


def test_unreadable_file_document_is_422(logged_in):
    case = create_case(logged_in)
    upload = logged_in.post(
        f"/cases/{case['id']}/files",
        files={"file": ("bundle.zip", b"PK\x03\x04", "application/zip")},
    )
    response = logged_in.post(f"/files/{upload.json()['id']}/document")
    assert response.status_code == 422


def test_document_crud(logged_in):
    document = create_document(logged_in, content="draft")
    updated = logged_in.patch(f"/documents/{document['id']}", json={"content": "final"})
    assert updated.json()["content"] == "final"
    assert updated.json()["title"] == "Memo"
    assert logged_in.get(f"/documents/{document['id']}").json()["content"] == "final"
    assert logged_in.delete(f"/documents/{document['id']}").status_code == 200
    assert logged_in.get(f"/documents/{document['id']}").status_code == 404
