from conftest import EMAIL, UID


def test_profile_defaults_when_no_document(client, auth_headers):
    r = client.get("/api/user/profile", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {
        "uid": UID,
        "email": EMAIL,
        "displayName": "",
        "college": "",
        "bio": "",
        "photoURL": "",
        "major": "",
        "year": "",
        "interests": [],
    }


def test_profile_requires_auth(client):
    assert client.get("/api/user/profile").status_code == 401
    assert client.put("/api/user/profile", json={"bio": "x"}).status_code == 401


def test_update_is_merge_patch(client, fake, auth_headers):
    fake.put(f"users/{UID}", {"college": {"stringValue": "MIT"}, "bio": {"stringValue": "old"}})
    r = client.put("/api/user/profile", json={"bio": "new", "interests": ["chess", "rowing"]}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"message": "Profile updated successfully"}

    profile = client.get("/api/user/profile", headers=auth_headers).json()
    assert profile["college"] == "MIT"
    assert profile["bio"] == "new"
    assert profile["interests"] == ["chess", "rowing"]
    assert "id" not in profile


def test_update_creates_missing_profile(client, fake, auth_headers):
    client.put("/api/user/profile", json={"displayName": "Ada"}, headers=auth_headers)
    assert fake.docs[f"users/{UID}"]["fields"] == {"displayName": {"stringValue": "Ada"}}


def test_explicit_null_is_written(client, fake, auth_headers):
    fake.put(f"users/{UID}", {"bio": {"stringValue": "old"}})
    client.put("/api/user/profile", json={"bio": None}, headers=auth_headers)
    assert fake.docs[f"users/{UID}"]["fields"]["bio"] == {"nullValue": None}


def test_empty_update_writes_nothing(client, fake, auth_headers):
    fake.put(f"users/{UID}", {"bio": {"stringValue": "keep"}})
    r = client.put("/api/user/profile", json={}, headers=auth_headers)
    assert r.status_code == 200
    assert fake.docs[f"users/{UID}"]["fields"] == {"bio": {"stringValue": "keep"}}
    assert not any(req.method == "PATCH" for req in fake.requests)


def test_public_profile(client, fake):
    fake.put("users/u7", {"college": {"stringValue": "COEP"}, "email": {"stringValue": "hidden@example.edu"}})
    r = client.get("/api/user/u7")
    assert r.status_code == 200
    body = r.json()
    assert body["uid"] == "u7"
    assert body["displayName"] == "Anonymous Student"
    assert body["college"] == "COEP"
    assert "email" not in body


def test_public_profile_missing_is_404(client):
    r = client.get("/api/user/ghost")
    assert r.status_code == 404
    assert r.json() == {"detail": "user_not_found"}
