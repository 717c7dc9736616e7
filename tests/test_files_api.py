"""File tree endpoints, end to end over HTTP."""

from fastapi.testclient import TestClient


def _project(client: TestClient, headers, **extra) -> str:
    resp = client.post("/api/projects/", json={"name": "demo", **extra}, headers=headers)
    assert resp.status_code == 201
    return resp.json()["id"]


def _create(client, headers, pid, name, type="file", parent_id=None, content=None):
    body = {"name": name, "type": type, "parent_id": parent_id}
    if content is not None:
        body["content"] = content
    return client.post(f"/api/projects/{pid}/files", json=body, headers=headers)


def _names(tree):
    return [(n["name"], _names(n["children"])) for n in tree]


def test_tree_lifecycle(client: TestClient, register):
    headers = register()
    pid = _project(client, headers)

    src = _create(client, headers, pid, "src", "folder").json()
    app_resp = _create(client, headers, pid, "App.jsx", parent_id=src["id"], content="x = 1")
    assert app_resp.status_code == 201
    app = app_resp.json()
    assert app["path"] == "src/App.jsx"
    assert app["language"] == "jsx"
    assert app["extension"] == "jsx"
    assert app["depth"] == 1
    lib = _create(client, headers, pid, "lib", "folder", src["id"]).json()
    _create(client, headers, pid, "util.js", parent_id=lib["id"])
    _create(client, headers, pid, "b.js")

    tree = client.get(f"/api/projects/{pid}/tree", headers=headers).json()
    assert _names(tree) == [
        ("src", [("lib", [("util.js", [])]), ("App.jsx", [])]),
        ("b.js", []),
    ]

    # rename the folder: the whole subtree follows
    resp = client.patch(f"/api/files/{src['id']}", json={"name": "app"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["path"] == "app"
    resp = client.get(
        f"/api/projects/{pid}/files/by-path", params={"path": "/app/lib/util.js"}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["path"] == "app/lib/util.js"

    # explicit null parent moves to the root, an omitted one keeps it
    resp = client.patch(f"/api/files/{lib['id']}", json={"parent_id": None}, headers=headers)
    assert resp.json()["path"] == "lib"
    resp = client.patch(f"/api/files/{lib['id']}", json={"name": "libs"}, headers=headers)
    assert resp.json()["path"] == "libs"

    resp = client.get(f"/api/files/{app['id']}/ancestors", headers=headers)
    assert [a["name"] for a in resp.json()] == ["app"]

    resp = client.delete(f"/api/files/{src['id']}", headers=headers)
    assert resp.status_code == 200
    assert set(resp.json()["deleted"]) == {src["id"], app["id"]}

    tree = client.get(f"/api/projects/{pid}/tree", headers=headers).json()
    assert _names(tree) == [("libs", [("util.js", [])]), ("b.js", [])]


def test_errors_map_to_status_codes(client: TestClient, register):
    headers = register()
    pid = _project(client, headers)
    folder = _create(client, headers, pid, "src", "folder").json()
    f = _create(client, headers, pid, "main.js").json()

    resp = _create(client, headers, pid, "main.js")
    assert resp.status_code == 409
    assert resp.json()["kind"] == "Conflict"

    resp = _create(client, headers, pid, "a/b.js")
    assert resp.status_code == 400
    assert resp.json()["kind"] == "InvalidName"

    resp = _create(client, headers, pid, "x.js", parent_id=f["id"])
    assert resp.status_code == 400
    assert resp.json()["kind"] == "InvalidParentType"

    resp = _create(client, headers, pid, "x.js", parent_id="missing")
    assert resp.status_code == 404

    resp = client.patch(f"/api/files/{folder['id']}", json={"parent_id": folder["id"]}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["kind"] == "InvalidCycle"

    assert client.delete("/api/files/missing", headers=headers).status_code == 404
    resp = client.get(f"/api/projects/{pid}/files/by-path", params={"path": "nope"}, headers=headers)
    assert resp.status_code == 404
    assert resp.json()["kind"] == "NotFound"


def test_content_update_and_stats(client: TestClient, register):
    headers = register()
    pid = _project(client, headers)
    f = _create(client, headers, pid, "index.js", content="abc").json()
    _create(client, headers, pid, "src", "folder")

    resp = client.put(f"/api/files/{f['id']}/content", json={"content": "abcdef"}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert (body["content"], body["size"], body["version"]) == ("abcdef", 6, 2)

    project = client.get(f"/api/projects/{pid}", headers=headers).json()
    assert project["total_files"] == 1
    assert project["total_size"] == 6

    resp = client.get(f"/api/files/{f['id']}", headers=headers)
    assert resp.json()["content"] == "abcdef"


def test_search_endpoint(client: TestClient, register):
    headers = register()
    pid = _project(client, headers)
    src = _create(client, headers, pid, "src", "folder").json()
    _create(client, headers, pid, "App.jsx", parent_id=src["id"])
    _create(client, headers, pid, "app.css")

    resp = client.get(f"/api/projects/{pid}/files/search", params={"q": "app"}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_results"] == 2
    assert [f["name"] for f in body["files"]] == ["App.jsx", "app.css"]

    resp = client.get(
        f"/api/projects/{pid}/files/search", params={"q": "src", "type": "folder"}, headers=headers
    )
    assert [f["name"] for f in resp.json()["files"]] == ["src"]


def test_access_rules(client: TestClient, register):
    owner = register()
    stranger = register()
    pid = _project(client, owner)
    f = _create(client, owner, pid, "main.js").json()

    assert client.get(f"/api/projects/{pid}/tree", headers=stranger).status_code == 403
    assert client.get(f"/api/projects/{pid}/tree").status_code == 403
    assert _create(client, stranger, pid, "evil.js").status_code == 403
    assert client.post(f"/api/projects/{pid}/files", json={"name": "x"}).status_code == 401

    client.patch(f"/api/projects/{pid}", json={"is_public": True}, headers=owner)
    assert client.get(f"/api/projects/{pid}/tree").status_code == 200
    assert client.get(f"/api/files/{f['id']}", headers=stranger).status_code == 200
    # public read does not grant write
    assert client.delete(f"/api/files/{f['id']}", headers=stranger).status_code == 403


def test_oversized_content_is_413(client: TestClient, register):
    from webide.core.config import get_settings

    headers = register()
    pid = _project(client, headers)
    f = _create(client, headers, pid, "big.txt").json()
    too_big = "x" * (get_settings().MAX_CONTENT_CHARS + 1)
    resp = client.put(f"/api/files/{f['id']}/content", json={"content": too_big}, headers=headers)
    assert resp.status_code == 413
    assert resp.json()["kind"] == "ContentTooLarge"


def test_tree_at_maximum_depth(client: TestClient, register):
    from webide.core.config import get_settings

    max_depth = get_settings().MAX_TREE_DEPTH
    headers = register()
    pid = _project(client, headers)
    parent_id = None
    for _ in range(max_depth):
        resp = _create(client, headers, pid, "d", "folder", parent_id)
        assert resp.status_code == 201
        parent_id = resp.json()["id"]

    resp = _create(client, headers, pid, "d", "folder", parent_id)
    assert resp.status_code == 400
    assert resp.json()["kind"] == "InvalidOperation"

    resp = client.get(f"/api/projects/{pid}/tree", headers=headers)
    assert resp.status_code == 200
    level, depth = resp.json(), 0
    while level:
        depth += 1
        level = level[0]["children"]
    assert depth == max_depth
