# test_app.py
import re


def test_root(client):
    body = client.get("/").json()
    assert body["status"] == "operational"
    assert body["namespace"] == "/wp-json/wp/v2"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    services = response.json()["services"]
    assert services["database"]["status"] == "healthy"
    assert services["object_store"]["backend"] == "local"
    assert services["ai_assist"]["status"] == "disabled"


def test_api_index(client):
    body = client.get("/wp-json").json()
    assert body["namespaces"] == ["wp/v2"]
    assert body["url"] == "http://testserver"
    posts = body["routes"]["/wp/v2/posts"]["_links"]["self"][0]["href"]
    assert posts == "http://testserver/wp-json/wp/v2/posts"
    assert "/wp/v2/link-categories" in body["routes"]


def test_unknown_route(client):
    response = client.get("/wp-json/wp/v2/nothing-here")
    assert response.status_code == 404
    assert response.json() == {
        "code": "rest_no_route",
        "message": "No route was found matching the URL and request method.",
        "data": {"status": 404},
    }


def test_wrong_method(client):
    response = client.patch("/wp-json/wp/v2/settings")
    assert response.status_code == 405
    assert response.json()["code"] == "rest_no_route"


def test_every_response_has_request_id(client):
    ids = {client.get(path).headers["X-Request-ID"] for path in ("/", "/health", "/missing")}
    assert len(ids) == 3
    assert all(re.fullmatch(r"req_[0-9a-f]{12}", value) for value in ids)


def test_metrics_count_requests(client):
    client.get("/wp-json/wp/v2/posts")
    body = client.get("/metrics").text
    assert "headpress_api_requests_total" in body


def test_cors_exposes_pagination_headers(client):
    response = client.get("/wp-json/wp/v2/posts", headers={"Origin": "https://blog.example.com"})
    exposed = response.headers["access-control-expose-headers"]
    assert "X-WP-Total" in exposed
