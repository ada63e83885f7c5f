from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from formguard.api.dependencies import get_error_collector, negotiate_locale, parse_accept_language
from formguard.api.outcomes import ValidationRoute, install_validation
from formguard.errors import ErrorCollector
from formguard.main import build_engine
from tests.helpers import API, create_customer, customer_payload, violation


class BrokenLookup:
    def exists(self, field, value):
        raise ConnectionError("database is down")


def errors_by_category(payload):
    return {e["category"]: e["message"] for e in payload["errors"]}


# ── Health ──


def test_health_ok(client):
    """Test health check endpoint"""
    r = client.get(f"{API}/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "healthy"
    assert data["constraint_kinds"] == 23
    assert "pt_BR" in data["locales"]
    assert data["dependencies"]["message_bundles"]["status"] == "healthy"


def test_root_endpoint(client):
    r = client.get("/")
    assert r.status_code == 200
    data = r.json()
    assert data["name"] == "formguard"
    assert "docs" in data
    assert "health" in data


# ── Structured 400 ──


def test_create_customer(client):
    r = client.post(f"{API}/customers", json=customer_payload(nickname=None, phones=[]))
    assert r.status_code == 201
    data = r.json()
    assert data["customer"]["id"] == 1
    assert [w["category"] for w in data["warnings"]] == ["customer.nickname"]
    assert [i["category"] for i in data["info"]] == ["customer.phones"]


def test_invalid_customer_gets_every_error(client):
    """Constraint violations and handler rules come back together"""
    r = client.post(
        f"{API}/customers",
        json=customer_payload(
            name=None,
            email="not-an-email",
            nickname="x" * 21,
            accepted_terms=False,
            phones=[{"kind": "fax", "number": "123"}],
        ),
    )

    assert r.status_code == 400
    errors = errors_by_category(r.json())
    assert errors == {
        "customer.name": "must not be null",
        "customer.email": "must be a well-formed email address",
        "customer.nickname": "size must be at most 20",
        "customer.phones[0].kind": 'must match "home|work|mobile"',
        "customer.phones[0].number": 'must match "\\+?[0-9 ()-]{8,20}"',
        "customer.accepted_terms": "the terms of use must be accepted",
    }
    assert r.json()["warnings"] == []


def test_error_payload_fields(client):
    r = client.post(f"{API}/customers", json=customer_payload(name="Al"))
    assert r.status_code == 400
    assert r.json()["errors"] == [{
        "category": "customer.name",
        "message": "size must be between 3 and 60",
        "severity": "error",
        "code": "size",
    }]


def test_too_young_customer(client):
    r = client.post(f"{API}/customers", json=customer_payload(birth_date="2020-01-01"))
    assert r.status_code == 400
    assert errors_by_category(r.json()) == {
        "customer.birth_date": "customer must be at least 18 years old",
    }


def test_duplicate_email_uses_the_repository(client):
    create_customer(client)

    r = client.post(f"{API}/customers", json=customer_payload(email="ADA@example.com"))

    assert r.status_code == 400
    assert errors_by_category(r.json()) == {
        "customer.email": "e-mail ADA@example.com is already registered",
    }


def test_errors_are_translated(client):
    r = client.post(
        f"{API}/customers",
        json=customer_payload(name=None, accepted_terms=False),
        headers={"Accept-Language": "pt-BR,pt;q=0.9,en;q=0.8"},
    )
    assert r.status_code == 400
    assert errors_by_category(r.json()) == {
        "customer.name": "não pode ser nulo",
        "customer.accepted_terms": "os termos de uso devem ser aceitos",
    }


def test_conversion_errors_use_the_same_payload(client):
    r = client.post(f"{API}/customers", json=customer_payload(birth_date="someday"))
    assert r.status_code == 400
    [error] = r.json()["errors"]
    assert error["category"] == "customer.birth_date"
    assert error["message"] == "someday is not a valid value"
    assert error["code"] == "conversion.invalid"


def test_missing_body_is_reported(client):
    r = client.post(f"{API}/customers", json={})
    assert r.status_code == 400
    [error] = r.json()["errors"]
    assert error["category"] == "customer"
    assert error["message"] == "is required"


def test_failing_lookup_is_a_server_error(client):
    client.app.state.validation_services = {"customers": BrokenLookup()}

    r = client.post(f"{API}/customers", json=customer_payload())

    assert r.status_code == 500
    data = r.json()
    assert data["error"] == "constraint_evaluation_failed"
    assert data["constraint"] == "unique"
    assert data["category"] == "customer.email"


# ── Page ──


def test_preview_re_renders_the_form_with_messages(client):
    r = client.post(f"{API}/customers/preview", json=customer_payload(name="Al", nickname=None))

    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "New customer" in r.text
    assert '<span class="error">size must be between 3 and 60</span>' in r.text
    assert '<span class="warning">no nickname given, the name will be shown instead</span>' in r.text


def test_preview_of_valid_customer(client):
    r = client.post(f"{API}/customers/preview", json=customer_payload(nickname=None))
    assert r.status_code == 200
    assert "Review customer" in r.text
    assert "no nickname given" in r.text


# ── Forward ──


def test_invalid_search_forwards_to_listing(client):
    create_customer(client)

    r = client.post(f"{API}/customers/search", json={"search": {"name": "A"}})

    assert r.status_code == 200
    data = r.json()
    assert [c["name"] for c in data["customers"]] == ["Ada Lovelace"]
    assert errors_by_category(data) == {"search.name": "size must be at least 2"}


def test_valid_search(client):
    create_customer(client)
    create_customer(client, name="Grace Hopper", email="grace@example.com")

    r = client.post(f"{API}/customers/search", json={"search": {"name": "gr"}})

    assert r.status_code == 200
    assert [c["name"] for c in r.json()["customers"]] == ["Grace Hopper"]
    assert r.json()["errors"] == []


# ── Redirect ──


def test_invalid_email_change_redirects(client):
    customer = create_customer(client)

    r = client.put(
        f"{API}/customers/{customer['id']}/email",
        json={"change": {"email": "broken"}},
        follow_redirects=False,
    )

    assert r.status_code == 303
    assert r.headers["location"].endswith(f"{API}/customers/{customer['id']}")


def test_email_change(client):
    customer = create_customer(client)

    r = client.put(f"{API}/customers/{customer['id']}/email", json={"change": {"email": "ada@lovelace.org"}})

    assert r.status_code == 200
    assert r.json()["email"] == "ada@lovelace.org"


def test_email_change_keeps_own_address(client):
    """A customer may resubmit the address they already hold"""
    customer = create_customer(client)

    r = client.put(f"{API}/customers/{customer['id']}/email", json={"change": {"email": "ADA@example.com"}})

    assert r.status_code == 200
    assert r.json()["email"] == "ADA@example.com"


def test_email_change_to_another_customers_address_redirects(client):
    create_customer(client, name="Grace Hopper", email="grace@example.com")
    customer = create_customer(client)

    r = client.put(
        f"{API}/customers/{customer['id']}/email",
        json={"change": {"email": "grace@example.com"}},
        follow_redirects=False,
    )

    assert r.status_code == 303


def test_unknown_customer(client):
    r = client.get(f"{API}/customers/99")
    assert r.status_code == 404


# ── Locale negotiation ──


def test_parse_accept_language():
    assert parse_accept_language("en;q=0.5, pt-BR, *;q=0.1") == ["pt_BR", "en"]
    assert parse_accept_language(None) == []


def test_negotiate_locale():
    available = ["en", "pt_BR"]
    assert negotiate_locale("pt", available, "en") == "pt_BR"
    assert negotiate_locale("pt-PT", available, "en") == "pt_BR"
    assert negotiate_locale("fr, en;q=0.5", available, "en") == "en"
    assert negotiate_locale("de", available, "en") == "en"


# ── Undispatched errors ──


def build_app():
    app = FastAPI()
    install_validation(app)
    app.router.route_class = ValidationRoute
    app.state.validation_engine = build_engine()
    app.state.validation_services = {}

    @app.get("/forgetful")
    async def forgetful(errors: ErrorCollector = Depends(get_error_collector)):
        errors.add(violation("form.field", "is wrong"))
        return {"ok": True}

    @app.get("/careful")
    async def careful(errors: ErrorCollector = Depends(get_error_collector)):
        errors.add(violation("form.field", "is wrong"))
        errors.on_error_send_bad_request(status_code=422)

    return app


def test_errors_left_without_dispatch_fail_the_request():
    client = TestClient(build_app())
    r = client.get("/forgetful")
    assert r.status_code == 500
    assert r.json()["error"] == "validation_dispatch_error"
    assert r.json()["categories"] == ["form.field"]


def test_configured_status_code():
    client = TestClient(build_app())
    r = client.get("/careful")
    assert r.status_code == 422
    assert r.json()["errors"][0]["message"] == "is wrong"
