from datetime import datetime, timezone

from formguard.validators import Severity, Violation

API = "/api/v1"

# Fixed "now" for temporal constraints
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def violation(category, message="is invalid", severity=Severity.ERROR):
    return Violation(category=category, message=message, severity=severity)


def customer_payload(**overrides):
    """A registration body that passes every check."""
    customer = {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "birth_date": "1990-12-10",
        "credit_limit": "1500.00",
        "nickname": "ada",
        "accepted_terms": True,
        "phones": [{"kind": "mobile", "number": "+44 20 7946 0000"}],
    }
    customer.update(overrides)
    return {"customer": customer}


def create_customer(client, **overrides):
    r = client.post(f"{API}/customers", json=customer_payload(**overrides))
    assert r.status_code == 201, r.text
    return r.json()["customer"]
