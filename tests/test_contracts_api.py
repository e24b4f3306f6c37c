from datetime import datetime, timedelta

from conftest import KITCHEN_TEMPLATE, auth_headers, signature_data_uri
from modules.contracts.models import GuestAccessToken

CREATE_AND_SEND = "/api/admin/contracts/create-and-send-guest"


def contract_payload(**overrides):
    payload = {
        "projectName": "Kitchen Remodel",
        "projectDescription": "Full kitchen renovation",
        "totalAmount": 50000,
        "startDate": "2026-01-05",
        "endDate": "2026-03-31",
        "paymentTerms": "50% upfront, 50% on completion",
        "scope": "Cabinets, counters and flooring",
        "guestName": "Jane Doe",
        "guestEmail": "jane@example.com",
        "contractContent": KITCHEN_TEMPLATE,
        "adminSignature": signature_data_uri(),
    }
    payload.update(overrides)
    return payload


def send_contract(client, admin, **overrides):
    resp = client.post(CREATE_AND_SEND, json=contract_payload(**overrides), headers=auth_headers(admin))
    assert resp.status_code == 200, resp.text
    return resp.json()


def token_from(result):
    return result["signingUrl"].rsplit("/", 1)[-1]


def test_create_and_send_returns_signing_link(client, admin):
    result = send_contract(client, admin)
    assert result["status"] == "SENT"
    assert result["guestEmail"] == "jane@example.com"
    assert result["contractId"]
    assert "/guest-sign/" in result["signingUrl"]


def test_create_and_send_requires_login(client):
    resp = client.post(CREATE_AND_SEND, json=contract_payload())
    assert resp.status_code in {401, 403}


def test_create_and_send_rejected_for_non_admin(client, client_user):
    resp = client.post(CREATE_AND_SEND, json=contract_payload(), headers=auth_headers(client_user))
    assert resp.status_code == 403


def test_create_and_send_without_signature(client, admin):
    resp = client.post(CREATE_AND_SEND, json=contract_payload(adminSignature=None), headers=auth_headers(admin))
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "empty_signature"


def test_create_and_send_with_invalid_amount(client, admin):
    resp = client.post(CREATE_AND_SEND, json=contract_payload(totalAmount=0), headers=auth_headers(admin))
    assert resp.status_code == 422


def test_guest_views_contract_without_login(client, admin):
    token = token_from(send_contract(client, admin))

    resp = client.get(f"/api/contracts/guest/{token}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["projectName"] == "Kitchen Remodel"
    assert body["guestName"] == "Jane Doe"
    assert body["contractorName"] == "Veritas Building Group"
    assert body["status"] == "SENT"
    assert "adminSignature" not in body


def test_guest_unknown_token(client):
    resp = client.get("/api/contracts/guest/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "not_found"


def test_guest_signs_once(client, admin):
    token = token_from(send_contract(client, admin))
    sign_body = {"signature": signature_data_uri(), "name": "Jane Doe", "email": "jane@example.com"}

    resp = client.post(f"/api/contracts/guest/{token}/sign", json=sign_body)
    assert resp.status_code == 200, resp.text
    assert resp.json()["status"] == "SIGNED"
    assert resp.json()["signedName"] == "Jane Doe"

    again = client.post(f"/api/contracts/guest/{token}/sign", json=sign_body)
    assert again.status_code == 409
    assert again.json()["detail"]["code"] == "already_signed"

    reload = client.get(f"/api/contracts/guest/{token}")
    assert reload.status_code == 409


def test_guest_sign_requires_signature(client, admin):
    token = token_from(send_contract(client, admin))
    resp = client.post(
        f"/api/contracts/guest/{token}/sign",
        json={"name": "Jane Doe", "email": "jane@example.com"}
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "empty_signature"


def test_expired_link(client, admin, session_factory):
    token = token_from(send_contract(client, admin))
    session = session_factory()
    try:
        access_token = session.query(GuestAccessToken).filter_by(token=token).one()
        access_token.expires_at = datetime.utcnow() - timedelta(minutes=1)
        session.commit()
    finally:
        session.close()

    resp = client.get(f"/api/contracts/guest/{token}")
    assert resp.status_code == 410
    assert resp.json()["detail"]["code"] == "expired"


def test_admin_lists_and_reads_contracts(client, admin):
    result = send_contract(client, admin)

    listing = client.get("/api/admin/contracts", headers=auth_headers(admin))
    assert listing.status_code == 200
    assert listing.json()["total"] == 1

    sent = client.get("/api/admin/contracts", params={"status": "SENT"}, headers=auth_headers(admin))
    assert [c["id"] for c in sent.json()["contracts"]] == [result["contractId"]]

    detail = client.get(f"/api/admin/contracts/{result['contractId']}", headers=auth_headers(admin))
    assert detail.status_code == 200
    assert detail.json()["tokenExpiresAt"] is not None

    missing = client.get("/api/admin/contracts/nope", headers=auth_headers(admin))
    assert missing.status_code == 404


def test_draft_then_send_twice(client, admin):
    draft = client.post(
        "/api/admin/contracts",
        json={"projectName": "Deck", "totalAmount": 12000, "contractContent": "Deck for [CLIENT_NAME]"},
        headers=auth_headers(admin)
    )
    assert draft.status_code == 201
    assert draft.json()["status"] == "DRAFT"

    send_body = {"guestName": "Sam Lee", "guestEmail": "sam@example.com", "adminSignature": signature_data_uri()}
    url = f"/api/admin/contracts/{draft.json()['id']}/send-guest"
    assert client.post(url, json=send_body, headers=auth_headers(admin)).status_code == 200

    again = client.post(url, json=send_body, headers=auth_headers(admin))
    assert again.status_code == 409
    assert again.json()["detail"]["code"] == "invalid_transition"


def test_templates_and_preview(client, admin):
    created = client.post(
        "/api/admin/contract-templates",
        json={"name": "Remodel", "category": "residential", "content": KITCHEN_TEMPLATE + " {{PERMIT_NUMBER}}"},
        headers=auth_headers(admin)
    )
    assert created.status_code == 201
    template = created.json()
    assert "TOTAL_AMOUNT" in template["placeholders"]

    preview = client.post(
        "/api/admin/contracts/render-preview",
        json={"templateId": template["id"], "fieldValues": {"total_amount": "50000", "client_name": "Jane Doe"}},
        headers=auth_headers(admin)
    )
    assert preview.status_code == 200
    body = preview.json()
    # Preview only knows the values it was given
    assert "Between [Contractor Name] and Jane Doe" in body["content"]
    assert "Total: $50,000.00" in body["content"]
    assert body["unresolvedPlaceholders"] == ["PERMIT_NUMBER"]

    deleted = client.delete(f"/api/admin/contract-templates/{template['id']}", headers=auth_headers(admin))
    assert deleted.status_code == 200
    assert client.get(f"/api/admin/contract-templates/{template['id']}", headers=auth_headers(admin)).status_code == 404


def test_admin_notified_in_app(client, admin):
    token = token_from(send_contract(client, admin))
    client.post(
        f"/api/contracts/guest/{token}/sign",
        json={"signature": signature_data_uri(), "name": "Jane Doe", "email": "jane@example.com"}
    )

    resp = client.get("/notifications/me", headers=auth_headers(admin))
    assert resp.status_code == 200
    assert sorted(n["type"] for n in resp.json()) == ["contract_sent", "contract_signed"]
