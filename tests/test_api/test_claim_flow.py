"""API tests for the end-to-end claim flow.
Policy creation, enrollment, submission, assignment, review and documents,
each step performed by the role that owns it.
"""

from decimal import Decimal

import pytest

from claimdesk.core.enums import Role

pytestmark = pytest.mark.api


async def _create_policy(api, headers, coverage: str = "1000.00") -> dict:
    response = await api.post(
        "/api/policies",
        json={
            "name": "Health Basic",
            "coverage_amount": coverage,
            "premium_amount": "50.00",
            "duration_months": 12,
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
async def enrolled_policy(api, accounts, auth_headers):
    """A 1000.00 policy with the customer enrolled."""
    policy = await _create_policy(api, auth_headers(accounts["admin"]))
    response = await api.post(
        "/api/enrollments",
        json={"policy_id": policy["id"]},
        headers=auth_headers(accounts["customer"]),
    )
    assert response.status_code == 201, response.text
    return policy


async def test_claim_lifecycle(api, accounts, auth_headers, enrolled_policy):
    customer = auth_headers(accounts["customer"])
    admin = auth_headers(accounts["admin"])
    adjuster = auth_headers(accounts["adjuster"])

    too_big = await api.post(
        "/api/claims",
        json={"policy_id": enrolled_policy["id"], "claim_amount": "1500.00", "description": "Surgery"},
        headers=customer,
    )
    assert too_big.status_code == 422
    assert "exceeds policy coverage" in too_big.json()["detail"]

    submitted = await api.post(
        "/api/claims",
        json={"policy_id": enrolled_policy["id"], "claim_amount": "500.00", "description": "Surgery"},
        headers=customer,
    )
    assert submitted.status_code == 201, submitted.text
    claim = submitted.json()
    assert claim["status"] == "PENDING"
    assert claim["claimant_id"] == str(accounts["customer"].id)
    assert claim["claim_number"].startswith("CLM-20250115-")

    forbidden = await api.post(
        f"/api/claims/{claim['id']}/review", json={"status": "APPROVED"}, headers=customer
    )
    assert forbidden.status_code == 403

    assigned = await api.post(
        f"/api/claims/{claim['id']}/assign",
        json={"adjuster_id": str(accounts["adjuster"].id)},
        headers=admin,
    )
    assert assigned.status_code == 200, assigned.text
    assert assigned.json()["status"] == "UNDER_REVIEW"

    assert [c["id"] for c in (await api.get("/api/claims/assigned", headers=adjuster)).json()] == [
        claim["id"]
    ]

    reviewed = await api.post(
        f"/api/claims/{claim['id']}/review",
        json={"status": "APPROVED", "approved_amount": "400.00", "remarks": "Partial"},
        headers=adjuster,
    )
    assert reviewed.status_code == 200, reviewed.text
    assert reviewed.json()["status"] == "APPROVED"
    assert Decimal(reviewed.json()["approved_amount"]) == Decimal("400.00")

    cancel = await api.post(f"/api/claims/{claim['id']}/cancel", headers=customer)
    assert cancel.status_code == 409

    history = (await api.get(f"/api/claims/{claim['id']}/history", headers=customer)).json()
    assert {h["new_status"] for h in history} == {"PENDING", "UNDER_REVIEW", "APPROVED"}

    mine = (await api.get("/api/claims/mine", headers=customer)).json()
    assert [c["status"] for c in mine] == ["APPROVED"]


async def test_claim_requires_enrollment(api, accounts, auth_headers):
    policy = await _create_policy(api, auth_headers(accounts["admin"]))

    response = await api.post(
        "/api/claims",
        json={"policy_id": policy["id"], "claim_amount": "10.00", "description": "Checkup"},
        headers=auth_headers(accounts["customer"]),
    )

    assert response.status_code == 422


async def test_other_customers_cannot_view_claim(
    api, accounts, auth_headers, create_account, enrolled_policy
):
    stranger = await create_account(Role.CUSTOMER, "stranger")
    claim = (
        await api.post(
            "/api/claims",
            json={"policy_id": enrolled_policy["id"], "claim_amount": "10.00", "description": "Checkup"},
            headers=auth_headers(accounts["customer"]),
        )
    ).json()

    response = await api.get(f"/api/claims/{claim['id']}", headers=auth_headers(stranger))

    assert response.status_code == 403


async def test_submit_with_documents(api, accounts, auth_headers, storage, enrolled_policy):
    customer = auth_headers(accounts["customer"])

    response = await api.post(
        "/api/claims/with-documents",
        data={
            "policy_id": enrolled_policy["id"],
            "claim_amount": "200.00",
            "description": "Pharmacy",
        },
        files=[
            ("files", ("receipt.pdf", b"%PDF-1.7", "application/pdf")),
            ("files", ("setup.exe", b"MZ", "application/octet-stream")),
        ],
        headers=customer,
    )

    assert response.status_code == 201, response.text
    payload = response.json()
    assert payload["claim"]["status"] == "PENDING"
    assert [d["original_filename"] for d in payload["documents"]] == ["receipt.pdf"]
    assert [f["filename"] for f in payload["failed_attachments"]] == ["setup.exe"]
    assert len(storage.blobs) == 1

    document_id = payload["documents"][0]["id"]
    download = await api.get(f"/api/documents/{document_id}/download", headers=customer)

    assert download.status_code == 200
    assert download.content == b"%PDF-1.7"
    assert 'filename="receipt.pdf"' in download.headers["content-disposition"]


async def test_upload_rejects_unsupported_type(api, accounts, auth_headers, enrolled_policy):
    customer = auth_headers(accounts["customer"])
    claim = (
        await api.post(
            "/api/claims",
            json={"policy_id": enrolled_policy["id"], "claim_amount": "10.00", "description": "Checkup"},
            headers=customer,
        )
    ).json()

    response = await api.post(
        f"/api/documents/claims/{claim['id']}",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=customer,
    )

    assert response.status_code == 415


async def test_download_keeps_non_ascii_filename(api, accounts, auth_headers, enrolled_policy):
    customer = auth_headers(accounts["customer"])
    claim = (
        await api.post(
            "/api/claims",
            json={"policy_id": enrolled_policy["id"], "claim_amount": "10.00", "description": "Checkup"},
            headers=customer,
        )
    ).json()
    filename = "reçu médical €.pdf"

    uploaded = await api.post(
        f"/api/documents/claims/{claim['id']}",
        files={"file": (filename, b"%PDF-1.7", "application/pdf")},
        headers=customer,
    )
    assert uploaded.status_code == 201
    assert uploaded.json()["original_filename"] == filename

    download = await api.get(f"/api/documents/{uploaded.json()['id']}/download", headers=customer)

    assert download.status_code == 200
    assert download.content == b"%PDF-1.7"
    assert download.headers["content-disposition"] == (
        'attachment; filename="recu medical .pdf"; '
        "filename*=UTF-8''re%C3%A7u%20m%C3%A9dical%20%E2%82%AC.pdf"
    )


async def test_agent_enrolls_and_files_for_customer(api, accounts, auth_headers):
    agent = auth_headers(accounts["agent"])
    customer_id = str(accounts["customer"].id)
    policy = await _create_policy(api, auth_headers(accounts["admin"]))

    enrollment = await api.post(
        "/api/enrollments", json={"policy_id": policy["id"], "policyholder_id": customer_id}, headers=agent
    )
    assert enrollment.status_code == 201, enrollment.text
    assert enrollment.json()["agent_id"] == str(accounts["agent"].id)

    claim = await api.post(
        "/api/claims",
        json={
            "policy_id": policy["id"],
            "claim_amount": "75.00",
            "description": "Lab work",
            "claimant_id": customer_id,
        },
        headers=agent,
    )
    assert claim.status_code == 201, claim.text
    assert claim.json()["claimant_id"] == customer_id
    assert claim.json()["agent_id"] == str(accounts["agent"].id)

    filed = (await api.get("/api/claims/filed", headers=agent)).json()
    assert [c["id"] for c in filed] == [claim.json()["id"]]


async def test_customer_cannot_enroll_someone_else(api, accounts, auth_headers):
    policy = await _create_policy(api, auth_headers(accounts["admin"]))

    response = await api.post(
        "/api/enrollments",
        json={"policy_id": policy["id"], "policyholder_id": str(accounts["agent"].id)},
        headers=auth_headers(accounts["customer"]),
    )

    assert response.status_code == 403


async def test_duplicate_enrollment_conflicts(api, accounts, auth_headers, enrolled_policy):
    response = await api.post(
        "/api/enrollments",
        json={"policy_id": enrolled_policy["id"]},
        headers=auth_headers(accounts["customer"]),
    )

    assert response.status_code == 409


async def test_dashboard_by_role(api, accounts, auth_headers, enrolled_policy):
    customer = (await api.get("/api/dashboard", headers=auth_headers(accounts["customer"]))).json()
    admin = (await api.get("/api/dashboard", headers=auth_headers(accounts["admin"]))).json()

    assert customer["role"] == "CUSTOMER"
    assert customer["active_enrollments"] == 1
    assert admin["role"] == "ADMIN"
    assert admin["total_users"] == 4
