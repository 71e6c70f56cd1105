"""Demo: walk one education record through the verification workflow.

Run with:
    BOOTSTRAP_ADMIN=admin python scripts/demo_verification_flow.py

Uses the in-memory store and locally minted tokens, so no database or
identity provider is needed.
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from credential_registry.main import app
from credential_registry.services import token_service

ADMIN = "admin"
SUBJECT = "alice"
ISSUER = "acme-university"


def _auth(principal: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_service.create_access_token(sub=principal)}"}


def main() -> None:
    with TestClient(app) as client:
        # ── Seed: admin registers a subject and an institution ──────────
        for principal, role in ((SUBJECT, "subject"), (ISSUER, "institution")):
            r = client.post(
                "/v1/users",
                json={"principal": principal, "role": role, "display_name": principal},
                headers=_auth(ADMIN),
            )
            print(f"0. register {principal:<16} → {r.status_code}")

        # ── Step 1: the institution registers as an education issuer ────
        r = client.post(
            "/v1/education/issuers",
            json={"org_name": "Acme U", "registration_ref": "REG-1"},
            headers=_auth(ISSUER),
        )
        print(f"1. POST /education/issuers        → {r.status_code}")

        # ── Step 2: issue a degree record about the subject ────────────
        r = client.post(
            "/v1/education/records",
            json={
                "subject": SUBJECT,
                "payload": {
                    "degree": "BSc",
                    "start_date": "2020-01-01",
                    "end_date": "2024-01-01",
                },
            },
            headers=_auth(ISSUER),
        )
        record = r.json()
        record_id = record["id"]
        print(f"2. POST /education/records        → {r.status_code}  id={record_id} state={record['state']}")

        # ── Step 3: the subject asks for verification ──────────────────
        r = client.post(
            f"/v1/education/records/{record_id}/request-verification",
            headers=_auth(SUBJECT),
        )
        print(f"3. request-verification           → {r.status_code}  state={r.json()['state']}")

        r = client.get("/v1/education/pending", headers=_auth(ISSUER))
        print(f"4. GET /education/pending         → {r.status_code}  ids={[x['id'] for x in r.json()]}")

        # ── Step 5: the issuer rejects, the subject asks again ─────────
        r = client.post(
            f"/v1/education/records/{record_id}/reject",
            json={"reason": "date mismatch"},
            headers=_auth(ISSUER),
        )
        body = r.json()
        print(f"5. reject                         → {r.status_code}  state={body['state']} reason={body['rejection_reason']!r}")

        r = client.post(
            f"/v1/education/records/{record_id}/request-verification",
            headers=_auth(SUBJECT),
        )
        print(f"6. request-verification (again)   → {r.status_code}  state={r.json()['state']}")

        # ── Step 7: approve; verified is final ─────────────────────────
        r = client.post(
            f"/v1/education/records/{record_id}/approve", headers=_auth(ISSUER)
        )
        print(f"7. approve                        → {r.status_code}  state={r.json()['state']}")

        r = client.post(
            f"/v1/education/records/{record_id}/request-verification",
            headers=_auth(SUBJECT),
        )
        print(f"8. request-verification (final)   → {r.status_code}  error={r.json()['error']}")

        r = client.get(f"/v1/subjects/{SUBJECT}/summary", headers=_auth(SUBJECT))
        print(f"9. GET /subjects/{SUBJECT}/summary   → {r.status_code}  verified={r.json()['verified']}")


if __name__ == "__main__":
    main()
