from datetime import datetime, timedelta, timezone

import main


def create_claim(client, payload, **overrides):
    resp = client.post("/api/claims", json={**payload, **overrides})
    assert resp.status_code == 200
    return resp.json()["claim"]


def test_claims_require_admin(client):
    assert client.get("/api/claims").status_code == 401
    assert client.post("/api/claims", json={}).status_code == 401


def test_create_claim_defaults(admin_client, claim_payload):
    claim = create_claim(admin_client, claim_payload, changedBy="Sarah")
    assert claim["id"].startswith("claim_")
    assert claim["prescriberFax"] == ""
    assert claim["patientSignedLetter"] is False
    assert claim["priority"] is False
    assert claim["documents"] == [] and claim["notes"] == []
    assert "changedBy" not in claim

    (entry,) = claim["statusHistory"]
    assert entry["fromStatus"] == "initial"
    assert entry["toStatus"] == "new"
    assert entry["changedBy"] == "Sarah"


def test_create_claim_prescription_date_falls_back_to_refill(admin_client, claim_payload):
    claim = create_claim(admin_client, claim_payload, category="manual-claims", dateOfRefill="2026-01-02")
    assert claim["dateOfPrescription"] == "2026-01-02"


def test_create_claim_rejects_unknown_status(admin_client, claim_payload):
    resp = admin_client.post("/api/claims", json={**claim_payload, "claimStatus": "lost"})
    assert resp.status_code == 400


def test_get_single_claim(admin_client, claim_payload):
    claim = create_claim(admin_client, claim_payload)
    resp = admin_client.get("/api/claims", params={"id": claim["id"]})
    assert resp.json()["claim"]["rxNumber"] == "RX-2040"

    resp = admin_client.get("/api/claims", params={"id": "claim_missing"})
    assert resp.status_code == 404
    assert resp.json()["error"] == "Claim not found"


def test_list_claims_filters(admin_client, claim_payload):
    create_claim(admin_client, claim_payload)
    create_claim(
        admin_client,
        claim_payload,
        rxNumber="RX-9",
        productName="Depends Briefs",
        prescriberName="Dr. Lahache",
        category="diapers-pads",
        claimStatus="authorized",
        type="renewal",
        priority=True,
    )

    def rx_numbers(**params):
        resp = admin_client.get("/api/claims", params=params)
        return sorted(c["rxNumber"] for c in resp.json()["claims"])

    assert rx_numbers() == ["RX-2040", "RX-9"]
    assert rx_numbers(category="diapers-pads") == ["RX-9"]
    assert rx_numbers(status="authorized") == ["RX-9"]
    assert rx_numbers(status="all") == ["RX-2040", "RX-9"]
    assert rx_numbers(type="prior-authorization") == ["RX-2040"]
    assert rx_numbers(search="ozEMPIC") == ["RX-2040"]
    assert rx_numbers(search="lahache") == ["RX-9"]
    assert rx_numbers(prescriber="deer") == ["RX-2040"]
    assert rx_numbers(product="briefs") == ["RX-9"]
    assert rx_numbers(priority="true") == ["RX-9"]


def test_manual_claims_listing_is_empty(admin_client, claim_payload):
    create_claim(admin_client, claim_payload, category="manual-claims", manualClaimType="baby")
    resp = admin_client.get("/api/claims", params={"category": "manual-claims"})
    assert resp.json() == {"success": True, "claims": []}


def test_expiry_filter(admin_client, claim_payload):
    today = main.local_today()
    end_dates = {
        "RX-SOON": today + timedelta(days=3),
        "RX-LATER": today + timedelta(days=20),
        "RX-PAST": today - timedelta(days=1),
    }
    for rx, end in end_dates.items():
        create_claim(admin_client, claim_payload, rxNumber=rx, authorizationEndDate=end.isoformat())
    create_claim(admin_client, claim_payload, rxNumber="RX-NONE")

    def rx_numbers(expiry):
        resp = admin_client.get("/api/claims", params={"expiry": expiry})
        return sorted(c["rxNumber"] for c in resp.json()["claims"])

    assert rx_numbers("week") == ["RX-SOON"]
    assert rx_numbers("month") == ["RX-LATER", "RX-SOON"]
    assert rx_numbers("all") == ["RX-LATER", "RX-NONE", "RX-PAST", "RX-SOON"]
    assert admin_client.get("/api/claims", params={"expiry": "decade"}).status_code == 400


def test_claims_summary(admin_client, claim_payload):
    today = main.local_today()
    create_claim(admin_client, claim_payload, authorizationEndDate=(today - timedelta(days=5)).isoformat())
    create_claim(
        admin_client,
        claim_payload,
        claimStatus="authorized",
        authorizationEndDate=(today + timedelta(days=10)).isoformat(),
    )
    create_claim(admin_client, claim_payload, claimStatus="authorized", category="appeals")

    summary = admin_client.get("/api/claims/summary").json()["summary"]
    assert summary["total"] == 3
    assert summary["byStatus"]["new"] == 1
    assert summary["byStatus"]["authorized"] == 2
    assert summary["expired"] == 1
    assert summary["expiringSoon"] == 1

    appeals = admin_client.get("/api/claims/summary", params={"category": "appeals"}).json()["summary"]
    assert appeals["total"] == 1


def test_update_claim_fields(admin_client, mongo, claim_payload):
    claim = create_claim(admin_client, claim_payload)
    resp = admin_client.put(
        "/api/claims", params={"id": claim["id"]}, json={"caseNumber": "C-77", "priority": True}
    )
    assert resp.status_code == 200
    stored = mongo["claims"].find_one({"id": claim["id"]})
    assert stored["caseNumber"] == "C-77"
    assert stored["priority"] is True
    assert len(stored["statusHistory"]) == 1


def test_update_claim_status_appends_history(admin_client, mongo, claim_payload):
    claim = create_claim(admin_client, claim_payload)
    admin_client.put("/api/claims", json={"id": claim["id"], "claimStatus": "case-number-open", "changedBy": "Sarah"})
    # same status again is not a transition
    admin_client.put("/api/claims", json={"id": claim["id"], "claimStatus": "case-number-open"})

    history = mongo["claims"].find_one({"id": claim["id"]})["statusHistory"]
    assert [(h["fromStatus"], h["toStatus"]) for h in history] == [
        ("initial", "new"),
        ("new", "case-number-open"),
    ]
    assert history[-1]["changedBy"] == "Sarah"


def test_update_claim_seeds_missing_history(admin_client, mongo):
    created = datetime(2026, 1, 2, 15, 0, tzinfo=timezone.utc)
    mongo["claims"].insert_one({"id": "claim_legacy", "claimStatus": "sent", "createdAt": created})

    admin_client.put("/api/claims", params={"id": "claim_legacy"}, json={"claimStatus": "payment-received"})

    history = mongo["claims"].find_one({"id": "claim_legacy"})["statusHistory"]
    assert [(h["fromStatus"], h["toStatus"]) for h in history] == [
        ("initial", "sent"),
        ("sent", "payment-received"),
    ]
    assert history[0]["changedAt"].startswith("2026-01-02T15:00:00")


def test_update_claim_errors(admin_client, claim_payload):
    resp = admin_client.put("/api/claims", json={"caseNumber": "C-1"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Claim ID is required"

    resp = admin_client.put("/api/claims", json={"id": "claim_missing", "caseNumber": "C-1"})
    assert resp.status_code == 404

    claim = create_claim(admin_client, claim_payload)
    resp = admin_client.put("/api/claims", json={"id": claim["id"], "claimStatus": "lost"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid claim status"


def test_update_claim_empty_status_keeps_status(admin_client, mongo, claim_payload):
    claim = create_claim(admin_client, claim_payload)
    resp = admin_client.put("/api/claims", json={"id": claim["id"], "claimStatus": "", "caseNumber": "C-12"})
    assert resp.status_code == 200

    stored = mongo["claims"].find_one({"id": claim["id"]})
    assert stored["claimStatus"] == "new"
    assert stored["caseNumber"] == "C-12"
    assert len(stored["statusHistory"]) == 1


def test_update_claim_rejects_operator_keys(admin_client, mongo, claim_payload):
    claim = create_claim(admin_client, claim_payload)
    resp = admin_client.put("/api/claims", json={"id": claim["id"], "$where": "1", "caseNumber": "C-1"})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid field name"}
    assert mongo["claims"].find_one({"id": claim["id"]})["caseNumber"] == ""


def test_delete_claim_archives_it(admin_client, mongo, claim_payload):
    claim = create_claim(admin_client, claim_payload)
    resp = admin_client.request(
        "DELETE",
        "/api/claims",
        params={"id": claim["id"]},
        json={"deletionNote": "Duplicate entry", "deletedBy": "Sarah"},
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == "Claim archived successfully"
    assert mongo["claims"].find_one({"id": claim["id"]}) is None

    archived = mongo["archived_claims"].find_one({"id": claim["id"]})
    assert archived["deletionNote"] == "Duplicate entry"
    assert archived["archivedBy"] == "Sarah"
    assert archived["rxNumber"] == "RX-2040"


def test_delete_claim_defaults_and_errors(admin_client, mongo, claim_payload):
    assert admin_client.delete("/api/claims").status_code == 400
    assert admin_client.delete("/api/claims", params={"id": "claim_missing"}).status_code == 404

    claim = create_claim(admin_client, claim_payload)
    admin_client.delete("/api/claims", params={"id": claim["id"]})
    archived = mongo["archived_claims"].find_one({"id": claim["id"]})
    assert archived["deletionNote"] == ""
    assert archived["archivedBy"] == "Admin User"


def test_archived_claims_newest_first(admin_client, mongo):
    now = datetime.now(timezone.utc)
    mongo["archived_claims"].insert_one({"id": "claim_a", "archivedAt": now - timedelta(days=1)})
    mongo["archived_claims"].insert_one({"id": "claim_b", "archivedAt": now})

    resp = admin_client.get("/api/claims/archived")
    assert [c["id"] for c in resp.json()["claims"]] == ["claim_b", "claim_a"]


def test_claim_notes(admin_client, mongo, claim_payload):
    claim = create_claim(admin_client, claim_payload)

    resp = admin_client.post(
        "/api/claims/notes", json={"claimId": claim["id"], "text": "Called NIHB", "staffUsername": "sarah"}
    )
    assert resp.status_code == 200
    note = resp.json()["note"]
    assert note["id"].startswith("note_")
    assert mongo["claims"].find_one({"id": claim["id"]})["notes"][0]["text"] == "Called NIHB"

    resp = admin_client.delete("/api/claims/notes", params={"claimId": claim["id"], "noteId": note["id"]})
    assert resp.status_code == 200
    assert mongo["claims"].find_one({"id": claim["id"]})["notes"] == []


def test_claim_note_errors(admin_client):
    resp = admin_client.post("/api/claims/notes", json={"claimId": "claim_x", "text": ""})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required fields"

    resp = admin_client.post(
        "/api/claims/notes", json={"claimId": "claim_missing", "text": "hi", "staffUsername": "sarah"}
    )
    assert resp.status_code == 404

    resp = admin_client.delete("/api/claims/notes", params={"claimId": "claim_x"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required parameters"


def test_claim_documents(admin_client, mongo, claim_payload):
    claim = create_claim(admin_client, claim_payload)

    resp = admin_client.post(
        "/api/claims/documents",
        json={
            "claimId": claim["id"],
            "filename": "letter.pdf",
            "filePath": "/uploads/1767542400000_letter.pdf",
            "type": "doctor-letter",
        },
    )
    assert resp.status_code == 200
    documents = mongo["claims"].find_one({"id": claim["id"]})["documents"]
    assert documents[0]["filename"] == "letter.pdf"
    assert documents[0]["uploadDate"]

    resp = admin_client.delete(
        "/api/claims/documents",
        params={"claimId": claim["id"], "filePath": "/uploads/1767542400000_letter.pdf"},
    )
    assert resp.status_code == 200
    assert mongo["claims"].find_one({"id": claim["id"]})["documents"] == []
