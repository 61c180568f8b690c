"""
HTTP tests for documents, versions, approvals, readiness and export.
"""
import uuid
import pytest
from unittest.mock import AsyncMock, patch
from sqlalchemy import func, select

from app.audit.models import AuditEvent
from app.auth.models import UserRole
from app.core.errors import PersistenceFailure
from app.workflow.models import Approval


async def _approval_count(db):
    return (await db.execute(select(func.count()).select_from(Approval))).scalar()


async def _create_document(client, target_langs=("en", "si")):
    resp = await client.post("/api/documents", json={
        "title": "Power of Attorney", "case_id": "case-42", "target_langs": list(target_langs),
    })
    assert resp.status_code == 201
    return resp.json()["id"]


async def _create_version(client, document_id, text="제1조 위임\n\n제2조 범위"):
    resp = await client.post(f"/api/documents/{document_id}/versions", json={"source_text": text})
    assert resp.status_code == 201
    return resp.json()["data"]["version"]["id"]


async def _approve(client, current_user, document_id, version_id, target, role, decision="approved"):
    current_user["role"] = role
    return await client.post(f"/api/documents/{document_id}/approve", json={
        "versionId": version_id, "targetLang": target, "decision": decision,
    })


# ═══════════════════════════════════════════════════════════════════
#  Documents & versions
# ═══════════════════════════════════════════════════════════════════

class TestDocumentRoutes:

    @pytest.mark.asyncio
    async def test_default_target_langs(self, client):
        resp = await client.post("/api/documents", json={"title": "Will"})
        assert resp.status_code == 201
        assert resp.json()["target_langs"] == ["en", "si", "ta"]

    @pytest.mark.asyncio
    async def test_source_is_not_a_language(self, client):
        resp = await client.post("/api/documents", json={"title": "Will", "target_langs": ["source"]})
        assert resp.status_code == 400
        assert resp.json()["type"] == "ValidationFailure"

    @pytest.mark.asyncio
    async def test_missing_document(self, client):
        resp = await client.get(f"/api/documents/{uuid.uuid4()}")
        assert resp.status_code == 404
        assert resp.json()["type"] == "NotFoundFailure"


class TestVersionRoutes:

    @pytest.mark.asyncio
    async def test_create_segments_and_audit(self, client, db):
        document_id = await _create_document(client)
        resp = await client.post(f"/api/documents/{document_id}/versions", json={
            "source_text": "a\n\nb", "change_summary": "initial",
        })
        body = resp.json()
        assert resp.status_code == 201
        assert body["data"]["segment_count"] == 2
        assert body["data"]["version"]["version_no"] == 1

        actions = (await db.execute(select(AuditEvent.action))).scalars().all()
        assert "version_created" in actions

    @pytest.mark.asyncio
    async def test_history_and_segments(self, client):
        document_id = await _create_document(client)
        await _create_version(client, document_id, "one")
        version_id = await _create_version(client, document_id, "two\n\nthree")

        history = (await client.get(f"/api/documents/{document_id}/versions")).json()
        assert [v["version_no"] for v in history["versions"]] == [2, 1]

        segments = (await client.get(
            f"/api/documents/{document_id}/versions", params={"versionId": version_id},
        )).json()
        assert [s["source_text"] for s in segments["segments"]] == ["two", "three"]


# ═══════════════════════════════════════════════════════════════════
#  Approvals
# ═══════════════════════════════════════════════════════════════════

class TestApproveRoute:

    @pytest.mark.asyncio
    async def test_bad_decision_is_400(self, client, current_user, db):
        document_id = await _create_document(client)
        version_id = await _create_version(client, document_id)
        resp = await _approve(client, current_user, document_id, version_id, "source", "admin", "maybe")
        assert resp.status_code == 400
        assert await _approval_count(db) == 0

    @pytest.mark.asyncio
    async def test_missing_decision_is_400(self, client, current_user, db):
        document_id = await _create_document(client)
        version_id = await _create_version(client, document_id)
        resp = await client.post(f"/api/documents/{document_id}/approve", json={"versionId": version_id})
        assert resp.status_code == 400
        assert resp.json()["type"] == "ValidationFailure"
        assert "decision" in resp.json()["error"]
        assert await _approval_count(db) == 0

    @pytest.mark.asyncio
    async def test_missing_version_id_is_400(self, client, current_user):
        document_id = await _create_document(client)
        resp = await client.post(f"/api/documents/{document_id}/approve", json={"decision": "approved"})
        assert resp.status_code == 400
        assert "versionId" in resp.json()["error"]

        resp = await client.get(f"/api/documents/{document_id}/approve", params={"targetLang": "en"})
        assert resp.status_code == 400
        assert set(resp.json()) == {"error", "type"}

    @pytest.mark.asyncio
    async def test_foreign_version_is_404(self, client, current_user):
        document_id = await _create_document(client)
        other_id = await _create_document(client)
        version_id = await _create_version(client, other_id)
        resp = await _approve(client, current_user, document_id, version_id, "source", "admin")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_viewer_forbidden_and_nothing_written(self, client, current_user, db):
        document_id = await _create_document(client)
        version_id = await _create_version(client, document_id)
        resp = await _approve(client, current_user, document_id, version_id, "source", UserRole.FAMILY_VIEWER.value)
        assert resp.status_code == 403
        assert resp.json()["type"] == "AuthorizationFailure"
        assert await _approval_count(db) == 0

    @pytest.mark.asyncio
    async def test_foreign_lawyer_cannot_sign_primary(self, client, current_user):
        document_id = await _create_document(client)
        version_id = await _create_version(client, document_id)
        resp = await _approve(client, current_user, document_id, version_id, "en", UserRole.FOREIGN_LAWYER.value)
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_role_forbidden(self, client, current_user):
        document_id = await _create_document(client)
        version_id = await _create_version(client, document_id)
        resp = await _approve(client, current_user, document_id, version_id, "source", "superuser")
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_full_sign_off(self, client, current_user):
        document_id = await _create_document(client, ("en", "si"))
        version_id = await _create_version(client, document_id)

        resp = await _approve(client, current_user, document_id, version_id, "source", UserRole.KOREA_AGENT.value)
        assert resp.status_code == 201
        assert resp.json()["message"] == "Document approved"
        assert resp.json()["data"]["version_status"] == "pending_approval"

        await _approve(client, current_user, document_id, version_id, "en", UserRole.TRANSLATOR.value)
        resp = await _approve(client, current_user, document_id, version_id, "si", UserRole.FOREIGN_LAWYER.value)
        assert resp.json()["data"]["version_status"] == "approved"

        readiness = (await client.get(
            f"/api/documents/{document_id}/readiness", params={"versionId": version_id},
        )).json()
        assert readiness["ready"] is True
        assert readiness["version_status"] == "approved"

    @pytest.mark.asyncio
    async def test_rejection_after_readiness(self, client, current_user):
        document_id = await _create_document(client, ("en", "si"))
        version_id = await _create_version(client, document_id)
        await _approve(client, current_user, document_id, version_id, "source", "korea_agent")
        await _approve(client, current_user, document_id, version_id, "en", "translator")
        await _approve(client, current_user, document_id, version_id, "si", "foreign_lawyer")

        resp = await _approve(client, current_user, document_id, version_id, "si", "foreign_lawyer", "rejected")
        assert resp.json()["message"] == "Document rejected"
        assert resp.json()["data"]["version_status"] == "rejected"

        readiness = (await client.get(
            f"/api/documents/{document_id}/readiness", params={"versionId": version_id},
        )).json()
        assert readiness["ready"] is False
        assert readiness["required"]["translations"]["si"]["rejected"] is True

    @pytest.mark.asyncio
    async def test_unreadable_ledger_still_records(self, client, current_user, db):
        document_id = await _create_document(client)
        version_id = await _create_version(client, document_id)
        with patch("app.workflow.service._entries_for_target",
                   AsyncMock(side_effect=PersistenceFailure("ledger unavailable"))):
            resp = await _approve(client, current_user, document_id, version_id, "source", "korea_agent")

        assert resp.status_code == 201
        assert resp.json()["data"]["version_status"] == "pending_approval"
        assert resp.json()["data"]["required"] is None
        assert await _approval_count(db) == 1

    @pytest.mark.asyncio
    async def test_captures_request_meta(self, client, current_user):
        document_id = await _create_document(client)
        version_id = await _create_version(client, document_id)
        current_user["role"] = "admin"
        resp = await client.post(
            f"/api/documents/{document_id}/approve",
            json={"versionId": version_id, "decision": "approved"},
            headers={"x-forwarded-for": "203.0.113.9, 10.0.0.1", "user-agent": "review-desk"},
        )
        approval = resp.json()["data"]["approval"]
        assert approval["target_lang"] == "source"
        assert approval["ip_address"] == "203.0.113.9"
        assert approval["user_agent"] == "review-desk"

    @pytest.mark.asyncio
    async def test_status_endpoint(self, client, current_user):
        document_id = await _create_document(client)
        version_id = await _create_version(client, document_id)
        await _approve(client, current_user, document_id, version_id, "en", "translator", "rejected")
        await _approve(client, current_user, document_id, version_id, "source", "korea_agent")

        body = (await client.get(
            f"/api/documents/{document_id}/approve",
            params={"versionId": version_id, "targetLang": "en"},
        )).json()
        assert body["status"]["rejected"] is True
        assert len(body["status"]["approvals"]) == 1
        assert [a["target_lang"] for a in body["chain"]] == ["en", "source"]


# ═══════════════════════════════════════════════════════════════════
#  Export
# ═══════════════════════════════════════════════════════════════════

class TestExportRoute:

    @pytest.mark.asyncio
    async def test_not_ready_is_400(self, client, current_user):
        document_id = await _create_document(client, ("en",))
        version_id = await _create_version(client, document_id)
        resp = await client.post(f"/api/documents/{document_id}/export", json={"versionId": version_id})
        assert resp.status_code == 400
        assert resp.json()["type"] == "ValidationFailure"

    @pytest.mark.asyncio
    async def test_unconfigured_language_is_400(self, client, current_user):
        document_id = await _create_document(client, ("en",))
        version_id = await _create_version(client, document_id)
        resp = await client.post(f"/api/documents/{document_id}/export", json={
            "versionId": version_id, "targetLangs": ["fr"],
        })
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_export_when_ready(self, client, current_user, db):
        document_id = await _create_document(client, ("en",))
        version_id = await _create_version(client, document_id)
        await _approve(client, current_user, document_id, version_id, "source", "admin")
        await _approve(client, current_user, document_id, version_id, "en", "admin")

        resp = await client.post(f"/api/documents/{document_id}/export", json={"versionId": version_id})
        assert resp.status_code == 201
        manifest = resp.json()["data"]
        assert manifest["version_id"] == version_id
        assert manifest["target_langs"] == ["en"]

        history = (await client.get(f"/api/documents/{document_id}/versions")).json()
        assert history["versions"][0]["status"] == "exported"

        actions = (await db.execute(select(AuditEvent.action))).scalars().all()
        assert "export_created" in actions
