"""
Tests for public version verification.
"""
import uuid
import pytest
from unittest.mock import AsyncMock, patch

from app.core.errors import PersistenceFailure
from app.verify.service import hash_matches


class TestHashMatches:

    def test_no_hash_is_none(self):
        assert hash_matches("ab" * 32, None) is None
        assert hash_matches("ab" * 32, "  ") is None

    def test_case_insensitive(self):
        assert hash_matches("ab" * 32, ("AB" * 32) + " ") is True

    def test_mismatch(self):
        assert hash_matches("ab" * 32, "cd" * 32) is False


class TestVerifyRoute:

    async def _signed_version(self, client, current_user):
        document_id = (await client.post("/api/documents", json={
            "title": "Deed", "case_id": "case-7", "target_langs": ["en"],
        })).json()["id"]
        version = (await client.post(
            f"/api/documents/{document_id}/versions", json={"source_text": "deed text"},
        )).json()["data"]["version"]
        current_user["role"] = "korea_agent"
        await client.post(f"/api/documents/{document_id}/approve", json={
            "versionId": version["id"], "targetLang": "source", "decision": "approved",
        })
        return version

    @pytest.mark.asyncio
    async def test_valid_hash(self, client, current_user):
        version = await self._signed_version(client, current_user)
        body = (await client.get(f"/api/verify/{version['id']}", params={"hash": version["sha256"]})).json()

        assert body["hash_valid"] is True
        assert body["document_title"] == "Deed"
        assert [a["target_lang"] for a in body["approval_chain"]] == ["source"]
        assert {e["action"] for e in body["audit_trail"]} >= {"document_created", "approval_created"}
        assert body["warnings"] == []

    @pytest.mark.asyncio
    async def test_wrong_hash(self, client, current_user):
        version = await self._signed_version(client, current_user)
        body = (await client.get(f"/api/verify/{version['id']}", params={"hash": "0" * 64})).json()
        assert body["hash_valid"] is False

    @pytest.mark.asyncio
    async def test_no_hash(self, client, current_user):
        version = await self._signed_version(client, current_user)
        body = (await client.get(f"/api/verify/{version['id']}")).json()
        assert body["hash_valid"] is None
        assert body["sha256"] == version["sha256"]

    @pytest.mark.asyncio
    async def test_audit_outage_is_a_warning(self, client, current_user):
        version = await self._signed_version(client, current_user)
        with patch("app.verify.service.get_audit_trail", AsyncMock(side_effect=PersistenceFailure("down"))):
            resp = await client.get(f"/api/verify/{version['id']}")
        assert resp.status_code == 200
        assert resp.json()["audit_trail"] == []
        assert resp.json()["warnings"]

    @pytest.mark.asyncio
    async def test_unknown_version(self, client):
        resp = await client.get(f"/api/verify/{uuid.uuid4()}")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_chain_hides_request_metadata(self, client, current_user):
        document_id = (await client.post("/api/documents", json={
            "title": "Deed", "case_id": "case-8", "target_langs": ["en"],
        })).json()["id"]
        version = (await client.post(
            f"/api/documents/{document_id}/versions", json={"source_text": "deed text"},
        )).json()["data"]["version"]
        current_user["role"] = "translator"
        await client.post(
            f"/api/documents/{document_id}/approve",
            json={"versionId": version["id"], "targetLang": "en", "decision": "approved", "comment": "ok"},
            headers={"x-forwarded-for": "203.0.113.9", "user-agent": "reviewer-laptop"},
        )

        resp = await client.get(f"/api/verify/{version['id']}")
        entry = resp.json()["approval_chain"][0]
        assert entry["role"] == "translator"
        assert entry["comment"] == "ok"
        assert "ip_address" not in entry
        assert "user_agent" not in entry
        assert "203.0.113.9" not in resp.text
        assert "reviewer-laptop" not in resp.text
