import uuid
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from royalty_docs.core.auth import get_session_user
from royalty_docs.main import app
from royalty_docs.routers.documents import get_document_service
from royalty_docs.services.contract_document import ContractDocumentService
from tests.factories import FakeRepository, make_contract, make_split, make_user, session_for


@pytest.fixture
def owner():
    return make_user()


@pytest.fixture
def state(owner, template_pdf):
    """What the overridden dependencies hand out; tests swap entries before calling."""
    return {"repository": FakeRepository(), "user": session_for(owner), "template": str(template_pdf)}


@pytest.fixture
def api(state, storage_root):
    app.dependency_overrides[get_session_user] = lambda: state["user"]
    app.dependency_overrides[get_document_service] = lambda: ContractDocumentService(
        state["repository"],
        template_path=state["template"],
        storage_roots=[(str(storage_root), False)],
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(api):
    assert api.get("/health").json() == {"status": "healthy"}


class TestFetchDocument:
    def test_generated_when_nothing_stored(self, api, state, owner):
        contract = make_contract(user_id=owner.id)
        state["repository"] = FakeRepository(contract)

        response = api.get(f"/files/contract/{contract.id}")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == f'inline; filename="contract-{contract.id}-generated.pdf"'
        assert response.headers["cache-control"] == "no-store"
        assert int(response.headers["content-length"]) == len(response.content)
        assert response.content.startswith(b"%PDF")

    def test_stored_file(self, api, state, owner, stored_pdf):
        contract = make_contract(user_id=owner.id, pdf_url="private/uploads/contracts/signed.pdf")
        state["repository"] = FakeRepository(contract)

        response = api.get(f"/files/contract/{contract.id}", params={"download": "true"})

        assert response.status_code == 200
        assert response.content == stored_pdf.read_bytes()
        assert response.headers["content-disposition"] == f'attachment; filename="contract-{contract.id}.pdf"'
        assert "-generated" not in response.headers["content-disposition"]
        assert "cache-control" not in response.headers

    def test_generated_flag_wins_over_stored_file(self, api, state, owner, stored_pdf):
        contract = make_contract(user_id=owner.id, pdf_url="private/uploads/contracts/signed.pdf")
        state["repository"] = FakeRepository(contract)

        response = api.get(f"/files/contract/{contract.id}", params={"generated": "1"})

        assert response.status_code == 200
        assert response.content != stored_pdf.read_bytes()
        assert "-generated.pdf" in response.headers["content-disposition"]

    def test_missing_template_still_returns_pdf(self, api, state, owner, tmp_path):
        contract = make_contract(user_id=owner.id)
        state["repository"] = FakeRepository(contract)
        state["template"] = str(tmp_path / "missing-template.pdf")

        response = api.get(f"/files/contract/{contract.id}")

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")
        assert len(response.content) > 0

    def test_malformed_snapshot_uses_split_rows(self, api, state, owner):
        contract = make_contract(
            user_id=owner.id,
            featured_artists="not json",
            splits=[
                make_split(user=owner, name="Nova", percentage=Decimal("80")),
                make_split(name="Kai", percentage=Decimal("20")),
            ],
        )
        state["repository"] = FakeRepository(contract)

        assert api.get(f"/files/contract/{contract.id}").status_code == 200

        ledger = api.get(f"/files/contract/{contract.id}/ledger").json()
        assert ledger["source"] == "splits"
        assert ledger["primary"] == "Nova"
        assert [c["name"] for c in ledger["contributors"]] == ["Nova", "Kai"]
        assert Decimal(ledger["contributors"][0]["share_of_gross"]) == Decimal("56")
        assert ledger["splits_balanced"] is True


class TestErrors:
    def test_no_session_is_401_before_lookup(self, api, state):
        state["user"] = None
        state["repository"] = FakeRepository(make_contract())

        response = api.get(f"/files/contract/{uuid.uuid4()}")

        assert response.status_code == 401
        assert state["repository"].calls == []

    def test_bad_id_is_400(self, api):
        assert api.get("/files/contract/not-a-uuid").status_code == 400

    def test_unknown_contract_is_404(self, api):
        assert api.get(f"/files/contract/{uuid.uuid4()}").status_code == 404

    def test_missing_stored_file_is_404(self, api, state, owner):
        contract = make_contract(user_id=owner.id, pdf_url="private/uploads/contracts/gone.pdf")
        state["repository"] = FakeRepository(contract)

        response = api.get(f"/files/contract/{contract.id}")

        assert response.status_code == 404
        assert response.json()["detail"] == "Contract file not found"

    def test_stranger_is_403(self, api, state):
        contract = make_contract(user_id=uuid.uuid4())
        state["repository"] = FakeRepository(contract)

        assert api.get(f"/files/contract/{contract.id}").status_code == 403
        assert api.get(f"/files/contract/{contract.id}/ledger").status_code == 403

    def test_unexpected_failure_is_500(self, api, state):
        state["repository"] = FakeRepository(error=RuntimeError("connection reset"))

        response = api.get(f"/files/contract/{uuid.uuid4()}")

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to produce contract document"
