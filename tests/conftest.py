import pytest
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from tests.factories import CONTRACTS_DIR


@pytest.fixture
def template_pdf(tmp_path):
    """A three-page stand-in for the contract template."""
    path = tmp_path / "contract-template.pdf"
    c = canvas.Canvas(str(path), pagesize=A4)
    for number in range(1, 4):
        c.setFont("Helvetica", 12)
        c.drawString(56, 800, f"Template page {number}")
        c.showPage()
    c.save()
    return path


@pytest.fixture
def storage_root(tmp_path):
    """An empty root holding the private uploads tree."""
    root = tmp_path / "storage"
    (root / CONTRACTS_DIR).mkdir(parents=True)
    return root


@pytest.fixture
def stored_pdf(storage_root):
    path = storage_root / CONTRACTS_DIR / "signed.pdf"
    path.write_bytes(b"%PDF-1.4\n% signed contract\n%%EOF\n")
    return path
