from __future__ import annotations

import codecs
from pathlib import Path

import pytest

from tablelinks.builder.generate import generate_item_documents, render_item
from tablelinks.ingest.error_handling import ConfigurationError

TEMPLATE = "<html><title>XXXX</title>\r\n<a href='/f/XXXX-e.pdf'>XXXX</a>\r\n</html>\r\n"


@pytest.fixture
def template(tmp_path: Path) -> Path:
    path = tmp_path / "template-en.htm"
    path.write_bytes(codecs.BOM_UTF8 + TEMPLATE.encode("utf-8"))
    return path


def test_render_item() -> None:
    assert render_item("a XXXX b XXXX", "A-1") == "a A-1 b A-1"


def test_generate_writes_each_code(template: Path, tmp_path: Path) -> None:
    out = tmp_path / "out"
    out.mkdir()
    events: list[str] = []

    written = generate_item_documents(
        template, ["A-1", "B-2"], out, "en", on_progress=lambda e, p: events.append(e)
    )

    assert [p.name for p in written] == ["A-1-table-en.htm", "B-2-table-en.htm"]
    data = (out / "A-1-table-en.htm").read_bytes()
    assert data == codecs.BOM_UTF8 + TEMPLATE.replace("XXXX", "A-1").encode("utf-8")
    assert events == ["generate:start", "generate:written", "generate:written", "generate:finalized"]


def test_generate_keeps_existing(template: Path, tmp_path: Path) -> None:
    existing = tmp_path / "A-1-table-en.htm"
    existing.write_text("mine")

    written = generate_item_documents(template, ["A-1"], tmp_path, "en")
    assert written == []
    assert existing.read_text() == "mine"

    written = generate_item_documents(template, ["A-1"], tmp_path, "en", overwrite=True)
    assert written == [existing]
    assert "A-1" in existing.read_text(encoding="utf-8-sig")


def test_generate_rejects_missing_token(template: Path, tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found in template"):
        generate_item_documents(template, ["A-1"], tmp_path, "en", token="@@")
    with pytest.raises(ConfigurationError, match="must not be empty"):
        generate_item_documents(template, ["A-1"], tmp_path, "en", token="")
