import json

import pytest

import main
from conftest import SAMPLE_OCR_TEXT


@pytest.fixture
def text_document(tmp_path):
    path = tmp_path / "invoice.txt"
    path.write_text(SAMPLE_OCR_TEXT, encoding="utf-8")
    return path


def test_text_document_to_stdout(text_document, capsys):
    assert main.main(["--input", str(text_document), "--quiet"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["total"] == "154.06"
    assert data["buyer_name"] == "John Smith"
    assert len(data["line_items"]) == 3


def test_block_document_to_file(tmp_path, analysis_blocks):
    source = tmp_path / "analysis.json"
    source.write_text(json.dumps({"Blocks": analysis_blocks}), encoding="utf-8")
    target = tmp_path / "out" / "fields.json"

    assert main.main(["-i", str(source), "-o", str(target), "-q"]) == 0

    data = json.loads(target.read_text(encoding="utf-8"))
    assert data["key_values"]["INVOICE #"] == "US-001"
    assert data["invoice"]["total"] == "154.06"


def test_graph_flag_forces_block_parsing(tmp_path, analysis_blocks, capsys):
    source = tmp_path / "analysis.out"
    source.write_text(json.dumps(analysis_blocks), encoding="utf-8")

    assert main.main(["-i", str(source), "--graph", "-q"]) == 0
    assert "key_values" in json.loads(capsys.readouterr().out)


def test_missing_file(tmp_path, capsys):
    assert main.main(["-i", str(tmp_path / "nope.txt"), "-q"]) == 1
    assert "Document not found" in capsys.readouterr().err


def test_unsupported_extension(tmp_path, capsys):
    source = tmp_path / "invoice.pdf"
    source.write_bytes(b"%PDF-1.4")

    assert main.main(["-i", str(source), "-q"]) == 1
    assert "Unsupported document type" in capsys.readouterr().err


def test_corrupted_json(tmp_path, capsys):
    source = tmp_path / "analysis.json"
    source.write_text("{not json", encoding="utf-8")

    assert main.main(["-i", str(source), "-q"]) == 1
    assert "Corrupted or unreadable document" in capsys.readouterr().err


def test_load_document_dispatch(text_document):
    assert main.load_document(str(text_document)) == SAMPLE_OCR_TEXT


def test_custom_config_changes_sentinel(tmp_path, capsys):
    settings = tmp_path / "custom.yaml"
    settings.write_text('extraction:\n  sentinel: "N/A"\n', encoding="utf-8")
    source = tmp_path / "invoice.txt"
    source.write_text("TOTAL 5.00\n", encoding="utf-8")

    assert main.main(["-i", str(source), "-c", str(settings), "-q"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["total"] == "5.00"
    assert data["vendor_name"] == "N/A"


def test_config_with_list_root_exits_cleanly(tmp_path, text_document, capsys):
    settings = tmp_path / "custom.yaml"
    settings.write_text("- extraction\n- sentinel\n", encoding="utf-8")

    assert main.main(["-i", str(text_document), "-c", str(settings), "-q"]) == 1
    assert "Configuration root must be a mapping" in capsys.readouterr().err


def test_unparseable_config_exits_cleanly(tmp_path, text_document, capsys):
    settings = tmp_path / "custom.yaml"
    settings.write_text("extraction: [unclosed\n", encoding="utf-8")

    assert main.main(["-i", str(text_document), "-c", str(settings), "-q"]) == 2
    assert "Invalid configuration file" in capsys.readouterr().err


def test_unexpected_error_exits_cleanly(text_document, monkeypatch, capsys):
    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(main, "run_extraction", broken)

    assert main.main(["-i", str(text_document), "-q"]) == 1
    assert "Unexpected error: boom" in capsys.readouterr().err
