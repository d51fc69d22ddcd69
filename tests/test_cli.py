"""Tests for the command line entry point."""

import json
import logging

import pytest

from storewatch.cli import main


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


PRODUCT_PAGE = (
    "<html><head>"
    '<script type="application/ld+json">'
    '{"@type":"Product","name":"Lamp","offers":{"price":"45.00","availability":"https://schema.org/InStock"}}'
    "</script>"
    "</head><body></body></html>"
)


class TestParsePage:
    """Test the parse-page command."""

    def test_extracts_product(self, tmp_path, capsys):
        html_file = tmp_path / "page.html"
        html_file.write_text(PRODUCT_PAGE, encoding="utf-8")

        code = main(["parse-page", str(html_file)])

        out = json.loads(capsys.readouterr().out)
        assert code == 0
        assert out["strategy"] == "json-ld"
        assert out["product"]["title"] == "Lamp"
        assert out["product"]["raw_price"] == "45.00"

    def test_single_strategy(self, tmp_path, capsys):
        html_file = tmp_path / "page.html"
        html_file.write_text(PRODUCT_PAGE, encoding="utf-8")

        code = main(["parse-page", str(html_file), "--strategy", "meta-variable"])

        assert code == 1
        assert json.loads(capsys.readouterr().out) is None

    def test_no_product(self, tmp_path, capsys):
        html_file = tmp_path / "empty.html"
        html_file.write_text("<html><body>Nothing here</body></html>", encoding="utf-8")

        assert main(["parse-page", str(html_file)]) == 1
        assert json.loads(capsys.readouterr().out) is None

    def test_missing_file(self, tmp_path):
        assert main(["parse-page", str(tmp_path / "missing.html")]) == 2

    def test_unknown_strategy(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["parse-page", str(tmp_path / "page.html"), "--strategy", "bogus"])


class TestDiffCatalog:
    """Test the diff-catalog command."""

    def test_price_drop(self, tmp_path, capsys, make_product, make_variant):
        existing = write_json(tmp_path / "existing.json", [{
            "id": 1,
            "title": "Tee",
            "variants": [{"id": 11, "price": "20.00", "available": True, "title": "S"}],
        }])
        product = make_product(1, title="Tee", variants=[make_variant(11, price="10.00")])
        fetched = write_json(tmp_path / "fetched.json", {"products": [product.model_dump()]})

        code = main(["diff-catalog", existing, fetched])

        out = json.loads(capsys.readouterr().out)
        assert code == 0
        assert [c["change_type"] for c in out["changes"]] == ["priceDropped"]
        assert out["changes"][0]["price_change"] == "-10.00"
        assert out["changes"][0]["magnitude"] == "large"

    def test_accepts_bare_product_list(self, tmp_path, capsys, make_product):
        existing = write_json(tmp_path / "existing.json", [])
        fetched = write_json(tmp_path / "fetched.json", [make_product(5).model_dump()])

        assert main(["diff-catalog", existing, fetched]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["changes"][0]["change_type"] == "newProduct"

    def test_invalid_catalog(self, tmp_path):
        existing = write_json(tmp_path / "existing.json", [])
        fetched = write_json(tmp_path / "fetched.json", {"products": [{"id": 1}]})

        assert main(["diff-catalog", existing, fetched]) == 2

    def test_malformed_json(self, tmp_path):
        existing = tmp_path / "existing.json"
        existing.write_text("[{", encoding="utf-8")
        fetched = write_json(tmp_path / "fetched.json", [])

        assert main(["diff-catalog", str(existing), fetched]) == 2

    def test_stored_state_missing_field(self, tmp_path):
        existing = write_json(tmp_path / "existing.json", [{"title": "No id"}])
        fetched = write_json(tmp_path / "fetched.json", [])

        assert main(["diff-catalog", existing, fetched]) == 2


def test_diff_videos(tmp_path, capsys):
    existing = write_json(tmp_path / "existing.json", [
        {"id": 1, "src": "https://cdn.example.com/a.mp4"},
        {"id": 2, "src": "https://cdn.example.com/gone.mp4"},
    ])
    scraped = write_json(tmp_path / "scraped.json", [
        {"src": "https://cdn.example.com/new.webm", "format": "webm"},
        {"src": "https://cdn.example.com/a.mp4", "format": "mp4", "height": 720},
    ])

    code = main(["diff-videos", existing, scraped])

    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert out["to_insert"] == [{
        "src": "https://cdn.example.com/new.webm",
        "format": "webm",
        "height": None,
        "alt": None,
        "position": 0,
    }]
    assert out["to_update"][0]["id"] == 1
    assert out["to_update"][0]["position"] == 1
    assert out["to_update"][0]["height"] == 720
    assert out["to_soft_delete"] == [{"id": 2}]


def test_log_dir_writes_json_logs(tmp_path, capsys):
    html_file = tmp_path / "page.html"
    html_file.write_text(PRODUCT_PAGE, encoding="utf-8")
    log_dir = tmp_path / "logs"

    assert main(["--log-dir", str(log_dir), "parse-page", str(html_file)]) == 0

    for handler in logging.getLogger().handlers:
        handler.flush()
    lines = (log_dir / "storewatch.log").read_text(encoding="utf-8").splitlines()
    records = [json.loads(line) for line in lines]
    assert any(r["level"] == "INFO" and "json-ld" in r["message"] for r in records)


def test_single_json_ld_strategy_skips_typed_arrays(tmp_path, capsys):
    html_file = tmp_path / "page.html"
    html_file.write_text(
        '<script type="application/ld+json">{"@type":["Organization","Brand"],"name":"Acme"}</script>'
        + PRODUCT_PAGE,
        encoding="utf-8",
    )

    code = main(["parse-page", str(html_file), "--strategy", "json-ld"])

    assert code == 0
    assert json.loads(capsys.readouterr().out)["product"]["title"] == "Lamp"


class TestSnapshots:
    """Test the snapshots command."""

    HEADER = ["urlkey", "timestamp", "original", "mimetype", "statuscode", "digest", "length"]

    def row(self, handle, timestamp, digest):
        return [
            f"com,example)/products/{handle}",
            timestamp,
            f"https://example.com/products/{handle}",
            "text/html",
            "200",
            digest,
            "1000",
        ]

    def test_lists_new_product_snapshots(self, tmp_path, capsys):
        cdx = write_json(tmp_path / "cdx.json", [
            self.HEADER,
            self.row("widget", "20230115143022", "AAA"),
            self.row("widget", "20230115180000", "AAA"),
            self.row("page-2", "20230116000000", "BBB"),
            self.row("widget", "20230201000000", "CCC"),
            self.row("gadget", "20230301000000", "DDD"),
        ])
        known = write_json(tmp_path / "known.json", ["DDD:20230301000000"])

        code = main(["snapshots", cdx, "--known", known])

        out = json.loads(capsys.readouterr().out)
        assert code == 0
        assert [s["key"] for s in out] == ["AAA:20230115143022", "CCC:20230201000000"]
        assert out[0]["handle"] == "widget"
        assert out[0]["captured_at"] == "2023-01-15T14:30:22Z"
        assert out[0]["archive_url"] == (
            "https://web.archive.org/web/20230115143022id_/https://example.com/products/widget"
        )

    def test_without_known_keys(self, tmp_path, capsys):
        cdx = write_json(tmp_path / "cdx.json", [self.HEADER, self.row("widget", "20230115143022", "AAA")])

        assert main(["snapshots", cdx]) == 0
        assert len(json.loads(capsys.readouterr().out)) == 1

    def test_missing_file(self, tmp_path):
        assert main(["snapshots", str(tmp_path / "missing.json")]) == 2
