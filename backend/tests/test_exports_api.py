def test_list_formats(client) -> None:
    response = client.get("/api/exports/formats")
    assert response.status_code == 200
    formats = {item["format"]: item for item in response.json()}
    assert set(formats) == {"markdown", "html", "pdf", "word", "image"}
    assert formats["word"]["extension"] == "docx"


def test_export_markdown_download(client) -> None:
    body = "# Title\n\nHello **world**."
    response = client.post("/api/exports/", json={"format": "markdown", "content": body, "title": "T"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/markdown")
    assert (
        response.headers["content-disposition"]
        == 'attachment; filename="research-report-2025-03-07_09-05-03.md"'
    )
    assert response.content.decode("utf-8") == body


def test_export_html_is_sanitized(client) -> None:
    response = client.post(
        "/api/exports/",
        json={"format": "html", "content": "# Title\n\nHello **world**.\n\n<script>x()</script>"},
    )
    assert response.status_code == 200
    page = response.text
    assert "<h1>Title</h1>" in page
    assert "<strong>world</strong>" in page
    assert "<script>" not in page


def test_export_pdf(client) -> None:
    response = client.post("/api/exports/", json={"format": "pdf", "content": "Some text"})
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


def test_empty_content_is_no_content(client) -> None:
    response = client.post("/api/exports/", json={"format": "pdf", "content": ""})
    assert response.status_code == 204
    assert response.content == b""


def test_unknown_format_is_validation_error(client) -> None:
    response = client.post("/api/exports/", json={"format": "odt", "content": "x"})
    assert response.status_code == 422


def test_fatal_failure_returns_generic_error(client, monkeypatch) -> None:
    def broken_save(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr("docx.document.Document.save", broken_save)
    response = client.post("/api/exports/", json={"format": "word", "content": "x"})
    assert response.status_code == 500
    assert response.json() == {"detail": "Export failed"}
