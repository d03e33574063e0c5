from pathlib import Path

from linkaudit.workflows.aggregator import ErrorEntry
from linkaudit.workflows.review_page import guess_site_name, render_review_page, search_url, write_review_page


def test_guess_site_name_strips_host_noise():
    assert guess_site_name("http://www.acme-college.ac.in/about") == "acme college"
    assert guess_site_name("https://example.org") == "example"


def test_search_url_quotes_site_name():
    assert search_url("http://www.acme-college.ac.in") == "https://www.google.com/search?q=acme+college"


def test_render_review_page_escapes_urls(tmp_path: Path):
    errors = [
        ErrorEntry("http://dead.test/?a=1&b=<x>", "http_404"),
        ErrorEntry("http://slow.test", "timeout"),
    ]
    html = render_review_page(errors)

    assert "<title>Link Error Review (2 Errors)</title>" in html
    assert "http://dead.test/?a=1&amp;b=&lt;x&gt;" in html
    assert "<x>" not in html
    assert html.count("<tr><td") == 2

    path = write_review_page(errors, tmp_path / "out" / "review_errors.html")
    assert path.read_text(encoding="utf-8") == html
