from pathlib import Path

import pytest

from linkaudit.workflows.aggregator import ResultAggregator
from linkaudit.workflows.classifier import CheckResult, ResultKind
from linkaudit.workflows.extract_utils import extract_urls
from linkaudit.workflows.rewrite_utils import (
    default_fixed_path,
    replacement_pairs,
    rewrite_document,
    rewrite_text,
    write_dead_links,
)


def _report():
    aggregator = ResultAggregator()
    aggregator.add_batch(
        [
            CheckResult("http://a.test", "http://a.test", ResultKind.REDIRECT, 1, final_url="https://a.test/"),
            CheckResult("http://a.test/docs", "http://a.test/docs", ResultKind.REDIRECT, 1, final_url="https://docs.a.test/"),
            CheckResult("http://old.test", "https://new.test/", ResultKind.OK, 1),
            CheckResult("http://dead.test", "http://dead.test", ResultKind.ERROR, 1, reason="dns_error"),
        ]
    )
    return aggregator.finalize()


def test_replacement_pairs_longest_first():
    pairs = replacement_pairs(_report())
    assert pairs[0] == ("http://a.test/docs", "https://docs.a.test/")
    assert ("http://old.test", "https://new.test/") in pairs
    assert all(original != "http://dead.test" for original, _ in pairs)


def test_rewrite_text_counts_and_does_not_double_replace():
    text = "http://a.test/docs then http://a.test and http://a.test, old: http://old.test"
    outcome = rewrite_text(text, _report())

    assert outcome.text == "https://docs.a.test/ then https://a.test/ and https://a.test/, old: https://new.test/"
    assert outcome.replacements == {"http://a.test/docs": 1, "http://a.test": 2, "http://old.test": 1}
    assert outcome.total == 4


def test_rewrite_document_and_dead_links(tmp_path: Path):
    source = tmp_path / "links.txt"
    source.write_text("visit http://a.test\n", encoding="utf-8")
    target = default_fixed_path(source)

    outcome = rewrite_document(source, _report(), target)
    dead = write_dead_links(_report(), tmp_path / "dead_links.txt")

    assert target.name == "links_fixed.txt"
    assert target.read_text(encoding="utf-8") == "visit https://a.test/\n"
    assert outcome.total == 1
    assert dead.read_text(encoding="utf-8") == "http://dead.test\n"


def test_rewrite_document_missing_source(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        rewrite_document(tmp_path / "missing.txt", _report(), tmp_path / "out.txt")


def _query_report():
    aggregator = ResultAggregator()
    aggregator.add(
        CheckResult(
            "http://a.test/?x=1&y=2",
            "http://a.test/?x=1&y=2",
            ResultKind.REDIRECT,
            1,
            final_url="https://a.test/?x=1&y=2&z=3",
        )
    )
    return aggregator.finalize()


def test_rewrite_html_matches_entity_encoded_hrefs():
    page = '<a href="http://a.test/?x=1&amp;y=2">a</a>'
    assert extract_urls(page, html=True) == ["http://a.test/?x=1&y=2"]

    outcome = rewrite_text(page, _query_report(), html=True)

    assert outcome.text == '<a href="https://a.test/?x=1&amp;y=2&amp;z=3">a</a>'
    assert outcome.replacements == {"http://a.test/?x=1&y=2": 1}


def test_rewrite_plain_text_leaves_encoded_form_alone():
    text = "raw http://a.test/?x=1&y=2 and http://a.test/?x=1&amp;y=2"
    outcome = rewrite_text(text, _query_report())
    assert outcome.text == "raw https://a.test/?x=1&y=2&z=3 and http://a.test/?x=1&amp;y=2"
    assert outcome.total == 1


def test_rewrite_document_detects_html(tmp_path: Path):
    source = tmp_path / "page.html"
    source.write_text('<p><a href="http://a.test/?x=1&amp;y=2">a</a></p>\n', encoding="utf-8")

    outcome = rewrite_document(source, _query_report(), default_fixed_path(source))

    assert outcome.total == 1
    assert "https://a.test/?x=1&amp;y=2&amp;z=3" in (tmp_path / "page_fixed.html").read_text(encoding="utf-8")
