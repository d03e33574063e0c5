import asyncio
from typing import Dict, List

import pytest

from linkaudit.workflows.checker import NoUrlsError, check_links, run_check
from linkaudit.workflows.checker_config import CheckConfig
from linkaudit.workflows.classifier import ResultKind
from linkaudit.workflows.corrections import CorrectionMap
from linkaudit.workflows.extract_utils import dedupe_urls
from linkaudit.workflows.link_verify import HttpStatusError, LinkVerifier


async def _no_sleep(delay: float) -> None:
    return None


def _fake_verifier(config: CheckConfig, behaviour: Dict[str, object], probed: List[str]) -> LinkVerifier:
    async def probe(url: str) -> str:
        probed.append(url)
        outcome = behaviour[url]
        if isinstance(outcome, BaseException):
            raise outcome
        return str(outcome)

    return LinkVerifier(config, probe=probe, sleep=_no_sleep)


def test_timeout_and_ok_scenario():
    config = CheckConfig(max_retries=2, batch_size=10)
    probed: List[str] = []
    verifier = _fake_verifier(
        config,
        {"http://x.test": asyncio.TimeoutError(), "http://y.test": "http://y.test"},
        probed,
    )
    urls = dedupe_urls(["http://x.test", "http://y.test", "http://x.test"])

    report = asyncio.run(check_links(urls, config, verifier=verifier, sleep=_no_sleep))
    payload = report.to_dict()

    assert payload["ok"] == ["http://y.test"]
    assert payload["redirected"] == []
    assert payload["error"] == [{"url": "http://x.test", "reason": "timeout"}]
    assert payload["counts"] == {"ok": 1, "redirected": 0, "error": 1}
    assert probed.count("http://x.test") == 3
    x_result = next(result for result in report.results if result.original_url == "http://x.test")
    assert x_result.attempts == 3


def test_corrections_are_transparent_in_report():
    corrections = CorrectionMap({"http://old.test": "https://new.test/"})
    config = CheckConfig(corrections=corrections, batch_delay_ms=0)
    probed: List[str] = []
    verifier = _fake_verifier(
        config,
        {"https://new.test/": "https://new.test/", "http://other.test": "https://other.test/landing"},
        probed,
    )

    report = asyncio.run(check_links(["http://old.test", "http://other.test"], config, verifier=verifier))

    assert probed == ["https://new.test/", "http://other.test"]
    assert report.ok == ("http://old.test",)
    assert [(entry.original, entry.final) for entry in report.redirected] == [
        ("http://other.test", "https://other.test/landing")
    ]
    assert report.results[0].checked_url == "https://new.test/"


def test_every_url_gets_exactly_one_result():
    config = CheckConfig(batch_size=3, batch_delay_ms=0, max_retries=1)
    behaviour: Dict[str, object] = {}
    urls = []
    for index in range(8):
        url = f"http://site{index}.test"
        urls.append(url)
        behaviour[url] = HttpStatusError(500) if index % 3 == 0 else url
    verifier = _fake_verifier(config, behaviour, [])

    report = run_check(urls, config, verifier=verifier)

    assert [result.original_url for result in report.results] == urls
    assert sum(report.counts.values()) == len(urls)
    assert all(result.kind is ResultKind.ERROR for result in report.results[::3])


def test_progress_hook_and_batches():
    config = CheckConfig(batch_size=2, batch_delay_ms=0)
    seen = []
    urls = [f"http://p{i}.test" for i in range(3)]
    verifier = _fake_verifier(config, {url: url for url in urls}, [])

    run_check(urls, config, verifier=verifier, progress_hook=lambda n, total, results: seen.append((n, total)))

    assert seen == [(1, 2), (2, 2)]


def test_empty_input_is_rejected():
    with pytest.raises(NoUrlsError):
        run_check([], CheckConfig())
