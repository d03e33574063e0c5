from linkaudit.workflows.classifier import CheckResult, ResultKind, classify_outcome, classify_verification
from linkaudit.workflows.corrections import ResolvedUrl
from linkaudit.workflows.link_verify import Success, TerminalFailure, TransientFailure, Verification


def test_success_at_checked_url_is_ok():
    resolved = ResolvedUrl("http://a.test", "http://a.test")
    result = classify_outcome(resolved, Success("http://a.test"), 1)
    assert result == CheckResult("http://a.test", "http://a.test", ResultKind.OK, 1)


def test_success_elsewhere_is_redirect():
    resolved = ResolvedUrl("http://a.test", "http://a.test")
    result = classify_outcome(resolved, Success("https://a.test/home"), 2)
    assert result.kind is ResultKind.REDIRECT
    assert result.final_url == "https://a.test/home"
    assert result.attempts == 2
    assert result.reason is None


def test_trailing_slash_difference_counts_as_redirect():
    resolved = ResolvedUrl("http://a.test", "http://a.test")
    assert classify_outcome(resolved, Success("http://a.test/"), 1).kind is ResultKind.REDIRECT


def test_corrected_url_is_judged_against_checked_url():
    resolved = ResolvedUrl("http://old.test", "https://new.test/")
    result = classify_outcome(resolved, Success("https://new.test/"), 1)
    assert result.kind is ResultKind.OK
    assert result.original_url == "http://old.test"
    assert result.checked_url == "https://new.test/"


def test_failures_become_errors_with_reason():
    resolved = ResolvedUrl("http://x.test", "http://x.test")
    transient = classify_verification(resolved, Verification(TransientFailure("timeout"), 3))
    terminal = classify_verification(resolved, Verification(TerminalFailure("http_404"), 1))

    assert (transient.kind, transient.reason, transient.attempts) == (ResultKind.ERROR, "timeout", 3)
    assert (terminal.kind, terminal.reason, terminal.attempts) == (ResultKind.ERROR, "http_404", 1)
    assert terminal.final_url is None


def test_result_dict_form():
    result = CheckResult("http://a.test", "http://a.test", ResultKind.REDIRECT, 1, final_url="https://a.test/")
    payload = result.to_dict()
    assert payload == {
        "original_url": "http://a.test",
        "checked_url": "http://a.test",
        "kind": "REDIRECT",
        "attempts": 1,
        "final_url": "https://a.test/",
    }
    assert CheckResult.from_dict(payload) == result
