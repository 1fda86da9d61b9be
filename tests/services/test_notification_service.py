from requests.exceptions import ConnectionError as RequestsConnectionError

from injector.core.config import Settings
from injector.models.suggestion import ErrorKind, InjectionOutcome
from injector.services.notification_service import (
    build_summary_payload,
    notify_injection_summary,
)


def _outcome():
    outcome = InjectionOutcome()
    outcome.record_failure({"filePath": "a.py"}, ErrorKind.LINE_NOT_IN_DIFF, "nope")
    return outcome


class TestSummaryPayload:
    def test_payload(self):
        payload = build_summary_payload(_outcome())

        assert payload == {
            "event": "suggestions_injected",
            "message": "0 of 1 suggestions placed",
            "success": 0,
            "failed": 1,
            "errors": ["LineNotInDiff"],
            "fatal_error": None,
        }


class TestNotify:
    def test_disabled_without_url(self, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("should not post")

        monkeypatch.setattr("injector.services.notification_service.requests.post", fail)

        assert notify_injection_summary(_outcome(), Settings(WEBHOOK_URL="")) is False

    def test_request_errors_are_contained(self, monkeypatch):
        def refuse(*args, **kwargs):
            raise RequestsConnectionError("connection refused")

        monkeypatch.setattr("injector.services.notification_service.requests.post", refuse)

        settings = Settings(WEBHOOK_URL="http://hooks.example.test/injected")
        assert notify_injection_summary(_outcome(), settings) is False
