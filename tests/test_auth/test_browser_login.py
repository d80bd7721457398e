"""Tests for the end-to-end browser login flow."""

from __future__ import annotations

import threading
import webbrowser
from http.client import HTTPConnection
from urllib.parse import parse_qs, urlparse

import pytest

from errors_ai.auth.flow import AuthorizationPrompt, BrowserLoginFlow, authenticate_with_browser
from errors_ai.auth.outcome import (
    CodeMismatch,
    ListenerBindFailure,
    OutcomeKind,
    Success,
    Timeout,
)
from errors_ai.exceptions import InvalidConfigurationError, LoginError

CODE = "BRAVO-5150"


def _simulate_callback(port: int, path: str) -> None:
    """Send a request to the local callback server."""
    conn = HTTPConnection("127.0.0.1", port, timeout=5)
    conn.request("GET", path)
    conn.getresponse().read()
    conn.close()


class _FakeBrowser:
    """Records opened URLs and optionally answers with a callback."""

    def __init__(self, port: int, callback_path: str | None = None, result: bool = True) -> None:
        self.port = port
        self.callback_path = callback_path
        self.result = result
        self.opened: list[str] = []
        self._threads: list[threading.Thread] = []

    def __call__(self, url: str) -> bool:
        self.opened.append(url)
        if self.callback_path is not None:
            t = threading.Thread(target=_simulate_callback, args=(self.port, self.callback_path))
            t.start()
            self._threads.append(t)
        return self.result

    def join(self) -> None:
        for t in self._threads:
            t.join(5)


class TestBrowserLoginFlow:
    def test_prepare(self) -> None:
        flow = BrowserLoginFlow(base_url="https://errors.ai", port=9999, code_generator=lambda: CODE)
        request = flow.prepare()
        assert request.verification_code == CODE
        assert request.port == 9999
        assert request.authorization_url == f"https://errors.ai/cli/auth?code={CODE}"

    def test_successful_login(self, free_port: int) -> None:
        browser = _FakeBrowser(free_port, f"/callback?code={CODE}&key=sk_live_abc&email=a%40b.c")
        prompts: list[AuthorizationPrompt] = []
        flow = BrowserLoginFlow(
            base_url="http://localhost:3000",
            port=free_port,
            timeout_ms=5000,
            code_generator=lambda: CODE,
            browser_opener=browser,
            on_prompt=prompts.append,
        )

        outcome = flow.run()
        browser.join()

        assert outcome == Success(api_key="sk_live_abc", email="a@b.c")
        assert browser.opened == [f"http://localhost:3000/cli/auth?code={CODE}"]
        assert len(prompts) == 1
        assert prompts[0].browser_opened is True
        assert prompts[0].request.verification_code == CODE

    def test_url_carries_the_same_code(self, free_port: int) -> None:
        browser = _FakeBrowser(free_port)
        flow = BrowserLoginFlow(port=free_port, timeout_ms=50, browser_opener=browser)
        flow.run()

        (url,) = browser.opened
        code = parse_qs(urlparse(url).query)["code"][0]
        assert urlparse(url).path == "/cli/auth"
        assert code.split("-")[0] in ("ALPHA", "BRAVO", "CHARLIE", "DELTA", "ECHO", "FOXTROT", "GOLF", "HOTEL")

    def test_code_mismatch(self, free_port: int) -> None:
        browser = _FakeBrowser(free_port, "/callback?code=HOTEL-1000&key=k&email=e")
        flow = BrowserLoginFlow(
            port=free_port, timeout_ms=5000, code_generator=lambda: CODE, browser_opener=browser
        )
        outcome = flow.run()
        browser.join()
        assert outcome == CodeMismatch()

    def test_timeout(self, free_port: int) -> None:
        flow = BrowserLoginFlow(
            port=free_port, timeout_ms=100, no_browser=True, code_generator=lambda: CODE
        )
        assert flow.run() == Timeout()

    def test_no_browser_skips_opener(self, free_port: int) -> None:
        browser = _FakeBrowser(free_port)
        prompts: list[AuthorizationPrompt] = []
        flow = BrowserLoginFlow(
            port=free_port,
            timeout_ms=50,
            no_browser=True,
            browser_opener=browser,
            on_prompt=prompts.append,
        )
        flow.run()
        assert browser.opened == []
        assert prompts[0].browser_opened is False
        assert prompts[0].request.no_browser is True

    def test_browser_failure_is_not_fatal(self, free_port: int) -> None:
        def broken(url: str) -> bool:
            raise webbrowser.Error("no browser")

        prompts: list[AuthorizationPrompt] = []
        flow = BrowserLoginFlow(
            port=free_port, timeout_ms=50, browser_opener=broken, on_prompt=prompts.append
        )
        assert flow.run() == Timeout()
        assert prompts[0].browser_opened is False

    def test_browser_returning_false(self, free_port: int) -> None:
        browser = _FakeBrowser(free_port, result=False)
        prompts: list[AuthorizationPrompt] = []
        flow = BrowserLoginFlow(
            port=free_port, timeout_ms=50, browser_opener=browser, on_prompt=prompts.append
        )
        flow.run()
        assert prompts[0].browser_opened is False

    def test_bind_failure_shows_nothing(self, occupied_port: int) -> None:
        browser = _FakeBrowser(occupied_port)
        prompts: list[AuthorizationPrompt] = []
        flow = BrowserLoginFlow(
            port=occupied_port, timeout_ms=5000, browser_opener=browser, on_prompt=prompts.append
        )
        outcome = flow.run()
        assert isinstance(outcome, ListenerBindFailure)
        assert outcome.kind is OutcomeKind.LISTENER_BIND_FAILURE
        assert browser.opened == []
        assert prompts == []

    def test_invalid_base_url_raises_before_binding(self, occupied_port: int) -> None:
        flow = BrowserLoginFlow(base_url="errors.ai", port=occupied_port)
        with pytest.raises(InvalidConfigurationError):
            flow.run()

    def test_fresh_code_per_attempt(self, free_port: int) -> None:
        codes = iter(["ALPHA-1111", "ECHO-2222"])
        prompts: list[AuthorizationPrompt] = []
        flow = BrowserLoginFlow(
            port=free_port,
            timeout_ms=50,
            no_browser=True,
            code_generator=lambda: next(codes),
            on_prompt=prompts.append,
        )
        flow.run()
        flow.run()
        assert [p.request.verification_code for p in prompts] == ["ALPHA-1111", "ECHO-2222"]


class TestAuthenticateWithBrowser:
    def test_timeout_raises_login_error(self, free_port: int) -> None:
        with pytest.raises(LoginError) as exc_info:
            authenticate_with_browser(port=free_port, timeout_ms=50, no_browser=True)
        assert exc_info.value.outcome == Timeout()
        assert exc_info.value.exit_code == 124

    def test_bind_failure_raises_login_error(self, occupied_port: int) -> None:
        with pytest.raises(LoginError, match="Local callback server failed") as exc_info:
            authenticate_with_browser(port=occupied_port, timeout_ms=5000, no_browser=True)
        assert exc_info.value.exit_code == 3

    def test_success(self, free_port: int) -> None:
        def answer(prompt: AuthorizationPrompt) -> None:
            code = prompt.request.verification_code
            threading.Thread(
                target=_simulate_callback,
                args=(free_port, f"/callback?code={code}&key=sk_live_z&email=z%40z.io"),
            ).start()

        result = authenticate_with_browser(
            port=free_port, timeout_ms=5000, no_browser=True, on_prompt=answer
        )
        assert result == Success(api_key="sk_live_z", email="z@z.io")
