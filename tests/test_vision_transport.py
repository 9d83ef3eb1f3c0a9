# -*- coding: utf-8 -*-

from __future__ import annotations

import json
import shutil
import tempfile
import unittest
from pathlib import Path

import httpx

from seefood.vision.errors import HTTPError, InvalidResponse, NetworkError
from seefood.vision.transport import FixtureTransport, HttpxTransport, TransportResponse

URL = "https://example.com/v1/models/m:generateContent?key=test_api_key"


class TestHttpxTransport(unittest.TestCase):
    def test_posts_json_once(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b'{"ok": true}')

        client = httpx.Client(transport=httpx.MockTransport(handler))
        resp = HttpxTransport(client=client).send(URL, {"contents": []})

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.content, b'{"ok": true}')
        self.assertTrue(resp.ok)
        self.assertEqual(len(seen), 1)
        self.assertEqual(seen[0].method, "POST")
        self.assertEqual(seen[0].url.params["key"], "test_api_key")
        self.assertEqual(seen[0].headers["content-type"], "application/json")
        self.assertEqual(json.loads(seen[0].content), {"contents": []})

    def test_error_status_is_returned_not_retried(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503, content=b"unavailable")

        client = httpx.Client(transport=httpx.MockTransport(handler))
        resp = HttpxTransport(client=client).send(URL, {})
        self.assertEqual(resp.status_code, 503)
        self.assertFalse(resp.ok)
        self.assertEqual(len(calls), 1)

    def test_transport_failures_become_network_error(self) -> None:
        failures = [
            httpx.ConnectError("connection refused"),
            httpx.ReadTimeout("timed out"),
            httpx.RemoteProtocolError("connection reset"),
        ]
        for failure in failures:

            def handler(request: httpx.Request, exc: Exception = failure) -> httpx.Response:
                raise exc

            client = httpx.Client(transport=httpx.MockTransport(handler))
            with self.assertRaises(NetworkError) as ctx:
                HttpxTransport(client=client).send(URL, {})
            self.assertIs(ctx.exception.cause, failure)
            self.assertTrue(ctx.exception.description.startswith("Network error: "))

    def test_key_not_logged(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200, content=b"{}")))
        with self.assertLogs("seefood.vision.transport", level="INFO") as logs:
            HttpxTransport(client=client).send(URL, {})
        joined = "\n".join(logs.output)
        self.assertNotIn("test_api_key", joined)
        self.assertIn("key=<REDACTED>", joined)

    def test_httpx_request_log_is_redacted(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200, content=b"{}")))
        with self.assertLogs(level="INFO") as logs:
            HttpxTransport(client=client).send(URL, {})
        httpx_lines = [line for line in logs.output if line.startswith("INFO:httpx:")]
        self.assertEqual(len(httpx_lines), 1)
        self.assertNotIn("test_api_key", httpx_lines[0])
        self.assertIn("key=<REDACTED>", httpx_lines[0])
        self.assertIn("200 OK", httpx_lines[0])

    def test_network_error_without_message_names_the_cause(self) -> None:
        self.assertEqual(NetworkError(httpx.ReadTimeout("")).description, "Network error: ReadTimeout")
        self.assertEqual(NetworkError(OSError("reset")).description, "Network error: reset")


class TestFixtureTransport(unittest.TestCase):
    def test_returns_configured_response_and_records_request(self) -> None:
        fixture = FixtureTransport(200, '{"candidates": []}')
        resp = fixture.send(URL, {"a": 1})
        self.assertEqual(resp, TransportResponse(status_code=200, content=b'{"candidates": []}'))
        self.assertEqual(fixture.requests, [(URL, {"a": 1})])

    def test_foreign_error_is_wrapped(self) -> None:
        cause = TimeoutError("cancelled")
        with self.assertRaises(NetworkError) as ctx:
            FixtureTransport(error=cause).send(URL, {})
        self.assertIs(ctx.exception.cause, cause)

    def test_analysis_error_passes_through(self) -> None:
        with self.assertRaises(HTTPError):
            FixtureTransport(error=HTTPError(500)).send(URL, {})

    def test_unconfigured_fixture_is_invalid_response(self) -> None:
        with self.assertRaises(InvalidResponse):
            FixtureTransport().send(URL, {})

    def test_from_file(self) -> None:
        tmp = Path(tempfile.mkdtemp(prefix="seefood-fixture-"))
        try:
            fp = tmp / "mock_response.json"
            fp.write_text('{"candidates": []}', encoding="utf-8")
            resp = FixtureTransport.from_file(fp).send(URL, {})
            self.assertEqual(resp.status_code, 200)
            self.assertEqual(resp.content, b'{"candidates": []}')
        finally:
            shutil.rmtree(tmp, ignore_errors=True)


if __name__ == "__main__":
    unittest.main()
