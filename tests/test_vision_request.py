# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

from seefood.vision.errors import InvalidResponse
from seefood.vision.request import PROMPT, build_request, build_url, redact_url

BASE_URL = "https://generativelanguage.googleapis.com/v1/models/gemini-1.5-flash:generateContent"


class TestBuildRequest(unittest.TestCase):
    def test_body_shape_and_generation_config(self) -> None:
        req = build_request("test_api_key", "QUJD", base_url=BASE_URL)
        parts = req.body["contents"][0]["parts"]
        self.assertEqual(len(parts), 2)
        self.assertEqual(parts[0]["text"], PROMPT)
        self.assertEqual(parts[1], {"inline_data": {"mime_type": "image/jpeg", "data": "QUJD"}})
        self.assertEqual(
            req.body["generation_config"],
            {"temperature": 0.1, "top_p": 1.0, "top_k": 32, "max_output_tokens": 2048},
        )

    def test_prompt_asks_for_bare_json_array(self) -> None:
        for field in ("name", "calories", "protein", "carbs", "fats"):
            self.assertIn(f'"{field}"', PROMPT)
        self.assertIn("only the JSON array", PROMPT)

    def test_key_travels_in_query_not_body(self) -> None:
        req = build_request("test_api_key", "QUJD", base_url=BASE_URL)
        self.assertTrue(req.url.startswith(BASE_URL + "?"))
        self.assertIn("key=test_api_key", req.url)
        self.assertNotIn("test_api_key", str(req.body))

    def test_existing_query_parameters_are_kept(self) -> None:
        url = build_url("https://example.com/generate?alt=json", "abc")
        self.assertIn("alt=json", url)
        self.assertIn("key=abc", url)

    def test_invalid_base_url_raises_invalid_response(self) -> None:
        for base in ("not a url", "ftp://example.com/x", "https://", ""):
            with self.assertRaises(InvalidResponse):
                build_url(base, "abc")

    def test_missing_key_raises_invalid_response(self) -> None:
        for key in ("", "   "):
            with self.assertRaises(InvalidResponse):
                build_url(BASE_URL, key)


class TestRedactUrl(unittest.TestCase):
    def test_key_value_is_hidden(self) -> None:
        req = build_request("secret-123", "QUJD", base_url=BASE_URL)
        redacted = req.redacted_url
        self.assertNotIn("secret-123", redacted)
        self.assertEqual(redacted, f"{BASE_URL}?key=<REDACTED>")

    def test_other_parameters_survive(self) -> None:
        self.assertEqual(
            redact_url("https://x.test/a?alt=json&key=s3cr3t&b=1"),
            "https://x.test/a?alt=json&key=<REDACTED>&b=1",
        )

    def test_text_after_url_survives(self) -> None:
        self.assertEqual(
            redact_url('POST https://x.test/a?key=s3cr3t "HTTP/1.1 200 OK"'),
            'POST https://x.test/a?key=<REDACTED> "HTTP/1.1 200 OK"',
        )

    def test_url_without_key_is_unchanged(self) -> None:
        self.assertEqual(redact_url("https://x.test/a?monkey=1"), "https://x.test/a?monkey=1")


if __name__ == "__main__":
    unittest.main()
