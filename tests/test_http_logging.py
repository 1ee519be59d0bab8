"""
Unit tests for the session factory and request-id logging helpers.
"""

import json
import logging
import unittest
from concurrent.futures import ThreadPoolExecutor

from http_client import SessionAwareComponent, TimeoutHTTPAdapter, create_session
from logging_config import (
    NO_REQUEST,
    StructuredFormatter,
    bind_request_id,
    get_request_id,
    request_id_var,
    submit_with_context,
)


class TestCreateSession(unittest.TestCase):

    def test_adapter_settings(self):
        """Test sessions time out by default and never retry."""
        session = create_session(timeout=4.0)
        try:
            adapter = session.get_adapter("https://api.themoviedb.org/3/search/movie")
            self.assertIsInstance(adapter, TimeoutHTTPAdapter)
            self.assertEqual(adapter.timeout, 4.0)
            self.assertEqual(adapter.max_retries.total, 0)
            self.assertEqual(session.headers["Accept"], "application/json")
        finally:
            session.close()

    def test_shared_session_left_open(self):
        class Client(SessionAwareComponent):
            pass

        shared = create_session()
        client = Client()
        client.init_session(shared)

        self.assertIs(client.session, shared)
        self.assertFalse(client._owns_session)
        shared.close()


class TestRequestId(unittest.TestCase):

    def setUp(self):
        self.token = request_id_var.set(NO_REQUEST)

    def tearDown(self):
        request_id_var.reset(self.token)

    def test_incoming_id_kept(self):
        self.assertEqual(bind_request_id("req-42"), "req-42")
        self.assertEqual(get_request_id(), "req-42")

    def test_unsafe_id_replaced(self):
        """Test header values with unsafe characters are not echoed."""
        rid = bind_request_id("bad id\nInjected: yes")
        self.assertNotIn("\n", rid)
        self.assertNotEqual(rid, "bad id\nInjected: yes")

    def test_worker_threads_see_request_id(self):
        """Test submitted tasks log under the submitting request's id."""
        bind_request_id("req-7")
        with ThreadPoolExecutor(max_workers=2) as executor:
            futures = [submit_with_context(executor, get_request_id) for _ in range(4)]
            self.assertEqual({f.result() for f in futures}, {"req-7"})

    def test_structured_formatter(self):
        bind_request_id("req-9")
        record = logging.LogRecord("movie_dna", logging.INFO, __file__, 1, "Searching for: %s", ("Up",), None)
        record.axis = "byGenre"

        entry = json.loads(StructuredFormatter().format(record))

        self.assertEqual(entry["msg"], "Searching for: Up")
        self.assertEqual(entry["request_id"], "req-9")
        self.assertEqual(entry["axis"], "byGenre")
        self.assertEqual(entry["level"], "INFO")


if __name__ == '__main__':
    unittest.main()
