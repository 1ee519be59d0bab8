"""
Unit tests for configuration, credential loading and metrics.
"""

import json
import os
import tempfile
import unittest

from config import AppConfig
from constants import DEFAULT_ANALYSIS_MODEL, DEFAULT_MAX_WORKERS
from credentials import Credentials, load_credentials
from metrics import Metrics


class TestLoadCredentials(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, "credentials.json")

    def tearDown(self):
        self.tmpdir.cleanup()

    def write_file(self, data):
        with open(self.path, "w") as f:
            f.write(data if isinstance(data, str) else json.dumps(data))

    def test_environment(self):
        creds = load_credentials({"TMDB_API_KEY": "t1", "GROQ_API_KEY": "g1"}, credentials_file=self.path)

        self.assertEqual(creds.tmdb_api_key, "t1")
        self.assertEqual(creds.groq_api_key, "g1")
        self.assertEqual(creds.source, "environment")
        self.assertTrue(creds.complete)

    def test_file_fallback(self):
        """Test keys missing from the environment are read from the file."""
        self.write_file({"tmdb_api_key": "t2", "groq_api_key": "g2"})

        creds = load_credentials({"TMDB_API_KEY": "t1"}, credentials_file=self.path)

        self.assertEqual(creds.tmdb_api_key, "t1")
        self.assertEqual(creds.groq_api_key, "g2")
        self.assertEqual(creds.source, "environment+file")

    def test_file_path_from_environment(self):
        self.write_file({"tmdb_api_key": "t2", "groq_api_key": "g2"})

        creds = load_credentials({"CREDENTIALS_FILE": self.path})

        self.assertEqual(creds.source, "file")
        self.assertTrue(creds.complete)

    def test_missing_keys(self):
        creds = load_credentials({"TMDB_API_KEY": ""}, credentials_file=self.path)

        self.assertEqual(creds.missing, ["tmdb", "groq"])
        self.assertFalse(creds.complete)

    def test_malformed_file_ignored(self):
        self.write_file("not json")

        creds = load_credentials({}, credentials_file=self.path)

        self.assertEqual(creds.missing, ["tmdb", "groq"])

    def test_repr_hides_keys(self):
        creds = Credentials("supersecret", "othersecret")

        self.assertNotIn("supersecret", repr(creds))
        self.assertEqual(creds.describe()["tmdb"], {"status": "ok", "key_prefix": "supe"})


class TestAppConfig(unittest.TestCase):

    def test_defaults(self):
        config = AppConfig.from_env({"CREDENTIALS_FILE": "/nonexistent/credentials.json"})

        self.assertEqual(config.port, 3001)
        self.assertEqual(config.log_level, "INFO")
        self.assertFalse(config.structured_logging)
        self.assertEqual(config.analysis_model, DEFAULT_ANALYSIS_MODEL)
        self.assertEqual(config.max_workers, DEFAULT_MAX_WORKERS)
        self.assertEqual(config.analysis_fallback, "")

    def test_overrides(self):
        config = AppConfig.from_env({
            "CREDENTIALS_FILE": "/nonexistent/credentials.json",
            "PORT": "8080",
            "LOG_LEVEL": "debug",
            "STRUCTURED_LOGGING": "true",
            "TMDB_TIMEOUT": "2.5",
            "INSIGHT_MODEL": "tiny",
            "DNA_MAX_WORKERS": "0",
        })

        self.assertEqual(config.port, 8080)
        self.assertEqual(config.log_level, "DEBUG")
        self.assertTrue(config.structured_logging)
        self.assertEqual(config.tmdb_timeout, 2.5)
        self.assertEqual(config.insight_model, "tiny")
        self.assertEqual(config.max_workers, 1)

    def test_invalid_number_uses_default(self):
        config = AppConfig.from_env({"CREDENTIALS_FILE": "/nonexistent/credentials.json", "PORT": "abc"})
        self.assertEqual(config.port, 3001)


class TestMetrics(unittest.TestCase):

    def test_counters_with_labels(self):
        m = Metrics()
        m.inc("dna_requests", labels={"outcome": "ok"})
        m.inc("dna_requests", labels={"outcome": "ok"})
        m.inc("dna_requests", labels={"outcome": "invalid"})

        self.assertEqual(m.get_counter("dna_requests", labels={"outcome": "ok"}), 2)
        self.assertEqual(m.get_stats()["counters"]["dna_requests{outcome=invalid}"], 1)

    def test_timer_records_histogram(self):
        m = Metrics()
        with m.timer("pipeline_duration_ms"):
            pass

        stats = m.get_stats()["histograms"]["pipeline_duration_ms"]
        self.assertEqual(stats["count"], 1)

    def test_reset(self):
        m = Metrics()
        m.inc("dna_reports")
        m.reset()
        self.assertEqual(m.get_stats(), {"counters": {}, "histograms": {}})


if __name__ == '__main__':
    unittest.main()
