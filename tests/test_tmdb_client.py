"""
Unit tests for the TMDB client with the HTTP session mocked out.
"""

import unittest
from unittest.mock import MagicMock

import requests

from errors import NotFoundError, ProviderError
from tmdb_client import TMDBClient, exclude_and_cap
from tests.fakes import make_response, movie


class TestTMDBClient(unittest.TestCase):

    def setUp(self):
        self.session = MagicMock()
        self.client = TMDBClient("secret-key", session=self.session)

    def last_call(self):
        args, kwargs = self.session.get.call_args
        return args[0], kwargs["params"]

    def test_search_returns_first_result(self):
        """Test the highest-ranked search result is returned."""
        self.session.get.return_value = make_response(payload={
            "results": [movie(27205, "Inception"), movie(1, "Inception: The Cobol Job")],
        })

        result = self.client.search_movie("Inception")

        self.assertEqual(result["id"], 27205)
        url, params = self.last_call()
        self.assertTrue(url.endswith("/search/movie"))
        self.assertEqual(params["query"], "Inception")
        self.assertEqual(params["api_key"], "secret-key")

    def test_search_top_result_without_id(self):
        """Test a malformed top search result is a provider failure, not a crash."""
        for bad in (None, {"title": "Inception"}):
            self.session.get.return_value = make_response(payload={"results": [bad]})
            with self.assertRaises(ProviderError) as ctx:
                self.client.search_movie("Inception")
            self.assertFalse(ctx.exception.is_fatal)

    def test_search_no_results(self):
        """Test an empty result list raises NotFoundError naming the title."""
        self.session.get.return_value = make_response(payload={"results": []})

        with self.assertRaises(NotFoundError) as ctx:
            self.client.search_movie("zzzqqqnomovie123")

        self.assertIn("zzzqqqnomovie123", str(ctx.exception))
        self.assertEqual(ctx.exception.title, "zzzqqqnomovie123")

    def test_search_no_results_uses_provider_message(self):
        self.session.get.return_value = make_response(payload={
            "results": [], "status_message": "Nothing matched.",
        })

        with self.assertRaises(NotFoundError) as ctx:
            self.client.search_movie("zzz")
        self.assertEqual(str(ctx.exception), "Nothing matched.")

    def test_non_success_status(self):
        """Test a non-success status raises ProviderError with status and body."""
        body = '{"status_code":7,"status_message":"Invalid API key"}'
        self.session.get.return_value = make_response(401, text=body)

        with self.assertRaises(ProviderError) as ctx:
            self.client.get_movie_details(27205)

        error = ctx.exception
        self.assertEqual(error.provider, "tmdb")
        self.assertEqual(error.status, 401)
        self.assertEqual(error.body, body)
        self.assertTrue(error.is_fatal)
        self.assertNotIn("secret-key", str(error))

    def test_server_error_not_fatal(self):
        self.session.get.return_value = make_response(503, text="unavailable")

        with self.assertRaises(ProviderError) as ctx:
            self.client.get_similar_movies(27205)
        self.assertFalse(ctx.exception.is_fatal)

    def test_timeout_becomes_provider_error(self):
        """Test a request timeout is reported as a provider failure."""
        self.session.get.side_effect = requests.Timeout("read timed out")

        with self.assertRaises(ProviderError) as ctx:
            self.client.search_movie("Inception")
        self.assertIsNone(ctx.exception.status)
        self.assertFalse(ctx.exception.is_fatal)

    def test_malformed_json(self):
        response = make_response(200, text="<html>")
        response.json.side_effect = ValueError("no json")
        self.session.get.return_value = response

        with self.assertRaises(ProviderError):
            self.client.get_movie_details(27205)

    def test_details_request_credits(self):
        """Test details embed credits in the same call."""
        self.session.get.return_value = make_response(payload={"id": 27205})

        self.client.get_movie_details(27205)

        url, params = self.last_call()
        self.assertTrue(url.endswith("/movie/27205"))
        self.assertEqual(params["append_to_response"], "credits")

    def test_discover_by_actor_uses_cast(self):
        """Test actor discovery filters on cast, excludes the original, caps at limit."""
        self.session.get.return_value = make_response(payload={"results": [
            movie(27205, "Inception"),
            movie(1, "The Revenant"),
            movie(2, "Shutter Island"),
            movie(3, "Titanic"),
        ]})

        results = self.client.discover_by_person(6193, as_cast=True, exclude_movie_id=27205, limit=2)

        self.assertEqual([m["id"] for m in results], [1, 2])
        url, params = self.last_call()
        self.assertTrue(url.endswith("/discover/movie"))
        self.assertEqual(params["with_cast"], 6193)
        self.assertNotIn("with_crew", params)
        self.assertEqual(params["sort_by"], "popularity.desc")

    def test_discover_by_director_uses_crew(self):
        self.session.get.return_value = make_response(payload={"results": []})

        self.assertEqual(self.client.discover_by_person(525, False, 27205), [])

        _, params = self.last_call()
        self.assertEqual(params["with_crew"], 525)
        self.assertNotIn("with_cast", params)

    def test_discover_by_genre_params(self):
        """Test genre discovery sorts by rating and requires 1000 votes."""
        self.session.get.return_value = make_response(payload={"results": [
            movie(10, "The Dark Knight"), movie(27205, "Inception"),
            movie(11, "Interstellar"), movie(12, "The Matrix"), movie(13, "Alien"),
        ]})

        results = self.client.discover_by_genre([28, 878], exclude_movie_id=27205, limit=3)

        self.assertEqual([m["id"] for m in results], [10, 11, 12])
        _, params = self.last_call()
        self.assertEqual(params["with_genres"], "28,878")
        self.assertEqual(params["sort_by"], "vote_average.desc")
        self.assertEqual(params["vote_count.gte"], 1000)

    def test_discover_by_genre_without_genres(self):
        """Test no request is made when the movie has no genres."""
        self.assertEqual(self.client.discover_by_genre([], 27205), [])
        self.session.get.assert_not_called()

    def test_similar_excludes_self_and_caps(self):
        self.session.get.return_value = make_response(payload={"results": [
            movie(27205, "Inception"), movie(1, "A"), movie(2, "B"), movie(3, "C"), movie(4, "D"),
        ]})

        results = self.client.get_similar_movies(27205, limit=3)

        self.assertEqual([m["id"] for m in results], [1, 2, 3])
        url, _ = self.last_call()
        self.assertTrue(url.endswith("/movie/27205/similar"))

    def test_owned_session_not_closed_when_shared(self):
        """Test a shared session is left open for its owner."""
        self.client.close()
        self.session.close.assert_not_called()


class TestExcludeAndCap(unittest.TestCase):

    def test_keeps_order(self):
        movies = [movie(3, "C"), movie(1, "A"), movie(2, "B")]
        self.assertEqual([m["id"] for m in exclude_and_cap(movies, 1, 5)], [3, 2])

    def test_drops_entries_without_id(self):
        self.assertEqual(exclude_and_cap([{"title": "No id"}], None, 3), [])

    def test_skips_non_object_entries(self):
        """Test null or scalar entries in a result list are ignored."""
        movies = [None, "junk", 42, movie(5, "E"), movie(6, "F")]
        self.assertEqual([m["id"] for m in exclude_and_cap(movies, None, 3)], [5, 6])


if __name__ == '__main__':
    unittest.main()
