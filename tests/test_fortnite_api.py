import tempfile
import unittest
from unittest import mock

import requests
import responses

from roster_tracker.fortnite_api import BASE, FortniteAPIError, FortniteClient

LEADERBOARD_URL = BASE + '/events/leaderboard'


class TestFortniteClient(unittest.TestCase):
    def setUp(self):
        self.client = FortniteClient('secret')

    @responses.activate
    def test_leaderboard_entries_shape(self):
        responses.add(responses.GET, LEADERBOARD_URL, json={'entries': [{'rank': 1}, 'junk', {'rank': 2}]}, status=200)
        page = self.client.get_leaderboard_page('evt', 'win', 3)
        self.assertEqual(page, [{'rank': 1}, {'rank': 2}])
        req = responses.calls[0].request
        self.assertEqual(req.headers['x-api-key'], 'secret')
        self.assertIn('eventId=evt', req.url)
        self.assertIn('eventWindowId=win', req.url)
        self.assertIn('page=3', req.url)

    @responses.activate
    def test_leaderboard_list_shape(self):
        responses.add(responses.GET, LEADERBOARD_URL, json=[{'rank': 5}], status=200)
        self.assertEqual(self.client.get_leaderboard_page('evt', 'win', 0), [{'rank': 5}])

    @responses.activate
    def test_leaderboard_failures_are_empty_pages(self):
        responses.add(responses.GET, LEADERBOARD_URL, json={'error': 'boom'}, status=500)
        self.assertEqual(self.client.get_leaderboard_page('evt', 'win', 0), [])
        responses.replace(responses.GET, LEADERBOARD_URL, body='not json', status=200)
        self.assertEqual(self.client.get_leaderboard_page('evt', 'win', 0), [])
        responses.replace(responses.GET, LEADERBOARD_URL, body=requests.ConnectionError('down'))
        self.assertEqual(self.client.get_leaderboard_page('evt', 'win', 0), [])
        responses.replace(responses.GET, LEADERBOARD_URL, json={'entries': 'nope'}, status=200)
        self.assertEqual(self.client.get_leaderboard_page('evt', 'win', 0), [])

    @responses.activate
    def test_get_raises_on_error_status(self):
        responses.add(responses.GET, BASE + '/events/data/past', json={}, status=403)
        with self.assertRaises(FortniteAPIError):
            self.client._get('/events/data/past')

    @responses.activate
    def test_events(self):
        responses.add(responses.GET, BASE + '/events/data/past', json={'events': [{'eventId': 'a'}, 3]}, status=200)
        responses.add(responses.GET, BASE + '/events/data/current', json={'events': None}, status=200)
        self.assertEqual(self.client.get_past_events(), [{'eventId': 'a'}])
        self.assertEqual(self.client.get_current_events(), [])

    @responses.activate
    def test_cache_reused_within_ttl(self):
        responses.add(responses.GET, LEADERBOARD_URL, json={'entries': [{'rank': 1}]}, status=200)
        with tempfile.TemporaryDirectory() as tmp:
            client = FortniteClient('secret', cache_dir=tmp)
            first = client.get_leaderboard_page('evt', 'win', 0)
            second = client.get_leaderboard_page('evt', 'win', 0)
            other_page = client.get_leaderboard_page('evt', 'win', 1)
        self.assertEqual(first, second)
        self.assertEqual(other_page, [{'rank': 1}])
        # page 0 served from cache the second time
        self.assertEqual(len(responses.calls), 2)


def test_from_env_without_key_returns_none():
    with mock.patch.dict('os.environ', {}, clear=True):
        assert FortniteClient.from_env() is None


def test_from_env_with_key():
    with mock.patch.dict('os.environ', {'FORTNITE_API_KEY': 'k'}):
        client = FortniteClient.from_env()
    assert client is not None
    assert client.session.headers['x-api-key'] == 'k'
