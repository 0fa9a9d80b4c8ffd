import io
import json
from unittest import mock, TestCase

from roster_tracker import cli
from roster_tracker.models import RankingRecord, TournamentInfo

RANKINGS = [
    RankingRecord(player='Akiira', account_id='d706641c93524ceba9cd195b5e287d98', rank=3, points=250, kills=8,
                  wins=1, matches=10, session_history=[
                      {'sessionId': 'g1', 'endTime': '2025-03-01T18:20:00Z', 'trackedStats': {'PLACEMENT_STAT_INDEX': 4}},
                      {'sessionId': 'g2', 'endTime': '2025-03-01T18:50:00Z', 'trackedStats': {'PLACEMENT_STAT_INDEX': 1, 'ELIMS': 5}},
                  ]),
    RankingRecord(player='Merstach', account_id='5bec82879fbf436887597f49d9bcc7c3', rank=40, points=120, kills=2, matches=10),
]


class TestCLI(TestCase):
    def setUp(self):
        self.patcher_client = mock.patch('roster_tracker.cli.FortniteClient')
        self.mock_client_cls = self.patcher_client.start()
        self.mock_client = self.mock_client_cls.from_env.return_value
        self.patcher_rankings = mock.patch('roster_tracker.cli.get_tournament_rankings', return_value=RANKINGS)
        self.mock_rankings = self.patcher_rankings.start()

    def tearDown(self):
        self.patcher_client.stop()
        self.patcher_rankings.stop()

    def run_cli(self, args):
        buf = io.StringIO()
        with mock.patch('sys.stdout', buf):
            code = cli.main(args)
        output = buf.getvalue()
        lines = output.splitlines()
        self.assertIn('SUMMARY_TABLE_START', lines, 'Summary table sentinel missing')
        json_idx = lines.index('REPORT_JSON_START')
        return code, lines, json.loads('\n'.join(lines[json_idx + 1:]))

    def test_rankings(self):
        code, lines, report = self.run_cli(['rankings', '--event', 'evt', '--window', 'evt_Week1_Cumulative'])
        self.assertEqual(code, 0)
        self.assertEqual([r['player'] for r in report], ['Akiira', 'Merstach'])
        self.assertEqual(report[0]['points'], 250)
        self.assertNotIn('session_history', report[0])
        args, kwargs = self.mock_rankings.call_args
        self.assertEqual(args, ('evt', 'evt_Week1_Cumulative'))
        self.assertIs(kwargs['client'], self.mock_client)
        self.assertTrue(any('Akiira' in line and '250' in line for line in lines))

    def test_matches_fuzzy_player(self):
        code, _lines, report = self.run_cli(['matches', '--event', 'evt', '--window', 'w', '--player', 'akira'])
        self.assertEqual(code, 0)
        self.assertEqual([m['match_id'] for m in report], ['g2', 'g1'])
        self.assertEqual(report[0]['kills'], 5)
        self.assertEqual(report[0]['placement'], 1)

    @mock.patch('roster_tracker.cli.list_tournaments')
    def test_tournaments(self, mock_list):
        mock_list.return_value = [TournamentInfo('evt', 'evt_Week1_Cumulative', 'FNCS Div 1 - Semaine 1 (Cumulé)',
                                                 '2025-03-02T18:00:00Z', '02/03/2025')]
        code, _lines, report = self.run_cli(['tournaments', '--limit', '5'])
        self.assertEqual(code, 0)
        self.assertEqual(report[0]['event_window_id'], 'evt_Week1_Cumulative')
        mock_list.assert_called_once_with(self.mock_client, limit=5)


def test_unknown_player_exits_with_error():
    with mock.patch('roster_tracker.cli.FortniteClient'), \
            mock.patch('roster_tracker.cli.get_tournament_rankings', return_value=RANKINGS):
        err = io.StringIO()
        with mock.patch('sys.stderr', err):
            code = cli.main(['matches', '--event', 'e', '--window', 'w', '--player', 'Bugha'])
    assert code == 1
    assert 'Bugha' in err.getvalue()


def test_missing_api_key_exits_with_error():
    with mock.patch.dict('os.environ', {}, clear=True):
        err = io.StringIO()
        with mock.patch('sys.stderr', err):
            code = cli.main(['rankings', '--event', 'e', '--window', 'w'])
    assert code == 1
    assert 'FORTNITE_API_KEY' in err.getvalue()
