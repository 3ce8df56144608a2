"""
Tests for the command-line interface.
"""

import io
import unittest
from contextlib import redirect_stdout
from unittest import mock

from readiness import config
from readiness.main import main, parse_arguments, validate_arguments


class TestArgumentParsing(unittest.TestCase):
    def test_run_defaults(self):
        args = parse_arguments(['run', '-u', 'https://t.test'])
        self.assertEqual(args.command, 'run')
        self.assertEqual(args.concurrency, config.DEFAULT_CONCURRENCY)
        self.assertEqual(args.requests, config.DEFAULT_REQUESTS_PER_USER)
        self.assertEqual(args.source_root, '.')
        self.assertFalse(args.html)
        self.assertFalse(args.verbose)
        self.assertIsNone(args.endpoints)

    def test_run_options(self):
        args = parse_arguments([
            'run', '-u', 'https://t.test', '--concurrency', '5', '--requests', '2',
            '--endpoints', '/a', '/b', '--fail-closed', '--html', '-v',
        ])
        self.assertEqual(args.concurrency, 5)
        self.assertEqual(args.endpoints, ['/a', '/b'])
        self.assertTrue(args.fail_closed)
        self.assertTrue(args.html)
        self.assertTrue(args.verbose)

    def test_stress_options(self):
        args = parse_arguments(['stress', '-u', 'https://t.test', '--tiers', '1', '5', '--cooldown', '0'])
        self.assertEqual(args.command, 'stress')
        self.assertEqual(args.tiers, [1, 5])
        self.assertEqual(args.cooldown, 0)
        self.assertEqual(args.error_threshold, config.STRESS_ERROR_THRESHOLD)

    def test_command_required(self):
        with redirect_stdout(io.StringIO()), mock.patch('sys.stderr', io.StringIO()):
            with self.assertRaises(SystemExit):
                parse_arguments([])


class TestValidation(unittest.TestCase):
    def validate(self, argv):
        with redirect_stdout(io.StringIO()):
            return validate_arguments(parse_arguments(argv))

    def test_valid(self):
        self.assertTrue(self.validate(['run', '-u', 'http://localhost:3000']))
        self.assertTrue(self.validate(['stress', '-u', 'https://t.test', '--tiers', '1']))

    def test_url_scheme(self):
        self.assertFalse(self.validate(['run', '-u', 'ftp://t.test']))

    def test_concurrency_limit(self):
        too_many = str(config.MAX_CONCURRENCY + 1)
        self.assertFalse(self.validate(['run', '-u', 'https://t.test', '--concurrency', too_many]))
        self.assertFalse(self.validate(['run', '-u', 'https://t.test', '--concurrency', '-1']))

    def test_negative_values(self):
        self.assertFalse(self.validate(['run', '-u', 'https://t.test', '--requests', '-1']))
        self.assertFalse(self.validate(['run', '-u', 'https://t.test', '--ramp-up', '-2']))
        self.assertFalse(self.validate(['stress', '-u', 'https://t.test', '--cooldown', '-1']))

    def test_stress_tiers(self):
        self.assertFalse(self.validate(['stress', '-u', 'https://t.test', '--tiers', '0', '10']))


class TestMain(unittest.TestCase):
    def test_invalid_arguments_exit_1(self):
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main(['run', '-u', 'not-a-url'])
        self.assertEqual(ctx.exception.code, 1)

    @mock.patch('readiness.main.run_suite', side_effect=KeyboardInterrupt)
    def test_interrupt_exit_130(self, run_suite):
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main(['run', '-u', 'https://t.test'])
        self.assertEqual(ctx.exception.code, 130)

    @mock.patch('readiness.main.run_suite', side_effect=RuntimeError("boom"))
    def test_unhandled_error_exit_1(self, run_suite):
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main(['run', '-u', 'https://t.test'])
        self.assertEqual(ctx.exception.code, 1)

    @mock.patch('readiness.main.run_stress')
    def test_stress_dispatch(self, run_stress):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            main(['stress', '-u', 'https://t.test', '--tiers', '1'])
        run_stress.assert_called_once()
        self.assertIn('Done', buffer.getvalue())


if __name__ == '__main__':
    unittest.main(verbosity=2)
