"""
Tests for console logging setup.
"""

import io
import logging
import unittest
import uuid

from readiness.config import COLOUR_RESET, LEVEL_COLOURS
from readiness.utils.logger import LevelColourFormatter, setup_logger


class TtyBuffer(io.StringIO):
    def isatty(self):
        return True


def make_record(level=logging.WARNING, message='disk almost full'):
    return logging.LogRecord('readiness.test', level, __file__, 1, message, None, None)


class TestLevelColourFormatter(unittest.TestCase):
    def test_colour_wraps_level_name(self):
        output = LevelColourFormatter(fmt='%(levelname)s %(message)s').format(make_record())
        self.assertEqual(output, f"{LEVEL_COLOURS[logging.WARNING]}WARNING{COLOUR_RESET} disk almost full")

    def test_plain_when_colour_off(self):
        formatter = LevelColourFormatter(fmt='%(levelname)s %(message)s', colour=False)
        self.assertEqual(formatter.format(make_record()), 'WARNING disk almost full')

    def test_record_left_untouched(self):
        record = make_record(logging.ERROR)
        LevelColourFormatter().format(record)
        self.assertEqual(record.levelname, 'ERROR')

    def test_custom_level_uncoloured(self):
        formatter = LevelColourFormatter(fmt='%(levelname)s')
        self.assertEqual(formatter.format(make_record(level=25)), 'Level 25')


class TestSetupLogger(unittest.TestCase):
    def setUp(self):
        self.name = f"readiness-test-{uuid.uuid4().hex[:8]}"

    def tearDown(self):
        logging.getLogger(self.name).handlers.clear()

    def test_redirected_stream_gets_no_escape_codes(self):
        buffer = io.StringIO()
        setup_logger(self.name, stream=buffer).warning('slow endpoint')
        self.assertIn('WARNING', buffer.getvalue())
        self.assertNotIn('\033[', buffer.getvalue())

    def test_terminal_stream_is_coloured(self):
        buffer = TtyBuffer()
        setup_logger(self.name, stream=buffer).error('target down')
        self.assertIn(LEVEL_COLOURS[logging.ERROR], buffer.getvalue())

    def test_repeat_setup_adjusts_level_only(self):
        buffer = io.StringIO()
        logger = setup_logger(self.name, stream=buffer)
        self.assertEqual(logger.level, logging.INFO)

        again = setup_logger(self.name, verbose=True)
        self.assertIs(again, logger)
        self.assertEqual(len(logger.handlers), 1)
        self.assertEqual(logger.handlers[0].level, logging.DEBUG)
        logger.debug('now visible')
        self.assertIn('now visible', buffer.getvalue())


if __name__ == '__main__':
    unittest.main(verbosity=2)
