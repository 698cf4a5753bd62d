"""Tests for structured JSON logging."""

import json
import logging
import sys
import unittest

from utils.logging import JSONFormatter, setup_structured_logging


class TestJSONFormatter(unittest.TestCase):

    def _record(self, msg='failed to update user', level=logging.ERROR, **extra):
        record = logging.LogRecord('api.routes.users', level, __file__, 1, msg, None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_formats_standard_fields(self):
        data = json.loads(JSONFormatter().format(self._record()))

        self.assertEqual(data['level'], 'ERROR')
        self.assertEqual(data['logger'], 'api.routes.users')
        self.assertEqual(data['message'], 'failed to update user')
        self.assertTrue(data['timestamp'].endswith('Z'))

    def test_includes_extra_fields_only(self):
        data = json.loads(JSONFormatter().format(self._record(userId='abc', error='boom')))

        self.assertEqual(data['userId'], 'abc')
        self.assertEqual(data['error'], 'boom')
        for internal in ('args', 'msg', 'pathname', 'lineno', 'exc_info'):
            self.assertNotIn(internal, data)

    def test_non_json_values_are_stringified(self):
        data = json.loads(JSONFormatter().format(self._record(fields={'a'})))

        self.assertEqual(data['fields'], "{'a'}")

    def test_includes_exception(self):
        try:
            raise RuntimeError("cause")
        except RuntimeError:
            record = logging.LogRecord('x', logging.ERROR, __file__, 1, 'oops', None, sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        self.assertIn('RuntimeError: cause', data['exception'])


class TestSetupStructuredLogging(unittest.TestCase):

    def setUp(self):
        root = logging.getLogger()
        self._saved = (root.level, list(root.handlers))

    def tearDown(self):
        root = logging.getLogger()
        root.setLevel(self._saved[0])
        root.handlers = self._saved[1]

    def test_installs_single_json_handler(self):
        handler = setup_structured_logging('debug')

        root = logging.getLogger()
        self.assertEqual(root.handlers, [handler])
        self.assertIsInstance(handler.formatter, JSONFormatter)
        self.assertEqual(root.level, logging.DEBUG)
        self.assertEqual(logging.getLogger('uvicorn.access').level, logging.WARNING)


if __name__ == '__main__':
    unittest.main()
