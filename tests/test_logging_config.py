import logging
import os
import tempfile
import unittest

from ergoreach.config import CONFIG
from ergoreach.logging_config import resolve_level, setup_logging


class TestSetupLogging(unittest.TestCase):
    def tearDown(self):
        logger = logging.getLogger("ergoreach")
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)

    def test_level_names(self):
        self.assertEqual(resolve_level("debug"), logging.DEBUG)
        self.assertEqual(resolve_level(logging.WARNING), logging.WARNING)
        with self.assertRaises(ValueError):
            resolve_level("chatty")

    def test_defaults_come_from_config(self):
        logger = setup_logging()
        self.assertEqual(logger.level, resolve_level(CONFIG["LOG_LEVEL"]))

    def test_repeated_setup_replaces_only_own_handlers(self):
        """A second setup swaps its own handler but keeps one the host attached."""
        logger = logging.getLogger("ergoreach")
        foreign = logging.NullHandler()
        logger.addHandler(foreign)

        setup_logging()
        setup_logging("DEBUG")
        self.assertEqual(len(logger.handlers), 2)
        self.assertIn(foreign, logger.handlers)
        self.assertEqual(logger.level, logging.DEBUG)

    def test_file_handler(self):
        """Child loggers reach the session file through the package logger."""
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "session.log")
            logger = setup_logging(log_file=path)
            self.assertEqual(len(logger.handlers), 2)

            logging.getLogger("ergoreach.core.rula").info("lookup ok")
            for handler in logger.handlers:
                handler.flush()
            with open(path, encoding="utf-8") as f:
                self.assertIn("[ergoreach.core.rula] lookup ok", f.read())
            self.tearDown()


if __name__ == '__main__':
    unittest.main()
