import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from commit_wizard import log


class TestInitLogging(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self._cwd = os.getcwd()
        os.chdir(self.tmp)
        self.package_logger = logging.getLogger(log.PACKAGE_LOGGER)
        self._level = self.package_logger.level

    def tearDown(self) -> None:
        for handler in list(self.package_logger.handlers):
            if isinstance(handler, logging.FileHandler):
                self.package_logger.removeHandler(handler)
                handler.close()
        self.package_logger.setLevel(self._level)
        os.chdir(self._cwd)
        self._tmp.cleanup()

    def file_handlers(self):
        return [h for h in self.package_logger.handlers if isinstance(h, logging.FileHandler)]

    def test_disabled_does_nothing(self) -> None:
        self.assertIsNone(log.init_logging(False))
        self.assertEqual(self.file_handlers(), [])

    def test_default_location(self) -> None:
        target = self.tmp / "share" / "commit-wizard.log"
        with patch.object(log, "default_log_path", return_value=target):
            path = log.init_logging(True)
        self.assertEqual(path, target)
        logging.getLogger("commit_wizard.tests").info("hello from the test")
        for handler in self.file_handlers():
            handler.flush()
        content = target.read_text(encoding="utf-8")
        self.assertIn("INFO [commit_wizard.tests] hello from the test", content)
        self.assertEqual(self.package_logger.level, logging.INFO)

    def test_local_and_verbose(self) -> None:
        path = log.init_logging(True, local=True, verbose=True)
        self.assertEqual(path, Path(log.LOCAL_LOG_FILE))
        self.assertTrue((self.tmp / log.LOCAL_LOG_FILE).exists())
        self.assertEqual(self.package_logger.level, logging.DEBUG)

    def test_falls_back_to_local_file(self) -> None:
        blocker = self.tmp / "not-a-dir"
        blocker.write_text("")
        with patch.object(log, "default_log_path", return_value=blocker / "commit-wizard.log"):
            path = log.init_logging(True)
        self.assertEqual(path, Path(log.LOCAL_LOG_FILE))

    def test_reinitialising_replaces_the_handler(self) -> None:
        log.init_logging(True, local=True)
        log.init_logging(True, local=True)
        self.assertEqual(len(self.file_handlers()), 1)


if __name__ == "__main__":
    unittest.main()
