import os
import unittest

from commit_wizard.tui.terminal import TerminalController, TerminalError


class TestTerminalController(unittest.TestCase):
    def test_non_tty_input_is_rejected(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            with self.assertRaises(TerminalError):
                TerminalController(read_fd, write_fd)
        finally:
            os.close(read_fd)
            os.close(write_fd)


if __name__ == "__main__":
    unittest.main()
