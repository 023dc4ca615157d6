"""Tests for raw-mode lifecycle and terminal output.

Verifies the raw attribute set, exactly-once restoration, and that failures
surface as ``TerminalControlError``/``TerminalIOError``.
"""

from __future__ import annotations

import termios
import unittest
from unittest import mock

from kiloview.errors import GeometryProbeError, TerminalControlError, TerminalIOError
from kiloview.terminal import RawModeOptions, TerminalController

ALL_IFLAGS = termios.BRKINT | termios.INPCK | termios.ISTRIP | termios.ICRNL | termios.IXON | termios.IGNBRK
ALL_LFLAGS = termios.ECHO | termios.ICANON | termios.ISIG | termios.IEXTEN | termios.ECHOE


def _cooked_attrs() -> list:
    cc = [0] * termios.NCCS
    cc[termios.VMIN] = 1
    cc[termios.VTIME] = 0
    return [ALL_IFLAGS, termios.OPOST, 0, ALL_LFLAGS, termios.B38400, termios.B38400, cc]


class RawModeOptionsTests(unittest.TestCase):
    def test_default_options_clear_expected_flags(self) -> None:
        saved = _cooked_attrs()
        raw = RawModeOptions().apply_to(saved)

        self.assertEqual(raw[0], termios.IGNBRK)
        self.assertEqual(raw[1] & termios.OPOST, 0)
        self.assertEqual(raw[2] & termios.CS8, termios.CS8)
        self.assertEqual(raw[3], termios.ECHOE)
        self.assertEqual(raw[6][termios.VMIN], 0)
        self.assertEqual(raw[6][termios.VTIME], 1)

    def test_apply_to_leaves_snapshot_untouched(self) -> None:
        saved = _cooked_attrs()
        RawModeOptions().apply_to(saved)

        self.assertEqual(saved, _cooked_attrs())

    def test_disabled_toggle_keeps_its_flag(self) -> None:
        raw = RawModeOptions(signals=False, flow_control=False).apply_to(_cooked_attrs())

        self.assertTrue(raw[3] & termios.ISIG)
        self.assertTrue(raw[0] & termios.IXON)
        self.assertFalse(raw[3] & termios.ECHO)


class TerminalControllerTests(unittest.TestCase):
    def test_enable_and_disable_restore_saved_attributes(self) -> None:
        saved = _cooked_attrs()
        with mock.patch("kiloview.terminal.termios.tcgetattr", return_value=saved), mock.patch(
            "kiloview.terminal.termios.tcsetattr"
        ) as setattr_mock:
            controller = TerminalController(stdin_fd=0, stdout_fd=1)
            controller.enable_raw_mode()
            self.assertTrue(controller.raw_enabled)
            controller.disable_raw_mode()

        self.assertFalse(controller.raw_enabled)
        self.assertEqual(setattr_mock.call_count, 2)
        self.assertEqual(setattr_mock.call_args_list[0].args, (0, termios.TCSAFLUSH, RawModeOptions().apply_to(saved)))
        self.assertEqual(setattr_mock.call_args_list[1].args, (0, termios.TCSAFLUSH, saved))

    def test_disable_without_enable_is_noop(self) -> None:
        with mock.patch("kiloview.terminal.termios.tcsetattr") as setattr_mock:
            controller = TerminalController(stdin_fd=0, stdout_fd=1)
            controller.disable_raw_mode()
            controller.disable_raw_mode()

        setattr_mock.assert_not_called()

    def test_restore_happens_once(self) -> None:
        with mock.patch("kiloview.terminal.termios.tcgetattr", return_value=_cooked_attrs()), mock.patch(
            "kiloview.terminal.termios.tcsetattr"
        ) as setattr_mock:
            controller = TerminalController(stdin_fd=0, stdout_fd=1)
            controller.enable_raw_mode()
            controller.enable_raw_mode()
            controller.disable_raw_mode()
            controller.disable_raw_mode()

        self.assertEqual(setattr_mock.call_count, 2)

    def test_tcgetattr_failure_raises_terminal_control_error(self) -> None:
        with mock.patch(
            "kiloview.terminal.termios.tcgetattr",
            side_effect=termios.error(25, "Inappropriate ioctl for device"),
        ), mock.patch("kiloview.terminal.termios.tcsetattr") as setattr_mock:
            controller = TerminalController(stdin_fd=0, stdout_fd=1)
            with self.assertRaises(TerminalControlError) as ctx:
                controller.enable_raw_mode()

        setattr_mock.assert_not_called()
        self.assertEqual(ctx.exception.operation, "tcgetattr")
        self.assertEqual(str(ctx.exception), "tcgetattr: Inappropriate ioctl for device")
        self.assertFalse(controller.raw_enabled)

    def test_raw_mode_restores_terminal_after_exception(self) -> None:
        with mock.patch("kiloview.terminal.termios.tcgetattr", return_value=_cooked_attrs()), mock.patch(
            "kiloview.terminal.termios.tcsetattr"
        ) as setattr_mock:
            controller = TerminalController(stdin_fd=0, stdout_fd=1)
            with self.assertRaises(RuntimeError):
                with controller.raw_mode():
                    raise RuntimeError("boom")

        self.assertEqual(setattr_mock.call_count, 2)
        self.assertFalse(controller.raw_enabled)

    def test_failed_restore_does_not_mask_error_in_flight(self) -> None:
        restore_failure = termios.error(5, "Input/output error")
        with mock.patch("kiloview.terminal.termios.tcgetattr", return_value=_cooked_attrs()), mock.patch(
            "kiloview.terminal.termios.tcsetattr", side_effect=[None, restore_failure]
        ):
            controller = TerminalController(stdin_fd=0, stdout_fd=1)
            with self.assertLogs("kiloview.terminal", level="ERROR") as logs:
                with self.assertRaises(GeometryProbeError) as ctx:
                    with controller.raw_mode():
                        raise GeometryProbeError("cursor position report", "malformed reply")

        self.assertEqual(ctx.exception.operation, "cursor position report")
        self.assertFalse(controller.raw_enabled)
        self.assertIn("tcsetattr: Input/output error", logs.output[0])

    def test_failed_restore_on_normal_exit_raises(self) -> None:
        with mock.patch("kiloview.terminal.termios.tcgetattr", return_value=_cooked_attrs()), mock.patch(
            "kiloview.terminal.termios.tcsetattr", side_effect=[None, termios.error(5, "Input/output error")]
        ):
            controller = TerminalController(stdin_fd=0, stdout_fd=1)
            with self.assertRaises(TerminalControlError) as ctx:
                with controller.raw_mode():
                    pass

        self.assertEqual(ctx.exception.operation, "tcsetattr")

    def test_clear_screen_writes_erase_and_home_in_one_call(self) -> None:
        with mock.patch("kiloview.terminal.os.write", return_value=7) as write_mock:
            TerminalController(stdin_fd=0, stdout_fd=1).clear_screen()

        write_mock.assert_called_once_with(1, b"\x1b[2J\x1b[H")

    def test_write_failure_raises_terminal_io_error(self) -> None:
        with mock.patch("kiloview.terminal.os.write", side_effect=OSError(5, "Input/output error")):
            controller = TerminalController(stdin_fd=0, stdout_fd=1)
            with self.assertRaises(TerminalIOError) as ctx:
                controller.write(b"x")

        self.assertEqual(str(ctx.exception), "write: Input/output error")


if __name__ == "__main__":
    unittest.main()
