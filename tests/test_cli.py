import io
import os
import tempfile
import textwrap
import unittest
from unittest.mock import MagicMock, patch

from serial import SerialException

import payloadsmith.cli as cli
from payloadsmith.lib.config import Config
from payloadsmith.lib.logger import Logger


class TestCLI(unittest.TestCase):
    def setUp(self):
        fd, path = tempfile.mkstemp(prefix="payloadsmith_", suffix=".cfg")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(
                textwrap.dedent(
                    """
                    [serial]
                    path = /dev/ttyACM0
                    baud = 9600

                    [dev]
                    log_level = debug
                    stack_trace_errors = false
                    disable_serial = false

                    [texts]
                    default = from config

                    [bins]
                    default = 0102
                """
                ).lstrip()
            )

        self.path = path
        Config.load(self.path)
        Logger.setup(Logger.DEBUG)
        Logger._logger.handlers.clear()  # Silence std logs

    def tearDown(self):
        if os.path.exists(self.path):
            os.remove(self.path)

    def _run(self, argv):
        parser = cli._build_parser()
        ns = parser.parse_args(argv)
        return ns.handler(ns)

    def _run_captured(self, argv):
        """Run a command with stdout captured as raw bytes."""

        raw = io.BytesIO()
        stdout = io.TextIOWrapper(raw, encoding="utf-8")
        with patch("sys.stdout", stdout):
            rc = self._run(argv)
        return rc, raw.getvalue()

    def test_version_command(self):
        with patch("builtins.print") as mock_print:
            rc = self._run(["version"])
        self.assertEqual(rc, 0)
        mock_print.assert_called_once_with(cli.__version__)

    def test_send_dry_run(self):
        rc, out = self._run_captured(["send", "--dry-run", "${range(97,99)} ${text()}"])
        self.assertEqual(rc, 0)
        self.assertEqual(out, b"abc from config\n")

    def test_send_dry_run_surrogate(self):
        rc, out = self._run_captured(["send", "--dry-run", "${range(0xd800,0xd800)}"])
        self.assertEqual(rc, 0)
        self.assertEqual(out, b"\xed\xa0\x80\n")

    def test_alias_and_overrides(self):
        rc, out = self._run_captured(["s", "--dry-run", "--text", "default=cli", "--text", "x=a=b", "${text()}|${text(x)}"])
        self.assertEqual(rc, 0)
        self.assertEqual(out, b"cli|a=b\n")

    def test_binary_dry_run_prints_hex(self):
        rc, out = self._run_captured(["b", "--dry-run", "--bin", "k=ff", "[bin][bin(k)][hex(52)]"])
        self.assertEqual(rc, 0)
        self.assertEqual(out, b"0102ff52\n")

    def test_seed_makes_random_reproducible(self):
        outputs = []
        for _ in range(2):
            _, out = self._run_captured(["binary", "--dry-run", "--seed", "0x10", "[random(8)]"])
            outputs.append(out)
        self.assertEqual(outputs[0], outputs[1])
        self.assertEqual(len(outputs[0]), 17)

    def test_dry_run_syntax_error(self):
        with self.assertLogs(Logger._logger.name, level="ERROR") as cm:
            rc, out = self._run_captured(["send", "--dry-run", "${oops"])
        self.assertEqual(rc, 1)
        self.assertEqual(out, b"")
        self.assertTrue(any("Syntax error." in line for line in cm.output))

    def test_help_shows_usage_and_examples(self):
        for argv, expected in ((["send", "--help"], "send ${time()}s since epoch"), (["b", "--help"], "binary [hex(52)] [random(1)] lol")):
            with self.subTest(argv=argv):
                parser = cli._build_parser()
                with patch("sys.stdout", new_callable=io.StringIO) as out, self.assertRaises(SystemExit):
                    parser.parse_args(argv)
                self.assertIn("payloadsmith " + argv[0], out.getvalue())
                self.assertIn("payloadsmith " + expected, out.getvalue())

    def test_invalid_assignment(self):
        parser = cli._build_parser()
        with patch("sys.stderr"), self.assertRaises(SystemExit):
            parser.parse_args(["send", "--text", "novalue", "x"])

    def test_send_over_serial(self):
        ser = MagicMock()
        ser.is_open = True
        with patch("payloadsmith.lib.connection.Serial", return_value=ser):
            rc = self._run(["send", "hello ${range(65,66)}"])

        self.assertEqual(rc, 0)
        ser.write.assert_called_once_with(b"hello AB")
        ser.close.assert_called_once()

    def test_binary_over_serial(self):
        ser = MagicMock()
        ser.is_open = True
        with patch("payloadsmith.lib.connection.Serial", return_value=ser):
            rc = self._run(["binary", "Hello\\ world!"])

        self.assertEqual(rc, 0)
        ser.write.assert_called_once_with(b"Hello world!")

    def test_serial_unavailable(self):
        with (
            self.assertLogs(Logger._logger.name, level="ERROR") as cm,
            patch("payloadsmith.lib.connection.Serial", side_effect=SerialException("no such device")),
        ):
            rc = self._run(["send", "hello"])

        self.assertEqual(rc, 1)
        self.assertTrue(any("Could not open serial port" in line for line in cm.output))
        self.assertTrue(any("No connection." in line for line in cm.output))

    def test_unknown_instruction_not_sent(self):
        ser = MagicMock()
        ser.is_open = True
        with (
            self.assertLogs(Logger._logger.name, level="ERROR") as cm,
            patch("payloadsmith.lib.connection.Serial", return_value=ser),
        ):
            rc = self._run(["send", "${bogus()}"])

        self.assertEqual(rc, 1)
        ser.write.assert_not_called()
        self.assertTrue(any("No helper bogus available for send." in line for line in cm.output))

    def test_write_failure(self):
        ser = MagicMock()
        ser.is_open = True
        ser.write.side_effect = SerialException("write timeout")
        with (
            self.assertLogs(Logger._logger.name, level="ERROR") as cm,
            patch("payloadsmith.lib.connection.Serial", return_value=ser),
        ):
            rc = self._run(["binary", "[hex(00)]"])

        self.assertEqual(rc, 1)
        self.assertTrue(any("Failed to send payload" in line for line in cm.output))

    def test_main_runs_version(self):
        with patch("sys.argv", ["payloadsmith", "version"]), patch("builtins.print") as mock_print:
            rc = cli.main()
        self.assertEqual(rc, 0)
        mock_print.assert_called_once_with(cli.__version__)
