from __future__ import annotations

import base64
import os
import subprocess
import unittest
from unittest import mock

from s3lens.runtime import clipboard


class ClipboardCommandTests(unittest.TestCase):
    def test_tmux_buffer_is_tried_first_inside_tmux(self) -> None:
        with mock.patch.dict("s3lens.runtime.clipboard.os.environ", {"TMUX": "/tmp/tmux-1/default"}), mock.patch(
            "s3lens.runtime.clipboard.sys.platform", "linux"
        ):
            candidates = clipboard._command_candidates()

        self.assertEqual(candidates[0], ["tmux", "load-buffer", "-w", "-"])
        self.assertIn(["xclip", "-selection", "clipboard"], candidates)

    def test_first_working_tool_wins(self) -> None:
        commands = [["wl-copy"], ["xclip", "-selection", "clipboard"]]
        completed = subprocess.CompletedProcess(args=commands[1], returncode=0)

        with mock.patch("s3lens.runtime.clipboard._command_candidates", return_value=commands), mock.patch(
            "s3lens.runtime.clipboard.shutil.which",
            side_effect=lambda name: None if name == "wl-copy" else f"/usr/bin/{name}",
        ), mock.patch("s3lens.runtime.clipboard.subprocess.run", return_value=completed) as run_mock:
            used = clipboard.copy_text_to_clipboard("s3://bucket/logs")

        self.assertEqual(used, "xclip")
        self.assertEqual(run_mock.call_args.kwargs["input"], "s3://bucket/logs")

    def test_failing_tool_falls_back_to_osc52(self) -> None:
        failed = subprocess.CompletedProcess(args=["xsel"], returncode=1)
        read_fd, write_fd = os.pipe()
        try:
            with mock.patch(
                "s3lens.runtime.clipboard._command_candidates", return_value=[["xsel", "--clipboard", "--input"]]
            ), mock.patch("s3lens.runtime.clipboard.shutil.which", return_value="/usr/bin/xsel"), mock.patch(
                "s3lens.runtime.clipboard.subprocess.run", return_value=failed
            ):
                used = clipboard.copy_text_to_clipboard("hi", osc52_fd=write_fd)
            written = os.read(read_fd, 1024)
        finally:
            os.close(read_fd)
            os.close(write_fd)

        self.assertEqual(used, "osc52")
        self.assertEqual(written, b"\x1b]52;c;" + base64.b64encode(b"hi") + b"\x07")

    def test_no_mechanism_raises_with_reason(self) -> None:
        with mock.patch("s3lens.runtime.clipboard._command_candidates", return_value=[["pbcopy"]]), mock.patch(
            "s3lens.runtime.clipboard.shutil.which", return_value=None
        ):
            with self.assertRaises(clipboard.ClipboardError) as ctx:
                clipboard.copy_text_to_clipboard("hi")

        self.assertEqual(str(ctx.exception), "no clipboard tool found")

    def test_empty_text_is_rejected(self) -> None:
        with self.assertRaises(clipboard.ClipboardError):
            clipboard.copy_text_to_clipboard("")


if __name__ == "__main__":
    unittest.main()
