import os
import threading
import unittest
from tempfile import TemporaryDirectory
from pathlib import Path

from services.deploy_runner.runner import (
    _split_stream_buffer,
    build_command,
    start_process,
)
from services.deploy_runner.types import ProcessExited, ProcessOutput


class _Collector:
    def __init__(self) -> None:
        self.events = []
        self.done = threading.Event()

    def __call__(self, event) -> None:
        self.events.append(event)
        if isinstance(event, ProcessExited):
            self.done.set()


class TestRunner(unittest.TestCase):
    def test_split_stream_buffer_handles_cr_and_lf(self) -> None:
        lines, rest = _split_stream_buffer("one\rtwo\nthree")

        self.assertEqual(lines, ["one", "two"])
        self.assertEqual(rest, "three")

    def test_split_stream_buffer_treats_crlf_as_one_break(self) -> None:
        lines, rest = _split_stream_buffer("a\r\nb\r\n")

        self.assertEqual(lines, ["a", "b"])
        self.assertEqual(rest, "")

    def test_split_stream_buffer_holds_trailing_cr(self) -> None:
        lines, rest = _split_stream_buffer("a\r")
        self.assertEqual(lines, [])
        self.assertEqual(rest, "a\r")

        lines, rest = _split_stream_buffer(rest + "\nb")
        self.assertEqual(lines, ["a"])
        self.assertEqual(rest, "b")

    def test_build_command_forwards_known_params(self) -> None:
        cmd = build_command(
            ["bash", "deploy.sh"],
            {
                "container_name": "web",
                "image_name": "repo/web:1.2",
                "s3_bucket": None,
                "domain_name": "  ",
            },
        )

        self.assertEqual(
            cmd,
            [
                "bash",
                "deploy.sh",
                "--container-name",
                "web",
                "--image-name",
                "repo/web:1.2",
            ],
        )

    def test_build_command_without_forwarding(self) -> None:
        cmd = build_command(["deploy"], {"container_name": "web"}, forward=False)
        self.assertEqual(cmd, ["deploy"])

    def test_build_command_without_params(self) -> None:
        self.assertEqual(build_command(["deploy"], None), ["deploy"])

    def test_streams_are_tagged_and_exit_comes_last(self) -> None:
        collector = _Collector()
        with TemporaryDirectory() as tmp:
            start_process(
                argv=[
                    "bash",
                    "-c",
                    "printf 'out1\\nout2\\n'; printf 'err1' 1>&2; exit 7",
                ],
                cwd=Path(tmp),
                on_event=collector,
            )
            self.assertTrue(collector.done.wait(timeout=10))

        outputs = [e for e in collector.events if isinstance(e, ProcessOutput)]
        self.assertIn(ProcessOutput(stream="stdout", text="out1"), outputs)
        self.assertIn(ProcessOutput(stream="stdout", text="out2"), outputs)
        # Unterminated trailing output is still delivered.
        self.assertIn(ProcessOutput(stream="stderr", text="err1"), outputs)
        self.assertEqual(collector.events[-1], ProcessExited(code=7))

    def test_missing_executable_raises(self) -> None:
        with TemporaryDirectory() as tmp:
            with self.assertRaises(OSError):
                start_process(
                    argv=[str(Path(tmp) / "missing-deploy")],
                    cwd=Path(tmp),
                    on_event=_Collector(),
                )

    def _run(self, script: str) -> _Collector:
        collector = _Collector()
        with TemporaryDirectory() as tmp:
            start_process(argv=["bash", "-c", script], cwd=Path(tmp), on_event=collector)
            self.assertTrue(collector.done.wait(timeout=10))
        return collector

    def test_multibyte_character_split_across_writes(self) -> None:
        collector = self._run(r"printf 'gr\xc3'; sleep 0.2; printf '\xbc\xc3\x9fe\n'")

        outputs = [e for e in collector.events if isinstance(e, ProcessOutput)]
        self.assertEqual(outputs, [ProcessOutput(stream="stdout", text="grüße")])

    def test_crlf_output_has_no_blank_lines(self) -> None:
        collector = self._run(r"printf 'a\r\n'; sleep 0.1; printf 'b\r'; sleep 0.1; printf '\nc\r'")

        outputs = [e.text for e in collector.events if isinstance(e, ProcessOutput)]
        self.assertEqual(outputs, ["a", "b", "c"])

    def test_child_stays_in_server_process_group(self) -> None:
        collector = _Collector()
        with TemporaryDirectory() as tmp:
            proc = start_process(
                argv=["sleep", "0.5"], cwd=Path(tmp), on_event=collector
            )
            self.assertEqual(os.getpgid(proc.pid), os.getpgrp())
            self.assertTrue(collector.done.wait(timeout=10))

    def test_embedded_nul_raises_value_error(self) -> None:
        with TemporaryDirectory() as tmp:
            with self.assertRaises(ValueError):
                start_process(
                    argv=["bash", "-c", "echo", "a\x00b"],
                    cwd=Path(tmp),
                    on_event=_Collector(),
                )
