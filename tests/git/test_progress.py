"""
Tests for transport progress parsing.
"""

import threading

import pytest

from gitr.git.progress import (
    ProgressPhase,
    ProgressState,
    ProgressTracker,
    parse_progress_line,
)


@pytest.mark.short
class TestParseProgressLine:
    def test_receiving(self):
        state = parse_progress_line(
            "Receiving objects:  87% (1074/1234), 1.20 MiB | 2.40 MiB/s"
        )

        assert state.phase is ProgressPhase.receiving
        assert state.percentage == 87
        assert state.current == 1074
        assert state.total == 1234
        assert state.size == "1.20 MiB"
        assert state.speed == "2.40 MiB/s"

    def test_receiving_without_throughput(self):
        state = parse_progress_line("Receiving objects:   3% (37/1234)")

        assert state.phase is ProgressPhase.receiving
        assert state.size == ""
        assert state.speed == ""

    @pytest.mark.parametrize(
        "line,phase",
        [
            ("remote: Counting objects:  42% (519/1234)", ProgressPhase.counting),
            ("remote: Compressing objects:  10% (5/50)", ProgressPhase.compressing),
            ("Resolving deltas:  55% (55/100)", ProgressPhase.resolving),
        ],
    )
    def test_counted_phases(self, line, phase):
        state = parse_progress_line(line)

        assert state.phase is phase
        assert 0 <= state.percentage <= 100

    def test_enumerating(self):
        state = parse_progress_line("remote: Enumerating objects: 1234")

        assert state.phase is ProgressPhase.enumerating
        assert state.total == 1234

    def test_done_lines_are_ignored(self):
        assert parse_progress_line("remote: Enumerating objects: 1234, done.") is None
        assert (
            parse_progress_line("Resolving deltas: 100% (100/100), done.") is None
        )

    def test_phase_keyword_fallback(self):
        state = parse_progress_line("Receiving pack")

        assert state.phase is ProgressPhase.receiving
        assert state.percentage == 0
        assert state.message == "Receiving pack"

    @pytest.mark.parametrize("line", ["", "   ", "Cloning into 'repo'..."])
    def test_unrelated_lines(self, line):
        assert parse_progress_line(line) is None


@pytest.mark.short
class TestProgressTracker:
    def test_initial_state(self):
        assert ProgressTracker().snapshot() == ProgressState()

    def test_carriage_return_updates(self):
        tracker = ProgressTracker()

        tracker.write(b"Receiving objects:  10% (1/10)\r")
        assert tracker.snapshot().percentage == 10

        tracker.write(b"Receiving objects:  50% (5/10)\rReceiving objects:  9")
        assert tracker.snapshot().percentage == 50

        # the partial line completes with the next chunk
        tracker.write(b"0% (9/10)\r")
        assert tracker.snapshot().percentage == 90

    def test_crlf_is_one_line_break(self):
        tracker = ProgressTracker()
        tracker.write(
            b"Counting objects:  20% (2/10)\r\nCompressing objects:  40% (4/10)\n"
        )

        state = tracker.snapshot()
        assert state.phase is ProgressPhase.compressing
        assert state.percentage == 40
        assert tracker.last_line == "Compressing objects:  40% (4/10)"

    def test_accepts_str(self):
        tracker = ProgressTracker()
        tracker.write("Resolving deltas:  30% (3/10)\n")

        assert tracker.snapshot().phase is ProgressPhase.resolving

    def test_done_line_keeps_last_state(self):
        tracker = ProgressTracker()
        tracker.write(b"Receiving objects:  99% (99/100)\r")
        tracker.write(b"Receiving objects: 100% (100/100), done.\n")

        assert tracker.snapshot().percentage == 99

    def test_phases_are_not_reordered(self):
        tracker = ProgressTracker()
        tracker.write(b"Resolving deltas:  10% (1/10)\n")
        tracker.write(b"Counting objects:  10% (1/10)\n")

        assert tracker.snapshot().phase is ProgressPhase.counting

    def test_reset_and_finish(self):
        tracker = ProgressTracker()
        tracker.write(b"Receiving objects:  50% (5/10)\n")

        tracker.finish()
        assert tracker.snapshot().phase is ProgressPhase.done
        assert tracker.snapshot().percentage == 100

        tracker.reset()
        assert tracker.snapshot() == ProgressState()

    def test_snapshot_is_immutable(self):
        tracker = ProgressTracker()
        snapshot = tracker.snapshot()

        with pytest.raises(AttributeError):
            snapshot.percentage = 50

    def test_concurrent_reads(self):
        tracker = ProgressTracker()
        seen = []
        stop = threading.Event()

        def reader():
            while not stop.is_set():
                seen.append(tracker.snapshot())

        thread = threading.Thread(target=reader)
        thread.start()
        for count in range(1, 101):
            tracker.write(f"Receiving objects: {count:3d}% ({count}/100)\r".encode())
        stop.set()
        thread.join()

        assert tracker.snapshot().percentage == 100
        assert all(0 <= state.percentage <= 100 for state in seen)
