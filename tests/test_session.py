import pytest

from tas_verify import TextBuffer, VerificationSession, read_telemetry_log


def test_begin_renders_working_text(fixed_clock) -> None:
    buffer = TextBuffer("10,R\n10,R\n# start\n5,F,45\n")
    session = VerificationSession(buffer, clock=fixed_clock)
    seq = session.begin()

    assert session.active
    assert session.total_frames == 25
    assert session.sequence is seq
    assert buffer.text == "\n20,R\n***!\n# start\n5,F,45\n"


def test_end_publishes_without_breakpoints(fixed_clock) -> None:
    buffer = TextBuffer("a\n\n\nb\n")
    session = VerificationSession(buffer, clock=fixed_clock)
    session.begin()
    text = session.end()

    assert text == "\na\n\nb\n"
    assert buffer.text == text
    assert not session.active
    assert session.sequence is None


def test_telemetry_outside_session_is_ignored(fixed_clock) -> None:
    session = VerificationSession(TextBuffer("1,R\n"), clock=fixed_clock)
    session.on_telemetry("2[1,R(1 / 1 : 1)]", "Timer: 0.017")
    assert session.dropped_samples == 0
    with pytest.raises(RuntimeError):
        session.end()


def test_malformed_samples_are_dropped(fixed_clock) -> None:
    session = VerificationSession(TextBuffer("# a\n5,R\n"), clock=fixed_clock)
    session.begin()
    before = session.stamper.previous_time

    session.on_telemetry("", "Timer: 1.000")
    session.on_telemetry("4[5,R(1 / 5 : 2)]", "")
    session.on_telemetry("4[5,R(one / 5 : 2)]", "Timer: 1.000")

    assert session.dropped_samples == 3
    assert session.stamper.previous_time == before
    assert [r.notes for r in session.sequence] == ["", "!", "# a", "", ""]


def test_full_replay(sample_script, sample_telemetry, expected_verified, fixed_clock) -> None:
    buffer = TextBuffer(sample_script.read_text(encoding="utf-8"))
    session = VerificationSession(buffer, clock=fixed_clock)
    seq = session.begin()
    assert len(seq) == 15
    assert seq.total_frames == 52

    for status, overlay in read_telemetry_log(sample_telemetry):
        session.on_telemetry(status, overlay)

    assert session.dropped_samples == 1
    assert session.end() == expected_verified
