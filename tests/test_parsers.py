from datetime import datetime

from aggregator import analyze_text
from generator import format_step_line
from models import LogEvent, StepKind
from parsers import extract, parse_error_code, parse_step_line, parse_trace_time


class TestParseTraceTime:
    def test_valid(self):
        assert parse_trace_time("01-02-2024", "03:04:05.006") == datetime(2024, 1, 2, 3, 4, 5, 6000)

    def test_invalid_month_day(self):
        assert parse_trace_time("13-40-2024", "03:04:05.006") is None

    def test_requires_three_digit_millis(self):
        assert parse_trace_time("01-02-2024", "03:04:05.06") is None
        assert parse_trace_time("01-02-2024", "03:04:05.0060") is None
        assert parse_trace_time("01-02-2024", "03:04:05") is None

    def test_requires_two_digit_fields(self):
        assert parse_trace_time("1-2-2024", "03:04:05.006") is None
        assert parse_trace_time("01-02-24", "03:04:05.006") is None


class TestParseErrorCode:
    def test_decimal(self):
        assert parse_error_code("80004005") == "80004005"

    def test_signed_decimal(self):
        assert parse_error_code("-2147467259") == "-2147467259"

    def test_hex_kept_as_written(self):
        assert parse_error_code("0x80004005") == "0x80004005"
        assert parse_error_code(" 0x8007000e ") == "0x8007000e"

    def test_missing_or_malformed(self):
        assert parse_error_code(None) is None
        assert parse_error_code("") is None
        assert parse_error_code("oops") is None
        assert parse_error_code("8007000E") is None


class TestParseStepLine:
    def test_success_line(self):
        line = '<![STEP[Success]STEP]!> date="01-02-2024" time="03:04:05.006" message="Step A"'
        assert parse_step_line(line) == LogEvent(
            kind=StepKind.SUCCESS,
            timestamp=datetime(2024, 1, 2, 3, 4, 5, 6000),
            message="Step A",
        )

    def test_marker_at_offset(self):
        line = 'TSManager 4321 <![STEP[Warning]STEP]!> date="01-02-2024" time="03:04:05.006" message="w"'
        ev = parse_step_line(line)
        assert ev is not None
        assert ev.kind is StepKind.WARNING

    def test_error_with_code(self):
        line = ('<![STEP[Error]STEP]!> date="01-02-2024" time="03:04:05.006" '
                'message="Install failed" code="80004005"')
        ev = parse_step_line(line)
        assert ev.kind is StepKind.ERROR
        assert ev.error_code == "80004005"

    def test_error_without_code(self):
        line = '<![STEP[Error]STEP]!> date="01-02-2024" time="03:04:05.006" message="Install failed"'
        ev = parse_step_line(line)
        assert ev.kind is StepKind.ERROR
        assert ev.error_code is None

    def test_malformed_code_keeps_event(self):
        line = ('<![STEP[Error]STEP]!> date="01-02-2024" time="03:04:05.006" '
                'message="Install failed" code="n/a"')
        ev = parse_step_line(line)
        assert ev is not None
        assert ev.error_code is None

    def test_code_ignored_for_success(self):
        line = ('<![STEP[Success]STEP]!> date="01-02-2024" time="03:04:05.006" '
                'message="ok" code="1"')
        assert parse_step_line(line).error_code is None

    def test_empty_message(self):
        line = '<![STEP[Success]STEP]!> date="01-02-2024" time="03:04:05.006" message=""'
        assert parse_step_line(line).message == ""

    def test_unknown_label(self):
        line = '<![STEP[Info]STEP]!> date="01-02-2024" time="03:04:05.006" message="x"'
        assert parse_step_line(line) is None

    def test_no_marker(self):
        assert parse_step_line("Success 01-02-2024 03:04:05.006 Step A") is None


class TestExtract:
    def test_empty_text(self):
        assert extract("") == []

    def test_skips_bad_lines(self, demo_text):
        events = extract(demo_text)
        assert len(events) == 9
        assert all(isinstance(ev, LogEvent) for ev in events)

    def test_invalid_date_dropped(self, step_line):
        text = "\n".join([
            '<![STEP[Success]STEP]!> date="13-40-2024" time="03:04:05.006" message="bad"',
            step_line("Success", datetime(2024, 1, 2, 3, 4, 5), "good"),
        ])
        events = extract(text)
        assert [ev.message for ev in events] == ["good"]

    def test_keeps_file_order(self, step_line):
        text = "\n".join([
            step_line("Success", datetime(2024, 1, 2, 3, 5, 0), "later"),
            step_line("Error", datetime(2024, 1, 2, 3, 4, 0), "earlier"),
        ])
        assert [ev.message for ev in extract(text)] == ["later", "earlier"]

    def test_windows_line_endings(self, step_line):
        text = step_line("Success", datetime(2024, 1, 2, 3, 4, 5), "a") + "\r\n"
        text += step_line("Warning", datetime(2024, 1, 2, 3, 4, 6), "b") + "\r\n"
        assert len(extract(text)) == 2


class TestAwkwardLines:
    def test_quoted_message_keeps_code(self):
        line = ('<![STEP[Error]STEP]!> date="01-02-2024" time="03:04:05.006" '
                'message="Install "Office 365" failed" code="80004005"')
        ev = parse_step_line(line)
        assert ev.message == 'Install "Office 365" failed'
        assert ev.error_code == "80004005"

    def test_message_with_code_like_text(self):
        line = ('<![STEP[Error]STEP]!> date="01-02-2024" time="03:04:05.006" '
                'message="see code="1" in log" code="2"')
        ev = parse_step_line(line)
        assert ev.message == 'see code="1" in log'
        assert ev.error_code == "2"

    def test_truncated_code_drops_line(self):
        line = ('<![STEP[Error]STEP]!> date="01-02-2024" time="03:04:05.006" '
                'message="Copy logs" code="8000')
        assert parse_step_line(line) is None

    def test_trailing_whitespace(self):
        line = '<![STEP[Success]STEP]!> date="01-02-2024" time="03:04:05.006" message="ok"   '
        assert parse_step_line(line).message == "ok"

    def test_formatted_lines_parse_back(self):
        ts = datetime(2024, 1, 2, 3, 4, 5, 6000)
        messages = [
            'Install "Office 365" failed',
            "a;b;c",
            'ends with quote"',
            "",
            "<tag> & 'single'",
        ]
        for message in messages:
            ev = parse_step_line(format_step_line("Error", ts, message, "0x80004005"))
            assert ev.message == message
            assert ev.error_code == "0x80004005"

    def test_multiline_message_flattened(self):
        ts = datetime(2024, 1, 2, 3, 4, 5)
        events = extract(format_step_line("Warning", ts, "first\nsecond"))
        assert [ev.message for ev in events] == ["first second"]

    def test_mixed_code_formats_stay_distinct(self):
        ts = datetime(2024, 1, 2, 3, 4, 5)
        text = "\n".join(
            format_step_line("Error", ts, f"step {i}", code)
            for i, code in enumerate(["10", "0x10", "-2147467259", "10"])
        )
        result = analyze_text(text)
        assert result.failure_count == 4
        assert result.error_codes == frozenset({"10", "0x10", "-2147467259"})
