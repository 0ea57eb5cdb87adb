"""Tests for themeselector.core.handshake."""

import pytest

from themeselector.core.handshake import (
    HandshakeParser,
    NeedsSub,
    NeedsWorkshop,
    Terminal,
    classify_payload,
    split_lines,
)


class TestSplitLines:
    def test_trims_and_drops_blank_lines(self):
        assert split_lines("  one \r\n\n two\n   \n") == ["one", "two"]

    def test_empty_chunk(self):
        assert split_lines("") == []


class TestClassifyPayload:
    def test_needs_sub(self):
        assert classify_payload({"needs_sub": True, "theme": "nord"}) == NeedsSub(theme="nord")

    def test_needs_workshop_requires_id(self):
        assert classify_payload({"needs_workshop": True, "theme": "nord"}) is None

    def test_needs_workshop_numeric_id(self):
        message = classify_payload({"needs_workshop": True, "workshop_id": 123, "theme": "t", "sub": "s"})
        assert message == NeedsWorkshop(theme="t", sub="s", asset_id="123")

    def test_falsy_flag_is_not_control(self):
        assert classify_payload({"needs_sub": False, "theme": "nord"}) is None

    def test_non_dict(self):
        assert classify_payload([1, 2, 3]) is None


class TestHandshakeParser:
    def test_no_brace_returns_none(self):
        parser = HandshakeParser()
        assert parser.feed("applying theme...\n") is None
        assert parser.resolved is False

    def test_json_after_log_lines(self):
        parser = HandshakeParser()
        text = 'Loading manifest\nChecking wallpaper\n{"needs_sub": true, "theme": "catppuccin"}\n'
        assert parser.feed(text) == NeedsSub(theme="catppuccin")
        assert parser.resolved is True

    def test_split_chunks_classify_on_second(self):
        parser = HandshakeParser()
        chunks = ['prefix text {"need', 's_workshop":true,"workshop_id":"123"}']
        accumulated = chunks[0]
        assert parser.feed(accumulated) is None
        assert parser.resolved is False
        accumulated += chunks[1]
        message = parser.feed(accumulated)
        assert isinstance(message, NeedsWorkshop)
        assert message.asset_id == "123"
        assert message.theme == ""
        assert message.sub is None

    def test_trailing_output_after_json(self):
        parser = HandshakeParser()
        text = '{"needs_sub": true, "theme": "nord"}\nstill talking {"x": 1}\n'
        assert parser.feed(text) == NeedsSub(theme="nord")

    def test_non_control_json_falls_through(self):
        parser = HandshakeParser()
        assert parser.feed('{"progress": 50}\n') is None
        assert parser.resolved is False

    def test_control_json_after_non_control_json(self):
        parser = HandshakeParser()
        text = '{"progress": 50}\n{"needs_sub": true, "theme": "nord"}'
        assert parser.feed(text) == NeedsSub(theme="nord")

    def test_stray_brace_in_log_does_not_block(self):
        parser = HandshakeParser()
        text = 'config {broken\n{"needs_sub": true, "theme": "nord"}'
        assert parser.feed(text) == NeedsSub(theme="nord")

    def test_resolves_once(self):
        parser = HandshakeParser()
        text = '{"needs_sub": true, "theme": "nord"}'
        assert parser.feed(text) is not None
        assert parser.feed(text) is None
        assert parser.feed(text + '{"needs_workshop": true, "workshop_id": "9"}') is None
        assert parser.message == NeedsSub(theme="nord")

    def test_finish_success(self):
        parser = HandshakeParser()
        assert parser.finish(0, "done\n") == Terminal(success=True, output="done\n")

    def test_finish_failure_uses_stderr(self):
        parser = HandshakeParser()
        assert parser.finish(2, "", "boom\n") == Terminal(success=False, output="boom")

    def test_finish_failure_without_stderr(self):
        parser = HandshakeParser()
        assert parser.finish(5, "", "").output == "process exited 5"

    def test_finish_after_classification_is_noop(self):
        parser = HandshakeParser()
        parser.feed('{"needs_sub": true, "theme": "nord"}')
        assert parser.finish(0, "") is None


class TestMessages:
    def test_workshop_url_defaults_to_steam(self):
        message = NeedsWorkshop(theme="t", sub="s", asset_id="42")
        assert message.workshop_url.endswith("?id=42")

    def test_workshop_url_prefers_link(self):
        message = NeedsWorkshop(theme="t", sub="s", asset_id="42", link="https://example.test/42")
        assert message.workshop_url == "https://example.test/42"

    @pytest.mark.parametrize(
        "message, kind",
        [
            (NeedsSub(theme="t"), "needs_sub"),
            (NeedsWorkshop(theme="t", sub=None, asset_id="1"), "needs_workshop"),
            (Terminal(success=True, output=""), "terminal"),
        ],
    )
    def test_kinds(self, message, kind):
        assert message.kind == kind

    def test_workshop_to_dict(self):
        message = NeedsWorkshop(theme="t", sub="s", asset_id="1")
        assert message.to_dict() == {
            "needs_workshop": True,
            "workshop_id": "1",
            "theme": "t",
            "sub": "s",
        }
