"""Tests for status line parsing and multi-line classification."""

import pytest

from nntpclient import NNTPProtocolError, NNTPStatus, Response, is_multiline, parse_status_line


class TestParseStatusLine:
    def test_simple(self):
        response = parse_status_line("200 news.example.com ready")
        assert response == Response(200, "news.example.com ready")
        assert response.lines == ()

    def test_trailing_crlf_is_trimmed(self):
        response = parse_status_line("211 5 100 104 alt.test\r\n")
        assert response.status == 211
        assert response.message == "5 100 104 alt.test"

    @pytest.mark.parametrize("status", [100, 199, 381, 411, 599])
    def test_valid_codes_round_trip_message(self, status):
        response = parse_status_line(f"{status} some message")
        assert response.status == status
        assert response.message == "some message"

    @pytest.mark.parametrize(
        "line",
        ["", "ok", "20 short", "2000 long", "abc message", "200", "200\tok", "x200 ok"],
    )
    def test_malformed_raises(self, line):
        with pytest.raises(NNTPProtocolError):
            parse_status_line(line)

    @pytest.mark.parametrize("line", ["099 too low", "600 too high", "000 zero"])
    def test_out_of_range_raises(self, line):
        with pytest.raises(NNTPProtocolError):
            parse_status_line(line)


class TestIsMultiline:
    @pytest.mark.parametrize(
        "status",
        [
            NNTPStatus.MULTILINE_FOLLOWS,
            NNTPStatus.ARTICLE_RETRIEVED,
            NNTPStatus.OVERVIEW_FOLLOWS,
            NNTPStatus.GROUP_SELECTED,
            101,
        ],
    )
    def test_multiline(self, status):
        assert is_multiline(status)

    @pytest.mark.parametrize("status", [200, 201, 381, 411, 430, 501, 999])
    def test_single_line(self, status):
        assert not is_multiline(status)
