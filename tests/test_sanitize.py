"""Tests for path segment sanitization."""

from audiovert.sanitize import sanitize_segment


class TestSanitizeSegment:
    def test_slashes_become_plus(self):
        assert sanitize_segment("AC/DC") == "AC+DC"
        assert sanitize_segment("a\\b") == "a+b"

    def test_colon_followed_by_space(self):
        assert sanitize_segment("Greatest Hits: Vol. 1") == "Greatest Hits - Vol. 1"

    def test_bare_colon(self):
        assert sanitize_segment("12:30") == "12-30"

    def test_drops_illegal_chars(self):
        assert sanitize_segment('Why? <Live> "Best" |Of|') == "Why Live Best Of"

    def test_star_becomes_dash(self):
        assert sanitize_segment("P*nk") == "P-nk"

    def test_collapses_whitespace(self):
        assert sanitize_segment("a   b\t\tc") == "a b c"

    def test_preserves_normal_names(self):
        assert sanitize_segment("Abbey Road (1969)") == "Abbey Road (1969)"

    def test_no_separators_survive(self):
        result = sanitize_segment("a/b:c\\d")
        assert "/" not in result
        assert ":" not in result
        assert "\\" not in result

    def test_dot_segments_are_neutralized(self):
        assert sanitize_segment("..") == "--"
        assert sanitize_segment(".") == "-"
        assert sanitize_segment(" .. ") == "--"
        assert sanitize_segment("") == "-"

    def test_dots_inside_names_kept(self):
        assert sanitize_segment("...And Justice for All") == "...And Justice for All"
