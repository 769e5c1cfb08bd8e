"""Unit tests for name_normalizer utility.

Test Strategy:
1. Test suffix removal (Jr, Sr, II, III, IV)
2. Test punctuation normalization (A.J. → AJ)
3. Test accent removal
4. Test display-name cleanup of play-text leftovers
5. Test loose player matching (T.Brady vs Tom Brady)
6. Test fuzzy matching against roster keys
7. Test edge cases (empty strings, None, already normalized names)

Each test follows the pattern:
- Given: An input name with specific issues
- When: the helper is called
- Then: Output matches expected form
"""
import pytest

from pbp_grader.services.utils.name_normalizer import (
    canon_name,
    clean_player_display_name,
    fuzzy_best_match,
    last_name,
    name_mentioned_in,
    normalize,
    same_player_loose,
)


class TestNameNormalizer:
    """Test suite for exact-key name normalization."""

    # Suffix Removal Tests
    # ─────────────────────────────────────────────────────────────

    def test_removes_jr_suffix(self):
        """Should remove 'Jr' suffix from player names."""
        assert normalize("Travis Etienne Jr.") == "travis etienne"
        assert normalize("Odell Beckham Jr") == "odell beckham"

    def test_removes_roman_numerals(self):
        """Should remove Roman numeral suffixes (II, III, IV)."""
        assert normalize("Kenneth Walker III") == "kenneth walker"
        assert normalize("Michael Pittman II") == "michael pittman"
        assert normalize("John Smith IV") == "john smith"

    def test_removes_only_last_suffix(self):
        """Normalizer removes one trailing suffix only."""
        assert normalize("Player Jr. III") == "player jr"

    # Punctuation Normalization Tests
    # ─────────────────────────────────────────────────────────────

    def test_removes_periods_between_initials(self):
        """Should convert 'A.J.' to 'AJ'."""
        assert normalize("A.J. Brown") == "aj brown"
        assert normalize("D.K. Metcalf") == "dk metcalf"

    def test_removes_all_punctuation(self):
        """Should remove apostrophes and hyphens."""
        assert normalize("D'Andre Swift") == "dandre swift"
        assert normalize("Amon-Ra St. Brown") == "amonra st brown"

    # Accent Removal Tests
    # ─────────────────────────────────────────────────────────────

    def test_removes_accents(self):
        """Should remove diacritical marks from names."""
        assert normalize("Zoë Pérez") == "zoe perez"

    # Whitespace Tests
    # ─────────────────────────────────────────────────────────────

    def test_trims_and_collapses_whitespace(self):
        assert normalize("  Derrick   Henry ") == "derrick henry"
        assert normalize("\tMac Jones\n") == "mac jones"

    # Edge Cases
    # ─────────────────────────────────────────────────────────────

    def test_handles_empty_and_none(self):
        assert normalize("") == ""
        assert normalize(None) == ""

    def test_handles_special_characters_only(self):
        assert normalize("' . -") == ""

    def test_idempotent_on_normalized_names(self):
        """Should return same result when called twice on same input."""
        first = normalize("A.J. Brown Jr.")
        assert normalize(first) == first


class TestDisplayNames:
    """Cleanup of names lifted out of play text."""

    @pytest.mark.parametrize("text, expected", [
        ("R.Gronkowski for 12 yards", "R.Gronkowski"),
        ("Derrick Henry (kick failed)", "Derrick Henry"),
        ("Mac Jones, touchdown", "Mac Jones"),
        ("Kevin Byard at NE-30", "Kevin Byard"),
        ("Hunter Henry to", "Hunter Henry"),
        ("Kyle Dugger - returned", "Kyle Dugger"),
        (None, ""),
    ])
    def test_clean_player_display_name(self, text, expected):
        assert clean_player_display_name(text) == expected

    @pytest.mark.parametrize("text, expected", [
        ("T.Brady", "t brady"),
        ("T. Brady", "t brady"),
        ("Rhamondre Stevenson (2 pt conversion)", "rhamondre stevenson"),
        ("Kenneth Walker III", "kenneth walker"),
        ("Amon-Ra St. Brown", "amonra st brown"),
        ("", ""),
    ])
    def test_canon_name(self, text, expected):
        assert canon_name(text) == expected

    def test_last_name(self):
        assert last_name("T.Brady") == "brady"
        assert last_name("Travis Etienne Jr.") == "etienne"
        assert last_name(None) == ""


class TestLooseMatching:
    """Same last name plus same first initial."""

    @pytest.mark.parametrize("a, b", [
        ("T.Brady", "Tom Brady"),
        ("T. Brady", "Tom Brady"),
        ("Tom Brady", "tom brady jr."),
        ("T.Burks", "Treylon Burks"),
    ])
    def test_matches(self, a, b):
        assert same_player_loose(a, b) is True
        assert same_player_loose(b, a) is True

    @pytest.mark.parametrize("a, b", [
        ("Tom Brady", "Kyle Brady"),
        ("Derrick Henry", "Hunter Henry"),
        ("Mac Jones", "Daniel Jones"),
        ("", "Tom Brady"),
        (None, None),
    ])
    def test_non_matches(self, a, b):
        assert same_player_loose(a, b) is False

    def test_name_mentioned_in(self):
        text = "Mac Jones pass complete to Hunter Henry for 72 yards, touchdown"

        assert name_mentioned_in(text, "Hunter Henry") is True
        assert name_mentioned_in(text, "H.Henry") is True
        assert name_mentioned_in(text, "Treylon Burks") is False
        assert name_mentioned_in(text, "") is False
        assert name_mentioned_in(None, "Hunter Henry") is False

    def test_whole_word_only(self):
        assert name_mentioned_in("Ryan Stonehouse punts", "Brandon Stone") is False


class TestFuzzyMatching:
    """RapidFuzz lookup over normalized roster keys."""

    ROSTER = ["kyle dugger", "kevin byard", "derrick henry", "hunter henry"]

    def test_typo_matches(self):
        assert fuzzy_best_match("Kyle Duger", self.ROSTER) == "kyle dugger"

    def test_exact_spelling_variant(self):
        assert fuzzy_best_match("Kevin Byard Jr.", self.ROSTER) == "kevin byard"

    def test_below_threshold(self):
        assert fuzzy_best_match("Somebody Else", self.ROSTER) is None

    def test_empty_inputs(self):
        assert fuzzy_best_match("", self.ROSTER) is None
        assert fuzzy_best_match("Kyle Dugger", []) is None
