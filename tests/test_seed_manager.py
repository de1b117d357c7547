"""Tests for mnemonic generation and validation."""

import pytest

from exceptions import InvalidSeedError, SeedErrorReason
from models import SeedPhrase
from seed_manager import (
    MNEMONIC_GEN,
    generate_seed_phrase,
    mnemonic_to_seed,
    validate_seed_phrase,
)

CANONICAL = "abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon about"
VALID_12 = "abandon abandon atom trust ankle walnut oil across awake bunker divorce abstract"
BAD_CHECKSUM_12 = "abandon abandon atom trust ankle walnut oil across awake bunker divorce oil"


class TestGenerate:
    """Tests for generate_seed_phrase()."""

    def test_default_is_12_words(self) -> None:
        """Test default phrase length."""
        seed = generate_seed_phrase()
        assert seed.word_count == 12
        assert all(word in MNEMONIC_GEN.wordlist for word in seed.words)

    def test_24_words(self) -> None:
        """Test 256-bit entropy yields 24 words."""
        seed = generate_seed_phrase(24)
        assert len(seed) == 24

    def test_unsupported_length(self) -> None:
        """Test only 12 and 24 are accepted."""
        with pytest.raises(ValueError, match="12/24"):
            generate_seed_phrase(15)

    def test_generated_phrase_always_validates(self) -> None:
        """Test a freshly generated phrase passes validation."""
        for words in (12, 24) * 10:
            seed = generate_seed_phrase(words)
            assert validate_seed_phrase(str(seed)) == seed

    def test_generated_phrases_differ(self) -> None:
        """Test generation draws fresh entropy."""
        assert generate_seed_phrase() != generate_seed_phrase()


class TestValidate:
    """Tests for validate_seed_phrase()."""

    def test_canonical_phrase(self) -> None:
        """Test the all-zero-entropy test phrase."""
        seed = validate_seed_phrase(CANONICAL)
        assert isinstance(seed, SeedPhrase)
        assert str(seed) == CANONICAL

    def test_whitespace_and_case_normalized(self) -> None:
        """Test irregular whitespace and capitals are accepted."""
        messy = "  Abandon\tabandon  ATOM trust\nankle walnut oil across awake bunker divorce abstract "
        assert str(validate_seed_phrase(messy)) == VALID_12

    @pytest.mark.parametrize("count", [0, 1, 11, 13, 15, 18, 21, 25])
    def test_wrong_word_count(self, count: int) -> None:
        """Test lengths other than 12 or 24 are rejected."""
        candidate = " ".join(["abandon"] * count)
        with pytest.raises(InvalidSeedError) as exc_info:
            validate_seed_phrase(candidate)
        assert exc_info.value.reason == SeedErrorReason.WORD_COUNT

    def test_unknown_word(self) -> None:
        """Test words outside the list are reported by position only."""
        assert "qwerty" not in MNEMONIC_GEN.wordlist
        candidate = CANONICAL.replace("about", "qwerty")
        with pytest.raises(InvalidSeedError) as exc_info:
            validate_seed_phrase(candidate)
        err = exc_info.value
        assert err.reason == SeedErrorReason.UNKNOWN_WORD
        assert err.positions == (12,)
        assert "qwerty" not in str(err)

    def test_multiple_unknown_words(self) -> None:
        """Test every unknown position is listed."""
        words = CANONICAL.split()
        words[0] = "zzzz"
        words[5] = "qwerty"
        assert not {"zzzz", "qwerty"} & set(MNEMONIC_GEN.wordlist)
        with pytest.raises(InvalidSeedError) as exc_info:
            validate_seed_phrase(" ".join(words))
        assert exc_info.value.positions == (1, 6)

    def test_bad_checksum(self) -> None:
        """Test a wrong last word fails the checksum."""
        with pytest.raises(InvalidSeedError) as exc_info:
            validate_seed_phrase(BAD_CHECKSUM_12)
        assert exc_info.value.reason == SeedErrorReason.CHECKSUM

    def test_twelve_abandons_fail_checksum(self) -> None:
        """Test all-zero entropy requires 'about' as the last word."""
        with pytest.raises(InvalidSeedError) as exc_info:
            validate_seed_phrase(" ".join(["abandon"] * 12))
        assert exc_info.value.reason == SeedErrorReason.CHECKSUM

    def test_valid_24_words(self) -> None:
        """Test the 24-word all-zero-entropy phrase."""
        phrase = " ".join(["abandon"] * 23 + ["art"])
        assert validate_seed_phrase(phrase).word_count == 24


class TestSeedPhrase:
    """Tests for the SeedPhrase value."""

    def test_repr_hides_words(self) -> None:
        """Test repr never leaks the mnemonic."""
        seed = validate_seed_phrase(VALID_12)
        assert "walnut" not in repr(seed)

    def test_is_immutable(self) -> None:
        """Test the phrase cannot be reassigned."""
        seed = validate_seed_phrase(VALID_12)
        with pytest.raises(AttributeError):
            seed.words = ()  # type: ignore[misc]


class TestMnemonicToSeed:
    """Tests for BIP39 seed expansion (trezor vectors)."""

    def test_without_passphrase(self) -> None:
        """Test the canonical phrase with no passphrase."""
        seed = mnemonic_to_seed(validate_seed_phrase(CANONICAL))
        assert seed.hex() == (
            "5eb00bbddcf069084889a8ab9155568165f5c453ccb85e70811aaed6f6da5fc1"
            "9a5ac40b389cd370d086206dec8aa6c43daea6690f20ad3d8d48b2d2ce9e38e4"
        )

    def test_with_trezor_passphrase(self) -> None:
        """Test the published vector with passphrase TREZOR."""
        seed = mnemonic_to_seed(validate_seed_phrase(CANONICAL), "TREZOR")
        assert seed.hex() == (
            "c55257c360c07c72029aebc1b53c05ed0362ada38ead3e3e9efa3708e5349553"
            "1f09a6987599d18264c1e1c92f2cf141630c7a3c4ab7c81b2f001698e7463b04"
        )
