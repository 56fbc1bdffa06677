"""Tests for EAN-13 generation."""
import pytest

from app.services.ean import ean_check_digit, generate_ean, is_valid_ean


def test_check_digit_matches_published_example():
    assert ean_check_digit("400638133393") == 1
    assert is_valid_ean("4006381333931")


def test_letters_become_alphabet_positions():
    # Azur -> 1 26 21 18, Sky -> 19 11 25, nonce 7; last twelve digits kept
    assert generate_ean("Azur", "Sky", nonce=7) == "6211819112578"


def test_case_is_ignored():
    assert generate_ean("AZUR", "sky", nonce=7) == generate_ean("azur", "SKY", nonce=7)


def test_non_latin_names_are_left_padded():
    assert generate_ean("ملحفة", "أزرق", nonce=123) == "0000000001236"


def test_generated_code_is_valid():
    code = generate_ean("Diana", "Rose 2")
    assert len(code) == 13
    assert code.isdigit()
    assert is_valid_ean(code)


def test_same_names_give_distinct_codes():
    codes = {generate_ean("Azur", "Sky") for _ in range(200)}
    assert len(codes) == 200


@pytest.mark.parametrize(
    "code",
    [None, 4006381333931, "", "400638133393", "40063813339310", "400638133393X", "4006381333932"],
)
def test_invalid_codes(code):
    assert not is_valid_ean(code)
