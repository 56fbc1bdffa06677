"""EAN-13 codes for color variants.

Codes are derived from the collection and color names plus a nanosecond
nonce, so two colors created with the same names still get distinct codes.
"""
import threading
import time

EAN_LENGTH = 13
BASE_LENGTH = 12

_nonce_lock = threading.Lock()
_last_nonce = 0


def _next_nonce():
    """Nanosecond clock, bumped so consecutive calls never repeat."""
    global _last_nonce
    with _nonce_lock:
        _last_nonce = max(time.time_ns(), _last_nonce + 1)
        return _last_nonce


def _to_digits(text):
    """Digits pass through, ASCII letters become their alphabet position."""
    out = []
    for char in text:
        if "0" <= char <= "9":
            out.append(char)
        elif char.isascii() and char.isalpha():
            out.append(str(ord(char.lower()) - ord("a") + 1))
    return "".join(out)


def ean_check_digit(base):
    """EAN-13 check digit over a 12-digit base."""
    total = 0
    for i, digit in enumerate(base):
        total += int(digit) * (3 if i % 2 else 1)
    return (10 - total % 10) % 10


def generate_ean(collection_name, variant_name, nonce=None):
    """Generate a 13-digit EAN for a color of a collection.

    Args:
        collection_name: display name of the owning collection
        variant_name: display name of the color
        nonce: defaults to a monotonic nanosecond clock; always contributes
            at least twelve digits, which keeps names without Latin letters
            valid

    Returns:
        13-character string of ASCII digits, last one the check digit
    """
    if nonce is None:
        nonce = _next_nonce()
    digits = _to_digits(f"{collection_name}{variant_name}{nonce}")

    # The tail keeps the nonce, which is what makes codes unique
    base = digits[-BASE_LENGTH:].rjust(BASE_LENGTH, "0")
    return f"{base}{ean_check_digit(base)}"


def is_valid_ean(code):
    if not isinstance(code, str) or len(code) != EAN_LENGTH:
        return False
    if not (code.isascii() and code.isdigit()):
        return False
    return ean_check_digit(code[:BASE_LENGTH]) == int(code[-1])
