"""Luhn (mod 10) checksum."""


def _luhn_sum(digits: str, double_first: bool) -> int:
    total = 0
    double = double_first
    # Right to left
    for char in reversed(digits):
        digit = ord(char) - 48
        if double:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
        double = not double
    return total


def _is_ascii_digits(value: str) -> bool:
    return value.isascii() and value.isdigit()


def luhn_check_digit(payload: str) -> int:
    """Compute the check digit to append to ``payload``.

    Doubling starts at the rightmost payload digit, which becomes the second
    digit from the right once the check digit is appended.

    Parameters
    ----------
    payload : str
        Digits without the check digit.

    Returns
    -------
    int
        Check digit in ``0..9``.

    Raises
    ------
    ValueError
        If ``payload`` is empty or contains non-digit characters.
    """
    if not _is_ascii_digits(payload):
        raise ValueError(f"Luhn payload must be a non-empty digit string: {payload!r}")
    return (10 - _luhn_sum(payload, double_first=True) % 10) % 10


def luhn_is_valid(number: str) -> bool:
    """Return True if ``number`` (check digit included) passes the Luhn test."""
    if len(number) < 2 or not _is_ascii_digits(number):
        return False
    return _luhn_sum(number, double_first=False) % 10 == 0
