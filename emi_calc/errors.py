"""Exceptions raised by the EMI calculator."""


class InvalidInput(ValueError):
    """Raised for malformed input such as ``None``, NaN or non-numeric text.

    Zero and negative amounts are not malformed: the engine answers them with
    degenerate results instead of raising.
    """
