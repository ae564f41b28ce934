import math


def rounded_percentage(part: float, whole: float) -> int:
    """
    ``part / whole`` as a whole percentage, halves rounded up.

    An empty whole yields 0 instead of dividing by zero.
    """
    if whole <= 0:
        return 0
    return int(math.floor(100 * part / whole + 0.5))
