"""Integer helpers: greatest common divisor and prime limits."""


def gcd(a: int, b: int) -> int:
    """Greatest common divisor by Euclid's algorithm.

    gcd(a, 0) is a.
    """
    while b:
        a, b = b, a % b
    return a


def prime_limit(n: int) -> int:
    """Return the largest prime factor of n (1 for n == 1).

    Args:
        n: Positive integer

    Returns:
        The prime limit of n

    Examples:
        >>> prime_limit(12)
        3
        >>> prime_limit(35)
        7
    """
    if n <= 0:
        raise ValueError(f"Prime limit is defined for positive integers, got {n}")
    if n == 1:
        return 1

    limit = 1
    remaining = n
    d = 2
    while d * d <= remaining:
        while remaining % d == 0:
            limit = max(limit, d)
            remaining //= d
        d += 1
    # Whatever is left above sqrt is itself prime
    if remaining > 1:
        limit = max(limit, remaining)
    return limit


def ratio_limit(n: int, d: int) -> int:
    """Prime limit of the ratio n/d (largest prime in either term)."""
    return max(prime_limit(n), prime_limit(d))
