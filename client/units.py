"""Memory size helpers. Backend figures are reported in KiB."""


def kib(n: float) -> float:
    return n / 1024


def mib(n: float) -> float:
    return kib(n) / 1024


def gib(n: float) -> float:
    return mib(n) / 1024


SCALE = [" KiB", " MiB", " GiB", " TiB"]


def memory_unit_from_k(n: float) -> str:
    """
    Human readable size for a value given in KiB.

    Example: memory_unit_from_k(2048) -> "2.000 MiB"
    """
    if not n:
        return "0 KiB"
    scale = 0
    while n > 1024 and scale < len(SCALE) - 1:
        n /= 1024
        scale += 1
    return f"{n:.3f}{SCALE[scale]}"
