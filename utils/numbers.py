from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value: float, digits: int = 0) -> float:
    """
    사사오입 반올림 (파이썬 round()는 은행가 반올림이라 89.25 → 89.2 가 됨)
    - round_half_up(89.25, 1) → 89.3
    - round_half_up(2.5) → 3.0
    """
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
