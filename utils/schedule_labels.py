DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

MORNING_PERIOD = 0
NIGHT_PERIOD = 7


def get_day_name(day_of_week: int) -> str:
    if 0 <= day_of_week < len(DAY_NAMES):
        return DAY_NAMES[day_of_week]
    return f"Day {day_of_week}"


def get_period_label(period: int) -> str:
    if period == MORNING_PERIOD:
        return "Morning"
    if period == NIGHT_PERIOD:
        return "Night"
    return f"Period {period}"


def get_period_short_label(period: int) -> str:
    # 그리드처럼 헤더에 "Period"가 이미 있는 화면용
    if period == MORNING_PERIOD:
        return "Morning"
    if period == NIGHT_PERIOD:
        return "Night"
    return str(period)


def describe_slot(day_of_week: int, period: int) -> str:
    """예: "Monday Period 3" """
    return f"{get_day_name(day_of_week)} {get_period_label(period)}"
