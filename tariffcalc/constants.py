from decimal import Decimal
from zoneinfo import ZoneInfo

MIN_YEAR = 2000
MAX_YEAR = 2100

PAISE_PER_RUPEE = Decimal("100")
PAISE = Decimal("0.01")

TIMELY_PAYMENT = "timely_payment"

TARIFF_CATEGORIES = ("RURAL_DOMESTIC", "URBAN_DOMESTIC")

IST_TZ = ZoneInfo("Asia/Kolkata")

MONTHS_EN = {
    1: "January",
    2: "February",
    3: "March",
    4: "April",
    5: "May",
    6: "June",
    7: "July",
    8: "August",
    9: "September",
    10: "October",
    11: "November",
    12: "December",
}


def format_period(year: int, month: int) -> str:
    return f"{MONTHS_EN.get(month, str(month))} {year}"
