from datetime import datetime, timedelta

# Monday, shortly after noon, shop-local
NOW = datetime(2026, 10, 19, 12, 10)
TODAY = NOW.date()
TOMORROW = TODAY + timedelta(days=1)

UV = "UV Graphene Ceramic Coating"
POWDER = "Powder Coating"
VIP = "Moto/Oto VIP"
SPA = "Full Moto/Oto SPA"
INTERIOR = "Modernized Interior Detailing"
ENGINE = "Modernized Engine Detailing"


def fixed_clock() -> datetime:
    return NOW
