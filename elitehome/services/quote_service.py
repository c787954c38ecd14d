# elitehome/services/quote_service.py

from elitehome.core.config import settings


def estimate_price(
    area: float,
    windows: int = 0,
    doors: int = 0,
    frames: int = 0,
    features: int = 0,
) -> float:
    """Linear estimate in NZD from floor area (m²) plus per-item extras."""
    total = (
        area * settings.PRICE_PER_SQM
        + windows * settings.PRICE_PER_WINDOW
        + doors * settings.PRICE_PER_DOOR
        + frames * settings.PRICE_PER_FRAME
        + features * settings.PRICE_PER_FEATURE
    )
    return round(total, 2)
