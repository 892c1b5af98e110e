"""
Simulated market data
Baseline figures per city plus bounded random trends, used for market
reports and as context for value forecasts
"""

import random
from datetime import datetime
from typing import Optional

from ..models import Neighborhood, Property

CITY_BASELINES = {
    "seattle": {
        "medianPrice": 850000,
        "averagePricePerSqFt": 525,
        "inventoryCount": 1250,
        "averageDaysOnMarket": 18,
    },
    "bellevue": {
        "medianPrice": 1250000,
        "averagePricePerSqFt": 680,
        "inventoryCount": 420,
        "averageDaysOnMarket": 15,
    },
    "redmond": {
        "medianPrice": 980000,
        "averagePricePerSqFt": 550,
        "inventoryCount": 320,
        "averageDaysOnMarket": 17,
    },
    "kirkland": {
        "medianPrice": 1050000,
        "averagePricePerSqFt": 590,
        "inventoryCount": 280,
        "averageDaysOnMarket": 16,
    },
}

DEFAULT_BASELINE = {
    "medianPrice": 750000,
    "averagePricePerSqFt": 450,
    "inventoryCount": 500,
    "averageDaysOnMarket": 22,
}

INVESTMENT_RATINGS = ("A", "A-", "B+", "B", "B-")


def get_city_baseline(location: str) -> dict:
    """First known city contained in the location, else the default figures"""
    lowered = location.lower()
    for city, baseline in CITY_BASELINES.items():
        if city in lowered:
            return dict(baseline)
    return dict(DEFAULT_BASELINE)


def _months_back(now: datetime, months: int) -> datetime:
    total = now.year * 12 + (now.month - 1) - months
    return now.replace(year=total // 12, month=total % 12 + 1, day=1)


def _one_decimal(value: float) -> float:
    return round(value * 10) / 10


def generate_market_trends(location: str, now: Optional[datetime] = None) -> dict:
    now = now or datetime.utcnow()
    baseline = get_city_baseline(location)

    monthly_trends = []
    for i in range(11, -1, -1):
        fluctuation = 1 + (random.random() * 0.04 - 0.02)
        trend_factor = 1 + 0.005 * (12 - i)
        monthly_trends.append(
            {
                "month": _months_back(now, i).strftime("%b %Y"),
                "medianPrice": round(baseline["medianPrice"] / trend_factor * fluctuation),
                "inventory": round(baseline["inventoryCount"] * (0.85 + random.random() * 0.3)),
                "daysOnMarket": round(
                    baseline["averageDaysOnMarket"] * (0.9 + random.random() * 0.2)
                ),
                "pricePerSqFt": round(
                    baseline["averagePricePerSqFt"] / trend_factor * fluctuation
                ),
            }
        )

    yearly_trends = []
    for i in range(4, -1, -1):
        appreciation = 1.04 + random.random() * 0.02
        yearly_trends.append(
            {
                "year": now.year - i,
                "medianPrice": round(baseline["medianPrice"] / appreciation**i),
                "appreciation": 0 if i == 0 else _one_decimal((appreciation - 1) * 100),
                "inventory": round(baseline["inventoryCount"] * (0.85 + i * 0.03)),
                "affordabilityIndex": _one_decimal(5.5 - i * 0.15),
            }
        )

    forecast = {
        "oneYear": {
            "priceGrowth": _one_decimal(3 + random.random() * 3),
            "inventoryChange": _one_decimal(-5 + random.random() * 10),
            "daysOnMarketChange": _one_decimal(-10 + random.random() * 20),
            "confidenceScore": _one_decimal(6.5 + random.random() * 2.5),
        },
        "fiveYear": {
            "priceGrowth": _one_decimal(15 + random.random() * 10),
            "hotness": _one_decimal(1 + random.random() * 9),
            "investmentRating": random.choice(INVESTMENT_RATINGS),
        },
    }

    return {
        "location": location,
        "timestamp": now.isoformat() + "Z",
        **baseline,
        "monthlyTrends": monthly_trends,
        "yearlyTrends": yearly_trends,
        "forecast": forecast,
    }


def build_value_market_context(
    prop: Property,
    neighborhood: Optional[Neighborhood],
    comparables: list[Property],
    now: Optional[datetime] = None,
) -> dict:
    """Market inputs handed to the value forecast"""
    current_year = (now or datetime.utcnow()).year
    city_trends = [
        {"year": current_year - i, "growth": 0.04 + (random.random() * 0.02 - 0.01)}
        for i in range(5, -1, -1)
    ]

    neighborhood_scores = None
    if neighborhood is not None:
        neighborhood_scores = {
            "safety": neighborhood.safety_score,
            "schools": neighborhood.school_score,
            "amenities": neighborhood.overall_score,
            "transport": neighborhood.transit_score,
        }

    return {
        "cityTrends": city_trends,
        "neighborhoodScores": neighborhood_scores,
        "comparableProperties": [
            {
                "price": p.price,
                "squareFeet": p.square_feet,
                "bedrooms": p.bedrooms,
                "bathrooms": p.bathrooms,
                "yearBuilt": p.year_built,
            }
            for p in comparables
            if p.id != prop.id
        ],
        "economicIndicators": {
            "interestRate": 4.5 + (random.random() * 0.5 - 0.25),
            "unemploymentRate": 3.5 + random.random(),
            "gdpGrowth": 2.0 + random.random(),
        },
    }
