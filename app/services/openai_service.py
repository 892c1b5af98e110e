"""OpenAI service - recommendations, copywriting, value forecasts and transcription"""

import base64
import json
import logging
from collections import Counter
from datetime import datetime
from typing import Any, Optional

from openai import AsyncOpenAI

from ..config import OPENAI_API_KEY, OPENAI_MODEL, OPENAI_TRANSCRIPTION_MODEL
from ..models import Property, User
from .property_context import property_prompt_view, split_data_url

logger = logging.getLogger(__name__)

FALLBACK_RECOMMENDATION_REASON = (
    "This property may match your preferences based on your browsing history."
)
NO_SEARCH_DATA_INSIGHT = "Not enough search data to provide insights."
SEARCH_INSIGHT_FALLBACK = "Unable to analyze search patterns at this time."
FALLBACK_ANNUAL_GROWTH = 0.04

# Searches inside this many most-recent entries count double
RECENT_SEARCH_WINDOW = 5

RECOMMENDATION_SYSTEM_PROMPT = """You are an AI-powered real estate recommendation engine that helps users discover ideal properties based on their preferences and behavior patterns. Your recommendations should be personalized, insightful, and focus on why specific properties would be perfect matches for this particular user.

Prioritize these factors when making recommendations:
1. Properties that closely match the user's explicitly searched preferences (location, price range, beds/baths)
2. Properties with features the user has shown interest in through favorited properties
3. Properties that match the user's subscription tier expectations (premium properties for premium subscribers)
4. Properties that represent good value based on price per square foot
5. Properties with unique selling points that align with the user's search patterns"""


def _weighted_counts(values: list[tuple[Any, int]]) -> Counter:
    counts: Counter = Counter()
    for value, weight in values:
        counts[value] += weight
    return counts


def build_user_profile(
    user: User, search_history: list[dict], favorited_properties: list[Property]
) -> dict:
    """
    Summarize a user's behaviour for the recommendation prompt.

    search_history is ordered oldest to newest; the last five searches are
    weighted twice as heavily as older ones.
    """
    total = len(search_history)

    def weight(index: int) -> int:
        return 2 if index >= total - RECENT_SEARCH_WINDOW else 1

    price_ranges = [
        (s.get("minPrice") or 0, s.get("maxPrice") or 1_000_000_000)
        for s in search_history
        if s.get("minPrice") or s.get("maxPrice")
    ]
    price = None
    if price_ranges:
        price = {
            "min": sum(r[0] for r in price_ranges) / len(price_ranges),
            "max": sum(r[1] for r in price_ranges) / len(price_ranges),
        }

    locations = _weighted_counts(
        [(s["location"], weight(i)) for i, s in enumerate(search_history) if s.get("location")]
    )
    property_types = _weighted_counts(
        [
            (s["propertyType"], weight(i))
            for i, s in enumerate(search_history)
            if s.get("propertyType")
        ]
    )

    def weighted_average(key: str) -> Optional[float]:
        pairs = [
            (s[key], weight(i)) for i, s in enumerate(search_history) if s.get(key) is not None
        ]
        if not pairs:
            return None
        return sum(v * w for v, w in pairs) / sum(w for _, w in pairs)

    beds = weighted_average("beds")
    baths = weighted_average("baths")

    sqft_ranges = [
        (s.get("minSqft") or 0, s.get("maxSqft") or 10000)
        for s in search_history
        if s.get("minSqft") or s.get("maxSqft")
    ]
    square_feet = None
    if sqft_ranges:
        square_feet = {
            "min": sum(r[0] for r in sqft_ranges) / len(sqft_ranges),
            "max": sum(r[1] for r in sqft_ranges) / len(sqft_ranges),
        }

    feature_counts: Counter = Counter()
    for prop in favorited_properties:
        feature_counts.update(prop.features or [])

    priced = [p for p in favorited_properties if p.price and p.square_feet]
    avg_price_per_sqft = (
        sum(p.price / p.square_feet for p in priced) / len(priced) if priced else None
    )
    premium_favorites = sum(1 for p in favorited_properties if p.is_premium)

    recent_terms = []
    for search in search_history[-RECENT_SEARCH_WINDOW:]:
        for key in ("keyword", "location", "propertyType"):
            if search.get(key):
                recent_terms.append(search[key])

    return {
        "userId": user.id,
        "username": user.username,
        "fullName": user.full_name,
        "preferences": {
            "price": price,
            "locations": [loc for loc, _ in locations.most_common(3)] or None,
            "bedrooms": round(beds) if beds is not None else None,
            # Nearest half bathroom
            "bathrooms": round(baths * 2) / 2 if baths is not None else None,
            "squareFeet": square_feet,
            "propertyTypes": [t for t, _ in property_types.most_common(2)] or None,
            "features": [f for f, _ in feature_counts.most_common(5)] or None,
            "avgPricePerSqFt": avg_price_per_sqft,
            "premiumPreference": (
                "premium" if premium_favorites > len(favorited_properties) / 2 else "standard"
            ),
        },
        "activityInsights": {
            "favoritedCount": len(favorited_properties),
            "favoritedIds": [p.id for p in favorited_properties],
            "searchHistoryCount": total,
            "recentSearchTerms": recent_terms,
            "searchRecency": "active" if total else "inactive",
            "lastSearch": search_history[-1] if search_history else None,
        },
        "userProfile": {
            "subscriptionTier": user.subscription_tier,
            "role": user.role,
        },
    }


def fallback_value_prediction(prop: Property, years: int) -> dict:
    """Compound the listing price at a flat annual rate"""
    current_year = datetime.utcnow().year
    predictions = [
        {
            "year": current_year + i,
            "value": round(prop.price * (1 + FALLBACK_ANNUAL_GROWTH) ** i),
            "growthRate": FALLBACK_ANNUAL_GROWTH * 100,
        }
        for i in range(1, years + 1)
    ]
    return {
        "propertyId": prop.id,
        "currentValue": prop.price,
        "years": years,
        "predictions": predictions,
        "confidence": "low",
        "factors": ["Historical average appreciation for the area"],
        "summary": (
            f"Based on an average appreciation of {FALLBACK_ANNUAL_GROWTH * 100:.0f}% per year, "
            f"this property could be worth about ${predictions[-1]['value']:,} in {years} years."
        ),
        "source": "fallback",
    }


class OpenAIService:
    """Service for OpenAI API operations"""

    def __init__(self):
        self.model = OPENAI_MODEL
        self.client = None

        if not OPENAI_API_KEY:
            logger.warning("OPENAI_API_KEY not set; AI features will use fallbacks")
        else:
            try:
                self.client = AsyncOpenAI(api_key=OPENAI_API_KEY)
                logger.info(f"OpenAI client initialized (model={self.model})")
            except Exception as e:
                logger.error(f"Failed to initialize OpenAI client: {e}")
                self.client = None

    def is_available(self) -> bool:
        """Check if OpenAI client is available"""
        return self.client is not None

    async def _complete(self, messages: list[dict], json_mode: bool = False) -> str:
        kwargs = {"model": self.model, "messages": messages}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        response = await self.client.chat.completions.create(**kwargs)
        return response.choices[0].message.content or ""

    async def generate_property_recommendations(
        self,
        user: User,
        properties: list[Property],
        search_history: list[dict],
        favorited_properties: list[Property],
        limit: int = 5,
    ) -> list[dict]:
        """Returns [{'property': Property, 'reason': str}] of at most `limit` entries"""
        fallback = [
            {"property": p, "reason": FALLBACK_RECOMMENDATION_REASON} for p in properties[:limit]
        ]
        if not self.is_available() or not properties:
            return fallback

        try:
            profile = build_user_profile(user, search_history, favorited_properties)
            catalog = [property_prompt_view(p) for p in properties]
            user_prompt = (
                "I need property recommendations for a specific user based on their profile data "
                "and available properties.\n\n"
                f"USER PROFILE:\n{json.dumps(profile, indent=2, default=str)}\n\n"
                f"AVAILABLE PROPERTIES:\n{json.dumps(catalog, indent=2, default=str)}\n\n"
                f"Please recommend exactly {limit} properties that would be most suitable for this "
                "user. For each recommendation, provide the property ID and a brief but "
                "personalized reason (2-3 sentences) explaining why this property is an excellent "
                "match for this specific user.\n\n"
                'Format your response as a JSON object with a single "recommendations" array '
                'containing objects with "propertyId" (number) and "reason" (string) fields.'
            )
            content = await self._complete(
                [
                    {"role": "system", "content": RECOMMENDATION_SYSTEM_PROMPT},
                    {"role": "user", "content": user_prompt},
                ],
                json_mode=True,
            )
            by_id = {p.id: p for p in properties}
            results = []
            for rec in json.loads(content).get("recommendations", []):
                prop = by_id.get(rec.get("propertyId"))
                if prop is not None:
                    results.append({"property": prop, "reason": rec.get("reason") or ""})
            logger.info(f"✅ Generated {len(results)} AI recommendations for user {user.id}")
            return results[:limit]
        except Exception as e:
            logger.error(f"❌ Error generating recommendations: {e}")
            return fallback

    async def analyze_user_search_patterns(self, user: User, search_history: list[dict]) -> str:
        if not search_history:
            return NO_SEARCH_DATA_INSIGHT
        if not self.is_available():
            return SEARCH_INSIGHT_FALLBACK

        try:
            return await self._complete(
                [
                    {
                        "role": "system",
                        "content": "You are an analytical assistant that helps real estate "
                        "platforms understand user search patterns.",
                    },
                    {
                        "role": "user",
                        "content": "Analyze this user's search history and provide brief insights "
                        f"about their preferences: {json.dumps(search_history, default=str)}",
                    },
                ]
            )
        except Exception as e:
            logger.error(f"❌ Error analyzing search patterns for user {user.id}: {e}")
            return SEARCH_INSIGHT_FALLBACK

    async def generate_personalized_description(self, prop: Property, user: User) -> str:
        """Rewrite a listing description for one user; falls back to the original text"""
        if not self.is_available():
            return prop.description

        user_view = {
            "fullName": user.full_name,
            "role": user.role,
            "subscriptionTier": user.subscription_tier,
            "preferredLanguage": user.preferred_language,
        }
        try:
            content = await self._complete(
                [
                    {
                        "role": "system",
                        "content": "You are a real estate copywriter specializing in personalizing "
                        "property descriptions to match user preferences.",
                    },
                    {
                        "role": "user",
                        "content": "Create a personalized description of this property: "
                        f"{json.dumps(property_prompt_view(prop), default=str)}\n\n"
                        f"For this user: {json.dumps(user_view)}\n\n"
                        "Limit to 3-4 sentences that highlight aspects of the property that "
                        "would appeal to this user based on their subscription tier and profile.",
                    },
                ]
            )
            return content or prop.description
        except Exception as e:
            logger.error(f"❌ Error generating personalized description for {prop.id}: {e}")
            return prop.description

    async def predict_property_value_trends(
        self, prop: Property, market_data: dict, years: int
    ) -> dict:
        if not self.is_available():
            return fallback_value_prediction(prop, years)

        prompt = (
            "Predict the market value of this property for each of the next "
            f"{years} years.\n\nPROPERTY:\n{json.dumps(property_prompt_view(prop), default=str)}"
            f"\n\nMARKET DATA:\n{json.dumps(market_data, default=str)}\n\n"
            'Respond with a JSON object with keys "currentValue" (number), "predictions" '
            '(array of {"year": number, "value": number, "growthRate": number}), '
            '"confidence" ("low" | "medium" | "high"), "factors" (array of strings) and '
            '"summary" (string).'
        )
        try:
            content = await self._complete(
                [
                    {
                        "role": "system",
                        "content": "You are a real estate valuation analyst. Base forecasts on the "
                        "supplied market data and be conservative.",
                    },
                    {"role": "user", "content": prompt},
                ],
                json_mode=True,
            )
            prediction = json.loads(content)
            if not isinstance(prediction.get("predictions"), list) or not prediction["predictions"]:
                raise ValueError("prediction response missing predictions")
            prediction.update({"propertyId": prop.id, "years": years, "source": "openai"})
            prediction.setdefault("currentValue", prop.price)
            return prediction
        except Exception as e:
            logger.error(f"❌ Error predicting value for property {prop.id}: {e}")
            return fallback_value_prediction(prop, years)

    async def transcribe_audio(self, audio_data: str) -> str:
        """Transcribe base64 (or data URL) audio into a text query. Raises on failure."""
        if not self.is_available():
            raise RuntimeError("Audio search is not available")

        media_type, payload = split_data_url(audio_data, "audio/webm")
        extension = media_type.split("/")[-1] or "webm"
        audio_bytes = base64.b64decode(payload)
        transcript = await self.client.audio.transcriptions.create(
            model=OPENAI_TRANSCRIPTION_MODEL,
            file=(f"search.{extension}", audio_bytes, media_type),
        )
        text = (transcript.text or "").strip()
        if not text:
            raise ValueError("Empty transcription")
        return text


# Singleton instance
openai_service = OpenAIService()
