"""
Market insight extractor.

Derives coarse business positioning signals from the whole crawled corpus
using keyword tables. Every heuristic works on the concatenation of all
pages; a dimension whose primary signals are absent yields an empty
insights mapping with a confidence of 0.1, which callers must not persist.
"""

import re
from dataclasses import dataclass
from typing import Any, Sequence

import structlog

from ..config import settings
from ..models import AnalysisType, MarketInsight, PageRecord

logger = structlog.get_logger()

EMPTY_CONFIDENCE = 0.1

# Declaration order breaks ties between industries.
INDUSTRY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "saas": ("software", "platform", "api", "dashboard", "analytics"),
    "ecommerce": ("shop", "buy", "cart", "product", "store", "checkout"),
    "fintech": ("payment", "finance", "banking", "investment", "money"),
    "healthcare": ("health", "medical", "patient", "doctor", "clinic"),
    "education": ("learn", "course", "student", "education", "training"),
    "marketing": ("marketing", "advertising", "campaign", "brand", "social"),
}

# First matching model wins.
BUSINESS_MODEL_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("subscription", ("subscription", "monthly", "plan")),
    ("marketplace", ("marketplace", "commission")),
    ("advertising", ("advertising", "ads")),
    ("transaction-based", ("transaction", "fee")),
    ("one-time-purchase", ("one-time", "lifetime license", "buy now")),
)

POSITIONING_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("enterprise", ("enterprise", "large", "corporation")),
    ("sme", ("small business", "startup", "sme")),
    ("budget-friendly", ("affordable", "budget", "free")),
    ("premium", ("premium", "professional", "advanced")),
)

COMPETITOR_FEATURE_KEYWORDS = (
    "dashboard", "analytics", "reporting", "automation", "integration",
    "api", "mobile", "cloud", "security", "scalable", "real-time",
)

CORE_FEATURE_KEYWORDS = (
    "dashboard", "analytics", "reporting", "integration", "api",
    "mobile", "security", "automation", "collaboration", "customization",
)

SECONDARY_FEATURE_KEYWORDS = (
    "notifications", "export", "search", "templates", "live chat", "multi-language",
)

COMPETITIVE_ADVANTAGES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("AI-powered features", ("ai", "artificial intelligence", "machine learning")),
    ("Real-time capabilities", ("real-time", "instant")),
    ("Security-focused", ("secure", "encryption", "privacy")),
    ("User-friendly interface", ("easy", "simple", "intuitive")),
)

VALUE_PROPOSITIONS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Time savings", ("save time", "faster")),
    ("Cost savings", ("save money", "affordable")),
    ("Ease of use", ("easy", "simple")),
)

PAIN_POINTS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Time efficiency", ("slow", "time-consuming")),
    ("Cost concerns", ("expensive", "cost")),
    ("Complexity issues", ("complex", "difficult")),
)

CONTENT_FOCUS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Product/Service focused", ("product", "service")),
    ("Problem-solving oriented", ("solution", "problem")),
    ("Technology/Innovation focused", ("innovation", "technology")),
    ("Customer-centric", ("customer", "user")),
)

TARGET_INDICATORS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("B2B indicators", ("enterprise", "business")),
    ("B2C indicators", ("individual", "personal")),
    ("SME indicators", ("startup", "small business")),
    ("Technical audience indicators", ("developer", "technical")),
)

AUDIENCE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "b2b": ("business", "enterprise", "company"),
    "b2c": ("personal", "individual", "consumer"),
    "enterprise": ("enterprise", "large"),
    "sme": ("small business", "startup"),
}

SECONDARY_AUDIENCES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Enterprise teams", ("enterprise",)),
    ("Small businesses and startups", ("small business", "startup")),
    ("Developers", ("developer", "api")),
    ("Students and educators", ("student", "teacher")),
)

TONE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("casual", ("fun", "exciting", "amazing")),
    ("corporate", ("enterprise", "solution", "optimize")),
)

PRICING_MODELS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("subscription", ("subscription", "monthly")),
    ("per-user", ("per user", "per seat")),
)

REVENUE_STREAMS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Subscription fees", ("subscription",)),
    ("Transaction fees", ("transaction",)),
    ("Advertising revenue", ("advertising",)),
    ("Premium features", ("premium",)),
)

FEATURE_GAPS: tuple[tuple[str, str], ...] = (
    ("analytics", "Advanced analytics and reporting"),
    ("mobile", "Mobile application"),
    ("integration", "Third-party integrations"),
    ("security", "Advanced security features"),
    ("collaboration", "Collaboration tools"),
)

TECHNOLOGY_SIGNATURES: dict[str, tuple[tuple[str, tuple[str, ...]], ...]] = {
    "frontend": (
        ("React", ("react",)),
        ("Vue.js", ("vue",)),
        ("Angular", ("angular",)),
        ("jQuery", ("jquery",)),
        ("Next.js", ("/_next/",)),
    ),
    "backend": (
        ("WordPress", ("wp-content", "wp-includes")),
        ("Shopify", ("cdn.shopify.com",)),
        ("Drupal", ("/sites/default/files", "drupal")),
    ),
    "analytics": (
        ("Google Analytics", ("google-analytics", "gtag/js")),
        ("Google Tag Manager", ("googletagmanager",)),
        ("Hotjar", ("hotjar",)),
        ("Segment", ("cdn.segment.com",)),
    ),
}

GEOGRAPHY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("global", ("worldwide", "global", "international")),
    ("regional", ("europe", "north america", "asia", "latin america")),
    ("local", ("near you", "local", "our city")),
)

INDUSTRY_SIZES = {
    "saas": "$157 billion",
    "ecommerce": "$4.9 trillion",
    "fintech": "$127 billion",
    "healthcare": "$350 billion",
    "education": "$366 billion",
    "marketing": "$389 billion",
}

INDUSTRY_GROWTH_RATES = {
    "saas": "18% CAGR",
    "ecommerce": "14% CAGR",
    "fintech": "23% CAGR",
    "healthcare": "7% CAGR",
    "education": "8% CAGR",
    "marketing": "9% CAGR",
}

INDUSTRY_TRENDS = {
    "saas": ["AI integration", "No-code platforms", "Vertical SaaS"],
    "ecommerce": ["Mobile commerce", "Social commerce", "Sustainability"],
    "fintech": ["Open banking", "Cryptocurrency", "Embedded finance"],
    "healthcare": ["Telemedicine", "AI diagnostics", "Personalized medicine"],
    "education": ["Online learning", "Microlearning", "VR/AR education"],
    "marketing": ["Privacy-first marketing", "AI personalization", "Voice search"],
}

COMPETITOR_RECOMMENDATIONS = [
    "Conduct detailed competitor research in your specific industry",
    "Analyze competitor websites and feature comparisons",
    "Monitor competitor pricing and positioning strategies",
    "Identify unique value propositions and differentiation opportunities",
]
AUDIENCE_RECOMMENDATIONS = [
    "Conduct user interviews to validate target audience assumptions",
    "Implement user analytics to track actual user behavior",
    "Create detailed user personas based on real user data",
    "A/B test messaging for different audience segments",
]
PRICING_RECOMMENDATIONS = [
    "Conduct price sensitivity analysis with target customers",
    "A/B test different pricing strategies",
    "Monitor competitor pricing changes",
    "Implement value-based pricing where possible",
]
FEATURE_RECOMMENDATIONS = [
    "Conduct user interviews to validate feature importance",
    "Implement feature usage analytics",
    "Prioritize features based on user value and business impact",
    "Consider emerging technologies for competitive advantage",
]
MARKET_SIZE_RECOMMENDATIONS = [
    "Conduct primary market research to validate size estimates",
    "Analyze competitor market share and positioning",
    "Identify underserved market segments",
    "Monitor industry reports and market intelligence",
]

_PRICE = re.compile(r"\$(\d+)")
_SHORT_KEYWORD_LENGTH = 3


def _keyword_pattern(keyword: str) -> re.Pattern:
    # Very short keywords ("ai", "api", "ads") only count as whole words.
    if len(keyword) <= _SHORT_KEYWORD_LENGTH:
        return re.compile(rf"\b{re.escape(keyword)}\b")
    return re.compile(re.escape(keyword))


@dataclass(frozen=True)
class MarketCorpus:
    """Lowercased text, markup and script URLs of every crawled page."""

    text: str
    markup: str
    scripts: str

    @classmethod
    def from_pages(cls, pages: Sequence[PageRecord]) -> "MarketCorpus":
        return cls(
            text=" ".join(page.content_text for page in pages).lower(),
            markup=" ".join(page.html_content for page in pages).lower(),
            scripts=" ".join(script for page in pages for script in page.scripts).lower(),
        )

    def contains(self, keyword: str, source: str | None = None) -> bool:
        return bool(_keyword_pattern(keyword).search(self.text if source is None else source))

    def contains_any(self, keywords: Sequence[str], source: str | None = None) -> bool:
        return any(self.contains(keyword, source) for keyword in keywords)

    def count(self, keyword: str) -> int:
        return len(_keyword_pattern(keyword).findall(self.text))

    def matching_labels(self, table: Sequence[tuple[str, Sequence[str]]], source: str | None = None) -> list[str]:
        return [label for label, keywords in table if self.contains_any(keywords, source)]

    def first_label(self, table: Sequence[tuple[str, Sequence[str]]], default: str) -> str:
        labels = self.matching_labels(table)
        return labels[0] if labels else default


def identify_industry(corpus: MarketCorpus) -> str:
    best_industry = "general"
    best_score = 0
    for industry, keywords in INDUSTRY_KEYWORDS.items():
        score = sum(corpus.count(keyword) for keyword in keywords)
        if score > best_score:
            best_industry, best_score = industry, score
    return best_industry


def identify_business_model(corpus: MarketCorpus) -> str:
    return corpus.first_label(BUSINESS_MODEL_KEYWORDS, "unknown")


def identify_positioning(corpus: MarketCorpus) -> str:
    return corpus.first_label(POSITIONING_KEYWORDS, "Positioning to be determined")


def extract_prices(corpus: MarketCorpus) -> list[str]:
    """Distinct `$<digits>` price points, in order of appearance."""
    return list(dict.fromkeys(_PRICE.findall(corpus.text)))


def audience_flags(corpus: MarketCorpus) -> dict[str, bool]:
    return {name: corpus.contains_any(keywords) for name, keywords in AUDIENCE_KEYWORDS.items()}


def _or_sentinel(values: list[str], sentinel: str) -> list[str]:
    return values if values else [sentinel]


class MarketInsightExtractor:
    """Derives MarketInsights from the crawled corpus."""

    def __init__(self, include_market_size: bool | None = None):
        self.include_market_size = (
            include_market_size if include_market_size is not None else settings.include_market_size
        )

    @property
    def dimensions(self) -> list[AnalysisType]:
        dimensions = [
            AnalysisType.COMPETITOR,
            AnalysisType.TARGET_AUDIENCE,
            AnalysisType.PRICING,
            AnalysisType.FEATURES,
        ]
        if self.include_market_size:
            dimensions.append(AnalysisType.MARKET_SIZE)
        return dimensions

    def analyze(self, pages: Sequence[PageRecord]) -> list[MarketInsight]:
        """Run every enabled dimension over the corpus."""
        if not pages:
            logger.info("No crawl data available for market analysis")
            return []

        corpus = MarketCorpus.from_pages(pages)
        handlers = {
            AnalysisType.COMPETITOR: self.analyze_competitors,
            AnalysisType.TARGET_AUDIENCE: self.analyze_target_audience,
            AnalysisType.PRICING: self.analyze_pricing,
            AnalysisType.FEATURES: self.analyze_features,
            AnalysisType.MARKET_SIZE: self.analyze_market_size,
        }
        insights = [handlers[dimension](corpus) for dimension in self.dimensions]

        logger.info(
            "Market analysis complete",
            dimensions=[insight.analysis_type.value for insight in insights if not insight.is_empty],
        )
        return insights

    def analyze_competitors(self, corpus: MarketCorpus) -> MarketInsight:
        features = [keyword for keyword in COMPETITOR_FEATURE_KEYWORDS if corpus.contains(keyword)]
        industry = identify_industry(corpus)
        if not features and industry == "general":
            return MarketInsight(AnalysisType.COMPETITOR, {}, EMPTY_CONFIDENCE)

        business_model = identify_business_model(corpus)
        insights: dict[str, Any] = {
            "industry": industry if industry != "general" else "Industry to be determined",
            "business_model": business_model if business_model != "unknown" else "Business model to be determined",
            "key_features": features,
            "competitive_advantages": _or_sentinel(
                corpus.matching_labels(COMPETITIVE_ADVANTAGES), "Unique value proposition to be defined"
            ),
            "market_positioning": identify_positioning(corpus),
            "website_analysis": {
                "content_focus": _or_sentinel(
                    corpus.matching_labels(CONTENT_FOCUS), "Content focus to be determined"
                ),
                "value_propositions": self._value_propositions(corpus),
                "target_indicators": _or_sentinel(
                    corpus.matching_labels(TARGET_INDICATORS), "Target indicators to be determined"
                ),
            },
            "recommendations": list(COMPETITOR_RECOMMENDATIONS),
        }
        return MarketInsight(AnalysisType.COMPETITOR, insights, 0.6 if features else 0.3)

    def analyze_target_audience(self, corpus: MarketCorpus) -> MarketInsight:
        flags = audience_flags(corpus)
        if not any(flags.values()):
            return MarketInsight(AnalysisType.TARGET_AUDIENCE, {}, EMPTY_CONFIDENCE)

        if flags["b2b"]:
            primary = "Business users"
        elif flags["b2c"]:
            primary = "Individual consumers"
        else:
            primary = "Primary audience to be determined"

        insights: dict[str, Any] = {
            "audience_indicators": {
                "primary_audience": primary,
                "secondary_audiences": _or_sentinel(
                    corpus.matching_labels(SECONDARY_AUDIENCES), "Secondary audiences to be determined"
                ),
                "b2b_indicators": flags["b2b"],
                "b2c_indicators": flags["b2c"],
                "enterprise_indicators": flags["enterprise"],
                "sme_indicators": flags["sme"],
            },
            "content_analysis": {
                "tone": corpus.first_label(TONE_KEYWORDS, "professional"),
                "complexity_level": "high" if len(corpus.text.split()) > 1000 else "medium",
                "language_style": self._language_style(corpus),
            },
            "user_experience": self._user_journey(corpus),
            "value_propositions": self._value_propositions(corpus),
            "pain_points": _or_sentinel(corpus.matching_labels(PAIN_POINTS), "User pain points to be researched"),
            "recommendations": list(AUDIENCE_RECOMMENDATIONS),
        }
        confidence = 0.6 if flags["b2b"] or flags["b2c"] else 0.3
        return MarketInsight(AnalysisType.TARGET_AUDIENCE, insights, confidence)

    def analyze_pricing(self, corpus: MarketCorpus) -> MarketInsight:
        model = self._pricing_model(corpus)
        prices = extract_prices(corpus)
        if model == "unknown" and not prices:
            return MarketInsight(AnalysisType.PRICING, {}, EMPTY_CONFIDENCE)

        business_model = identify_business_model(corpus)
        insights: dict[str, Any] = {
            "pricing_analysis": {
                "model": model if model != "unknown" else "Pricing model to be determined",
                "price_points": prices,
                "strategy": "tiered" if len(prices) > 1 else "single",
                "positioning": identify_positioning(corpus),
            },
            "value_proposition": self._value_propositions(corpus),
            "business_model": business_model if business_model != "unknown" else "Business model to be determined",
            "pricing_psychology": {
                "uses_charm_pricing": any(price.endswith("9") for price in prices),
                "emphasizes_value": corpus.contains_any(("value", "roi")),
                "offers_discounts": corpus.contains_any(("discount", "save")),
            },
            "revenue_streams": _or_sentinel(
                corpus.matching_labels(REVENUE_STREAMS), "Primary revenue stream to be defined"
            ),
            "recommendations": list(PRICING_RECOMMENDATIONS),
        }
        return MarketInsight(AnalysisType.PRICING, insights, 0.7 if prices else 0.4)

    def analyze_features(self, corpus: MarketCorpus) -> MarketInsight:
        core = [keyword.capitalize() for keyword in CORE_FEATURE_KEYWORDS if corpus.contains(keyword)]
        secondary = [keyword.capitalize() for keyword in SECONDARY_FEATURE_KEYWORDS if corpus.contains(keyword)]
        if not core and not secondary:
            return MarketInsight(AnalysisType.FEATURES, {}, EMPTY_CONFIDENCE)

        technology_source = f"{corpus.scripts} {corpus.markup}"
        insights: dict[str, Any] = {
            "feature_analysis": {
                "core_features": core,
                "secondary_features": secondary,
                "unique_features": ["Unique features to be identified"],
            },
            "technology_analysis": {
                f"{layer}_technologies" if layer != "analytics" else "analytics_tools": [
                    name
                    for name, markers in signatures
                    if any(marker in technology_source for marker in markers)
                ]
                for layer, signatures in TECHNOLOGY_SIGNATURES.items()
            },
            "user_experience": {
                "has_navigation": "<nav" in corpus.markup,
                "has_search": 'type="search"' in corpus.markup or corpus.contains("search"),
                "mobile_ready": 'name="viewport"' in corpus.markup,
            },
            "feature_gaps": [label for keyword, label in FEATURE_GAPS if not corpus.contains(keyword)],
            "recommendations": list(FEATURE_RECOMMENDATIONS),
        }
        return MarketInsight(AnalysisType.FEATURES, insights, 0.7 if core else 0.4)

    def analyze_market_size(self, corpus: MarketCorpus) -> MarketInsight:
        """TAM/SAM/SOM style estimate from industry tables. Opt-in only."""
        industry = identify_industry(corpus)
        geography = corpus.first_label(GEOGRAPHY_KEYWORDS, "Geographic focus to be determined")
        insights: dict[str, Any] = {
            "industry_category": industry,
            "geographic_focus": geography,
            "tam_indicators": {
                "industry_size": INDUSTRY_SIZES.get(industry, "Market size to be researched"),
                "growth_rate": INDUSTRY_GROWTH_RATES.get(industry, "Growth rate to be researched"),
                "market_trends": INDUSTRY_TRENDS.get(industry, ["Industry trends to be researched"]),
            },
            "sam_analysis": {
                "addressable_market": "Addressable market to be calculated based on specific parameters",
                "competitive_density": "High" if industry == "saas" else "Medium",
            },
            "som_projection": {
                "realistic_market_share": "0.1-1% realistic initial target",
                "revenue_potential": "Revenue potential to be modeled based on pricing and market size",
            },
            "recommendations": list(MARKET_SIZE_RECOMMENDATIONS),
        }
        return MarketInsight(AnalysisType.MARKET_SIZE, insights, 0.65)

    def _pricing_model(self, corpus: MarketCorpus) -> str:
        model = corpus.first_label(PRICING_MODELS, "unknown")
        if model == "unknown" and corpus.contains("free") and corpus.contains("premium"):
            return "freemium"
        return model

    def _value_propositions(self, corpus: MarketCorpus) -> list[str]:
        return _or_sentinel(corpus.matching_labels(VALUE_PROPOSITIONS), "Value propositions to be defined")

    def _language_style(self, corpus: MarketCorpus) -> str:
        if corpus.contains_any(("we", "our")):
            return "First-person company voice"
        if corpus.contains_any(("you", "your")):
            return "Second-person customer-focused"
        return "Third-person objective"

    def _user_journey(self, corpus: MarketCorpus) -> dict[str, Any]:
        has_signup = corpus.contains_any(("sign up", "register"), corpus.markup)
        has_demo = corpus.contains_any(("demo", "trial"), corpus.markup)
        has_pricing = corpus.contains_any(("pricing", "plan"), corpus.markup)
        return {
            "conversion_funnel": "complete" if has_signup and has_demo and has_pricing else "incomplete",
            "has_signup": has_signup,
            "has_demo": has_demo,
            "has_pricing": has_pricing,
        }
