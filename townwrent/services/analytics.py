"""
Landlord dashboard analytics computed from the landlord's own listings.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List

from townwrent.models.property import Property

# (label, lower bound inclusive, upper bound exclusive)
PRICE_BANDS = [
    ("< 500", Decimal("0"), Decimal("500")),
    ("500-1000", Decimal("500"), Decimal("1000")),
    ("1000-2000", Decimal("1000"), Decimal("2000")),
    ("2000+", Decimal("2000"), None),
]

TOP_PROPERTIES_LIMIT = 5


def _ratio(numerator: int, denominator: int, scale: int = 1) -> int:
    """numerator * scale / denominator rounded half up; 0 for an empty denominator."""
    if denominator <= 0:
        return 0
    value = Decimal(numerator * scale) / Decimal(denominator)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _type_label(prop: Property) -> str:
    return prop.property_type.value if hasattr(prop.property_type, "value") else str(prop.property_type)


def compute_analytics(properties: Iterable[Property]) -> Dict[str, Any]:
    """
    Summarise engagement over a set of listings.

    The engagement rate is favourites per hundred views, rounded to a whole
    number with halves rounded up, and 0 when nothing has been viewed yet.
    """
    props: List[Property] = list(properties)

    total_properties = len(props)
    available_properties = sum(1 for p in props if p.available)
    total_views = sum(p.views or 0 for p in props)
    total_favorites = sum(p.favorites or 0 for p in props)

    engagement_rate = _ratio(total_favorites, total_views, scale=100)
    avg_views = _ratio(total_views, total_properties)

    type_distribution: Dict[str, int] = {}
    for p in props:
        label = _type_label(p)
        type_distribution[label] = type_distribution.get(label, 0) + 1

    top_properties = [
        {
            "id": str(p.id),
            "title": p.title,
            "views": p.views or 0,
            "favorites": p.favorites or 0,
        }
        for p in sorted(props, key=lambda p: p.views or 0, reverse=True)[:TOP_PROPERTIES_LIMIT]
    ]

    price_bands = []
    for label, low, high in PRICE_BANDS:
        in_band = [
            p for p in props
            if Decimal(p.price) >= low and (high is None or Decimal(p.price) < high)
        ]
        band_views = sum(p.views or 0 for p in in_band)
        price_bands.append({
            "range": label,
            "count": len(in_band),
            "avg_views": _ratio(band_views, len(in_band)),
        })

    return {
        "total_properties": total_properties,
        "available_properties": available_properties,
        "total_views": total_views,
        "total_favorites": total_favorites,
        "engagement_rate": engagement_rate,
        "avg_views_per_property": avg_views,
        "type_distribution": type_distribution,
        "top_properties": top_properties,
        "price_ranges": price_bands,
    }
