"""Static city list and autocomplete filter for the search box."""
from typing import List, Sequence

POPULAR_CITIES = (
    "London", "New York", "Tokyo", "Paris", "Sydney", "Berlin", "Moscow", "Dubai",
    "Singapore", "Hong Kong", "Los Angeles", "Chicago", "Toronto", "Mumbai", "Delhi",
    "Shanghai", "Beijing", "Seoul", "Bangkok", "Istanbul", "Rome", "Madrid", "Barcelona",
    "Amsterdam", "Vienna", "Prague", "Budapest", "Warsaw", "Stockholm", "Copenhagen",
    "Oslo", "Helsinki", "Zurich", "Geneva", "Brussels", "Lisbon", "Athens", "Cairo",
    "Cape Town", "Johannesburg", "Lagos", "Nairobi", "Casablanca", "Tel Aviv", "Riyadh",
    "Doha", "Kuwait City", "Abu Dhabi", "Muscat", "Karachi", "Lahore", "Dhaka",
    "Colombo", "Kathmandu", "Yangon", "Phnom Penh", "Ho Chi Minh City", "Hanoi",
    "Jakarta", "Kuala Lumpur", "Manila", "Taipei", "Osaka", "Kyoto", "Busan",
    "Melbourne", "Brisbane", "Perth", "Auckland", "Wellington", "Fiji", "Honolulu",
    "Mexico City",
)

MAX_SUGGESTIONS = 5


def suggest_cities(
    query: str,
    cities: Sequence[str] = POPULAR_CITIES,
    limit: int = MAX_SUGGESTIONS
) -> List[str]:
    """
    Filter the city list by case-insensitive substring match.

    Matches keep the order of ``cities``; at most ``limit`` are returned.
    An empty or blank query yields no suggestions.

    Args:
        query: Text typed so far
        cities: Candidate city names
        limit: Maximum number of suggestions

    Returns:
        List of matching city names
    """
    needle = query.lower()
    if not needle.strip():
        return []
    return [city for city in cities if needle in city.lower()][:limit]
