"""
Movie data models.

Normalized views of Douban subjects plus the request/response payloads of
the /api endpoints.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class MovieSummary(BaseModel):
    """A movie as it appears in search results and recommendation lists."""

    id: str
    title: str
    original_title: Optional[str] = None
    year: Optional[str] = None
    rating: Optional[float] = None
    genres: List[str] = Field(default_factory=list)
    directors: List[str] = Field(default_factory=list)
    casts: List[str] = Field(default_factory=list)
    poster: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_subject(cls, subject: Dict[str, Any]) -> "MovieSummary":
        return cls(**_summary_fields(subject))


class Movie(MovieSummary):
    """Full movie detail."""

    summary: Optional[str] = None
    countries: List[str] = Field(default_factory=list)
    aka: List[str] = Field(default_factory=list)
    ratings_count: Optional[int] = None

    @classmethod
    def from_subject(cls, subject: Dict[str, Any]) -> "Movie":
        return cls(
            **_summary_fields(subject),
            summary=subject.get("summary") or None,
            countries=list(subject.get("countries") or []),
            aka=list(subject.get("aka") or []),
            ratings_count=subject.get("ratings_count"),
        )


class SearchResult(BaseModel):
    start: int
    count: int
    total: int
    subjects: List[MovieSummary] = Field(default_factory=list)


class RecommendRequest(BaseModel):
    """Body of POST /api/recommend."""

    tags: List[str] = Field(default_factory=list, max_length=10)
    count: int = Field(default=10, ge=1, le=50)
    exclude_ids: List[str] = Field(default_factory=list)


class RecommendResult(BaseModel):
    tags: List[str]
    count: int
    movies: List[MovieSummary] = Field(default_factory=list)


def _summary_fields(subject: Dict[str, Any]) -> Dict[str, Any]:
    rating = subject.get("rating") or {}
    average = rating.get("average") if isinstance(rating, dict) else None
    images = subject.get("images") or {}

    return {
        "id": str(subject.get("id", "")),
        "title": subject.get("title") or "",
        "original_title": subject.get("original_title") or None,
        "year": str(subject["year"]) if subject.get("year") else None,
        # Douban reports 0 for titles that have not been rated yet.
        "rating": float(average) if average else None,
        "genres": list(subject.get("genres") or []),
        "directors": _names(subject.get("directors")),
        "casts": _names(subject.get("casts")),
        "poster": images.get("large") or images.get("medium") or images.get("small"),
        "url": subject.get("alt") or None,
    }


def _names(people: Any) -> List[str]:
    if not people:
        return []
    return [p["name"] for p in people if isinstance(p, dict) and p.get("name")]
