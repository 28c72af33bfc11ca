from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class TrendArticleResponse(BaseModel):
    title: str = Field(..., description="Article title")
    summary: str = Field(..., description="Summary, truncated to 150 characters for display")
    link: str = Field("", description="Source URL")
    publishDate: datetime = Field(..., description="Publish time (UTC); fetch time when the source omits it")
    source: str = Field(..., description="Publisher name or feed domain")
    topic: str = Field(..., description="Topic tag assigned when fetching")
    relevanceScore: int = Field(0, ge=0, description="Number of business keywords matched")
    imageUrl: Optional[str] = Field(None, description="Lead image URL, when the source provides one")

    @classmethod
    def from_article(cls, article) -> "TrendArticleResponse":
        return cls(**article.to_dict())


class TrendsResponse(BaseModel):
    trends: List[TrendArticleResponse] = Field(..., description="Matching articles, best-ranked first")
    lastUpdated: Optional[datetime] = Field(None, description="When the cached corpus was built")
    totalArticles: int = Field(..., description="Number of articles in the cached corpus")
    availableTopics: List[str] = Field(default_factory=list, description="Topic tags present in the corpus")


class RefreshTrendsResponse(BaseModel):
    success: bool = Field(..., description="True when the refresh ran")
    message: str = Field(..., description="Human readable outcome")
    articlesCount: int = Field(..., description="Number of articles in the corpus after the refresh")
    lastUpdated: Optional[datetime] = Field(None, description="When the cached corpus was built")
    topics: List[str] = Field(..., description="Topics that were refreshed")


class GenerationContextResponse(BaseModel):
    context: str = Field(..., description="Prompt-ready trending topics block (empty when nothing matched)")
    used: List[TrendArticleResponse] = Field(default_factory=list, description="Articles included in the context")


class RefreshStats(BaseModel):
    succeeded: int
    failed: int
    fetched: int
    keptPrevious: bool


class TrendsStatusResponse(BaseModel):
    lastUpdated: Optional[datetime] = None
    ageSeconds: Optional[float] = None
    stale: bool
    refreshing: bool
    totalArticles: int
    availableTopics: List[str] = Field(default_factory=list)
    refreshCount: int
    enabledSources: List[str] = Field(default_factory=list)
    lastRefresh: Optional[RefreshStats] = None


class HealthResponse(BaseModel):
    status: str = Field(..., description="Overall API status ('ok' or 'unhealthy')")
    message: str = Field(..., description="Descriptive health message")
    timestamp: datetime = Field(..., description="Timestamp of health check (UTC)")
    cache_stale: bool = Field(..., description="True if the next trends query will trigger a refresh")
    news_api_available: bool = Field(..., description="True if a NewsAPI key is configured")


class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Error message returned from the server")
