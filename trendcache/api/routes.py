from fastapi import APIRouter, Depends, HTTPException, Request
import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from ..models.schemas import (
    ErrorResponse,
    GenerationContextResponse,
    HealthResponse,
    RefreshTrendsResponse,
    TrendArticleResponse,
    TrendsResponse,
    TrendsStatusResponse,
)
from ..services.trends_service import TrendsService
from ..utils.topics import parse_limit, parse_topics_param

logger = logging.getLogger(__name__)
router = APIRouter()


def get_trends_service(request: Request) -> TrendsService:
    """Return the service instance created in the application lifespan."""
    return request.app.state.trends_service


@router.get("/trends", response_model=TrendsResponse, responses={500: {"model": ErrorResponse}})
async def get_trends(
    topics: Optional[str] = None,
    limit: Optional[str] = None,
    service: TrendsService = Depends(get_trends_service),
):
    """Get cached trending articles, refreshing first when the cache is stale"""
    try:
        result = await service.get_trends(topics=topics, limit=limit)
        return TrendsResponse(
            trends=[TrendArticleResponse.from_article(a) for a in result["trends"]],
            lastUpdated=result["lastUpdated"],
            totalArticles=result["totalArticles"],
            availableTopics=result["availableTopics"],
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error in /api/trends endpoint: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch trends")


@router.post(
    "/trends/refresh", response_model=RefreshTrendsResponse, responses={500: {"model": ErrorResponse}}
)
async def refresh_trends(request: Request, service: TrendsService = Depends(get_trends_service)):
    """Force a trends refresh (operator endpoint)"""
    topics: Any = None
    body = await request.body()
    if body:
        try:
            payload = json.loads(body)
        except ValueError:
            logger.warning("Refresh trends body is not valid JSON; using default topics")
            payload = None
        if isinstance(payload, dict):
            topics = payload.get("topics")
    logger.info(f"Refresh trends request topics: {topics}")

    try:
        result = await service.refresh_trends(topics)
        return RefreshTrendsResponse(**result)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error in /api/trends/refresh endpoint: {e}")
        raise HTTPException(status_code=500, detail="Failed to refresh trends")


@router.get("/trends/context", response_model=GenerationContextResponse)
async def get_generation_context(
    topics: Optional[str] = None,
    limit: Optional[str] = None,
    service: TrendsService = Depends(get_trends_service),
):
    """Trending topics rendered for the content-generation prompt"""
    topic_list = parse_topics_param(topics, service.settings.DEFAULT_TOPICS)
    result = await service.get_generation_context(topic_list, limit=parse_limit(limit, default=3))
    return GenerationContextResponse(
        context=result["context"],
        used=[TrendArticleResponse.from_article(a) for a in result["used"]],
    )


@router.get("/trends/status", response_model=TrendsStatusResponse)
async def get_trends_status(service: TrendsService = Depends(get_trends_service)):
    """Cache age, staleness and last refresh statistics"""
    return TrendsStatusResponse(**service.status())


@router.get("/health", response_model=HealthResponse)
async def health_check(service: TrendsService = Depends(get_trends_service)):
    """Enhanced health check with cache status"""
    return HealthResponse(
        status="ok",
        message="Service is healthy",
        timestamp=datetime.now(timezone.utc),
        cache_stale=service.cache.is_stale(),
        news_api_available=service.settings.has_news_api_key,
    )
