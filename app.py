"""
Engagerr Content Graph FastAPI Application

A REST API server for the content relationship graph.
Provides endpoints for content families, aggregate metrics, visualization
data, relationships and AI relationship suggestions.
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from engagerr.config import Config
from engagerr.models import (
    AggregateMetrics,
    ChartTheme,
    ContentFamily,
    ContentItem,
    ContentRelationship,
    CreateRelationshipRequest,
    FamilySnapshot,
    FamilyStatistics,
    GraphData,
    LayoutType,
    NodeSizing,
    UpdateRelationshipRequest,
    VisualizationOptions,
    dump_suggestions,
)
from engagerr.services.relationship_service import RelationshipService
from engagerr.utils.exceptions import (
    EngagerrError,
    GraphError,
    NotFoundError,
    ValidationError,
)
from engagerr.utils.logger import get_logger, setup_logging

# Global service instance
service: RelationshipService | None = None
logger = get_logger(__name__)


# Pydantic models for API
class FamilyMetricsResponse(BaseModel):
    """Built family summary with aggregate metrics."""

    root_id: str
    content_count: int
    max_depth: int
    orphan_ids: list[str]
    statistics: FamilyStatistics
    aggregate_metrics: AggregateMetrics
    display: dict[str, Any]


class UpsertContentResponse(BaseModel):
    """Response model for content ingestion."""

    upserted: int


class IngestSuggestionsResponse(BaseModel):
    """Response model for suggestion ingestion."""

    ingested: int
    ids: list[str]


class RemoveFromHierarchyResponse(BaseModel):
    """Response model for removing content from its family."""

    content_id: str
    reattached: list[ContentRelationship]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service_initialized: bool
    store_backend: str


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    global service

    config = Config.from_env()

    setup_logging(config.logging)

    logger.info("Starting Engagerr content graph server")
    logger.info(f"Configuration: Store={config.store.backend} ({config.store.db_path})")

    service = RelationshipService(config)
    await service.initialize()
    logger.info("Relationship service initialized")

    yield

    logger.info("Shutting down Engagerr content graph server")
    await service.close()
    service = None
    logger.info("Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title="Engagerr Content Graph API",
    description="Content relationship graph and family aggregation",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error mapping
@app.exception_handler(GraphError)
async def graph_error_handler(request: Request, exc: GraphError):
    return JSONResponse(status_code=409, content=exc.to_dict())


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content=exc.to_dict())


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content=exc.to_dict())


@app.exception_handler(EngagerrError)
async def engagerr_error_handler(request: Request, exc: EngagerrError):
    logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=500, content=exc.to_dict())


def get_service() -> RelationshipService:
    if not service:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return service


# Health check endpoint
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy" if service else "initializing",
        service_initialized=service is not None,
        store_backend=service.config.store.backend if service else "unknown",
    )


# Content endpoints
@app.post("/content/items", response_model=UpsertContentResponse)
async def upsert_content(items: list[ContentItem]):
    """
    Ingest content items or refresh their metrics.

    Items are matched by id; an existing item is replaced wholesale.
    """
    count = await get_service().upsert_content(items)
    return UpsertContentResponse(upserted=count)


# Family endpoints
@app.get("/content/{content_id}/family", response_model=FamilySnapshot)
async def get_family(content_id: str):
    """
    Get the content family containing a content item.

    The family root is found by walking parent relationships upward, so any
    member of the family can be used to fetch it.
    """
    return await get_service().get_family_snapshot(content_id)


@app.get("/content/{content_id}/family/metrics", response_model=FamilyMetricsResponse)
async def get_family_metrics(content_id: str):
    """
    Get aggregate metrics for the family containing a content item.

    Totals, engagement rate and per-platform breakdown are recomputed from
    every member on each request.
    """
    family = await get_service().get_family(content_id)
    return _metrics_response(family)


def _metrics_response(family: ContentFamily) -> FamilyMetricsResponse:
    metrics = family.aggregate_metrics
    return FamilyMetricsResponse(
        root_id=family.root_id,
        content_count=family.size,
        max_depth=family.max_depth,
        orphan_ids=family.orphan_ids,
        statistics=family.statistics,
        aggregate_metrics=metrics,
        display=metrics.to_display(),
    )


@app.get("/creators/{creator_id}/families", response_model=list[FamilyMetricsResponse])
async def get_creator_families(creator_id: str):
    """
    List every content family headed by a creator's content.

    Families are ordered largest first; standalone content counts as a
    family of one.
    """
    families = await get_service().get_creator_families(creator_id)
    return [_metrics_response(family) for family in families]


@app.get("/content/{content_id}/visualization", response_model=GraphData)
async def get_visualization(
    content_id: str,
    node_sizing: NodeSizing = Query(default=NodeSizing.METRIC),
    theme: ChartTheme = Query(default=ChartTheme.LIGHT),
    layout: LayoutType = Query(default=LayoutType.HIERARCHICAL),
    size_metric: str = Query(default="views"),
):
    """Get render-ready nodes and edges for a content family."""
    options = VisualizationOptions(
        node_sizing=node_sizing, theme=theme, layout=layout, size_metric=size_metric
    )
    return await get_service().get_visualization(content_id, options)


@app.delete("/content/{content_id}/hierarchy", response_model=RemoveFromHierarchyResponse)
async def remove_from_hierarchy(content_id: str, preserve_descendants: bool = Query(default=True)):
    """
    Take content out of its family without deleting it.

    By default its children are reattached to its parent; with
    preserve_descendants=false the whole subtree leaves with it.
    """
    reattached = await get_service().remove_from_hierarchy(content_id, preserve_descendants)
    return RemoveFromHierarchyResponse(content_id=content_id, reattached=reattached)


# Suggestion endpoints
@app.get("/content/{content_id}/suggestions")
async def list_suggestions(
    content_id: str,
    confidence_threshold: float | None = Query(default=None, ge=0.0, le=1.0),
    limit: int | None = Query(default=None, ge=1, le=100),
):
    """
    List pending AI relationship suggestions for a content item.

    Suggestions below the confidence threshold (default 0.5) are not shown.
    """
    suggestions = await get_service().suggestions.list_suggestions(
        content_id, confidence_threshold, limit
    )
    return dump_suggestions(suggestions)


@app.post("/content/suggestions", response_model=IngestSuggestionsResponse)
async def ingest_suggestions(payloads: list[dict[str, Any]]):
    """Store classifier output as pending suggestions."""
    suggestions = await get_service().suggestions.ingest(payloads)
    return IngestSuggestionsResponse(ingested=len(suggestions), ids=[s.id for s in suggestions])


@app.post("/content/suggestions/{suggestion_id}/approve", response_model=ContentRelationship)
async def approve_suggestion(suggestion_id: str):
    """
    Approve a suggestion, creating an AI-suggested relationship.

    Returns 409 with the reason if the relationship would create a cycle or
    give content a second parent; the suggestion then stays pending.
    """
    return await get_service().suggestions.approve(suggestion_id)


@app.post("/content/suggestions/{suggestion_id}/reject")
async def reject_suggestion(suggestion_id: str):
    """Reject a suggestion. It is discarded, not blocklisted."""
    await get_service().suggestions.reject(suggestion_id)
    return {"id": suggestion_id, "rejected": True}


# Relationship endpoints
@app.post("/content/relationships", response_model=ContentRelationship, status_code=201)
async def create_relationship(request: CreateRelationshipRequest):
    """
    Create a user-defined relationship between two content items.

    Returns 409 if the relationship would create a cycle, give the target a
    second parent or duplicate an existing relationship.
    """
    return await get_service().create_relationship(request)


@app.get("/content/relationships/{relationship_id}", response_model=ContentRelationship)
async def get_relationship(relationship_id: str):
    """Get a relationship by ID."""
    return await get_service().get_relationship(relationship_id)


@app.patch("/content/relationships/{relationship_id}", response_model=ContentRelationship)
async def update_relationship(relationship_id: str, request: UpdateRelationshipRequest):
    """Change the type or confidence of a relationship."""
    return await get_service().update_relationship(relationship_id, request)


@app.delete("/content/relationships/{relationship_id}")
async def delete_relationship(relationship_id: str):
    """Delete a relationship."""
    await get_service().delete_relationship(relationship_id)
    return {"id": relationship_id, "deleted": True}


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Engagerr Content Graph API",
        "version": "1.0.0",
        "description": "Content relationship graph and family aggregation",
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
