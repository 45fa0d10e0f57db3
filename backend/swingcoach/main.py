"""
FastAPI entry point for SwingCoach AI
"""

import os
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from swingcoach.analyzers.swing_analyzer import swing_analyzer
from swingcoach.config.base import settings
from swingcoach.models.analysis import FeedbackRecord, MetricFeedbackRecord
from swingcoach.models.requests import HostedAnalysisRequest, InsightRequest, ReferenceModelRequest
from swingcoach.models.upload import ClubType, HostedVideo, Ownership, ShotOutcome, SwingMetadata, VideoUpload
from swingcoach.services.document_store import document_store
from swingcoach.services.feedback_service import feedback_collector
from swingcoach.services.insight_service import insight_generator
from swingcoach.services.reference_service import ReferenceAnalysisFailed, reference_service
from swingcoach.services.video_url_service import video_url_manager
from swingcoach.utils.logger import get_logger, setup_logging
from swingcoach.utils.metric_registry import metric_registry

setup_logging(settings.LOG_LEVEL, settings.LOG_FILE or None)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} {settings.VERSION}")
    yield
    revoked = await video_url_manager.revoke_all_temporary_urls()
    logger.info(f"Shutdown complete, released {revoked} temporary video URLs")


app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Golf swing scoring and coaching insights from swing videos",
    version=settings.VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.DEBUG else settings.ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)


@app.get("/")
async def root():
    return {"message": f"{settings.APP_NAME} API", "version": settings.VERSION}


@app.get("/health")
async def health_check():
    store_ok = await document_store.health_check()
    url_stats = video_url_manager.get_stats()
    return {
        "status": "healthy" if store_ok else "degraded",
        "cache_stats": url_stats,
        "services": {
            "document_store": "available" if store_ok else "unavailable",
            "s3": "available" if url_stats["storage"] == "s3" else "unavailable",
            "video_cache": "available",
            "llm": "configured" if settings.OPENAI_API_KEY else "mock-only",
        },
    }


@app.get("/metrics")
async def list_metrics():
    """Catalog of recognised swing metrics"""
    return {"metrics": [metric.to_dict() for metric in metric_registry.all()]}


@app.post("/analyze")
async def analyze_upload(
    file: UploadFile = File(...),
    last_modified: int = Form(0, alias="lastModified"),
    club_name: Optional[str] = Form(None, alias="clubName"),
    club_id: Optional[str] = Form(None, alias="clubId"),
    club_type: Optional[ClubType] = Form(None, alias="clubType"),
    outcome: Optional[ShotOutcome] = Form(None),
    recorded_date: Optional[datetime] = Form(None, alias="recordedDate"),
    ownership: Optional[Ownership] = Form(None),
    pro_name: Optional[str] = Form(None, alias="proName"),
    user_id: Optional[str] = Form(None, alias="userId"),
):
    """Score an uploaded swing video"""
    filename = file.filename or "swing.mp4"
    extension = os.path.splitext(filename)[1].lower()
    if extension not in settings.ALLOWED_EXTENSIONS:
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {extension or filename}")

    if file.size and file.size > settings.MAX_FILE_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {settings.MAX_FILE_SIZE // (1024 * 1024)}MB.",
        )

    contents = await file.read()
    if not contents:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(contents) > settings.MAX_FILE_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {settings.MAX_FILE_SIZE // (1024 * 1024)}MB.",
        )

    upload = VideoUpload(
        content=contents,
        mime_type=file.content_type or "video/mp4",
        size=len(contents),
        filename=filename,
        last_modified=last_modified,
    )
    metadata = SwingMetadata(
        club_name=club_name,
        club_id=club_id,
        club_type=club_type,
        outcome=outcome,
        recorded_date=recorded_date,
        ownership=ownership,
        pro_name=pro_name,
        user_id=user_id,
    )
    logger.info(f"Analyzing upload {filename} ({upload.size_mb:.1f}MB)")

    analysis = await swing_analyzer.analyze(upload, metadata)
    return analysis.model_dump(mode="json", by_alias=True)


@app.post("/analyze/hosted")
async def analyze_hosted(request: HostedAnalysisRequest):
    """Score a swing video hosted on YouTube"""
    metadata = request.metadata.model_copy(update={"hosted_video": HostedVideo(video_id=request.video_id)})
    logger.info(f"Analyzing hosted video {request.video_id}")
    analysis = await swing_analyzer.analyze(None, metadata)
    return analysis.model_dump(mode="json", by_alias=True)


@app.post("/insights")
async def metric_insights(request: InsightRequest):
    """Deep-dive coaching insights for one metric of an analysis"""
    upload = None
    url_id = request.analysis.video.url_id
    if url_id:
        cached = video_url_manager.get_cached_video(url_id)
        if cached:
            content, mime_type = cached
            upload = VideoUpload(content=content, mime_type=mime_type, size=len(content), filename=url_id)

    insights = await insight_generator.generate(
        request.analysis,
        request.metric_key,
        is_authenticated=request.is_authenticated,
        upload=upload,
    )
    return insights.model_dump(mode="json", by_alias=True)


@app.post("/feedback")
async def submit_feedback(record: FeedbackRecord):
    return {"success": await feedback_collector.submit_feedback(record)}


@app.post("/feedback/metric")
async def submit_metric_feedback(record: MetricFeedbackRecord):
    return {"success": await feedback_collector.submit_metric_feedback(record)}


@app.get("/feedback/accuracy")
async def model_accuracy():
    return await feedback_collector.model_accuracy()


@app.post("/reference-models")
async def create_reference_model(request: ReferenceModelRequest):
    """Build a reference model for one metric from an instructional YouTube video"""
    try:
        reference = await reference_service.analyze_reference_video(request.metric_key, request.youtube_url)
    except ReferenceAnalysisFailed as e:
        logger.warning(f"Reference model for {request.metric_key} not created: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    return reference.model_dump(mode="json", by_alias=True)


@app.get("/videos/{url_id}")
async def serve_video(url_id: str):
    """Serve a cached display copy of an uploaded swing"""
    cached = video_url_manager.get_cached_video(url_id)
    if cached is None:
        raise HTTPException(status_code=404, detail="Video not found")

    content, mime_type = cached
    return Response(
        content=content,
        media_type=mime_type,
        headers={
            "Accept-Ranges": "bytes",
            "Content-Length": str(len(content)),
            "Cache-Control": "private, max-age=3600",
        },
    )


@app.delete("/videos/{url_id}")
async def revoke_video(url_id: str):
    if not await video_url_manager.revoke_temporary_url(url_id):
        raise HTTPException(status_code=404, detail="Video not found")
    return {"success": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "swingcoach.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )
