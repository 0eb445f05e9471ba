"""Wiring of the intake services shared by the API"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from nagrik.core.database import AsyncSessionLocal
from nagrik.services.complaint_store import ComplaintStore
from nagrik.services.firebase_storage import get_storage_service
from nagrik.services.media_gate import ImageClassifier, MediaAnalysisGate
from nagrik.services.notification_scheduler import NotificationScheduler
from nagrik.services.notification_service import NotificationService
from nagrik.services.submission_pipeline import BlobStore, SubmissionPipeline


@dataclass
class Components:
    store: ComplaintStore
    gate: MediaAnalysisGate
    scheduler: NotificationScheduler
    pipeline: SubmissionPipeline


def build_components(
    session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
    blob_store: Optional[BlobStore] = None,
    classifier: Optional[ImageClassifier] = None,
    **scheduler_options,
) -> Components:
    """Build the service graph. Collaborators default to the production ones."""
    store = ComplaintStore(session_factory)
    scheduler = NotificationScheduler(NotificationService(store), **scheduler_options)
    pipeline = SubmissionPipeline(
        store=store,
        blob_store=blob_store or get_storage_service(),
        scheduler=scheduler,
    )
    return Components(
        store=store,
        gate=MediaAnalysisGate(classifier=classifier),
        scheduler=scheduler,
        pipeline=pipeline,
    )


def get_components(request: Request) -> Components:
    """Dependency for the shared service graph"""
    return request.app.state.components
