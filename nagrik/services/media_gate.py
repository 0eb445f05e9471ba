"""
Media analysis gate.

Validates an uploaded photo against the declared issue type before the
photo is accepted as complaint evidence.

Two unhappy outcomes are kept apart:
- the classifier answered and rejected the image (result with
  discard_media=True), and
- the classifier could not answer (AnalysisFailed); the caller falls back
  to a manual description and keeps the submission going.
"""

import asyncio
import logging
from typing import List, Optional, Protocol, Union

from nagrik.core.config import settings
from nagrik.core.exceptions import AnalysisFailed, ValidationFailed
from nagrik.models.complaint import IssueType
from nagrik.schemas.ai_outputs import ImageRelevanceOutput, MediaAnalysisResult

logger = logging.getLogger(__name__)

DEFAULT_IRRELEVANT_REASON = "Please upload an image related to the selected issue."


class ImageClassifier(Protocol):
    async def check_image_relevance(
        self, image_bytes: bytes, issue_type: IssueType, content_type: str = "image/jpeg"
    ) -> ImageRelevanceOutput:
        ...


def parse_issue_type(issue_type: Union[IssueType, str, None]) -> IssueType:
    """Coerce a form value into the closed issue-type set"""
    if isinstance(issue_type, IssueType):
        return issue_type
    token = (issue_type or "").strip().lower()
    if not token:
        raise ValidationFailed("Please select an issue type first", fields=["issue_type"])
    try:
        return IssueType(token)
    except ValueError:
        raise ValidationFailed(f"Unknown issue type: {issue_type}", fields=["issue_type"])


class MediaAnalysisGate:
    """Runs one classification per upload and reports the verdict"""

    def __init__(
        self,
        classifier: Optional[ImageClassifier] = None,
        timeout_seconds: Optional[float] = None,
        max_upload_size: Optional[int] = None,
        allowed_types: Optional[List[str]] = None,
    ):
        self._classifier = classifier
        self.timeout_seconds = timeout_seconds or settings.CLASSIFICATION_TIMEOUT_SECONDS
        self.max_upload_size = max_upload_size or settings.MAX_UPLOAD_SIZE
        self.allowed_types = allowed_types or settings.ALLOWED_IMAGE_TYPES

    def _get_classifier(self) -> ImageClassifier:
        if self._classifier is None:
            from nagrik.services.ai_service import get_ai_service

            try:
                self._classifier = get_ai_service()
            except ValueError as e:
                raise AnalysisFailed(f"Image analysis is not configured: {e}")
        return self._classifier

    def _check_payload(self, image_bytes: bytes, content_type: str) -> None:
        if content_type not in self.allowed_types:
            raise ValidationFailed(
                f"File type {content_type} not allowed. Allowed: {self.allowed_types}",
                fields=["media"],
            )
        if not image_bytes:
            raise ValidationFailed("Uploaded image is empty", fields=["media"])
        if len(image_bytes) > self.max_upload_size:
            raise ValidationFailed(
                f"File too large. Maximum size: {self.max_upload_size / (1024 * 1024):.1f}MB",
                fields=["media"],
            )

    async def analyze(
        self,
        image_bytes: bytes,
        issue_type: Union[IssueType, str, None],
        content_type: str = "image/jpeg",
    ) -> MediaAnalysisResult:
        """
        Classify an image against the declared issue type.

        Raises:
            ValidationFailed: no/unknown issue type, or bad file type/size
            AnalysisFailed: classifier unavailable, timed out, or gave an unusable answer
        """
        # Issue type first: nothing is read without it
        declared = parse_issue_type(issue_type)
        self._check_payload(image_bytes, content_type)

        classifier = self._get_classifier()
        try:
            verdict = await asyncio.wait_for(
                classifier.check_image_relevance(image_bytes, declared, content_type),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning("Image analysis timed out after %.1fs (issue_type=%s)",
                           self.timeout_seconds, declared.value)
            raise AnalysisFailed("Image analysis timed out")
        except Exception as e:
            logger.exception("Image analysis failed (issue_type=%s)", declared.value)
            raise AnalysisFailed(f"Image analysis failed: {e}") from e

        return self._to_result(verdict, declared)

    @staticmethod
    def _to_result(verdict: ImageRelevanceOutput, declared: IssueType) -> MediaAnalysisResult:
        if not isinstance(verdict, ImageRelevanceOutput):
            raise AnalysisFailed("Malformed response from image classifier")

        if verdict.is_relevant:
            description = (verdict.description or "").strip()
            if not description:
                raise AnalysisFailed("Classifier marked the image relevant but gave no description")
            logger.info("Image accepted for issue_type=%s", declared.value)
            return MediaAnalysisResult(is_relevant=True, description=description)

        reason = (verdict.reason or "").strip() or DEFAULT_IRRELEVANT_REASON
        logger.info("Image rejected for issue_type=%s: %s", declared.value, reason)
        return MediaAnalysisResult(is_relevant=False, reason=reason, discard_media=True)
