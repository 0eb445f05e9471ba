"""Caller-side complaint draft that applies media gate verdicts"""

import logging
from typing import Optional

from nagrik.core.exceptions import AnalysisFailed, ImageIrrelevant
from nagrik.schemas.ai_outputs import MediaAnalysisResult
from nagrik.schemas.complaint import ComplaintForm, MediaAttachment
from nagrik.services.media_gate import MediaAnalysisGate

logger = logging.getLogger(__name__)


class ComplaintDraft:
    """Form state between the first media upload and final submission.

    The generated description is an editable default: the citizen may
    overwrite it before submitting.
    """

    def __init__(self, form: Optional[ComplaintForm] = None):
        self.form = form or ComplaintForm()
        self.media: Optional[MediaAttachment] = None
        self.voice_note: Optional[MediaAttachment] = None
        self.manual_entry_required = False
        self.last_verdict: Optional[MediaAnalysisResult] = None

    @property
    def description(self) -> Optional[str]:
        return self.form.description

    @description.setter
    def description(self, value: Optional[str]) -> None:
        self.form.description = value

    async def attach_media(
        self, gate: MediaAnalysisGate, media: MediaAttachment
    ) -> Optional[MediaAnalysisResult]:
        """Run the gate on a new photo and fold the verdict into the draft.

        Returns the verdict, or None when analysis failed and the citizen has
        to describe the issue by hand.
        """
        try:
            verdict = await gate.analyze(media.data, self.form.issue_type, media.content_type)
        except AnalysisFailed as e:
            logger.warning("Falling back to manual description: %s", e.message)
            self.media = media
            self.manual_entry_required = True
            self.last_verdict = None
            return None

        self.last_verdict = verdict
        self.manual_entry_required = False
        if verdict.discard_media:
            self.media = None
        else:
            self.media = media
            self.description = verdict.description
        return verdict

    def raise_for_verdict(self) -> None:
        """Raise ImageIrrelevant if the last photo was rejected"""
        if self.last_verdict is not None and self.last_verdict.discard_media:
            raise ImageIrrelevant(self.last_verdict.reason or "")

    def attach_voice_note(self, voice_note: MediaAttachment) -> None:
        self.voice_note = voice_note
