"""
Unit tests for the media analysis gate and the complaint draft that consumes it.
"""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from fakes import FakeClassifier, JPEG_BYTES, photo

from nagrik.core.exceptions import AnalysisFailed, ImageIrrelevant, ValidationFailed
from nagrik.models.complaint import IssueType
from nagrik.schemas.ai_outputs import ImageRelevanceOutput
from nagrik.schemas.complaint import ComplaintForm
from nagrik.services.complaint_draft import ComplaintDraft
from nagrik.services.media_gate import DEFAULT_IRRELEVANT_REASON, MediaAnalysisGate

RELEVANT = ImageRelevanceOutput(is_relevant=True, description="D")
IRRELEVANT = ImageRelevanceOutput(is_relevant=False, reason="R")


class TestMediaAnalysisGate(unittest.IsolatedAsyncioTestCase):
    """Verdict handling and failure separation."""

    async def test_relevant_image_returns_description(self):
        classifier = FakeClassifier(verdict=RELEVANT)
        gate = MediaAnalysisGate(classifier=classifier)

        result = await gate.analyze(JPEG_BYTES, "pothole")

        self.assertTrue(result.is_relevant)
        self.assertEqual(result.description, "D")
        self.assertFalse(result.discard_media)
        self.assertEqual(classifier.calls[0][1], IssueType.POTHOLE)

    async def test_irrelevant_image_signals_discard(self):
        gate = MediaAnalysisGate(classifier=FakeClassifier(verdict=IRRELEVANT))

        result = await gate.analyze(JPEG_BYTES, IssueType.GARBAGE)

        self.assertFalse(result.is_relevant)
        self.assertEqual(result.reason, "R")
        self.assertTrue(result.discard_media)
        self.assertIsNone(result.description)

    async def test_irrelevant_without_reason_gets_default(self):
        verdict = ImageRelevanceOutput(is_relevant=False)
        gate = MediaAnalysisGate(classifier=FakeClassifier(verdict=verdict))

        result = await gate.analyze(JPEG_BYTES, "water")

        self.assertEqual(result.reason, DEFAULT_IRRELEVANT_REASON)

    async def test_missing_issue_type_rejected_before_classifier(self):
        classifier = FakeClassifier(verdict=RELEVANT)
        gate = MediaAnalysisGate(classifier=classifier)

        for missing in (None, "", "   "):
            with self.assertRaises(ValidationFailed) as ctx:
                await gate.analyze(JPEG_BYTES, missing)
            self.assertEqual(ctx.exception.fields, ["issue_type"])
        self.assertEqual(classifier.calls, [])

    async def test_unknown_issue_type_rejected(self):
        gate = MediaAnalysisGate(classifier=FakeClassifier(verdict=RELEVANT))
        with self.assertRaises(ValidationFailed):
            await gate.analyze(JPEG_BYTES, "volcano")

    async def test_type_and_size_checks(self):
        classifier = FakeClassifier(verdict=RELEVANT)
        gate = MediaAnalysisGate(classifier=classifier, max_upload_size=100)

        with self.assertRaises(ValidationFailed):
            await gate.analyze(JPEG_BYTES, "pothole", content_type="application/pdf")
        with self.assertRaises(ValidationFailed):
            await gate.analyze(b"", "pothole")
        with self.assertRaises(ValidationFailed):
            await gate.analyze(b"x" * 101, "pothole")
        self.assertEqual(classifier.calls, [])

    async def test_timeout_is_analysis_failure(self):
        gate = MediaAnalysisGate(
            classifier=FakeClassifier(verdict=RELEVANT, delay=1.0), timeout_seconds=0.01
        )
        with self.assertRaises(AnalysisFailed):
            await gate.analyze(JPEG_BYTES, "pothole")

    async def test_transport_error_is_analysis_failure(self):
        classifier = FakeClassifier(error=ConnectionError("gemini down"))
        gate = MediaAnalysisGate(classifier=classifier)

        with self.assertRaises(AnalysisFailed):
            await gate.analyze(JPEG_BYTES, "pothole")
        # Exactly one attempt, no retry
        self.assertEqual(len(classifier.calls), 1)

    async def test_malformed_responses_are_analysis_failures(self):
        for verdict in (None, ImageRelevanceOutput(is_relevant=True, description="  ")):
            gate = MediaAnalysisGate(classifier=FakeClassifier(verdict=verdict))
            with self.subTest(verdict=verdict):
                with self.assertRaises(AnalysisFailed):
                    await gate.analyze(JPEG_BYTES, "pothole")


class TestComplaintDraft(unittest.IsolatedAsyncioTestCase):
    """The caller-side reaction to each gate outcome."""

    def _draft(self) -> ComplaintDraft:
        return ComplaintDraft(ComplaintForm(issue_type="pothole", description="typed by hand"))

    async def test_relevant_fills_description_and_keeps_media(self):
        draft = self._draft()
        gate = MediaAnalysisGate(classifier=FakeClassifier(verdict=RELEVANT))

        verdict = await draft.attach_media(gate, photo())

        self.assertTrue(verdict.is_relevant)
        self.assertEqual(draft.description, "D")
        self.assertIsNotNone(draft.media)
        draft.raise_for_verdict()

    async def test_irrelevant_clears_media_and_keeps_description(self):
        draft = self._draft()
        gate = MediaAnalysisGate(classifier=FakeClassifier(verdict=IRRELEVANT))

        await draft.attach_media(gate, photo())

        self.assertIsNone(draft.media)
        self.assertEqual(draft.description, "typed by hand")
        with self.assertRaises(ImageIrrelevant) as ctx:
            draft.raise_for_verdict()
        self.assertEqual(ctx.exception.reason, "R")

    async def test_irrelevant_replacement_drops_previously_accepted_media(self):
        draft = self._draft()
        await draft.attach_media(MediaAnalysisGate(classifier=FakeClassifier(verdict=RELEVANT)), photo())
        await draft.attach_media(MediaAnalysisGate(classifier=FakeClassifier(verdict=IRRELEVANT)), photo())

        self.assertIsNone(draft.media)
        self.assertEqual(draft.description, "D")

    async def test_analysis_failure_degrades_to_manual_entry(self):
        draft = self._draft()
        gate = MediaAnalysisGate(classifier=FakeClassifier(error=RuntimeError("boom")))

        verdict = await draft.attach_media(gate, photo())

        self.assertIsNone(verdict)
        self.assertTrue(draft.manual_entry_required)
        self.assertIsNotNone(draft.media)
        self.assertEqual(draft.description, "typed by hand")

    async def test_missing_issue_type_propagates(self):
        draft = ComplaintDraft()
        gate = MediaAnalysisGate(classifier=FakeClassifier(verdict=RELEVANT))

        with self.assertRaises(ValidationFailed):
            await draft.attach_media(gate, photo())
        self.assertIsNone(draft.media)


if __name__ == "__main__":
    unittest.main()
