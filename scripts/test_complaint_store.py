"""
Unit tests for the complaint store: code allocation, status transitions,
and the notification sink.
"""

import re
import sys
import unittest
import uuid
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from fakes import TempDatabase

from nagrik.core.exceptions import (
    ComplaintNotFound, InvalidStatusTransition, PersistenceFailed, ValidationFailed
)
from nagrik.models.complaint import ComplaintStatus, IssueType
from nagrik.models.notification import NotificationStage

CODE_PATTERN = re.compile(r"^NGR\d{6}$")


class StoreTestCase(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.db = TempDatabase()
        self.store = await self.db.create()

    async def asyncTearDown(self):
        await self.db.dispose()

    async def _insert(self, **overrides):
        fields = dict(
            state="Delhi",
            city="Delhi",
            issue_type=IssueType.ELECTRICITY,
            description="No power since morning",
        )
        fields.update(overrides)
        return await self.store.insert(**fields)


class TestComplaintInsert(StoreTestCase):

    async def test_insert_assigns_code_and_pending_status(self):
        complaint = await self._insert(district="South Delhi")

        self.assertRegex(complaint.complaint_code, CODE_PATTERN)
        self.assertEqual(complaint.status, ComplaintStatus.PENDING)
        self.assertIsNone(complaint.assigned_to)

        stored = await self.store.get_by_code(complaint.complaint_code)
        self.assertEqual(stored.id, complaint.id)
        self.assertEqual(stored.district, "South Delhi")

    async def test_codes_are_unique(self):
        codes = {(await self._insert()).complaint_code for _ in range(20)}
        self.assertEqual(len(codes), 20)

    async def test_code_collision_retries_with_new_code(self):
        first = await self._insert()
        generated = iter([first.complaint_code, "NGR000001"])
        self.store._generate_code = lambda: next(generated)

        second = await self._insert()

        self.assertEqual(second.complaint_code, "NGR000001")
        self.assertEqual(await self.store.count_complaints(), 2)

    async def test_gives_up_after_configured_attempts(self):
        first = await self._insert()
        self.store._generate_code = lambda: first.complaint_code

        with self.assertRaises(PersistenceFailed):
            await self._insert()
        self.assertEqual(await self.store.count_complaints(), 1)

    async def test_other_integrity_errors_are_not_retried(self):
        codes = []

        def counting_code():
            codes.append(f"NGR{len(codes):06d}")
            return codes[-1]

        self.store._generate_code = counting_code

        with self.assertRaises(PersistenceFailed) as ctx:
            await self._insert(state=None)

        self.assertEqual(len(codes), 1)
        self.assertNotIn("unique complaint code", ctx.exception.message)
        self.assertEqual(await self.store.count_complaints(), 0)

    async def test_empty_description_never_persisted(self):
        with self.assertRaises(ValidationFailed):
            await self._insert(description="   ")
        self.assertEqual(await self.store.count_complaints(), 0)

    async def test_lookup_by_code_is_case_insensitive(self):
        complaint = await self._insert()
        stored = await self.store.get_by_code(complaint.complaint_code.lower())
        self.assertEqual(stored.id, complaint.id)

    async def test_unknown_complaint(self):
        with self.assertRaises(ComplaintNotFound):
            await self.store.get_by_code("NGR999999X")
        with self.assertRaises(ComplaintNotFound):
            await self.store.get_by_id(uuid.uuid4())


class TestStatusTransitions(StoreTestCase):

    async def test_transition_updates_and_appends_atomically(self):
        complaint = await self._insert()

        row = await self.store.transition(
            complaint.id, ComplaintStatus.ASSIGNED,
            note="Auto-routed based on issue type: electricity",
            assigned_to="Electricity Department",
        )

        stored = await self.store.get_by_id(complaint.id)
        self.assertEqual(stored.status, ComplaintStatus.ASSIGNED)
        self.assertEqual(stored.assigned_to, "Electricity Department")

        history = await self.store.list_status_updates(complaint.id)
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].id, row.id)
        self.assertEqual(history[0].status, ComplaintStatus.ASSIGNED)
        self.assertEqual(history[0].assigned_to, "Electricity Department")

    async def test_forward_path_to_closed(self):
        complaint = await self._insert()
        for status in (ComplaintStatus.ASSIGNED, ComplaintStatus.IN_PROGRESS,
                       ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED):
            await self.store.transition(complaint.id, status, note=f"-> {status.value}")

        history = await self.store.list_status_updates(complaint.id)
        self.assertEqual(
            [h.status for h in history],
            [ComplaintStatus.ASSIGNED, ComplaintStatus.IN_PROGRESS,
             ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED],
        )

    async def test_regression_and_skip_rejected_without_writes(self):
        complaint = await self._insert()
        await self.store.transition(complaint.id, ComplaintStatus.ASSIGNED, note="routed")

        for bad in (ComplaintStatus.PENDING, ComplaintStatus.ASSIGNED, ComplaintStatus.RESOLVED):
            with self.subTest(target=bad):
                with self.assertRaises(InvalidStatusTransition):
                    await self.store.transition(complaint.id, bad, note="nope")

        stored = await self.store.get_by_id(complaint.id)
        self.assertEqual(stored.status, ComplaintStatus.ASSIGNED)
        self.assertEqual(len(await self.store.list_status_updates(complaint.id)), 1)

    async def test_update_status_writes_its_own_audit_row(self):
        complaint = await self._insert()

        await self.store.update_status(complaint.id, ComplaintStatus.ASSIGNED, "Electricity Department")

        stored = await self.store.get_by_id(complaint.id)
        self.assertEqual(stored.status, ComplaintStatus.ASSIGNED)
        history = await self.store.list_status_updates(complaint.id)
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].status, ComplaintStatus.ASSIGNED)

        # The change is already recorded; a second row would double count it
        with self.assertRaises(InvalidStatusTransition):
            await self.store.append_status(
                complaint.id, ComplaintStatus.ASSIGNED, "manual", "Electricity Department"
            )
        self.assertEqual(len(await self.store.list_status_updates(complaint.id)), 1)

    async def test_append_status_only_records_the_current_status(self):
        complaint = await self._insert()

        with self.assertRaises(InvalidStatusTransition):
            await self.store.append_status(complaint.id, ComplaintStatus.ASSIGNED, "not yet")

        row = await self.store.append_status(complaint.id, ComplaintStatus.PENDING, "received")
        self.assertEqual(row.status, ComplaintStatus.PENDING)
        with self.assertRaises(InvalidStatusTransition):
            await self.store.append_status(complaint.id, ComplaintStatus.PENDING, "received again")
        self.assertEqual(len(await self.store.list_status_updates(complaint.id)), 1)

    async def test_transition_unknown_complaint(self):
        with self.assertRaises(ComplaintNotFound):
            await self.store.transition(uuid.uuid4(), ComplaintStatus.ASSIGNED, note="x")


class TestNotificationSink(StoreTestCase):

    async def _notify(self, complaint, stage, user_id="anonymous"):
        return await self.store.insert_notification(
            complaint_id=complaint.id,
            complaint_code=complaint.complaint_code,
            stage=stage,
            message=f"{stage.value} message",
            user_id=user_id,
        )

    async def test_one_notification_per_stage(self):
        complaint = await self._insert()

        first = await self._notify(complaint, NotificationStage.CONFIRMATION)
        again = await self._notify(complaint, NotificationStage.CONFIRMATION)

        self.assertIsNotNone(first)
        self.assertEqual(first.sequence, 1)
        self.assertFalse(first.is_read)
        self.assertIsNone(again)
        items, total, _ = await self.store.list_notifications(complaint_id=complaint.id)
        self.assertEqual(total, 1)

    async def test_same_timestamp_still_reads_in_stage_order(self):
        complaint = await self._insert()
        for stage in (NotificationStage.CONFIRMATION, NotificationStage.ACKNOWLEDGEMENT,
                      NotificationStage.RESOLUTION):
            await self._notify(complaint, stage)

        # Force a tie on created_at
        from sqlalchemy import update
        from nagrik.models.notification import Notification
        async with self.db.session_factory() as session:
            async with session.begin():
                await session.execute(
                    update(Notification).values(created_at=datetime(2026, 1, 1, 12, 0, 0))
                )

        items, _, _ = await self.store.list_notifications(complaint_code=complaint.complaint_code)
        self.assertEqual(
            [n.stage for n in items],
            [NotificationStage.CONFIRMATION, NotificationStage.ACKNOWLEDGEMENT,
             NotificationStage.RESOLUTION],
        )

    async def test_read_flags_and_counts(self):
        complaint = await self._insert()
        confirmation = await self._notify(complaint, NotificationStage.CONFIRMATION, user_id="asha")
        await self._notify(complaint, NotificationStage.ACKNOWLEDGEMENT, user_id="asha")

        self.assertTrue(await self.store.mark_notification_read(confirmation.id))
        self.assertFalse(await self.store.mark_notification_read(uuid.uuid4()))

        items, total, unread = await self.store.list_notifications(user_id="asha", unread_only=True)
        self.assertEqual((total, unread), (1, 1))
        self.assertEqual(items[0].stage, NotificationStage.ACKNOWLEDGEMENT)

        self.assertEqual(await self.store.mark_all_notifications_read("asha"), 1)
        _, total, unread = await self.store.list_notifications(user_id="asha")
        self.assertEqual((total, unread), (2, 0))


if __name__ == "__main__":
    unittest.main()
