"""
Unit tests for issue-type routing.
"""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from nagrik.models.complaint import IssueType
from nagrik.services import routing_resolver
from nagrik.services.routing_resolver import resolve, routing_note


class TestRoutingResolver(unittest.TestCase):
    """Tests for the first-match routing table."""

    def test_closed_set_mapping(self):
        """Every issue type maps to its authority, others to none."""
        expected = {
            IssueType.STREETLIGHT: routing_resolver.STREET_LIGHTING,
            IssueType.POTHOLE: routing_resolver.PUBLIC_WORKS,
            IssueType.GARBAGE: routing_resolver.MUNICIPAL_SANITATION,
            IssueType.DRAINAGE: routing_resolver.WATER_AUTHORITY,
            IssueType.WATER: routing_resolver.WATER_AUTHORITY,
            IssueType.ELECTRICITY: "Electricity Department",
            IssueType.NOISE: routing_resolver.POLLUTION_AUTHORITY,
            IssueType.OTHERS: None,
        }
        for issue_type, authority in expected.items():
            with self.subTest(issue_type=issue_type):
                self.assertEqual(resolve(issue_type), authority)

    def test_idempotent(self):
        """Resolving twice gives the same answer."""
        for issue_type in IssueType:
            self.assertEqual(resolve(issue_type), resolve(issue_type))

    def test_case_insensitive_substring(self):
        self.assertEqual(resolve("ELECTRICITY"), "Electricity Department")
        self.assertEqual(resolve("blocked-Drain"), routing_resolver.WATER_AUTHORITY)
        self.assertEqual(resolve("road_damage"), routing_resolver.PUBLIC_WORKS)
        self.assertEqual(resolve("public transport"), routing_resolver.TRANSPORT_AUTHORITY)

    def test_first_match_wins(self):
        """'street water' hits the water rule before the street rule."""
        self.assertEqual(resolve("street water"), routing_resolver.WATER_AUTHORITY)
        self.assertEqual(resolve("electric streetlight"), "Electricity Department")

    def test_unknown_and_empty(self):
        self.assertIsNone(resolve("stray dogs"))
        self.assertIsNone(resolve(""))
        self.assertIsNone(resolve(None))

    def test_routing_note(self):
        self.assertEqual(
            routing_note(IssueType.GARBAGE),
            "Auto-routed based on issue type: garbage",
        )


if __name__ == "__main__":
    unittest.main()
