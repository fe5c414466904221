"""
Safety tests for the retention rules.

The running kernel must never be purged, at least one kernel always
remains, and nothing is planned while a newer kernel waits for a reboot.
"""

import unittest

from kernprune.analyzer import Action, decide_retention, plan_retention
from kernprune.errors import RebootRequiredError


def _listing(versions):
    lines = []
    for version in versions:
        lines.append(f"ii  linux-image-{version}-generic  {version}.1  amd64")
        lines.append(f"ii  linux-headers-{version}-generic  {version}.1  amd64")
        lines.append(f"ii  linux-headers-{version}  {version}.1  all")
    return lines


class TestRetentionSafety(unittest.TestCase):
    """Test retention safety guarantees."""

    def setUp(self):
        """Set up installed versions."""
        self.versions = [
            "4.4.0-21",
            "4.4.0-31",
            "4.4.0-101",
            "4.4.0-112",
            "4.15.0-20",
            "4.15.0-29",
        ]

    def test_running_kernel_never_removed(self):
        """Test that the running kernel is kept at every rank."""
        for current in self.versions:
            with self.subTest(current=current):
                decisions = decide_retention(self.versions, current)
                running = [d for d in decisions if d.version == current]
                self.assertEqual(len(running), 1)
                self.assertEqual(running[0].action, Action.KEEP)
                for decision in decisions:
                    for pkg in decision.packages:
                        self.assertNotIn(current, pkg)

    def test_newest_two_always_kept(self):
        """Test that the two newest versions are kept at every rank."""
        for current in self.versions:
            with self.subTest(current=current):
                decisions = decide_retention(self.versions, current)
                self.assertEqual(decisions[-1].action, Action.KEEP)
                self.assertEqual(decisions[-2].action, Action.KEEP)

    def test_at_most_three_kept(self):
        """Test that exactly the running and newest two survive."""
        decisions = decide_retention(self.versions, "4.4.0-21")

        kept = [d.version for d in decisions if d.action == Action.KEEP]
        self.assertEqual(kept, ["4.4.0-21", "4.15.0-20", "4.15.0-29"])

    def test_reboot_gate_produces_no_decisions(self):
        """Test that a newer installed kernel yields no removals at all."""
        lines = _listing(self.versions)

        for current in self.versions[:-1]:
            with self.subTest(current=current):
                with self.assertRaises(RebootRequiredError):
                    plan_retention(lines, current)

    def test_plan_from_newest_running(self):
        """Test the full plan when the newest kernel is running."""
        plan = plan_retention(_listing(self.versions), "4.15.0-29")

        self.assertEqual(plan.removed, ["4.4.0-21", "4.4.0-31", "4.4.0-101", "4.4.0-112"])
        self.assertEqual(len(plan.packages), 12)
        self.assertNotIn("linux-image-4.15.0-20-generic", plan.packages)


if __name__ == "__main__":
    unittest.main()
