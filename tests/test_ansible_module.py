"""
Unit tests for the Ansible module in library/kernprune.py.

ansible.module_utils.basic is stubbed in sys.modules so the module loads
without ansible-core, and AnsibleModule is replaced by a fake that records
exit_json/fail_json.
"""

import importlib.util
import os
import sys
import types
import unittest
from unittest.mock import patch, MagicMock

from kernprune.analyzer import purge_targets
from kernprune.errors import RebootRequiredError
from kernprune.remover import RemovalStatus


MODULE_PATH = os.path.join(os.path.dirname(__file__), "..", "library", "kernprune.py")
LISTING = [
    "ii  linux-image-3.13.0-24-generic  3.13.0-24.47  amd64",
    "ii  linux-image-3.13.0-30-generic  3.13.0-30.55  amd64",
    "ii  linux-image-3.13.0-32-generic  3.13.0-32.57  amd64",
]


def _ansible_stubs():
    ansible = types.ModuleType("ansible")
    module_utils = types.ModuleType("ansible.module_utils")
    basic = types.ModuleType("ansible.module_utils.basic")
    basic.AnsibleModule = MagicMock()
    ansible.module_utils = module_utils
    module_utils.basic = basic
    return {
        "ansible": ansible,
        "ansible.module_utils": module_utils,
        "ansible.module_utils.basic": basic,
    }


def _load_module():
    spec = importlib.util.spec_from_file_location("kernprune_ansible_module", MODULE_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class ModuleExit(Exception):
    """Raised by the fake exit_json/fail_json to stop the module."""

    def __init__(self, failed, result):
        super().__init__(result.get('msg'))
        self.failed = failed
        self.result = result


def _fake_ansible_module(state='present', flavor='generic', check_mode=False):
    fake = MagicMock()
    fake.params = {'state': state, 'flavor': flavor}
    fake.check_mode = check_mode

    def exit_json(**result):
        raise ModuleExit(False, result)

    def fail_json(**result):
        raise ModuleExit(True, result)

    fake.exit_json.side_effect = exit_json
    fake.fail_json.side_effect = fail_json
    return fake


class TestAnsibleModule(unittest.TestCase):
    """Tests for run_module."""

    def setUp(self):
        modules_patcher = patch.dict(sys.modules, _ansible_stubs())
        modules_patcher.start()
        self.addCleanup(modules_patcher.stop)

        self.module = _load_module()
        patchers = [
            patch.object(self.module, 'ensure_preconditions'),
            patch.object(self.module, 'get_current_version', return_value="3.13.0-32"),
            patch.object(self.module, 'list_kernel_packages', return_value=LISTING),
            patch.object(self.module, 'needs_reboot', return_value=False),
        ]
        for patcher in patchers:
            patcher.start()
            self.addCleanup(patcher.stop)

    def _run(self, **params):
        fake = _fake_ansible_module(**params)
        with patch.object(self.module, 'AnsibleModule', return_value=fake):
            with self.assertRaises(ModuleExit) as ctx:
                self.module.run_module()
        return ctx.exception

    def test_present_reports(self):
        """Test that state=present only reports."""
        with patch.object(self.module, 'purge_versions') as mock_purge:
            outcome = self._run(state='present')

        self.assertFalse(outcome.failed)
        self.assertFalse(outcome.result['changed'])
        self.assertEqual(outcome.result['current_version'], "3.13.0-32")
        self.assertEqual(outcome.result['kept_versions'], ["3.13.0-30", "3.13.0-32"])
        self.assertEqual(outcome.result['removed_versions'], ["3.13.0-24"])
        self.assertEqual(outcome.result['removed_packages'], purge_targets("3.13.0-24"))
        mock_purge.assert_not_called()

    def test_absent_check_mode(self):
        """Test that check mode reports a change without purging."""
        with patch.object(self.module, 'purge_versions') as mock_purge:
            outcome = self._run(state='absent', check_mode=True)

        self.assertFalse(outcome.failed)
        self.assertTrue(outcome.result['changed'])
        self.assertIn("Would purge 3 package(s)", outcome.result['msg'])
        mock_purge.assert_not_called()

    def test_absent_purges(self):
        """Test that state=absent purges and reports failures separately."""
        results = [
            ("linux-image-3.13.0-24-generic", RemovalStatus.SUCCESS),
            ("linux-headers-3.13.0-24-generic", RemovalStatus.FAILED),
            ("linux-headers-3.13.0-24", RemovalStatus.SUCCESS),
        ]
        with patch.object(self.module, 'purge_versions', return_value=results) as mock_purge:
            outcome = self._run(state='absent')

        self.assertFalse(outcome.failed)
        self.assertTrue(outcome.result['changed'])
        # apt-get must not write into the module's JSON output
        self.assertTrue(mock_purge.call_args[1]['quiet'])
        self.assertEqual(
            outcome.result['removed_packages'],
            ["linux-image-3.13.0-24-generic", "linux-headers-3.13.0-24"],
        )
        self.assertEqual(outcome.result['failed_packages'], ["linux-headers-3.13.0-24-generic"])

    def test_absent_all_failed(self):
        """Test that the task fails when nothing could be purged."""
        results = [(pkg, RemovalStatus.FAILED) for pkg in purge_targets("3.13.0-24")]
        with patch.object(self.module, 'purge_versions', return_value=results):
            outcome = self._run(state='absent')

        self.assertTrue(outcome.failed)
        self.assertFalse(outcome.result['changed'])

    def test_reboot_required(self):
        """Test that a pending reboot fails the task."""
        with patch.object(
            self.module,
            'plan_retention',
            side_effect=RebootRequiredError("3.13.0-35", "3.13.0-32"),
        ):
            outcome = self._run(state='absent')

        self.assertTrue(outcome.failed)
        self.assertTrue(outcome.result['reboot_required'])
        self.assertIn("3.13.0-35", outcome.result['msg'])

    def test_nothing_to_remove(self):
        """Test a clean system."""
        with patch.object(self.module, 'list_kernel_packages', return_value=LISTING[2:]):
            outcome = self._run(state='absent')

        self.assertFalse(outcome.failed)
        self.assertFalse(outcome.result['changed'])
        self.assertEqual(outcome.result['msg'], "No old kernels to remove")


if __name__ == "__main__":
    unittest.main()
