#!/usr/bin/python
# -*- coding: utf-8 -*-

# Copyright: (c) 2025
# Apache License 2.0 (see http://www.apache.org/licenses/LICENSE-2.0)

DOCUMENTATION = r'''
---
module: kernprune
short_description: Purge old Linux kernels
version_added: "0.1.0"
description:
    - Finds installed linux-image and linux-headers packages on Debian/Ubuntu systems
    - Keeps the running kernel and the newest two installed versions
    - Purges the image and headers packages of every older version
    - Refuses to run while a newer kernel than the running one is installed
options:
    state:
        description:
            - Whether to purge old kernels or just report them
        type: str
        choices: [ absent, present ]
        default: present
    flavor:
        description:
            - Kernel flavor suffix of the running kernel and image packages
        type: str
        default: generic
author:
    - KernPrune Contributors
notes:
    - Requires root privileges to purge packages
    - Packages are purged one at a time with apt-get purge -y
requirements:
    - python >= 3.7
    - kernprune
    - dpkg and apt-get (Debian/Ubuntu package management)
'''

EXAMPLES = r'''
# Report which kernels would be purged
- name: Check for old kernels
  kernprune:
    state: present

# Purge old kernels
- name: Clean up old kernels
  kernprune:
    state: absent

# Purge old low latency kernels
- name: Clean up old lowlatency kernels
  kernprune:
    state: absent
    flavor: lowlatency
'''

RETURN = r'''
changed:
    description: Whether any package was purged
    type: bool
    returned: always
    sample: true
msg:
    description: Human readable message about what happened
    type: str
    returned: always
    sample: "Purged 3 package(s) of 1 old kernel(s)"
current_version:
    description: Running kernel version without flavor
    type: str
    returned: always
    sample: "3.13.0-32"
kept_versions:
    description: Kernel versions that are kept
    type: list
    elements: str
    returned: always
    sample: ["3.13.0-30", "3.13.0-32"]
removed_versions:
    description: Kernel versions selected for removal
    type: list
    elements: str
    returned: always
    sample: ["3.13.0-24"]
removed_packages:
    description: Packages purged (or that would be purged)
    type: list
    elements: str
    returned: always
    sample: ["linux-image-3.13.0-24-generic", "linux-headers-3.13.0-24-generic", "linux-headers-3.13.0-24"]
failed_packages:
    description: Packages apt-get failed to purge
    type: list
    elements: str
    returned: always
    sample: []
reboot_required:
    description: Whether a reboot is required before old kernels can be purged, or after purging
    type: bool
    returned: always
    sample: false
'''

from ansible.module_utils.basic import AnsibleModule

# Import kernprune - it should be installed as a package
try:
    from kernprune.analyzer import plan_retention
    from kernprune.config import DEFAULT_SETTINGS
    from kernprune.detector import get_current_version, list_kernel_packages
    from kernprune.errors import KernpruneError, PreconditionError, RebootRequiredError
    from kernprune.remover import purge_versions, ensure_preconditions, RemovalStatus
    from kernprune.utils import needs_reboot
    KERNPRUNE_AVAILABLE = True
    KERNPRUNE_IMPORT_ERROR = None
except ImportError as e:
    KERNPRUNE_AVAILABLE = False
    KERNPRUNE_IMPORT_ERROR = str(e)


def run_module():
    """Main Ansible module execution."""
    module_args = dict(
        state=dict(type='str', default='present', choices=['present', 'absent']),
        flavor=dict(type='str', default='generic'),
    )

    result = dict(
        changed=False,
        msg='',
        current_version='',
        kept_versions=[],
        removed_versions=[],
        removed_packages=[],
        failed_packages=[],
        reboot_required=False,
    )

    module = AnsibleModule(
        argument_spec=module_args,
        supports_check_mode=True
    )

    if not KERNPRUNE_AVAILABLE:
        result['msg'] = f"Failed to import kernprune: {KERNPRUNE_IMPORT_ERROR}"
        module.fail_json(**result)

    require_root = module.params['state'] == 'absent' and not module.check_mode
    try:
        ensure_preconditions(require_root=require_root)
    except PreconditionError as e:
        result['msg'] = str(e)
        module.fail_json(**result)

    settings = DEFAULT_SETTINGS.with_overrides(flavor=module.params['flavor'])

    try:
        current_version = get_current_version(settings)
        result['current_version'] = current_version

        plan = plan_retention(
            list_kernel_packages(settings),
            current_version,
            flavor=settings.flavor,
            keep=settings.keep,
        )
    except RebootRequiredError as e:
        result['reboot_required'] = True
        result['msg'] = str(e)
        module.fail_json(**result)
    except (KernpruneError, RuntimeError) as e:
        result['msg'] = f"Error: {e}"
        module.fail_json(**result)

    result['kept_versions'] = plan.kept
    result['removed_versions'] = plan.removed
    result['removed_packages'] = plan.packages

    if not plan.removed:
        result['msg'] = "No old kernels to remove"
        module.exit_json(**result)

    if module.params['state'] == 'present':
        result['msg'] = f"Found {len(plan.removed)} old kernel(s)"
        module.exit_json(**result)

    if module.check_mode:
        result['changed'] = True
        result['msg'] = f"Would purge {len(plan.packages)} package(s) of {len(plan.removed)} old kernel(s)"
        module.exit_json(**result)

    # stdout carries the module result
    results = purge_versions(plan.decisions, settings, quiet=True)

    purged = [pkg for pkg, status in results if status == RemovalStatus.SUCCESS]
    result['removed_packages'] = purged
    result['failed_packages'] = [pkg for pkg, status in results if status != RemovalStatus.SUCCESS]
    result['changed'] = bool(purged)
    result['reboot_required'] = needs_reboot(settings.reboot_flag_file)

    if not purged:
        result['msg'] = f"Failed to purge any of {len(results)} package(s)"
        module.fail_json(**result)

    # Headers packages that were never installed fail to purge; that alone is not an error
    result['msg'] = f"Purged {len(purged)} package(s) of {len(plan.removed)} old kernel(s)"
    module.exit_json(**result)


def main():
    run_module()


if __name__ == '__main__':
    main()
