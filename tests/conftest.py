"""
Shared Sigma rule samples.
"""

import pytest


POWERSHELL_RULE = """
title: Encoded PowerShell Command
id: 0a1b2c3d-0000-4000-8000-000000000001
status: test
level: high
tags:
    - attack.execution
    - attack.t1059.001
logsource:
    category: process_creation
    product: windows
detection:
    selection:
        Image: '*\\powershell.exe'
        CommandLine|contains: '-enc'
    condition: selection
"""

FILTERED_RULE = """
title: Whoami Not By System
logsource:
    category: process_creation
detection:
    selection:
        CommandLine|contains: whoami
    filter:
        User: SYSTEM
    condition: filter and not selection
"""

WILDCARD_RULE = """
title: Security Log Selections
logsource:
    product: windows
    service: security
detection:
    selection_b:
        EventID: 4688
    selection_a:
        Channel: Security
    condition: 1 of selection_*
"""


@pytest.fixture
def powershell_rule():
    return POWERSHELL_RULE


@pytest.fixture
def filtered_rule():
    return FILTERED_RULE


@pytest.fixture
def wildcard_rule():
    return WILDCARD_RULE


@pytest.fixture
def rules_dir(tmp_path):
    """
    Directory tree with two valid rules, one broken rule and one non-rule file.
    """
    rules = tmp_path / "rules"
    (rules / "windows").mkdir(parents=True)
    (rules / "windows" / "encoded_powershell.yml").write_text(POWERSHELL_RULE, encoding='utf-8')
    (rules / "windows" / "security.yaml").write_text(WILDCARD_RULE, encoding='utf-8')
    (rules / "broken.yml").write_text(
        "title: Broken\nlogsource:\n    product: linux\ndetection:\n    sel:\n        a: b\n    condition: sel and (\n",
        encoding='utf-8',
    )
    (rules / "notes.yml").write_text("just: a config file\n", encoding='utf-8')
    return rules
