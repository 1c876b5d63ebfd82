"""Tests for destructive-command detection."""

from __future__ import annotations

import pytest

from pyorange.tools.builtin_tools.bash_tool import BashTool
from pyorange.tools.policy import DEFAULT_DESTRUCTIVE_PATTERNS, CommandPolicy

DESTRUCTIVE = [
    "rm -rf /",
    "rm /etc/passwd",
    "rm -f /tmp/x",
    "dd if=/dev/zero of=/dev/sda",
    "mkfs.ext4 /dev/sdb1",
    "format c:",
    "sudo apt-get install foo",
    "chmod 777 script.sh",
    "chmod -R 777 /var/www",
    "shred -u secrets.txt",
    "wipe disk.img",
    "kill -9 1234",
    "pkill node",
    "truncate -s 0 app.log",
    "ls && sudo reboot",
]

BENIGN = [
    "ls",
    "ls -la",
    "echo hi",
    "rm build/output.o",
    "cat README.md",
    "git status",
    "kill 1234",
    "chmod 644 file.txt",
    "python -m pytest",
]


class TestDefaultPolicy:
    @pytest.mark.parametrize("command", DESTRUCTIVE)
    def test_destructive_commands_flagged(self, command: str) -> None:
        assert CommandPolicy.default().is_destructive(command)

    @pytest.mark.parametrize("command", BENIGN)
    def test_benign_commands_pass(self, command: str) -> None:
        assert not CommandPolicy.default().is_destructive(command)

    def test_matching_is_case_sensitive(self) -> None:
        policy = CommandPolicy.default()
        assert policy.is_destructive("sudo ls")
        assert not policy.is_destructive("SUDO ls")

    def test_matching_reports_patterns(self) -> None:
        matched = CommandPolicy.default().matching("sudo kill -9 42")
        assert r"\bsudo\b" in matched
        assert r"\bkill\b.*-9" in matched

    def test_default_pattern_list(self) -> None:
        assert len(DEFAULT_DESTRUCTIVE_PATTERNS) == 11
        assert CommandPolicy.default().patterns == DEFAULT_DESTRUCTIVE_PATTERNS


class TestExtendedPolicy:
    def test_extra_patterns_are_added(self) -> None:
        policy = CommandPolicy.default().extended([r"\bgit\s+push\s+--force\b"])
        assert policy.is_destructive("git push --force origin main")
        assert policy.is_destructive("sudo ls")

    def test_duplicates_and_blanks_ignored(self) -> None:
        base = CommandPolicy.default()
        policy = base.extended(["", r"\bsudo\b"])
        assert policy.patterns == base.patterns

    def test_invalid_pattern_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid destructive-command pattern"):
            CommandPolicy(patterns=("(unclosed",))


class TestBashToolAcceptance:
    def test_requires_acceptance_for_destructive(self) -> None:
        assert BashTool().requires_acceptance({"command": "sudo rm -rf /"})

    def test_no_acceptance_for_ls(self) -> None:
        assert not BashTool().requires_acceptance({"command": "ls"})

    def test_custom_policy_injected(self) -> None:
        tool = BashTool(policy=CommandPolicy(patterns=(r"\bnpm\s+publish\b",)))
        assert tool.requires_acceptance({"command": "npm publish"})
        assert not tool.requires_acceptance({"command": "sudo ls"})

    def test_missing_command_does_not_require_acceptance(self) -> None:
        assert not BashTool().requires_acceptance({})
