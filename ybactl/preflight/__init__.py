"""
Preflight checks gating each lifecycle operation.
"""

from ybactl.preflight.check_sets import (
    PreflightCheckSet,
    backup_check_set,
    install_check_set,
    restore_check_set,
    upgrade_check_set,
)
from ybactl.preflight.checks import Check, CheckResult, CheckStatus
from ybactl.preflight.runner import format_results, log_results, run_checks, should_fail

__all__ = [
    "Check",
    "CheckResult",
    "CheckStatus",
    "PreflightCheckSet",
    "backup_check_set",
    "format_results",
    "install_check_set",
    "log_results",
    "restore_check_set",
    "run_checks",
    "should_fail",
    "upgrade_check_set",
]
