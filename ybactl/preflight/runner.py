"""
Runs preflight check sets and reports their results.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from common.command_utils import get_symbols
from setup.config_models import AppSettings
from ybactl.preflight.check_sets import PreflightCheckSet
from ybactl.preflight.checks import CheckResult, CheckStatus

module_logger = logging.getLogger(__name__)

_STATUS_SYMBOL_KEYS = {
    CheckStatus.PASS: "success",
    CheckStatus.WARNING: "warning",
    CheckStatus.FAIL: "error",
    CheckStatus.SKIPPED: "info",
}


def run_checks(
    check_set: PreflightCheckSet,
    app_settings: AppSettings,
    skip: Optional[Iterable[str]] = None,
    current_logger: Optional[logging.Logger] = None,
) -> List[CheckResult]:
    """
    Runs every check in `check_set`, in order, and returns one result per check.

    Checks named in `skip` are recorded as skipped without running their
    probe. A check that raises is recorded as a failure; the remaining checks
    still run.
    """
    logger_to_use = current_logger if current_logger else module_logger
    skip_names = set(skip or []) | set(app_settings.preflight.skip)

    unknown = skip_names - set(check_set.names())
    if unknown:
        logger_to_use.warning(
            f"Ignoring unknown preflight checks for {check_set.name}: {', '.join(sorted(unknown))}"
        )

    results: List[CheckResult] = []
    for check in check_set:
        if check.name in skip_names:
            logger_to_use.info(f"Skipping preflight check '{check.name}'")
            results.append(CheckResult(name=check.name, status=CheckStatus.SKIPPED, detail="skipped by operator"))
            continue
        try:
            result = check.execute(app_settings)
        except Exception as e:
            logger_to_use.debug(f"Preflight check '{check.name}' raised", exc_info=True)
            result = CheckResult(name=check.name, status=CheckStatus.FAIL, detail=f"check raised: {e}")
        logger_to_use.debug(f"Preflight check '{check.name}': {result.status.value} {result.detail}")
        results.append(result)
    return results


def should_fail(results: Sequence[CheckResult]) -> bool:
    """True if any check failed. Warnings and skipped checks do not block."""
    return any(result.status == CheckStatus.FAIL for result in results)


def format_results(
    results: Sequence[CheckResult], app_settings: Optional[AppSettings] = None
) -> str:
    """Renders results as an aligned table, one check per line."""
    symbols = get_symbols(app_settings)
    width = max([len(r.name) for r in results] + [len("Check")])
    lines = [f"   {'Check'.ljust(width)}  {'Result'.ljust(8)}  Detail"]
    for result in results:
        symbol = symbols.get(_STATUS_SYMBOL_KEYS[result.status], "")
        lines.append(
            f"{symbol} {result.name.ljust(width)}  {result.status.value.ljust(8)}  {result.detail}"
        )
    return "\n".join(lines)


def log_results(
    results: Sequence[CheckResult],
    app_settings: Optional[AppSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    logger_to_use = current_logger if current_logger else module_logger
    level = logging.ERROR if should_fail(results) else logging.INFO
    logger_to_use.log(level, "Preflight results:\n" + format_results(results, app_settings))
