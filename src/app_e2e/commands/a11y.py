"""Accessibility checks using axe-core.

axe-core is injected into the page from its CDN and run in the page.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from app_e2e.decorators import command
from app_e2e.models import A11yViolation, E2EError, ErrorCode

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)

AXE_CORE_CDN = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.10.2/axe.min.js"

_RUN_AXE_SCRIPT = """
async ({ context, options }) => {
  const results = await axe.run(context || document, options || {});
  return results.violations;
}
"""


async def inject_axe(page: Page) -> None:
    """Load axe-core into the page unless it is already there.

    Raises:
        E2EError: If axe-core cannot be loaded
    """
    if await page.evaluate("() => typeof window.axe !== 'undefined'"):
        return

    logger.debug("Injecting axe-core from %s", AXE_CORE_CDN)
    await page.add_script_tag(url=AXE_CORE_CDN)
    if not await page.evaluate("() => typeof window.axe !== 'undefined'"):
        raise E2EError(
            code=ErrorCode.COMMAND_FAILED,
            message="axe-core library failed to load",
            details={"url": AXE_CORE_CDN},
        )


def _parse_violations(raw: list[dict[str, Any]]) -> list[A11yViolation]:
    violations: list[A11yViolation] = []
    for item in raw:
        targets: list[str] = []
        for node in item.get("nodes", []):
            targets.extend(str(t) for t in node.get("target", []))
        violations.append(
            A11yViolation(
                rule_id=item.get("id", ""),
                impact=item.get("impact"),
                description=item.get("description", ""),
                help_url=item.get("helpUrl"),
                targets=targets,
            )
        )
    return violations


@command
async def check_a11y(
    page: Page,
    context: str | None = None,
    options: dict[str, Any] | None = None,
    *,
    skip_failures: bool = False,
) -> list[A11yViolation]:
    """Run axe-core against the page (or part of it).

    Args:
        page: Playwright page
        context: Selector limiting the audit; None audits the whole document
        options: axe.run options (e.g. {"runOnly": ["wcag2a", "wcag2aa"]})
        skip_failures: Log violations instead of raising

    Returns:
        Violations found

    Raises:
        E2EError: With A11Y_VIOLATIONS if any are found and skip_failures is False
    """
    await inject_axe(page)
    raw = await page.evaluate(_RUN_AXE_SCRIPT, {"context": context, "options": options})
    violations = _parse_violations(raw or [])

    if not violations:
        return violations

    summary = ", ".join(f"{v.rule_id} ({v.impact or 'n/a'})" for v in violations)
    if skip_failures:
        logger.warning("%d accessibility violation(s): %s", len(violations), summary)
        return violations

    raise E2EError(
        code=ErrorCode.A11Y_VIOLATIONS,
        message=f"{len(violations)} accessibility violation(s) detected: {summary}",
        details={"violations": [v.model_dump() for v in violations]},
    )
