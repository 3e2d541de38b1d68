# fluent_page/core/controller/runner.py
"""
Minimal sequential runner for ActionSpec[].

Responsibilities:
- Validate each spec via registry
- Execute actions against one Page, in order, with no retries
- Stop at the first failure (later steps are reported as skipped)
- On failure: save screenshot artifact (if artifacts_dir is set)
- Return per-step outcomes for CLI rendering
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .. import registry
from ..action import ActionSpec
from ..errors import ActionExecutionError, FluentPageError
from ..page import Page

logger = logging.getLogger(__name__)


@dataclass
class StepOutcome:
    """UI-friendly outcome used by the CLI."""

    index: int
    name: str
    ok: bool
    detail: str = "-"
    artifact_path: str | None = None
    skipped: bool = False
    extracted: Any = None
    meta: dict[str, Any] | None = None


class Runner:
    def __init__(self, *, artifacts_dir: Path | None = None) -> None:
        self.artifacts_dir = artifacts_dir
        if self.artifacts_dir:
            self.artifacts_dir.mkdir(parents=True, exist_ok=True)

    def run(self, page: Page, specs: list[ActionSpec]) -> list[StepOutcome]:
        outcomes: list[StepOutcome] = []
        failed = False

        for i, spec in enumerate(specs, start=1):
            name = spec.name
            if failed:
                outcomes.append(StepOutcome(index=i, name=name, ok=False, detail="skipped", skipped=True))
                continue

            # 1) validate params
            try:
                _meta, params = registry.validate_spec(spec)
            except (ValidationError, KeyError) as e:
                logger.warning("step %d (%s) invalid: %s", i, name, e)
                outcomes.append(
                    StepOutcome(index=i, name=name, ok=False, detail=f"invalid spec: {e}")
                )
                failed = True
                continue

            # 2) execute once
            try:
                fn = registry.get_action(name)
                res = fn(page, params)
            except ActionExecutionError as e:
                logger.warning("step %d (%s) failed: %s", i, name, e)
                artifact = self._on_failure(page, i, name)
                outcomes.append(
                    StepOutcome(index=i, name=name, ok=False, detail=str(e), artifact_path=artifact)
                )
                failed = True
                continue

            outcomes.append(
                StepOutcome(
                    index=i,
                    name=name,
                    ok=bool(res.ok),
                    detail=_detail(res.extracted_content, res.meta),
                    extracted=res.extracted_content,
                    meta=res.meta,
                )
            )

        return outcomes

    def _on_failure(self, page: Page, index: int, name: str) -> str | None:
        """Best-effort failure artifact (screenshot)."""
        if not self.artifacts_dir:
            return None
        png = self.artifacts_dir / f"fail-{index:02d}-{name}.png"
        try:
            page.screenshot(str(png), full_page=True)
            return str(png)
        except FluentPageError as e:
            logger.debug("failure screenshot not taken: %s", e)
            return None


def _detail(extracted: Any, meta: dict[str, Any]) -> str:
    """Human-friendly detail for the CLI table."""
    if extracted:
        text = extracted if isinstance(extracted, str) else str(extracted)
        return (text[:120] + "…") if len(text) > 120 else text
    if "url" in meta:
        return str(meta["url"])
    if "selector" in meta:
        return f'selector="{meta["selector"]}"'
    return "-"
