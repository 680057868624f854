"""
Ordered startup sequence.

Each step has a name and a failure policy. A fatal step stops startup by
re-raising; any other step logs a warning and startup continues. The report
lets callers (and tests) see exactly which steps ran and how they ended.
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from motor.motor_asyncio import AsyncIOMotorClient

from app.database import init_db
from app.dependencies import ServiceContainer
from app.services.auth_service import AuthService
from app.services.settings_service import SettingsService

logger = logging.getLogger(__name__)


@dataclass
class BootstrapStep:
    name: str
    run: Callable[[], Awaitable[object]]
    fatal: bool = False


@dataclass
class StepOutcome:
    name: str
    ok: bool
    error: Optional[str] = None


@dataclass
class BootstrapReport:
    outcomes: List[StepOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(outcome.ok for outcome in self.outcomes)

    @property
    def failed(self) -> List[str]:
        return [outcome.name for outcome in self.outcomes if not outcome.ok]

    def outcome(self, name: str) -> Optional[StepOutcome]:
        for outcome in self.outcomes:
            if outcome.name == name:
                return outcome
        return None


def build_steps(
    container: ServiceContainer,
    client: Optional[AsyncIOMotorClient] = None,
) -> List[BootstrapStep]:
    config = container.config

    async def connect_database():
        await init_db(client)

    async def load_calendar_tokens():
        container.calendar.load_tokens()

    async def ensure_admin():
        await AuthService.ensure_initial_admin(config.ADMIN_EMAIL, config.ADMIN_PASSWORD)

    async def ensure_settings():
        await SettingsService.sync_admin_email(config.ADMIN_EMAIL or None)

    async def verify_mail_transport():
        await container.mailer.verify()

    return [
        BootstrapStep("connect_database", connect_database, fatal=True),
        BootstrapStep("load_calendar_tokens", load_calendar_tokens),
        BootstrapStep("ensure_admin", ensure_admin),
        BootstrapStep("ensure_settings", ensure_settings),
        BootstrapStep("verify_mail_transport", verify_mail_transport),
    ]


async def run_steps(steps: List[BootstrapStep]) -> BootstrapReport:
    report = BootstrapReport()
    for step in steps:
        try:
            await step.run()
        except Exception as e:
            report.outcomes.append(StepOutcome(step.name, ok=False, error=str(e)))
            if step.fatal:
                logger.error(f"Startup step '{step.name}' failed: {e}")
                raise
            logger.warning(f"Startup step '{step.name}' failed, continuing: {e}")
            continue
        report.outcomes.append(StepOutcome(step.name, ok=True))
        logger.info(f"Startup step '{step.name}' completed")
    return report


async def run_bootstrap(
    container: ServiceContainer,
    client: Optional[AsyncIOMotorClient] = None,
) -> BootstrapReport:
    """Run the startup steps in order; raises when a fatal step fails"""
    return await run_steps(build_steps(container, client))
