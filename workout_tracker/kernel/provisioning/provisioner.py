"""
Schema provisioning run once at startup.

Each relation goes through check -> create (if absent), in dependency
order users -> workouts -> exercises. A create rejected because the table
is already there counts as existing, so a misbehaving check never degrades
an intact schema. Demo data is seeded only when the last relation was
created in this run and the demo user is not present yet.

Failures are logged and recorded in the report; they never abort the run
and never stop the application from starting. Whether a failed CREATE
TABLE should really be non-fatal is an open point: the behaviour is kept
as a degraded start and surfaced through /health.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from sqlalchemy import Table, exists, inspect, literal, select
from sqlalchemy.ext.asyncio import AsyncEngine

from workout_tracker.config import get_settings
from workout_tracker.database import build_session_maker
from workout_tracker.kernel.errors import ProvisioningError
from workout_tracker.kernel.identity.password import PasswordHasher, get_password_hasher
from workout_tracker.kernel.models import Exercise, User, Workout
from workout_tracker.kernel.provisioning.seed_data import build_demo_records
from workout_tracker.kernel.store import normalize_email
from workout_tracker.logging_config import get_logger

logger = get_logger(__name__)

# Dependency order: each table only references tables before it
PROVISIONING_ORDER: tuple[Table, ...] = (
    User.__table__,
    Workout.__table__,
    Exercise.__table__,
)


class RelationOutcome(str, Enum):
    """What provisioning did with one relation."""
    EXISTED = "existed"
    CREATED = "created"
    FAILED = "failed"


@dataclass
class ProvisioningReport:
    """Schema state established at startup."""

    relations: Dict[str, RelationOutcome] = field(default_factory=dict)
    seeded: bool = False
    errors: List[ProvisioningError] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        """True when a relation could not be created or seeding failed."""
        return any(e.step in ("create", "seed") for e in self.errors)

    def as_dict(self) -> dict:
        return {
            "relations": {name: outcome.value for name, outcome in self.relations.items()},
            "seeded": self.seeded,
            "degraded": self.degraded,
            "errors": [str(e) for e in self.errors],
        }


class SchemaProvisioner:
    """
    Creates missing tables and seeds demo data.

    Usage:
        report = await SchemaProvisioner(engine).run()
    """

    def __init__(
        self,
        engine: AsyncEngine,
        hasher: Optional[PasswordHasher] = None,
        seed_demo_data: Optional[bool] = None,
        demo_email: Optional[str] = None,
        demo_password: Optional[str] = None,
    ):
        settings = get_settings()
        self.engine = engine
        self.hasher = hasher or get_password_hasher()
        self.seed_demo_data = settings.seed_demo_data if seed_demo_data is None else seed_demo_data
        self.demo_email = normalize_email(demo_email or settings.demo_user_email)
        self.demo_password = demo_password or settings.demo_user_password

    async def run(self) -> ProvisioningReport:
        """Provision every relation in order and seed if appropriate."""
        report = ProvisioningReport()

        for table in PROVISIONING_ORDER:
            if await self._table_exists(table, report):
                logger.info("Table %s exists", table.name)
                report.relations[table.name] = RelationOutcome.EXISTED
                continue

            logger.info("Table %s does not exist, creating it now", table.name)
            report.relations[table.name] = await self._create_table(table, report)

        last = PROVISIONING_ORDER[-1].name
        if report.relations.get(last) is RelationOutcome.CREATED:
            if self.seed_demo_data:
                report.seeded = await self._seed(report)
            else:
                logger.info("Demo data seeding disabled")

        if report.degraded:
            logger.error(
                "Schema provisioning finished degraded; the service will start anyway",
                extra={"schema": report.as_dict()},
            )
        else:
            logger.info("Schema provisioning finished", extra={"schema": report.as_dict()})
        return report

    async def _table_exists(self, table: Table, report: ProvisioningReport) -> bool:
        """
        Look the table up in the database metadata.

        An introspection failure counts as "absent"; the following CREATE
        is then rejected by the database if the table is really there.
        """
        try:
            async with self.engine.connect() as conn:
                return await conn.run_sync(
                    lambda sync_conn: inspect(sync_conn).has_table(table.name)
                )
        except Exception as exc:
            error = ProvisioningError(table.name, "check", exc)
            logger.warning("%s; assuming it does not exist", error)
            report.errors.append(error)
            return False

    async def _table_answers(self, table: Table) -> bool:
        """Whether the table can be queried, bypassing metadata introspection."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(select(literal(1)).select_from(table).limit(1))
        except Exception:
            return False
        return True

    async def _create_table(self, table: Table, report: ProvisioningReport) -> RelationOutcome:
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(table.create)
        except Exception as exc:
            # The check may have missed a table that is already there
            if await self._table_answers(table):
                logger.info("Table %s already exists, create skipped", table.name)
                return RelationOutcome.EXISTED
            error = ProvisioningError(table.name, "create", exc)
            logger.error("%s", error, exc_info=exc)
            report.errors.append(error)
            return RelationOutcome.FAILED

        logger.info("Table %s created", table.name)
        return RelationOutcome.CREATED

    async def _demo_identity_exists(self) -> bool:
        async with self.engine.connect() as conn:
            result = await conn.execute(
                select(exists().where(User.__table__.c.email == self.demo_email))
            )
            return bool(result.scalar())

    async def _seed(self, report: ProvisioningReport) -> bool:
        """Insert the demo user, workouts and exercises in one transaction."""
        try:
            if await self._demo_identity_exists():
                logger.info(
                    "Demo user already present, seeding skipped",
                    extra={"demo_email": self.demo_email},
                )
                return False
            password_hash = await asyncio.to_thread(self.hasher.hash, self.demo_password)
            records = build_demo_records(self.demo_email, password_hash)

            session_maker = build_session_maker(self.engine)
            async with session_maker() as session:
                async with session.begin():
                    # Parents first so foreign keys are satisfied on every backend
                    session.add(records.user)
                    await session.flush()
                    session.add_all(records.workouts)
                    await session.flush()
                    session.add_all(records.exercises)
        except Exception as exc:
            error = ProvisioningError(PROVISIONING_ORDER[-1].name, "seed", exc)
            logger.error("%s", error, exc_info=exc)
            report.errors.append(error)
            return False

        logger.info(
            "Seeded demo data",
            extra={
                "demo_email": self.demo_email,
                "workouts": len(records.workouts),
                "exercises": len(records.exercises),
            },
        )
        return True


async def provision_schema(engine: AsyncEngine) -> ProvisioningReport:
    """Run provisioning with settings-driven defaults."""
    return await SchemaProvisioner(engine).run()
