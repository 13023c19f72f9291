from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .assignments.roster import RosterView
from .assignments.service import AssignmentResolver
from .assignments.store_assignment_repository import StoreAssignmentRepository
from .database.connection import DBConfig, DatabaseConnection
from .directory.repository import StoreDirectory
from .policy.authorization import AuthorizationPort, RolePolicy
from .shifts.service import ShiftTemplateRegistry
from .shifts.store_shift_repository import StoreShiftCategoryRepository, StoreShiftRepository
from .store.memory_store import InMemoryRecordStore
from .store.mysql_store import MySQLRecordStore
from .store.repository import RecordStore
from .store.rest_store import RestRecordStore
from .timetables.clock import LiveScheduleClock
from .timetables.engine import TimetableSlotEngine
from .timetables.service import TimetableService
from .timetables.store_timetable_repository import StoreTimeTableRepository


@dataclass(frozen=True)
class Container:
    store: RecordStore

    shifts_repo: StoreShiftRepository
    categories_repo: StoreShiftCategoryRepository
    assignments_repo: StoreAssignmentRepository
    timetables_repo: StoreTimeTableRepository
    directory: StoreDirectory

    authorization: AuthorizationPort
    shift_registry: ShiftTemplateRegistry
    assignment_resolver: AssignmentResolver
    roster: RosterView
    slot_engine: TimetableSlotEngine
    timetable_service: TimetableService
    clock: LiveScheduleClock


def build_store(settings) -> RecordStore:
    backend = str(getattr(settings, "STORE_BACKEND", "memory")).lower()
    if backend == "mysql":
        config = DBConfig.from_dict(getattr(settings, "DB_CONFIG"))
        return MySQLRecordStore(DatabaseConnection.get_instance(config))
    if backend == "rest":
        return RestRecordStore(
            getattr(settings, "REST_URL", ""),
            getattr(settings, "REST_KEY", ""),
            timeout=float(getattr(settings, "REST_TIMEOUT", 15)),
        )
    if backend == "memory":
        return InMemoryRecordStore()
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


def build_container(
    *,
    store: RecordStore,
    authorization: Optional[AuthorizationPort] = None,
    clock: Optional[LiveScheduleClock] = None,
) -> Container:
    authorization = authorization or RolePolicy()

    shifts_repo = StoreShiftRepository(store)
    categories_repo = StoreShiftCategoryRepository(store)
    assignments_repo = StoreAssignmentRepository(store)
    timetables_repo = StoreTimeTableRepository(store)
    directory = StoreDirectory(store)

    shift_registry = ShiftTemplateRegistry(
        shifts_repo, assignments_repo, categories_repo, authorization=authorization
    )
    assignment_resolver = AssignmentResolver(assignments_repo, shifts_repo, authorization=authorization)
    roster = RosterView(assignment_resolver, shifts_repo)
    slot_engine = TimetableSlotEngine(timetables_repo, shifts_repo, authorization=authorization)
    timetable_service = TimetableService(timetables_repo, slot_engine, authorization=authorization)

    return Container(
        store=store,
        shifts_repo=shifts_repo,
        categories_repo=categories_repo,
        assignments_repo=assignments_repo,
        timetables_repo=timetables_repo,
        directory=directory,
        authorization=authorization,
        shift_registry=shift_registry,
        assignment_resolver=assignment_resolver,
        roster=roster,
        slot_engine=slot_engine,
        timetable_service=timetable_service,
        clock=clock or LiveScheduleClock(),
    )
