"""
Service Factory
Centralizes the wiring of stores, the memory model and application services.
"""

from dataclasses import dataclass

from leetsrs.application.calendar import Clock, utc_now
from leetsrs.application.card_service import CardService
from leetsrs.application.config import AppConfig
from leetsrs.application.import_export import ImportExportService
from leetsrs.application.note_service import NoteService
from leetsrs.application.settings_service import SettingsService
from leetsrs.application.stats.service import StatsService
from leetsrs.domain.ports import KeyValueStore, MemoryModel
from leetsrs.infrastructure.adapters.fsrs_scheduler import FsrsMemoryModel
from leetsrs.infrastructure.adapters.storage import FileStore, InMemoryStore


@dataclass
class Services:
    cards: CardService
    stats: StatsService
    settings: SettingsService
    notes: NoteService
    transfer: ImportExportService


def get_store(config: AppConfig) -> KeyValueStore:
    """
    Returns the KeyValueStore implementation selected by config.
    """
    if config.backend == "memory":
        return InMemoryStore()
    return FileStore(config.data_dir)


def build_services(
    config: AppConfig,
    store: KeyValueStore | None = None,
    memory_model: MemoryModel | None = None,
    clock: Clock = utc_now,
) -> Services:
    store = store if store is not None else get_store(config)
    memory_model = memory_model or FsrsMemoryModel()
    tz = config.tzinfo

    settings = SettingsService(store)
    notes = NoteService(store)
    stats = StatsService(store, settings, clock=clock, tz=tz)
    cards = CardService(store, memory_model, settings, stats, notes, clock=clock, tz=tz)
    return Services(
        cards=cards,
        stats=stats,
        settings=settings,
        notes=notes,
        transfer=ImportExportService(store),
    )
