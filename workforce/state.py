from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Iterable

from .config import CONFIG
from .records import VerificationRecord
from .storage import HISTORY_KEY, THEME_KEY, JsonStore

logger = logging.getLogger(__name__)


def _session_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class AppState:
    """Everything the terminal remembers between events; replaced, never mutated."""

    history: tuple[VerificationRecord, ...] = ()
    dark_mode: bool = True
    session_id: str = field(default_factory=_session_id)
    busy: bool = False
    last_result: VerificationRecord | None = None
    last_error: str | None = None


def append_record(state: AppState, record: VerificationRecord, limit: int | None = None) -> AppState:
    limit = CONFIG.history_limit if limit is None else limit
    history = (record,) + state.history
    return replace(state, history=history[:limit])


def clear_history(state: AppState) -> AppState:
    return replace(state, history=(), last_result=None, last_error=None)


def toggle_theme(state: AppState) -> AppState:
    return replace(state, dark_mode=not state.dark_mode)


def set_busy(state: AppState, busy: bool) -> AppState:
    return replace(state, busy=busy)


def with_result(state: AppState, record: VerificationRecord | None, error: str | None = None) -> AppState:
    return replace(state, last_result=record, last_error=error)


def with_error(state: AppState, error: str) -> AppState:
    return replace(state, last_error=error)


def new_session(state: AppState) -> AppState:
    return replace(state, session_id=_session_id(), busy=False, last_result=None, last_error=None)


def _records_from(raw: Iterable) -> tuple[VerificationRecord, ...]:
    records = []
    for item in raw:
        try:
            records.append(VerificationRecord.from_dict(item))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Dropping unreadable history entry: %s", exc)
    return tuple(records)


def load_state(store: JsonStore, limit: int | None = None) -> AppState:
    limit = CONFIG.history_limit if limit is None else limit
    raw = store.get(HISTORY_KEY, [])
    history = _records_from(raw if isinstance(raw, list) else [])
    dark_mode = store.get(THEME_KEY, "dark") != "light"
    logger.info("Loaded %d history records from %s", len(history), store.path)
    return AppState(history=history[:limit], dark_mode=dark_mode)


def save_state(store: JsonStore, state: AppState) -> None:
    store.update(
        {
            HISTORY_KEY: [r.to_dict() for r in state.history],
            THEME_KEY: "dark" if state.dark_mode else "light",
        }
    )
