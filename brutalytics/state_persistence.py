from __future__ import annotations

import json
import logging
from typing import Mapping

import streamlit as st
from pydantic_core import to_jsonable_python

from brutalytics.constants import SS_CONVERSATION, SS_CONVERTED_DIAGNOSES, SS_GOALS, SS_PROFILE
from brutalytics.storage import StorageBackend

LOGGER = logging.getLogger(__name__)

PERSISTED_KEYS: tuple[str, ...] = (SS_GOALS, SS_CONVERSATION, SS_PROFILE, SS_CONVERTED_DIAGNOSES)
_storage_backend: StorageBackend | None = None
_last_persisted_fingerprint: str | None = None


def configure_storage(backend: StorageBackend | None) -> None:
    """Register a storage backend to persist state changes."""

    global _storage_backend, _last_persisted_fingerprint

    _storage_backend = backend
    _last_persisted_fingerprint = None


def load_persisted_state() -> tuple[str, ...]:
    """Hydrate goals, conversation, profile and converted diagnoses from the configured backend.

    Returns the keys that were restored. Unknown keys in the stored payload
    are left out of the session.
    """

    if _storage_backend is None:
        return ()

    try:
        persisted = _storage_backend.load_state()
    except (OSError, ValueError) as exc:
        LOGGER.warning("No se pudo cargar el estado persistido: %s", exc)
        st.warning("No se pudieron cargar los datos guardados.", icon="⚠️")
        return ()

    if not isinstance(persisted, Mapping):
        LOGGER.warning("Estado persistido con formato inesperado: %s", type(persisted).__name__)
        return ()

    restored = {key: value for key, value in persisted.items() if key in PERSISTED_KEYS}
    ignored = sorted(key for key in persisted if key not in PERSISTED_KEYS)
    if ignored:
        LOGGER.debug("Claves persistidas ignoradas: %s", ignored)

    st.session_state.update(restored)
    LOGGER.info("Estado restaurado: %s", ", ".join(restored) or "sin datos")
    return tuple(restored)


def persist_state() -> None:
    """Persist the managed session state keys using the configured backend."""

    global _last_persisted_fingerprint

    if _storage_backend is None:
        return

    payload = {key: st.session_state.get(key) for key in PERSISTED_KEYS if key in st.session_state}
    serialized_payload = json.dumps(payload, default=to_jsonable_python, sort_keys=True)
    if _last_persisted_fingerprint == serialized_payload:
        return

    try:
        _storage_backend.save_state(payload)
        _last_persisted_fingerprint = serialized_payload
    except (OSError, TypeError, ValueError) as exc:
        LOGGER.warning("No se pudo guardar el estado: %s", exc)


__all__ = ["PERSISTED_KEYS", "configure_storage", "load_persisted_state", "persist_state"]
