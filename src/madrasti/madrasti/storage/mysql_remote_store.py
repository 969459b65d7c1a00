from __future__ import annotations

from typing import Any, Optional

import mysql.connector

from ..core.exceptions import RemoteStoreError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import read_json_column, write_json_column
from .remote_store import RemoteStore

LOAD_SCHOOL_SQL = "SELECT items FROM school_data WHERE school_id=%s AND collection=%s"
SAVE_SCHOOL_SQL = """
    INSERT INTO school_data(school_id, collection, items)
    VALUES(%s,%s,%s)
    ON DUPLICATE KEY UPDATE items=VALUES(items)
"""
LOAD_SYSTEM_SQL = "SELECT value FROM system_settings WHERE setting_key=%s"
SAVE_SYSTEM_SQL = """
    INSERT INTO system_settings(setting_key, value)
    VALUES(%s,%s)
    ON DUPLICATE KEY UPDATE value=VALUES(value)
"""


class MySQLRemoteStore(RemoteStore):
    """Tenant documents in ``school_data``, system documents in ``system_settings``."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def load_school_data(self, school_id: str, slot_key: str) -> Optional[Any]:
        try:
            return read_json_column(self._conn_factory, LOAD_SCHOOL_SQL, (school_id, slot_key), "items")
        except mysql.connector.Error as e:
            raise RemoteStoreError(f"Error loading {slot_key} for {school_id}: {e}") from e

    def save_school_data(self, school_id: str, slot_key: str, value: Any) -> None:
        try:
            write_json_column(self._conn_factory, SAVE_SCHOOL_SQL, (school_id, slot_key), value)
        except mysql.connector.Error as e:
            raise RemoteStoreError(f"Error saving {slot_key} for {school_id}: {e}") from e

    def load_system_data(self, key: str) -> Optional[Any]:
        try:
            return read_json_column(self._conn_factory, LOAD_SYSTEM_SQL, (key,), "value")
        except mysql.connector.Error as e:
            raise RemoteStoreError(f"Error loading system data {key}: {e}") from e

    def save_system_data(self, key: str, value: Any) -> None:
        try:
            write_json_column(self._conn_factory, SAVE_SYSTEM_SQL, (key,), value)
        except mysql.connector.Error as e:
            raise RemoteStoreError(f"Error saving system data {key}: {e}") from e
