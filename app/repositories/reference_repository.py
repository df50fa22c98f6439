"""
app/repositories/reference_repository.py

Read-only queries against the reference store (client and tag master data).
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.pacing_target import ReferenceTag
from db.repositories.errors import ReferenceStoreError

logger = logging.getLogger(__name__)

CATEGORY_TYPE_ID = 1
SUB_CATEGORY_TYPE_ID = 2

_TAG_COLUMNS = """
    SELECT
        client_subgroup_id,
        tag_id,
        tag_type_id,
        tag_name,
        CASE
            WHEN tag_type_id = 1 THEN 'Category'
            WHEN tag_type_id = 2 THEN 'Sub Category'
        END AS tag_header
    FROM revinity.tag_master
"""

_TAG_TYPE_IDS_BY_HEADER: dict[str, tuple[int, ...]] = {
    "Category": (CATEGORY_TYPE_ID,),
    "Sub Category": (SUB_CATEGORY_TYPE_ID,),
}


def account_tag(client_subgroup_id: int) -> dict[str, Any]:
    """
    Synthetic tag row for Account targets, which have no reference record.
    """

    return {
        "client_subgroup_id": client_subgroup_id,
        "tag_id": 0,
        "tag_type_id": 0,
        "tag_name": "Account",
        "tag_header": "Account",
    }


class ReferenceRepository:
    """
    Parameterized lookups for clients and tags.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_clients(self) -> list[dict[str, Any]]:
        return self._fetch_all(
            """
            SELECT id, client_subgroup_name
            FROM client_resource.client_subgroup_master
            ORDER BY client_subgroup_name
            """,
            {},
        )

    def get_client_name(self, client_subgroup_id: int) -> str | None:
        rows = self._fetch_all(
            """
            SELECT client_subgroup_name
            FROM client_resource.client_subgroup_master
            WHERE id = :client_subgroup_id
            """,
            {"client_subgroup_id": client_subgroup_id},
        )
        if not rows:
            return None
        return rows[0]["client_subgroup_name"]

    def list_tags(
        self,
        client_subgroup_id: int,
        *,
        tag_header: str | None = None,
        order_by_type: bool = True,
    ) -> list[dict[str, Any]]:
        """
        Active Category / Sub Category tags for one client subgroup.

        ``tag_header`` narrows to one tag type; any other value returns both.
        """

        type_ids = _TAG_TYPE_IDS_BY_HEADER.get(tag_header or "", (CATEGORY_TYPE_ID, SUB_CATEGORY_TYPE_ID))
        order = "tag_type_id, tag_name" if order_by_type else "tag_name"
        return self._fetch_all(
            _TAG_COLUMNS
            + f"""
            WHERE client_subgroup_id = :client_subgroup_id
              AND tag_type_id = ANY(:type_ids)
              AND is_active = TRUE
            ORDER BY {order}
            """,
            {"client_subgroup_id": client_subgroup_id, "type_ids": list(type_ids)},
        )

    def search_tags(self, client_subgroup_id: int, query: str, *, limit: int = 20) -> list[dict[str, Any]]:
        return self._fetch_all(
            _TAG_COLUMNS
            + """
            WHERE client_subgroup_id = :client_subgroup_id
              AND tag_type_id IN (1, 2)
              AND is_active = TRUE
              AND tag_name ILIKE :pattern
            ORDER BY tag_type_id, tag_name
            LIMIT :limit
            """,
            {"client_subgroup_id": client_subgroup_id, "pattern": f"%{query}%", "limit": limit},
        )

    def get_tag(self, tag_id: int) -> dict[str, Any] | None:
        rows = self._fetch_all(
            _TAG_COLUMNS
            + """
            WHERE tag_id = :tag_id
              AND is_active = TRUE
            """,
            {"tag_id": tag_id},
        )
        return rows[0] if rows else None

    def get_active_tag(self, *, client_subgroup_id: int, tag_id: int) -> ReferenceTag | None:
        rows = self._fetch_all(
            _TAG_COLUMNS
            + """
            WHERE client_subgroup_id = :client_subgroup_id
              AND tag_type_id IN (1, 2)
              AND tag_id = :tag_id
              AND is_active = TRUE
            """,
            {"client_subgroup_id": client_subgroup_id, "tag_id": tag_id},
        )
        if not rows:
            return None
        row = rows[0]
        return ReferenceTag(
            client_subgroup_id=row["client_subgroup_id"],
            tag_id=row["tag_id"],
            tag_type_id=row["tag_type_id"],
            tag_name=row["tag_name"],
        )

    def _fetch_all(self, sql: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        try:
            result = self._session.execute(text(sql), params)
            return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.error("Reference store query failed: %s", exc)
            raise ReferenceStoreError("Reference data is unavailable.") from exc
