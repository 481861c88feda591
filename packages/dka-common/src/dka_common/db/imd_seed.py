"""
IMD reference data loading for the DKA audit API.

Reads the published English Indices of Deprivation file (one row per
LSOA) and upserts the LSOA-to-decile mapping into ``imd_deciles``.
The published CSV names its columns verbosely, so the LSOA and decile
columns are located by substring.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable, Iterator
from typing import TextIO

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from dka_common.db.orm_models import ImdDecileORM

LSOA_COLUMN_HINT = "lsoa code"
DECILE_COLUMN_HINT = "index of multiple deprivation (imd) decile"


def _find_column(fieldnames: Iterable[str], hint: str) -> str:
    for name in fieldnames:
        if hint in name.lower():
            return name
    raise ValueError(f"No column matching {hint!r} in IMD file")


def read_deciles(handle: TextIO) -> Iterator[tuple[str, int]]:
    """Yield ``(lsoa_code, decile)`` pairs from an IMD CSV.

    Raises:
        ValueError: If a required column is missing or a decile is not 1-10.
    """
    reader = csv.DictReader(handle)
    fieldnames = reader.fieldnames or []
    lsoa_col = _find_column(fieldnames, LSOA_COLUMN_HINT)
    decile_col = _find_column(fieldnames, DECILE_COLUMN_HINT)

    for row in reader:
        lsoa = (row.get(lsoa_col) or "").strip()
        if not lsoa:
            continue
        decile = int(row[decile_col])
        if not 1 <= decile <= 10:
            raise ValueError(f"Decile {decile} out of range for {lsoa}")
        yield lsoa, decile


async def upsert_deciles(
    session: AsyncSession,
    rows: Iterable[tuple[str, int]],
    *,
    batch_size: int = 5000,
) -> int:
    """Insert or replace decile rows in batches; returns the row count."""
    total = 0
    batch: list[dict[str, object]] = []

    async def _flush() -> None:
        stmt = insert(ImdDecileORM).values(batch)
        stmt = stmt.on_conflict_do_update(
            index_elements=[ImdDecileORM.lsoa_code],
            set_={"imd_decile": stmt.excluded.imd_decile},
        )
        await session.execute(stmt)

    for lsoa, decile in rows:
        batch.append({"lsoa_code": lsoa, "imd_decile": decile})
        if len(batch) >= batch_size:
            await _flush()
            total += len(batch)
            batch = []
    if batch:
        await _flush()
        total += len(batch)

    await session.commit()
    return total
