"""Persist credential fixtures as JSON files."""

import asyncio
import json
from pathlib import Path

from credgen.corruptions import Fixture


def dump_json(data: dict) -> str:
    """Serialize a fixture the same way on every run."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


async def write_json(path: Path, data: dict) -> Path:
    """Write ``data`` to ``path``, replacing any previous file."""
    return await asyncio.to_thread(_write, Path(path), dump_json(data))


async def write_fixtures(fixtures: list[Fixture]) -> list[Path]:
    """Write all fixtures; any failure fails the whole batch."""
    return list(
        await asyncio.gather(*(write_json(f.path, f.data) for f in fixtures))
    )
