from __future__ import annotations

import json
from pathlib import Path

from matgo.engine.serialize import SnapshotError, restore, snapshot
from matgo.engine.tournament import TournamentState
from matgo.engine.types import CardCatalog
from matgo.services.content import ContentError, ContentService, validate_json
from matgo.services.telemetry import TelemetryService

RESUMABLE_PHASES = ("match_intro", "playing", "go_or_stop", "round_over")
FINISHED_PHASES = ("game_over", "tournament_complete")


class SaveGameService:
    """Keeps the in-progress tournament in a single JSON file.

    A save that fails to parse or validate is reported to telemetry and
    treated as absent, so the caller starts fresh.
    """

    def __init__(self, path: Path, content: ContentService, telemetry: TelemetryService) -> None:
        self._path = path
        self._content = content
        self._telemetry = telemetry

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self, catalog: CardCatalog) -> TournamentState | None:
        if not self._path.exists():
            return None
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            validate_json(raw, self._content.load_schema("savegame.schema.json"), context=str(self._path))
            if not isinstance(raw, dict):
                raise SnapshotError("Save must be an object")
            state = restore(raw, catalog)
        except (json.JSONDecodeError, ContentError, SnapshotError) as e:
            self._telemetry.log("save_rejected", {"path": str(self._path), "error": str(e)})
            return None
        if state.phase not in RESUMABLE_PHASES:
            self._telemetry.log("save_finished", {"path": str(self._path), "phase": state.phase})
            return None
        self._telemetry.log("save_loaded", {"phase": state.phase, "round_index": state.round_index})
        return state

    def save(self, state: TournamentState) -> bool:
        """Write ``state`` if it is mid-tournament; clear the save once it is over."""
        if state.phase in FINISHED_PHASES:
            self.clear()
            return False
        if state.phase not in RESUMABLE_PHASES:
            return False
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(snapshot(state), indent=2), encoding="utf-8")
        tmp.replace(self._path)
        return True

    def clear(self) -> None:
        if self._path.exists():
            self._path.unlink()
            self._telemetry.log("save_cleared", {"path": str(self._path)})
