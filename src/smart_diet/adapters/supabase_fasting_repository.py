"""Supabase-backed fasting session repository."""

from dataclasses import dataclass

from supabase import Client

from smart_diet.domain.fasting import FastingSession
from smart_diet.errors import PersistenceUnavailableError
from smart_diet.services.fasting import FastingRepository

_COLUMNS = "id, start_time, end_time, target_duration_hours"


@dataclass
class SupabaseFastingRepository(FastingRepository):
    """Supabase implementation for fasting sessions."""

    client: Client

    def upsert_latest(self, session: FastingSession) -> None:
        """Insert a session row, replacing the row with the same id."""
        payload: dict[str, object] = {
            "start_time": session.start_time,
            "end_time": session.end_time,
            "target_duration_hours": session.target_duration_hours,
        }
        if session.id is not None:
            payload["id"] = session.id
        response = self.client.table("fasting_sessions").upsert(payload).execute()
        if not response.data:
            raise PersistenceUnavailableError("Failed to store fasting session")

    def update_latest(self, session: FastingSession) -> None:
        """Update a session row; without an id the newest row is updated."""
        session_id = session.id
        if session_id is None:
            latest = self.latest()
            if latest is None or latest.id is None:
                raise PersistenceUnavailableError("No fasting session to update")
            session_id = latest.id
        self.client.table("fasting_sessions").update(
            {
                "end_time": session.end_time,
                "target_duration_hours": session.target_duration_hours,
            }
        ).eq("id", session_id).execute()

    def latest(self) -> FastingSession | None:
        """Return the most recent session by start time."""
        response = (
            self.client.table("fasting_sessions")
            .select(_COLUMNS)
            .order("start_time", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        end_time = row.get("end_time")
        return FastingSession(
            id=int(row["id"]),
            start_time=int(row["start_time"]),
            end_time=int(end_time) if end_time is not None else None,
            target_duration_hours=int(row.get("target_duration_hours") or 0),
        )
