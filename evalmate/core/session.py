"""
Presentation session state: active team, countdown timer, rush (buzzer)

The session is one shared document. Every change goes through the store,
which notifies all mounted views. The phase field is advisory; any caller
may set any phase.
"""
import asyncio
import logging
from typing import List, Optional

from pydantic import ValidationError

from evalmate.core.document import SESSION
from evalmate.core.store import DataStore
from evalmate.models import Phase, RushWinner, SessionStatus, Team
from evalmate.utils import now_ms


logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0


class SessionController:
    """Reads and writes the session document for one client"""

    def __init__(self, store: DataStore, default_time_left: Optional[int] = None) -> None:
        self.store = store
        # countdown length follows the store unless given explicitly
        self.default_time_left = (
            store.default_time_left if default_time_left is None else default_time_left
        )
        self._countdown: Optional[asyncio.Task] = None

    def status(self) -> SessionStatus:
        raw = self.store.get(SESSION)
        try:
            return SessionStatus.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Malformed session document, using default: {e}")
            return SessionStatus(time_left=self.default_time_left)

    async def save(self, status: SessionStatus) -> SessionStatus:
        await self.store.set(SESSION, status.to_json())
        return status

    async def set_phase(self, phase: Phase) -> SessionStatus:
        status = self.status()
        status.phase = phase
        return await self.save(status)

    # ==================== ACTIVE TEAM ====================

    async def switch_team(self, team_id: Optional[str]) -> SessionStatus:
        """Make a team active; the countdown goes back to full and stops"""
        status = self.status()
        status.active_team_id = team_id
        status.time_left = self.default_time_left
        status.timer_running = False
        return await self.save(status)

    async def next_team(self, teams: List[Team]) -> Optional[SessionStatus]:
        return await self._step_team(teams, 1)

    async def previous_team(self, teams: List[Team]) -> Optional[SessionStatus]:
        return await self._step_team(teams, -1)

    async def _step_team(self, teams: List[Team], step: int) -> Optional[SessionStatus]:
        if not teams:
            return None
        active_id = self.status().active_team_id
        index = next((i for i, t in enumerate(teams) if t.id == active_id), None)
        if index is None:
            new_index = 0 if step > 0 else len(teams) - 1
        else:
            new_index = (index + step) % len(teams)
        return await self.switch_team(teams[new_index].id)

    # ==================== TIMER ====================

    async def tick(self) -> SessionStatus:
        """
        Advance the countdown by one second

        Does nothing while the timer is stopped. Reaching zero stops it;
        time_left never goes negative.
        """
        status = self.status()
        if not status.timer_running:
            return status

        status.time_left = max(0, status.time_left - 1)
        if status.time_left == 0:
            status.timer_running = False
        return await self.save(status)

    async def toggle_timer(self) -> SessionStatus:
        status = self.status()
        status.timer_running = not status.timer_running
        return await self.save(status)

    async def reset_timer(self) -> SessionStatus:
        status = self.status()
        status.time_left = self.default_time_left
        status.timer_running = False
        return await self.save(status)

    @property
    def countdown_running(self) -> bool:
        return self._countdown is not None and not self._countdown.done()

    def start_countdown(self) -> None:
        """Tick once per second on the running loop (no-op if already ticking)"""
        if self.countdown_running:
            return
        self._countdown = asyncio.get_running_loop().create_task(self._run_countdown())

    def stop_countdown(self) -> None:
        if self._countdown is None:
            return
        self._countdown.cancel()
        self._countdown = None

    async def _run_countdown(self) -> None:
        while True:
            await asyncio.sleep(TICK_SECONDS)
            await self.tick()

    # ==================== RUSH ====================

    async def start_rush(self) -> SessionStatus:
        status = self.status()
        status.rush_enabled = True
        status.rush_winner = None
        return await self.save(status)

    async def stop_rush(self) -> SessionStatus:
        status = self.status()
        status.rush_enabled = False
        return await self.save(status)

    async def try_rush(self, team: Team) -> bool:
        """
        Claim the rush for a team

        The first caller while rush is enabled wins and closes the rush;
        everyone after gets False and nothing changes.
        """
        status = self.status()
        if not status.rush_enabled or status.rush_winner is not None:
            return False

        status.rush_enabled = False
        status.rush_winner = RushWinner(
            team_id=team.id,
            team_name=team.name,
            group_number=team.group_number,
            timestamp=now_ms(),
        )
        await self.save(status)
        logger.info(f"Rush won by group {team.group_number} ({team.name})")
        return True

    async def clear_rush_winner(self) -> SessionStatus:
        status = self.status()
        status.rush_winner = None
        return await self.save(status)
