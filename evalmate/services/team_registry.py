"""Team registration utilities"""
import logging
from typing import Any, List, Optional

from evalmate.core.document import TEAMS
from evalmate.core.store import DataStore
from evalmate.models import Team, TeamMember
from evalmate.services.records import index_of, load_records
from evalmate.utils import generate_id


logger = logging.getLogger(__name__)

AVATARS = ['🚀', '🎯', '💡', '🔥', '⭐', '🏆', '🎨', '🤖', '📊', '🌟', '🎮', '💻']


def renumber(items: List[Any]) -> List[Any]:
    """Group numbers follow list order: 1..N"""
    for i, item in enumerate(items):
        if isinstance(item, dict):
            item["groupNumber"] = i + 1
    return items


def get_teams(store: DataStore) -> List[Team]:
    return load_records(store, TEAMS, Team)


def get_team(store: DataStore, team_id: str) -> Optional[Team]:
    return next((t for t in get_teams(store) if t.id == team_id), None)


async def save_teams(store: DataStore, teams: List[Team]) -> List[Team]:
    """Replace the whole team list"""
    items = renumber([t.to_json() for t in teams])
    await store.set(TEAMS, items)
    return [Team.model_validate(item) for item in items]


async def add_team(store: DataStore, team_name: str) -> Team:
    clean_name = team_name.strip()
    if not clean_name:
        raise ValueError("team_name required")

    items = store.get(TEAMS)
    team = Team(
        id=generate_id(),
        name=clean_name,
        group_number=len(items) + 1,
        members=[],
        avatar=AVATARS[len(items) % len(AVATARS)],
    )
    items.append(team.to_json())
    await store.set(TEAMS, renumber(items))
    logger.info(f"Team added: group {team.group_number} ({clean_name})")
    return team


async def update_team(store: DataStore, team: Team) -> bool:
    """Replace a team by id, keeping its position"""
    items = store.get(TEAMS)
    index = index_of(items, {"id": team.id})
    if index is None:
        return False
    items[index] = team.to_json()
    await store.set(TEAMS, renumber(items))
    return True


async def delete_team(store: DataStore, team_id: str) -> bool:
    items = store.get(TEAMS)
    index = index_of(items, {"id": team_id})
    if index is None:
        return False
    del items[index]
    await store.set(TEAMS, renumber(items))
    return True


async def add_member(store: DataStore, team_id: str, member_name: str) -> Optional[TeamMember]:
    clean_name = member_name.strip()
    team = get_team(store, team_id)
    if team is None or not clean_name:
        return None

    member = TeamMember(id=generate_id(), name=clean_name)
    await update_team(store, team.model_copy(update={"members": team.members + [member]}))
    return member


async def remove_member(store: DataStore, team_id: str, member_id: str) -> bool:
    team = get_team(store, team_id)
    if team is None:
        return False
    members = [m for m in team.members if m.id != member_id]
    if len(members) == len(team.members):
        return False
    await update_team(store, team.model_copy(update={"members": members}))
    return True
