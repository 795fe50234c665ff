"""
Typed access to score and question records

Collections are read from the store snapshot and parsed into models;
records that fail validation are skipped with a warning. Writes work on the
raw stored list (upsert by key, last write wins), so entries this client
cannot parse are carried over untouched.
"""
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import ValidationError

from evalmate.core.document import PEER_SCORES, QUESTIONS, TEACHER_SCORES
from evalmate.core.store import DataStore
from evalmate.models import PeerScore, Question, Record, TeacherScore
from evalmate.utils import generate_id, now_ms


logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


def load_records(store: DataStore, name: str, model: Type[R]) -> List[R]:
    records = []
    for item in store.get(name):
        try:
            records.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed {model.__name__} in '{name}': {e}")
    return records


def index_of(items: List[Any], match: Dict[str, Any]) -> Optional[int]:
    """Position of the first stored entry whose wire keys equal match"""
    for i, item in enumerate(items):
        if isinstance(item, dict) and all(item.get(k) == v for k, v in match.items()):
            return i
    return None


async def upsert_record(store: DataStore, name: str, record: Record, keys: List[str]) -> bool:
    """Insert record, or replace the stored entry with the same key fields"""
    items = store.get(name)
    item = record.to_json()
    index = index_of(items, {k: item[k] for k in keys})
    if index is None:
        items.append(item)
    else:
        items[index] = item
    return await store.set(name, items)


# ==================== TEACHER SCORES ====================

def get_teacher_scores(store: DataStore) -> List[TeacherScore]:
    return load_records(store, TEACHER_SCORES, TeacherScore)


def get_teacher_score_by_team(store: DataStore, team_id: str) -> Optional[TeacherScore]:
    return next((s for s in get_teacher_scores(store) if s.team_id == team_id), None)


async def save_teacher_score(store: DataStore, score: TeacherScore) -> TeacherScore:
    """Insert or replace the teacher score of score.team_id"""
    await upsert_record(store, TEACHER_SCORES, score, ["teamId"])
    return score


async def score_team(
    store: DataStore,
    team_id: str,
    completeness: float,
    quality: float,
    presentation: float,
    defense: float,
) -> TeacherScore:
    """Build a teacher score from its parts and save it"""
    score = TeacherScore(
        team_id=team_id,
        completeness=completeness,
        quality=quality,
        presentation=presentation,
        defense=defense,
        total=completeness + quality + presentation + defense,
        timestamp=now_ms(),
    )
    return await save_teacher_score(store, score)


# ==================== PEER SCORES ====================

def get_peer_scores(store: DataStore) -> List[PeerScore]:
    return load_records(store, PEER_SCORES, PeerScore)


def get_peer_scores_for_team(store: DataStore, to_team_id: str) -> List[PeerScore]:
    return [s for s in get_peer_scores(store) if s.to_team_id == to_team_id]


def has_peer_scored(store: DataStore, from_team_id: str, to_team_id: str) -> bool:
    return any(
        s.from_team_id == from_team_id and s.to_team_id == to_team_id
        for s in get_peer_scores(store)
    )


async def save_peer_score(store: DataStore, score: PeerScore) -> PeerScore:
    """
    Insert or replace the score for (from_team_id, to_team_id)

    Raises:
        ValueError: If a team scores itself
    """
    if score.from_team_id == score.to_team_id:
        raise ValueError("A team cannot score itself")

    await upsert_record(store, PEER_SCORES, score, ["fromTeamId", "toTeamId"])
    return score


async def submit_peer_score(
    store: DataStore,
    from_team_id: str,
    to_team_id: str,
    content: float,
    collaboration: float,
    interaction: float,
) -> PeerScore:
    score = PeerScore(
        from_team_id=from_team_id,
        to_team_id=to_team_id,
        content=content,
        collaboration=collaboration,
        interaction=interaction,
        total=content + collaboration + interaction,
        timestamp=now_ms(),
    )
    return await save_peer_score(store, score)


# ==================== QUESTIONS ====================

def get_questions(store: DataStore) -> List[Question]:
    return load_records(store, QUESTIONS, Question)


def get_questions_for_team(store: DataStore, target_team_id: str) -> List[Question]:
    """Questions asked to a presenting team"""
    return [q for q in get_questions(store) if q.target_team_id == target_team_id]


def get_questions_by_asking_team(store: DataStore, asking_team_id: str) -> List[Question]:
    return [q for q in get_questions(store) if q.asking_team_id == asking_team_id]


def get_team_question_count(store: DataStore, asking_team_id: str) -> int:
    return len(get_questions_by_asking_team(store, asking_team_id))


def get_unscored_count(store: DataStore, target_team_id: str) -> int:
    return sum(1 for q in get_questions_for_team(store, target_team_id) if not q.scored)


async def save_question(store: DataStore, question: Question) -> Question:
    items = store.get(QUESTIONS)
    items.append(question.to_json())
    await store.set(QUESTIONS, items)
    return question


async def submit_question(
    store: DataStore,
    asking_team_id: str,
    asking_team_name: str,
    target_team_id: str,
    content: str,
) -> Question:
    """
    Create an unscored question

    Raises:
        ValueError: If the content is blank or a team asks itself
    """
    content = content.strip()
    if not content:
        raise ValueError("Question content required")
    if asking_team_id == target_team_id:
        raise ValueError("A team cannot ask itself")

    question = Question(
        id=generate_id(),
        asking_team_id=asking_team_id,
        asking_team_name=asking_team_name,
        target_team_id=target_team_id,
        content=content,
        timestamp=now_ms(),
    )
    return await save_question(store, question)


async def update_question(store: DataStore, question: Question) -> bool:
    """Replace a question by id; returns False if it does not exist"""
    items = store.get(QUESTIONS)
    index = index_of(items, {"id": question.id})
    if index is None:
        return False
    items[index] = question.to_json()
    await store.set(QUESTIONS, items)
    return True


async def score_question(
    store: DataStore,
    question_id: str,
    relevance: float,
    depth: float,
    inspiration: float,
) -> Optional[Question]:
    """Teacher scores a question in place"""
    question = next((q for q in get_questions(store) if q.id == question_id), None)
    if question is None:
        return None

    scored = question.model_copy(update={
        "scored": True,
        "relevance": relevance,
        "depth": depth,
        "inspiration": inspiration,
        "total_score": relevance + depth + inspiration,
    })
    await update_question(store, scored)
    return scored
