"""
Leaderboard service - Assemble rankings and the exported report from the store
"""
from typing import List

from evalmate.core.scoring import get_question_stats, get_rankings
from evalmate.core.store import DataStore
from evalmate.models import ReportRow, TeamFinalScore, TeamQuestionStats
from evalmate.services.records import get_peer_scores, get_questions, get_teacher_scores
from evalmate.services.team_registry import get_teams


def get_leaderboard(store: DataStore) -> List[TeamFinalScore]:
    """Current ranking, recomputed from the cached records"""
    return get_rankings(
        get_teams(store),
        get_teacher_scores(store),
        get_peer_scores(store),
        get_questions(store),
    )


def get_question_progress(store: DataStore, target: int = 3) -> List[TeamQuestionStats]:
    return get_question_stats(get_teams(store), get_questions(store), target)


def group_label(group_number: int) -> str:
    return f"Group {group_number}"


def build_report(store: DataStore) -> List[ReportRow]:
    """
    Rows for the export collaborator, in ranking order

    Returns:
        List of ReportRow with rank starting at 1
    """
    return [
        ReportRow(
            rank=idx + 1,
            group_number=r.group_number,
            team_name=r.team_name,
            teacher_score=r.teacher_score,
            peer_score_avg=r.peer_score_avg,
            question_score=r.question_score,
            total_score=r.total_score,
        )
        for idx, r in enumerate(get_leaderboard(store))
    ]
