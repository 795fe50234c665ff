"""
EvalMate Scoring Engine

Final score (max 100):
  Total = Teacher (50) + Peer average (30) + Question score (20)

Rules:
  - Peer average: with 4 or more received scores, drop exactly one lowest
    and one highest total before averaging; otherwise average all
  - Question score: average total of the team's scored questions;
    unscored questions are ignored
  - peer_score_avg and question_score are rounded for display, while the
    total is rounded once from the unrounded components
  - Ranking: descending total, ties keep team order (stable sort)

All functions are pure and recompute from the record lists every time.
"""
from typing import Iterable, List, Optional

from evalmate.models import (
    PeerScore, Question, Team, TeacherScore, TeamFinalScore, TeamQuestionStats,
)
from evalmate.utils import round1


TRIM_THRESHOLD = 4        # received peer scores needed before trimming
QUESTION_TARGET = 3       # questions each team is expected to ask


def trimmed_mean(values: List[float]) -> float:
    """
    Mean after dropping one minimum and one maximum

    Only applied from TRIM_THRESHOLD values on; ties lose one instance each.

    Example:
        >>> trimmed_mean([10, 30, 30, 20, 10])
        20.0
        >>> trimmed_mean([25, 28])
        26.5
    """
    if not values:
        return 0.0

    totals = sorted(values)
    if len(totals) >= TRIM_THRESHOLD:
        totals = totals[1:-1]

    return sum(totals) / len(totals)


def calculate_peer_average(peer_scores: Iterable[PeerScore], team_id: str) -> float:
    """Average peer total received by a team (0 if none)"""
    totals = [s.total for s in peer_scores if s.to_team_id == team_id]
    return trimmed_mean(totals)


def calculate_question_score(questions: Iterable[Question], team_id: str) -> float:
    """Average total of the scored questions asked by a team (0 if none)"""
    scored = [q.total_score for q in questions if q.asking_team_id == team_id and q.scored]
    if not scored:
        return 0.0
    return sum(scored) / len(scored)


def find_teacher_score(teacher_scores: Iterable[TeacherScore], team_id: str) -> Optional[TeacherScore]:
    return next((s for s in teacher_scores if s.team_id == team_id), None)


def calculate_team_final_score(
    team: Team,
    teacher_scores: List[TeacherScore],
    peer_scores: List[PeerScore],
    questions: List[Question],
) -> TeamFinalScore:
    """
    Compose the final score of one team

    Args:
        team: Team to score
        teacher_scores: All teacher scores
        peer_scores: All peer scores
        questions: All questions

    Returns:
        TeamFinalScore with display-rounded components and a total
        rounded once from the raw components
    """
    teacher_score = find_teacher_score(teacher_scores, team.id)
    teacher_total = teacher_score.total if teacher_score else 0

    peer_avg = calculate_peer_average(peer_scores, team.id)
    question_score = calculate_question_score(questions, team.id)

    total = teacher_total + peer_avg + question_score

    return TeamFinalScore(
        team_id=team.id,
        team_name=team.name,
        group_number=team.group_number,
        teacher_score=teacher_total,
        peer_score_avg=round1(peer_avg),
        question_score=round1(question_score),
        total_score=round1(total),
    )


def get_rankings(
    teams: List[Team],
    teacher_scores: List[TeacherScore],
    peer_scores: List[PeerScore],
    questions: List[Question],
) -> List[TeamFinalScore]:
    """Final scores of all teams, best first; equal totals keep team order"""
    results = [
        calculate_team_final_score(team, teacher_scores, peer_scores, questions)
        for team in teams
    ]
    # sorted() is stable
    return sorted(results, key=lambda r: r.total_score, reverse=True)


def get_question_stats(
    teams: List[Team],
    questions: List[Question],
    target: int = QUESTION_TARGET,
) -> List[TeamQuestionStats]:
    """Questions asked per team, scored or not, against the target"""
    stats = []
    for team in teams:
        count = sum(1 for q in questions if q.asking_team_id == team.id)
        stats.append(TeamQuestionStats(
            team_id=team.id,
            question_count=count,
            target_count=target,
            completed=count >= target,
        ))
    return stats
