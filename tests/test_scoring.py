"""
Tests for the scoring engine: peer trimmed mean, question score, rankings
"""
from evalmate.core.scoring import (
    calculate_peer_average,
    calculate_question_score,
    calculate_team_final_score,
    get_question_stats,
    get_rankings,
    trimmed_mean,
)
from evalmate.models import PeerScore, Question, Team, TeacherScore


def team(team_id, group_number=1, name=None):
    return Team(id=team_id, name=name or team_id, group_number=group_number)


def peer(from_id, to_id, total):
    # sub-scores are not used by the engine, only the stored total
    return PeerScore(
        from_team_id=from_id, to_team_id=to_id,
        content=10, collaboration=10, interaction=10,
        total=total, timestamp=0,
    )


def question(qid, asking, scored, total=0, target="x"):
    return Question(
        id=qid, asking_team_id=asking, target_team_id=target,
        content="why?", timestamp=0, scored=scored, total_score=total,
    )


def teacher(team_id, total):
    return TeacherScore(
        team_id=team_id, completeness=0, quality=0, presentation=0, defense=0,
        total=total, timestamp=0,
    )


def test_peer_average_no_scores():
    """No received scores → 0"""
    assert calculate_peer_average([], "a") == 0


def test_peer_average_trims_one_min_one_max():
    """5 scores [10,30,30,20,10] → drop one 10 and one 30 → 20.0"""
    scores = [peer(f"t{i}", "a", v) for i, v in enumerate([10, 30, 30, 20, 10])]
    assert calculate_peer_average(scores, "a") == 20.0


def test_peer_average_two_scores_untrimmed():
    """2 scores → plain mean"""
    scores = [peer("b", "a", 25), peer("c", "a", 28)]
    assert calculate_peer_average(scores, "a") == 26.5


def test_peer_average_three_scores_untrimmed():
    """3 scores is still below the trim threshold"""
    assert trimmed_mean([10, 20, 30]) == 20.0
    assert trimmed_mean([10, 10, 28]) == 16.0


def test_peer_average_four_scores_trimmed():
    """4 scores → two middle values"""
    assert trimmed_mean([18, 24, 26, 30]) == 25.0


def test_peer_average_only_counts_target_team():
    """Scores given to other teams are ignored"""
    scores = [peer("b", "a", 24), peer("a", "b", 6), peer("c", "b", 30)]
    assert calculate_peer_average(scores, "a") == 24


def test_question_score_excludes_unscored():
    """Scored [20, 15] plus one unscored → 17.5"""
    questions = [
        question("q1", "a", True, 20),
        question("q2", "a", True, 15),
        question("q3", "a", False),
    ]
    assert calculate_question_score(questions, "a") == 17.5


def test_question_score_none_scored():
    """Only unscored questions → 0"""
    assert calculate_question_score([question("q1", "a", False)], "a") == 0


def test_final_score_rounding():
    """Components rounded for display, total rounded once from raw values"""
    peers = [peer("b", "a", 20), peer("c", "a", 20), peer("d", "a", 21)]  # 20.333...
    questions = [question("q1", "a", True, 11), question("q2", "a", True, 12),
                 question("q3", "a", True, 12)]  # 11.666...
    result = calculate_team_final_score(team("a"), [teacher("a", 40)], peers, questions)
    assert result.teacher_score == 40
    assert result.peer_score_avg == 20.3
    assert result.question_score == 11.7
    assert result.total_score == 72.0


def test_final_score_total_uses_raw_components():
    """Rounding each part first would give 30.2; raw sum gives 30.1"""
    peers = [peer("b", "a", 15.16), peer("c", "a", 15.16)]  # 15.16 → 15.2
    questions = [question("q1", "a", True, 14.96)]  # 14.96 → 15.0
    result = calculate_team_final_score(team("a"), [], peers, questions)
    assert result.peer_score_avg == 15.2
    assert result.question_score == 15.0
    assert result.total_score == 30.1


def test_final_score_without_teacher_score():
    """Missing teacher score counts as 0"""
    result = calculate_team_final_score(team("a"), [teacher("b", 50)], [], [])
    assert result.teacher_score == 0
    assert result.total_score == 0


def test_rankings_descending():
    """Higher total first"""
    teams = [team("a", 1), team("b", 2), team("c", 3)]
    scores = [teacher("a", 30), teacher("b", 45), teacher("c", 38)]
    ranking = get_rankings(teams, scores, [], [])
    assert [r.team_id for r in ranking] == ["b", "c", "a"]


def test_rankings_stable_on_ties():
    """Equal totals keep team order"""
    teams = [team("a", 1), team("b", 2), team("c", 3), team("d", 4)]
    scores = [teacher("a", 40), teacher("b", 45), teacher("c", 40), teacher("d", 40)]
    ranking = get_rankings(teams, scores, [], [])
    assert [r.team_id for r in ranking] == ["b", "a", "c", "d"]


def test_question_stats_counts_any_status():
    """Scored and unscored questions both count toward the target"""
    teams = [team("a", 1), team("b", 2)]
    questions = [
        question("q1", "a", True, 10),
        question("q2", "a", False),
        question("q3", "a", False),
        question("q4", "b", False),
    ]
    stats = get_question_stats(teams, questions)
    assert stats[0].question_count == 3
    assert stats[0].target_count == 3
    assert stats[0].completed is True
    assert stats[1].question_count == 1
    assert stats[1].completed is False
