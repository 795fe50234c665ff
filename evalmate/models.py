"""
Data models for the evaluation state

Attributes are snake_case in Python; the shared JSON document keeps the
camelCase keys (teamId, groupNumber, ...) through the alias generator.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Literal, Optional


Phase = Literal["setup", "presenting", "scoring", "finished"]


class Record(BaseModel):
    """Base for everything stored in the shared document"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)


class TeamMember(Record):
    id: str
    name: str


class Team(Record):
    """Presenting team; group_number is 1-based and dense"""
    id: str
    name: str
    group_number: int
    members: List[TeamMember] = []
    avatar: str = ""


class TeacherScore(Record):
    """Teacher score (max 50), one per team"""
    team_id: str
    completeness: float = Field(ge=0, le=10)
    quality: float = Field(ge=0, le=20)
    presentation: float = Field(ge=0, le=10)
    defense: float = Field(ge=0, le=10)
    total: float = Field(ge=0, le=50)
    timestamp: int


class PeerScore(Record):
    """Peer score (max 30), one per (from_team_id, to_team_id) pair"""
    from_team_id: str
    to_team_id: str
    content: float = Field(ge=6, le=10)
    collaboration: float = Field(ge=6, le=10)
    interaction: float = Field(ge=6, le=10)
    total: float = Field(ge=0, le=30)  # stored as submitted
    timestamp: int


class Question(Record):
    """Question asked by one team to the presenting team (max 20 once scored)"""
    id: str
    asking_team_id: str
    asking_team_name: str = ""
    target_team_id: str
    content: str
    timestamp: int
    scored: bool = False
    relevance: float = Field(default=0, ge=0, le=5)
    depth: float = Field(default=0, ge=0, le=10)
    inspiration: float = Field(default=0, ge=0, le=5)
    total_score: float = Field(default=0, ge=0, le=20)


class RushWinner(Record):
    team_id: str
    team_name: str
    group_number: int
    timestamp: int


class SessionStatus(Record):
    """The single shared document describing the current presentation"""
    active_team_id: Optional[str] = None
    timer_running: bool = False
    time_left: int = 600
    phase: Phase = "setup"
    rush_enabled: bool = False
    rush_winner: Optional[RushWinner] = None


class TeamFinalScore(Record):
    """Derived per-team result, never persisted"""
    team_id: str
    team_name: str
    group_number: int
    teacher_score: float   # 0-50
    peer_score_avg: float  # 0-30, rounded for display
    question_score: float  # 0-20, rounded for display
    total_score: float     # 0-100


class TeamQuestionStats(Record):
    team_id: str
    question_count: int
    target_count: int = 3
    completed: bool


class ReportRow(Record):
    """One line of the exported ranking"""
    rank: int
    group_number: int
    team_name: str
    teacher_score: float
    peer_score_avg: float
    question_score: float
    total_score: float


class ClientConfig(BaseModel):
    """Settings for the synchronized client state"""
    api_base: str = "http://localhost:3001/api"
    cache_ttl: float = 0.5         # freshness window in seconds
    poll_interval: float = 1.0     # seconds between poll ticks
    request_timeout: float = 5.0
    shadow_dir: str = ".evalmate"  # local durable fallback copies
    default_time_left: int = 600
    question_target: int = 3
