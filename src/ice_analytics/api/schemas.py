"""Pydantic schemas for API requests and responses."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ice_analytics.analysis.momentum import MomentumEventKind
from ice_analytics.modeling.xg_model import DangerTier
from ice_analytics.pipelines.rolling import TrendDirection
from ice_analytics.pipelines.season import AnalyticsStatus


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


class XGFeaturesRequest(BaseModel):
    """Request for scoring precomputed shot features."""

    distance: float = Field(..., ge=0, description="Distance to the net in feet")
    angle: float = Field(0.0, description="Angle in degrees, 0 = straight on")
    shot_type: str = Field("wrist", description="Shot type (e.g., 'wrist', 'slap')")
    strength: str = Field("5v5", description="Strength state (5v5, PP, SH, 4v4, 3v3)")
    is_rebound: bool = Field(False, description="Shot follows a prior attempt")
    is_rush: bool = Field(False, description="Shot follows a zone entry")


class ShotLocationRequest(BaseModel):
    """Request for scoring a shot from its rink location."""

    x: float = Field(..., ge=-100, le=100, description="X coordinate (-100 to 100)")
    y: float = Field(..., ge=-42.5, le=42.5, description="Y coordinate (-42.5 to 42.5)")
    shot_type: str = Field("wrist", description="Shot type")
    strength: str = Field("5v5", description="Strength state")
    is_rebound: bool = False
    is_rush: bool = False


class XGPredictionResponse(BaseModel):
    """Response for a single shot prediction."""

    x_goal: float = Field(..., description="Goal probability")
    danger_tier: DangerTier = Field(..., description="low, medium or high")
    distance: float
    angle: float


class GameMetricsModel(BaseModel):
    """Per-game metrics record."""

    model_config = ConfigDict(from_attributes=True)

    game_id: int
    date: str = ""
    subject_id: int
    goals: int = 0
    assists: int = 0
    points: int = 0
    shots_for: int = 0
    shots_against: int = 0
    shot_attempts_for: int = 0
    shot_attempts_against: int = 0
    unblocked_for: int = 0
    unblocked_against: int = 0
    xg_for: float = 0.0
    xg_against: float = 0.0
    goals_for: int = 0
    goals_against: int = 0
    toi: float = 0.0


class RollingMetricsModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    game_number: int
    game_id: int
    date: str
    rolling_pdo: float
    rolling_corsi_pct: float
    rolling_fenwick_pct: float
    rolling_xg_pct: float
    rolling_shooting_pct: float
    rolling_points_per_game: float
    rolling_goals_per_game: float
    rolling_xg_for_per_game: float
    rolling_xg_against_per_game: float
    game_pdo: float
    game_corsi_pct: float
    game_fenwick_pct: float
    game_xg_for: float
    game_goals_for: int


class TrendModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    direction: TrendDirection
    delta: float
    recent_mean: float
    early_mean: float
    sample_size: int


class RollingRequest(BaseModel):
    """Request for a rolling series over supplied game records."""

    games: List[GameMetricsModel]
    window_size: int = Field(10, description="Games per window")
    trend_metric: str = Field("rolling_pdo", description="Rolling field used for the trend")


class RollingResponse(BaseModel):
    series: List[RollingMetricsModel]
    trend: TrendModel


class RoyalRoadSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_passes: int
    passes_with_shots: int
    goals: int
    conversion_rate: float
    total_xg: float


class RushSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_rushes: int
    rush_goals: int
    conversion_rate: float
    shot_on_goal_rate: float
    breakaways: int
    odd_man_rushes: int
    average_transition_seconds: float
    total_rush_xg: float


class ZoneSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_entries: int
    controlled_entries: int
    dump_ins: int
    pass_entries: int
    controlled_entry_rate: float
    entries_with_shot: int
    total_exits: int
    successful_exits: int
    exit_success_rate: float


class DefenseSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_shots_against: int
    total_goals_against: int
    total_xg_against: float
    block_rate: float
    tier_counts: Dict[DangerTier, int]
    high_danger_shots_against: int
    high_danger_goals: int
    high_danger_saves: int
    high_danger_save_share: Optional[float] = None
    shot_suppression_rating: float
    goals_saved_above_expected: float


class MomentumSwingModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    time: float
    period: int
    change: float
    from_team: Optional[int] = None
    to_team: Optional[int] = None
    trigger_event_id: Optional[int] = None
    trigger_kind: Optional[MomentumEventKind] = None


class PeriodMomentumModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    period: int
    dominant_team: Optional[int] = None
    shot_differential: int
    high_danger_differential: int


class MomentumRunModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    team_id: int
    start_time: float
    end_time: float
    intensity: float


class MomentumSummary(BaseModel):
    samples: int
    swings: List[MomentumSwingModel]
    period_momentum: List[PeriodMomentumModel]
    runs: List[MomentumRunModel]


class GameAnalysisResponse(BaseModel):
    """Classifier summaries for one game."""

    game_id: int
    events: int
    shots: int
    skipped_plays: int
    royal_road: RoyalRoadSummary
    rush: RushSummary
    zones: ZoneSummary
    momentum: MomentumSummary
    home_defense: DefenseSummary
    away_defense: DefenseSummary


class XGDifferentialModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    xg_for: float
    xg_against: float
    xg_diff: float
    xg_pct: float


class IndividualXGModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    shots: int
    goals: int
    ixg: float
    goals_above_expected: float
    ixg_per_game: float


class PlayerAnalyticsResponse(BaseModel):
    """Season analytics for a player."""

    player_id: int
    team_id: int
    status: AnalyticsStatus
    games_requested: int
    games_used: int
    skipped_game_ids: List[int]
    game_metrics: List[GameMetricsModel]
    rolling: List[RollingMetricsModel]
    trend: Optional[TrendModel] = None
    xg_differential: Optional[XGDifferentialModel] = None
    individual_xg: Optional[IndividualXGModel] = None
    royal_road: Optional[RoyalRoadSummary] = None
    rush: Optional[RushSummary] = None
    zones: Optional[ZoneSummary] = None
    defense: Optional[DefenseSummary] = None


class TrailPointModel(BaseModel):
    x: float
    y: float
    t: float = Field(..., description="Timestamp in seconds")


class SkatingTrail(BaseModel):
    game_id: Optional[int] = None
    points: List[TrailPointModel]


class FingerprintRequest(BaseModel):
    """Request for a movement fingerprint over one or more skating trails."""

    trails: List[SkatingTrail]
    bucket_count: Optional[int] = Field(None, description="8 or 16; defaults to the configured count")
    min_speed: float = Field(0.0, ge=0, description="Ignore samples slower than this (ft/s)")


class DirectionalBucketModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    direction: float
    frequency: float
    avg_speed: float
    total_count: int


class FingerprintResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    bucket_count: int
    buckets: List[DirectionalBucketModel]
    dominant_direction: float
    avg_overall_speed: float
    total_samples: int
    games_analyzed: int
