"""FastAPI service exposing the analytics engine."""

from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from ice_analytics.analysis.defense import analyze_defensive_coverage
from ice_analytics.analysis.momentum import analyze_momentum
from ice_analytics.analysis.movement import (
    TrailPoint,
    calculate_movement_fingerprint,
    samples_from_trail,
)
from ice_analytics.analysis.royal_road import (
    calculate_royal_road_analytics,
    detect_royal_road_passes,
)
from ice_analytics.analysis.rush import calculate_rush_analytics, detect_rush_attacks
from ice_analytics.analysis.zone_entries import (
    calculate_zone_analytics,
    detect_zone_entries,
    detect_zone_exits,
)
from ice_analytics.api.schemas import (
    DefenseSummary,
    FingerprintRequest,
    FingerprintResponse,
    GameAnalysisResponse,
    GameMetricsModel,
    HealthResponse,
    IndividualXGModel,
    MomentumRunModel,
    MomentumSummary,
    MomentumSwingModel,
    PeriodMomentumModel,
    PlayerAnalyticsResponse,
    RollingMetricsModel,
    RollingRequest,
    RollingResponse,
    RoyalRoadSummary,
    RushSummary,
    ShotLocationRequest,
    TrendModel,
    XGDifferentialModel,
    XGFeaturesRequest,
    XGPredictionResponse,
    ZoneSummary,
)
from ice_analytics.config import settings
from ice_analytics.events import normalize_game_feed
from ice_analytics.features.context import XGFeatures, normalize_shot_type
from ice_analytics.features.geometry import calculate_shot_metrics
from ice_analytics.ingestion.game_feed_io import GameFeedLoader
from ice_analytics.modeling.xg_model import calculate_xg
from ice_analytics.pipelines.game_metrics import GameMetrics, Subject
from ice_analytics.pipelines.rolling import calculate_rolling_metrics, detect_trend
from ice_analytics.pipelines.season import compute_subject_analytics
from ice_analytics.utils.logging import get_logger

logger = get_logger(__name__)

API_VERSION = "0.1.0"

app = FastAPI(
    title="Ice Analytics API",
    description="API for derived hockey analytics: xG, rolling metrics and event classifiers",
    version=API_VERSION,
)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    logger.warning(f"Rejected request to {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def _optional(model, value):
    return model.model_validate(value) if value is not None else None


def _predict(features: XGFeatures) -> XGPredictionResponse:
    prediction = calculate_xg(features)
    return XGPredictionResponse(
        x_goal=prediction.x_goal,
        danger_tier=prediction.danger_tier,
        distance=features.distance,
        angle=features.angle,
    )


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=API_VERSION)


@app.post("/xg/predict", response_model=XGPredictionResponse)
async def predict_xg(request: XGFeaturesRequest):
    """Score a shot from precomputed features."""
    features = XGFeatures(
        distance=request.distance,
        angle=request.angle,
        shot_type=normalize_shot_type(request.shot_type),
        strength=request.strength,
        is_rebound=request.is_rebound,
        is_rush=request.is_rush,
    )
    return _predict(features)


@app.post("/xg/shot", response_model=XGPredictionResponse)
async def predict_shot(request: ShotLocationRequest):
    """Score a shot from its rink coordinates."""
    distance, angle = calculate_shot_metrics(request.x, request.y)
    features = XGFeatures(
        distance=distance,
        angle=angle,
        shot_type=normalize_shot_type(request.shot_type),
        strength=request.strength,
        is_rebound=request.is_rebound,
        is_rush=request.is_rush,
    )
    return _predict(features)


@app.post("/metrics/rolling", response_model=RollingResponse)
async def rolling_metrics(request: RollingRequest):
    """Compute a rolling series and its trend from per-game records."""
    games = [GameMetrics(**game.model_dump()) for game in request.games]
    series = calculate_rolling_metrics(games, request.window_size)
    if request.trend_metric not in RollingMetricsModel.model_fields:
        raise ValueError(f"Unknown trend metric: {request.trend_metric}")
    trend = detect_trend(series, request.trend_metric)
    return RollingResponse(
        series=[RollingMetricsModel.model_validate(entry) for entry in series],
        trend=TrendModel.model_validate(trend),
    )


@app.post("/games/analyze", response_model=GameAnalysisResponse)
async def analyze_game(payload: Dict[str, Any] = Body(...)):
    """Run every classifier over a raw play-by-play payload."""
    feed = normalize_game_feed(payload)
    momentum = analyze_momentum(feed.events, feed.home_team_id, feed.away_team_id)

    home_against = [shot for shot in feed.shots if shot.team_id != feed.home_team_id]
    away_against = [shot for shot in feed.shots if shot.team_id == feed.home_team_id]

    return GameAnalysisResponse(
        game_id=feed.game_id,
        events=len(feed.events),
        shots=len(feed.shots),
        skipped_plays=feed.skipped_plays,
        royal_road=RoyalRoadSummary.model_validate(
            calculate_royal_road_analytics(detect_royal_road_passes(feed))
        ),
        rush=RushSummary.model_validate(calculate_rush_analytics(detect_rush_attacks(feed))),
        zones=ZoneSummary.model_validate(
            calculate_zone_analytics(detect_zone_entries(feed.events), detect_zone_exits(feed.events))
        ),
        momentum=MomentumSummary(
            samples=len(momentum.samples),
            swings=[MomentumSwingModel.model_validate(s) for s in momentum.swings],
            period_momentum=[PeriodMomentumModel.model_validate(p) for p in momentum.period_momentum],
            runs=[MomentumRunModel.model_validate(r) for r in momentum.runs],
        ),
        home_defense=DefenseSummary.model_validate(
            analyze_defensive_coverage(home_against, feed.events)
        ),
        away_defense=DefenseSummary.model_validate(
            analyze_defensive_coverage(away_against, feed.events)
        ),
    )


@app.post("/movement/fingerprint", response_model=FingerprintResponse)
async def movement_fingerprint(request: FingerprintRequest):
    """Directional skating fingerprint from timestamped position trails."""
    samples = []
    for trail in request.trails:
        points = [TrailPoint(p.x, p.y, p.t) for p in trail.points]
        samples.extend(samples_from_trail(points, trail.game_id))

    bucket_count = (
        request.bucket_count if request.bucket_count is not None else settings.default_bucket_count
    )
    fingerprint = calculate_movement_fingerprint(samples, bucket_count, request.min_speed)
    return FingerprintResponse.model_validate(fingerprint)


@app.get("/players/{player_id}/analytics", response_model=PlayerAnalyticsResponse)
def player_analytics(
    player_id: int,
    team_id: int = Query(..., description="Team the player skated for"),
    window: Optional[int] = Query(None, description="Rolling window size"),
):
    """Season analytics for a player over every stored game feed."""
    loader = GameFeedLoader(settings.game_feed_path)
    game_ids = loader.list_game_ids()
    if not game_ids:
        raise HTTPException(status_code=404, detail="No game feeds available")

    analytics = compute_subject_analytics(
        game_ids,
        loader,
        Subject.player(player_id, team_id),
        window=window if window is not None else settings.default_rolling_window,
    )

    return PlayerAnalyticsResponse(
        player_id=player_id,
        team_id=team_id,
        status=analytics.status,
        games_requested=analytics.games_requested,
        games_used=analytics.games_used,
        skipped_game_ids=analytics.skipped_game_ids,
        game_metrics=[GameMetricsModel.model_validate(g) for g in analytics.game_metrics],
        rolling=[RollingMetricsModel.model_validate(r) for r in analytics.rolling],
        trend=_optional(TrendModel, analytics.trend),
        xg_differential=_optional(XGDifferentialModel, analytics.xg_differential),
        individual_xg=_optional(IndividualXGModel, analytics.individual_xg),
        royal_road=_optional(RoyalRoadSummary, analytics.royal_road),
        rush=_optional(RushSummary, analytics.rush),
        zones=_optional(ZoneSummary, analytics.zones),
        defense=_optional(DefenseSummary, analytics.defense),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
