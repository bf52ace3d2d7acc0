"""Read-only health diagnostic for the stored history."""

import logging
from dataclasses import dataclass, field

from premonition.services.comparison import compare_weeks
from premonition.services.gap_tracker import GapTracker
from premonition.services.history_store import HistoryStore
from premonition.services.models import LiveTableEntry, Prediction
from premonition.services.progression import summarize_games_played
from premonition.services.scoring import score_all_participants, scores_match
from premonition.services.validators import validate_snapshot

logger = logging.getLogger(__name__)

HEALTHY = "HEALTHY"
WARNING = "WARNING"
UNHEALTHY = "UNHEALTHY"

ERROR = "error"
WARN = "warning"


@dataclass(slots=True)
class HealthCheck:
    category: str
    name: str
    passed: bool
    message: str
    severity: str = ERROR


@dataclass(slots=True)
class HealthReport:
    """All checks run, plus the worst status they add up to."""

    checks: list[HealthCheck] = field(default_factory=list)
    status: str = HEALTHY

    def add(
        self,
        category: str,
        name: str,
        passed: bool,
        message: str,
        severity: str = ERROR,
    ) -> None:
        self.checks.append(HealthCheck(category, name, passed, message, severity))
        if passed:
            return
        if severity == ERROR:
            self.status = UNHEALTHY
        elif self.status == HEALTHY:
            self.status = WARNING

    @property
    def failures(self) -> list[HealthCheck]:
        return [c for c in self.checks if not c.passed]


async def run_health_check(
    store: HistoryStore,
    gap_tracker: GapTracker,
    predictions: list[Prediction],
    live_table: list[LiveTableEntry] | None = None,
) -> HealthReport:
    """
    Inspect the history store without modifying it.

    Checks standings continuity, snapshot validity, score completeness,
    comparison data for the two latest weeks, and that the latest stored
    scores equal a fresh recomputation. With a live table it also reports
    how far the store lags behind the highest complete gameweek.
    """
    report = HealthReport()
    all_standings = await store.get_all_standings()
    all_scores = await store.get_all_scores()
    standings_weeks = sorted(all_standings)
    score_weeks = sorted(all_scores)

    # Data consistency
    if standings_weeks:
        missing = [gw for gw in range(1, standings_weeks[-1] + 1) if gw not in all_standings]
        if missing:
            report.add(
                "Data Consistency",
                "Gameweek continuity",
                False,
                f"Gap detected: GW{', GW'.join(map(str, missing))} missing",
            )
        else:
            report.add(
                "Data Consistency",
                "Gameweek continuity",
                True,
                f"GW1-{standings_weeks[-1]} complete",
            )
    else:
        report.add("Data Consistency", "Gameweek continuity", True, "No gameweeks stored yet")

    invalid_weeks = 0
    for gw, snapshot in all_standings.items():
        result = validate_snapshot(snapshot.positions)
        if not result.valid:
            invalid_weeks += 1
            report.add("Data Consistency", f"GW{gw} standings", False, "; ".join(result.errors))
    if not invalid_weeks:
        report.add("Data Consistency", "Standings validity", True, "All gameweeks have 20 valid teams")

    missing_scores = [gw for gw in standings_weeks if gw not in all_scores]
    extra_scores = [gw for gw in score_weeks if gw not in all_standings]
    if missing_scores:
        report.add(
            "Data Consistency",
            "Scores completeness",
            False,
            f"Missing scores for GW: {', '.join(map(str, missing_scores))}",
        )
    if extra_scores:
        report.add(
            "Data Consistency",
            "Scores completeness",
            False,
            f"Extra scores for GW: {', '.join(map(str, extra_scores))}",
            severity=WARN,
        )
    if not missing_scores and not extra_scores:
        report.add("Data Consistency", "Scores completeness", True, "Scores match standings")

    # Functionality
    if len(score_weeks) >= 2:
        previous, latest = score_weeks[-2], score_weeks[-1]
        comparisons = await compare_weeks(store, previous, latest)
        report.add(
            "Functionality",
            "Week-over-week comparison",
            bool(comparisons),
            f"GW{previous} -> GW{latest}: {len(comparisons or [])} participants compared",
        )
    else:
        report.add(
            "Functionality",
            "Week-over-week comparison",
            False,
            "Need at least two scored gameweeks",
            severity=WARN,
        )

    # Data accuracy
    if standings_weeks and standings_weeks[-1] in all_scores:
        latest_gw = standings_weeks[-1]
        expected = score_all_participants(all_standings[latest_gw], predictions)
        mismatches = scores_match(expected, all_scores[latest_gw])
        report.add(
            "Data Accuracy",
            f"Score verification (GW{latest_gw})",
            not mismatches,
            f"All {len(expected)} scores verified"
            if not mismatches
            else f"{len(mismatches)} mismatches: {'; '.join(mismatches[:3])}",
        )

    # Gaps
    missed = await gap_tracker.get_missed_gameweeks()
    report.add(
        "Gaps",
        "Missed gameweeks",
        not missed,
        "None outstanding"
        if not missed
        else f"Needs manual backfill: GW{', GW'.join(str(r.gameweek) for r in missed)}",
        severity=WARN,
    )

    # Freshness against the live table
    if live_table:
        summary = summarize_games_played(live_table)
        last_saved = standings_weeks[-1] if standings_weeks else 0
        behind_by = summary.min_games - last_saved
        report.add(
            "API",
            "Current state",
            True,
            f"Complete: GW{summary.min_games}, most played: {summary.max_games}, saved: GW{last_saved}",
        )
        report.add(
            "API",
            "Data freshness",
            behind_by <= 0,
            "Up to date" if behind_by <= 0 else f"{behind_by} gameweek(s) behind",
            severity=WARN,
        )

    logger.info(f"Health check finished: {report.status} ({len(report.failures)} failing checks)")
    return report
