"""Pick the best-performing candidate among same-title sources."""

from __future__ import annotations

import asyncio
import math
from collections.abc import Callable, Iterable

import structlog

from vodhub.domain.entities import (
    CandidateScore,
    ProbeResult,
    ScoreBounds,
    SearchResult,
    SelectionOutcome,
)
from vodhub.domain.exceptions import NoCandidatesError, ProbeFailure
from vodhub.domain.ports import StreamProberPort

log = structlog.get_logger(__name__)

_BoundsFn = Callable[[Iterable[ProbeResult]], ScoreBounds]
_ScoreFn = Callable[[ProbeResult, ScoreBounds], tuple[float, float, float, float]]

_SessionKey = tuple[tuple[str, str, str], ...]


def _session_key(candidates: list[SearchResult]) -> _SessionKey:
    return tuple(
        (c.source, c.id, c.representative_episode() or "") for c in candidates
    )


class SourceSelector:
    """Probes candidates and selects the highest composite score.

    Probing runs in two sequential batches of ``ceil(n / 2)``; probes
    inside a batch run concurrently.  Concurrent calls over the same
    candidate set share one session.
    """

    def __init__(
        self,
        prober: StreamProberPort,
        *,
        bounds_fn: _BoundsFn,
        score_fn: _ScoreFn,
        probe_timeout: float = 5.0,
    ) -> None:
        self._prober = prober
        self._bounds_fn = bounds_fn
        self._score_fn = score_fn
        self._probe_timeout = probe_timeout
        self._sessions: dict[_SessionKey, asyncio.Task[SelectionOutcome]] = {}

    async def select_best(self, candidates: list[SearchResult]) -> SelectionOutcome:
        """Return the winner plus every candidate's score breakdown.

        Raises:
            NoCandidatesError: *candidates* is empty.
        """
        if not candidates:
            raise NoCandidatesError("no candidates to select from")
        if len(candidates) == 1:
            only = candidates[0]
            return SelectionOutcome(
                best=only, scores=[CandidateScore(candidate=only)], probed=False
            )

        key = _session_key(candidates)
        task = self._sessions.get(key)
        if task is None:
            task = asyncio.create_task(self._run_session(list(candidates)))
            self._sessions[key] = task
            task.add_done_callback(lambda _t: self._sessions.pop(key, None))
        else:
            log.debug("selection_session_joined", candidates=len(candidates))
        # One caller going away must not cancel the shared session.
        return await asyncio.shield(task)

    async def _probe_one(self, candidate: SearchResult) -> CandidateScore:
        url = candidate.representative_episode()
        if not url:
            return CandidateScore(candidate=candidate, error="no episodes")
        try:
            probe = await asyncio.wait_for(
                self._prober.probe(url), timeout=self._probe_timeout
            )
        except TimeoutError:
            error = f"probe timed out after {self._probe_timeout:g}s"
        except ProbeFailure as exc:
            error = str(exc)
        except Exception as exc:
            log.warning("probe_crashed", source=candidate.source, exc_info=True)
            error = str(exc) or type(exc).__name__
        else:
            return CandidateScore(candidate=candidate, probe=probe)

        log.info("probe_failed", source=candidate.source, url=url, error=error)
        return CandidateScore(candidate=candidate, error=error)

    async def _run_session(self, candidates: list[SearchResult]) -> SelectionOutcome:
        half = math.ceil(len(candidates) / 2)
        probed: list[CandidateScore] = []
        for batch in (candidates[:half], candidates[half:]):
            if batch:
                settled = await asyncio.gather(*(self._probe_one(c) for c in batch))
                probed.extend(settled)

        # Bounds only after every probe settled.
        bounds = self._bounds_fn(s.probe for s in probed if s.probe is not None)

        scores: list[CandidateScore] = []
        best: CandidateScore | None = None
        for entry in probed:
            if entry.probe is None:
                scores.append(entry)
                continue
            q, s, lat, total = self._score_fn(entry.probe, bounds)
            scored = CandidateScore(
                candidate=entry.candidate,
                probe=entry.probe,
                quality_score=q,
                speed_score=s,
                latency_score=lat,
                score=total,
            )
            scores.append(scored)
            # Strictly greater: ties keep the earlier candidate.
            if best is None or total > (best.score or 0.0):
                best = scored

        winner = best.candidate if best is not None else candidates[0]
        log.info(
            "source_selected",
            candidates=len(candidates),
            succeeded=sum(1 for s in scores if s.ok),
            source=winner.source,
            score=best.score if best is not None else None,
        )
        return SelectionOutcome(best=winner, scores=scores)
