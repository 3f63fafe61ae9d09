"""
Analysis Pipeline.

The Workspace owns the current snapshot and everything derived from it.
A new analysis result is normalized, indexed and laid out in one pass,
then swapped in wholesale; selection resets and the viewport refits.

Requests are tracked with RequestTokens. Only the most recently issued
token may apply a result, so a slow response can never overwrite a newer
snapshot. Failures are recorded as a retry-able error and leave the last
good snapshot in place.

There is exactly one writer (the Workspace), so no locking is needed:
derived state is rebuilt, never patched.
"""

import logging
import threading
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Dict, List, Optional, Protocol, Tuple

from ..config import LayoutConfig, ViewportConfig
from ..layout.engine import LayoutEngine, LayoutResult
from .exceptions import AnalysisError, RequestCancelledError
from .graph import normalize
from .index import DependencyIndex
from .presentation import risk_label, style_for
from .result import Err, Ok, Result
from .selection import Selected, SelectionController, SelectionState
from .types import Graph
from .viewport import FitInstruction, ViewportSync

logger = logging.getLogger(__name__)

FALLBACK_SUMMARY = "No dependencies found in the analyzed source."


class TokenState(StrEnum):
    PENDING = "pending"
    APPLIED = "applied"
    FAILED = "failed"
    CANCELLED = "cancelled"
    SUPERSEDED = "superseded"


class RequestToken:
    """
    Handle for one in-flight analysis request.

    The requester can check `cancelled` (or wait on it from another thread)
    to abandon work whose result would be discarded anyway.
    """

    def __init__(self, serial: int):
        self.serial = serial
        self._state = TokenState.PENDING
        self._abandoned = threading.Event()

    def __repr__(self) -> str:
        return f"RequestToken(#{self.serial}, {self._state})"

    @property
    def state(self) -> TokenState:
        return self._state

    @property
    def is_pending(self) -> bool:
        return self._state is TokenState.PENDING

    @property
    def cancelled(self) -> bool:
        """True once the request was cancelled or superseded."""
        return self._abandoned.is_set()

    def wait_cancelled(self, timeout: Optional[float] = None) -> bool:
        return self._abandoned.wait(timeout)

    def _settle(self, state: TokenState) -> None:
        self._state = state
        if state in (TokenState.CANCELLED, TokenState.SUPERSEDED):
            self._abandoned.set()


class AnalysisSource(Protocol):
    def analyze(self, full_context: str) -> Any: ...


@dataclass(frozen=True)
class Snapshot:
    """One immutable analysis result plus its derived structures."""
    graph: Graph
    index: DependencyIndex
    layout: LayoutResult
    summary: str = ""
    suggestions: Tuple[str, ...] = ()
    serial: int = 0


def build_snapshot(response: Any, engine: LayoutEngine, serial: int = 0) -> Snapshot:
    """Normalize, index and lay out an AnalysisResponse-shaped object."""
    graph = normalize(response.nodes, response.edges)
    index = DependencyIndex.build(graph)
    result = engine.compute(graph)

    summary = response.summary
    if graph.is_fallback and not summary:
        summary = FALLBACK_SUMMARY

    return Snapshot(
        graph=graph,
        index=index,
        layout=result,
        summary=summary,
        suggestions=tuple(response.suggestions),
        serial=serial,
    )


@dataclass(frozen=True)
class ViewState:
    """
    Everything the renderer needs: positioned nodes, edges, summary,
    selection, the latest fit and any pending error.
    """
    snapshot: Optional[Snapshot]
    selection: SelectionState
    fit: Optional[FitInstruction]
    error: Optional[AnalysisError] = None
    pending: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "summary": "",
            "suggestions": [],
            "nodes": [],
            "edges": [],
            "selection": None,
            "fit": self.fit.model_dump() if self.fit else None,
            "error": None,
            "pending": self.pending,
        }

        if self.snapshot is not None:
            snap = self.snapshot
            data["summary"] = snap.summary
            data["suggestions"] = list(snap.suggestions)
            data["nodes"] = _serialize_nodes(snap)
            data["edges"] = [
                {
                    "id": edge.id,
                    "source": edge.source,
                    "target": edge.target,
                    "animated": edge.emphasized,
                }
                for edge in snap.graph.edges
            ]
            data["stats"] = {
                **snap.graph.get_stats(),
                "ranks": snap.layout.rank_count,
                "crossings": snap.layout.crossings,
                "back_edges": list(snap.layout.back_edges),
                "layout_fallback": snap.layout.fallback,
                "orphans": snap.index.find_orphans(),
            }

        if isinstance(self.selection, Selected):
            data["selection"] = {
                "id": self.selection.node_id,
                "dependencies": list(self.selection.dependencies),
                "dependents": list(self.selection.dependents),
            }

        if self.error is not None:
            data["error"] = {
                "kind": self.error.kind,
                "message": str(self.error),
                "retryable": self.error.retryable,
            }

        return data


def _serialize_nodes(snap: Snapshot) -> List[Dict[str, Any]]:
    nodes = []
    for node in snap.graph.nodes:
        position = snap.layout.positions[node.id]
        style = style_for(node)
        nodes.append({
            "id": node.id,
            "type": node.kind.value,
            "data": {
                "label": node.label,
                "fragilityScore": node.fragility_score,
                "details": node.details,
                "risk": risk_label(node.fragility_score),
                "badge": style.badge,
            },
            "position": {"x": position.x, "y": position.y},
        })
    return nodes


class Workspace:
    """
    Single-writer owner of the active snapshot and its derived state.
    """

    def __init__(
        self,
        layout_config: Optional[LayoutConfig] = None,
        viewport_config: Optional[ViewportConfig] = None,
    ):
        self.engine = LayoutEngine(layout_config)
        self.selection = SelectionController()
        self.viewport = ViewportSync(viewport_config)

        self._serial = 0
        self._latest: Optional[RequestToken] = None
        self._snapshot: Optional[Snapshot] = None
        self._fit: Optional[FitInstruction] = None
        self._error: Optional[AnalysisError] = None

    @property
    def snapshot(self) -> Optional[Snapshot]:
        return self._snapshot

    @property
    def error(self) -> Optional[AnalysisError]:
        return self._error

    @property
    def fit(self) -> Optional[FitInstruction]:
        return self._fit

    @property
    def latest_token(self) -> Optional[RequestToken]:
        return self._latest

    # =========================================================================
    # Request lifecycle
    # =========================================================================

    def begin_request(self) -> RequestToken:
        """Issue a new token; a still-pending older one is superseded."""
        previous = self._latest
        if previous is not None and previous.is_pending:
            previous._settle(TokenState.SUPERSEDED)
            logger.debug(f"Request #{previous.serial} superseded")

        self._serial += 1
        token = RequestToken(self._serial)
        self._latest = token
        logger.debug(f"Request #{token.serial} started")
        return token

    def apply(self, token: RequestToken, response: Any) -> bool:
        """
        Replace the snapshot with `response` if `token` is still current.

        Returns:
            bool: False when the response is stale and was discarded.
        """
        if not self._accepts(token):
            logger.info(f"Discarding response for {token!r}")
            return False

        snapshot = build_snapshot(response, self.engine, token.serial)

        # Cancellation may have arrived from the requester while building
        if not self._accepts(token):
            logger.info(f"Discarding response for {token!r}")
            return False

        self._snapshot = snapshot
        self._error = None
        self.selection.reset(snapshot.index)

        cfg = self.engine.config
        fit = self.viewport.sync(snapshot.layout.positions, cfg.node_width, cfg.node_height)
        if fit is not None:
            self._fit = fit

        token._settle(TokenState.APPLIED)
        logger.info(
            f"Applied snapshot #{token.serial}: "
            f"{snapshot.graph.node_count} nodes, {snapshot.graph.edge_count} edges"
        )
        return True

    def fail(self, token: RequestToken, exc: AnalysisError) -> bool:
        """Record a collaborator failure for the current request."""
        if not self._accepts(token):
            return False
        self._error = exc
        token._settle(TokenState.FAILED)
        logger.warning(f"Request #{token.serial} failed ({exc.kind}): {exc}")
        return True

    def cancel(self, token: Optional[RequestToken] = None) -> bool:
        target = token or self._latest
        if target is None or not target.is_pending:
            return False
        target._settle(TokenState.CANCELLED)
        logger.info(f"Request #{target.serial} cancelled")
        return True

    def reset(self) -> None:
        """Abandon any pending request and clear all state."""
        self.cancel()
        self._snapshot = None
        self._error = None
        self._fit = None
        self.selection.reset(None)
        self.viewport.reset()

    def _accepts(self, token: RequestToken) -> bool:
        return token is self._latest and token.is_pending

    # =========================================================================
    # Convenience
    # =========================================================================

    def load(self, response: Any) -> Snapshot:
        """Apply a payload that needs no round trip (demo data, exports)."""
        token = self.begin_request()
        self.apply(token, response)
        return self._snapshot

    def analyze(self, full_context: str, client: AnalysisSource) -> Result[ViewState, AnalysisError]:
        """
        Run one analysis round trip and apply its result.

        Returns:
            Ok(view) when the result was applied, Err(error) when the service
            failed or the request was cancelled or superseded meanwhile.
        """
        token = self.begin_request()
        try:
            response = client.analyze(full_context)
        except AnalysisError as e:
            self.fail(token, e)
            return Err(e)
        except Exception:
            self.cancel(token)
            raise

        if not self.apply(token, response):
            return Err(RequestCancelledError(f"Request #{token.serial} was {token.state}"))
        return Ok(self.view())

    def select(self, node_id: str) -> bool:
        return self.selection.select(node_id)

    def close_selection(self) -> None:
        self.selection.close()

    def view(self) -> ViewState:
        pending = self._latest is not None and self._latest.is_pending
        return ViewState(
            snapshot=self._snapshot,
            selection=self.selection.state,
            fit=self._fit,
            error=self._error,
            pending=pending,
        )
