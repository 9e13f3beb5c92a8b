"""
Panel Store with History

Ordered panel collection plus an undo/redo stack of full-collection snapshots.

Every mutation goes through ``set_panels``. The store separates what a panel
*is* (content, tracked in history) from what is *happening* to it (the
``is_generating_*`` / ``is_playing_audio`` flags, kept in an activity table):

    visible panels = current content snapshot + activity overlay

A ``set_panels`` call whose result only differs in flags updates the activity
table and records nothing, so spinners never end up on the undo stack and
undoing a finished generation restores the pre-call flag state.

Snapshots are tuples of frozen Panels, so pushing one is O(1); only the
collection tuple is rebuilt on a change.

Concurrency: callers run on one event loop. Completion callbacks must use the
function form ``set_panels(lambda prev: ...)`` so they always read the latest
state instead of a snapshot captured when their operation started.
"""

from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from storyforge.core.exceptions import PanelNotFoundError
from storyforge.core.logging_config import get_logger
from storyforge.storyboard.models import (
    Panel,
    PanelCollection,
    TRANSIENT_FIELDS,
    find_panel,
    replace_panel,
)

logger = get_logger("storyboard.history")

PanelUpdate = Union[Iterable[Panel], Callable[[PanelCollection], Iterable[Panel]]]


class PanelStore:
    """
    Single owner of the panel collection and its history.

    Usage:
        store = PanelStore()
        store.load(result.panels)
        store.update_panel(panel_id, image_url=url)
        store.undo()
    """

    def __init__(self, panels: Iterable[Panel] = ()):
        self._current: PanelCollection = self._strip(panels)
        self._past: List[PanelCollection] = []
        self._future: List[PanelCollection] = []
        # panel id -> {flag name: True}; only set flags are stored
        self._activity: Dict[str, Dict[str, bool]] = {}
        self._callbacks: List[Callable] = []
        self._absorb_activity(panels)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def panels(self) -> PanelCollection:
        """Current collection with in-flight flags applied."""
        if not self._activity:
            return self._current
        return tuple(self._overlay(p) for p in self._current)

    @property
    def content(self) -> PanelCollection:
        """Current collection without in-flight flags (what history tracks)."""
        return self._current

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    @property
    def past_depth(self) -> int:
        return len(self._past)

    @property
    def future_depth(self) -> int:
        return len(self._future)

    def get_panel(self, panel_id: str) -> Optional[Panel]:
        panel = find_panel(self._current, panel_id)
        return self._overlay(panel) if panel else None

    def require_panel(self, panel_id: str) -> Panel:
        panel = self.get_panel(panel_id)
        if panel is None:
            raise PanelNotFoundError(panel_id)
        return panel

    def __len__(self) -> int:
        return len(self._current)

    def __iter__(self):
        return iter(self.panels)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set_panels(self, update: PanelUpdate) -> bool:
        """
        Replace the collection.

        A call whose result differs from the current collection only in
        in-flight flags updates the activity table and nothing else. Any other
        call discards the redo branch, and records a history entry when the
        content actually changed.

        Args:
            update: A new collection, or a function of the latest visible
                collection returning one

        Returns:
            True if content changed (and a history entry was recorded)
        """
        next_panels = tuple(update(self.panels) if callable(update) else update)

        activity_changed = self._absorb_activity(next_panels)
        next_content = self._strip(next_panels)

        if next_content == self._current:
            if activity_changed:
                self._notify("activity", {"panels": len(next_content)})
            elif self._future:
                self._future.clear()
                logger.debug("Unchanged collection set, redo branch discarded")
            return False

        self._past.append(self._current)
        self._future.clear()
        self._current = next_content
        logger.debug(f"Recorded change (past={len(self._past)})")
        self._notify("change", {"panels": len(next_content)})
        return True

    def update_panel(self, panel_id: str, **changes) -> bool:
        """Apply field changes to one panel through the latest-state form."""
        return self.set_panels(lambda prev: replace_panel(prev, panel_id, **changes))

    def set_activity(self, panel_id: str, **flags: bool) -> None:
        """
        Toggle in-flight flags for a panel without touching history.

        Works for ids missing from the current collection too, so an operation
        can always lower the flag it raised.
        """
        unknown = set(flags) - set(TRANSIENT_FIELDS)
        if unknown:
            raise ValueError(f"Not activity flags: {sorted(unknown)}")

        current = dict(self._activity.get(panel_id, {}))
        for name, value in flags.items():
            if value:
                current[name] = True
            else:
                current.pop(name, None)

        if current == self._activity.get(panel_id, {}):
            return
        if current:
            self._activity[panel_id] = current
        else:
            self._activity.pop(panel_id, None)
        self._notify("activity", {"panels": len(self._current)})

    def undo(self) -> bool:
        """Step back one snapshot. No-op when there is nothing to undo."""
        if not self._past:
            return False
        previous = self._past.pop()
        self._future.insert(0, self._current)
        self._current = previous
        logger.debug(f"Undo (past={len(self._past)}, future={len(self._future)})")
        self._notify("undo", {"panels": len(previous)})
        return True

    def redo(self) -> bool:
        """Step forward one snapshot. No-op when there is nothing to redo."""
        if not self._future:
            return False
        following = self._future.pop(0)
        self._past.append(self._current)
        self._current = following
        logger.debug(f"Redo (past={len(self._past)}, future={len(self._future)})")
        self._notify("redo", {"panels": len(following)})
        return True

    def reset_history(self) -> None:
        """Forget past and future; the current collection is kept."""
        self._past.clear()
        self._future.clear()
        self._notify("reset", {"panels": len(self._current)})

    def load(self, panels: Iterable[Panel]) -> None:
        """Start a fresh session from ``panels`` with empty history."""
        panels = tuple(panels)
        self._activity.clear()
        self._absorb_activity(panels)
        self._current = self._strip(panels)
        self._past.clear()
        self._future.clear()
        logger.info(f"Loaded {len(self._current)} panel(s)")
        self._notify("reset", {"panels": len(self._current)})

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def register_callback(self, callback: Callable) -> None:
        """Register a listener called as ``callback(event_type, data)``.

        Event types: 'change', 'activity', 'undo', 'redo', 'reset'
        """
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify(self, event_type: str, data: dict) -> None:
        for callback in self._callbacks:
            try:
                callback(event_type, data)
            except Exception as e:
                logger.warning(f"Store callback error: {e}")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _strip(panels: Iterable[Panel]) -> PanelCollection:
        return tuple(p.content() for p in panels)

    def _overlay(self, panel: Panel) -> Panel:
        flags = self._activity.get(panel.id)
        return panel.evolve(**flags) if flags else panel

    def _absorb_activity(self, panels: Iterable[Panel]) -> bool:
        """Copy the flags of ``panels`` into the activity table.

        Panels missing from ``panels`` keep their entries: an operation bound to
        a panel id stays in flight even if an undo hides that panel for a while.
        """
        changed = False
        for panel in panels:
            flags = {name: True for name in TRANSIENT_FIELDS if getattr(panel, name)}
            if flags != self._activity.get(panel.id, {}):
                changed = True
                if flags:
                    self._activity[panel.id] = flags
                else:
                    self._activity.pop(panel.id, None)
        return changed

    def clear_activity(self, panel_id: str) -> None:
        """Drop every flag for ``panel_id``, present in the collection or not."""
        if self._activity.pop(panel_id, None) is not None:
            self._notify("activity", {"panels": len(self._current)})

    def activity_for(self, panel_id: str) -> Tuple[str, ...]:
        """Names of the flags currently set for ``panel_id``."""
        return tuple(self._activity.get(panel_id, {}))
