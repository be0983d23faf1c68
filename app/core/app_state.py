from app.config import get_settings
from app.core.hint_bus import build_hint_bus
from app.core.notifier import FanoutNotifier
from app.core.presence import PresenceTracker


class AppState:
    def __init__(self) -> None:
        settings = get_settings()
        self.notifier = FanoutNotifier(max_backlog=settings.fanout_max_backlog)
        self.presence = PresenceTracker(
            self.notifier, timeout=settings.presence_timeout_seconds
        )
        # Attached to the notifier by the app lifespan once its listener runs.
        self.hint_bus = build_hint_bus()


state = AppState()
