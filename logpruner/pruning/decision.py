from __future__ import annotations

from logpruner.common.errors import UnknownAlarmStateError
from logpruner.pruning.models import AlarmState


def decide_action(state: AlarmState | str) -> bool:
    """Return whether old indices must be deleted for the given alarm state.

    Only ``ALARM`` and ``OK`` are decisive. Any other state raises
    :class:`UnknownAlarmStateError` rather than guessing.
    """

    observed = state.value if isinstance(state, AlarmState) else str(state)
    parsed = AlarmState.parse(observed)
    if parsed is AlarmState.ALARM:
        return True
    if parsed is AlarmState.OK:
        return False
    raise UnknownAlarmStateError(observed)


__all__ = ["decide_action"]
