from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

from .flagging_policy import average_response, classify_trend
from .models import TREND_FLAGS, CheckInEntry, Flag
from .store import EntryStore

logger = logging.getLogger(__name__)

DEFAULT_TREND_WINDOW = 7
MIN_TREND_SAMPLE = 3


def window_averages(entries: Sequence[CheckInEntry], sample_size: int = MIN_TREND_SAMPLE) -> List[float]:
    return [average_response(entry.responses) for entry in entries[:sample_size]]


def trend_flag_for(entries: Sequence[CheckInEntry], sample_size: int = MIN_TREND_SAMPLE) -> Optional[Flag]:
    """Trend flag for newest-first ``entries``, or None when there is too little data."""
    if len(entries) < sample_size:
        return None
    return classify_trend(window_averages(entries, sample_size))


def analyze_trend(
    entries: Sequence[CheckInEntry],
    store: Optional[EntryStore] = None,
    sample_size: int = MIN_TREND_SAMPLE,
) -> Union[CheckInEntry, Sequence[CheckInEntry]]:
    """Set the window's trend flag on the newest check-in and write it back.

    ``entries`` must be newest first. With fewer than ``sample_size`` entries
    nothing is classified and ``entries`` is returned unchanged. Otherwise the
    newest entry is returned; any earlier trend flag on it is replaced and its
    single-entry flags are kept. A failed write propagates as ``StoreWriteError``.
    """
    trend = trend_flag_for(entries, sample_size)
    if trend is None:
        logger.info("Skipping trend analysis: %d of %d check-ins available", len(entries), sample_size)
        return entries

    newest = entries[0]
    newest.flags = (set(newest.flags) - TREND_FLAGS) | {trend}
    logger.info("Check-in %s classified as %s", newest.id, trend.value)
    if store is not None:
        store.update_flags(newest.id, newest.flags)
    return newest
