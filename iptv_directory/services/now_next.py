from datetime import datetime

from iptv_directory.models import Guide, NowNext


def resolve_now_next(guide: Guide, guide_channel_id: str | None, at: datetime) -> NowNext:
    """
    Find the programme airing at `at` and the one after it.

    Scans the channel's programmes in source order and takes the first whose
    open interval (start, end) contains `at`; a boundary instant matches
    nothing. `next` is the following entry by position. No match, or a
    channel without guide data, yields an empty result.
    """
    if not guide_channel_id:
        return NowNext()

    programs = guide.get(guide_channel_id, ())
    for index, program in enumerate(programs):
        if program.start < at < program.end:
            following = programs[index + 1] if index + 1 < len(programs) else None
            return NowNext(current=program, next=following)

    return NowNext()
