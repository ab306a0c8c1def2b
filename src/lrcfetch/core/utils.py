import re

INSTRUMENTAL_MARKER = "[au: instrumental]"

RE_INSTRUMENTAL = re.compile(r"\[au:\s*instrumental\]")
_RE_TIMESTAMP = re.compile(r"^\[[^\]]*\] *", re.MULTILINE)


def strip_timestamp(synced_lyrics: str) -> str:
    """
    Remove the leading [..] tag from every line of an LRC text,
    which turns synced lyrics into their plain counterpart.
    """
    return _RE_TIMESTAMP.sub("", synced_lyrics)


def is_instrumental_lrc(lrc: str | None) -> bool:
    return bool(lrc) and RE_INSTRUMENTAL.search(lrc) is not None
