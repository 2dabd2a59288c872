from .core import FuriganaEngine, annotate_text
from .nlp import (
    FugashiTokenizer,
    TokenizerHandle,
    TokenizerInitTimeout,
    TokenizerUnavailableError,
)
from .notation import NotationStyle
from .resolver import resolve
from .segments import build_segment, build_segments
from .settings import DEFAULT_SETTINGS, Settings, load_settings
from .tokens import (
    AlignedSegment,
    Candidate,
    ExclusionZone,
    Interval,
    Origin,
    ResolvedSpan,
    Token,
)

__all__ = [
    "FuriganaEngine",
    "annotate_text",
    "build_segment",
    "build_segments",
    "resolve",
    "NotationStyle",
    "Settings",
    "DEFAULT_SETTINGS",
    "load_settings",
    "FugashiTokenizer",
    "TokenizerHandle",
    "TokenizerInitTimeout",
    "TokenizerUnavailableError",
    "AlignedSegment",
    "Candidate",
    "ExclusionZone",
    "Interval",
    "Origin",
    "ResolvedSpan",
    "Token",
]
