from __future__ import annotations

import shlex
import threading
import warnings
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Optional

from .logging_utils import debug_log
from .script import NO_READING, has_kanji, hiragana_to_katakana
from .segments import SupportsTokenize
from .tokens import Token
from .tools import get_unidic_dicdir

__all__ = [
    "DEFAULT_INIT_TIMEOUT",
    "FugashiTokenizer",
    "TokenizerHandle",
    "TokenizerInitTimeout",
    "TokenizerUnavailableError",
]

DEFAULT_INIT_TIMEOUT = 10.0

_READING_FIELDS = ("kana", "reading", "reading_form")


class TokenizerUnavailableError(RuntimeError):
    """Raised when the MeCab tokenizer cannot be initialized."""


class TokenizerInitTimeout(TimeoutError):
    """Raised when waiting on another caller's tokenizer build takes too long."""


class FugashiTokenizer:
    """Fugashi/UniDic tokenizer that reports each morpheme's katakana reading."""

    def __init__(self) -> None:
        try:
            from fugashi import Tagger  # type: ignore
        except ImportError as exc:
            raise TokenizerUnavailableError(
                "Automatic furigana requires 'fugashi' (MeCab) to be installed."
            ) from exc

        dicdir = get_unidic_dicdir()
        try:
            if dicdir:
                self._tagger = Tagger(f"-d {shlex.quote(str(dicdir))}")
            else:
                warnings.warn(
                    "No UniDic dictionary detected; falling back to the default MeCab dictionary.",
                    RuntimeWarning,
                    stacklevel=2,
                )
                self._tagger = Tagger()
        except RuntimeError as exc:
            raise TokenizerUnavailableError(f"Failed to initialize MeCab: {exc}") from exc
        debug_log(f"tokenizer ready (dictionary: {dicdir or 'default'})")
        self._kakasi_converter = self._build_kakasi_converter()

    def tokenize(self, text: str) -> list[Token]:
        tokens: list[Token] = []
        if not text:
            return tokens
        for raw in self._tagger(text):
            surface = raw.surface
            if not surface:
                continue
            reading = self._extract_reading(raw)
            if reading is None and has_kanji(surface):
                reading = self._fallback_reading(surface)
            tokens.append(Token(surface=surface, reading=reading))
        return tokens

    def _extract_reading(self, token) -> str | None:
        feature = getattr(token, "feature", None)
        if feature is None:
            return None
        for attr in _READING_FIELDS:
            if hasattr(feature, attr):
                value = getattr(feature, attr)
            else:
                try:
                    value = feature[attr]
                except Exception:  # pragma: no cover - feature object may not be subscriptable
                    value = None
            if value and value != NO_READING:
                return str(value)
        return None

    def _fallback_reading(self, surface: str) -> str | None:
        if self._kakasi_converter is None:
            return None
        converted = self._kakasi_converter(surface)
        if not converted or converted == surface:
            return None
        return hiragana_to_katakana(converted)

    def _build_kakasi_converter(self) -> Optional[Callable[[str], str]]:
        try:
            from pykakasi import kakasi  # type: ignore
        except ImportError:
            warnings.warn(
                "pykakasi is not installed; unknown words will have no reading.",
                RuntimeWarning,
                stacklevel=3,
            )
            return None

        kk = kakasi()

        def _convert(text: str) -> str:
            result = kk.convert(text)
            return "".join(item.get("kana") or item.get("orig", "") for item in result)

        return _convert


class TokenizerHandle:
    """
    Lazily built tokenizer shared by every caller.

    The first caller of :meth:`get` (or :meth:`start`) builds the tokenizer;
    anyone arriving while that build runs waits on the same future instead of
    starting a second one, for at most ``timeout`` seconds. A failed build is
    reported to every waiter and retried on the next request.
    """

    def __init__(
        self,
        factory: Callable[[], SupportsTokenize] = FugashiTokenizer,
        *,
        timeout: float = DEFAULT_INIT_TIMEOUT,
    ) -> None:
        self._factory = factory
        self._timeout = timeout
        self._lock = threading.Lock()
        self._future: Future[SupportsTokenize] | None = None

    def _claim(self) -> tuple[Future[SupportsTokenize], bool]:
        with self._lock:
            future = self._future
            if future is not None and future.done() and future.exception() is not None:
                future = None
            if future is None:
                future = Future()
                self._future = future
                return future, True
            return future, False

    def _build(self, future: Future[SupportsTokenize]) -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            tokenizer = self._factory()
        except Exception as exc:
            debug_log(f"tokenizer build failed: {exc}")
            future.set_exception(exc)
            return
        future.set_result(tokenizer)

    def start(self) -> Future[SupportsTokenize]:
        """Begin building in a background thread; returns the shared future."""
        future, owner = self._claim()
        if owner:
            thread = threading.Thread(
                target=self._build,
                args=(future,),
                name="autofuri-tokenizer",
                daemon=True,
            )
            thread.start()
        return future

    def get(self, timeout: float | None = None) -> SupportsTokenize:
        future, owner = self._claim()
        if owner:
            self._build(future)
        wait = self._timeout if timeout is None else timeout
        try:
            return future.result(timeout=wait)
        except FutureTimeoutError as exc:
            raise TokenizerInitTimeout(
                f"Tokenizer was not ready after {wait:g} seconds."
            ) from exc

    def peek(self) -> SupportsTokenize | None:
        """Return the tokenizer if it is already built, without building it."""
        future = self._future
        if future is None or not future.done() or future.exception() is not None:
            return None
        return future.result()

    @property
    def ready(self) -> bool:
        return self.peek() is not None

    def tokenize(self, text: str) -> list[Token]:
        return list(self.get().tokenize(text))
