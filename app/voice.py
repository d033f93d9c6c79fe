import logging
import threading
from collections.abc import Callable

from .services import ClassificationResult, TransactionClassifier, TransactionGuess

logger = logging.getLogger(__name__)

SPEECH_ERROR_MESSAGES = {
    "no-speech": "Không nghe thấy gì, thử lại nhé",
    "network": "Lỗi mạng, vui lòng kiểm tra kết nối",
    "not-allowed": "Vui lòng cấp quyền Microphone để sử dụng tính năng này.",
}
UNSUPPORTED_MESSAGE = "Trình duyệt của bạn không hỗ trợ chức năng thu âm."


class SpeechError(Exception):
    """Raised by a recognizer; ``code`` follows the speech API error names."""

    def __init__(self, code: str, message: str = ""):
        super().__init__(message or code)
        self.code = code or "unknown"


def speech_error_message(code: str | None) -> str | None:
    """User-facing text for a recognizer error, or None for errors only worth logging."""
    message = SPEECH_ERROR_MESSAGES.get(code or "")
    if message is None:
        logger.error("Voice recognition error: %s", code or "unknown")
    return message


Recognizer = Callable[[], str]


class VoiceInput:
    """Listen, then classify; one capture at a time.

    ``recognizer`` blocks until a transcript is available and raises
    ``SpeechError`` on failure. Results go to ``on_success``; messages to
    ``on_error``. A classifier failure reports both the message and the
    fallback guess.
    """

    def __init__(
        self,
        recognizer: Recognizer | None,
        classifier: TransactionClassifier,
        on_success: Callable[[TransactionGuess], None],
        on_error: Callable[[str], None],
    ):
        self._recognizer = recognizer
        self._classifier = classifier
        self._on_success = on_success
        self._on_error = on_error
        self._busy = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._busy.locked()

    def capture(self) -> TransactionGuess | None:
        if self._recognizer is None:
            self._on_error(UNSUPPORTED_MESSAGE)
            return None
        if not self._busy.acquire(blocking=False):
            logger.info("Voice capture already in progress, request ignored")
            return None
        try:
            try:
                transcript = self._recognizer()
            except SpeechError as e:
                message = speech_error_message(e.code)
                if message is not None:
                    self._on_error(message)
                return None
            return self._process(transcript)
        finally:
            self._busy.release()

    def process_text(self, text: str) -> TransactionGuess | None:
        """Classify already-transcribed text, e.g. typed input."""
        if not self._busy.acquire(blocking=False):
            logger.info("Voice processing already in progress, request ignored")
            return None
        try:
            return self._process(text)
        finally:
            self._busy.release()

    def _process(self, text: str) -> TransactionGuess | None:
        if not (text or "").strip():
            return None
        result: ClassificationResult = self._classifier.classify(text)
        if not result.ok:
            self._on_error(result.error_message)
        self._on_success(result.guess)
        return result.guess
