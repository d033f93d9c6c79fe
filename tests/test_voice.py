from unittest.mock import Mock

import pytest

from app.services import CLASSIFIER_ERROR_MESSAGE, ClassificationResult, fallback_guess
from app.voice import UNSUPPORTED_MESSAGE, SpeechError, VoiceInput, speech_error_message


@pytest.mark.parametrize(
    "code,message",
    [
        ("no-speech", "Không nghe thấy gì, thử lại nhé"),
        ("network", "Lỗi mạng, vui lòng kiểm tra kết nối"),
        ("not-allowed", "Vui lòng cấp quyền Microphone để sử dụng tính năng này."),
    ],
)
def test_known_speech_errors_have_messages(code, message):
    assert speech_error_message(code) == message


def test_other_speech_errors_are_only_logged(caplog):
    assert speech_error_message("aborted") is None
    assert "aborted" in caplog.text


class TestVoiceInput:
    def setup_method(self):
        self.classifier = Mock()
        self.on_success = Mock()
        self.on_error = Mock()

    def make(self, recognizer):
        return VoiceInput(recognizer, self.classifier, self.on_success, self.on_error)

    def test_transcript_is_classified(self):
        guess = fallback_guess("Cafe 30k")
        self.classifier.classify.return_value = ClassificationResult(guess)

        result = self.make(lambda: "Cafe 30k").capture()

        assert result == guess
        self.classifier.classify.assert_called_once_with("Cafe 30k")
        self.on_success.assert_called_once_with(guess)
        self.on_error.assert_not_called()

    def test_classifier_failure_reports_message_and_fallback(self):
        guess = fallback_guess("xyz")
        self.classifier.classify.return_value = ClassificationResult(guess, CLASSIFIER_ERROR_MESSAGE)

        self.make(lambda: "xyz").capture()

        self.on_error.assert_called_once_with(CLASSIFIER_ERROR_MESSAGE)
        self.on_success.assert_called_once_with(guess)

    def test_speech_error_with_message(self):
        def recognizer():
            raise SpeechError("not-allowed")

        assert self.make(recognizer).capture() is None
        self.on_error.assert_called_once_with("Vui lòng cấp quyền Microphone để sử dụng tính năng này.")
        self.classifier.classify.assert_not_called()

    def test_unknown_speech_error_is_silent(self):
        def recognizer():
            raise SpeechError("audio-capture")

        assert self.make(recognizer).capture() is None
        self.on_error.assert_not_called()

    def test_missing_recognizer(self):
        assert self.make(None).capture() is None
        self.on_error.assert_called_once_with(UNSUPPORTED_MESSAGE)

    def test_empty_transcript_is_ignored(self):
        assert self.make(lambda: "  ").capture() is None
        self.classifier.classify.assert_not_called()

    def test_only_one_capture_in_flight(self):
        nested = []

        def recognizer():
            nested.append(voice.capture())
            nested.append(voice.process_text("again"))
            return "Cafe"

        self.classifier.classify.return_value = ClassificationResult(fallback_guess("Cafe"))
        voice = self.make(recognizer)

        assert voice.capture() is not None
        assert nested == [None, None]
        assert not voice.busy
        self.classifier.classify.assert_called_once_with("Cafe")
