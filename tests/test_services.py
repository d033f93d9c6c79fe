import json
from unittest.mock import Mock

import pytest
import requests

from app.services import (
    CLASSIFIER_ERROR_MESSAGE,
    ClassifierError,
    TransactionClassifier,
    build_prompt,
    normalize_guess,
    strip_code_fences,
)
from domain.transactions import TransactionType, WalletType


def reply(text):
    response = Mock()
    response.raise_for_status.return_value = None
    response.json.return_value = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    return response


def classifier_with(response=None, error=None):
    http = Mock()
    if error is not None:
        http.post.side_effect = error
    else:
        http.post.return_value = response
    return TransactionClassifier(api_key="key", model="test-model", session=http), http


class TestNormalizeGuess:
    def test_valid_reply_kept(self):
        guess = normalize_guess(
            {"amount": 40000, "type": "expense", "category": "Ăn uống", "walletType": "bank", "note": "Bún bò"},
            "Bún bò 40k ngân hàng",
        )
        assert guess.amount == 40_000
        assert guess.type is TransactionType.EXPENSE
        assert guess.category == "Ăn uống"
        assert guess.wallet_type is WalletType.BANK
        assert guess.note == "Bún bò"

    def test_fields_are_clamped(self):
        guess = normalize_guess(
            {"amount": "40k", "type": "gift", "category": "Lương", "walletType": "crypto", "note": 5},
            "raw text",
        )
        assert guess.amount == 0
        assert guess.type is TransactionType.EXPENSE
        assert guess.category == "Khác"
        assert guess.wallet_type is WalletType.CASH
        assert guess.note == "raw text"

    def test_income_category_checked_against_income_list(self):
        guess = normalize_guess({"amount": 1, "type": "income", "category": "Lương"}, "t")
        assert guess.type is TransactionType.INCOME
        assert guess.category == "Lương"

    def test_non_object_reply_rejected(self):
        with pytest.raises(ClassifierError):
            normalize_guess([1, 2], "t")


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'


def test_prompt_lists_categories():
    prompt = build_prompt("Ăn trưa 50k")
    assert "Ăn trưa 50k" in prompt
    assert "Hóa đơn" in prompt and "Lãi tiết kiệm" in prompt


class TestTransactionClassifier:
    def test_successful_classification(self):
        payload = {"amount": 10_000_000, "type": "income", "category": "Lương", "walletType": "bank", "note": "Tháng 2"}
        classifier, http = classifier_with(reply("```json\n" + json.dumps(payload) + "\n```"))

        result = classifier.classify("Lương tháng 2 10 triệu")

        assert result.ok
        assert result.guess.amount == 10_000_000
        assert result.guess.wallet_type is WalletType.BANK
        args, kwargs = http.post.call_args
        assert "test-model:generateContent" in args[0]
        assert kwargs["params"] == {"key": "key"}
        assert "Lương tháng 2 10 triệu" in kwargs["json"]["contents"][0]["parts"][0]["text"]

    def test_missing_api_key_falls_back_without_request(self):
        http = Mock()
        classifier = TransactionClassifier(api_key="", session=http)

        result = classifier.classify("Cafe 30k")

        http.post.assert_not_called()
        assert result.error_message == CLASSIFIER_ERROR_MESSAGE
        assert result.guess.amount == 0
        assert result.guess.category == "Khác"
        assert result.guess.note == "Cafe 30k"
        assert result.guess.type is TransactionType.EXPENSE
        assert result.guess.wallet_type is WalletType.CASH

    def test_network_error_falls_back(self):
        classifier, _ = classifier_with(error=requests.ConnectionError("offline"))
        result = classifier.classify("Cafe 30k")
        assert not result.ok
        assert result.guess.note == "Cafe 30k"

    def test_http_error_falls_back(self):
        response = reply("{}")
        response.raise_for_status.side_effect = requests.HTTPError("500")
        classifier, _ = classifier_with(response)
        assert classifier.classify("Cafe").error_message == CLASSIFIER_ERROR_MESSAGE

    def test_malformed_json_falls_back(self):
        classifier, _ = classifier_with(reply("not json at all"))
        result = classifier.classify("Cafe")
        assert result.error_message == CLASSIFIER_ERROR_MESSAGE
        assert result.guess.amount == 0

    def test_unexpected_response_shape_falls_back(self):
        response = Mock()
        response.raise_for_status.return_value = None
        response.json.return_value = {"candidates": []}
        classifier, _ = classifier_with(response)
        assert not classifier.classify("Cafe").ok
