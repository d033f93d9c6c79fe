import json
import logging
from dataclasses import dataclass

import requests

from config import GEMINI_API_KEY, GEMINI_API_URL, GEMINI_MODEL, GEMINI_TIMEOUT_SECONDS
from domain.categories import EXPENSE_CATEGORIES, INCOME_CATEGORIES, OTHER_CATEGORY, categories_for
from domain.transactions import TransactionType, WalletType

logger = logging.getLogger(__name__)

CLASSIFIER_ERROR_MESSAGE = "Không thể phân tích dữ liệu. Vui lòng thử lại."

PROMPT_TEMPLATE = """
Analyze text: "{text}"
Extract JSON object with these fields:
1. "amount": number (convert k/m/tr/lít/củ to zeros. Example: "35k" -> 35000).
2. "type": string ("income" if keywords: lương, thưởng, bán, lãi, biếu, tặng, thu...; else "expense").
3. "category": string (Best match from list:
   - If expense: {expense_categories}.
   - If income: {income_categories}).
4. "walletType": string (detect source: "bank" (ngân hàng, ck, chuyển khoản, mb, vcb...), "ewallet" (momo, ví, zalopay, apple pay), default "cash" (tiền mặt)).
5. "note": string (Remove amount, currency, wallet keywords, and category name from text. Keep only the specific description. Capitalize first letter. Example: "Bún bò 40k ngân hàng" -> "Bún bò"; "Lương tháng 2 10 triệu" -> "Tháng 2").

Return ONLY raw JSON. No markdown block.
"""


class ClassifierError(Exception):
    pass


@dataclass(frozen=True)
class TransactionGuess:
    amount: float
    type: TransactionType
    category: str
    wallet_type: WalletType
    note: str


@dataclass(frozen=True)
class ClassificationResult:
    guess: TransactionGuess
    error_message: str | None = None

    @property
    def ok(self) -> bool:
        return self.error_message is None


def fallback_guess(text: str) -> TransactionGuess:
    return TransactionGuess(
        amount=0.0,
        type=TransactionType.EXPENSE,
        category=OTHER_CATEGORY,
        wallet_type=WalletType.CASH,
        note=text,
    )


def build_prompt(text: str) -> str:
    return PROMPT_TEMPLATE.format(
        text=text,
        expense_categories=", ".join(EXPENSE_CATEGORIES),
        income_categories=", ".join(INCOME_CATEGORIES),
    )


def strip_code_fences(raw: str) -> str:
    return raw.replace("```json", "").replace("```", "").strip()


def normalize_guess(data, text: str) -> TransactionGuess:
    """Clamp every field of a model reply to a value the ledger accepts."""
    if not isinstance(data, dict):
        raise ClassifierError(f"Expected a JSON object, got {type(data).__name__}")

    amount = data.get("amount")
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or amount < 0:
        amount = 0.0

    tx_type = TransactionType.INCOME if data.get("type") == "income" else TransactionType.EXPENSE

    category = data.get("category")
    if not isinstance(category, str) or category not in categories_for(tx_type):
        category = OTHER_CATEGORY

    wallet_raw = data.get("walletType")
    try:
        wallet_type = WalletType.parse(wallet_raw) if isinstance(wallet_raw, str) else WalletType.CASH
    except ValueError:
        wallet_type = WalletType.CASH

    note = data.get("note")
    if not isinstance(note, str):
        note = text

    return TransactionGuess(
        amount=float(amount),
        type=tx_type,
        category=category,
        wallet_type=wallet_type,
        note=note,
    )


class TransactionClassifier:
    """Turns a free-text phrase into a transaction guess via the Gemini REST API.

    Any failure (missing key, network, HTTP status, unparseable reply) yields
    the fallback guess together with a user-facing message.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float = GEMINI_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self._api_key = GEMINI_API_KEY if api_key is None else api_key
        self._model = model or GEMINI_MODEL
        self._timeout = timeout
        self._http = session or requests

    def classify(self, text: str) -> ClassificationResult:
        text = (text or "").strip()
        if not text:
            return ClassificationResult(fallback_guess(text), CLASSIFIER_ERROR_MESSAGE)
        try:
            raw = self._generate(build_prompt(text))
            guess = normalize_guess(json.loads(strip_code_fences(raw)), text)
        except requests.RequestException as e:
            logger.warning("Classifier request failed: %s", e)
        except (ClassifierError, ValueError) as e:
            logger.warning("Classifier reply rejected: %s", e)
        else:
            logger.info(
                "Classified text amount=%s type=%s category=%s",
                guess.amount,
                guess.type.value,
                guess.category,
            )
            return ClassificationResult(guess)
        return ClassificationResult(fallback_guess(text), CLASSIFIER_ERROR_MESSAGE)

    def _generate(self, prompt: str) -> str:
        if not self._api_key:
            raise ClassifierError("Missing API key")
        resp = self._http.post(
            GEMINI_API_URL.format(model=self._model),
            params={"key": self._api_key},
            json={"contents": [{"parts": [{"text": prompt}]}]},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        payload = resp.json()
        try:
            parts = payload["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise ClassifierError(f"Unexpected response shape: {e}") from e
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        if not text:
            raise ClassifierError("Empty model reply")
        return text
