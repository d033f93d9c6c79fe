from dataclasses import dataclass, replace

from .transactions import WalletType


@dataclass(frozen=True)
class Wallet:
    id: WalletType
    name: str
    balance: float
    icon: str = ""
    color: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", WalletType.parse(self.id))
        object.__setattr__(self, "balance", float(self.balance))

    def with_balance(self, balance: float) -> "Wallet":
        return replace(self, balance=float(balance))

    def adjusted(self, delta: float) -> "Wallet":
        return replace(self, balance=self.balance + float(delta))


WALLET_ORDER = (WalletType.CASH, WalletType.BANK, WalletType.EWALLET)


def default_wallets() -> list[Wallet]:
    return [
        Wallet(WalletType.CASH, "Tiền mặt", 1_500_000, icon="Wallet", color="bg-emerald-500"),
        Wallet(WalletType.BANK, "Ngân hàng", 12_500_000, icon="CreditCard", color="bg-blue-600"),
        Wallet(WalletType.EWALLET, "Ví điện tử", 450_000, icon="Smartphone", color="bg-pink-500"),
    ]
