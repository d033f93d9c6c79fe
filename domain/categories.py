from .transactions import TransactionType

BILL_CATEGORY = "Hóa đơn"
OTHER_CATEGORY = "Khác"

EXPENSE_CATEGORIES = [
    "Ăn uống",
    "Di chuyển",
    "Mua sắm",
    "Giải trí",
    BILL_CATEGORY,
    "Sức khỏe",
    "Giáo dục",
    OTHER_CATEGORY,
]

INCOME_CATEGORIES = [
    "Lương",
    "Thưởng",
    "Bán đồ",
    "Lãi tiết kiệm",
    "Được tặng",
    OTHER_CATEGORY,
]

NOTE_SUGGESTIONS: dict[str, list[str]] = {
    "Ăn uống": ["Ăn sáng", "Ăn trưa", "Ăn tối", "Cafe", "Nhậu", "Trà sữa"],
    "Di chuyển": ["Xăng xe", "Grab/Be", "Gửi xe", "Vé xe", "Sửa xe"],
    "Mua sắm": ["Quần áo", "Mỹ phẩm", "Đồ gia dụng", "Siêu thị", "Tiki/Shopee"],
    "Giải trí": ["Xem phim", "Netflix", "Game", "Du lịch"],
    BILL_CATEGORY: ["Tiền điện", "Tiền nước", "Internet", "Điện thoại"],
    "Sức khỏe": ["Thuốc", "Khám bệnh", "Gym", "Yoga"],
}


def categories_for(transaction_type: TransactionType | str) -> list[str]:
    if TransactionType.parse(transaction_type) is TransactionType.INCOME:
        return list(INCOME_CATEGORIES)
    return list(EXPENSE_CATEGORIES)


def default_category(transaction_type: TransactionType | str) -> str:
    return categories_for(transaction_type)[0]


def note_suggestions(category: str) -> list[str]:
    return list(NOTE_SUGGESTIONS.get(category, []))
