def last_four(card_number: str) -> str:
    """Return the last four characters of a card number."""
    return card_number[-4:]


def mask_card_number(card_number: str | None) -> str:
    """Mask every character but the last four, for log lines."""
    if not card_number:
        return ""
    visible = last_four(card_number)
    return "*" * (len(card_number) - len(visible)) + visible
