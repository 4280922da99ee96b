from .cards import last_four, mask_card_number

__all__ = [
    "last_four", "mask_card_number",
]
