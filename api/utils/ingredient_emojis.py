"""
Ingredient name -> emoji lookup used by ingredient responses.
"""
import unicodedata
from typing import Optional

DEFAULT_EMOJI = "🍕"

INGREDIENT_EMOJI_MAP = {
    # classici
    "pomodoro": "🍅",
    "pomodori": "🍅",
    "mozzarella": "🧀",
    "cipolla": "🧅",
    "cipolle": "🧅",
    "salame": "🍖",
    "salame piccante": "🌶️",
    "salamino piccante": "🌶️",
    "salsiccia": "🥩",
    "wurstel": "🌭",
    "wurstel di pollo": "🌭",
    "prosciutto": "🥓",
    "prosciutto cotto": "🥓",
    "prosciutto crudo": "🥓",
    "speck": "🥓",
    # verdure
    "funghi": "🍄",
    "carciofi": "🫒",
    "carciofo": "🫒",
    "zucchine": "🥒",
    "zucchina": "🥒",
    "melanzane": "🍆",
    "melanzana": "🍆",
    "peperoni": "🫑",
    "peperone": "🫑",
    "rucola": "🥬",
    "insalata": "🥬",
    "basilico": "🌿",
    # mare
    "tonno": "🐟",
    "acciughe": "🐟",
    "acciuga": "🐟",
    "gamberi": "🦐",
    # extra
    "olive": "🫒",
    "olive nere": "🫒",
    "olive verdi": "🫒",
    "mais": "🌽",
    "ananas": "🍍",
    "gorgonzola": "🧀",
    "mozzarella di bufala": "🧀",
    "bufala": "🧀",
    # patate
    "patatine fritte": "🍟",
    "patate fritte": "🍟",
    "patate": "🥔",
    "patate al forno": "🥔",
    "patate arrosto": "🥔",
    "patate lesse": "🥔",
}


def normalize_name(name: str) -> str:
    """Lowercase, trim and strip accents."""
    decomposed = unicodedata.normalize("NFD", name.strip().lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def get_ingredient_emoji(name: Optional[str]) -> str:
    if not name:
        return DEFAULT_EMOJI
    return INGREDIENT_EMOJI_MAP.get(normalize_name(name), DEFAULT_EMOJI)
