import re
from unidecode import unidecode


def slugify(text: str) -> str:
    text = unidecode(text or "").lower()
    text = re.sub(r"[^a-z0-9]+", "-", text).strip("-")
    return text or "untitled"
