import regex as re

# ---------- OCR noise repair ----------
QUOTE_FIX = str.maketrans({"“": '"', "”": '"', "’": "'", "‘": "'"})
DASH_FIX = (
    (re.compile(r"[—–]+"), "-"),
)
SPACE_FIX = (
    (re.compile(r"\p{Z}+|\s+"), " "),
    (re.compile(r"\p{Cc}+"), ""),
)


def repair_text(t: str) -> str:
    """Normalise typographic quotes, dash runs and whitespace in recognised text."""
    if not t:
        return ""
    out = t.translate(QUOTE_FIX)
    for rx, rep in DASH_FIX:
        out = rx.sub(rep, out)
    for rx, rep in SPACE_FIX:
        out = rx.sub(rep, out)
    return out.strip()
