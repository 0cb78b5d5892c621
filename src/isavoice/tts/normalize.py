"""Text normalisation for speech output.

Every backend speaks the output of normalize_for_speech(): emojis and
markdown emphasis removed, line breaks turned into sentence breaks and
currency amounts rewritten as spoken Brazilian Portuguese.
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

_UNITS = ["", "um", "dois", "três", "quatro", "cinco", "seis", "sete", "oito", "nove"]
_TEENS = [
    "dez",
    "onze",
    "doze",
    "treze",
    "quatorze",
    "quinze",
    "dezesseis",
    "dezessete",
    "dezoito",
    "dezenove",
]
_TENS = [
    "",
    "",
    "vinte",
    "trinta",
    "quarenta",
    "cinquenta",
    "sessenta",
    "setenta",
    "oitenta",
    "noventa",
]
_HUNDREDS = [
    "",
    "cento",
    "duzentos",
    "trezentos",
    "quatrocentos",
    "quinhentos",
    "seiscentos",
    "setecentos",
    "oitocentos",
    "novecentos",
]

_EMOJI_RE = re.compile(
    "["
    "\U0001F000-\U0001F2FF"  # mahjong, cards, enclosed alphanumerics, flags
    "\U0001F300-\U0001F9FF"  # pictographs, emoticons, transport, supplemental
    "\U0001FA00-\U0001FAFF"
    "\u2300-\u23FF"  # technical symbols
    "\u2600-\u26FF"  # miscellaneous symbols
    "\u2700-\u27BF"  # dingbats
    "\u2B00-\u2BFF"
    "\uFE0F\u200D\u20E3"  # variation selector, joiner, keycap
    "]+"
)
_HEADING_RE = re.compile(r"^[ \t]{0,3}#{1,6}[ \t]*", re.MULTILINE)
_EMPHASIS_RE = re.compile(r"\*\*|__|~~|`|\*")
_AMOUNT = r"(\d[\d.,]*\d|\d)"
_BRL_SYMBOL_RE = re.compile(r"R\$\s*" + _AMOUNT)
_BRL_WORD_RE = re.compile(_AMOUNT + r"\s*(?:reais|real)\b", re.IGNORECASE)
_NEWLINES_RE = re.compile(r"([.!?:;])?[ \t]*\n+\s*")
_SPACE_BEFORE_PUNCT_RE = re.compile(r"\s+([.,!?;:])")
_SPACES_RE = re.compile(r"[ \t]{2,}")


def number_to_words(num: int) -> str:
    """Convert a non-negative integer to Brazilian Portuguese words.

    Args:
        num: Integer to convert

    Returns:
        Cardinal number in words, e.g. 1234 -> "mil duzentos e trinta e quatro"

    Raises:
        ValueError: If num is negative
    """
    if num < 0:
        raise ValueError(f"num must be non-negative, got {num}")
    if num == 0:
        return "zero"

    if num >= 1_000_000:
        millions, remainder = divmod(num, 1_000_000)
        result = "um milhão" if millions == 1 else f"{number_to_words(millions)} milhões"
        return result + _join_remainder(remainder)

    if num >= 1000:
        thousands, remainder = divmod(num, 1000)
        result = "mil" if thousands == 1 else f"{number_to_words(thousands)} mil"
        return result + _join_remainder(remainder)

    if num >= 100:
        if num == 100:
            return "cem"
        hundreds, remainder = divmod(num, 100)
        result = _HUNDREDS[hundreds]
        if remainder:
            result += " e " + number_to_words(remainder)
        return result

    if num >= 20:
        tens, units = divmod(num, 10)
        result = _TENS[tens]
        if units:
            result += " e " + _UNITS[units]
        return result

    if num >= 10:
        return _TEENS[num - 10]

    return _UNITS[num]


def _join_remainder(remainder: int) -> str:
    if remainder == 0:
        return ""
    # "mil e quinhentos", "mil e vinte", but "mil duzentos e trinta"
    if remainder < 100 or remainder % 100 == 0:
        return " e " + number_to_words(remainder)
    return " " + number_to_words(remainder)


def _to_amount(value: int | float | Decimal | str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Invalid monetary value: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Invalid monetary value: {value!r}")
    try:
        return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        # More digits than the decimal context precision holds
        raise ValueError(f"Monetary value out of range: {value!r}") from e


def currency_to_speech(
    value: int | float | Decimal | str, spell_out: bool = True
) -> str:
    """Convert a monetary value in reais to natural spoken Portuguese.

    Examples:
        0 -> "zero reais"
        1 -> "um real"
        1.01 -> "um real e um centavo"
        0.99 -> "noventa e nove centavos"
        2000 -> "dois mil reais"
        10 (spell_out=False) -> "10 reais"

    Args:
        value: Amount in reais; fractional part is rounded to centavos
        spell_out: Render numbers as words instead of numerals

    Returns:
        Speakable currency phrase

    Raises:
        ValueError: If value is not a finite number
    """
    amount = _to_amount(value)
    if amount == 0:
        return "zero reais"

    reais, centavos = divmod(int(abs(amount) * 100), 100)
    parts = []

    if reais == 1:
        parts.append("um real")
    elif reais > 1:
        if spell_out:
            suffix = "de reais" if reais % 1_000_000 == 0 else "reais"
            parts.append(f"{number_to_words(reais)} {suffix}")
        else:
            parts.append(f"{reais} reais")

    if centavos == 1:
        parts.append("um centavo")
    elif centavos > 1:
        words = number_to_words(centavos) if spell_out else str(centavos)
        parts.append(f"{words} centavos")

    result = " e ".join(parts)
    return f"menos {result}" if amount < 0 else result


def parse_amount(raw: str) -> Decimal:
    """Parse a Brazilian or plain decimal amount string.

    "1.234,56" and "1234.56" both parse to 1234.56; "1.500" is read as a
    thousands separator (1500).

    Raises:
        ValueError: If raw is not a number
    """
    if "," in raw:
        integer, _, fraction = raw.rpartition(",")
        integer = integer.replace(".", "")
    elif "." in raw:
        head, _, tail = raw.rpartition(".")
        if len(tail) == 3:
            integer, fraction = raw.replace(".", ""), ""
        else:
            integer, fraction = head.replace(".", ""), tail
    else:
        integer, fraction = raw, ""

    if not (integer or "0").isdigit() or not (fraction or "0").isdigit():
        raise ValueError(f"Invalid amount: {raw!r}")
    return Decimal(f"{integer or 0}.{fraction or 0}")


def format_currency_in_text(text: str, spell_out: bool = True) -> str:
    """Rewrite currency expressions inside text as spoken words.

    Handles "R$ 1.234,56", "R$1234.56", "12,50 reais" and "500 reais".
    """

    def _replace(match: re.Match) -> str:
        try:
            return currency_to_speech(parse_amount(match.group(1)), spell_out)
        except ValueError:
            return match.group(0)

    text = _BRL_SYMBOL_RE.sub(_replace, text)
    return _BRL_WORD_RE.sub(_replace, text)


def strip_emojis(text: str) -> str:
    return _EMOJI_RE.sub("", text)


def strip_markdown(text: str) -> str:
    """Remove markdown headings and emphasis markers, keeping the words."""
    text = _HEADING_RE.sub("", text)
    return _EMPHASIS_RE.sub("", text)


def normalize_for_speech(text: str, spell_out: bool = True) -> str:
    """Prepare arbitrary assistant text for a speech backend.

    Args:
        text: Raw text, possibly containing emojis, markdown and amounts
        spell_out: Spell currency amounts as words instead of numerals

    Returns:
        Cleaned text; empty string when nothing speakable remains
    """
    if not text:
        return ""

    text = strip_emojis(text)
    text = strip_markdown(text)
    text = format_currency_in_text(text, spell_out)
    text = _NEWLINES_RE.sub(
        lambda m: f"{m.group(1)} " if m.group(1) else ". ", text.strip()
    )
    text = _SPACES_RE.sub(" ", text)
    text = _SPACE_BEFORE_PUNCT_RE.sub(r"\1", text)
    return text.strip()
