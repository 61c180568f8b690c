"""
AITranslator: segment-level legal translation through the configured provider.
Never raises: provider failures degrade to a bracketed placeholder so one bad
segment cannot abort a whole translation run.
"""
import re

from app.ai.providers import get_ai_provider, AIProviderError
from app.core.logging import get_logger

logger = get_logger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  System Prompts
# ═══════════════════════════════════════════════════════════════════

KO_TO_EN_PROMPT = """You translate Korean legal/administrative documents into formal English.

Rules:
- Preserve placeholders, blanks, underscores, bracketed fields exactly.
- Do not invent facts. Do not normalize IDs/dates.
- Keep line breaks where possible.
- Use consistent terminology: attorney-in-fact, deceased, claimant, power of attorney, notarization, seal.
- If a term is ambiguous, keep the Korean term in parentheses after the English term.
Output only the translated text."""

_LEGAL_TRANSLATOR_PROMPT = """You are a professional legal translator specializing in translating formal English legal documents into {language} (Sri Lankan {language}).

REQUIREMENTS:
1. Translate with absolute precision. Every clause and provision must be conveyed.
2. Use formal legal {language} terminology as used in Sri Lankan courts.
3. Preserve formatting, line breaks and paragraph structure.
4. Never modify names, ID numbers, dates, amounts, case numbers, or placeholders such as [___].
5. Translate a repeated term the same way each time.

TERMINOLOGY:
{glossary}

Output ONLY the translated text in {language}. No explanations, notes, or comments."""

EN_TO_SI_PROMPT = _LEGAL_TRANSLATOR_PROMPT.format(
    language="Sinhala",
    glossary="\n".join([
        '- "Power of Attorney" → "නියෝජිත බලය"',
        '- "Attorney" → "නීතිඥ"',
        '- "Deceased" → "මියගිය පුද්ගලයා"',
        '- "Court" → "අධිකරණය"',
    ]),
)

EN_TO_TA_PROMPT = _LEGAL_TRANSLATOR_PROMPT.format(
    language="Tamil",
    glossary="\n".join([
        '- "Power of Attorney" → "அதிகார பத்திரம்"',
        '- "Attorney" → "வழக்கறிஞர்"',
        '- "Deceased" → "இறந்தவர்"',
        '- "Court" → "நீதிமன்றம்"',
    ]),
)

GENERIC_PROMPT = """You translate {source} legal/administrative documents into formal {target}.

Rules:
- Preserve placeholders, blanks, underscores, bracketed fields exactly.
- Do not invent facts. Do not normalize IDs/dates.
- Keep line breaks where possible.
Output only the translated text."""

_PAIR_PROMPTS = {
    ("ko", "en"): KO_TO_EN_PROMPT,
    ("en", "si"): EN_TO_SI_PROMPT,
    ("en", "ta"): EN_TO_TA_PROMPT,
}

# Korean→English is produced by rendering the template in the English locale
_TEMPLATE_PAIRS = {("ko", "en")}

_LEADING_NOTE = re.compile(r"^\[.*?\]\s*")
_TRAILING_NOTE = re.compile(r"\s*\[.*?\]$")


def get_translation_prompt(source_lang: str, target_lang: str) -> str:
    prompt = _PAIR_PROMPTS.get((source_lang, target_lang))
    if prompt:
        return prompt
    return GENERIC_PROMPT.format(source=source_lang, target=target_lang)


def strip_translator_notes(text: str) -> str:
    """Drop a [note] the model put before or after the translation."""
    return _TRAILING_NOTE.sub("", _LEADING_NOTE.sub("", text)).strip()


def placeholder(target_lang: str, source_text: str, reason: str) -> str:
    return f"[Translation to {target_lang.upper()} {reason}] {source_text}"


# ═══════════════════════════════════════════════════════════════════
#  AITranslator
# ═══════════════════════════════════════════════════════════════════

class AITranslator:

    async def translate_segment(self, source_text: str, source_lang: str, target_lang: str) -> str:
        if source_lang == target_lang or not source_text.strip():
            return source_text

        if (source_lang, target_lang) in _TEMPLATE_PAIRS:
            logger.info("Template-based translation", extra={
                "event": "translation_template", "source_lang": source_lang, "target_lang": target_lang,
            })
            return source_text

        try:
            provider = get_ai_provider()
        except AIProviderError as exc:
            logger.warning("No translation provider available, returning placeholder", extra={
                "event": "translation_unavailable", "target_lang": target_lang, "error": str(exc),
            })
            return placeholder(target_lang, source_text, "pending")

        try:
            ai_response = await provider.complete(
                system_prompt=get_translation_prompt(source_lang, target_lang),
                user_prompt=source_text,
            )
        except AIProviderError as exc:
            logger.error("Segment translation failed", extra={
                "event": "translation_failed", "target_lang": target_lang, "error": str(exc),
            })
            return placeholder(target_lang, source_text, "failed")

        translated = strip_translator_notes(ai_response.text) or source_text
        logger.info("Segment translated", extra={
            "event": "segment_translated",
            "source_lang": source_lang,
            "target_lang": target_lang,
            "provider": ai_response.provider,
            "model": ai_response.model,
            "source_length": len(source_text),
            "target_length": len(translated),
            "latency_ms": ai_response.latency_ms,
        })
        return translated


ai_translator = AITranslator()
