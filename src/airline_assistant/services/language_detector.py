"""
Language detection for customer messages
"""

import re

from ..types import LanguageInfo


ENGLISH = "en"
HINDI = "hi"

DEVANAGARI_PATTERN = re.compile(r'[\u0900-\u097F]')

HINDI_KEYWORDS = (
    'क्या', 'है', 'में', 'के', 'लिए', 'कर', 'हो', 'से', 'पर', 'या',
    'उड़ान', 'टिकट', 'बुकिंग', 'सामान', 'चेक-इन', 'रद्द', 'रिफंड',
    'महाराजा', 'क्लब', 'मील', 'सेवा', 'सहायता', 'नमस्ते', 'कृपया',
    'जानकारी', 'बताएं', 'मदद', 'प्रश्न', 'उत्तर',
    # Romanized Hindi commonly typed in Latin script
    'kya', 'hai', 'kaise', 'kripya', 'namaste', 'batao', 'bataiye', 'chahiye',
)

_LANGUAGE_INFO = {
    HINDI: LanguageInfo(
        language=HINDI,
        instruction='आपको हिंदी में जवाब देना चाहिए। उपयोगकर्ता ने हिंदी में प्रश्न पूछा है, इसलिए आपको हिंदी में ही जवाब देना होगा।',
        response_language='Hindi',
    ),
    ENGLISH: LanguageInfo(
        language=ENGLISH,
        instruction='You must respond in English. The user asked in English, so you must respond in English.',
        response_language='English',
    ),
}


def detect_language(text: str) -> str:
    """Classify text as English (default) or Hindi"""
    if not text or not text.strip():
        return ENGLISH

    if DEVANAGARI_PATTERN.search(text):
        return HINDI

    words = set(re.findall(r'[^\s,.!?;:]+', text.lower()))
    if words.intersection(HINDI_KEYWORDS):
        return HINDI

    return ENGLISH


def get_language_instructions(language: str) -> LanguageInfo:
    """Get the response language label and prompt instruction for a language tag"""
    return _LANGUAGE_INFO.get(language, _LANGUAGE_INFO[ENGLISH])
